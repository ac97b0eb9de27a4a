from datetime import date
from unittest.mock import MagicMock

from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from django.utils.timezone import timedelta
from faker import Faker

from articles.models import Article
from epaper.generator import (
    ARTICLE_SPACING,
    ArticleLayout,
    EPaperItem,
    LayoutConfig,
    calculate_layouts,
    collect_articles,
    draw_article,
    estimate_article_height,
    fit_lines,
    generate_epaper,
    render_pdf,
    truncate_text,
    wrap_text,
)

fake = Faker()


def make_item(item_id, title_length=10, excerpt_length=10, has_image=False):
    return EPaperItem(
        id=item_id,
        title="শ" * title_length,
        slug=f"article-{item_id}",
        excerpt="ক" * excerpt_length,
        has_image=has_image,
    )


class HeightEstimateTest(SimpleTestCase):
    def test_full_block(self):
        item = make_item(1, title_length=80, excerpt_length=100, has_image=True)
        # 80 image + 2 title lines * 18 + 2 excerpt lines * 12 + 30 padding
        self.assertEqual(estimate_article_height(item), 170)

    def test_text_only_block(self):
        item = make_item(1, title_length=41, excerpt_length=0)
        self.assertEqual(estimate_article_height(item), 2 * 18 + 30)


class LayoutTest(SimpleTestCase):
    def setUp(self):
        self.config = LayoutConfig()

    def test_config_geometry(self):
        self.assertAlmostEqual(self.config.content_width, self.config.page_width - 80)
        self.assertAlmostEqual(
            self.config.column_width, (self.config.content_width - 40) / 3
        )
        self.assertAlmostEqual(
            self.config.content_top, self.config.page_height - 110
        )
        self.assertEqual(self.config.content_bottom, 80)

    def test_fills_shortest_column_leftmost_first(self):
        items = [make_item(index) for index in range(4)]
        layouts = calculate_layouts(items, self.config)

        self.assertEqual([layout.column for layout in layouts], [0, 1, 2, 0])
        height = estimate_article_height(items[0])
        first, second, _, fourth = layouts
        self.assertAlmostEqual(first.y, self.config.content_top - height)
        self.assertAlmostEqual(
            second.x,
            self.config.margin_left + self.config.column_width + self.config.column_gap,
        )
        self.assertAlmostEqual(
            fourth.y, self.config.content_top - 2 * height - ARTICLE_SPACING
        )

    def test_tall_article_goes_to_shortest_column(self):
        items = [
            make_item(1, title_length=400),
            make_item(2),
            make_item(3),
            make_item(4),
        ]
        layouts = calculate_layouts(items, self.config)
        self.assertEqual([layout.column for layout in layouts], [0, 1, 2, 1])

    def test_skips_articles_that_do_not_fit(self):
        items = [make_item(1, title_length=40 * 40), make_item(2)]
        layouts = calculate_layouts(items, self.config)
        self.assertEqual([layout.item.id for layout in layouts], [2])
        self.assertEqual(layouts[0].column, 0)

    def test_blocks_stay_inside_content_area(self):
        items = [
            make_item(index, title_length=120, excerpt_length=150)
            for index in range(30)
        ]
        layouts = calculate_layouts(items, self.config)
        self.assertLess(len(layouts), 30)
        for layout in layouts:
            self.assertGreaterEqual(layout.y, self.config.content_bottom)
            self.assertLessEqual(layout.y + layout.height, self.config.content_top)

    def test_empty(self):
        self.assertEqual(calculate_layouts([], self.config), [])


class TextHelpersTest(SimpleTestCase):
    def test_truncate(self):
        self.assertEqual(truncate_text("ছোট", 10), "ছোট")
        self.assertEqual(truncate_text("ক" * 12, 10), "ক" * 10 + "...")

    def test_wrap(self):
        # Helvetica 10pt: "aaaa bbbb" is about 47pt wide, adding " cccc" passes 60pt
        lines = wrap_text("aaaa bbbb cccc", 60, "Helvetica", 10)
        self.assertEqual(lines, ["aaaa bbbb", "cccc"])

        lines = wrap_text("aa bb cc", 60, "Helvetica", 10)
        self.assertEqual(lines, ["aa bb cc"])

    def test_wrap_long_word(self):
        self.assertEqual(wrap_text("a" * 30, 60, "Helvetica", 10), ["a" * 30])

    def test_wrap_empty(self):
        self.assertEqual(wrap_text("", 60, "Helvetica", 10), [])

    def test_fit_lines(self):
        self.assertEqual(fit_lines(["one", "two"], 3), ["one", "two"])
        self.assertEqual(fit_lines(["one", "two", "three"], 2), ["one", "two..."])
        self.assertEqual(fit_lines(["one"], 0), [])


class RenderTest(SimpleTestCase):
    def test_render_pdf(self):
        layout = ArticleLayout(
            item=make_item(7, has_image=True),
            x=40,
            y=500,
            width=150,
            height=170,
            column=0,
        )
        pdf = render_pdf(
            [layout], edition_date=date(2024, 1, 15), base_url="https://example.com"
        )
        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertEqual(layout.links, ["https://example.com/article/article-7"])

    def test_render_empty_page(self):
        pdf = render_pdf([], LayoutConfig(), date(2024, 1, 15))
        self.assertTrue(pdf.startswith(b"%PDF"))


class DrawArticleTest(SimpleTestCase):
    fonts = ("Helvetica", "Helvetica-Bold")

    def draw(self, layout):
        pdf = MagicMock()
        draw_article(pdf, layout, self.fonts, "https://example.com")
        return pdf

    def drawn_text(self, pdf):
        return pdf.drawString.call_args_list + pdf.drawCentredString.call_args_list

    def test_text_stays_inside_block(self):
        item = EPaperItem(
            id=1,
            title="বাজেট অধিবেশন শুরু, সংসদে নতুন অর্থবছরের প্রস্তাব পেশ করলেন অর্থমন্ত্রী",
            slug="budget",
            excerpt=fake.text(max_nb_chars=200).ljust(203, "x"),
            has_image=True,
        )
        [layout] = calculate_layouts([item])
        pdf = self.draw(layout)

        calls = self.drawn_text(pdf)
        self.assertTrue(calls)
        for call in calls:
            text_y = call.args[1]
            self.assertGreaterEqual(text_y, layout.y)
            self.assertLessEqual(text_y, layout.y + layout.height)

    def test_cut_title_ends_with_ellipsis(self):
        # Estimated for two title lines, but "Wide" is broad enough to need three
        item = EPaperItem(
            id=2, title="Wide " * 16, slug="wide", excerpt="", has_image=True
        )
        layout = ArticleLayout(
            item=item,
            x=40,
            y=300,
            width=150,
            height=estimate_article_height(item),
            column=0,
        )
        pdf = self.draw(layout)

        lines = [call.args[2] for call in pdf.drawString.call_args_list]
        # two title lines and the meta line
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[1].endswith("..."))
        for call in self.drawn_text(pdf):
            self.assertGreaterEqual(call.args[1], layout.y)

    def test_tiny_block_keeps_meta_only(self):
        item = make_item(3, title_length=30, excerpt_length=30, has_image=True)
        layout = ArticleLayout(item=item, x=40, y=300, width=150, height=35, column=0)
        pdf = self.draw(layout)

        pdf.drawCentredString.assert_not_called()
        self.assertEqual(pdf.drawString.call_count, 1)
        self.assertEqual(layout.links, ["https://example.com/article/article-3"])


class CollectArticlesTest(TestCase):
    def setUp(self):
        now = timezone.now()
        self.popular = Article.objects.create(
            title="জনপ্রিয় সংবাদ",
            content=fake.paragraph(),
            status=Article.PUBLISHED,
            published_at=now,
            view_count=100,
        )
        self.quiet = Article.objects.create(
            title="সাধারণ সংবাদ",
            content=fake.paragraph(),
            status=Article.PUBLISHED,
            published_at=now,
            view_count=5,
        )
        self.old = Article.objects.create(
            title="পুরনো সংবাদ",
            content=fake.paragraph(),
            status=Article.PUBLISHED,
            published_at=now - timedelta(days=3),
            view_count=1000,
        )
        Article.objects.create(title="খসড়া", content=fake.paragraph())

    def test_collects_todays_articles_by_views(self):
        articles = collect_articles(timezone.localdate())
        self.assertEqual(articles, [self.popular, self.quiet])

    def test_limit(self):
        self.assertEqual(collect_articles(timezone.localdate(), limit=1), [self.popular])

    def test_falls_back_to_latest(self):
        articles = collect_articles(timezone.localdate() - timedelta(days=30))
        self.assertEqual(len(articles), 3)

    def test_generate_epaper(self):
        generated = generate_epaper(timezone.localdate())
        self.assertTrue(generated.pdf.startswith(b"%PDF"))
        self.assertEqual(generated.article_count, 2)
        self.assertEqual(generated.edition_date, timezone.localdate())
        self.assertEqual(
            [layout.item.id for layout in generated.layouts],
            [self.popular.id, self.quiet.id],
        )
