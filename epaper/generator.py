"""
Front page e-paper generator.

Collects the day's most read articles and lays their teasers out on a single
A4 page in three columns. Placement is greedy: every article goes into the
column that is currently the shortest, using a height estimated from the
length of its title and excerpt. Each teaser block links to the article page.
Articles that no longer fit on the page are left out.
"""

import io
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from django.conf import settings
from django.utils import timezone
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from articles.models import Article
from articles.utils import build_article_url, format_bengali_date
from newsportal.constants import DEFAULT_CATEGORY_NAME
from newsportal.decorators import timing_decorator

logger = logging.getLogger(__name__)

IMAGE_BLOCK_HEIGHT = 80
TITLE_CHARS_PER_LINE = 40
TITLE_LINE_HEIGHT = 18
EXCERPT_CHARS_PER_LINE = 50
EXCERPT_LINE_HEIGHT = 12
BLOCK_PADDING = 30
ARTICLE_SPACING = 10

TITLE_MAX_LENGTH = 60
EXCERPT_MAX_LENGTH = 150
TITLE_FONT_SIZE = 14
EXCERPT_FONT_SIZE = 10
META_FONT_SIZE = 8
# Bottom strip of every block, holds the "category • date" line
META_LINE_HEIGHT = 20
BLOCK_TOP_PADDING = 10
IMAGE_PLACEHOLDER_HEIGHT = 75

REGULAR_FONT = "EPaperRegular"
BOLD_FONT = "EPaperBold"


@dataclass
class LayoutConfig:
    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_top: float = 50
    margin_bottom: float = 50
    margin_left: float = 40
    margin_right: float = 40
    columns: int = 3
    column_gap: float = 20
    header_height: float = 60
    footer_height: float = 30

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_height(self) -> float:
        return (
            self.page_height
            - self.margin_top
            - self.margin_bottom
            - self.header_height
            - self.footer_height
        )

    @property
    def column_width(self) -> float:
        return (
            self.content_width - (self.columns - 1) * self.column_gap
        ) / self.columns

    @property
    def content_top(self) -> float:
        """PDF y coordinate where the first article of each column starts."""
        return self.page_height - self.margin_top - self.header_height

    @property
    def content_bottom(self) -> float:
        return self.margin_bottom + self.footer_height


@dataclass
class EPaperItem:
    """Snapshot of the article fields the page needs."""

    id: int
    title: str
    slug: str
    excerpt: str
    has_image: bool = False
    category_name: Optional[str] = None
    published_at: Optional[datetime] = None

    @classmethod
    def from_article(cls, article: Article):
        return cls(
            id=article.id,
            title=article.title,
            slug=article.slug,
            excerpt=article.excerpt or "",
            has_image=bool(article.get_image_url()),
            category_name=article.category.name if article.category_id else None,
            published_at=article.published_at,
        )


@dataclass
class ArticleLayout:
    item: EPaperItem
    x: float
    # bottom edge, PDF coordinates
    y: float
    width: float
    height: float
    column: int
    links: List[str] = field(default_factory=list)


def collect_articles(target_date: Optional[date] = None, limit: int = None) -> list:
    """
    Most viewed articles published on ``target_date`` (today by default).
    Falls back to the most recent articles when nothing was published that day.
    """
    target_date = target_date or timezone.localdate()
    limit = limit or settings.EPAPER_MAX_ARTICLES

    articles = list(
        Article.published.filter(published_at__date=target_date).order_by(
            "-view_count", "-published_at"
        )[:limit]
    )
    if not articles:
        logger.info(
            f"No articles published on {target_date}, using the latest articles"
        )
        articles = list(Article.published.order_by("-published_at")[:limit])
    return articles


def estimate_article_height(item: EPaperItem) -> float:
    image_height = IMAGE_BLOCK_HEIGHT if item.has_image else 0
    title_lines = math.ceil(len(item.title) / TITLE_CHARS_PER_LINE)
    excerpt_lines = math.ceil(len(item.excerpt) / EXCERPT_CHARS_PER_LINE)
    return (
        image_height
        + title_lines * TITLE_LINE_HEIGHT
        + excerpt_lines * EXCERPT_LINE_HEIGHT
        + BLOCK_PADDING
    )


def calculate_layouts(
    items: List[EPaperItem], config: LayoutConfig = None
) -> List[ArticleLayout]:
    config = config or LayoutConfig()
    column_heights = [0.0] * config.columns
    column_width = config.column_width
    layouts = []

    for item in items:
        # min() keeps the leftmost column on ties
        column = min(range(config.columns), key=lambda index: column_heights[index])
        height = estimate_article_height(item)
        top = config.content_top - column_heights[column]

        if top - height < config.content_bottom:
            logger.debug(f"Article {item.id} does not fit on the page, skipping")
            continue

        layouts.append(
            ArticleLayout(
                item=item,
                x=config.margin_left + column * (column_width + config.column_gap),
                y=top - height,
                width=column_width,
                height=height,
                column=column,
            )
        )
        column_heights[column] += height + ARTICLE_SPACING

    return layouts


def truncate_text(text: str, max_length: int) -> str:
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text


def wrap_text(
    text: str, max_width: float, font_name: str, font_size: float
) -> List[str]:
    """Word wrap measured with the font's real glyph widths."""
    return simpleSplit(text, font_name, font_size, max_width)


def fit_lines(lines: List[str], max_lines: int) -> List[str]:
    """The first ``max_lines`` lines, the last one ending in "..." if any were cut."""
    if len(lines) <= max_lines:
        return lines
    if max_lines <= 0:
        return []
    kept = lines[:max_lines]
    kept[-1] = f"{kept[-1]}..."
    return kept


def lines_that_fit(top: float, floor: float, line_height: float) -> int:
    # the epsilon absorbs float error when the block was sized for exactly n lines
    return max(int((top - floor + 1e-6) // line_height), 0)


def register_fonts():
    """
    Register the configured TTF fonts. Bengali glyphs need a font that has
    them; without one the page falls back to Helvetica.
    """
    regular_path = settings.EPAPER_FONT_PATH
    if not regular_path:
        return "Helvetica", "Helvetica-Bold"

    registered = pdfmetrics.getRegisteredFontNames()
    if REGULAR_FONT not in registered:
        pdfmetrics.registerFont(TTFont(REGULAR_FONT, regular_path))
    bold_path = settings.EPAPER_BOLD_FONT_PATH
    if not bold_path:
        return REGULAR_FONT, REGULAR_FONT
    if BOLD_FONT not in registered:
        pdfmetrics.registerFont(TTFont(BOLD_FONT, bold_path))
    return REGULAR_FONT, BOLD_FONT


def draw_header(pdf, config: LayoutConfig, edition_date: date, fonts):
    regular, bold = fonts
    center_x = config.page_width / 2
    header_y = config.page_height - config.margin_top - 20

    pdf.setFillColorRGB(0, 0, 0)
    pdf.setFont(bold, 24)
    pdf.drawCentredString(center_x, header_y, settings.SITE_NAME)

    pdf.setFillColorRGB(0.3, 0.3, 0.3)
    pdf.setFont(regular, 12)
    pdf.drawCentredString(
        center_x, header_y - 25, format_bengali_date(edition_date, with_weekday=True)
    )

    pdf.setStrokeColorRGB(0, 0, 0)
    pdf.setLineWidth(2)
    pdf.line(
        config.margin_left,
        header_y - 35,
        config.page_width - config.margin_right,
        header_y - 35,
    )


def draw_footer(pdf, config: LayoutConfig, fonts):
    regular, _ = fonts
    footer_y = config.margin_bottom + 10

    pdf.setFillColorRGB(0.5, 0.5, 0.5)
    pdf.setFont(regular, META_FONT_SIZE)
    pdf.drawString(
        config.margin_left, footer_y, f"{settings.SITE_NAME} - {settings.SITE_DOMAIN}"
    )
    pdf.drawRightString(config.page_width - config.margin_right, footer_y, "পৃষ্ঠা ১")


def draw_article(pdf, layout: ArticleLayout, fonts, base_url: str):
    """
    Draw one teaser block. Lines are laid out top down from ``layout.y +
    layout.height`` and nothing is drawn below ``layout.y``: title and excerpt
    lines that do not fit above the meta strip are dropped, the last kept line
    ending in an ellipsis.
    """
    regular, bold = fonts
    item = layout.item
    x, y, width, height = layout.x, layout.y, layout.width, layout.height
    text_floor = y + META_LINE_HEIGHT
    cursor = y + height - BLOCK_TOP_PADDING

    pdf.setStrokeColorRGB(0.8, 0.8, 0.8)
    pdf.setLineWidth(1)
    pdf.rect(x - 2, y - 2, width + 4, height + 4, stroke=1, fill=0)

    if item.has_image and cursor - IMAGE_BLOCK_HEIGHT >= text_floor:
        # Placeholder box, images are not embedded
        pdf.setFillColorRGB(0.9, 0.9, 0.9)
        pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
        pdf.rect(
            x,
            cursor - IMAGE_PLACEHOLDER_HEIGHT,
            width,
            IMAGE_PLACEHOLDER_HEIGHT,
            stroke=1,
            fill=1,
        )
        pdf.setFillColorRGB(0.5, 0.5, 0.5)
        pdf.setFont(regular, EXCERPT_FONT_SIZE)
        pdf.drawCentredString(
            x + width / 2, cursor - IMAGE_PLACEHOLDER_HEIGHT / 2 - 4, "ছবি"
        )
        cursor -= IMAGE_BLOCK_HEIGHT

    title_lines = fit_lines(
        wrap_text(
            truncate_text(item.title, TITLE_MAX_LENGTH), width, bold, TITLE_FONT_SIZE
        ),
        lines_that_fit(cursor, text_floor, TITLE_LINE_HEIGHT),
    )
    pdf.setFillColorRGB(0, 0, 0)
    pdf.setFont(bold, TITLE_FONT_SIZE)
    for line in title_lines:
        pdf.drawString(x, cursor - TITLE_FONT_SIZE, line)
        cursor -= TITLE_LINE_HEIGHT

    excerpt_lines = fit_lines(
        wrap_text(
            truncate_text(item.excerpt, EXCERPT_MAX_LENGTH),
            width - 10,
            regular,
            EXCERPT_FONT_SIZE,
        ),
        lines_that_fit(cursor, text_floor, EXCERPT_LINE_HEIGHT),
    )
    pdf.setFillColorRGB(0.2, 0.2, 0.2)
    pdf.setFont(regular, EXCERPT_FONT_SIZE)
    for line in excerpt_lines:
        pdf.drawString(x, cursor - EXCERPT_FONT_SIZE, line)
        cursor -= EXCERPT_LINE_HEIGHT

    published = (
        format_bengali_date(timezone.localtime(item.published_at))
        if item.published_at
        else ""
    )
    meta = f"{item.category_name or DEFAULT_CATEGORY_NAME} • {published}"
    pdf.setFillColorRGB(0.5, 0.5, 0.5)
    pdf.setFont(regular, META_FONT_SIZE)
    pdf.drawString(x, y + 6, meta)

    url = build_article_url(item, base_url)
    pdf.linkURL(url, (x, y, x + width, y + height), relative=0, thickness=0)
    layout.links.append(url)


def render_pdf(
    layouts: List[ArticleLayout],
    config: LayoutConfig = None,
    edition_date: Optional[date] = None,
    base_url: str = None,
) -> bytes:
    config = config or LayoutConfig()
    edition_date = edition_date or timezone.localdate()
    base_url = base_url or settings.SITE_URL
    fonts = register_fonts()

    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(config.page_width, config.page_height))
    pdf.setTitle(f"{settings.SITE_NAME} - {edition_date.isoformat()}")
    pdf.setAuthor(settings.SITE_NAME)
    pdf.setSubject("E-paper")

    draw_header(pdf, config, edition_date, fonts)
    for layout in layouts:
        draw_article(pdf, layout, fonts, base_url)
    draw_footer(pdf, config, fonts)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@dataclass
class GeneratedEPaper:
    pdf: bytes
    edition_date: date
    layouts: List[ArticleLayout]

    @property
    def article_count(self) -> int:
        return len(self.layouts)


@timing_decorator
def generate_epaper(target_date: Optional[date] = None) -> GeneratedEPaper:
    """Build the front page PDF for ``target_date`` (today by default)."""
    edition_date = target_date or timezone.localdate()
    try:
        articles = collect_articles(edition_date)
        items = [EPaperItem.from_article(article) for article in articles]
        layouts = calculate_layouts(items)
        pdf = render_pdf(layouts, edition_date=edition_date)
    except Exception as e:
        logger.error(f"Error generating e-paper for {edition_date}: {e}")
        raise

    logger.info(
        f"Generated e-paper for {edition_date} with {len(layouts)} of "
        f"{len(items)} collected articles"
    )
    return GeneratedEPaper(pdf=pdf, edition_date=edition_date, layouts=layouts)
