from unittest.mock import patch

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from faker import Faker
from ninja.testing import TestClient
from rest_framework_simplejwt.tokens import RefreshToken

from articles.api_admin import router
from articles.models import Article, BreakingNews, Category, Comment, Review, Tag
from users.models import User

fake = Faker()


def auth_headers(user):
    token = RefreshToken.for_user(user).access_token
    return {"Authorization": f"Bearer {token}"}


class AdminTestBase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = TestClient(router)
        self.admin = User.objects.create_user(
            username="editor",
            email="editor@example.com",
            password="editorpass123",
            first_name="Shamim",
            is_staff=True,
        )
        self.headers = auth_headers(self.admin)
        self.category = Category.objects.create(name="জাতীয়")


class AdminAuthTestCase(AdminTestBase):
    def test_anonymous_rejected(self):
        response = self.client.get("/articles")
        self.assertEqual(response.status_code, 401)

    def test_reader_rejected(self):
        reader = User.objects.create_user(
            username="reader", email="reader@example.com", password="readerpass123"
        )
        response = self.client.get("/articles", headers=auth_headers(reader))
        self.assertEqual(response.status_code, 403)


class AdminArticlesTestCase(AdminTestBase):
    def test_create_draft_article(self):
        payload = {
            "title": "নতুন মেট্রোরেল লাইন",
            "content": fake.paragraph(nb_sentences=10),
            "category_id": self.category.id,
            "tags": ["যোগাযোগ", "ঢাকা", "যোগাযোগ"],
        }
        response = self.client.post("/articles", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["status"], "draft")
        self.assertEqual(data["author"], "Shamim")
        self.assertIsNone(data["publishedAt"])
        self.assertEqual(sorted(tag["name"] for tag in data["tags"]), ["ঢাকা", "যোগাযোগ"])

        article = Article.objects.get(pk=data["id"])
        self.assertEqual(article.submitter, self.admin)
        self.assertEqual(Tag.objects.get(name="ঢাকা").usage_count, 1)

    @patch("articles.api_admin.invalidate_articles_cache")
    def test_create_published_article_invalidates_cache(self, mock_invalidate):
        payload = {
            "title": "সরাসরি প্রকাশিত",
            "content": fake.paragraph(),
            "status": "published",
        }
        response = self.client.post("/articles", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 201)
        self.assertIsNotNone(response.json()["publishedAt"])
        mock_invalidate.assert_called_once()

    def test_create_with_unknown_category(self):
        payload = {"title": "শিরোনাম", "content": "লেখা", "category_id": 9999}
        response = self.client.post("/articles", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Category not found.")

    def test_create_with_long_tag(self):
        payload = {"title": "শিরোনাম", "content": "লেখা", "tags": ["ক" * 51]}
        response = self.client.post("/articles", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Article.objects.exists())

    def test_update_article_replaces_tags(self):
        article = Article.objects.create(title="পুরনো শিরোনাম", content="লেখা")
        old_tag = Tag.objects.create(name="পুরনো")
        article.tags.add(old_tag)

        payload = {"title": "নতুন শিরোনাম", "tags": ["নতুন"], "is_featured": True}
        response = self.client.put(
            f"/articles/{article.id}", json=payload, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["title"], "নতুন শিরোনাম")
        self.assertTrue(data["isFeatured"])
        self.assertEqual([tag["name"] for tag in data["tags"]], ["নতুন"])

        article.refresh_from_db()
        self.assertEqual(article.content, "লেখা")
        old_tag.refresh_from_db()
        self.assertEqual(old_tag.usage_count, 0)

    def test_publish_and_unpublish(self):
        article = Article.objects.create(title="প্রকাশের অপেক্ষায়", content="লেখা")

        response = self.client.post(
            f"/articles/{article.id}/publish", headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "published")
        self.assertTrue(Article.published.filter(pk=article.id).exists())

        response = self.client.post(
            f"/articles/{article.id}/unpublish", headers=self.headers
        )
        self.assertEqual(response.json()["status"], "draft")
        self.assertFalse(Article.published.filter(pk=article.id).exists())

    def test_list_articles_filters(self):
        Article.objects.create(title="খসড়া এক", content="লেখা")
        published = Article.objects.create(
            title="প্রকাশিত এক", content="লেখা", status=Article.PUBLISHED
        )

        response = self.client.get("/articles?status=published", headers=self.headers)
        self.assertEqual([item["id"] for item in response.json()], [published.id])

        response = self.client.get("/articles?q=খসড়া", headers=self.headers)
        self.assertEqual([item["title"] for item in response.json()], ["খসড়া এক"])

    def test_list_articles_bad_paging(self):
        Article.objects.create(title="প্রথম", content="লেখা")
        response = self.client.get("/articles?offset=-1&limit=-1", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 1)

    def test_delete_article(self):
        article = Article.objects.create(title="মুছে ফেলা হবে", content="লেখা")
        tag = Tag.objects.create(name="অস্থায়ী", usage_count=1)
        article.tags.add(tag)

        response = self.client.delete(f"/articles/{article.id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Article.objects.filter(pk=article.id).exists())
        tag.refresh_from_db()
        self.assertEqual(tag.usage_count, 0)

        response = self.client.delete(f"/articles/{article.id}", headers=self.headers)
        self.assertEqual(response.status_code, 404)

    def test_upload_rejects_non_image(self):
        article = Article.objects.create(title="ছবি ছাড়া", content="লেখা")
        upload = SimpleUploadedFile(
            "notes.txt", b"plain text", content_type="text/plain"
        )
        response = self.client.post(
            f"/articles/{article.id}/image",
            FILES={"image": upload},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], "Only image files can be uploaded."
        )


class AdminCategoriesTestCase(AdminTestBase):
    def test_create_category(self):
        payload = {"name": "বিনোদন", "description": "চলচ্চিত্র ও সংগীত"}
        response = self.client.post("/categories", json=payload, headers=self.headers)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["slug"], "বিনোদন")

    def test_duplicate_slug(self):
        response = self.client.post(
            "/categories", json={"name": "জাতীয়"}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], "A category with this slug already exists."
        )

    def test_update_category(self):
        parent = Category.objects.create(name="সংবাদ")
        payload = {"parent_id": parent.id, "sort_order": 3}
        response = self.client.put(
            f"/categories/{self.category.id}", json=payload, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["parentId"], parent.id)
        self.assertEqual(response.json()["sortOrder"], 3)

    def test_category_cannot_be_own_parent(self):
        response = self.client.put(
            f"/categories/{self.category.id}",
            json={"parent_id": self.category.id},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 400)

    def test_delete_category(self):
        response = self.client.delete(
            f"/categories/{self.category.id}", headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Category.objects.exists())


class AdminModerationTestCase(AdminTestBase):
    def setUp(self):
        super().setUp()
        self.reader = User.objects.create_user(
            username="reader", email="reader@example.com", password="readerpass123"
        )
        self.article = Article.objects.create(
            title="আলোচিত সংবাদ", content="লেখা", status=Article.PUBLISHED
        )

    def test_pending_comments_and_approve(self):
        pending = Comment.objects.create(
            article=self.article, user=self.reader, content="অপেক্ষমাণ", is_approved=False
        )
        Comment.objects.create(article=self.article, user=self.reader, content="অনুমোদিত")

        response = self.client.get("/comments", headers=self.headers)
        self.assertEqual([item["id"] for item in response.json()], [pending.id])

        response = self.client.post(
            f"/comments/{pending.id}/approve", headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        pending.refresh_from_db()
        self.assertTrue(pending.is_approved)

    def test_moderation_lists_bad_paging(self):
        Comment.objects.create(
            article=self.article, user=self.reader, content="অপেক্ষমাণ", is_approved=False
        )
        Review.objects.create(article=self.article, user=self.reader, rating=3)

        response = self.client.get("/comments?offset=-4", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 1)

        response = self.client.get("/reviews?offset=-4&limit=0", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 1)

    def test_delete_comment(self):
        comment = Comment.objects.create(
            article=self.article, user=self.reader, content="আপত্তিকর"
        )
        response = self.client.delete(f"/comments/{comment.id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        comment.refresh_from_db()
        self.assertTrue(comment.is_deleted)

    def test_pending_reviews_and_approve(self):
        review = Review.objects.create(article=self.article, user=self.reader, rating=4)

        response = self.client.get("/reviews", headers=self.headers)
        self.assertEqual([item["id"] for item in response.json()], [review.id])

        response = self.client.post(f"/reviews/{review.id}/approve", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        review.refresh_from_db()
        self.assertTrue(review.is_approved)

        response = self.client.delete(f"/reviews/{review.id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Review.objects.exists())


class AdminBreakingNewsTestCase(AdminTestBase):
    def test_breaking_news_lifecycle(self):
        response = self.client.post(
            "/breaking-news",
            json={"content": "ঘূর্ণিঝড় সতর্কতা", "priority": 10},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        item_id = response.json()["id"]

        response = self.client.put(
            f"/breaking-news/{item_id}", json={"is_active": False}, headers=self.headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["isActive"])
        self.assertFalse(BreakingNews.objects.active().exists())

        response = self.client.delete(f"/breaking-news/{item_id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(BreakingNews.objects.exists())

    def test_empty_breaking_news(self):
        response = self.client.post(
            "/breaking-news", json={"content": "  "}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)
