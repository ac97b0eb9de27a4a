from django.test import TestCase
from ninja.testing import TestClient
from rest_framework_simplejwt.tokens import RefreshToken

from articles.models import Article, Comment, Review
from newsportal.admin_api import router
from users.models import Notification, User


def auth_headers(user):
    token = RefreshToken.for_user(user).access_token
    return {"Authorization": f"Bearer {token}"}


class SiteAdminAPITestCase(TestCase):
    def setUp(self):
        self.client = TestClient(router)
        self.admin = User.objects.create_user(
            username="editor",
            email="editor@example.com",
            password="editorpass123",
            is_staff=True,
        )
        self.reader = User.objects.create_user(
            username="reader", email="reader@example.com", password="readerpass123"
        )
        User.objects.create_user(
            username="inactive",
            email="inactive@example.com",
            password="inactivepass",
            is_active=False,
        )
        self.headers = auth_headers(self.admin)
        self.article = Article.objects.create(
            title="শীর্ষ সংবাদ",
            content="লেখা",
            status=Article.PUBLISHED,
            view_count=120,
            like_count=7,
        )
        Article.objects.create(title="খসড়া", content="লেখা")

    def test_dashboard(self):
        Comment.objects.create(
            article=self.article, user=self.reader, content="অপেক্ষমাণ", is_approved=False
        )
        Review.objects.create(article=self.article, user=self.reader, rating=5)

        response = self.client.get("/dashboard", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["totalArticles"], 2)
        self.assertEqual(data["publishedArticles"], 1)
        self.assertEqual(data["draftArticles"], 1)
        self.assertEqual(data["archivedArticles"], 0)
        self.assertEqual(data["totalUsers"], 3)
        self.assertEqual(data["pendingComments"], 1)
        self.assertEqual(data["pendingReviews"], 1)
        self.assertEqual(data["totalViews"], 120)
        self.assertEqual(data["totalLikes"], 7)
        self.assertEqual([item["id"] for item in data["topArticles"]], [self.article.id])

    def test_dashboard_requires_staff(self):
        response = self.client.get("/dashboard", headers=auth_headers(self.reader))
        self.assertEqual(response.status_code, 403)

    def test_broadcast_to_active_users(self):
        payload = {
            "title": "জরুরি ঘোষণা",
            "message": "আগামীকাল সাইট রক্ষণাবেক্ষণ চলবে।",
            "notification_type": "breaking_news",
            "article_id": self.article.id,
            "expires_in_days": 2,
        }
        response = self.client.post(
            "/notifications/broadcast", json=payload, headers=self.headers
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["message"], "Notification sent to 2 users.")

        notifications = Notification.objects.all()
        self.assertEqual(
            {notification.user_id for notification in notifications},
            {self.admin.id, self.reader.id},
        )
        self.assertTrue(all(n.expires_at for n in notifications))

    def test_broadcast_invalid_type(self):
        payload = {"title": "শিরোনাম", "message": "বার্তা", "notification_type": "spam"}
        response = self.client.post(
            "/notifications/broadcast", json=payload, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Notification.objects.exists())

    def test_broadcast_unknown_article(self):
        payload = {"title": "শিরোনাম", "message": "বার্তা", "article_id": 9999}
        response = self.client.post(
            "/notifications/broadcast", json=payload, headers=self.headers
        )
        self.assertEqual(response.status_code, 404)
