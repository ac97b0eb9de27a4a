from django.test import TestCase
from faker import Faker
from ninja.testing import TestClient
from rest_framework_simplejwt.tokens import RefreshToken

from articles.comment_api import router as comment_router
from articles.engagement_api import router as engagement_router
from articles.models import Article, Comment, Like, Review
from users.models import Notification, User

fake = Faker()


def auth_headers(user):
    token = RefreshToken.for_user(user).access_token
    return {"Authorization": f"Bearer {token}"}


class EngagementTestBase(TestCase):
    def setUp(self):
        self.author = User.objects.create_user(
            username="author",
            email="author@example.com",
            password="authorpass123",
            first_name="Tania",
        )
        self.reader = User.objects.create_user(
            username="reader", email="reader@example.com", password="readerpass123"
        )
        self.article = Article.objects.create(
            title="বন্যা পরিস্থিতির উন্নতি",
            content=fake.paragraph(nb_sentences=6),
            status=Article.PUBLISHED,
        )
        self.draft = Article.objects.create(
            title="খসড়া", content=fake.paragraph(), status=Article.DRAFT
        )


class CommentsAPITestCase(EngagementTestBase):
    def setUp(self):
        super().setUp()
        self.client = TestClient(comment_router)

    def test_create_comment(self):
        response = self.client.post(
            f"/{self.article.id}/comments",
            json={"content": "  খুবই গুরুত্বপূর্ণ খবর  "},
            headers=auth_headers(self.author),
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["content"], "খুবই গুরুত্বপূর্ণ খবর")
        self.assertEqual(data["authorName"], "Tania")
        self.assertTrue(data["isAuthor"])
        self.assertEqual(data["replies"], [])

    def test_create_comment_requires_authentication(self):
        response = self.client.post(
            f"/{self.article.id}/comments", json={"content": "হ্যালো"}
        )
        self.assertEqual(response.status_code, 401)

    def test_empty_comment(self):
        response = self.client.post(
            f"/{self.article.id}/comments",
            json={"content": "   "},
            headers=auth_headers(self.author),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Comment content cannot be empty.")

    def test_comment_on_draft(self):
        response = self.client.post(
            f"/{self.draft.id}/comments",
            json={"content": "হ্যালো"},
            headers=auth_headers(self.author),
        )
        self.assertEqual(response.status_code, 404)

    def test_reply_notifies_parent_author(self):
        parent = Comment.objects.create(
            article=self.article, user=self.author, content="প্রথম মন্তব্য"
        )
        response = self.client.post(
            f"/{self.article.id}/comments",
            json={"content": "একমত", "parent_id": parent.id},
            headers=auth_headers(self.reader),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["parentId"], parent.id)

        notification = Notification.objects.get(user=self.author)
        self.assertEqual(notification.notification_type, "comment_replied")
        self.assertEqual(notification.article, self.article)

    def test_reply_to_own_comment_does_not_notify(self):
        parent = Comment.objects.create(
            article=self.article, user=self.author, content="প্রথম মন্তব্য"
        )
        self.client.post(
            f"/{self.article.id}/comments",
            json={"content": "সংশোধনী", "parent_id": parent.id},
            headers=auth_headers(self.author),
        )
        self.assertFalse(Notification.objects.exists())

    def test_reply_to_missing_parent(self):
        response = self.client.post(
            f"/{self.article.id}/comments",
            json={"content": "উত্তর", "parent_id": 9999},
            headers=auth_headers(self.reader),
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Parent comment not found.")

    def test_reply_too_deep(self):
        comment = None
        for level in range(Comment.MAX_DEPTH):
            comment = Comment.objects.create(
                article=self.article, user=self.author, content=str(level), parent=comment
            )
        response = self.client.post(
            f"/{self.article.id}/comments",
            json={"content": "আরও গভীরে", "parent_id": comment.id},
            headers=auth_headers(self.reader),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Maximum nesting depth exceeded")

    def test_list_comments_threaded(self):
        parent = Comment.objects.create(
            article=self.article, user=self.author, content="মূল মন্তব্য"
        )
        Comment.objects.create(
            article=self.article, user=self.reader, content="উত্তর", parent=parent
        )
        Comment.objects.create(
            article=self.article,
            user=self.reader,
            content="লুকানো উত্তর",
            parent=parent,
            is_deleted=True,
        )
        Comment.objects.create(
            article=self.article,
            user=self.reader,
            content="অপেক্ষমাণ",
            is_approved=False,
        )

        response = self.client.get(
            f"/{self.article.id}/comments", headers=auth_headers(self.author)
        )
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["content"], "মূল মন্তব্য")
        self.assertTrue(data[0]["isAuthor"])
        self.assertEqual([reply["content"] for reply in data[0]["replies"]], ["উত্তর"])
        self.assertFalse(data[0]["replies"][0]["isAuthor"])

    def test_list_full_depth_thread_queries(self):
        root = Comment.objects.create(
            article=self.article, user=self.author, content="মূল"
        )
        reply = Comment.objects.create(
            article=self.article, user=self.reader, content="উত্তর", parent=root
        )
        for index in range(3):
            Comment.objects.create(
                article=self.article,
                user=self.author,
                content=f"গভীর উত্তর {index}",
                parent=reply,
            )

        # article check, top-level comments and one query per prefetched level
        with self.assertNumQueries(4):
            response = self.client.get(f"/{self.article.id}/comments")
        self.assertEqual(response.status_code, 200)
        leaves = response.json()[0]["replies"][0]["replies"]
        self.assertEqual(len(leaves), 3)
        self.assertTrue(all(leaf["replies"] == [] for leaf in leaves))

    def test_list_comments_anonymous(self):
        Comment.objects.create(article=self.article, user=self.author, content="মন্তব্য")
        response = self.client.get(f"/{self.article.id}/comments")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()[0]["isAuthor"])

    def test_delete_own_comment(self):
        comment = Comment.objects.create(
            article=self.article, user=self.reader, content="মুছে ফেলব"
        )
        response = self.client.delete(
            f"/comments/{comment.id}", headers=auth_headers(self.reader)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Comment deleted successfully.")
        comment.refresh_from_db()
        self.assertTrue(comment.is_deleted)

    def test_cannot_delete_others_comment(self):
        comment = Comment.objects.create(
            article=self.article, user=self.author, content="আমার মন্তব্য"
        )
        response = self.client.delete(
            f"/comments/{comment.id}", headers=auth_headers(self.reader)
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.json()["message"], "You can only delete your own comments."
        )
        comment.refresh_from_db()
        self.assertFalse(comment.is_deleted)


class LikesAPITestCase(EngagementTestBase):
    def setUp(self):
        super().setUp()
        self.client = TestClient(engagement_router)

    def test_toggle_like(self):
        headers = auth_headers(self.reader)
        response = self.client.post(f"/{self.article.id}/like", headers=headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"liked": True, "likeCount": 1})

        response = self.client.get(f"/{self.article.id}/like", headers=headers)
        self.assertEqual(response.json(), {"liked": True, "likeCount": 1})

        response = self.client.post(f"/{self.article.id}/like", headers=headers)
        self.assertEqual(response.json(), {"liked": False, "likeCount": 0})
        self.assertFalse(Like.objects.exists())

    def test_like_status_anonymous(self):
        Like.objects.create(user=self.reader, article=self.article)
        self.article.like_count = 1
        self.article.save()

        response = self.client.get(f"/{self.article.id}/like")
        self.assertEqual(response.json(), {"liked": False, "likeCount": 1})

    def test_like_draft(self):
        response = self.client.post(
            f"/{self.draft.id}/like", headers=auth_headers(self.reader)
        )
        self.assertEqual(response.status_code, 404)


class ReviewsAPITestCase(EngagementTestBase):
    def setUp(self):
        super().setUp()
        self.client = TestClient(engagement_router)

    def test_submit_review(self):
        response = self.client.post(
            f"/{self.article.id}/reviews",
            json={"rating": 5, "review_text": "চমৎকার প্রতিবেদন"},
            headers=auth_headers(self.reader),
        )
        self.assertEqual(response.status_code, 201)
        review = Review.objects.get(user=self.reader)
        self.assertFalse(review.is_approved)

    def test_submit_review_twice(self):
        Review.objects.create(article=self.article, user=self.reader, rating=3)
        response = self.client.post(
            f"/{self.article.id}/reviews",
            json={"rating": 4},
            headers=auth_headers(self.reader),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], "You have already reviewed this article."
        )

    def test_rating_out_of_range(self):
        response = self.client.post(
            f"/{self.article.id}/reviews",
            json={"rating": 6},
            headers=auth_headers(self.reader),
        )
        self.assertEqual(response.status_code, 422)

    def test_list_only_approved_reviews(self):
        Review.objects.create(
            article=self.article, user=self.reader, rating=4, is_approved=True
        )
        Review.objects.create(
            article=self.article, user=self.author, rating=5, is_approved=True
        )
        pending_user = User.objects.create_user(
            username="pending", email="pending@example.com", password="pendingpass"
        )
        Review.objects.create(article=self.article, user=pending_user, rating=1)

        response = self.client.get(f"/{self.article.id}/reviews")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["averageRating"], 4.5)
        self.assertEqual(len(data["items"]), 2)

    def test_list_reviews_bad_paging(self):
        Review.objects.create(
            article=self.article, user=self.reader, rating=4, is_approved=True
        )
        response = self.client.get(f"/{self.article.id}/reviews?limit=-5&offset=-2")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["items"]), 1)
