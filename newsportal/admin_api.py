"""
Site-wide admin endpoints: dashboard figures and notification broadcast.
The content management routers of each app are mounted next to these in
newsportal.api.
"""

import logging
from datetime import timedelta
from typing import List

from django.db.models import Count, Sum
from django.utils import timezone
from ninja import Router, Schema
from ninja.responses import codes_4xx, codes_5xx

from articles.models import Article, Category, Comment, Review
from articles.schemas import ArticleListOut
from epaper.models import EPaper
from newsportal.schemas import Message
from users.auth import AdminAuth
from users.models import Notification, User
from users.schemas import BroadcastNotificationIn

router = Router(tags=["Admin"], auth=AdminAuth())

logger = logging.getLogger(__name__)

BROADCAST_BATCH_SIZE = 500


class DashboardOut(Schema):
    totalArticles: int
    publishedArticles: int
    draftArticles: int
    archivedArticles: int
    totalCategories: int
    totalUsers: int
    newUsersThisWeek: int
    pendingComments: int
    pendingReviews: int
    totalViews: int
    totalLikes: int
    totalEpapers: int
    topArticles: List[ArticleListOut]


@router.get(
    "/dashboard", response={200: DashboardOut, codes_4xx: Message, codes_5xx: Message}
)
def dashboard(request):
    status_counts = dict(
        Article.objects.values_list("status").annotate(total=Count("id"))
    )
    totals = Article.objects.aggregate(
        views=Sum("view_count"), likes=Sum("like_count")
    )
    week_ago = timezone.now() - timedelta(days=7)

    return 200, {
        "totalArticles": sum(status_counts.values()),
        "publishedArticles": status_counts.get(Article.PUBLISHED, 0),
        "draftArticles": status_counts.get(Article.DRAFT, 0),
        "archivedArticles": status_counts.get(Article.ARCHIVED, 0),
        "totalCategories": Category.objects.count(),
        "totalUsers": User.objects.count(),
        "newUsersThisWeek": User.objects.filter(date_joined__gte=week_ago).count(),
        "pendingComments": Comment.objects.filter(
            is_approved=False, is_deleted=False
        ).count(),
        "pendingReviews": Review.objects.filter(is_approved=False).count(),
        "totalViews": totals["views"] or 0,
        "totalLikes": totals["likes"] or 0,
        "totalEpapers": EPaper.objects.count(),
        "topArticles": [
            ArticleListOut.from_model(article)
            for article in Article.published.order_by("-view_count")[:5]
        ],
    }


@router.post(
    "/notifications/broadcast",
    response={201: Message, codes_4xx: Message, codes_5xx: Message},
)
def broadcast_notification(request, payload: BroadcastNotificationIn):
    if payload.notification_type not in dict(Notification.TYPE_CHOICES):
        return 400, {"message": "Invalid notification type."}
    if (
        payload.article_id is not None
        and not Article.objects.filter(pk=payload.article_id).exists()
    ):
        return 404, {"message": "Article not found."}

    expires_at = None
    if payload.expires_in_days:
        expires_at = timezone.now() + timedelta(days=payload.expires_in_days)

    user_ids = User.objects.filter(is_active=True).values_list("id", flat=True)
    notifications = [
        Notification(
            user_id=user_id,
            article_id=payload.article_id,
            title=payload.title,
            message=payload.message,
            notification_type=payload.notification_type,
            link=payload.link,
            expires_at=expires_at,
        )
        for user_id in user_ids.iterator()
    ]
    try:
        Notification.objects.bulk_create(notifications, batch_size=BROADCAST_BATCH_SIZE)
    except Exception as e:
        logger.error(f"Error broadcasting notification: {e}")
        return 500, {"message": "Error sending notifications. Please try again."}

    return 201, {"message": f"Notification sent to {len(notifications)} users."}
