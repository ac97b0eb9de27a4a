import logging
from typing import List, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone
from ninja import Query, Router
from ninja.responses import codes_4xx, codes_5xx

from articles.models import Article
from newsportal.constants import (
    MONTHLY_READING_TARGET,
    MONTHLY_SAVED_TARGET,
    clamp_limit,
)
from newsportal.schemas import Message
from users.achievements import (
    calculate_user_stats,
    check_and_award_achievements,
    get_achievement_progress,
)
from users.auth import JWTAuth
from users.models import (
    Notification,
    ReadingHistory,
    SavedArticle,
    UserAchievement,
    UserProfile,
)
from users.schemas import (
    AchievementCheckOut,
    AchievementOut,
    AchievementProgressOut,
    MonthlyProgressOut,
    NotificationSchema,
    ReadingHistoryIn,
    ReadingHistoryOut,
    SavedArticleIn,
    SavedArticleOut,
    SavedStatusOut,
    UnreadCountOut,
    UserAchievementOut,
    UserProfileOut,
    UserProfileUpdateSchema,
    UserStatsOut,
)

router = Router(tags=["Users"], auth=JWTAuth())

# Module-level logger
logger = logging.getLogger(__name__)


"""
Profile
"""


@router.get("/me", response={200: UserProfileOut, codes_4xx: Message, codes_5xx: Message})
def get_me(request):
    profile, _ = UserProfile.objects.get_or_create(user=request.auth)
    return 200, UserProfileOut.from_model(request.auth, profile)


@router.put("/me", response={200: UserProfileOut, codes_4xx: Message, codes_5xx: Message})
def update_me(request, payload: UserProfileUpdateSchema):
    user = request.auth
    data = payload.dict(exclude_unset=True)

    reading_level = data.get("reading_level")
    if reading_level and reading_level not in dict(UserProfile.READING_LEVELS):
        return 400, {"message": "Invalid reading level."}

    try:
        with transaction.atomic():
            profile, _ = UserProfile.objects.get_or_create(user=user)
            for field in ("first_name", "last_name"):
                if field in data:
                    setattr(user, field, data.pop(field) or "")
            user.save(update_fields=["first_name", "last_name"])

            for field, value in data.items():
                if value is not None:
                    setattr(profile, field, value)
            profile.save()
    except Exception as e:
        logger.error(f"Error updating profile of user {user.id}: {e}")
        return 500, {"message": "Error updating profile. Please try again."}

    return 200, UserProfileOut.from_model(user, profile)


@router.get(
    "/me/stats", response={200: UserStatsOut, codes_4xx: Message, codes_5xx: Message}
)
def get_my_stats(request):
    user = request.auth
    stats = calculate_user_stats(user)
    return 200, {
        "savedArticles": stats["articles_saved"],
        "readArticles": stats["articles_read"],
        "readingStreak": stats["reading_streak"],
        "categoriesExplored": stats["categories_explored"],
        "totalInteractions": stats["total_interactions"],
        "achievementsEarned": UserAchievement.objects.filter(user=user).count(),
        "memberSince": user.date_joined,
    }


def progress_item(current, target):
    return {
        "current": current,
        "target": target,
        "percentage": min(round(current / target * 100), 100),
    }


@router.get(
    "/me/progress",
    response={200: MonthlyProgressOut, codes_4xx: Message, codes_5xx: Message},
)
def get_my_progress(request):
    month_start = timezone.localtime().replace(
        day=1, hour=0, minute=0, second=0, microsecond=0
    )
    read_this_month = ReadingHistory.objects.filter(
        user=request.auth, last_read_at__gte=month_start
    ).count()
    saved_this_month = SavedArticle.objects.filter(
        user=request.auth, saved_at__gte=month_start
    ).count()
    return 200, {
        "monthlyReading": progress_item(read_this_month, MONTHLY_READING_TARGET),
        "monthlySaved": progress_item(saved_this_month, MONTHLY_SAVED_TARGET),
    }


"""
Saved articles
"""


@router.get(
    "/saved-articles",
    response={200: List[SavedArticleOut], codes_4xx: Message, codes_5xx: Message},
)
def list_saved_articles(
    request, folder: Optional[str] = None, limit: int = 20, offset: int = 0
):
    offset = max(offset, 0)
    saved = SavedArticle.objects.filter(user=request.auth).select_related(
        "article", "article__category"
    )
    if folder:
        saved = saved.filter(folder_name=folder)
    saved = saved.order_by("-saved_at")[offset : offset + clamp_limit(limit, 20)]
    return 200, [SavedArticleOut.from_model(item) for item in saved]


@router.post(
    "/saved-articles",
    response={200: SavedArticleOut, codes_4xx: Message, codes_5xx: Message},
)
def save_article(request, payload: SavedArticleIn):
    try:
        article = Article.published.get(pk=payload.article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    try:
        saved, _ = SavedArticle.objects.update_or_create(
            user=request.auth,
            article=article,
            defaults={"folder_name": payload.folder_name, "note": payload.note},
        )
    except Exception as e:
        logger.error(f"Error saving article {article.id}: {e}")
        return 500, {"message": "Error saving article. Please try again."}

    check_and_award_achievements(request.auth)
    return 200, SavedArticleOut.from_model(saved)


@router.get(
    "/saved-articles/{article_id}/status",
    response={200: SavedStatusOut, codes_4xx: Message, codes_5xx: Message},
)
def saved_status(request, article_id: int):
    saved = SavedArticle.objects.filter(
        user=request.auth, article_id=article_id
    ).exists()
    return 200, {"saved": saved}


@router.delete(
    "/saved-articles/{article_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def remove_saved_article(request, article_id: int):
    deleted, _ = SavedArticle.objects.filter(
        user=request.auth, article_id=article_id
    ).delete()
    if not deleted:
        return 404, {"message": "Saved article not found."}
    return 200, {"message": "Article removed from saved articles."}


"""
Reading history
"""


@router.get(
    "/reading-history",
    response={200: List[ReadingHistoryOut], codes_4xx: Message, codes_5xx: Message},
)
def list_reading_history(request, limit: int = 20, offset: int = 0):
    offset = max(offset, 0)
    history = (
        ReadingHistory.objects.filter(user=request.auth)
        .select_related("article", "article__category")
        .order_by("-last_read_at")[offset : offset + clamp_limit(limit, 20)]
    )
    return 200, [ReadingHistoryOut.from_model(item) for item in history]


@router.post(
    "/reading-history",
    response={200: ReadingHistoryOut, codes_4xx: Message, codes_5xx: Message},
)
def track_reading(request, payload: ReadingHistoryIn):
    if not Article.published.filter(pk=payload.article_id).exists():
        return 404, {"message": "Article not found."}

    try:
        with transaction.atomic():
            history, created = ReadingHistory.objects.select_for_update().get_or_create(
                user=request.auth, article_id=payload.article_id
            )
            if not created:
                history.read_count = F("read_count") + 1
            history.last_read_at = timezone.now()
            if payload.read_percentage is not None:
                history.read_percentage = max(
                    history.read_percentage, payload.read_percentage
                )
                history.is_completed = history.read_percentage >= 90
            if payload.time_spent:
                history.time_spent = F("time_spent") + payload.time_spent
            history.save()
            history.refresh_from_db()
    except Exception as e:
        logger.error(f"Error tracking reading of article {payload.article_id}: {e}")
        return 500, {"message": "Error tracking reading. Please try again."}

    check_and_award_achievements(request.auth)
    return 200, ReadingHistoryOut.from_model(history)


@router.delete(
    "/reading-history", response={200: Message, codes_4xx: Message, codes_5xx: Message}
)
def clear_reading_history(request):
    ReadingHistory.objects.filter(user=request.auth).delete()
    return 200, {"message": "Reading history cleared."}


"""
Notifications
"""


@router.get(
    "/notifications",
    response={200: List[NotificationSchema], codes_4xx: Message, codes_5xx: Message},
)
def get_notifications(
    request,
    unread_only: bool = Query(False, description="Only unread notifications"),
    limit: int = 50,
    offset: int = 0,
):
    offset = max(offset, 0)
    notifications = Notification.objects.filter(user=request.auth)
    if unread_only:
        notifications = notifications.filter(is_read=False)
    notifications = notifications.order_by("-created_at")[
        offset : offset + clamp_limit(limit, 50)
    ]
    return 200, [NotificationSchema.from_model(notif) for notif in notifications]


@router.get(
    "/notifications/unread-count",
    response={200: UnreadCountOut, codes_4xx: Message, codes_5xx: Message},
)
def unread_notification_count(request):
    count = Notification.objects.filter(user=request.auth, is_read=False).count()
    return 200, {"count": count}


@router.post(
    "/notifications/mark-all-read",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def mark_all_notifications_as_read(request):
    updated = Notification.objects.filter(user=request.auth, is_read=False).update(
        is_read=True
    )
    return 200, {"message": f"{updated} notifications marked as read."}


@router.post(
    "/notifications/{notification_id}/mark-as-read",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def mark_notification_as_read(request, notification_id: int):
    try:
        notification = Notification.objects.get(pk=notification_id, user=request.auth)
    except Notification.DoesNotExist:
        return 404, {"message": "Notification not found."}

    if notification.is_read:
        return 200, {"message": "Notification is already marked as read."}

    notification.is_read = True
    notification.save(update_fields=["is_read"])
    return 200, {"message": "Notification marked as read."}


@router.delete(
    "/notifications/{notification_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def delete_notification(request, notification_id: int):
    deleted, _ = Notification.objects.filter(
        pk=notification_id, user=request.auth
    ).delete()
    if not deleted:
        return 404, {"message": "Notification not found."}
    return 200, {"message": "Notification deleted."}


"""
Achievements
"""


@router.get(
    "/achievements",
    response={200: List[UserAchievementOut], codes_4xx: Message, codes_5xx: Message},
)
def list_my_achievements(request):
    earned = UserAchievement.objects.filter(user=request.auth).select_related(
        "achievement"
    )
    return 200, [
        {
            "achievement": AchievementOut.from_model(item.achievement),
            "earnedAt": item.earned_at,
        }
        for item in earned.order_by("-earned_at")
    ]


@router.get(
    "/achievements/progress",
    response={200: List[AchievementProgressOut], codes_4xx: Message, codes_5xx: Message},
)
def achievements_progress(request):
    return 200, [
        {
            "achievement": AchievementOut.from_model(item["achievement"]),
            "currentValue": item["current_value"],
            "isEarned": item["is_earned"],
            "earnedAt": item["earned_at"],
            "progressPercentage": item["progress_percentage"],
        }
        for item in get_achievement_progress(request.auth)
    ]


@router.post(
    "/achievements/check",
    response={200: AchievementCheckOut, codes_4xx: Message, codes_5xx: Message},
)
def check_achievements(request):
    new_achievements = check_and_award_achievements(request.auth)
    return 200, {
        "newAchievements": [
            AchievementOut.from_model(achievement) for achievement in new_achievements
        ],
        "totalAchievements": UserAchievement.objects.filter(user=request.auth).count(),
    }
