"""
Reader statistics and the achievement checks built on them.

Each Achievement has a requirement type naming one of the statistics
computed by calculate_user_stats and a threshold value. A user earns the
achievement once the statistic reaches the threshold.
"""

import logging
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.db.models.functions import TruncDate
from django.utils import timezone

from articles.models import Comment, Like, Review
from polls.models import PollVote
from users.models import (
    Achievement,
    Notification,
    ReadingHistory,
    SavedArticle,
    User,
    UserAchievement,
)

logger = logging.getLogger(__name__)

DEFAULT_ACHIEVEMENTS = [
    {
        "name": "প্রথম পাঠ",
        "description": "প্রথম সংবাদ পড়েছেন",
        "icon": "book-open",
        "requirement_type": "articles_read",
        "requirement_value": 1,
    },
    {
        "name": "নিয়মিত পাঠক",
        "description": "১০টি সংবাদ পড়েছেন",
        "icon": "book",
        "requirement_type": "articles_read",
        "requirement_value": 10,
    },
    {
        "name": "সংবাদপ্রেমী",
        "description": "৫০টি সংবাদ পড়েছেন",
        "icon": "library",
        "requirement_type": "articles_read",
        "requirement_value": 50,
    },
    {
        "name": "সংগ্রাহক",
        "description": "৫টি সংবাদ সংরক্ষণ করেছেন",
        "icon": "bookmark",
        "requirement_type": "articles_saved",
        "requirement_value": 5,
    },
    {
        "name": "সাপ্তাহিক ধারাবাহিকতা",
        "description": "টানা ৭ দিন সংবাদ পড়েছেন",
        "icon": "flame",
        "requirement_type": "reading_streak",
        "requirement_value": 7,
    },
    {
        "name": "অনুসন্ধানী",
        "description": "৫টি ভিন্ন বিভাগের সংবাদ পড়েছেন",
        "icon": "compass",
        "requirement_type": "categories_explored",
        "requirement_value": 5,
    },
    {
        "name": "সক্রিয় সদস্য",
        "description": "২০ বার মন্তব্য, লাইক, ভোট বা রিভিউ দিয়েছেন",
        "icon": "message-circle",
        "requirement_type": "total_interactions",
        "requirement_value": 20,
    },
]


def calculate_reading_streak(user: User, today=None) -> int:
    """
    Number of consecutive calendar days with reading activity, ending today.
    A streak that ended yesterday still counts until today is over.
    """
    today = today or timezone.localdate()
    read_days = set(
        ReadingHistory.objects.filter(user=user)
        .annotate(day=TruncDate("last_read_at"))
        .values_list("day", flat=True)
    )
    if not read_days:
        return 0

    day = today if today in read_days else today - timedelta(days=1)
    streak = 0
    while day in read_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def calculate_user_stats(user: User) -> dict:
    articles_read = ReadingHistory.objects.filter(user=user).count()
    articles_saved = SavedArticle.objects.filter(user=user).count()
    categories_explored = (
        ReadingHistory.objects.filter(user=user, article__category__isnull=False)
        .values("article__category")
        .distinct()
        .count()
    )
    total_interactions = (
        Comment.objects.filter(user=user, is_deleted=False).count()
        + Like.objects.filter(user=user).count()
        + PollVote.objects.filter(user=user).count()
        + Review.objects.filter(user=user).count()
    )

    return {
        "articles_read": articles_read,
        "articles_saved": articles_saved,
        "reading_streak": calculate_reading_streak(user),
        "categories_explored": categories_explored,
        "total_interactions": total_interactions,
    }


def check_and_award_achievements(user: User, stats: dict = None) -> list:
    """
    Award every achievement whose requirement the user now meets and has
    not earned yet. Returns the newly earned achievements.
    """
    try:
        stats = stats if stats is not None else calculate_user_stats(user)
        earned_ids = set(
            UserAchievement.objects.filter(user=user).values_list(
                "achievement_id", flat=True
            )
        )

        new_achievements = []
        for achievement in Achievement.objects.exclude(id__in=earned_ids):
            current_value = stats.get(achievement.requirement_type, 0)
            if current_value < achievement.requirement_value:
                continue
            try:
                with transaction.atomic():
                    UserAchievement.objects.create(user=user, achievement=achievement)
                    notification = Notification(
                        user=user,
                        title="নতুন অর্জন!",
                        message=f"অভিনন্দন! আপনি '{achievement.name}' অর্জন করেছেন।",
                        notification_type="achievement_earned",
                        link="/dashboard/achievements",
                    )
                    notification.set_expiration(30)
                    notification.save()
            except IntegrityError:
                # Awarded concurrently by another request
                continue
            new_achievements.append(achievement)

        if new_achievements:
            logger.info(
                f"User {user.id} earned achievements: "
                f"{[achievement.name for achievement in new_achievements]}"
            )
        return new_achievements
    except Exception as e:
        logger.error(f"Error checking achievements for user {user.id}: {e}")
        return []


def get_achievement_progress(user: User, stats: dict = None) -> list:
    stats = stats if stats is not None else calculate_user_stats(user)
    earned = {
        user_achievement.achievement_id: user_achievement.earned_at
        for user_achievement in UserAchievement.objects.filter(user=user)
    }

    progress = []
    for achievement in Achievement.objects.all():
        current_value = stats.get(achievement.requirement_type, 0)
        is_earned = achievement.id in earned
        if is_earned:
            percentage = 100
        elif achievement.requirement_value:
            percentage = min(
                round(current_value / achievement.requirement_value * 100), 100
            )
        else:
            percentage = 100
        progress.append(
            {
                "achievement": achievement,
                "current_value": current_value,
                "is_earned": is_earned,
                "earned_at": earned.get(achievement.id),
                "progress_percentage": percentage,
            }
        )
    return progress


def install_default_achievements() -> int:
    """Create the default achievement catalogue. Returns how many were added."""
    created_count = 0
    for definition in DEFAULT_ACHIEVEMENTS:
        _, created = Achievement.objects.get_or_create(
            name=definition["name"], defaults=definition
        )
        if created:
            created_count += 1
    return created_count
