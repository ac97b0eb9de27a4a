from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from django.utils.timezone import timedelta
from faker import Faker

from articles.models import Article, Category, Comment, Like
from polls.models import Poll, PollOption, PollVote
from users.achievements import (
    DEFAULT_ACHIEVEMENTS,
    calculate_reading_streak,
    calculate_user_stats,
    check_and_award_achievements,
    get_achievement_progress,
    install_default_achievements,
)
from users.models import (
    Achievement,
    Notification,
    ReadingHistory,
    User,
    UserAchievement,
)

fake = Faker()


class AchievementsTestBase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="reader", email="reader@example.com", password="password123"
        )
        self.categories = [
            Category.objects.create(name=name) for name in ("খেলা", "রাজনীতি")
        ]
        self.articles = [
            Article.objects.create(
                title=f"{fake.sentence()} {index}",
                content=fake.paragraph(),
                category=self.categories[index % 2],
                status=Article.PUBLISHED,
            )
            for index in range(4)
        ]

    def read(self, article, days_ago=0):
        return ReadingHistory.objects.create(
            user=self.user,
            article=article,
            last_read_at=timezone.now() - timedelta(days=days_ago),
        )


class ReadingStreakTest(AchievementsTestBase):
    def test_no_history(self):
        self.assertEqual(calculate_reading_streak(self.user), 0)

    def test_consecutive_days_ending_today(self):
        self.read(self.articles[0], days_ago=0)
        self.read(self.articles[1], days_ago=1)
        self.read(self.articles[2], days_ago=2)
        self.assertEqual(calculate_reading_streak(self.user), 3)

    def test_streak_ending_yesterday_still_counts(self):
        self.read(self.articles[0], days_ago=1)
        self.read(self.articles[1], days_ago=2)
        self.assertEqual(calculate_reading_streak(self.user), 2)

    def test_gap_breaks_streak(self):
        self.read(self.articles[0], days_ago=0)
        self.read(self.articles[1], days_ago=2)
        self.assertEqual(calculate_reading_streak(self.user), 1)

    def test_old_activity_only(self):
        self.read(self.articles[0], days_ago=3)
        self.assertEqual(calculate_reading_streak(self.user), 0)


class UserStatsTest(AchievementsTestBase):
    def test_stats(self):
        for article in self.articles[:3]:
            self.read(article)
        Like.objects.create(user=self.user, article=self.articles[0])
        Comment.objects.create(
            article=self.articles[0], user=self.user, content=fake.sentence()
        )
        Comment.objects.create(
            article=self.articles[1],
            user=self.user,
            content=fake.sentence(),
            is_deleted=True,
        )
        poll = Poll.objects.create(question="আপনি কি একমত?")
        option = PollOption.objects.create(poll=poll, option_text="হ্যাঁ")
        PollVote.objects.create(poll=poll, option=option, user=self.user)

        stats = calculate_user_stats(self.user)
        self.assertEqual(stats["articles_read"], 3)
        self.assertEqual(stats["articles_saved"], 0)
        self.assertEqual(stats["reading_streak"], 1)
        self.assertEqual(stats["categories_explored"], 2)
        self.assertEqual(stats["total_interactions"], 3)


class AwardAchievementsTest(AchievementsTestBase):
    def setUp(self):
        super().setUp()
        self.achievement = Achievement.objects.create(
            name="প্রথম পাঠ", requirement_type="articles_read", requirement_value=1
        )

    def test_awards_and_notifies(self):
        self.read(self.articles[0])

        new_achievements = check_and_award_achievements(self.user)
        self.assertEqual(new_achievements, [self.achievement])
        self.assertTrue(
            UserAchievement.objects.filter(
                user=self.user, achievement=self.achievement
            ).exists()
        )
        notification = Notification.objects.get(user=self.user)
        self.assertEqual(notification.notification_type, "achievement_earned")
        self.assertEqual(notification.title, "নতুন অর্জন!")
        self.assertIsNotNone(notification.expires_at)

    def test_requirement_not_met(self):
        self.assertEqual(check_and_award_achievements(self.user), [])
        self.assertFalse(UserAchievement.objects.exists())

    def test_no_duplicate_awards(self):
        self.read(self.articles[0])
        check_and_award_achievements(self.user)
        self.assertEqual(check_and_award_achievements(self.user), [])
        self.assertEqual(UserAchievement.objects.filter(user=self.user).count(), 1)
        self.assertEqual(Notification.objects.filter(user=self.user).count(), 1)

    def test_uses_given_stats(self):
        new_achievements = check_and_award_achievements(
            self.user, stats={"articles_read": 5}
        )
        self.assertEqual(new_achievements, [self.achievement])

    @patch("users.achievements.calculate_user_stats")
    def test_failure_returns_empty_list(self, mock_stats):
        mock_stats.side_effect = Exception("database unavailable")
        self.assertEqual(check_and_award_achievements(self.user), [])

    def test_progress(self):
        Achievement.objects.create(
            name="নিয়মিত পাঠক", requirement_type="articles_read", requirement_value=10
        )
        for article in self.articles[:3]:
            self.read(article)

        progress = {
            item["achievement"].name: item for item in get_achievement_progress(self.user)
        }
        self.assertFalse(progress["প্রথম পাঠ"]["is_earned"])
        self.assertEqual(progress["প্রথম পাঠ"]["progress_percentage"], 100)
        self.assertEqual(progress["নিয়মিত পাঠক"]["current_value"], 3)
        self.assertEqual(progress["নিয়মিত পাঠক"]["progress_percentage"], 30)


class InstallDefaultAchievementsTest(TestCase):
    def test_install_is_idempotent(self):
        self.assertEqual(install_default_achievements(), len(DEFAULT_ACHIEVEMENTS))
        self.assertEqual(install_default_achievements(), 0)
        self.assertEqual(Achievement.objects.count(), len(DEFAULT_ACHIEVEMENTS))
