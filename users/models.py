"""
Holds the User model, reader profile and the reader engagement records
(notifications, saved articles, reading history and achievements).
"""

import time
import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.timezone import now, timedelta
from django.utils.translation import gettext_lazy as _

from newsportal.utils import generate_identicon


class UserManager(BaseUserManager):
    """
    Custom user manager where email is required
    """

    def create_user(self, username, email, password, **extra_fields):
        """
        Create and save a User with the given email and password.
        """
        if not email:
            raise ValueError(_("The Email must be set"))
        email = self.normalize_email(email)
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)
        user.save()
        return user

    def create_superuser(self, username, email, password, **extra_fields):
        """
        Create and save a SuperUser with the given email and password.
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("is_active", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError(_("Superuser must have is_staff=True."))
        if extra_fields.get("is_superuser") is not True:
            raise ValueError(_("Superuser must have is_superuser=True."))
        return self.create_user(username, email, password, **extra_fields)


class User(AbstractUser):
    email = models.EmailField(_("email address"), unique=True)

    objects = UserManager()

    class Meta:
        db_table = "user"

    @property
    def display_name(self):
        full_name = self.get_full_name()
        return full_name if full_name else self.username


class UserProfile(models.Model):
    READING_LEVELS = [
        ("beginner", "Beginner"),
        ("regular", "Regular"),
        ("avid", "Avid"),
    ]

    def get_avatar_upload_path(instance, filename):
        ext = filename.split(".")[-1]
        unique_filename = (
            f"{instance.user_id}_{uuid.uuid4().hex[:8]}_{int(time.time())}.{ext}"
        )
        return f"avatars/{settings.ENVIRONMENT}/{unique_filename}"

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    full_name = models.CharField(max_length=255, blank=True)
    bio = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    website = models.URLField(max_length=255, blank=True)
    profession = models.CharField(max_length=255, blank=True)
    interests = models.JSONField(default=list, blank=True)
    reading_level = models.CharField(
        max_length=20, choices=READING_LEVELS, default="beginner"
    )
    avatar = models.ImageField(upload_to=get_avatar_upload_path, null=True, blank=True)
    identicon = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        if not self.identicon:
            self.identicon = generate_identicon(self.user.username)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"Profile of {self.user.username}"

    def get_avatar_url(self):
        if self.avatar:
            return self.avatar.url
        return None


class Notification(models.Model):
    TYPE_CHOICES = [
        ("article_published", "Article Published"),
        ("comment_replied", "Comment Replied"),
        ("achievement_earned", "Achievement Earned"),
        ("breaking_news", "Breaking News"),
        ("poll_result", "Poll Result"),
        ("system", "System"),
    ]

    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notifications"
    )
    article = models.ForeignKey(
        "articles.Article", on_delete=models.SET_NULL, null=True, blank=True
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    notification_type = models.CharField(
        max_length=30, choices=TYPE_CHOICES, default="system"
    )
    link = models.CharField(max_length=500, blank=True, null=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "is_read"])]

    def __str__(self):
        return f"{self.get_notification_type_display()} - {self.title}"

    def set_expiration(self, days: int):
        self.expires_at = now() + timedelta(days=days)


class SavedArticle(models.Model):
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="saved_articles"
    )
    article = models.ForeignKey(
        "articles.Article", on_delete=models.CASCADE, related_name="saved_by"
    )
    folder_name = models.CharField(max_length=100, default="default")
    note = models.TextField(blank=True)
    saved_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "article")
        ordering = ["-saved_at"]

    def __str__(self):
        return f"{self.user.username} saved {self.article.title}"


class ReadingHistory(models.Model):
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="reading_history"
    )
    article = models.ForeignKey(
        "articles.Article", on_delete=models.CASCADE, related_name="readings"
    )
    read_count = models.PositiveIntegerField(default=1)
    read_percentage = models.PositiveSmallIntegerField(default=0)
    # seconds
    time_spent = models.PositiveIntegerField(default=0)
    is_completed = models.BooleanField(default=False)
    last_read_at = models.DateTimeField(default=now, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "article")
        ordering = ["-last_read_at"]
        verbose_name_plural = "reading history"

    def __str__(self):
        return f"{self.user.username} read {self.article.title}"


class Achievement(models.Model):
    REQUIREMENT_TYPES = [
        ("articles_read", "Articles Read"),
        ("articles_saved", "Articles Saved"),
        ("reading_streak", "Reading Streak"),
        ("categories_explored", "Categories Explored"),
        ("total_interactions", "Total Interactions"),
    ]

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=50, blank=True)
    requirement_type = models.CharField(max_length=30, choices=REQUIREMENT_TYPES)
    requirement_value = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["requirement_type", "requirement_value"]

    def __str__(self):
        return self.name


class UserAchievement(models.Model):
    user = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="achievements"
    )
    achievement = models.ForeignKey(
        Achievement, on_delete=models.CASCADE, related_name="earned_by"
    )
    earned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "achievement")
        ordering = ["-earned_at"]

    def __str__(self):
        return f"{self.user.username} - {self.achievement.name}"
