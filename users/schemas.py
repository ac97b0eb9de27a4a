from datetime import datetime
from typing import List, Optional

from ninja import Field, Schema

from articles.schemas import ArticleListOut
from users.models import (
    Achievement,
    Notification,
    ReadingHistory,
    SavedArticle,
    User,
    UserProfile,
)

"""
Auth Schemas
"""


class UserCreateSchema(Schema):
    username: str
    email: str
    first_name: str = ""
    last_name: str = ""
    password: str
    confirm_password: str


class LogInSchemaIn(Schema):
    login: str
    password: str


class ResetPasswordSchema(Schema):
    password: str
    confirm_password: str


"""
Profile Schemas
"""


class UserProfileOut(Schema):
    id: int
    username: str
    email: str
    firstName: str
    lastName: str
    fullName: str
    bio: str
    location: str
    website: str
    profession: str
    interests: List[str]
    readingLevel: str
    avatarUrl: Optional[str] = None
    identicon: str
    isStaff: bool
    dateJoined: datetime

    @classmethod
    def from_model(cls, user: User, profile: UserProfile):
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            firstName=user.first_name,
            lastName=user.last_name,
            fullName=profile.full_name or user.get_full_name(),
            bio=profile.bio,
            location=profile.location,
            website=profile.website,
            profession=profile.profession,
            interests=profile.interests or [],
            readingLevel=profile.reading_level,
            avatarUrl=profile.get_avatar_url(),
            identicon=profile.identicon,
            isStaff=user.is_staff,
            dateJoined=user.date_joined,
        )


class UserProfileUpdateSchema(Schema):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    profession: Optional[str] = None
    interests: Optional[List[str]] = None
    reading_level: Optional[str] = None


class UserStatsOut(Schema):
    savedArticles: int
    readArticles: int
    readingStreak: int
    categoriesExplored: int
    totalInteractions: int
    achievementsEarned: int
    memberSince: datetime


class ProgressItem(Schema):
    current: int
    target: int
    percentage: int


class MonthlyProgressOut(Schema):
    monthlyReading: ProgressItem
    monthlySaved: ProgressItem


"""
Saved Articles and Reading History Schemas
"""


class SavedArticleIn(Schema):
    article_id: int
    folder_name: str = "default"
    note: str = ""


class SavedArticleOut(Schema):
    id: int
    article: ArticleListOut
    folderName: str
    note: str
    savedAt: datetime

    @classmethod
    def from_model(cls, saved: SavedArticle):
        return cls(
            id=saved.id,
            article=ArticleListOut.from_model(saved.article),
            folderName=saved.folder_name,
            note=saved.note,
            savedAt=saved.saved_at,
        )


class SavedStatusOut(Schema):
    saved: bool


class ReadingHistoryIn(Schema):
    article_id: int
    read_percentage: Optional[int] = Field(None, ge=0, le=100)
    time_spent: Optional[int] = Field(None, ge=0, description="Seconds")


class ReadingHistoryOut(Schema):
    id: int
    article: ArticleListOut
    readCount: int
    readPercentage: int
    timeSpent: int
    isCompleted: bool
    lastReadAt: datetime

    @classmethod
    def from_model(cls, history: ReadingHistory):
        return cls(
            id=history.id,
            article=ArticleListOut.from_model(history.article),
            readCount=history.read_count,
            readPercentage=history.read_percentage,
            timeSpent=history.time_spent,
            isCompleted=history.is_completed,
            lastReadAt=history.last_read_at,
        )


"""
Notification Schemas
"""


class NotificationSchema(Schema):
    id: int
    title: str
    message: str
    notificationType: str
    link: Optional[str] = None
    articleId: Optional[int] = None
    isRead: bool
    createdAt: datetime
    expiresAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, notif: Notification):
        return cls(
            id=notif.id,
            title=notif.title,
            message=notif.message,
            notificationType=notif.notification_type,
            link=notif.link,
            articleId=notif.article_id,
            isRead=notif.is_read,
            createdAt=notif.created_at,
            expiresAt=notif.expires_at,
        )


class UnreadCountOut(Schema):
    count: int


class BroadcastNotificationIn(Schema):
    title: str
    message: str
    notification_type: str = "system"
    link: Optional[str] = None
    article_id: Optional[int] = None
    expires_in_days: Optional[int] = Field(None, ge=1)


"""
Achievement Schemas
"""


class AchievementOut(Schema):
    id: int
    name: str
    description: str
    icon: str
    requirementType: str
    requirementValue: int

    @classmethod
    def from_model(cls, achievement: Achievement):
        return cls(
            id=achievement.id,
            name=achievement.name,
            description=achievement.description,
            icon=achievement.icon,
            requirementType=achievement.requirement_type,
            requirementValue=achievement.requirement_value,
        )


class UserAchievementOut(Schema):
    achievement: AchievementOut
    earnedAt: datetime


class AchievementProgressOut(Schema):
    achievement: AchievementOut
    currentValue: int
    isEarned: bool
    earnedAt: Optional[datetime] = None
    progressPercentage: int


class AchievementCheckOut(Schema):
    newAchievements: List[AchievementOut]
    totalAchievements: int
