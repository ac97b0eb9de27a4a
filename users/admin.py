from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import (
    Achievement,
    Notification,
    ReadingHistory,
    SavedArticle,
    User,
    UserAchievement,
    UserProfile,
)

admin.site.register(User, UserAdmin)
admin.site.register(UserProfile)
admin.site.register(Notification)
admin.site.register(SavedArticle)
admin.site.register(ReadingHistory)
admin.site.register(Achievement)
admin.site.register(UserAchievement)
