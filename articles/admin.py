from django.contrib import admin

from .models import Article, BreakingNews, Category, Comment, Like, Review, Tag


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "category",
        "status",
        "is_featured",
        "view_count",
        "published_at",
    )
    list_filter = ("status", "is_featured", "category")
    search_fields = ("title", "excerpt", "author")


admin.site.register(Category)
admin.site.register(Tag)
admin.site.register(Comment)
admin.site.register(Like)
admin.site.register(Review)
admin.site.register(BreakingNews)
