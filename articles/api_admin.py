"""
Content management endpoints for staff: articles, categories, comment and
review moderation, breaking news.
"""

import logging
from typing import List, Optional

from django.db import transaction
from django.db.models import Count, Q
from ninja import File, Router, UploadedFile
from ninja.responses import codes_4xx, codes_5xx

from articles.cache import invalidate_articles_cache
from articles.models import (
    Article,
    ArticleTag,
    BreakingNews,
    Category,
    Comment,
    Review,
    Tag,
)
from articles.schemas import (
    AdminCommentOut,
    AdminReviewOut,
    ArticleCreateSchema,
    ArticleDetailOut,
    ArticleStatus,
    ArticleUpdateSchema,
    BreakingNewsCreateSchema,
    BreakingNewsOut,
    BreakingNewsUpdateSchema,
    CategoryCreateSchema,
    CategoryOut,
    CategoryUpdateSchema,
)
from articles.utils import generate_bengali_slug
from newsportal.constants import clamp_limit
from newsportal.schemas import Message
from users.auth import AdminAuth

router = Router(tags=["Admin Content"], auth=AdminAuth())

logger = logging.getLogger(__name__)

MAX_TAG_LENGTH = 50


def refresh_tag_usage(tag_ids):
    for tag in Tag.objects.filter(id__in=tag_ids).annotate(
        total=Count("articletag")
    ):
        if tag.usage_count != tag.total:
            tag.usage_count = tag.total
            tag.save(update_fields=["usage_count", "updated_at"])


def set_article_tags(article: Article, names: List[str]):
    """Replace the tags of ``article`` with ``names``, creating missing tags."""
    names = [name.strip() for name in names if name and name.strip()]
    too_long = [name for name in names if len(name) > MAX_TAG_LENGTH]
    if too_long:
        raise ValueError(
            f"Tag '{too_long[0]}' exceeds the maximum length of "
            f"{MAX_TAG_LENGTH} characters."
        )

    previous_ids = set(article.tags.values_list("id", flat=True))
    tags = [Tag.objects.get_or_create(name=name)[0] for name in dict.fromkeys(names)]
    ArticleTag.objects.filter(article=article).exclude(tag__in=tags).delete()
    for tag in tags:
        ArticleTag.objects.get_or_create(article=article, tag=tag)

    refresh_tag_usage(previous_ids | {tag.id for tag in tags})


def resolve_category(category_id: Optional[int]):
    if category_id is None:
        return None
    return Category.objects.get(pk=category_id)


"""
Articles
"""


@router.get(
    "/articles",
    response={200: List[ArticleDetailOut], codes_4xx: Message, codes_5xx: Message},
)
def admin_list_articles(
    request,
    status: Optional[ArticleStatus] = None,
    q: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
):
    offset = max(offset, 0)
    articles = Article.objects.select_related("category").prefetch_related("tags")
    if status:
        articles = articles.filter(status=status.value)
    if q:
        articles = articles.filter(Q(title__icontains=q) | Q(author__icontains=q))
    limit = clamp_limit(limit, 20)
    articles = articles.order_by("-created_at")[offset : offset + limit]
    return 200, [ArticleDetailOut.from_model(article) for article in articles]


@router.post(
    "/articles",
    response={201: ArticleDetailOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_create_article(request, payload: ArticleCreateSchema):
    try:
        category = resolve_category(payload.category_id)
    except Category.DoesNotExist:
        return 404, {"message": "Category not found."}

    try:
        with transaction.atomic():
            article = Article.objects.create(
                title=payload.title,
                content=payload.content,
                excerpt=payload.excerpt or "",
                author=payload.author or request.auth.display_name,
                category=category,
                image_url=payload.image_url,
                status=payload.status.value,
                is_featured=payload.is_featured,
                submitter=request.auth,
            )
            set_article_tags(article, payload.tags)
    except ValueError as e:
        return 400, {"message": str(e)}
    except Exception as e:
        logger.error(f"Error creating article: {e}")
        return 500, {"message": "Error creating article. Please try again."}

    if article.is_published:
        invalidate_articles_cache()
    return 201, ArticleDetailOut.from_model(article)


@router.put(
    "/articles/{article_id}",
    response={200: ArticleDetailOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_update_article(request, article_id: int, payload: ArticleUpdateSchema):
    try:
        article = Article.objects.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    data = payload.dict(exclude_unset=True)
    try:
        if "category_id" in data:
            article.category = resolve_category(data.pop("category_id"))
    except Category.DoesNotExist:
        return 404, {"message": "Category not found."}

    tags = data.pop("tags", None)
    status = data.pop("status", None)
    if status:
        article.status = ArticleStatus(status).value

    for field, value in data.items():
        setattr(article, field, value)

    try:
        with transaction.atomic():
            article.save()
            if tags is not None:
                set_article_tags(article, tags)
    except ValueError as e:
        return 400, {"message": str(e)}
    except Exception as e:
        logger.error(f"Error updating article {article_id}: {e}")
        return 500, {"message": "Error updating article. Please try again."}

    invalidate_articles_cache()
    return 200, ArticleDetailOut.from_model(article)


@router.post(
    "/articles/{article_id}/image",
    response={200: ArticleDetailOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_upload_article_image(
    request, article_id: int, image: UploadedFile = File(...)
):
    try:
        article = Article.objects.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    if not (image.content_type or "").startswith("image/"):
        return 400, {"message": "Only image files can be uploaded."}

    try:
        article.image.save(image.name, image, save=True)
    except Exception as e:
        logger.error(f"Error uploading image for article {article_id}: {e}")
        return 500, {"message": "Error uploading image. Please try again."}

    invalidate_articles_cache()
    return 200, ArticleDetailOut.from_model(article)


@router.post(
    "/articles/{article_id}/publish",
    response={200: ArticleDetailOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_publish_article(request, article_id: int):
    try:
        article = Article.objects.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    article.status = Article.PUBLISHED
    article.save()
    invalidate_articles_cache()
    return 200, ArticleDetailOut.from_model(article)


@router.post(
    "/articles/{article_id}/unpublish",
    response={200: ArticleDetailOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_unpublish_article(request, article_id: int):
    try:
        article = Article.objects.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    article.status = Article.DRAFT
    article.save()
    invalidate_articles_cache()
    return 200, ArticleDetailOut.from_model(article)


@router.delete(
    "/articles/{article_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_delete_article(request, article_id: int):
    try:
        article = Article.objects.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    tag_ids = set(article.tags.values_list("id", flat=True))
    with transaction.atomic():
        article.delete()
        refresh_tag_usage(tag_ids)
    invalidate_articles_cache()
    return 200, {"message": "Article deleted successfully."}


"""
Categories
"""


@router.post(
    "/categories",
    response={201: CategoryOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_create_category(request, payload: CategoryCreateSchema):
    slug = generate_bengali_slug(payload.slug or payload.name)
    if not slug:
        return 400, {"message": "Category name must contain letters or digits."}
    if Category.objects.filter(slug=slug).exists():
        return 400, {"message": "A category with this slug already exists."}

    try:
        parent = resolve_category(payload.parent_id)
    except Category.DoesNotExist:
        return 404, {"message": "Parent category not found."}

    category = Category.objects.create(
        name=payload.name,
        slug=slug,
        description=payload.description,
        parent=parent,
        sort_order=payload.sort_order,
        is_active=payload.is_active,
    )
    return 201, CategoryOut.from_model(category)


@router.put(
    "/categories/{category_id}",
    response={200: CategoryOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_update_category(request, category_id: int, payload: CategoryUpdateSchema):
    try:
        category = Category.objects.get(pk=category_id)
    except Category.DoesNotExist:
        return 404, {"message": "Category not found."}

    data = payload.dict(exclude_unset=True)
    if "parent_id" in data:
        parent_id = data.pop("parent_id")
        if parent_id == category.id:
            return 400, {"message": "A category cannot be its own parent."}
        try:
            category.parent = resolve_category(parent_id)
        except Category.DoesNotExist:
            return 404, {"message": "Parent category not found."}

    for field, value in data.items():
        setattr(category, field, value)
    category.save()
    invalidate_articles_cache()
    return 200, CategoryOut.from_model(category)


@router.delete(
    "/categories/{category_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_delete_category(request, category_id: int):
    deleted, _ = Category.objects.filter(pk=category_id).delete()
    if not deleted:
        return 404, {"message": "Category not found."}
    invalidate_articles_cache()
    return 200, {"message": "Category deleted successfully."}


"""
Comment and review moderation
"""


@router.get(
    "/comments",
    response={200: List[AdminCommentOut], codes_4xx: Message, codes_5xx: Message},
)
def admin_list_comments(
    request, pending: bool = True, limit: int = 50, offset: int = 0
):
    offset = max(offset, 0)
    comments = Comment.objects.select_related("article").filter(is_deleted=False)
    if pending:
        comments = comments.filter(is_approved=False)
    limit = clamp_limit(limit, 50)
    comments = comments.order_by("-created_at")[offset : offset + limit]
    return 200, [AdminCommentOut.from_model(comment) for comment in comments]


@router.post(
    "/comments/{comment_id}/approve",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_approve_comment(request, comment_id: int):
    updated = Comment.objects.filter(pk=comment_id).update(is_approved=True)
    if not updated:
        return 404, {"message": "Comment not found."}
    return 200, {"message": "Comment approved."}


@router.delete(
    "/comments/{comment_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_delete_comment(request, comment_id: int):
    updated = Comment.objects.filter(pk=comment_id).update(is_deleted=True)
    if not updated:
        return 404, {"message": "Comment not found."}
    return 200, {"message": "Comment deleted successfully."}


@router.get(
    "/reviews",
    response={200: List[AdminReviewOut], codes_4xx: Message, codes_5xx: Message},
)
def admin_list_reviews(request, pending: bool = True, limit: int = 50, offset: int = 0):
    offset = max(offset, 0)
    reviews = Review.objects.select_related("user")
    if pending:
        reviews = reviews.filter(is_approved=False)
    reviews = reviews.order_by("-created_at")[offset : offset + clamp_limit(limit, 50)]
    return 200, [AdminReviewOut.from_model(review) for review in reviews]


@router.post(
    "/reviews/{review_id}/approve",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_approve_review(request, review_id: int):
    updated = Review.objects.filter(pk=review_id).update(is_approved=True)
    if not updated:
        return 404, {"message": "Review not found."}
    return 200, {"message": "Review approved."}


@router.delete(
    "/reviews/{review_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_delete_review(request, review_id: int):
    deleted, _ = Review.objects.filter(pk=review_id).delete()
    if not deleted:
        return 404, {"message": "Review not found."}
    return 200, {"message": "Review deleted successfully."}


"""
Breaking news
"""


@router.get(
    "/breaking-news",
    response={200: List[BreakingNewsOut], codes_4xx: Message, codes_5xx: Message},
)
def admin_list_breaking_news(request):
    return 200, [BreakingNewsOut.from_model(item) for item in BreakingNews.objects.all()]


@router.post(
    "/breaking-news",
    response={201: BreakingNewsOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_create_breaking_news(request, payload: BreakingNewsCreateSchema):
    if not payload.content.strip():
        return 400, {"message": "Content cannot be empty."}
    item = BreakingNews.objects.create(**payload.dict())
    return 201, BreakingNewsOut.from_model(item)


@router.put(
    "/breaking-news/{item_id}",
    response={200: BreakingNewsOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_update_breaking_news(
    request, item_id: int, payload: BreakingNewsUpdateSchema
):
    try:
        item = BreakingNews.objects.get(pk=item_id)
    except BreakingNews.DoesNotExist:
        return 404, {"message": "Breaking news not found."}

    for field, value in payload.dict(exclude_unset=True).items():
        setattr(item, field, value)
    item.save()
    return 200, BreakingNewsOut.from_model(item)


@router.delete(
    "/breaking-news/{item_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
)
def admin_delete_breaking_news(request, item_id: int):
    deleted, _ = BreakingNews.objects.filter(pk=item_id).delete()
    if not deleted:
        return 404, {"message": "Breaking news not found."}
    return 200, {"message": "Breaking news deleted successfully."}
