import logging
from datetime import timedelta
from typing import List, Optional

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone
from ninja import Query, Router
from ninja.responses import codes_4xx, codes_5xx

from articles.cache import generate_articles_cache_key
from articles.models import Article
from articles.schemas import (
    ArticleDetailOut,
    ArticleListOut,
    ArticleViewOut,
    PaginatedArticlesOut,
    TagOut,
)
from articles.utils import decode_slug
from newsportal.cache import CacheOperationError, get_cache, set_cache
from newsportal.constants import FIFTEEN_MINUTES, clamp_limit
from newsportal.schemas import Message
from users.achievements import check_and_award_achievements
from users.auth import OptionalJWTAuth, get_current_user
from users.models import ReadingHistory

router = Router(tags=["Articles"])

# Module-level logger
logger = logging.getLogger(__name__)


def cached_article_list(cache_key, queryset, limit, offset):
    """
    Serialize a slice of ``queryset`` as a paginated response, going through
    the cache first
    """
    cached_data = get_cache(cache_key)
    if cached_data is not None:
        logger.debug(f"Returning cached data for key: {cache_key}")
        return cached_data

    total = queryset.count()
    response_data = PaginatedArticlesOut(
        items=[
            ArticleListOut.from_model(article)
            for article in queryset[offset : offset + limit]
        ],
        total=total,
        limit=limit,
        offset=offset,
    )

    try:
        set_cache(cache_key, response_data, timeout=FIFTEEN_MINUTES)
    except CacheOperationError as e:
        logger.warning(f"Failed to cache articles list: {e}")

    return response_data


def simple_article_list(queryset, limit):
    return [ArticleListOut.from_model(article) for article in queryset[:limit]]


@router.get(
    "/", response={200: PaginatedArticlesOut, codes_4xx: Message, codes_5xx: Message}
)
def list_articles(
    request,
    category: Optional[str] = Query(None, description="Category slug"),
    tag: Optional[str] = Query(None, description="Tag slug"),
    featured: Optional[bool] = None,
    limit: int = 10,
    offset: int = 0,
):
    limit = clamp_limit(limit)
    offset = max(offset, 0)
    try:
        articles = Article.published.order_by("-published_at")

        if category:
            category = decode_slug(category)
            articles = articles.filter(category__slug=category)
        if tag:
            tag = decode_slug(tag)
            articles = articles.filter(tags__slug=tag)
        if featured is not None:
            articles = articles.filter(is_featured=featured)

        cache_key = generate_articles_cache_key(
            category=category, tag=tag, featured=featured, limit=limit, offset=offset
        )
        return 200, cached_article_list(cache_key, articles, limit, offset)
    except Exception as e:
        logger.error(f"Error retrieving articles: {e}")
        return 500, {"message": "Error retrieving articles. Please try again."}


@router.get(
    "/latest",
    response={200: List[ArticleListOut], codes_4xx: Message, codes_5xx: Message},
)
def latest_articles(request, limit: int = 10):
    try:
        articles = Article.published.order_by("-published_at")
        return 200, simple_article_list(articles, clamp_limit(limit))
    except Exception as e:
        logger.error(f"Error retrieving latest articles: {e}")
        return 500, {"message": "Error retrieving latest articles. Please try again."}


@router.get(
    "/popular",
    response={200: List[ArticleListOut], codes_4xx: Message, codes_5xx: Message},
)
def popular_articles(request, limit: int = 5):
    try:
        articles = Article.published.order_by("-view_count", "-published_at")
        return 200, simple_article_list(articles, clamp_limit(limit, default=5))
    except Exception as e:
        logger.error(f"Error retrieving popular articles: {e}")
        return 500, {"message": "Error retrieving popular articles. Please try again."}


@router.get(
    "/featured",
    response={200: List[ArticleListOut], codes_4xx: Message, codes_5xx: Message},
)
def featured_articles(request, limit: int = 5):
    try:
        articles = Article.published.filter(is_featured=True).order_by(
            "-published_at"
        )
        return 200, simple_article_list(articles, clamp_limit(limit, default=5))
    except Exception as e:
        logger.error(f"Error retrieving featured articles: {e}")
        return 500, {"message": "Error retrieving featured articles. Please try again."}


@router.get(
    "/trending",
    response={200: List[ArticleListOut], codes_4xx: Message, codes_5xx: Message},
)
def trending_articles(request, days: int = 7, limit: int = 5):
    try:
        since = timezone.now() - timedelta(days=max(days, 1))
        articles = Article.published.filter(published_at__gte=since).order_by(
            "-view_count", "-published_at"
        )
        return 200, simple_article_list(articles, clamp_limit(limit, default=5))
    except Exception as e:
        logger.error(f"Error retrieving trending articles: {e}")
        return 500, {"message": "Error retrieving trending articles. Please try again."}


@router.get(
    "/search",
    response={200: PaginatedArticlesOut, codes_4xx: Message, codes_5xx: Message},
)
def search_articles(
    request, q: Optional[str] = None, limit: int = 10, offset: int = 0
):
    if not q or not q.strip():
        return 400, {"message": "Search query is required."}

    limit = clamp_limit(limit)
    offset = max(offset, 0)
    query = q.strip()
    try:
        articles = Article.published.filter(
            Q(title__icontains=query)
            | Q(excerpt__icontains=query)
            | Q(content__icontains=query)
        ).order_by("-published_at")

        return 200, PaginatedArticlesOut(
            items=[
                ArticleListOut.from_model(article)
                for article in articles[offset : offset + limit]
            ],
            total=articles.count(),
            limit=limit,
            offset=offset,
        )
    except Exception as e:
        logger.error(f"Error searching articles for '{query}': {e}")
        return 500, {"message": "Error searching articles. Please try again."}


@router.get(
    "/{article_id}/related",
    response={200: List[ArticleListOut], codes_4xx: Message, codes_5xx: Message},
)
def related_articles(request, article_id: int, limit: int = 4):
    try:
        article = Article.published.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    if not article.category_id:
        return 200, []

    articles = (
        Article.published.filter(category_id=article.category_id)
        .exclude(pk=article.pk)
        .order_by("-published_at")
    )
    return 200, simple_article_list(articles, clamp_limit(limit, default=4))


@router.get(
    "/{article_id}/tags",
    response={200: List[TagOut], codes_4xx: Message, codes_5xx: Message},
)
def article_tags(request, article_id: int):
    try:
        article = Article.published.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    return 200, [TagOut.from_model(tag) for tag in article.tags.order_by("name")]


@router.post(
    "/{article_id}/view",
    response={200: ArticleViewOut, codes_4xx: Message, codes_5xx: Message},
    auth=OptionalJWTAuth,
)
def record_view(request, article_id: int):
    """
    Count a page view. Signed-in readers also get the read recorded in their
    history, which may unlock achievements.
    """
    if not Article.published.filter(pk=article_id).exists():
        return 404, {"message": "Article not found."}

    Article.objects.filter(pk=article_id).update(view_count=F("view_count") + 1)

    user = get_current_user(request)
    if user:
        try:
            with transaction.atomic():
                history, created = ReadingHistory.objects.get_or_create(
                    user=user, article_id=article_id
                )
                if not created:
                    history.read_count = F("read_count") + 1
                    history.last_read_at = timezone.now()
                    history.save(update_fields=["read_count", "last_read_at"])
        except Exception as e:
            logger.error(f"Error recording reading history for {user.id}: {e}")
        else:
            check_and_award_achievements(user)

    view_count = Article.objects.values_list("view_count", flat=True).get(
        pk=article_id
    )
    return 200, {"viewCount": view_count}


# Must stay last: a bare slug would otherwise shadow the static paths above
@router.get(
    "/{slug}", response={200: ArticleDetailOut, codes_4xx: Message, codes_5xx: Message}
)
def get_article(request, slug: str):
    slug = decode_slug(slug)
    try:
        article = Article.published.prefetch_related("tags").get(slug=slug)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}
    except Exception as e:
        logger.error(f"Error retrieving article {slug}: {e}")
        return 500, {"message": "Error retrieving article. Please try again."}

    return 200, ArticleDetailOut.from_model(article)
