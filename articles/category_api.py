import logging
from typing import List

from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from articles.api import cached_article_list
from articles.cache import generate_articles_cache_key
from articles.models import Article, Category
from articles.schemas import CategoryOut, PaginatedArticlesOut
from articles.utils import decode_slug
from newsportal.constants import clamp_limit
from newsportal.schemas import Message

router = Router(tags=["Categories"])

logger = logging.getLogger(__name__)


@router.get(
    "/", response={200: List[CategoryOut], codes_4xx: Message, codes_5xx: Message}
)
def list_categories(request):
    try:
        categories = Category.objects.filter(is_active=True).order_by(
            "sort_order", "name"
        )
        return 200, [CategoryOut.from_model(category) for category in categories]
    except Exception as e:
        logger.error(f"Error retrieving categories: {e}")
        return 500, {"message": "Error retrieving categories. Please try again."}


@router.get(
    "/{slug}", response={200: CategoryOut, codes_4xx: Message, codes_5xx: Message}
)
def get_category(request, slug: str):
    try:
        category = Category.objects.get(slug=decode_slug(slug), is_active=True)
    except Category.DoesNotExist:
        return 404, {"message": "Category not found."}

    return 200, CategoryOut.from_model(category)


@router.get(
    "/{slug}/articles",
    response={200: PaginatedArticlesOut, codes_4xx: Message, codes_5xx: Message},
)
def category_articles(request, slug: str, limit: int = 10, offset: int = 0):
    slug = decode_slug(slug)
    if not Category.objects.filter(slug=slug, is_active=True).exists():
        return 404, {"message": "Category not found."}

    limit = clamp_limit(limit)
    offset = max(offset, 0)
    articles = Article.published.filter(category__slug=slug).order_by("-published_at")
    cache_key = generate_articles_cache_key(
        prefix="category", category=slug, limit=limit, offset=offset
    )
    return 200, cached_article_list(cache_key, articles, limit, offset)
