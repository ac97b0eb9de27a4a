import logging
from typing import List

from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from articles.models import Article, Tag
from articles.schemas import ArticleListOut, PaginatedArticlesOut, TagOut
from articles.utils import decode_slug
from newsportal.constants import clamp_limit
from newsportal.schemas import Message

router = Router(tags=["Tags"])

logger = logging.getLogger(__name__)


@router.get("/", response={200: List[TagOut], codes_4xx: Message, codes_5xx: Message})
def list_tags(request):
    return 200, [TagOut.from_model(tag) for tag in Tag.objects.order_by("name")]


@router.get(
    "/popular", response={200: List[TagOut], codes_4xx: Message, codes_5xx: Message}
)
def popular_tags(request, limit: int = 20):
    tags = Tag.objects.order_by("-usage_count", "name")[: clamp_limit(limit, 20)]
    return 200, [TagOut.from_model(tag) for tag in tags]


@router.get(
    "/{slug}/articles",
    response={200: PaginatedArticlesOut, codes_4xx: Message, codes_5xx: Message},
)
def tag_articles(request, slug: str, limit: int = 10, offset: int = 0):
    try:
        tag = Tag.objects.get(slug=decode_slug(slug))
    except Tag.DoesNotExist:
        return 404, {"message": "Tag not found."}

    limit = clamp_limit(limit)
    offset = max(offset, 0)
    articles = Article.published.filter(tags=tag).order_by("-published_at")
    return 200, PaginatedArticlesOut(
        items=[
            ArticleListOut.from_model(article)
            for article in articles[offset : offset + limit]
        ],
        total=articles.count(),
        limit=limit,
        offset=offset,
    )
