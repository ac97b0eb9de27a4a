import logging
from typing import List

from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from articles.models import BreakingNews
from articles.schemas import BreakingNewsOut
from newsportal.constants import clamp_limit
from newsportal.schemas import Message

router = Router(tags=["Breaking News"])

logger = logging.getLogger(__name__)


@router.get(
    "/", response={200: List[BreakingNewsOut], codes_4xx: Message, codes_5xx: Message}
)
def active_breaking_news(request, limit: int = 10):
    try:
        items = BreakingNews.objects.active().order_by("-priority", "-created_at")
        return 200, [
            BreakingNewsOut.from_model(item) for item in items[: clamp_limit(limit)]
        ]
    except Exception as e:
        logger.error(f"Error retrieving breaking news: {e}")
        return 500, {"message": "Error retrieving breaking news. Please try again."}
