import logging
from typing import List

from django.db import transaction
from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from articles.models import Article
from newsportal.schemas import Message
from polls.models import Poll, PollOption
from polls.schemas import PollCreateSchema, PollOut
from users.auth import AdminAuth

router = Router(tags=["Admin Polls"], auth=AdminAuth())

logger = logging.getLogger(__name__)


@router.get(
    "/polls", response={200: List[PollOut], codes_4xx: Message, codes_5xx: Message}
)
def admin_list_polls(request):
    polls = Poll.objects.prefetch_related("options").order_by("-created_at")
    return 200, [PollOut.from_model(poll) for poll in polls]


@router.post(
    "/polls", response={201: PollOut, codes_4xx: Message, codes_5xx: Message}
)
def admin_create_poll(request, payload: PollCreateSchema):
    options = [option.strip() for option in payload.options if option.strip()]
    if len(options) < 2:
        return 400, {"message": "A poll needs at least two options."}

    if (
        payload.article_id is not None
        and not Article.objects.filter(pk=payload.article_id).exists()
    ):
        return 404, {"message": "Article not found."}

    with transaction.atomic():
        poll = Poll.objects.create(
            question=payload.question,
            article_id=payload.article_id,
            is_featured=payload.is_featured,
            expires_at=payload.expires_at,
        )
        PollOption.objects.bulk_create(
            [PollOption(poll=poll, option_text=text) for text in options]
        )

    return 201, PollOut.from_model(poll)


@router.post(
    "/polls/{poll_id}/close",
    response={200: PollOut, codes_4xx: Message, codes_5xx: Message},
)
def admin_close_poll(request, poll_id: int):
    try:
        poll = Poll.objects.get(pk=poll_id)
    except Poll.DoesNotExist:
        return 404, {"message": "Poll not found."}

    poll.is_active = False
    poll.save(update_fields=["is_active", "updated_at"])
    return 200, PollOut.from_model(poll)


@router.delete(
    "/polls/{poll_id}", response={200: Message, codes_4xx: Message, codes_5xx: Message}
)
def admin_delete_poll(request, poll_id: int):
    deleted, _ = Poll.objects.filter(pk=poll_id).delete()
    if not deleted:
        return 404, {"message": "Poll not found."}
    return 200, {"message": "Poll deleted successfully."}
