import logging
from typing import List, Optional

from django.db import IntegrityError, transaction
from django.db.models import F
from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from newsportal.constants import clamp_limit
from newsportal.schemas import Message
from polls.models import Poll, PollOption, PollVote
from polls.schemas import MyVoteOut, PollOut, VoteIn
from users.achievements import check_and_award_achievements
from users.auth import JWTAuth

router = Router(tags=["Polls"])

logger = logging.getLogger(__name__)


def open_polls():
    return Poll.objects.open().prefetch_related("options")


@router.get("/", response={200: List[PollOut], codes_4xx: Message, codes_5xx: Message})
def list_polls(request, article_id: Optional[int] = None):
    polls = open_polls()
    if article_id is not None:
        polls = polls.filter(article_id=article_id)
    return 200, [PollOut.from_model(poll) for poll in polls.order_by("-created_at")]


@router.get(
    "/featured", response={200: List[PollOut], codes_4xx: Message, codes_5xx: Message}
)
def featured_polls(request, limit: int = 5):
    polls = open_polls().filter(is_featured=True).order_by("-created_at")[
        : clamp_limit(limit, default=5)
    ]
    return 200, [PollOut.from_model(poll) for poll in polls]


@router.get(
    "/{poll_id}", response={200: PollOut, codes_4xx: Message, codes_5xx: Message}
)
def get_poll(request, poll_id: int):
    try:
        poll = Poll.objects.prefetch_related("options").get(pk=poll_id)
    except Poll.DoesNotExist:
        return 404, {"message": "Poll not found."}
    return 200, PollOut.from_model(poll)


@router.post(
    "/{poll_id}/vote",
    response={200: PollOut, codes_4xx: Message, codes_5xx: Message},
    auth=JWTAuth(),
)
def vote(request, poll_id: int, payload: VoteIn):
    """
    Record the caller's vote. One vote per user per poll; the chosen
    option's counter is incremented in the same transaction.
    """
    try:
        poll = Poll.objects.get(pk=poll_id)
    except Poll.DoesNotExist:
        return 404, {"message": "Poll not found."}

    if not poll.is_open:
        return 400, {"message": "This poll is closed."}

    try:
        option = PollOption.objects.get(pk=payload.option_id, poll=poll)
    except PollOption.DoesNotExist:
        return 400, {"message": "Invalid option for this poll."}

    if PollVote.objects.filter(poll=poll, user=request.auth).exists():
        return 400, {"message": "You have already voted in this poll."}

    try:
        with transaction.atomic():
            PollVote.objects.create(poll=poll, option=option, user=request.auth)
            PollOption.objects.filter(pk=option.pk).update(
                vote_count=F("vote_count") + 1
            )
    except IntegrityError:
        return 400, {"message": "You have already voted in this poll."}
    except Exception as e:
        logger.error(f"Error recording vote on poll {poll_id}: {e}")
        return 500, {"message": "Error recording vote. Please try again."}

    check_and_award_achievements(request.auth)
    poll = Poll.objects.prefetch_related("options").get(pk=poll_id)
    return 200, PollOut.from_model(poll)


@router.get(
    "/{poll_id}/my-vote",
    response={200: MyVoteOut, codes_4xx: Message, codes_5xx: Message},
    auth=JWTAuth(),
)
def my_vote(request, poll_id: int):
    if not Poll.objects.filter(pk=poll_id).exists():
        return 404, {"message": "Poll not found."}

    option_id = (
        PollVote.objects.filter(poll_id=poll_id, user=request.auth)
        .values_list("option_id", flat=True)
        .first()
    )
    return 200, {"optionId": option_id}
