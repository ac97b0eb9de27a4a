"""
Likes and reader reviews of an article
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Avg, F
from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from articles.models import Article, Like, Review
from articles.schemas import (
    LikeStatusOut,
    ReviewCreateSchema,
    ReviewListOut,
    ReviewOut,
)
from newsportal.constants import clamp_limit
from newsportal.schemas import Message
from users.auth import JWTAuth, OptionalJWTAuth, get_current_user

router = Router(tags=["Likes and Reviews"])

logger = logging.getLogger(__name__)


@router.get(
    "/{article_id}/like",
    response={200: LikeStatusOut, codes_4xx: Message, codes_5xx: Message},
    auth=OptionalJWTAuth,
)
def like_status(request, article_id: int):
    try:
        article = Article.published.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    user = get_current_user(request)
    liked = bool(user) and Like.objects.filter(user=user, article=article).exists()
    return 200, {"liked": liked, "likeCount": article.like_count}


@router.post(
    "/{article_id}/like",
    response={200: LikeStatusOut, codes_4xx: Message, codes_5xx: Message},
    auth=JWTAuth(),
)
def toggle_like(request, article_id: int):
    if not Article.published.filter(pk=article_id).exists():
        return 404, {"message": "Article not found."}

    user = request.auth
    try:
        with transaction.atomic():
            deleted, _ = Like.objects.filter(user=user, article_id=article_id).delete()
            if deleted:
                Article.objects.filter(pk=article_id, like_count__gt=0).update(
                    like_count=F("like_count") - 1
                )
                liked = False
            else:
                Like.objects.create(user=user, article_id=article_id)
                Article.objects.filter(pk=article_id).update(
                    like_count=F("like_count") + 1
                )
                liked = True
    except IntegrityError:
        # A concurrent request already liked it
        liked = True
    except Exception as e:
        logger.error(f"Error toggling like on article {article_id}: {e}")
        return 500, {"message": "Error updating like. Please try again."}

    like_count = Article.objects.values_list("like_count", flat=True).get(
        pk=article_id
    )
    return 200, {"liked": liked, "likeCount": like_count}


@router.get(
    "/{article_id}/reviews",
    response={200: ReviewListOut, codes_4xx: Message, codes_5xx: Message},
)
def list_reviews(request, article_id: int, limit: int = 20, offset: int = 0):
    limit = clamp_limit(limit, default=20)
    offset = max(offset, 0)
    if not Article.published.filter(pk=article_id).exists():
        return 404, {"message": "Article not found."}

    reviews = Review.objects.filter(article_id=article_id, is_approved=True)
    average = reviews.aggregate(rating=Avg("rating"))["rating"] or 0
    page = reviews.select_related("user").order_by("-created_at")[
        offset : offset + limit
    ]
    return 200, ReviewListOut(
        items=[ReviewOut.from_model(review) for review in page],
        total=reviews.count(),
        averageRating=round(average, 1),
    )


@router.post(
    "/{article_id}/reviews",
    response={201: Message, codes_4xx: Message, codes_5xx: Message},
    auth=JWTAuth(),
)
def submit_review(request, article_id: int, payload: ReviewCreateSchema):
    try:
        article = Article.published.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    if Review.objects.filter(article=article, user=request.auth).exists():
        return 400, {"message": "You have already reviewed this article."}

    try:
        Review.objects.create(
            article=article,
            user=request.auth,
            rating=payload.rating,
            review_text=payload.review_text,
        )
    except IntegrityError:
        return 400, {"message": "You have already reviewed this article."}
    except Exception as e:
        logger.error(f"Error submitting review for article {article_id}: {e}")
        return 500, {"message": "Error submitting review. Please try again."}

    return 201, {
        "message": "রিভিউ সফলভাবে জমা হয়েছে। অনুমোদনের জন্য অপেক্ষা করুন।"
    }
