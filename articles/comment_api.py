import logging
from typing import List

from django.db.models import Prefetch
from ninja import Router
from ninja.responses import codes_4xx, codes_5xx

from articles.models import Article, Comment
from articles.schemas import CommentCreateSchema, CommentOut
from newsportal.schemas import Message
from users.auth import JWTAuth, OptionalJWTAuth, get_current_user
from users.models import Notification

router = Router(tags=["Comments"])

logger = logging.getLogger(__name__)


@router.get(
    "/{article_id}/comments",
    response={200: List[CommentOut], codes_4xx: Message, codes_5xx: Message},
    auth=OptionalJWTAuth,
)
def list_comments(request, article_id: int):
    if not Article.published.filter(pk=article_id).exists():
        return 404, {"message": "Article not found."}

    try:
        visible_replies = Comment.objects.filter(
            is_approved=True, is_deleted=False
        ).order_by("created_at")
        comments = (
            Comment.objects.filter(
                article_id=article_id,
                parent__isnull=True,
                is_approved=True,
                is_deleted=False,
            )
            .prefetch_related(
                Prefetch("replies", queryset=visible_replies),
                Prefetch("replies__replies", queryset=visible_replies),
            )
            .order_by("-created_at")
        )
        current_user = get_current_user(request)
        return 200, [
            CommentOut.from_model_with_replies(comment, current_user)
            for comment in comments
        ]
    except Exception as e:
        logger.error(f"Error retrieving comments for article {article_id}: {e}")
        return 500, {"message": "Error retrieving comments. Please try again."}


@router.post(
    "/{article_id}/comments",
    response={201: CommentOut, codes_4xx: Message, codes_5xx: Message},
    auth=JWTAuth(),
)
def create_comment(request, article_id: int, payload: CommentCreateSchema):
    user = request.auth
    try:
        article = Article.published.get(pk=article_id)
    except Article.DoesNotExist:
        return 404, {"message": "Article not found."}

    if not payload.content.strip():
        return 400, {"message": "Comment content cannot be empty."}

    parent = None
    if payload.parent_id:
        try:
            parent = Comment.objects.get(
                pk=payload.parent_id, article=article, is_deleted=False
            )
        except Comment.DoesNotExist:
            return 404, {"message": "Parent comment not found."}

    try:
        comment = Comment.objects.create(
            article=article,
            user=user,
            parent=parent,
            content=payload.content.strip(),
            author_name=payload.author_name or user.display_name,
        )
    except ValueError as e:
        return 400, {"message": str(e)}
    except Exception as e:
        logger.error(f"Error creating comment on article {article_id}: {e}")
        return 500, {"message": "Error creating comment. Please try again."}

    if parent and parent.user_id and parent.user_id != user.id:
        try:
            Notification.objects.create(
                user_id=parent.user_id,
                article=article,
                title="নতুন উত্তর",
                message=f"{comment.author_name} আপনার মন্তব্যের উত্তর দিয়েছেন।",
                notification_type="comment_replied",
                link=f"/article/{article.slug}#comment-{comment.id}",
            )
        except Exception as e:
            logger.error(f"Error creating reply notification: {e}")

    # A new comment has no replies yet
    return 201, CommentOut.from_model_with_replies(
        comment, user, depth=Comment.MAX_DEPTH
    )


@router.delete(
    "/comments/{comment_id}",
    response={200: Message, codes_4xx: Message, codes_5xx: Message},
    auth=JWTAuth(),
)
def delete_comment(request, comment_id: int):
    try:
        comment = Comment.objects.get(pk=comment_id, is_deleted=False)
    except Comment.DoesNotExist:
        return 404, {"message": "Comment not found."}

    if comment.user_id != request.auth.id:
        return 403, {"message": "You can only delete your own comments."}

    comment.is_deleted = True
    comment.save(update_fields=["is_deleted", "updated_at"])
    return 200, {"message": "Comment deleted successfully."}
