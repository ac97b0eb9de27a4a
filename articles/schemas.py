from datetime import datetime
from enum import Enum
from typing import List, Optional

from ninja import Field, Schema

from articles.models import Article, BreakingNews, Category, Comment, Review, Tag

"""
Article Related Schemas for serialization and deserialization.
Output schemas use the camelCase keys the frontend consumes.
"""


class ArticleStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class CategoryBrief(Schema):
    id: int
    name: str
    slug: str


class CategoryOut(Schema):
    id: int
    name: str
    slug: str
    description: str
    parentId: Optional[int] = None
    sortOrder: int
    isActive: bool

    @classmethod
    def from_model(cls, category: Category):
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            parentId=category.parent_id,
            sortOrder=category.sort_order,
            isActive=category.is_active,
        )


class TagOut(Schema):
    id: int
    name: str
    slug: str
    usageCount: int
    isTrending: bool

    @classmethod
    def from_model(cls, tag: Tag):
        return cls(
            id=tag.id,
            name=tag.name,
            slug=tag.slug,
            usageCount=tag.usage_count,
            isTrending=tag.is_trending,
        )


class ArticleListOut(Schema):
    id: int
    title: str
    slug: str
    excerpt: str
    imageUrl: Optional[str] = None
    author: str
    category: Optional[CategoryBrief] = None
    isFeatured: bool
    viewCount: int
    likeCount: int
    readTime: int
    publishedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, article: Article):
        return cls(**cls.base_fields(article))

    @staticmethod
    def base_fields(article: Article) -> dict:
        category = None
        if article.category_id:
            category = CategoryBrief(
                id=article.category.id,
                name=article.category.name,
                slug=article.category.slug,
            )
        return {
            "id": article.id,
            "title": article.title,
            "slug": article.slug,
            "excerpt": article.excerpt,
            "imageUrl": article.get_image_url(),
            "author": article.author,
            "category": category,
            "isFeatured": article.is_featured,
            "viewCount": article.view_count,
            "likeCount": article.like_count,
            "readTime": article.read_time,
            "publishedAt": article.published_at,
        }


class ArticleDetailOut(ArticleListOut):
    content: str
    status: str
    tags: List[TagOut]
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_model(cls, article: Article):
        return cls(
            **cls.base_fields(article),
            content=article.content,
            status=article.status,
            tags=[TagOut.from_model(tag) for tag in article.tags.all()],
            createdAt=article.created_at,
            updatedAt=article.updated_at,
        )


class PaginatedArticlesOut(Schema):
    items: List[ArticleListOut]
    total: int
    limit: int
    offset: int


class ArticleViewOut(Schema):
    viewCount: int


class ArticleCreateSchema(Schema):
    title: str
    content: str
    excerpt: Optional[str] = None
    author: Optional[str] = None
    category_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    status: ArticleStatus = ArticleStatus.DRAFT
    is_featured: bool = False


class ArticleUpdateSchema(Schema):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    author: Optional[str] = None
    category_id: Optional[int] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None
    status: Optional[ArticleStatus] = None
    is_featured: Optional[bool] = None


"""
Category, Tag and Breaking News Schemas
"""


class CategoryCreateSchema(Schema):
    name: str
    slug: Optional[str] = None
    description: str = ""
    parent_id: Optional[int] = None
    sort_order: int = 0
    is_active: bool = True


class CategoryUpdateSchema(Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class BreakingNewsOut(Schema):
    id: int
    content: str
    link: Optional[str] = None
    priority: int
    isActive: bool
    createdAt: datetime
    expiresAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, item: BreakingNews):
        return cls(
            id=item.id,
            content=item.content,
            link=item.link,
            priority=item.priority,
            isActive=item.is_active,
            createdAt=item.created_at,
            expiresAt=item.expires_at,
        )


class BreakingNewsCreateSchema(Schema):
    content: str
    link: Optional[str] = None
    priority: int = 0
    is_active: bool = True
    expires_at: Optional[datetime] = None


class BreakingNewsUpdateSchema(Schema):
    content: Optional[str] = None
    link: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None


"""
Comment, Like and Review Schemas
"""


class CommentOut(Schema):
    id: int
    content: str
    authorName: str
    userId: Optional[int] = None
    parentId: Optional[int] = None
    likeCount: int
    createdAt: datetime
    isAuthor: bool = False
    replies: List["CommentOut"] = Field(default_factory=list)

    @staticmethod
    def from_model_with_replies(comment: Comment, current_user=None, depth: int = 1):
        """
        Serialize a comment and its visible replies. ``depth`` is the level of
        ``comment`` in its thread; comments at Comment.MAX_DEPTH have no replies.
        """
        replies = []
        if depth < Comment.MAX_DEPTH:
            replies = [
                CommentOut.from_model_with_replies(reply, current_user, depth + 1)
                for reply in comment.replies.all()
                if reply.is_approved and not reply.is_deleted
            ]
        return CommentOut(
            id=comment.id,
            content=comment.content,
            authorName=comment.author_name,
            userId=comment.user_id,
            parentId=comment.parent_id,
            likeCount=comment.like_count,
            createdAt=comment.created_at,
            isAuthor=(
                comment.user_id == current_user.id if current_user else False
            ),
            replies=replies,
        )


class CommentCreateSchema(Schema):
    content: str
    parent_id: Optional[int] = Field(
        None, description="ID of the parent comment if it's a reply"
    )
    author_name: Optional[str] = None


class AdminCommentOut(Schema):
    id: int
    articleId: int
    articleTitle: str
    content: str
    authorName: str
    isApproved: bool
    isDeleted: bool
    createdAt: datetime

    @classmethod
    def from_model(cls, comment: Comment):
        return cls(
            id=comment.id,
            articleId=comment.article_id,
            articleTitle=comment.article.title,
            content=comment.content,
            authorName=comment.author_name,
            isApproved=comment.is_approved,
            isDeleted=comment.is_deleted,
            createdAt=comment.created_at,
        )


class LikeStatusOut(Schema):
    liked: bool
    likeCount: int


class ReviewOut(Schema):
    id: int
    rating: int
    reviewText: str
    userId: int
    authorName: str
    createdAt: datetime

    @classmethod
    def from_model(cls, review: Review):
        return cls(
            id=review.id,
            rating=review.rating,
            reviewText=review.review_text,
            userId=review.user_id,
            authorName=review.user.display_name,
            createdAt=review.created_at,
        )


class ReviewListOut(Schema):
    items: List[ReviewOut]
    total: int
    averageRating: float


class ReviewCreateSchema(Schema):
    rating: int = Field(..., ge=1, le=5)
    review_text: str = ""


class AdminReviewOut(ReviewOut):
    articleId: int
    isApproved: bool

    @classmethod
    def from_model(cls, review: Review):
        return cls(
            id=review.id,
            rating=review.rating,
            reviewText=review.review_text,
            userId=review.user_id,
            authorName=review.user.display_name,
            createdAt=review.created_at,
            articleId=review.article_id,
            isApproved=review.is_approved,
        )
