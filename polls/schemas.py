from datetime import datetime
from typing import List, Optional

from ninja import Field, Schema

from polls.models import Poll


class PollOptionOut(Schema):
    id: int
    optionText: str
    voteCount: int
    percentage: float


class PollOut(Schema):
    id: int
    question: str
    articleId: Optional[int] = None
    isActive: bool
    isFeatured: bool
    isOpen: bool
    totalVotes: int
    options: List[PollOptionOut]
    createdAt: datetime
    expiresAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, poll: Poll):
        options = list(poll.options.all())
        total_votes = sum(option.vote_count for option in options)
        return cls(
            id=poll.id,
            question=poll.question,
            articleId=poll.article_id,
            isActive=poll.is_active,
            isFeatured=poll.is_featured,
            isOpen=poll.is_open,
            totalVotes=total_votes,
            options=[
                PollOptionOut(
                    id=option.id,
                    optionText=option.option_text,
                    voteCount=option.vote_count,
                    percentage=(
                        round(option.vote_count / total_votes * 100, 1)
                        if total_votes
                        else 0
                    ),
                )
                for option in options
            ],
            createdAt=poll.created_at,
            expiresAt=poll.expires_at,
        )


class VoteIn(Schema):
    option_id: int


class MyVoteOut(Schema):
    optionId: Optional[int] = None


class PollCreateSchema(Schema):
    question: str
    options: List[str] = Field(..., min_length=2)
    article_id: Optional[int] = None
    is_featured: bool = False
    expires_at: Optional[datetime] = None
