"""Pydantic schemas for topics, comments, votes, polls and favorites."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.base import ApiModel

TopicType = Literal["discussion", "poll"]
CommentType = Literal["supplement", "refutation", "general"]
Stance = Literal["support", "oppose", "neutral"]
VoteType = Literal["up", "down"]


class CreateTopicRequest(ApiModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(default="", max_length=20_000)
    category: str = Field(..., min_length=1, max_length=50)
    type: TopicType = "discussion"
    options: list[str] = Field(default_factory=list, max_length=20)


class CreateTopicResponse(ApiModel):
    success: bool = True
    id: int
    topics_today: int
    daily_limit: int


class AnalysisRequest(ApiModel):
    """Opaque veracity summary produced by the external AI service."""

    analysis: str = Field(..., min_length=1, max_length=50_000)


class CreateCommentRequest(ApiModel):
    topic_id: int
    content: str = Field(..., min_length=1, max_length=10_000)
    parent_id: int | None = None
    type: CommentType = "general"
    stance: Stance = "neutral"


class CreateCommentResponse(ApiModel):
    success: bool = True
    id: int
    country: str | None = None


class VoteRequest(ApiModel):
    type: VoteType


class VoteResult(ApiModel):
    """Comment counters after a vote and the voter's resulting vote (None = no vote)."""

    comment_id: int
    upvotes: int
    downvotes: int
    user_vote: VoteType | None = None


class PollVoteRequest(ApiModel):
    option_id: int


class PollVoteResponse(ApiModel):
    success: bool = True
    option_id: int


class FavoriteResponse(ApiModel):
    success: bool = True
    is_favorite: bool


class SuccessResponse(ApiModel):
    success: bool = True


class PollOptionView(ApiModel):
    id: int
    text: str
    vote_count: int


class CommentView(ApiModel):
    """A comment as listed under its topic; user_vote is the viewer's own vote."""

    id: int
    topic_id: int
    author_id: int
    author_name: str
    content: str
    parent_id: int | None = None
    type: CommentType
    stance: Stance
    upvotes: int
    downvotes: int
    created_at: datetime
    country: str | None = None
    region: str | None = None
    city: str | None = None
    user_vote: VoteType | None = None


class TopicView(ApiModel):
    """
    Topic with its stance tallies, comments (oldest first) and poll options.

    user_poll_vote_id and is_favorite describe the viewer; they are empty for
    anonymous requests.
    """

    id: int
    title: str
    description: str
    category: str
    type: TopicType
    author_id: int
    author_name: str
    created_at: datetime
    ai_analysis: str | None = None
    is_analyzing: bool
    credible_votes: int
    controversial_votes: int
    options: list[PollOptionView] = Field(default_factory=list)
    user_poll_vote_id: int | None = None
    comments: list[CommentView] = Field(default_factory=list)
    is_favorite: bool = False
