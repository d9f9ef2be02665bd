"""Topic endpoints: listing, admitted creation, AI analysis storage, poll votes and favorites."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user, get_optional_user
from app.core.config import get_settings
from app.core.database import get_db
from app.models import User
from app.schemas.discussions import (
    AnalysisRequest,
    CreateTopicRequest,
    CreateTopicResponse,
    FavoriteResponse,
    PollVoteRequest,
    PollVoteResponse,
    SuccessResponse,
    TopicView,
)
from app.services.discussions import DiscussionService

router = APIRouter()


@router.get("", response_model=list[TopicView])
def list_topics(
    db: Annotated[Session, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
) -> list[TopicView]:
    """
    Every topic, newest first, with comments, stance tallies and poll counts.

    Send a Bearer token to also get your own comment votes, poll choice and favorites.
    """
    return DiscussionService(db, get_settings()).list_topics(viewer.id if viewer else None)


@router.post("", response_model=CreateTopicResponse)
def create_topic(
    body: CreateTopicRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CreateTopicResponse:
    """
    Create a discussion topic or poll.

    Rejected with 403 when the board's requirements are not met and with 429 once
    DAILY_TOPIC_LIMIT topics were created today.
    """
    created = DiscussionService(db, get_settings()).create_topic(
        current_user,
        title=body.title,
        description=body.description,
        category=body.category,
        topic_type=body.type,
        options=body.options,
    )
    return CreateTopicResponse(
        id=created.topic.id,
        topics_today=created.topics_today,
        daily_limit=created.daily_limit,
    )


@router.post("/{topic_id}/analysis", response_model=SuccessResponse)
def store_analysis(
    topic_id: int,
    body: AnalysisRequest,
    db: Annotated[Session, Depends(get_db)],
    _user: Annotated[User, Depends(get_current_user)],
) -> SuccessResponse:
    """Store the veracity summary generated by the AI service for this topic."""
    DiscussionService(db, get_settings()).store_analysis(topic_id, body.analysis)
    return SuccessResponse()


@router.post("/{topic_id}/poll/vote", response_model=PollVoteResponse)
def vote_poll(
    topic_id: int,
    body: PollVoteRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PollVoteResponse:
    option_id = DiscussionService(db, get_settings()).vote_poll(
        current_user.id, topic_id, body.option_id
    )
    return PollVoteResponse(option_id=option_id)


@router.post("/{topic_id}/favorite", response_model=FavoriteResponse)
def toggle_favorite(
    topic_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> FavoriteResponse:
    is_favorite = DiscussionService(db, get_settings()).toggle_favorite(current_user.id, topic_id)
    return FavoriteResponse(is_favorite=is_favorite)
