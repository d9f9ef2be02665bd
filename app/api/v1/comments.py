"""Comment endpoints: creation with stance tally and geolocation tag, and voting."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.core.database import get_db
from app.models import User
from app.schemas.discussions import (
    CreateCommentRequest,
    CreateCommentResponse,
    VoteRequest,
    VoteResult,
)
from app.services.discussions import DiscussionService
from app.services.geolocation import lookup_ip
from app.services.reputation import CommentVoteService

router = APIRouter()


def _client_ip(request: Request) -> str | None:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post("", response_model=CreateCommentResponse)
async def create_comment(
    body: CreateCommentRequest,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> CreateCommentResponse:
    """
    Post a comment. A support stance counts as a credible vote on the topic and an
    oppose stance as a controversial vote. The commenter's IP is tagged with a
    country when geolocation is enabled; lookup failures never block the comment.
    """
    settings = get_settings()
    ip = _client_ip(request)
    location = await lookup_ip(ip, settings)
    comment = DiscussionService(db, settings).create_comment(
        current_user,
        topic_id=body.topic_id,
        content=body.content,
        stance=body.stance,
        comment_type=body.type,
        parent_id=body.parent_id,
        ip_address=ip,
        location=location,
    )
    return CreateCommentResponse(id=comment.id, country=comment.country)


@router.post("/{comment_id}/vote", response_model=VoteResult)
def vote_comment(
    comment_id: int,
    body: VoteRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> VoteResult:
    """Up/down vote a comment; clicking the same vote again retracts it."""
    return CommentVoteService(db).cast_vote(current_user.id, comment_id, body.type)
