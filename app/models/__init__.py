"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.board import BoardRequirement, DailyTopicTracking
from app.models.discussion import (
    Comment,
    CommentVote,
    Favorite,
    PollOption,
    PollVote,
    Topic,
)
from app.models.invitation import InvitationCode
from app.models.user import User

__all__ = [
    "Base",
    "BoardRequirement",
    "Comment",
    "CommentVote",
    "DailyTopicTracking",
    "Favorite",
    "InvitationCode",
    "PollOption",
    "PollVote",
    "Topic",
    "User",
]
