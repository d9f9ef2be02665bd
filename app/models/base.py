"""SQLAlchemy declarative Base and the timestamp default shared by all tables."""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    """Column default for created_at / used_at style timestamps (aware UTC)."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for users, invitations, boards and discussion tables."""
