"""ORM models for board posting requirements and daily topic counters."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String

from app.models.base import Base


class BoardRequirement(Base):
    """Posting requirements for one board category. A category without a row is open."""

    __tablename__ = "board_requirements"

    board_category = Column(String(50), primary_key=True)
    min_level = Column(String(16), nullable=True)
    min_reputation = Column(Integer, nullable=True)
    min_login_count = Column(Integer, nullable=True)


class DailyTopicTracking(Base):
    """Topics created by a user on one calendar date; a new date starts a new row."""

    __tablename__ = "daily_topic_tracking"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    date = Column(Date, primary_key=True)
    topic_count = Column(Integer, nullable=False, default=0)
