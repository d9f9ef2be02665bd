"""ORM models for topics, comments, votes, polls and favorites."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from app.models.base import Base, utcnow


class Topic(Base):
    """Discussion topic or poll. credible/controversial votes tally comment stances."""

    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, index=True)
    type = Column(String(20), nullable=False, default="discussion")
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    author_name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    ai_analysis = Column(Text, nullable=True)
    is_analyzing = Column(Boolean, nullable=False, default=False)
    credible_votes = Column(Integer, nullable=False, default=0)
    controversial_votes = Column(Integer, nullable=False, default=0)


class Comment(Base):
    """Comment on a topic. Immutable once created; ip/country fields are moderator-only tags."""

    __tablename__ = "comments"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_comments_upvotes_non_negative"),
        CheckConstraint("downvotes >= 0", name="ck_comments_downvotes_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    author_name = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    parent_id = Column(Integer, ForeignKey("comments.id"), nullable=True)
    type = Column(String(20), nullable=False, default="general")
    stance = Column(String(20), nullable=False, default="neutral")
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    ip_address = Column(String(64), nullable=True)
    country = Column(String(100), nullable=True)
    region = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)


class CommentVote(Base):
    """Current vote of one voter on one comment ('up' or 'down'); no row means no vote."""

    __tablename__ = "comment_votes"
    __table_args__ = (
        CheckConstraint("vote_type IN ('up', 'down')", name="ck_comment_votes_vote_type"),
    )

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    comment_id = Column(Integer, ForeignKey("comments.id"), primary_key=True)
    vote_type = Column(String(10), nullable=False)


class PollOption(Base):
    """Option of a poll topic."""

    __tablename__ = "poll_options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    topic_id = Column(Integer, ForeignKey("topics.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    vote_count = Column(Integer, nullable=False, default=0)


class PollVote(Base):
    """The option a user voted for in a poll (one per user per poll)."""

    __tablename__ = "poll_votes"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    topic_id = Column(Integer, ForeignKey("topics.id"), primary_key=True)
    option_id = Column(Integer, ForeignKey("poll_options.id"), nullable=False)


class Favorite(Base):
    """A topic bookmarked by a user."""

    __tablename__ = "favorites"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    topic_id = Column(Integer, ForeignKey("topics.id"), primary_key=True)
