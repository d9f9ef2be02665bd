"""ORM model for board members (auth, reputation and membership level)."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from app.models.base import Base, utcnow


class User(Base):
    """
    Board member account.

    level: trainee, member, expert, moderator or admin. Only moderator and admin are
    authoritative (assigned by an operator); the other three are a cache of
    app.services.levels.classify and are reconciled on login and profile reads.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("reputation >= 0", name="ck_users_reputation_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar_url = Column(Text, nullable=True)
    reputation = Column(Integer, nullable=False, default=0)
    level = Column(String(16), nullable=False, default="trainee")
    login_count = Column(Integer, nullable=False, default=0)
    last_login_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    invited_by_user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
