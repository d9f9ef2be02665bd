"""In-memory SQLite database and model factories shared by the service and API tests."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.models import Base, BoardRequirement, Comment, InvitationCode, Topic, User

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_settings(**overrides: object) -> Settings:
    """Settings with defaults plus overrides (no .env lookup)."""
    return Settings(_env_file=None, **overrides)


def make_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_user(
    db: Session,
    username: str = "alice",
    reputation: int = 0,
    age_days: float = 10,
    level: str = "member",
    login_count: int = 0,
    now: datetime = NOW,
) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash="not-a-real-hash",
        reputation=reputation,
        level=level,
        login_count=login_count,
        created_at=now - timedelta(days=age_days),
    )
    db.add(user)
    db.commit()
    return user


def make_code(
    db: Session,
    owner: User,
    code: str,
    created_at: datetime = NOW,
    is_used: bool = False,
    expiry_days: int = 30,
) -> InvitationCode:
    invite = InvitationCode(
        code=code,
        created_by_user_id=owner.id,
        created_at=created_at,
        expires_at=created_at + timedelta(days=expiry_days),
        is_used=is_used,
    )
    db.add(invite)
    db.commit()
    return invite


def make_board(db: Session, category: str, **requirements: object) -> BoardRequirement:
    req = BoardRequirement(board_category=category, **requirements)
    db.add(req)
    db.commit()
    return req


def make_topic(db: Session, author: User, category: str = "Science") -> Topic:
    topic = Topic(
        title="Do we only use 10% of our brains?",
        description="Popular claim",
        category=category,
        author_id=author.id,
        author_name=author.username,
    )
    db.add(topic)
    db.commit()
    return topic


def make_comment(db: Session, topic: Topic, author: User, stance: str = "neutral") -> Comment:
    comment = Comment(
        topic_id=topic.id,
        author_id=author.id,
        author_name=author.username,
        content="fMRI scans show most regions are active.",
        stance=stance,
    )
    db.add(comment)
    db.commit()
    return comment
