"""Topic, comment, poll and favorite writes that feed the growth core, and the topic listing."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import InvalidInputError, NotFoundError
from app.models import Comment, CommentVote, Favorite, PollOption, PollVote, Topic, User
from app.schemas.discussions import CommentView, PollOptionView, TopicView
from app.services.board_access import BoardAccessService
from app.services.geolocation import GeoLocation
from app.services.reputation import ReputationLedger

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

TOPIC_DISCUSSION = "discussion"
TOPIC_POLL = "poll"
MIN_POLL_OPTIONS = 2


@dataclass(frozen=True)
class CreatedTopic:
    topic: Topic
    topics_today: int
    daily_limit: int


class DiscussionService:
    """Writes discussion content in one transaction per call."""

    def __init__(self, db: Session, settings: "Settings | None" = None) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.board_access = BoardAccessService(db, self.settings)
        self.ledger = ReputationLedger(db)

    def _get_topic(self, topic_id: int) -> Topic:
        topic = self.db.get(Topic, topic_id)
        if topic is None:
            raise NotFoundError("TOPIC_NOT_FOUND", "Topic not found.")
        return topic

    def create_topic(
        self,
        author: User,
        title: str,
        description: str,
        category: str,
        topic_type: str = TOPIC_DISCUSSION,
        options: list[str] | None = None,
        today: date | None = None,
    ) -> CreatedTopic:
        """
        Admit and insert a topic. The daily counter and the topic commit together.

        Polls need at least two non-blank options.
        """
        poll_options = [o.strip() for o in (options or []) if o and o.strip()]
        if topic_type == TOPIC_POLL and len(poll_options) < MIN_POLL_OPTIONS:
            raise InvalidInputError(
                "INVALID_POLL",
                f"A poll needs at least {MIN_POLL_OPTIONS} non-empty options.",
            )

        usage = self.board_access.admit_topic_creation(author, category, today)
        topic = Topic(
            title=title.strip(),
            description=(description or title).strip(),
            category=category,
            type=topic_type,
            author_id=author.id,
            author_name=author.username,
        )
        self.db.add(topic)
        self.db.flush()
        if topic_type == TOPIC_POLL:
            for text in poll_options:
                self.db.add(PollOption(topic_id=topic.id, text=text, vote_count=0))
        self.db.commit()
        logger.info(
            "Topic created",
            extra={
                "topic_id": topic.id,
                "user_id": author.id,
                "category": category,
                "topics_today": usage.topic_count,
            },
        )
        return CreatedTopic(topic=topic, topics_today=usage.topic_count, daily_limit=usage.limit)

    def store_analysis(self, topic_id: int, analysis: str) -> Topic:
        """Persist the opaque AI veracity summary and clear the analyzing flag."""
        topic = self._get_topic(topic_id)
        topic.ai_analysis = analysis
        topic.is_analyzing = False
        self.db.commit()
        return topic

    def create_comment(
        self,
        author: User,
        topic_id: int,
        content: str,
        stance: str = "neutral",
        comment_type: str = "general",
        parent_id: int | None = None,
        ip_address: str | None = None,
        location: GeoLocation | None = None,
    ) -> Comment:
        """Insert a comment and count its stance on the topic in the same transaction."""
        self._get_topic(topic_id)
        if parent_id is not None:
            parent = self.db.get(Comment, parent_id)
            if parent is None or parent.topic_id != topic_id:
                raise InvalidInputError(
                    "INVALID_PARENT", "Parent comment does not belong to this topic."
                )

        comment = Comment(
            topic_id=topic_id,
            author_id=author.id,
            author_name=author.username,
            content=content,
            parent_id=parent_id,
            type=comment_type,
            stance=stance,
            ip_address=ip_address,
            country=location.country if location else None,
            region=location.region if location else None,
            city=location.city if location else None,
        )
        self.db.add(comment)
        self.db.flush()
        self.ledger.record_comment_stance(topic_id, stance)
        self.db.commit()
        return comment

    def vote_poll(self, user_id: int, topic_id: int, option_id: int) -> int:
        """Record or move the user's poll vote. Re-voting the same option is a no-op."""
        option = self.db.get(PollOption, option_id)
        if option is None or option.topic_id != topic_id:
            raise NotFoundError("POLL_OPTION_NOT_FOUND", "Poll option not found for this topic.")

        existing = (
            self.db.query(PollVote)
            .filter(PollVote.user_id == user_id, PollVote.topic_id == topic_id)
            .with_for_update()
            .first()
        )
        if existing is not None and existing.option_id == option_id:
            self.db.commit()
            return option_id

        if existing is not None:
            self.db.execute(
                update(PollOption)
                .where(PollOption.id == existing.option_id)
                .values(vote_count=PollOption.vote_count - 1)
                .execution_options(synchronize_session=False)
            )
            existing.option_id = option_id
        else:
            self.db.add(PollVote(user_id=user_id, topic_id=topic_id, option_id=option_id))
        self.db.flush()
        self.db.execute(
            update(PollOption)
            .where(PollOption.id == option_id)
            .values(vote_count=PollOption.vote_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return option_id

    def toggle_favorite(self, user_id: int, topic_id: int) -> bool:
        """Add or remove a favorite; returns whether the topic is now a favorite."""
        self._get_topic(topic_id)
        existing = self.db.get(Favorite, (user_id, topic_id))
        if existing is not None:
            self.db.delete(existing)
            self.db.commit()
            return False
        self.db.add(Favorite(user_id=user_id, topic_id=topic_id))
        self.db.commit()
        return True

    def list_topics(self, viewer_id: int | None = None) -> list[TopicView]:
        """
        All topics, newest first, with comments (oldest first) and poll options.

        With a viewer the result also carries their comment votes, poll choice and
        favorites; anonymous listings leave those empty.
        """
        topics = self.db.query(Topic).order_by(Topic.created_at.desc(), Topic.id.desc()).all()
        if not topics:
            return []
        topic_ids = [t.id for t in topics]

        comments_by_topic: dict[int, list[Comment]] = defaultdict(list)
        for comment in (
            self.db.query(Comment)
            .filter(Comment.topic_id.in_(topic_ids))
            .order_by(Comment.created_at, Comment.id)
        ):
            comments_by_topic[comment.topic_id].append(comment)

        options_by_topic: dict[int, list[PollOption]] = defaultdict(list)
        for option in (
            self.db.query(PollOption)
            .filter(PollOption.topic_id.in_(topic_ids))
            .order_by(PollOption.id)
        ):
            options_by_topic[option.topic_id].append(option)

        comment_votes: dict[int, str] = {}
        poll_choices: dict[int, int] = {}
        favorites: set[int] = set()
        if viewer_id is not None:
            comment_votes = dict(
                self.db.query(CommentVote.comment_id, CommentVote.vote_type).filter(
                    CommentVote.user_id == viewer_id
                )
            )
            poll_choices = dict(
                self.db.query(PollVote.topic_id, PollVote.option_id).filter(
                    PollVote.user_id == viewer_id
                )
            )
            favorites = {
                topic_id
                for (topic_id,) in self.db.query(Favorite.topic_id).filter(
                    Favorite.user_id == viewer_id
                )
            }

        return [
            TopicView.model_validate(topic).model_copy(
                update={
                    "options": [PollOptionView.model_validate(o) for o in options_by_topic[topic.id]],
                    "user_poll_vote_id": poll_choices.get(topic.id),
                    "comments": [
                        CommentView.model_validate(c).model_copy(
                            update={"user_vote": comment_votes.get(c.id)}
                        )
                        for c in comments_by_topic[topic.id]
                    ],
                    "is_favorite": topic.id in favorites,
                }
            )
            for topic in topics
        ]
