"""Board access gate and daily topic limiter.

check_access is used both by the advisory pre-flight endpoint and by topic creation,
so the two paths cannot disagree. admit_topic_creation adds the daily cap on top and
reserves today's slot in the caller's transaction.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import DependencyError, PermissionDeniedError, RateLimitedError
from app.models import BoardRequirement, DailyTopicTracking, User
from app.schemas.boards import BoardAccessResult, DailyTopicUsage, MissingRequirement
from app.services.levels import LEVEL_RANK, classify, is_admin

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

REQUIREMENT_LOGIN_COUNT = "loginCount"
REQUIREMENT_REPUTATION = "reputation"
REQUIREMENT_LEVEL = "level"

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def describe_missing(missing: list[MissingRequirement]) -> str:
    """One combined human-readable message for all unmet requirements."""
    parts: list[str] = []
    for req in missing:
        if req.type == REQUIREMENT_LOGIN_COUNT:
            parts.append(f"requires {req.required} logins (currently {req.current})")
        elif req.type == REQUIREMENT_REPUTATION:
            parts.append(f"requires reputation {req.required} (currently {req.current})")
        else:
            parts.append(f"requires level {req.required} (currently {req.current})")
    return "Cannot post to this board: " + "; ".join(parts) + "."


class BoardAccessService:
    """Evaluates board requirements and the daily topic cap against the given session."""

    def __init__(self, db: Session, settings: "Settings | None" = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    def check_access(self, user: User, category: str) -> BoardAccessResult:
        """Evaluate every configured requirement of category; report all failures together."""
        requirement = self.db.get(BoardRequirement, category)
        if requirement is None or is_admin(user, self.settings):
            return BoardAccessResult(can_access=True)

        missing: list[MissingRequirement] = []
        if requirement.min_login_count is not None and user.login_count < requirement.min_login_count:
            missing.append(
                MissingRequirement(
                    type=REQUIREMENT_LOGIN_COUNT,
                    required=requirement.min_login_count,
                    current=user.login_count,
                )
            )
        if requirement.min_reputation is not None and user.reputation < requirement.min_reputation:
            missing.append(
                MissingRequirement(
                    type=REQUIREMENT_REPUTATION,
                    required=requirement.min_reputation,
                    current=user.reputation,
                )
            )
        if requirement.min_level is not None:
            level = classify(user, self.settings)
            if LEVEL_RANK[level] < LEVEL_RANK.get(requirement.min_level, 0):
                missing.append(
                    MissingRequirement(
                        type=REQUIREMENT_LEVEL,
                        required=requirement.min_level,
                        current=level,
                    )
                )
        return BoardAccessResult(can_access=not missing, missing_requirements=missing)

    def topics_today(self, user_id: int, today: date | None = None) -> int:
        today = today or date.today()
        row = self.db.get(DailyTopicTracking, (user_id, today), populate_existing=True)
        return row.topic_count if row is not None else 0

    def _reserve_daily_slot(self, user_id: int, today: date) -> int | None:
        """
        Atomically count one more topic for (user_id, today) while below the limit.

        Returns the new count, or None when the user already reached the limit.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise DependencyError(f"Daily topic tracking is not supported on {dialect}.")
        stmt = insert(DailyTopicTracking).values(user_id=user_id, date=today, topic_count=1)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DailyTopicTracking.user_id, DailyTopicTracking.date],
            set_={"topic_count": DailyTopicTracking.topic_count + 1},
            where=DailyTopicTracking.topic_count < self.settings.DAILY_TOPIC_LIMIT,
        ).returning(DailyTopicTracking.topic_count)
        return self.db.execute(stmt).scalar_one_or_none()

    def admit_topic_creation(
        self,
        user: User,
        category: str,
        today: date | None = None,
    ) -> DailyTopicUsage:
        """
        Gate topic creation: board requirements first, then the daily cap.

        The daily slot is reserved without committing; the caller commits it together
        with the topic insert (or rolls both back).
        """
        access = self.check_access(user, category)
        if not access.can_access:
            logger.info(
                "Topic creation rejected: board requirements",
                extra={"user_id": user.id, "category": category},
            )
            raise PermissionDeniedError(
                "INSUFFICIENT_PERMISSION",
                describe_missing(access.missing_requirements),
                missing_requirements=[
                    m.model_dump(by_alias=True) for m in access.missing_requirements
                ],
            )

        today = today or date.today()
        limit = self.settings.DAILY_TOPIC_LIMIT
        count = self._reserve_daily_slot(user.id, today)
        if count is None:
            current = self.topics_today(user.id, today)
            logger.info(
                "Topic creation rejected: daily limit",
                extra={"user_id": user.id, "topic_count": current, "limit": limit},
            )
            raise RateLimitedError(
                "DAILY_LIMIT_EXCEEDED",
                f"You can create at most {limit} topics per day.",
                current=current,
                limit=limit,
            )
        return DailyTopicUsage(topic_count=count, limit=limit)
