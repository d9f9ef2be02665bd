"""Level classifier: derive a member's tier from account age and reputation.

trainee, member and expert are derived on every read; moderator and admin are
assigned by an operator and are never changed here. The stored users.level column
is a cache for the derived tiers and is reconciled on login and profile reads.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from app.core.config import get_settings
from app.models import User

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

LEVEL_TRAINEE = "trainee"
LEVEL_MEMBER = "member"
LEVEL_EXPERT = "expert"
LEVEL_MODERATOR = "moderator"
LEVEL_ADMIN = "admin"

# Ordering used when a board requires a minimum level.
LEVEL_RANK: dict[str, int] = {
    LEVEL_TRAINEE: 0,
    LEVEL_MEMBER: 1,
    LEVEL_EXPERT: 2,
    LEVEL_MODERATOR: 3,
    LEVEL_ADMIN: 4,
}

ADMINISTRATIVE_LEVELS = frozenset({LEVEL_MODERATOR, LEVEL_ADMIN})

SECONDS_PER_DAY = 86_400


def as_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (SQLite hands back naive values)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def account_age_days(created_at: datetime, now: datetime | None = None) -> int:
    """Whole days elapsed since created_at (floor)."""
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    elapsed = (now - as_utc(created_at)).total_seconds()
    return int(elapsed // SECONDS_PER_DAY)


def classify(
    user: User,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> str:
    """
    Return the user's level. First match wins:

    1. stored moderator/admin is kept as is;
    2. account younger than TRAINEE_PERIOD_DAYS -> trainee;
    3. reputation >= EXPERT_REPUTATION -> expert;
    4. member.
    """
    settings = settings or get_settings()
    if user.level in ADMINISTRATIVE_LEVELS:
        return user.level
    if account_age_days(user.created_at, now) < settings.TRAINEE_PERIOD_DAYS:
        return LEVEL_TRAINEE
    if (user.reputation or 0) >= settings.EXPERT_REPUTATION:
        return LEVEL_EXPERT
    return LEVEL_MEMBER


def is_admin(user: User, settings: "Settings | None" = None) -> bool:
    """
    Single admin predicate for quotas and board access.

    The stored admin level always counts. The reserved username counts too while
    ADMIN_USERNAME_BYPASS is enabled (legacy break-glass account).
    """
    settings = settings or get_settings()
    if user.level == LEVEL_ADMIN:
        return True
    return (
        settings.ADMIN_USERNAME_BYPASS
        and user.username == settings.RESERVED_ADMIN_USERNAME
    )


def reconcile_level(
    user: User,
    settings: "Settings | None" = None,
    now: datetime | None = None,
) -> bool:
    """Write the classified level into user.level if it drifted. Returns True when changed."""
    level = classify(user, settings, now)
    if user.level == level:
        return False
    logger.info(
        "Level reconciled",
        extra={"user_id": user.id, "old_level": user.level, "new_level": level},
    )
    user.level = level
    return True
