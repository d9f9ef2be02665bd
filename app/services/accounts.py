"""Login bookkeeping and profile reads (daily login count, level reconciliation)."""

import logging
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.models import User
from app.services.levels import reconcile_level

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def record_login(
    db: Session,
    user: User,
    settings: "Settings | None" = None,
    today: date | None = None,
) -> User:
    """
    Count a login at most once per calendar day and refresh the cached level.

    The increment is conditional on last_login_date, so simultaneous logins on the
    same day add one between them. Commits.
    """
    today = today or date.today()
    result = db.execute(
        update(User)
        .where(
            User.id == user.id,
            or_(User.last_login_date.is_(None), User.last_login_date != today),
        )
        .values(login_count=User.login_count + 1, last_login_date=today)
        .execution_options(synchronize_session=False)
    )
    db.refresh(user)
    reconcile_level(user, settings or get_settings())
    db.commit()
    if result.rowcount:
        logger.info(
            "Daily login counted",
            extra={"user_id": user.id, "login_count": user.login_count},
        )
    return user


def load_profile(db: Session, user: User, settings: "Settings | None" = None) -> User:
    """Reconcile the cached level before the profile is exposed; commits only on drift."""
    if reconcile_level(user, settings or get_settings()):
        db.commit()
    return user
