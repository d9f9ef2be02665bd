"""Registration admission: early-access window, invitation redemption and account creation."""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import ConflictError, InvalidInputError, PermissionDeniedError, ServiceError
from app.core.security import hash_password
from app.models import User
from app.schemas.auth import RegistrationStatus
from app.services.invitations import InvitationService, raise_for_reason
from app.services.levels import LEVEL_TRAINEE

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={username}"


class RegistrationService:
    """Decides whether a signup is admitted and creates the account in one transaction."""

    def __init__(
        self,
        db: Session,
        settings: "Settings | None" = None,
        invitations: InvitationService | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.invitations = invitations or InvitationService(db, self.settings)

    def user_count(self) -> int:
        return self.db.query(func.count(User.id)).scalar() or 0

    def registration_status(self) -> RegistrationStatus:
        limit = self.settings.EARLY_ACCESS_USER_LIMIT
        count = self.user_count()
        is_early_access = count < limit
        return RegistrationStatus(
            invitation_required=not is_early_access,
            remaining_slots=max(0, limit - count),
            is_early_access=is_early_access,
        )

    def _ensure_unique(self, username: str, email: str) -> None:
        if self.db.query(User.id).filter(User.email == email).first() is not None:
            raise ConflictError("DUPLICATE_EMAIL", "This email is already registered.")
        if self.db.query(User.id).filter(User.username == username).first() is not None:
            raise ConflictError("DUPLICATE_USERNAME", "This username is already taken.")

    def register(
        self,
        username: str,
        email: str,
        password: str,
        invitation_code: str | None = None,
        now: datetime | None = None,
    ) -> User:
        """
        Create a trainee account, redeeming invitation_code in the same transaction.

        Without a code the signup is admitted only while fewer than
        EARLY_ACCESS_USER_LIMIT accounts exist.
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise InvalidInputError("MISSING_FIELDS", "Username, email and password are required.")
        code = (invitation_code or "").strip() or None
        now = now or datetime.now(timezone.utc)

        if code is not None:
            validation = self.invitations.validate(code, now)
            if not validation.valid:
                raise_for_reason(validation.reason)
        else:
            status = self.registration_status()
            if not status.is_early_access:
                raise PermissionDeniedError(
                    "INVITATION_REQUIRED",
                    "An invitation code is required to register.",
                    remaining_slots=0,
                )

        self._ensure_unique(username, email)

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            avatar_url=AVATAR_URL_TEMPLATE.format(username=username),
            level=LEVEL_TRAINEE,
            reputation=0,
            login_count=0,
            created_at=now,
        )
        try:
            self.db.add(user)
            self.db.flush()
            if code is not None:
                invite = self.invitations.redeem(code, user.id, now)
                user.invited_by_user_id = invite.created_by_user_id
            self.db.commit()
        except IntegrityError as e:
            # A concurrent signup took the email or username between the check and the insert.
            self.db.rollback()
            self._ensure_unique(username, email)
            raise ConflictError("DUPLICATE_ACCOUNT", "This account already exists.") from e
        except ServiceError:
            self.db.rollback()
            raise

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "invited_by_user_id": user.invited_by_user_id,
                "with_invitation": code is not None,
            },
        )
        return user
