"""Invitation codes: issuance under per-level quotas, validation and single-use redemption."""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from sqlalchemy import func, update
from sqlalchemy.orm import Session, aliased

from app.core.config import get_settings
from app.core.errors import (
    ConflictError,
    DependencyError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from app.models import InvitationCode, User
from app.schemas.invitations import (
    GeneratedInvitation,
    InvitationCodeItem,
    InvitationValidation,
)
from app.services.levels import (
    LEVEL_ADMIN,
    LEVEL_EXPERT,
    LEVEL_MEMBER,
    LEVEL_MODERATOR,
    LEVEL_TRAINEE,
    as_utc,
    classify,
    is_admin,
)

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Maximum number of active (unused, unexpired) codes per level; None = unbounded.
INVITATION_QUOTAS: dict[str, int | None] = {
    LEVEL_TRAINEE: 0,
    LEVEL_MEMBER: 3,
    LEVEL_EXPERT: 10,
    LEVEL_MODERATOR: 20,
    LEVEL_ADMIN: None,
}

# 6 random bytes -> 12 uppercase hex characters.
CODE_BYTES = 6
MAX_MINT_ATTEMPTS = 10

REASON_NOT_FOUND = "not found"
REASON_ALREADY_USED = "already used"
REASON_EXPIRED = "expired"


def normalize_code(code: str) -> str:
    return code.strip().upper()


def raise_for_reason(reason: str | None) -> None:
    """Turn a failed validation reason into the matching service error."""
    if reason == REASON_NOT_FOUND:
        raise NotFoundError("INVITATION_NOT_FOUND", "Invitation code does not exist.")
    if reason == REASON_ALREADY_USED:
        raise ConflictError("INVITATION_ALREADY_USED", "This invitation code has already been used.")
    if reason == REASON_EXPIRED:
        raise InvalidInputError("INVITATION_EXPIRED", "This invitation code has expired.")
    raise InvalidInputError("INVITATION_INVALID", "Invitation code is not valid.")


class InvitationService:
    """Issues and redeems invitation codes against the given session."""

    def __init__(self, db: Session, settings: "Settings | None" = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    def max_codes_for(self, user: User, now: datetime | None = None) -> int | None:
        """Active-code quota for the user's current level; None means unbounded."""
        if is_admin(user, self.settings):
            return None
        return INVITATION_QUOTAS[classify(user, self.settings, now)]

    def count_active(self, user_id: int, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        return (
            self.db.query(func.count(InvitationCode.code))
            .filter(
                InvitationCode.created_by_user_id == user_id,
                InvitationCode.is_used.is_(False),
                InvitationCode.expires_at > now,
            )
            .scalar()
        ) or 0

    def generate(self, user_id: int, now: datetime | None = None) -> GeneratedInvitation:
        """
        Mint a new code for user_id and commit it.

        Raises NotFoundError for an unknown user and PermissionDeniedError with code
        INSUFFICIENT_REPUTATION, LEVEL_TOO_LOW or QUOTA_EXCEEDED. The issuer row stays
        locked until commit so concurrent requests cannot both pass the quota check.
        """
        now = now or datetime.now(timezone.utc)
        user = (
            self.db.query(User)
            .filter(User.id == user_id)
            .with_for_update()
            .first()
        )
        if user is None:
            raise NotFoundError("USER_NOT_FOUND", "User not found.")

        required = self.settings.INVITATION_MIN_REPUTATION
        if user.reputation < required:
            raise PermissionDeniedError(
                "INSUFFICIENT_REPUTATION",
                f"Reputation of at least {required} is required to generate invitation codes.",
                current_reputation=user.reputation,
                required_reputation=required,
            )

        admin = is_admin(user, self.settings)
        if not admin and classify(user, self.settings, now) == LEVEL_TRAINEE:
            raise PermissionDeniedError(
                "LEVEL_TOO_LOW",
                "Trainees cannot generate invitation codes. Trainees are upgraded "
                f"automatically after {self.settings.TRAINEE_PERIOD_DAYS} days.",
                current_level=LEVEL_TRAINEE,
                required_level=LEVEL_MEMBER,
            )

        max_codes = self.max_codes_for(user, now)
        active = self.count_active(user.id, now)
        if max_codes is not None and active >= max_codes:
            raise PermissionDeniedError(
                "QUOTA_EXCEEDED",
                f"You already have {active} active invitation codes (maximum {max_codes}).",
                active_codes=active,
                max_codes=max_codes,
            )

        invite = InvitationCode(
            code=self._mint_unique_code(),
            created_by_user_id=user.id,
            created_at=now,
            expires_at=now + timedelta(days=self.settings.INVITATION_EXPIRY_DAYS),
            is_used=False,
        )
        self.db.add(invite)
        self.db.commit()
        logger.info(
            "Invitation code generated",
            extra={"user_id": user_id, "active_codes": active + 1, "max_codes": max_codes},
        )
        return GeneratedInvitation(
            code=invite.code,
            expires_at=as_utc(invite.expires_at),
            active_codes=active + 1,
            max_codes=max_codes,
        )

    def _mint_unique_code(self) -> str:
        for _ in range(MAX_MINT_ATTEMPTS):
            code = secrets.token_hex(CODE_BYTES).upper()
            if self.db.get(InvitationCode, code) is None:
                return code
        logger.error("Could not mint a unique invitation code after %s attempts", MAX_MINT_ATTEMPTS)
        raise DependencyError("Could not allocate an invitation code. Please retry.")

    def validate(self, code: str, now: datetime | None = None) -> InvitationValidation:
        """Check whether code can be redeemed right now. Never writes."""
        normalized = normalize_code(code or "")
        if not normalized:
            raise InvalidInputError("CODE_REQUIRED", "Please provide an invitation code.")
        now = now or datetime.now(timezone.utc)
        invite = self.db.get(InvitationCode, normalized)
        if invite is None:
            return InvitationValidation(valid=False, reason=REASON_NOT_FOUND)
        if invite.is_used:
            return InvitationValidation(valid=False, reason=REASON_ALREADY_USED)
        if now > as_utc(invite.expires_at):
            return InvitationValidation(valid=False, reason=REASON_EXPIRED)
        return InvitationValidation(valid=True)

    def redeem(
        self,
        code: str,
        new_user_id: int,
        now: datetime | None = None,
    ) -> InvitationCode:
        """
        Mark code as used by new_user_id inside the caller's transaction (no commit).

        The update is conditional on is_used = false and expires_at >= now, so of two
        concurrent redemptions exactly one affects a row; the other gets ConflictError.
        """
        normalized = normalize_code(code or "")
        now = now or datetime.now(timezone.utc)
        result = self.db.execute(
            update(InvitationCode)
            .where(
                InvitationCode.code == normalized,
                InvitationCode.is_used.is_(False),
                InvitationCode.expires_at >= now,
            )
            .values(is_used=True, used_by_user_id=new_user_id, used_at=now)
            .execution_options(synchronize_session=False)
        )
        invite = self.db.get(InvitationCode, normalized, populate_existing=True)
        if result.rowcount == 1 and invite is not None:
            logger.info(
                "Invitation code redeemed",
                extra={"issuer_id": invite.created_by_user_id, "new_user_id": new_user_id},
            )
            return invite

        if invite is None:
            raise_for_reason(REASON_NOT_FOUND)
        if invite.is_used:
            raise_for_reason(REASON_ALREADY_USED)
        raise_for_reason(REASON_EXPIRED)

    def list_for(self, user_id: int) -> list[InvitationCodeItem]:
        """All codes issued by user_id, newest first."""
        redeemer = aliased(User)
        rows = (
            self.db.query(InvitationCode, redeemer.username)
            .outerjoin(redeemer, redeemer.id == InvitationCode.used_by_user_id)
            .filter(InvitationCode.created_by_user_id == user_id)
            .order_by(InvitationCode.created_at.desc())
            .all()
        )
        return [
            InvitationCodeItem(
                code=invite.code,
                created_at=as_utc(invite.created_at),
                expires_at=as_utc(invite.expires_at),
                used=invite.is_used,
                used_by_username=username,
            )
            for invite, username in rows
        ]
