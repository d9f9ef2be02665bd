"""Pydantic schemas for invitation code issuance and validation."""

from datetime import datetime

from pydantic import Field

from app.schemas.base import ApiModel


class GeneratedInvitation(ApiModel):
    """A freshly minted code plus the issuer's quota usage after minting."""

    code: str
    expires_at: datetime
    active_codes: int = Field(..., ge=0)
    max_codes: int | None = Field(
        default=None,
        description="Active-code quota for the issuer's level; None means unbounded.",
    )


class ValidateInvitationRequest(ApiModel):
    code: str = Field(..., min_length=1, max_length=32)


class InvitationValidation(ApiModel):
    """Side-effect-free validation result; reason is set only when valid is False."""

    valid: bool
    reason: str | None = None


class ValidateInvitationResponse(ApiModel):
    valid: bool
    error: str | None = None


class InvitationCodeItem(ApiModel):
    code: str
    created_at: datetime
    expires_at: datetime
    used: bool
    used_by_username: str | None = None


class MyCodesResponse(ApiModel):
    codes: list[InvitationCodeItem]
