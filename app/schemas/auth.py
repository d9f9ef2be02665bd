"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import Field

from app.core.security import (
    EMAIL_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from app.schemas.base import ApiModel


class RegisterRequest(ApiModel):
    """Signup form. invitationCode is optional during early access."""

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        description="Username (case-sensitive)",
    )
    email: str = Field(..., min_length=3, max_length=EMAIL_MAX_LEN, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    invitation_code: str | None = Field(default=None, max_length=32)


class RegisterResponse(ApiModel):
    success: bool = True
    message: str = "Registration successful."


class LoginRequest(ApiModel):
    """Credentials for login."""

    username: str = Field(
        ..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN, description="Username"
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class UserProfile(ApiModel):
    """Public profile of the authenticated user; level is always freshly classified."""

    id: int
    username: str
    email: str
    avatar_url: str | None = None
    level: str
    reputation: int
    login_count: int
    created_at: datetime
    invited_by_user_id: int | None = None


class TokenResponse(ApiModel):
    """JWT access token plus the profile of the user who logged in."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserProfile


class MeResponse(ApiModel):
    user: UserProfile


class RegistrationStatus(ApiModel):
    """Whether new signups currently need an invitation code."""

    invitation_required: bool
    remaining_slots: int = Field(..., ge=0, description="Early-access accounts left")
    is_early_access: bool
