"""Pydantic request/response schemas."""

from app.schemas.auth import (
    LoginRequest,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    RegistrationStatus,
    TokenResponse,
    UserProfile,
)
from app.schemas.boards import (
    BoardAccessRequest,
    BoardAccessResult,
    DailyTopicUsage,
    MissingRequirement,
)
from app.schemas.health import HealthResponse
from app.schemas.invitations import (
    GeneratedInvitation,
    InvitationCodeItem,
    InvitationValidation,
    MyCodesResponse,
)

__all__ = [
    "BoardAccessRequest",
    "BoardAccessResult",
    "DailyTopicUsage",
    "GeneratedInvitation",
    "HealthResponse",
    "InvitationCodeItem",
    "InvitationValidation",
    "LoginRequest",
    "MeResponse",
    "MissingRequirement",
    "MyCodesResponse",
    "RegisterRequest",
    "RegisterResponse",
    "RegistrationStatus",
    "TokenResponse",
    "UserProfile",
]
