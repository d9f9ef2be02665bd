"""Invitation code endpoints: generate, validate and list the caller's codes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.core.database import get_db
from app.models import User
from app.schemas.invitations import (
    GeneratedInvitation,
    MyCodesResponse,
    ValidateInvitationRequest,
    ValidateInvitationResponse,
)
from app.services.invitations import InvitationService

router = APIRouter()


@router.post("/generate", response_model=GeneratedInvitation)
def generate_invitation(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> GeneratedInvitation:
    """
    Mint a 30-day invitation code. Requires reputation >= INVITATION_MIN_REPUTATION,
    a level above trainee, and fewer active codes than the level's quota.
    """
    return InvitationService(db, get_settings()).generate(current_user.id)


@router.post("/validate", response_model=ValidateInvitationResponse)
def validate_invitation(
    body: ValidateInvitationRequest,
    db: Annotated[Session, Depends(get_db)],
) -> ValidateInvitationResponse:
    """Live feedback for the registration form; never redeems the code."""
    result = InvitationService(db, get_settings()).validate(body.code)
    return ValidateInvitationResponse(valid=result.valid, error=result.reason)


@router.get("/my-codes", response_model=MyCodesResponse)
def my_codes(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MyCodesResponse:
    return MyCodesResponse(codes=InvitationService(db, get_settings()).list_for(current_user.id))
