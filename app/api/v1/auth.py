"""Registration, JWT login and auth dependencies (get_current_user, get_optional_user)."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import create_access_token, decode_access_token, verify_password
from app.models.user import User
from app.schemas.auth import (
    LoginRequest,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    RegistrationStatus,
    TokenResponse,
    UserProfile,
)
from app.services.accounts import load_profile, record_login
from app.services.registration import RegistrationService

router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")
    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Dependency: require valid Bearer JWT and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User | None:
    """Dependency for public reads: None without a token, 401 for a bad one."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> RegisterResponse:
    """
    Create an account. An invitation code is required once the early-access
    window (first EARLY_ACCESS_USER_LIMIT accounts) is over.
    """
    RegistrationService(db, get_settings()).register(
        username=body.username,
        email=body.email,
        password=body.password,
        invitation_code=body.invitation_code,
    )
    return RegisterResponse()


@router.get("/registration-status", response_model=RegistrationStatus)
def registration_status(
    db: Annotated[Session, Depends(get_db)],
) -> RegistrationStatus:
    """Whether signups currently need an invitation code and how many open slots remain."""
    return RegistrationService(db, get_settings()).registration_status()


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    user = db.query(User).filter(User.username == body.username).first()
    if user is None or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password.",
        )
    user = record_login(db, user, get_settings())
    token = create_access_token(sub=user.id, username=user.username, level=user.level)
    return TokenResponse(token=token, user=UserProfile.model_validate(user))


@router.get("/me", response_model=MeResponse)
def me(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> MeResponse:
    """Profile of the authenticated user with a freshly classified level."""
    user = load_profile(db, current_user, get_settings())
    return MeResponse(user=UserProfile.model_validate(user))
