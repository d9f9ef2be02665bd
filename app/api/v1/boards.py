"""Board pre-flight check: can the caller post to a category?"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_user
from app.core.config import get_settings
from app.core.database import get_db
from app.models import User
from app.schemas.boards import BoardAccessRequest, BoardAccessResult
from app.services.board_access import BoardAccessService

router = APIRouter()


@router.post("/check-access", response_model=BoardAccessResult)
def check_access(
    body: BoardAccessRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> BoardAccessResult:
    """
    Advisory check used by the UI before showing the create form. Topic creation
    runs the same check again, so this endpoint grants nothing by itself.
    """
    return BoardAccessService(db, get_settings()).check_access(current_user, body.category)
