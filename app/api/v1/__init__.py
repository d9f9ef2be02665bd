"""API routes."""

from fastapi import APIRouter

from app.api.v1 import auth, boards, comments, health, invitations, topics

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
router.include_router(boards.router, prefix="/boards", tags=["boards"])
router.include_router(topics.router, prefix="/topics", tags=["topics"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
