"""Pydantic schema for the health endpoint."""

from typing import Literal

from pydantic import Field

from app.schemas.base import ApiModel


class HealthResponse(ApiModel):
    """Liveness plus datastore reachability; invitations and posting fail closed without it."""

    status: Literal["ok", "degraded"] = Field(
        default="ok", description="degraded when the database is unreachable"
    )
    service: str = Field(default="truthcircle")
    environment: str = Field(description="APP_ENV (dev or prod)")
    database: Literal["connected", "disconnected"]
