"""Pydantic schemas for board access checks and daily posting usage."""

from typing import Literal

from pydantic import Field

from app.schemas.base import ApiModel

RequirementType = Literal["loginCount", "reputation", "level"]


class MissingRequirement(ApiModel):
    """One unmet board requirement with the value the user currently has."""

    type: RequirementType
    required: int | str
    current: int | str


class BoardAccessRequest(ApiModel):
    category: str = Field(..., min_length=1, max_length=50)


class BoardAccessResult(ApiModel):
    can_access: bool
    missing_requirements: list[MissingRequirement] = Field(default_factory=list)


class DailyTopicUsage(ApiModel):
    """Topics counted for the user today after a successful admission."""

    topic_count: int = Field(..., ge=0)
    limit: int = Field(..., ge=1)
