"""Schemas for therapy goals."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from echowell.models import GoalStatus


class GoalCreateRequest(BaseModel):
    goal_text: str = Field(..., min_length=1, max_length=500)
    progress: int = Field(0, ge=0, le=100)


class GoalUpdateRequest(BaseModel):
    goal_text: Optional[str] = Field(None, min_length=1, max_length=500)
    status: Optional[GoalStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)


class GoalResponse(BaseModel):
    id: int
    goal_text: str
    status: GoalStatus
    progress: int
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = ["GoalCreateRequest", "GoalResponse", "GoalUpdateRequest"]
