"""Schemas for music therapy sessions."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MusicSessionRequest(BaseModel):
    mood_before: Optional[int] = Field(None, ge=1, le=10)
    mood_after: Optional[int] = Field(None, ge=1, le=10)
    track_ids: list[str] = Field(default_factory=list, max_length=200)
    duration: float = Field(0.0, ge=0, le=480, description="Minutes listened")
    session_type: str = Field(..., min_length=1, max_length=50)


class MusicSessionResponse(BaseModel):
    id: int
    mood_before: Optional[int] = None
    mood_after: Optional[int] = None
    track_ids: list[str]
    duration: float
    session_type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


__all__ = ["MusicSessionRequest", "MusicSessionResponse"]
