"""Schemas for mood logging and history."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MoodLogRequest(BaseModel):
    mood_score: int
    emotions: list[str] = Field(default_factory=list, max_length=20)
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("emotions")
    @classmethod
    def strip_emotions(cls, value: list[str]) -> list[str]:
        return [emotion.strip() for emotion in value if emotion and emotion.strip()]


class MoodLogResponse(BaseModel):
    id: int
    mood_score: int
    emotions: list[str]
    notes: Optional[str] = None
    logged_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EmotionCount(BaseModel):
    emotion: str
    count: int


class MoodStats(BaseModel):
    avg_mood: float = Field(serialization_alias="avgMood")
    total_logs: int = Field(serialization_alias="totalLogs")
    top_emotions: list[EmotionCount] = Field(serialization_alias="topEmotions")


class MoodHistoryResponse(BaseModel):
    logs: list[MoodLogResponse]
    stats: MoodStats


__all__ = [
    "EmotionCount",
    "MoodHistoryResponse",
    "MoodLogRequest",
    "MoodLogResponse",
    "MoodStats",
]
