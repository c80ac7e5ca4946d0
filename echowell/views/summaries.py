"""Schemas for daily, weekly and analytics summaries."""

from __future__ import annotations

from datetime import date as Date
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class DailySummaryView(BaseModel):
    id: int
    date: Date
    conversation_count: int
    total_messages: int
    avg_mood_score: Optional[float] = None
    dominant_emotions: dict[str, int]
    topics_discussed: list[str]
    conversation_quality: str
    ai_insights: Optional[str] = None
    voice_tone_analysis: dict[str, Any]
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DailySummaryResponse(BaseModel):
    summary: Optional[DailySummaryView] = None


class WeeklySummaryResponse(BaseModel):
    summary: Optional[dict[str, Any]] = None
    message: Optional[str] = None


class AnalyticsSummaryResponse(BaseModel):
    summaries: dict[str, Any]


__all__ = [
    "AnalyticsSummaryResponse",
    "DailySummaryResponse",
    "DailySummaryView",
    "WeeklySummaryResponse",
]
