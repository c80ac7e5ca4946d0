"""SQLAlchemy model for self-reported mood entries."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text

from echowell.models.base import Base, JsonColumnType


class MoodLog(Base):
    __tablename__ = "mood_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mood_score = Column(Integer, nullable=False)
    emotions = Column(JsonColumnType, nullable=False, default=list)
    notes = Column(Text, nullable=True)
    logged_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


__all__ = ["MoodLog"]
