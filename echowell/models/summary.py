"""SQLAlchemy model for per-day wellbeing summaries."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from echowell.models.base import Base, JsonColumnType


class DailySummary(Base):
    __tablename__ = "daily_summaries"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_summaries_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False, index=True)
    conversation_count = Column(Integer, nullable=False, default=0)
    total_messages = Column(Integer, nullable=False, default=0)
    avg_mood_score = Column(Float, nullable=True)
    dominant_emotions = Column(JsonColumnType, nullable=False, default=dict)
    topics_discussed = Column(JsonColumnType, nullable=False, default=list)
    conversation_quality = Column(String(16), nullable=False, default="short")
    ai_insights = Column(Text, nullable=True)
    voice_tone_analysis = Column(JsonColumnType, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )


__all__ = ["DailySummary"]
