"""SQLAlchemy model for persisted voice tone analyses."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from echowell.models.base import Base, JsonColumnType


class VoiceToneLog(Base):
    __tablename__ = "voice_tone_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    conversation_id = Column(
        Integer,
        ForeignKey("conversations.id", ondelete="SET NULL"),
        nullable=True,
    )
    tone_detected = Column(String(20), nullable=False)
    confidence_score = Column(Float, nullable=False)
    pitch_average = Column(Float, nullable=True)
    speech_rate = Column(Float, nullable=True)
    energy_level = Column(String(10), nullable=True)
    emotional_state = Column(JsonColumnType, nullable=False, default=dict)
    audio_features = Column(JsonColumnType, nullable=True)
    recorded_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


__all__ = ["VoiceToneLog"]
