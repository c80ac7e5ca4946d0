"""SQLAlchemy model for music therapy listening sessions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String

from echowell.models.base import Base, JsonColumnType


class MusicSession(Base):
    __tablename__ = "music_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    mood_before = Column(Integer, nullable=True)
    mood_after = Column(Integer, nullable=True)
    track_ids = Column(JsonColumnType, nullable=False, default=list)
    duration = Column(Float, nullable=False, default=0.0)
    session_type = Column(String(50), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


__all__ = ["MusicSession"]
