"""SQLAlchemy model for application users."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import relationship

from echowell.models.base import Base


class UserStatus(str, Enum):
    """Enumeration of valid user lifecycle states."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class SubscriptionTier(str, Enum):
    """Enumeration of supported subscription tiers."""

    FREE = "free"
    PREMIUM = "premium"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    password_hash = Column(String(256), nullable=False)
    status = Column(
        SqlEnum(UserStatus, name="user_status"),
        nullable=False,
        default=UserStatus.ACTIVE,
    )
    subscription_tier = Column(
        SqlEnum(SubscriptionTier, name="subscription_tier"),
        nullable=False,
        default=SubscriptionTier.FREE,
    )
    image = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    conversations = relationship(
        "Conversation",
        back_populates="user",
        cascade="all",
    )
    conversation_metrics = relationship(
        "ConversationMetric",
        cascade="all",
    )
    mood_logs = relationship(
        "MoodLog",
        cascade="all",
    )
    goals = relationship(
        "TherapyGoal",
        cascade="all",
    )
    music_sessions = relationship(
        "MusicSession",
        cascade="all",
    )
    daily_summaries = relationship(
        "DailySummary",
        cascade="all",
    )
    voice_tone_logs = relationship(
        "VoiceToneLog",
        cascade="all",
    )


__all__ = ["User", "UserStatus", "SubscriptionTier"]
