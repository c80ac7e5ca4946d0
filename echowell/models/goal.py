"""SQLAlchemy model for therapy goals tracked by the user."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime
from sqlalchemy import Enum as SqlEnum
from sqlalchemy import ForeignKey, Integer, Text

from echowell.models.base import Base


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class TherapyGoal(Base):
    __tablename__ = "therapy_goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    goal_text = Column(Text, nullable=False)
    status = Column(
        SqlEnum(GoalStatus, name="goal_status"),
        nullable=False,
        default=GoalStatus.ACTIVE,
    )
    progress = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)


__all__ = ["TherapyGoal", "GoalStatus"]
