"""SQLAlchemy models for the EchoWell backend."""

from .base import Base
from .conversation import Conversation, ConversationMetric, Message, MessageRole  # noqa: F401
from .goal import GoalStatus, TherapyGoal  # noqa: F401
from .log import RequestLog  # noqa: F401
from .mood_log import MoodLog  # noqa: F401
from .music_session import MusicSession  # noqa: F401
from .summary import DailySummary  # noqa: F401
from .user import User  # noqa: F401
from .voice_tone_log import VoiceToneLog  # noqa: F401

__all__ = [
    "Base",
    "User",
    "Conversation",
    "ConversationMetric",
    "Message",
    "MessageRole",
    "MoodLog",
    "MusicSession",
    "TherapyGoal",
    "GoalStatus",
    "DailySummary",
    "VoiceToneLog",
    "RequestLog",
]
