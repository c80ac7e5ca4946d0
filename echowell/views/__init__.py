"""Pydantic schemas used as views in the MVC architecture."""

from .auth import LoginRequest, TokenResponse
from .chat import ChatMessage, ChatRequest, ChatResponse
from .common import ErrorResponse, SuccessResponse
from .conversations import (
    ConversationDetailResponse,
    ConversationSummaryResponse,
    MessageResponse,
)
from .goals import GoalCreateRequest, GoalResponse, GoalUpdateRequest
from .mood import (
    EmotionCount,
    MoodHistoryResponse,
    MoodLogRequest,
    MoodLogResponse,
    MoodStats,
)
from .music import MusicSessionRequest, MusicSessionResponse
from .summaries import (
    AnalyticsSummaryResponse,
    DailySummaryResponse,
    DailySummaryView,
    WeeklySummaryResponse,
)
from .users import (
    UserChangePasswordRequest,
    UserRegistrationRequest,
    UserRegistrationResponse,
    UserResponse,
    UserUpdateRequest,
)
from .voice import (
    EmotionalStateView,
    SpeechToTextResponse,
    TextToSpeechRequest,
    ToneAnalysisResponse,
    VoiceConversationResponse,
    VoiceToneLogResponse,
    VoiceToneResultView,
)

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "SuccessResponse",
    "ConversationDetailResponse",
    "ConversationSummaryResponse",
    "MessageResponse",
    "GoalCreateRequest",
    "GoalResponse",
    "GoalUpdateRequest",
    "EmotionCount",
    "MoodHistoryResponse",
    "MoodLogRequest",
    "MoodLogResponse",
    "MoodStats",
    "MusicSessionRequest",
    "MusicSessionResponse",
    "AnalyticsSummaryResponse",
    "DailySummaryResponse",
    "DailySummaryView",
    "WeeklySummaryResponse",
    "UserChangePasswordRequest",
    "UserRegistrationRequest",
    "UserRegistrationResponse",
    "UserResponse",
    "UserUpdateRequest",
    "EmotionalStateView",
    "SpeechToTextResponse",
    "TextToSpeechRequest",
    "ToneAnalysisResponse",
    "VoiceConversationResponse",
    "VoiceToneLogResponse",
    "VoiceToneResultView",
]
