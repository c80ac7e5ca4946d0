"""Service layer helpers for external integrations."""

from .audio_codec import AudioDecodingError, convert_to_pcm, pcm16_to_float
from .companion import (
    CompanionError,
    compute_conversation_metrics,
    extract_topics,
    get_chat_response,
    system_prompt_for_tone,
)
from .crisis import CRISIS_RESPONSE, detect_crisis, extract_mood_from_message
from .llm_client import BedrockLlmClient, LlmInvocationError, get_llm_client
from .rate_limiter import FixedWindowRateLimiter, RateLimitResult, ai_rate_limiter
from .speech import (
    SpeechResult,
    SpeechService,
    SpeechSynthesisError,
    get_speech_service,
    voice_settings_for_tone,
)
from .transcribe import (
    TranscribeService,
    TranscriptionError,
    TranscriptionResult,
    get_transcribe_service,
)

__all__ = [
    "AudioDecodingError",
    "convert_to_pcm",
    "pcm16_to_float",
    "CompanionError",
    "compute_conversation_metrics",
    "extract_topics",
    "get_chat_response",
    "system_prompt_for_tone",
    "CRISIS_RESPONSE",
    "detect_crisis",
    "extract_mood_from_message",
    "BedrockLlmClient",
    "LlmInvocationError",
    "get_llm_client",
    "FixedWindowRateLimiter",
    "RateLimitResult",
    "ai_rate_limiter",
    "SpeechService",
    "SpeechResult",
    "SpeechSynthesisError",
    "get_speech_service",
    "voice_settings_for_tone",
    "TranscribeService",
    "TranscriptionError",
    "TranscriptionResult",
    "get_transcribe_service",
]
