"""Telemetry helpers and metrics."""

from .metrics import (
    CRISIS_COUNTER,
    ERROR_COUNTER,
    LLM_FALLBACK_COUNTER,
    LOGIN_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    VOICE_ANALYSIS_COUNTER,
    increment_crisis,
    increment_llm_fallback,
    increment_login,
    observe_request,
    observe_voice_analysis,
)

__all__ = [
    "CRISIS_COUNTER",
    "ERROR_COUNTER",
    "LLM_FALLBACK_COUNTER",
    "LOGIN_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "VOICE_ANALYSIS_COUNTER",
    "increment_crisis",
    "increment_llm_fallback",
    "increment_login",
    "observe_request",
    "observe_voice_analysis",
]
