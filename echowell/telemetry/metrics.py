"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

LOGIN_COUNTER = Counter(
    "app_logins_total",
    "Number of successful user login events",
)

VOICE_ANALYSIS_COUNTER = Counter(
    "voice_tone_analyses_total",
    "Completed voice tone analyses by detected tone",
    ("tone",),
)

VOICE_ANALYSIS_LATENCY = Histogram(
    "voice_tone_analysis_duration_seconds",
    "Wall time spent in the voice tone pipeline",
    buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0),
)

CRISIS_COUNTER = Counter(
    "companion_crisis_responses_total",
    "Chat turns answered with the crisis resources message",
)

LLM_FALLBACK_COUNTER = Counter(
    "companion_llm_fallbacks_total",
    "Responses built from canned text because the LLM was unavailable",
    ("feature",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=str(status_code),
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def increment_login() -> None:
    LOGIN_COUNTER.inc()


def observe_voice_analysis(tone: str, duration_seconds: float) -> None:
    """Record a finished voice tone analysis."""

    VOICE_ANALYSIS_COUNTER.labels(tone=tone or "neutral").inc()
    VOICE_ANALYSIS_LATENCY.observe(max(0.0, duration_seconds))


def increment_crisis() -> None:
    CRISIS_COUNTER.inc()


def increment_llm_fallback(feature: str) -> None:
    LLM_FALLBACK_COUNTER.labels(feature=feature).inc()
