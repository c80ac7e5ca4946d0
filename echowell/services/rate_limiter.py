"""In-memory fixed-window rate limiting for AI-backed endpoints."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from echowell.config.settings import settings


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: float = 0.0

    def headers(self) -> dict[str, str]:
        """Standard ``X-RateLimit-*`` headers, plus ``Retry-After`` when blocked."""

        values = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(math.ceil(self.reset_at))),
        }
        if not self.allowed:
            values["Retry-After"] = str(max(1, int(math.ceil(self.retry_after))))
        return values


class FixedWindowRateLimiter:
    """Count requests per key; the window opens on the key's first request."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, list[float]] = {}
        self._next_sweep = 0.0
        self._lock = threading.Lock()

    def check(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._drop_expired(now)
                self._next_sweep = now + self._window_seconds

            window = self._windows.get(key)
            if window is None or now > window[1]:
                window = [0, now + self._window_seconds]
                self._windows[key] = window

            count, reset_at = window
            if count >= self._max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=self._max_requests,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after=max(0.0, reset_at - now),
                )

            window[0] = count + 1
            return RateLimitResult(
                allowed=True,
                limit=self._max_requests,
                remaining=self._max_requests - int(window[0]),
                reset_at=reset_at,
            )

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()

    def cleanup(self) -> int:
        """Drop expired windows and return how many were removed."""

        with self._lock:
            return self._drop_expired(self._clock())

    def _drop_expired(self, now: float) -> int:
        expired = [key for key, (_, reset_at) in self._windows.items() if now > reset_at]
        for key in expired:
            del self._windows[key]
        return len(expired)


ai_rate_limiter = FixedWindowRateLimiter(
    settings.rate_limit.ai_requests,
    settings.rate_limit.window_seconds,
)


__all__ = ["FixedWindowRateLimiter", "RateLimitResult", "ai_rate_limiter"]
