"""Fixed-window rate limiting."""

from __future__ import annotations

from echowell.services.rate_limiter import FixedWindowRateLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(3, 60, clock=clock)

    results = [limiter.check("ai:1") for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]
    assert results[-1].headers()["Retry-After"] == "60"
    assert "Retry-After" not in results[0].headers()
    assert results[0].headers()["X-RateLimit-Reset"] == "1060"


def test_window_resets_after_expiry() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 10, clock=clock)

    assert limiter.check("ai:1").allowed
    clock.now += 5
    blocked = limiter.check("ai:1")
    assert not blocked.allowed
    assert blocked.retry_after == 5

    clock.now += 6
    assert limiter.check("ai:1").allowed


def test_keys_are_independent() -> None:
    limiter = FixedWindowRateLimiter(1, 60, clock=FakeClock())

    assert limiter.check("ai:1").allowed
    assert limiter.check("ai:2").allowed
    assert not limiter.check("ai:1").allowed


def test_reset_and_cleanup() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 10, clock=clock)
    limiter.check("ai:1")
    limiter.check("ai:2")

    limiter.reset("ai:1")
    assert limiter.check("ai:1").allowed

    clock.now += 11
    assert limiter.cleanup() == 2


def test_check_prunes_expired_windows() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(1, 10, clock=clock)
    for user_id in range(5):
        limiter.check(f"ai:{user_id}")

    clock.now += 11
    limiter.check("ai:99")

    assert list(limiter._windows) == ["ai:99"]
    assert limiter.cleanup() == 0
