"""Fixed-window rate limiter with in-memory storage."""

import math
import time
from typing import Callable, NamedTuple

from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    """Configuration for rate limiting.

    Attributes:
        window_ms: Length of one counting window in milliseconds.
        max_requests: Requests allowed per key within one window.
    """

    window_ms: int = Field(default=60000, gt=0, description="Window length in ms")
    max_requests: int = Field(default=120, gt=0, description="Requests per window")


class RateLimitResult(NamedTuple):
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed.
        limit: The rate limit.
        remaining: Remaining requests in window.
        retry_after: Seconds to wait if denied (0 if allowed).
    """

    allowed: bool
    limit: int
    remaining: int
    retry_after: float = 0.0


class RateLimitWindow:
    """Counter for one key: when its window started and how many requests it saw."""

    __slots__ = ("started_at", "count")

    def __init__(self, started_at: float, count: int = 1):
        self.started_at = started_at
        self.count = count


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class FixedWindowRateLimiter:
    """Per-key fixed-window counter.

    A key's count resets once a full window has elapsed since its window
    started. This is an approximation of a sliding window: a client can send
    up to twice the limit across a window boundary.

    State is a plain dict mutated without awaits, so it is safe on a single
    event loop without locking. Windows untouched for two window lengths are
    purged by a sweep that runs at most once per window.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = _wall_clock_ms,
    ):
        """Initialize rate limiter.

        Args:
            config: Window length and limit. Uses defaults if not provided.
            clock: Millisecond clock, injectable for tests.
        """
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._windows)

    def sweep(self, now: float | None = None) -> int:
        """Drop windows older than twice the window length.

        Returns:
            Number of purged keys.
        """
        now = self._clock() if now is None else now
        horizon = self.config.window_ms * 2
        stale_keys = [
            key for key, window in self._windows.items()
            if now - window.started_at > horizon
        ]
        for key in stale_keys:
            del self._windows[key]
        self._last_sweep = now
        return len(stale_keys)

    def check(self, key: str, now: float | None = None) -> RateLimitResult:
        """Count one request for key and decide whether it is allowed.

        Args:
            key: Rate limit key (client IP).
            now: Override timestamp in ms.

        Returns:
            RateLimitResult with status and retry hint.
        """
        now = self._clock() if now is None else now
        window_ms = self.config.window_ms
        limit = self.config.max_requests

        if now - self._last_sweep >= window_ms:
            self.sweep(now)

        window = self._windows.get(key)
        if window is None or now - window.started_at >= window_ms:
            self._windows[key] = RateLimitWindow(started_at=now)
            return RateLimitResult(allowed=True, limit=limit, remaining=limit - 1)

        window.count += 1
        if window.count > limit:
            retry_after = (window.started_at + window_ms - now) / 1000.0
            return RateLimitResult(
                allowed=False,
                limit=limit,
                remaining=0,
                retry_after=max(retry_after, 0.0),
            )

        return RateLimitResult(allowed=True, limit=limit, remaining=limit - window.count)


def retry_after_header(result: RateLimitResult) -> str:
    """Whole seconds for the Retry-After header, at least 1."""
    return str(max(1, math.ceil(result.retry_after)))
