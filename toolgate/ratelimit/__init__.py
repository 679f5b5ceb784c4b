"""Rate limiting module - fixed window per client."""

from .exceptions import RateLimitExceededError
from .limiter import (
    FixedWindowRateLimiter,
    RateLimitConfig,
    RateLimitResult,
    RateLimitWindow,
    retry_after_header,
)
from .middleware import EdgeGuardMiddleware, get_client_ip


__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitConfig",
    "RateLimitResult",
    "RateLimitWindow",
    "retry_after_header",
    "RateLimitExceededError",
    "EdgeGuardMiddleware",
    "get_client_ip",
]
