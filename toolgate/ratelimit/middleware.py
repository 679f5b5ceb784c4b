"""Edge guard middleware: origin policy and per-client rate limiting for API paths."""

from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from toolgate.edge.exceptions import EdgeRejection, OriginNotAllowedError
from toolgate.edge.origin import is_origin_allowed

from .exceptions import RateLimitExceededError
from .limiter import FixedWindowRateLimiter, retry_after_header

logger = structlog.get_logger(__name__)

API_PREFIX = "/api/"


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For entry, else the socket peer address."""
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        first = forwarded.split(",")[0].strip()
        return first or "unknown"
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rejection_response(exc: EdgeRejection, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message},
        headers=headers,
    )


class EdgeGuardMiddleware(BaseHTTPMiddleware):
    """Reject API requests from foreign origins or over-limit clients.

    Checks run in order (origin, then rate limit) and only for paths under
    /api/. Everything else passes through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: FixedWindowRateLimiter,
        allowed_origins: set[str] | None = None,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.allowed_origins = allowed_origins or set()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not request.url.path.startswith(API_PREFIX):
            return await call_next(request)

        origin = request.headers.get("origin")
        if not is_origin_allowed(origin, self.allowed_origins, request.headers.get("host")):
            logger.warning("origin_rejected", origin=origin, path=request.url.path)
            return rejection_response(OriginNotAllowedError(origin or ""))

        client_ip = get_client_ip(request)
        result = self.limiter.check(client_ip)
        if not result.allowed:
            logger.warning("rate_limited", client_ip=client_ip, path=request.url.path)
            exc = RateLimitExceededError(limit=result.limit, retry_after=result.retry_after)
            return rejection_response(exc, headers={"Retry-After": retry_after_header(result)})

        return await call_next(request)
