"""Credential-substituting passthrough to the OpenRouter completions API."""

import json
from typing import Any

import httpx
import structlog
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.datastructures import Headers

from toolgate.exceptions import OperationTimeoutError
from toolgate.timeouts import run_with_timeout

from .exceptions import (
    EndpointMethodNotAllowedError,
    ModelNotAllowedError,
    UnsupportedEndpointError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from .models import MANAGED_API_KEY_SENTINEL, is_curated_model_id

logger = structlog.get_logger(__name__)

PASSTHROUGH_PREFIX = "/api/openrouter/v1"

ROUTE_RULES: dict[str, frozenset[str]] = {
    "/chat/completions": frozenset({"POST"}),
    "/responses": frozenset({"POST"}),
    "/models": frozenset({"GET"}),
}

# Paths whose request body must name a curated model
MODEL_CHECKED_PATHS = frozenset({"/chat/completions", "/responses"})

COPIED_RESPONSE_HEADERS = ("content-type", "cache-control", "x-request-id")


def has_unmanaged_credentials(headers: Headers) -> bool:
    """True when the client supplied any credential other than the sentinel.

    Every value of a repeated header is checked, not just the first.
    """
    for value in headers.getlist("authorization"):
        value = value.strip()
        if value and value != f"Bearer {MANAGED_API_KEY_SENTINEL}":
            return True

    for value in headers.getlist("x-api-key"):
        value = value.strip()
        if value and value != MANAGED_API_KEY_SENTINEL:
            return True

    return False


def normalize_relative_path(path: str) -> str:
    """Strip the passthrough prefix, always returning a path starting with "/"."""
    relative = path[len(PASSTHROUGH_PREFIX):] if path.startswith(PASSTHROUGH_PREFIX) else "/"
    relative = relative or "/"
    return relative if relative.startswith("/") else f"/{relative}"


def check_route(relative_path: str, method: str) -> None:
    """Raise unless (relative_path, method) is in the route table."""
    allowed_methods = ROUTE_RULES.get(relative_path)
    if allowed_methods is None:
        raise UnsupportedEndpointError(relative_path)
    if method.upper() not in allowed_methods:
        raise EndpointMethodNotAllowedError(relative_path, method)


def check_model(relative_path: str, payload: Any) -> None:
    if relative_path not in MODEL_CHECKED_PATHS:
        return
    model = payload.get("model") if isinstance(payload, dict) else None
    if not is_curated_model_id(model):
        raise ModelNotAllowedError(model if isinstance(model, str) else "")


def copy_response_headers(upstream: httpx.Response) -> dict[str, str]:
    return {
        name: upstream.headers[name]
        for name in COPIED_RESPONSE_HEADERS
        if upstream.headers.get(name)
    }


async def forward_to_openrouter(
    client: httpx.AsyncClient,
    *,
    base_url: str,
    api_key: str,
    method: str,
    relative_path: str,
    query: str = "",
    payload: Any | None = None,
    accept: str | None = None,
    timeout_seconds: float = 45.0,
) -> StreamingResponse:
    """Forward one vetted request with the server's own credential.

    The upstream status and body are passed through unmodified; the body is
    streamed and the upstream response is closed once the client is done.

    Args:
        client: Shared HTTP client.
        base_url: Upstream API base URL without trailing slash.
        api_key: Server-held credential.
        method: HTTP method (already checked against the route table).
        relative_path: Path below the API base.
        query: Raw query string, without "?".
        payload: Parsed JSON body for POST requests.
        accept: Client Accept header.
        timeout_seconds: Timeout until upstream response headers arrive.

    Raises:
        UpstreamTimeoutError: If the upstream does not answer in time.
        UpstreamUnavailableError: If the upstream cannot be reached.
    """
    target = f"{base_url}{relative_path}"
    if query:
        target = f"{target}?{query}"

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": accept or "application/json",
    }
    content = json.dumps(payload).encode("utf-8") if payload is not None else None
    upstream_request = client.build_request(method, target, headers=headers, content=content)
    timeout_ms = int(timeout_seconds * 1000)

    async def _send() -> httpx.Response:
        return await client.send(upstream_request, stream=True)

    try:
        upstream = await run_with_timeout(
            _send,
            timeout_seconds=timeout_seconds,
            timeout_message=f"OpenRouter request timed out after {timeout_ms}ms.",
        )
    except (OperationTimeoutError, httpx.TimeoutException) as exc:
        logger.warning("openrouter_timeout", path=relative_path, timeout_ms=timeout_ms)
        raise UpstreamTimeoutError(timeout_ms) from exc
    except httpx.RequestError as exc:
        logger.warning("openrouter_unreachable", path=relative_path, error=str(exc))
        raise UpstreamUnavailableError(str(exc) or exc.__class__.__name__) from exc

    logger.info("openrouter_forwarded", path=relative_path, status_code=upstream.status_code)
    return StreamingResponse(
        upstream.aiter_bytes(),
        status_code=upstream.status_code,
        headers=copy_response_headers(upstream),
        background=BackgroundTask(upstream.aclose),
    )
