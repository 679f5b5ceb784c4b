"""HTTP client for the market data REST source."""

import asyncio
import json
from typing import Any

import httpx
import structlog

from toolgate.timeouts import run_with_timeout

from .exceptions import UpstreamError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 20.0


async def fetch_market_json(
    client: httpx.AsyncClient,
    base_url: str,
    path: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    cancel_event: asyncio.Event | None = None,
) -> Any:
    """Issue one GET against the market data source and parse the JSON body.

    Args:
        client: Shared HTTP client.
        base_url: Source base URL without trailing slash.
        path: Already-encoded endpoint path starting with "/".
        timeout_seconds: Fixed timeout for the whole request.
        cancel_event: Optional caller cancellation signal.

    Returns:
        The decoded JSON payload.

    Raises:
        UpstreamError: On non-2xx status, non-JSON body or connection failure.
        OperationTimeoutError: If the source does not answer in time.
    """
    target = f"{base_url}{path}"
    timeout_ms = int(timeout_seconds * 1000)
    timeout_message = f"Jamaica market API request timed out after {timeout_ms}ms."

    async def _get() -> httpx.Response:
        return await client.get(target, headers={"Accept": "application/json"})

    try:
        response = await run_with_timeout(
            _get,
            timeout_seconds=timeout_seconds,
            timeout_message=timeout_message,
            cancel_event=cancel_event,
        )
    except httpx.TimeoutException as exc:
        raise UpstreamError(timeout_message) from exc
    except httpx.RequestError as exc:
        logger.warning("market_upstream_unreachable", path=path, error=str(exc))
        raise UpstreamError(f"Jamaica market API request failed: {exc}") from exc

    body_text = response.text
    if not response.is_success:
        logger.warning("market_upstream_error", path=path, status_code=response.status_code)
        raise UpstreamError(
            f"Jamaica market API failed ({response.status_code}): {body_text[:200]}",
            status_code=response.status_code,
        )

    try:
        return json.loads(body_text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise UpstreamError("Jamaica market API returned non-JSON response.") from exc
