"""JSON-RPC over HTTP transport for configured tool servers."""

import asyncio
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from toolgate.protocol import decode_response, encode_request, error_from_http_status, raise_for_envelope
from toolgate.registry.schemas import ServerConfig
from toolgate.timeouts import run_with_timeout

from .exceptions import TransportError
from .schemas import RpcCallResult

logger = structlog.get_logger(__name__)

# Default timeout for tool server requests
DEFAULT_TIMEOUT_SECONDS = 15.0


def resolve_outbound_url(target_url: str, proxy_base_url: str | None) -> tuple[str, bool]:
    """Route a target through the outbound proxy when one is configured.

    Returns:
        The URL to request and whether it goes through the proxy.
    """
    if not proxy_base_url:
        return target_url, False
    return f"{proxy_base_url.rstrip('/')}/?url={quote(target_url, safe='')}", True


class JsonRpcTransport:
    """Sends single JSON-RPC requests to tool servers over HTTP POST."""

    def __init__(self, client: httpx.AsyncClient, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        """Initialize the transport.

        Args:
            client: Shared HTTP client.
            timeout_seconds: Fixed per-call timeout.
        """
        self.client = client
        self.timeout_seconds = timeout_seconds

    async def call(
        self,
        server: ServerConfig,
        method: str,
        params: Any | None = None,
        *,
        expect_response: bool = True,
        proxy_base_url: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> RpcCallResult:
        """Send one request and return its result.

        Args:
            server: Target server.
            method: JSON-RPC method.
            params: Method parameters.
            expect_response: False sends a notification and ignores the body.
            proxy_base_url: Optional outbound proxy.
            cancel_event: Optional caller cancellation signal.

        Returns:
            RpcCallResult with the JSON-RPC result (None for notifications).

        Raises:
            TransportError: If the server cannot be reached.
            RpcError: On non-2xx status or a JSON-RPC error envelope.
            ProtocolError: If the body is not a JSON-RPC response.
            OperationTimeoutError: If the call exceeds the timeout.
            OperationCancelledError: If the caller cancels.
        """
        request_url, proxied = resolve_outbound_url(server.url, proxy_base_url)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if server.token:
            headers["Authorization"] = f"Bearer {server.token}"

        body = encode_request(method, params, wants_response=expect_response)
        timeout_ms = int(self.timeout_seconds * 1000)

        async def _post() -> httpx.Response:
            return await self.client.post(request_url, content=body, headers=headers)

        try:
            response = await run_with_timeout(
                _post,
                timeout_seconds=self.timeout_seconds,
                timeout_message=f"MCP request timed out after {timeout_ms}ms.",
                cancel_event=cancel_event,
            )
        except httpx.RequestError as exc:
            logger.warning("mcp_server_unreachable", server_id=server.id, method=method, error=str(exc))
            raise TransportError(
                f"No response from MCP server {server.name} ({server.url}): "
                f"{exc or exc.__class__.__name__}",
                server_url=server.url,
            ) from exc

        if not response.is_success:
            raise error_from_http_status(response.status_code, response.content)

        used_proxy = proxy_base_url if proxied else None
        if not expect_response:
            return RpcCallResult(result=None, proxied=proxied, proxy_base_url=used_proxy)

        envelope = decode_response(response.content, expect_response=True)
        return RpcCallResult(
            result=raise_for_envelope(envelope),
            proxied=proxied,
            proxy_base_url=used_proxy,
        )
