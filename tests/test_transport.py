"""Tests for the JSON-RPC over HTTP transport."""

import asyncio
import json

import httpx
import pytest

from toolgate.exceptions import OperationCancelledError, OperationTimeoutError
from toolgate.gateway import JsonRpcTransport, TransportError
from toolgate.gateway.transport import resolve_outbound_url
from toolgate.protocol import ProtocolError, RpcError
from toolgate.registry import ServerConfig


def make_transport(handler, timeout_seconds: float = 5.0) -> JsonRpcTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return JsonRpcTransport(client, timeout_seconds=timeout_seconds)


SERVER = ServerConfig(id="mcp-alpha", name="Alpha", url="https://alpha.example.com/mcp", token="s3cret")


class TestOutboundUrl:
    """Tests for proxy URL resolution."""

    def test_direct(self):
        assert resolve_outbound_url("https://a.test/mcp", None) == ("https://a.test/mcp", False)

    def test_proxied(self):
        url, proxied = resolve_outbound_url("https://a.test/mcp?x=1", "https://proxy.test/")
        assert proxied is True
        assert url == "https://proxy.test/?url=https%3A%2F%2Fa.test%2Fmcp%3Fx%3D1"


class TestJsonRpcTransport:
    """Tests for JsonRpcTransport.call."""

    @pytest.mark.asyncio
    async def test_success_sends_bearer_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": seen["body"]["id"], "result": {"tools": []}})

        result = await make_transport(handler).call(SERVER, "tools/list", {})

        assert result.result == {"tools": []}
        assert result.proxied is False
        assert seen["auth"] == "Bearer s3cret"
        assert seen["body"]["method"] == "tools/list"

    @pytest.mark.asyncio
    async def test_notification_ignores_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "id" not in json.loads(request.content)
            return httpx.Response(202, content=b"")

        result = await make_transport(handler).call(
            SERVER, "notifications/initialized", expect_response=False
        )
        assert result.result is None

    @pytest.mark.asyncio
    async def test_proxy_is_reported(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.host == "proxy.test"
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {}})

        result = await make_transport(handler).call(
            SERVER, "initialize", {}, proxy_base_url="https://proxy.test"
        )
        assert result.proxied is True
        assert result.proxy_base_url == "https://proxy.test"

    @pytest.mark.asyncio
    async def test_error_envelope_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "Unknown tool: x"}}
            )

        with pytest.raises(RpcError) as exc_info:
            await make_transport(handler).call(SERVER, "tools/call", {"name": "x"})
        assert exc_info.value.rpc_code == -32601

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="internal")

        with pytest.raises(RpcError, match=r"MCP request failed \(500\): internal"):
            await make_transport(handler).call(SERVER, "tools/list", {})

    @pytest.mark.asyncio
    async def test_garbage_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        with pytest.raises(ProtocolError):
            await make_transport(handler).call(SERVER, "tools/list", {})

    @pytest.mark.asyncio
    async def test_unreachable_server(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_transport(handler).call(SERVER, "tools/list", {})
        assert exc_info.value.message.startswith(
            "No response from MCP server Alpha (https://alpha.example.com/mcp)"
        )

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {}})

        with pytest.raises(OperationTimeoutError, match="MCP request timed out after 50ms."):
            await make_transport(handler, timeout_seconds=0.05).call(SERVER, "tools/list", {})

    @pytest.mark.asyncio
    async def test_cancelled_before_send(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {}})

        cancel_event = asyncio.Event()
        cancel_event.set()
        with pytest.raises(OperationCancelledError):
            await make_transport(handler).call(SERVER, "tools/list", {}, cancel_event=cancel_event)
        assert calls == []
