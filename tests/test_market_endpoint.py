"""Tests for the managed market data JSON-RPC endpoint."""

import httpx
import pytest
from fastapi.testclient import TestClient

from toolgate.main import create_app
from toolgate.market.router import MANAGED_ENDPOINT_PATH
from toolgate.registry import MemorySettingsStore


class UpstreamRecorder:
    """Mock market REST source that records every request it receives."""

    def __init__(self, payload=None, status_code=200):
        self.payload = payload if payload is not None else [{"symbol": "GK"}, {"symbol": "NCBFG"}]
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def upstream():
    return UpstreamRecorder()


@pytest.fixture
def client(settings, upstream):
    app = create_app(
        settings,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        settings_store=MemorySettingsStore(),
    )
    return TestClient(app)


def rpc(client, method, params=None, request_id=1):
    payload = {"jsonrpc": "2.0", "method": method}
    if request_id is not None:
        payload["id"] = request_id
    if params is not None:
        payload["params"] = params
    return client.post(MANAGED_ENDPOINT_PATH, json=payload)


class TestHandshake:
    """Tests for initialize and tools/list."""

    def test_initialize_is_stable(self, client, upstream):
        first = rpc(client, "initialize", {})
        second = rpc(client, "initialize", {}, request_id="abc")

        assert first.status_code == 200
        assert first.json()["result"] == second.json()["result"]
        assert second.json()["id"] == "abc"
        result = first.json()["result"]
        assert result["protocolVersion"] == "2025-03-26"
        assert result["capabilities"] == {"tools": {"listChanged": False}}
        assert upstream.requests == []

    def test_tools_list(self, client):
        response = rpc(client, "tools/list")

        assert response.status_code == 200
        tools = response.json()["result"]["tools"]
        assert {tool["name"] for tool in tools} == {
            "list_companies",
            "get_company",
            "get_statement",
            "get_all_statements",
            "get_price_data",
        }
        assert all("inputSchema" in tool for tool in tools)

    def test_initialized_with_id_gets_empty_result(self, client):
        response = rpc(client, "notifications/initialized")
        assert response.status_code == 200
        assert response.json()["result"] == {}

    def test_notification_is_acknowledged_without_body(self, client, upstream):
        response = rpc(
            client,
            "tools/call",
            {"name": "get_company", "arguments": {"symbol": "GK"}},
            request_id=None,
        )
        assert response.status_code == 204
        assert response.content == b""
        assert upstream.requests == []


class TestProtocolErrors:
    """Tests for malformed and unknown requests."""

    def test_unknown_method(self, client):
        response = rpc(client, "resources/list")
        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == -32601
        assert error["message"] == "Method not found: resources/list"

    def test_parse_error(self, client):
        response = client.post(
            MANAGED_ENDPOINT_PATH,
            content=b"{nope",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["id"] is None
        assert body["error"]["code"] == -32700

    def test_deeply_nested_body_is_parse_error(self, settings, upstream):
        """Nesting past the decoder recursion limit answers -32700, not a server error."""
        app = create_app(
            settings.model_copy(update={"REQUEST_BODY_LIMIT_BYTES": 1024 * 1024}),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
            settings_store=MemorySettingsStore(),
        )
        response = TestClient(app).post(
            MANAGED_ENDPOINT_PATH,
            content=b"[" * 200000,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["id"] is None
        assert body["error"]["code"] == -32700
        assert upstream.requests == []

    def test_invalid_request(self, client):
        response = client.post(MANAGED_ENDPOINT_PATH, json={"jsonrpc": "2.0", "id": 1})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600

    def test_get_not_allowed(self, client):
        response = client.get(MANAGED_ENDPOINT_PATH)
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}

    def test_missing_tool_name(self, client):
        response = rpc(client, "tools/call", {"arguments": {}})
        assert response.status_code == 400
        assert response.json()["error"] == {"code": -32602, "message": "tools/call requires params.name"}

    def test_arguments_must_be_object(self, client):
        response = rpc(client, "tools/call", {"name": "get_company", "arguments": ["GK"]})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32602


class TestToolsCall:
    """Tests for tools/call against the mocked REST source."""

    def test_list_companies(self, client, upstream):
        response = rpc(client, "tools/call", {"name": "list_companies"})

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["content"] == [{"type": "text", "text": "list_companies: returned 2 records."}]
        assert result["structuredContent"] == [{"symbol": "GK"}, {"symbol": "NCBFG"}]
        assert len(upstream.requests) == 1
        assert str(upstream.requests[0].url) == "https://market.test/company"

    def test_limit_truncates_records(self, client, upstream):
        response = rpc(client, "tools/call", {"name": "list_companies", "arguments": {"limit": 1}})

        result = response.json()["result"]
        assert result["content"][0]["text"] == "list_companies: returned 1 record."
        assert result["structuredContent"] == [{"symbol": "GK"}]

    def test_object_payload_summary(self, settings):
        upstream = UpstreamRecorder(payload={"symbol": "GK", "name": "GraceKennedy"})
        app = create_app(
            settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
            settings_store=MemorySettingsStore(),
        )
        response = rpc(TestClient(app), "tools/call", {"name": "get_company", "arguments": {"symbol": "gk"}})

        result = response.json()["result"]
        assert result["content"][0]["text"] == "get_company: returned object response."
        assert str(upstream.requests[0].url) == "https://market.test/company/GK"

    def test_invalid_frequency_never_reaches_upstream(self, client, upstream):
        response = rpc(
            client,
            "tools/call",
            {
                "name": "get_statement",
                "arguments": {"symbol": "GK", "frequency": "Monthly", "statement_type": "IS"},
            },
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == -32000
        assert "frequency must be Annual or Quarterly" in error["message"]
        assert upstream.requests == []

    def test_unknown_tool_never_reaches_upstream(self, client, upstream):
        response = rpc(client, "tools/call", {"name": "get_weather", "arguments": {}})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Tool not found: get_weather"
        assert upstream.requests == []

    def test_reversed_date_range_never_reaches_upstream(self, client, upstream):
        response = rpc(
            client,
            "tools/call",
            {
                "name": "get_price_data",
                "arguments": {"symbol": "GK", "start_date": "2024-03-01", "end_date": "2024-01-01"},
            },
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "start_date must be on or before end_date."
        assert upstream.requests == []

    def test_upstream_failure_is_reported(self, settings):
        upstream = UpstreamRecorder(payload={"detail": "down"}, status_code=503)
        app = create_app(
            settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
            settings_store=MemorySettingsStore(),
        )
        response = rpc(TestClient(app), "tools/call", {"name": "get_company", "arguments": {"symbol": "GK"}})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == -32000
        assert error["message"].startswith("Jamaica market API failed (503)")

    def test_non_json_upstream(self, settings):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        app = create_app(
            settings,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            settings_store=MemorySettingsStore(),
        )
        response = rpc(TestClient(app), "tools/call", {"name": "get_company", "arguments": {"symbol": "GK"}})

        assert response.json()["error"]["message"] == "Jamaica market API returned non-JSON response."
