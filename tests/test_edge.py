"""Tests for the edge policy: origins, rate limits, body caps and static serving."""

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from toolgate.edge import allowed_origins_for, is_origin_allowed, normalize_origin
from toolgate.edge.static import cache_control_for, safe_join
from toolgate.main import create_app
from toolgate.market.router import MANAGED_ENDPOINT_PATH
from toolgate.ratelimit import FixedWindowRateLimiter, RateLimitConfig
from toolgate.registry import MemorySettingsStore


def build_client(settings, handler=None, rate_limiter=None) -> TestClient:
    handler = handler or (lambda request: httpx.Response(200, json={}))
    app = create_app(
        settings,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        rate_limiter=rate_limiter,
        settings_store=MemorySettingsStore(),
    )
    return TestClient(app)


INITIALIZE = {"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}}


class TestOriginPolicy:
    """Tests for origin normalization and matching."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("HTTPS://App.Example.com", "https://app.example.com"),
            ("https://app.example.com:443", "https://app.example.com"),
            ("http://localhost:3000/", "http://localhost:3000"),
            ("http://[::1]:8080", "http://[::1]:8080"),
            ("null", None),
            ("", None),
        ],
    )
    def test_normalize_origin(self, raw, expected):
        assert normalize_origin(raw) == expected

    def test_same_host_allowed_without_config(self):
        assert is_origin_allowed("https://app.test", set(), "app.test")
        assert is_origin_allowed("http://app.test", set(), "app.test")
        assert not is_origin_allowed("https://evil.test", set(), "app.test")

    def test_configured_list_wins(self):
        configured = {"https://ui.example.com"}
        assert allowed_origins_for(configured, "api.example.com") == {"https://ui.example.com"}
        assert not is_origin_allowed("https://api.example.com", configured, "api.example.com")

    def test_missing_origin_passes(self):
        assert is_origin_allowed(None, {"https://ui.example.com"}, "api.example.com")


class TestEdgeGuard:
    """Tests for the edge guard middleware wired into the app."""

    def test_foreign_origin_rejected(self, settings):
        client = build_client(settings)
        response = client.post(MANAGED_ENDPOINT_PATH, json=INITIALIZE, headers={"Origin": "https://evil.test"})
        assert response.status_code == 403
        assert response.json()["message"] == "Origin not allowed"

    def test_same_origin_and_no_origin_pass(self, settings):
        client = build_client(settings)
        assert client.post(MANAGED_ENDPOINT_PATH, json=INITIALIZE).status_code == 200
        response = client.post(
            MANAGED_ENDPOINT_PATH, json=INITIALIZE, headers={"Origin": "http://testserver"}
        )
        assert response.status_code == 200

    def test_rate_limit_returns_retry_after(self, settings):
        limiter = FixedWindowRateLimiter(RateLimitConfig(window_ms=60000, max_requests=1))
        client = build_client(settings, rate_limiter=limiter)

        assert client.post(MANAGED_ENDPOINT_PATH, json=INITIALIZE).status_code == 200
        response = client.post(MANAGED_ENDPOINT_PATH, json=INITIALIZE)

        assert response.status_code == 429
        assert response.json()["message"] == "Rate limit exceeded. Try again later."
        assert int(response.headers["Retry-After"]) >= 1

    def test_forwarded_for_is_the_rate_limit_key(self, settings):
        limiter = FixedWindowRateLimiter(RateLimitConfig(window_ms=60000, max_requests=1))
        client = build_client(settings, rate_limiter=limiter)

        first = client.post(MANAGED_ENDPOINT_PATH, json=INITIALIZE, headers={"X-Forwarded-For": "1.1.1.1"})
        second = client.post(
            MANAGED_ENDPOINT_PATH, json=INITIALIZE, headers={"X-Forwarded-For": "2.2.2.2, 10.0.0.1"}
        )
        assert first.status_code == 200
        assert second.status_code == 200

    def test_non_api_paths_not_limited(self, settings):
        limiter = FixedWindowRateLimiter(RateLimitConfig(window_ms=60000, max_requests=1))
        client = build_client(settings, rate_limiter=limiter)

        assert client.get("/healthz").status_code == 200
        assert client.get("/healthz").status_code == 200

    def test_oversized_body_rejected(self, settings):
        client = build_client(settings)
        response = client.post(
            MANAGED_ENDPOINT_PATH,
            content=b"{" + b" " * 2048 + b"}",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 413
        assert response.json()["message"] == "Request body exceeds limit (1024 bytes)."


class TestHealth:
    """Tests for the health endpoint."""

    def test_healthz(self, settings):
        response = build_client(settings).get("/healthz")
        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "service": "toolgate-backend",
            "openrouterConfigured": True,
            "curatedModelCount": 5,
        }


class TestStaticFiles:
    """Tests for the single-page app fallback."""

    @pytest.fixture
    def dist(self, settings) -> Path:
        dist = Path(settings.DIST_DIR)
        (dist / "assets").mkdir(parents=True)
        (dist / "index.html").write_text("<html>app</html>")
        (dist / "assets" / "main-abc12345.js").write_text("console.log(1)")
        (dist / "robots.txt").write_text("User-agent: *")
        return dist

    def test_root_serves_index(self, settings, dist):
        response = build_client(settings).get("/")
        assert response.status_code == 200
        assert response.text == "<html>app</html>"
        assert response.headers["cache-control"] == "no-cache"

    def test_client_route_falls_back_to_index(self, settings, dist):
        response = build_client(settings).get("/settings/integrations")
        assert response.status_code == 200
        assert response.text == "<html>app</html>"

    def test_hashed_asset_is_immutable(self, settings, dist):
        response = build_client(settings).get("/assets/main-abc12345.js")
        assert response.status_code == 200
        assert "immutable" in response.headers["cache-control"]

    def test_plain_file(self, settings, dist):
        response = build_client(settings).get("/robots.txt")
        assert response.text == "User-agent: *"
        assert response.headers["cache-control"] == "no-cache"

    def test_post_not_allowed(self, settings, dist):
        assert build_client(settings).post("/index.html").status_code == 405

    def test_missing_bundle(self, settings):
        assert build_client(settings).get("/").status_code == 404

    def test_unknown_api_route(self, settings, dist):
        response = build_client(settings).get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"error": "Unknown API route"}

    def test_safe_join_rejects_traversal(self, tmp_path):
        with pytest.raises(ValueError):
            safe_join(tmp_path, "/../etc/passwd")
        assert safe_join(tmp_path, "/a/b.txt") == (tmp_path / "a" / "b.txt").resolve()

    def test_cache_control(self):
        assert cache_control_for("/assets/index-DxY12345.css") == "public, max-age=31536000, immutable"
        assert cache_control_for("/assets/logo.svg") == "no-cache"
        assert cache_control_for("/index.html") == "no-cache"
