"""Unit tests for the server registry module."""

import pytest

from toolgate.database import create_engine, create_session_factory, init_models
from toolgate.exceptions import ConfigurationError
from toolgate.registry import (
    MANAGED_SERVERS_SETTING_KEY,
    SERVERS_SETTING_KEY,
    InvalidServerConfigError,
    ManagedServerReadOnlyError,
    MemorySettingsStore,
    ServerConfig,
    ServerNotFoundError,
    ServerRegistry,
    SqlSettingsStore,
    load_effective_servers,
    normalize_enabled,
    normalize_servers,
    validate_server_url,
)


class TestNormalization:
    """Tests for tolerant parsing of stored server lists."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (True, True),
            (False, False),
            (0, False),
            (2, True),
            ("0", False),
            (" FALSE ", False),
            ("off", False),
            ("no", True),
            (None, True),
        ],
    )
    def test_normalize_enabled(self, raw, expected):
        assert normalize_enabled(raw) is expected

    def test_validate_server_url_strips_trailing_slash(self):
        assert validate_server_url(" https://tools.example.com/mcp/ ") == "https://tools.example.com/mcp"

    @pytest.mark.parametrize(
        "raw,message",
        [
            ("", "MCP server URL cannot be empty."),
            ("ftp://tools.example.com", "MCP server URL must use http:// or https://"),
            ("not a url", "Invalid MCP server URL."),
            ("https://", "Invalid MCP server URL."),
        ],
    )
    def test_validate_server_url_rejects(self, raw, message):
        with pytest.raises(InvalidServerConfigError) as exc_info:
            validate_server_url(raw)
        assert exc_info.value.message == message

    def test_server_config_rejects_bad_url(self):
        """Direct construction applies the same URL rules as the registry."""
        with pytest.raises(InvalidServerConfigError) as exc_info:
            ServerConfig(id="x", name="x", url="ftp://bad/")
        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.code == "INVALID_SERVER_CONFIG"

    def test_server_config_strips_trailing_slash(self):
        assert ServerConfig(id="x", name="x", url="https://a.test/").url == "https://a.test"

    def test_invalid_and_managed_entries_dropped(self):
        servers = normalize_servers(
            {
                "servers": [
                    {"id": "a", "name": "A", "url": "https://a.test"},
                    {"id": "b", "name": "", "url": "https://b.test"},
                    {"id": "c", "name": "C", "url": "gopher://c.test"},
                    {"id": "d", "name": "D", "url": "https://d.test", "source": "managed"},
                    "junk",
                ]
            }
        )
        assert [server.id for server in servers] == ["a"]

    def test_duplicate_ids_are_suffixed(self):
        servers = normalize_servers(
            [
                {"id": "dup", "name": "One", "url": "https://1.test"},
                {"id": "dup", "name": "Two", "url": "https://2.test"},
                {"id": "dup", "name": "Three", "url": "https://3.test"},
            ]
        )
        assert [server.id for server in servers] == ["dup", "dup-2", "dup-3"]

    def test_missing_id_gets_slug(self):
        servers = normalize_servers([{"name": "My Tools", "url": "https://tools.test"}])
        assert servers[0].id == "mcp-my-tools-https-tools-test"

    def test_non_list_document_is_empty(self):
        assert normalize_servers("nope") == []


class TestServerRegistry:
    """Tests for ServerRegistry against the in-memory store."""

    @pytest.mark.asyncio
    async def test_managed_server_listed_first_and_enabled(self):
        registry = ServerRegistry(MemorySettingsStore(), origin="https://app.test/")
        await registry.add_server("Custom", "https://custom.test/mcp")

        servers = await registry.list_servers()

        assert servers[0].id == "mcp-managed-jamaica-market"
        assert servers[0].url == "https://app.test/api/mcp/jamaica-market"
        assert servers[0].enabled is True
        assert servers[0].is_managed
        assert servers[1].name == "Custom"

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = MemorySettingsStore()
        registry = ServerRegistry(store)
        added = await registry.add_server(" Search ", "https://search.test/", token="tok")

        reloaded = ServerRegistry(store)
        servers = [server for server in await reloaded.list_servers() if not server.is_managed]

        assert servers == [added]
        assert added.name == "Search"
        assert added.url == "https://search.test"
        assert added.token == "tok"

    @pytest.mark.asyncio
    async def test_managed_flag_stored_separately(self):
        store = MemorySettingsStore()
        registry = ServerRegistry(store)
        added = await registry.add_server("Custom", "https://custom.test")
        custom_before = await store.get(SERVERS_SETTING_KEY)

        await registry.set_managed_enabled("jamaica-market", False)

        assert await store.get(SERVERS_SETTING_KEY) == custom_before
        assert await store.get(MANAGED_SERVERS_SETTING_KEY) == {
            "version": 1,
            "enabledById": {"jamaica-market": False},
        }
        servers = await registry.list_servers()
        assert servers[0].enabled is False
        assert servers[1].id == added.id

    @pytest.mark.asyncio
    async def test_unknown_managed_id(self):
        registry = ServerRegistry(MemorySettingsStore())
        with pytest.raises(ServerNotFoundError):
            await registry.set_managed_enabled("weather", True)

    @pytest.mark.asyncio
    async def test_update_and_clear_token(self):
        registry = ServerRegistry(MemorySettingsStore())
        added = await registry.add_server("Custom", "https://custom.test", token="tok")

        updated = await registry.update_server(added.id, name="Renamed", token="", enabled=False)

        assert updated.name == "Renamed"
        assert updated.token is None
        assert updated.enabled is False
        assert updated.url == "https://custom.test"

    @pytest.mark.asyncio
    async def test_managed_servers_are_read_only(self):
        registry = ServerRegistry(MemorySettingsStore())
        with pytest.raises(ManagedServerReadOnlyError):
            await registry.update_server("mcp-managed-jamaica-market", name="Mine")
        with pytest.raises(ManagedServerReadOnlyError):
            await registry.remove_server("mcp-managed-jamaica-market")

    @pytest.mark.asyncio
    async def test_remove_server(self):
        registry = ServerRegistry(MemorySettingsStore())
        added = await registry.add_server("Custom", "https://custom.test")

        await registry.remove_server(added.id)

        assert [server.id for server in await registry.list_servers()] == ["mcp-managed-jamaica-market"]
        with pytest.raises(ServerNotFoundError):
            await registry.remove_server(added.id)

    @pytest.mark.asyncio
    async def test_add_rejects_bad_input(self):
        registry = ServerRegistry(MemorySettingsStore())
        with pytest.raises(InvalidServerConfigError, match="name cannot be empty"):
            await registry.add_server("  ", "https://custom.test")
        with pytest.raises(InvalidServerConfigError):
            await registry.add_server("Custom", "mailto:me@example.com")

    @pytest.mark.asyncio
    async def test_hand_edited_store_is_tolerated(self):
        store = MemorySettingsStore(
            {
                SERVERS_SETTING_KEY: [
                    {"id": "x", "name": "X", "url": "https://x.test", "enabled": "off"},
                    {"id": "x", "name": "Y", "url": "https://y.test"},
                ],
                MANAGED_SERVERS_SETTING_KEY: {"jamaica-market": 0},
            }
        )

        servers = await load_effective_servers(store)

        assert [(server.id, server.enabled) for server in servers] == [
            ("mcp-managed-jamaica-market", False),
            ("x", False),
            ("x-2", True),
        ]

    @pytest.mark.asyncio
    async def test_runtime_config_carries_proxy(self):
        registry = ServerRegistry(MemorySettingsStore(), proxy_base_url=" https://proxy.test ")
        config = await registry.runtime_config()
        assert config.proxy_base_url == "https://proxy.test"
        assert all(isinstance(server, ServerConfig) for server in config.servers)

    @pytest.mark.asyncio
    async def test_memory_store_does_not_alias(self):
        store = MemorySettingsStore()
        value = {"servers": []}
        await store.set("k", value)
        value["servers"].append("mutated")
        assert await store.get("k") == {"servers": []}


class TestSqlSettingsStore:
    """Tests for the SQLAlchemy-backed store."""

    @pytest.mark.asyncio
    async def test_get_set_overwrite(self, tmp_path):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'settings.db'}")
        try:
            await init_models(engine)
            store = SqlSettingsStore(create_session_factory(engine))

            assert await store.get("missing") is None
            await store.set("k", {"a": 1})
            await store.set("k", {"a": 2})
            assert await store.get("k") == {"a": 2}
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_registry_over_sql(self, tmp_path):
        engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'settings.db'}")
        try:
            await init_models(engine)
            registry = ServerRegistry(SqlSettingsStore(create_session_factory(engine)))
            added = await registry.add_server("Custom", "https://custom.test")
            await registry.set_managed_enabled("jamaica-market", False)

            servers = await registry.list_servers()

            assert servers[0].enabled is False
            assert servers[1].id == added.id
        finally:
            await engine.dispose()
