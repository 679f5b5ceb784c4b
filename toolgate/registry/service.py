"""Business logic for the server registry.

Custom servers and managed enabled flags live under separate keys and are read
and written independently, so toggling a managed server never rewrites the
user's custom list and vice versa.
"""

import uuid

import structlog

from .definitions import MANAGED_IDS, MANAGED_SERVER_DEFINITIONS
from .exceptions import (
    InvalidServerConfigError,
    ManagedServerReadOnlyError,
    ServerNotFoundError,
)
from .normalize import (
    normalize_optional_string,
    normalize_servers,
    parse_managed_enabled_map,
    resolve_origin,
    unique_by_id,
)
from .schemas import (
    ManagedServersDocument,
    RuntimeConfig,
    ServerConfig,
    ServerSource,
    ServersDocument,
)
from .store import SettingsStore
from .validation import validate_server_url

logger = structlog.get_logger(__name__)

SERVERS_SETTING_KEY = "mcp.servers.v1"
MANAGED_SERVERS_SETTING_KEY = "mcp.managed.v1"


def create_server_config(
    name: str,
    url: str,
    token: str | None = None,
    enabled: bool = True,
) -> ServerConfig:
    """Build a new custom server entry with a fresh random id.

    Raises:
        InvalidServerConfigError: If the name is blank or the URL is invalid.
    """
    normalized_name = normalize_optional_string(name)
    if not normalized_name:
        raise InvalidServerConfigError("MCP server name cannot be empty.")

    return ServerConfig(
        id=f"mcp-{uuid.uuid4()}",
        name=normalized_name,
        url=validate_server_url(url),
        enabled=enabled,
        token=normalize_optional_string(token),
        source=ServerSource.custom,
    )


def list_managed_server_definitions(origin: str | None = None) -> list[ServerConfig]:
    """Managed servers resolved against the app origin, all enabled."""
    resolved = resolve_origin(origin)
    return [
        ServerConfig(
            id=definition.id,
            name=definition.name,
            url=f"{resolved}{definition.url_path}",
            enabled=True,
            source=ServerSource.managed,
            managed_id=definition.managed_id,
        )
        for definition in MANAGED_SERVER_DEFINITIONS
    ]


async def load_custom_servers(store: SettingsStore) -> list[ServerConfig]:
    return normalize_servers(await store.get(SERVERS_SETTING_KEY))


async def save_custom_servers(store: SettingsStore, servers: list[ServerConfig]) -> None:
    """Persist custom servers only; managed entries in the input are ignored."""
    custom = [server for server in servers if not server.is_managed]
    normalized = unique_by_id(normalize_servers([server.model_dump(mode="json") for server in custom]))
    document = ServersDocument(servers=normalized)
    await store.set(SERVERS_SETTING_KEY, document.model_dump(mode="json", exclude_none=True))


async def load_managed_enabled_state(store: SettingsStore) -> dict[str, bool]:
    return parse_managed_enabled_map(await store.get(MANAGED_SERVERS_SETTING_KEY))


async def save_managed_enabled_state(store: SettingsStore, enabled_by_id: dict[str, bool]) -> None:
    document = ManagedServersDocument(enabled_by_id=enabled_by_id)
    await store.set(MANAGED_SERVERS_SETTING_KEY, document.model_dump(mode="json", by_alias=True))


async def set_managed_server_enabled(store: SettingsStore, managed_id: str, enabled: bool) -> None:
    """Flip one managed server's flag, leaving the others as stored.

    Raises:
        ServerNotFoundError: If managed_id is not a managed definition.
    """
    if managed_id not in MANAGED_IDS:
        raise ServerNotFoundError(managed_id)
    existing = await load_managed_enabled_state(store)
    existing[managed_id] = enabled
    await save_managed_enabled_state(store, existing)
    logger.info("managed_server_toggled", managed_id=managed_id, enabled=enabled)


async def load_managed_servers(store: SettingsStore, origin: str | None = None) -> list[ServerConfig]:
    """Managed definitions with their stored flags; missing flags mean enabled."""
    enabled_by_id = await load_managed_enabled_state(store)
    return [
        server.model_copy(update={"enabled": enabled_by_id.get(server.managed_id or "", True)})
        for server in list_managed_server_definitions(origin)
    ]


async def load_effective_servers(store: SettingsStore, origin: str | None = None) -> list[ServerConfig]:
    """Managed servers first, then custom ones."""
    managed = await load_managed_servers(store, origin)
    custom = await load_custom_servers(store)
    return [*managed, *custom]


class ServerRegistry:
    """Facade over a settings store for listing and editing tool servers."""

    def __init__(
        self,
        store: SettingsStore,
        origin: str | None = None,
        proxy_base_url: str | None = None,
    ):
        """Initialize the registry.

        Args:
            store: Key/value settings store.
            origin: Public origin managed server URLs are resolved against.
            proxy_base_url: Optional outbound proxy handed to the gateway client.
        """
        self.store = store
        self.origin = resolve_origin(origin)
        self.proxy_base_url = normalize_optional_string(proxy_base_url)

    async def list_servers(self) -> list[ServerConfig]:
        return await load_effective_servers(self.store, self.origin)

    async def runtime_config(self) -> RuntimeConfig:
        return RuntimeConfig(servers=await self.list_servers(), proxy_base_url=self.proxy_base_url)

    async def add_server(
        self,
        name: str,
        url: str,
        token: str | None = None,
        enabled: bool = True,
    ) -> ServerConfig:
        server = create_server_config(name, url, token=token, enabled=enabled)
        servers = await load_custom_servers(self.store)
        servers.append(server)
        await save_custom_servers(self.store, servers)
        logger.info("server_added", server_id=server.id, name=server.name)
        return server

    async def update_server(
        self,
        server_id: str,
        *,
        name: str | None = None,
        url: str | None = None,
        token: str | None = None,
        enabled: bool | None = None,
    ) -> ServerConfig:
        """Update fields of a custom server; None leaves a field unchanged.

        Pass an empty token to clear it.

        Raises:
            ManagedServerReadOnlyError: If server_id names a managed server.
            ServerNotFoundError: If no custom server has that id.
            InvalidServerConfigError: If the new name or URL is invalid.
        """
        self._reject_managed(server_id)
        servers = await load_custom_servers(self.store)
        index = self._index_of(servers, server_id)

        changes: dict[str, object] = {}
        if name is not None:
            normalized_name = normalize_optional_string(name)
            if not normalized_name:
                raise InvalidServerConfigError("MCP server name cannot be empty.")
            changes["name"] = normalized_name
        if url is not None:
            changes["url"] = validate_server_url(url)
        if token is not None:
            changes["token"] = normalize_optional_string(token)
        if enabled is not None:
            changes["enabled"] = enabled

        updated = servers[index].model_copy(update=changes)
        servers[index] = updated
        await save_custom_servers(self.store, servers)
        logger.info("server_updated", server_id=server_id, fields=sorted(changes))
        return updated

    async def remove_server(self, server_id: str) -> None:
        self._reject_managed(server_id)
        servers = await load_custom_servers(self.store)
        index = self._index_of(servers, server_id)
        del servers[index]
        await save_custom_servers(self.store, servers)
        logger.info("server_removed", server_id=server_id)

    async def set_managed_enabled(self, managed_id: str, enabled: bool) -> None:
        await set_managed_server_enabled(self.store, managed_id, enabled)

    @staticmethod
    def _reject_managed(server_id: str) -> None:
        if any(definition.id == server_id for definition in MANAGED_SERVER_DEFINITIONS):
            raise ManagedServerReadOnlyError(server_id)

    @staticmethod
    def _index_of(servers: list[ServerConfig], server_id: str) -> int:
        for index, server in enumerate(servers):
            if server.id == server_id:
                return index
        raise ServerNotFoundError(server_id)
