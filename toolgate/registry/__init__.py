"""Registry of configured tool servers, managed and custom."""

from .definitions import MANAGED_SERVER_DEFINITIONS, ManagedServerDefinition
from .exceptions import (
    InvalidServerConfigError,
    ManagedServerReadOnlyError,
    RegistryError,
    ServerNotFoundError,
)
from .normalize import normalize_enabled, normalize_server, normalize_servers, unique_by_id
from .schemas import RuntimeConfig, ServerConfig, ServerSource
from .service import (
    MANAGED_SERVERS_SETTING_KEY,
    SERVERS_SETTING_KEY,
    ServerRegistry,
    create_server_config,
    list_managed_server_definitions,
    load_custom_servers,
    load_effective_servers,
    load_managed_enabled_state,
    load_managed_servers,
    save_custom_servers,
    set_managed_server_enabled,
)
from .store import MemorySettingsStore, SettingsStore, SqlSettingsStore
from .validation import validate_server_url

__all__ = [
    "MANAGED_SERVER_DEFINITIONS",
    "ManagedServerDefinition",
    "InvalidServerConfigError",
    "ManagedServerReadOnlyError",
    "RegistryError",
    "ServerNotFoundError",
    "normalize_enabled",
    "normalize_server",
    "normalize_servers",
    "unique_by_id",
    "validate_server_url",
    "RuntimeConfig",
    "ServerConfig",
    "ServerSource",
    "MANAGED_SERVERS_SETTING_KEY",
    "SERVERS_SETTING_KEY",
    "ServerRegistry",
    "create_server_config",
    "list_managed_server_definitions",
    "load_custom_servers",
    "load_effective_servers",
    "load_managed_enabled_state",
    "load_managed_servers",
    "save_custom_servers",
    "set_managed_server_enabled",
    "MemorySettingsStore",
    "SettingsStore",
    "SqlSettingsStore",
]
