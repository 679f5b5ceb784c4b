"""Pydantic schemas for configured tool servers and their persisted documents."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .validation import validate_server_url


class ServerSource(str, Enum):
    """Where a server entry comes from.

    Attributes:
        managed: Defined by the application; only its enabled flag is stored.
        custom: Added by the user and persisted in full.
    """

    managed = "managed"
    custom = "custom"


class ServerConfig(BaseModel):
    """One configured tool server.

    Attributes:
        id: Unique id within a snapshot.
        name: Display name.
        url: http(s) endpoint without trailing slash.
        enabled: Whether the gateway may use the server.
        token: Optional bearer token sent with every call.
        source: managed or custom.
        managed_id: Stable managed identifier, managed servers only.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique server id")
    name: str = Field(..., description="Display name")
    url: str = Field(..., description="Endpoint URL")
    enabled: bool = Field(default=True, description="Whether the server is usable")
    token: str | None = Field(default=None, description="Optional bearer token")
    source: ServerSource = Field(default=ServerSource.custom, description="managed or custom")
    managed_id: str | None = Field(default=None, description="Managed identifier")

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        return validate_server_url(value)

    @property
    def is_managed(self) -> bool:
        return self.source == ServerSource.managed


class ServersDocument(BaseModel):
    """Persisted list of custom servers."""

    version: int = 1
    servers: list[ServerConfig] = Field(default_factory=list)


class ManagedServersDocument(BaseModel):
    """Persisted enabled flags for managed servers, keyed by managed id."""

    model_config = ConfigDict(populate_by_name=True)

    version: int = 1
    enabled_by_id: dict[str, bool] = Field(default_factory=dict, alias="enabledById")


class RuntimeConfig(BaseModel):
    """Snapshot of everything the gateway client needs for one operation.

    Attributes:
        servers: Effective servers, managed first.
        proxy_base_url: Optional outbound proxy for browser-restricted targets.
    """

    servers: list[ServerConfig] = Field(default_factory=list)
    proxy_base_url: str | None = None
