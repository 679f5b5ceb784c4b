"""Pydantic schemas for gateway catalogs, call results and operation outcomes."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolgate.registry.schemas import ServerConfig


class ToolDescriptor(BaseModel):
    """A tool as discovered from one server's tools/list.

    Attributes:
        server_id: Owning server id.
        server_name: Owning server display name.
        server_url: Owning server URL.
        name: Tool name, unique per server.
        description: Optional description.
        input_schema: Raw JSON schema as the server sent it.
    """

    server_id: str
    server_name: str
    server_url: str
    name: str
    description: str | None = None
    input_schema: Any | None = None


class CatalogEntry(BaseModel):
    """Cached catalog for one server."""

    server: ServerConfig
    tools: list[ToolDescriptor] = Field(default_factory=list)
    proxied: bool = False
    proxy_base_url: str | None = None


class RpcCallResult(BaseModel):
    """Result of one JSON-RPC call and how it was routed."""

    result: Any = None
    proxied: bool = False
    proxy_base_url: str | None = None


class GatewayDetails(BaseModel):
    """Structured outcome of one gateway operation."""

    kind: Literal["mcp_gateway"] = "mcp_gateway"
    ok: bool
    operation: str
    server: str | None = None
    tool: str | None = None
    proxied: bool | None = None
    proxy_base_url: str | None = None
    result_preview: str | None = None
    retry_applied: bool | None = None
    rpc_method: str | None = None
    duration_ms: int | None = None
    error_code: int | None = None
    error: str | None = None


class MarketDataDetails(BaseModel):
    """Structured outcome of one market data tool call."""

    kind: Literal["jamaica_market"] = "jamaica_market"
    ok: bool
    action: str
    tool_name: str | None = None
    rpc_method: str = "tools/call"
    duration_ms: int | None = None
    error_code: int | None = None
    retry_applied: bool = False
    result_preview: str | None = None
    error: str | None = None


class GatewayResult(BaseModel):
    """Rendered text for the caller plus structured details."""

    text: str
    details: GatewayDetails | MarketDataDetails


def _optional_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


class GatewayParams(BaseModel):
    """Loose parameters for the single-entry gateway surface.

    Blank or non-string values are treated as absent rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")

    tool: str | None = None
    args: str | dict[str, Any] | None = None
    connect: str | None = None
    describe: str | None = None
    search: str | None = None
    server: str | None = None

    @field_validator("tool", "connect", "describe", "search", "server", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> str | None:
        return _optional_string(value)

    @field_validator("args", mode="before")
    @classmethod
    def keep_string_or_object(cls, value: Any) -> str | dict[str, Any] | None:
        if isinstance(value, str):
            return _optional_string(value)
        if isinstance(value, dict):
            return value
        return None


def parse_params(raw: Any) -> GatewayParams:
    if not isinstance(raw, dict):
        return GatewayParams()
    return GatewayParams.model_validate(raw)
