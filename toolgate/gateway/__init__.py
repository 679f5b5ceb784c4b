"""Client-side gateway to tool servers speaking JSON-RPC over HTTP."""

import httpx

from toolgate.registry.service import ServerRegistry

from .catalog import CatalogCache, parse_tool_list
from .client import GatewayClient, ToolCallTrace, parse_call_args
from .exceptions import (
    AmbiguousToolError,
    GatewayError,
    InvalidToolArgumentsError,
    ManagedServerUnavailableError,
    NoServersConfiguredError,
    ServerDisabledError,
    ToolNotFoundError,
    TransportError,
    UnknownServerError,
)
from .market_tool import MarketDataTool, build_tool_call
from .retry import RECOVERABLE_PHRASES, is_recoverable_catalog_error
from .schemas import CatalogEntry, GatewayDetails, GatewayResult, MarketDataDetails, RpcCallResult, ToolDescriptor
from .transport import DEFAULT_TIMEOUT_SECONDS, JsonRpcTransport


def build_gateway_client(
    client: httpx.AsyncClient,
    registry: ServerRegistry,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    cache: CatalogCache | None = None,
) -> GatewayClient:
    """Wire a gateway client to a registry with one catalog cache for its lifetime."""
    return GatewayClient(
        get_runtime_config=registry.runtime_config,
        transport=JsonRpcTransport(client, timeout_seconds=timeout_seconds),
        cache=cache,
    )


def build_market_tool(
    client: httpx.AsyncClient,
    registry: ServerRegistry,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> MarketDataTool:
    return MarketDataTool(
        get_runtime_config=registry.runtime_config,
        transport=JsonRpcTransport(client, timeout_seconds=timeout_seconds),
    )


__all__ = [
    "build_gateway_client",
    "build_market_tool",
    "CatalogCache",
    "parse_tool_list",
    "GatewayClient",
    "ToolCallTrace",
    "parse_call_args",
    "AmbiguousToolError",
    "GatewayError",
    "InvalidToolArgumentsError",
    "ManagedServerUnavailableError",
    "NoServersConfiguredError",
    "ServerDisabledError",
    "ToolNotFoundError",
    "TransportError",
    "UnknownServerError",
    "MarketDataTool",
    "build_tool_call",
    "RECOVERABLE_PHRASES",
    "is_recoverable_catalog_error",
    "CatalogEntry",
    "GatewayDetails",
    "GatewayResult",
    "MarketDataDetails",
    "RpcCallResult",
    "ToolDescriptor",
    "DEFAULT_TIMEOUT_SECONDS",
    "JsonRpcTransport",
]
