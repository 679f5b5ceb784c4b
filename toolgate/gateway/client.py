"""Gateway client: discover and call tools on configured JSON-RPC servers."""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import structlog

from toolgate import __version__
from toolgate.exceptions import ToolGateError
from toolgate.protocol import RpcError
from toolgate.registry.schemas import RuntimeConfig, ServerConfig

from .catalog import CatalogCache, parse_tool_list
from .exceptions import InvalidToolArgumentsError, NoServersConfiguredError, ToolNotFoundError
from .formatting import (
    describe_text,
    first_line,
    json_block,
    plural,
    remediation_hint,
    search_text,
    server_status_line,
    tool_call_result_text,
    tool_preview,
)
from .resolution import matches_search, resolve_server, select_tool, server_by_id
from .retry import is_recoverable_catalog_error
from .schemas import CatalogEntry, GatewayDetails, GatewayParams, GatewayResult, RpcCallResult, parse_params
from .transport import JsonRpcTransport

logger = structlog.get_logger(__name__)

PROTOCOL_VERSION = "2025-03-26"
CLIENT_NAME = "toolgate"

RuntimeConfigProvider = Callable[[], Awaitable[RuntimeConfig]]


@dataclass
class ToolCallTrace:
    """Call bookkeeping that survives a failed tool call."""

    rpc_method: str | None = None
    retry_applied: bool = False
    duration_ms: int | None = None
    error_code: int | None = None


def parse_call_args(raw_args: Any) -> dict[str, Any]:
    """Accept tool arguments as an object or a JSON object string.

    Raises:
        InvalidToolArgumentsError: If the value is not JSON or not an object.
    """
    if raw_args is None:
        return {}
    if isinstance(raw_args, str):
        try:
            parsed = json.loads(raw_args)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise InvalidToolArgumentsError("mcp.args must be valid JSON.") from exc
        if not isinstance(parsed, dict):
            raise InvalidToolArgumentsError("mcp.args must be a JSON string or an object.")
        return parsed
    if isinstance(raw_args, dict):
        return raw_args
    raise InvalidToolArgumentsError("mcp.args must be a JSON string or an object.")


class GatewayClient:
    """Keeps per-server tool catalogs and runs gateway operations.

    Every operation reads a fresh RuntimeConfig, so servers added or disabled
    in the registry take effect on the next call. Catalogs are cached per
    server id until a connect or a stale-catalog retry refreshes them.
    """

    def __init__(
        self,
        get_runtime_config: RuntimeConfigProvider,
        transport: JsonRpcTransport,
        cache: CatalogCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the client.

        Args:
            get_runtime_config: Async callable returning the current servers.
            transport: JSON-RPC transport.
            cache: Catalog cache; a private one is created if not provided.
            clock: Seconds clock used for call durations.
        """
        self.get_runtime_config = get_runtime_config
        self.transport = transport
        self.cache = cache if cache is not None else CatalogCache()
        self._clock = clock

    async def _load_config(self) -> RuntimeConfig:
        config = await self.get_runtime_config()
        if not config.servers:
            raise NoServersConfiguredError()
        return config

    async def ensure_server_tools(
        self,
        server: ServerConfig,
        proxy_base_url: str | None = None,
        refresh: bool = False,
        cancel_event: asyncio.Event | None = None,
    ) -> CatalogEntry:
        """Return the server's catalog, fetching it when missing or on refresh.

        A fetch is the handshake initialize, notifications/initialized, then
        tools/list; the result replaces any cached entry.
        """
        if not refresh:
            cached = self.cache.get(server.id)
            if cached is not None:
                return cached

        await self.transport.call(
            server,
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": CLIENT_NAME, "version": __version__},
            },
            proxy_base_url=proxy_base_url,
            cancel_event=cancel_event,
        )
        await self.transport.call(
            server,
            "notifications/initialized",
            expect_response=False,
            proxy_base_url=proxy_base_url,
            cancel_event=cancel_event,
        )
        listed = await self.transport.call(
            server,
            "tools/list",
            {},
            proxy_base_url=proxy_base_url,
            cancel_event=cancel_event,
        )

        entry = CatalogEntry(
            server=server,
            tools=parse_tool_list(server, listed.result),
            proxied=listed.proxied,
            proxy_base_url=listed.proxy_base_url,
        )
        self.cache.put(entry)
        logger.info("catalog_refreshed", server_id=server.id, tool_count=len(entry.tools), forced=refresh)
        return entry

    async def _enabled_catalogs(
        self,
        config: RuntimeConfig,
        cancel_event: asyncio.Event | None,
    ) -> list[CatalogEntry]:
        # Fetched one by one; the first failing server aborts the operation
        return [
            await self.ensure_server_tools(server, config.proxy_base_url, cancel_event=cancel_event)
            for server in config.servers
            if server.enabled
        ]

    async def status(self) -> GatewayResult:
        """List configured servers with cached tool counts. No network calls."""
        config = await self._load_config()
        lines = ["MCP server status:"]
        for server in config.servers:
            cached = self.cache.get(server.id)
            lines.append(server_status_line(server, cached.tools if cached else None))
        lines.extend(["", "Tip: use `connect`, `server`, `search`, `describe`, or `tool`."])
        text = "\n".join(lines)
        return GatewayResult(
            text=text,
            details=GatewayDetails(ok=True, operation="status", result_preview=first_line(text)),
        )

    async def connect(self, server_token: str, cancel_event: asyncio.Event | None = None) -> GatewayResult:
        """Force a catalog refresh for one server."""
        config = await self._load_config()
        server = resolve_server(config.servers, server_token)
        entry = await self.ensure_server_tools(
            server, config.proxy_base_url, refresh=True, cancel_event=cancel_event
        )
        text = "\n".join(
            [
                f'Connected to MCP server "{server.name}" ({server.url}).',
                f"Discovered {plural(len(entry.tools), 'tool')}.",
                "",
                tool_preview(entry.tools),
            ]
        )
        return GatewayResult(
            text=text,
            details=GatewayDetails(
                ok=True,
                operation="connect",
                server=server.name,
                proxied=entry.proxied,
                proxy_base_url=entry.proxy_base_url,
                result_preview=first_line(text),
            ),
        )

    async def server(self, server_token: str, cancel_event: asyncio.Event | None = None) -> GatewayResult:
        """List one server's tools, using the cache when present."""
        config = await self._load_config()
        server = resolve_server(config.servers, server_token)
        entry = await self.ensure_server_tools(server, config.proxy_base_url, cancel_event=cancel_event)
        text = "\n".join([f"MCP tools on {server.name} ({server.url}):", "", tool_preview(entry.tools)])
        return GatewayResult(
            text=text,
            details=GatewayDetails(
                ok=True,
                operation="server",
                server=server.name,
                proxied=entry.proxied,
                proxy_base_url=entry.proxy_base_url,
                result_preview=first_line(text),
            ),
        )

    async def search(self, query: str, cancel_event: asyncio.Event | None = None) -> GatewayResult:
        """Search tool names and descriptions across enabled servers."""
        config = await self._load_config()
        catalogs = await self._enabled_catalogs(config, cancel_event)
        matches = [
            tool
            for entry in catalogs
            for tool in entry.tools
            if matches_search(tool, query)
        ]
        text = search_text(query, matches)
        return GatewayResult(
            text=text,
            details=GatewayDetails(ok=True, operation="search", result_preview=first_line(text)),
        )

    async def describe(
        self,
        tool_name: str,
        server_token: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> GatewayResult:
        """Show a tool's description and raw input schema."""
        config = await self._load_config()
        if server_token:
            server = resolve_server(config.servers, server_token)
            catalogs = [
                await self.ensure_server_tools(server, config.proxy_base_url, cancel_event=cancel_event)
            ]
        else:
            catalogs = await self._enabled_catalogs(config, cancel_event)

        target = next(
            (tool for entry in catalogs for tool in entry.tools if tool.name == tool_name),
            None,
        )
        if target is None:
            raise ToolNotFoundError(tool_name, message=f"MCP tool not found: {tool_name}")

        text = describe_text(target)
        return GatewayResult(
            text=text,
            details=GatewayDetails(
                ok=True,
                operation="describe",
                server=target.server_name,
                tool=target.name,
                result_preview=first_line(target.description or "(no description provided)"),
            ),
        )

    async def tool(
        self,
        tool_name: str,
        args: Any = None,
        server_token: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> GatewayResult:
        """Call a tool, retrying once after a catalog refresh on a stale-catalog error."""
        return await self._call_tool(tool_name, args, server_token, ToolCallTrace(), cancel_event)

    async def _call_tool(
        self,
        tool_name: str,
        args: Any,
        server_token: str | None,
        trace: ToolCallTrace,
        cancel_event: asyncio.Event | None,
    ) -> GatewayResult:
        config = await self._load_config()
        if server_token:
            scoped = resolve_server(config.servers, server_token)
            catalogs = [
                await self.ensure_server_tools(scoped, config.proxy_base_url, cancel_event=cancel_event)
            ]
        else:
            catalogs = await self._enabled_catalogs(config, cancel_event)

        candidates = [tool for entry in catalogs for tool in entry.tools]
        target_tool = select_tool(tool_name, candidates, server_scoped=bool(server_token))
        target_server = server_by_id(config.servers, target_tool.server_id)
        arguments = parse_call_args(args)
        trace.rpc_method = "tools/call"

        async def _invoke() -> RpcCallResult:
            return await self.transport.call(
                target_server,
                "tools/call",
                {"name": target_tool.name, "arguments": arguments},
                proxy_base_url=config.proxy_base_url,
                cancel_event=cancel_event,
            )

        started = self._clock()
        try:
            call_result = await _invoke()
        except ToolGateError as exc:
            if isinstance(exc, RpcError):
                trace.error_code = exc.rpc_code
            if not is_recoverable_catalog_error(exc):
                raise
            trace.retry_applied = True
            logger.info("stale_catalog_retry", server_id=target_server.id, tool=target_tool.name, error=exc.message)
            await self.ensure_server_tools(
                target_server, config.proxy_base_url, refresh=True, cancel_event=cancel_event
            )
            call_result = await _invoke()
        trace.duration_ms = max(0, int((self._clock() - started) * 1000))

        result_text = tool_call_result_text(call_result.result)
        recovery = (
            "Recovery: automatic refresh retry applied once."
            if trace.retry_applied
            else "Recovery: no retry needed."
        )
        text = "\n".join(
            [
                "MCP tool call",
                f"- server: {target_server.name} ({target_server.url})",
                f"- tool: {target_tool.name}",
                "- arguments sent:",
                json_block(arguments),
                "",
                recovery,
                "",
                "Result:",
                result_text,
            ]
        )
        logger.info(
            "tool_called",
            server_id=target_server.id,
            tool=target_tool.name,
            retry_applied=trace.retry_applied,
            duration_ms=trace.duration_ms,
        )
        return GatewayResult(
            text=text,
            details=GatewayDetails(
                ok=True,
                operation="tool",
                server=target_server.name,
                tool=target_tool.name,
                proxied=call_result.proxied,
                proxy_base_url=call_result.proxy_base_url,
                result_preview=first_line(result_text),
                retry_applied=trace.retry_applied,
                rpc_method=trace.rpc_method,
                duration_ms=trace.duration_ms,
                error_code=trace.error_code,
            ),
        )

    async def execute(self, raw_params: Any, cancel_event: asyncio.Event | None = None) -> GatewayResult:
        """Single-entry surface: dispatch on whichever parameter is present.

        Precedence is connect, tool, describe, search, server, then status.
        Failures never raise; they come back as "Error: ..." text with
        details.ok False.
        """
        params = parse_params(raw_params)
        operation = _operation_for(params)
        trace = ToolCallTrace()

        try:
            if operation == "connect":
                return await self.connect(params.connect, cancel_event)
            if operation == "tool":
                return await self._call_tool(params.tool, params.args, params.server, trace, cancel_event)
            if operation == "describe":
                return await self.describe(params.describe, params.server, cancel_event)
            if operation == "search":
                return await self.search(params.search, cancel_event)
            if operation == "server":
                return await self.server(params.server, cancel_event)
            return await self.status()
        except ToolGateError as exc:
            if trace.error_code is None and isinstance(exc, RpcError):
                trace.error_code = exc.rpc_code
            message = f"{exc.message}{remediation_hint(exc, operation)}"
            logger.info("gateway_operation_failed", operation=operation, error_code=exc.code, error=exc.message)
            return GatewayResult(
                text=f"Error: {message}",
                details=GatewayDetails(
                    ok=False,
                    operation=operation,
                    server=params.server or params.connect,
                    tool=params.tool or params.describe,
                    retry_applied=trace.retry_applied,
                    rpc_method=trace.rpc_method,
                    duration_ms=trace.duration_ms,
                    error_code=trace.error_code,
                    error=message,
                ),
            )


def _operation_for(params: GatewayParams) -> str:
    if params.connect:
        return "connect"
    if params.tool:
        return "tool"
    if params.describe:
        return "describe"
    if params.search:
        return "search"
    if params.server:
        return "server"
    return "status"

