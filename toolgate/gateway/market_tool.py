"""Convenience tool for the managed market data server.

Arguments are validated locally with the same rules the managed endpoint
applies, so a bad call fails without touching the network.
"""

import asyncio
import time
from typing import Any, Callable

import structlog

from toolgate.exceptions import ToolGateError
from toolgate.market.catalog import MANAGED_TOOLS, validate_tool_arguments
from toolgate.market.exceptions import ArgumentValidationError
from toolgate.protocol import RpcError
from toolgate.registry.schemas import ServerConfig

from .client import RuntimeConfigProvider
from .exceptions import ManagedServerUnavailableError, ServerDisabledError
from .formatting import first_line, json_block, tool_call_result_text
from .schemas import GatewayResult, MarketDataDetails
from .transport import JsonRpcTransport

logger = structlog.get_logger(__name__)

MARKET_MANAGED_ID = "jamaica-market"
ACTIONS: tuple[str, ...] = tuple(tool.name for tool in MANAGED_TOOLS)


def build_tool_call(params: Any) -> tuple[str, dict[str, Any]]:
    """Validate an action plus flat arguments into (tool name, arguments).

    Arguments the action does not use are ignored; the ones it uses are
    normalized and only those the caller supplied are sent.

    Raises:
        ArgumentValidationError: If the action or any used argument is invalid.
    """
    if not isinstance(params, dict):
        raise ArgumentValidationError("Invalid jamaica_market params: expected an object.")

    action = params.get("action")
    action = action.strip() if isinstance(action, str) else ""
    if action not in ACTIONS:
        raise ArgumentValidationError(f"action must be one of: {', '.join(ACTIONS)}")

    definition = next(tool for tool in MANAGED_TOOLS if tool.name == action)
    supplied = {
        field: params[field]
        for field in definition.args_model.model_fields
        if field in params and params[field] is not None
    }
    _, model = validate_tool_arguments(action, supplied)
    return action, model.model_dump(exclude_unset=True)


class MarketDataTool:
    """Calls one managed market data tool on the managed server."""

    def __init__(
        self,
        get_runtime_config: RuntimeConfigProvider,
        transport: JsonRpcTransport,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.get_runtime_config = get_runtime_config
        self.transport = transport
        self._clock = clock

    async def _managed_server(self) -> ServerConfig:
        config = await self.get_runtime_config()
        server = next(
            (item for item in config.servers if item.managed_id == MARKET_MANAGED_ID),
            None,
        )
        if server is None:
            raise ManagedServerUnavailableError(MARKET_MANAGED_ID)
        if not server.enabled:
            raise ServerDisabledError(
                server.name,
                message=(
                    "Managed Jamaica Market server is disabled. Open the integrations "
                    "settings and enable Jamaica Market Data."
                ),
            )
        return server

    async def execute(self, params: Any, cancel_event: asyncio.Event | None = None) -> GatewayResult:
        """Validate, then issue exactly one tools/call. Failures come back as text."""
        action = params.get("action") if isinstance(params, dict) else None
        action = action if isinstance(action, str) and action in ACTIONS else "list_companies"
        tool_name: str | None = None

        try:
            tool_name, arguments = build_tool_call(params)
            action = tool_name
            server = await self._managed_server()

            started = self._clock()
            call_result = await self.transport.call(
                server,
                "tools/call",
                {"name": tool_name, "arguments": arguments},
                cancel_event=cancel_event,
            )
            duration_ms = max(0, int((self._clock() - started) * 1000))
        except ToolGateError as exc:
            logger.info("market_tool_failed", action=action, error=exc.message)
            return GatewayResult(
                text=f"Error: {exc.message}",
                details=MarketDataDetails(
                    ok=False,
                    action=action,
                    tool_name=tool_name,
                    error_code=exc.rpc_code if isinstance(exc, RpcError) else None,
                    error=exc.message,
                ),
            )

        result_text = tool_call_result_text(call_result.result)
        text = "\n".join(
            [
                "Jamaica market tool call",
                f"- action: {action}",
                f"- managed tool: {tool_name}",
                "- arguments sent:",
                json_block(arguments),
                "",
                "Result:",
                result_text,
            ]
        )
        return GatewayResult(
            text=text,
            details=MarketDataDetails(
                ok=True,
                action=action,
                tool_name=tool_name,
                duration_ms=duration_ms,
                result_preview=first_line(result_text),
            ),
        )
