"""Business logic for the managed market data protocol endpoint."""

import asyncio
from typing import Any, NamedTuple

import httpx
import structlog

from toolgate.exceptions import ToolGateError
from toolgate.protocol import RpcErrorCodes, RpcRequest, build_error, build_success

from .catalog import list_tool_descriptors, validate_tool_arguments
from .upstream import fetch_market_json

logger = structlog.get_logger(__name__)

PROTOCOL_VERSION = "2025-03-26"
SERVER_NAME = "toolgate-jamaica-market"
SERVER_VERSION = "1.0.0"


class RpcReply(NamedTuple):
    """HTTP status and JSON body for one handled request; body None means 204."""

    status_code: int
    body: dict[str, Any] | None


def handle_initialize() -> dict[str, Any]:
    """Handle initialize request. Stateless, identical on every call."""
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {
            "tools": {
                "listChanged": False  # Static tool table
            }
        },
        "serverInfo": {
            "name": SERVER_NAME,
            "version": SERVER_VERSION,
        },
    }


def handle_tools_list() -> dict[str, Any]:
    return {"tools": list_tool_descriptors()}


def summarize_payload(name: str, payload: Any) -> str:
    if isinstance(payload, list):
        suffix = "" if len(payload) == 1 else "s"
        return f"{name}: returned {len(payload)} record{suffix}."
    if isinstance(payload, dict):
        return f"{name}: returned object response."
    return f"{name}: returned scalar response."


async def handle_tools_call(
    client: httpx.AsyncClient,
    base_url: str,
    name: str,
    arguments: dict[str, Any] | None,
    timeout_seconds: float,
    cancel_event: asyncio.Event | None = None,
) -> dict[str, Any]:
    """Validate a managed tool call and run it against the REST source.

    Validation happens before any network activity, so an unknown tool or a
    bad argument never reaches the upstream.

    Returns:
        Tool result with a one-line text summary and the raw payload.
    """
    definition, args = validate_tool_arguments(name, arguments)
    payload = await fetch_market_json(
        client,
        base_url,
        definition.path_builder(args),
        timeout_seconds=timeout_seconds,
        cancel_event=cancel_event,
    )
    if definition.post_process is not None:
        payload = definition.post_process(payload, args)

    return {
        "content": [{"type": "text", "text": summarize_payload(name, payload)}],
        "structuredContent": payload,
    }


async def dispatch(
    rpc_request: RpcRequest,
    *,
    client: httpx.AsyncClient,
    base_url: str,
    timeout_seconds: float,
) -> RpcReply:
    """Route one parsed JSON-RPC request to its handler.

    Notifications are acknowledged with 204 and never executed.
    """
    request_id = rpc_request.id
    method = rpc_request.method

    if rpc_request.is_notification:
        return RpcReply(204, None)

    if method == "initialize":
        return RpcReply(200, build_success(request_id, handle_initialize()))

    if method == "notifications/initialized":
        return RpcReply(200, build_success(request_id, {}))

    if method == "tools/list":
        return RpcReply(200, build_success(request_id, handle_tools_list()))

    if method == "tools/call":
        params = rpc_request.params
        if not isinstance(params, dict) or not isinstance(params.get("name"), str) or not params["name"]:
            return RpcReply(
                400,
                build_error(request_id, RpcErrorCodes.INVALID_PARAMS, "tools/call requires params.name"),
            )
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            return RpcReply(
                400,
                build_error(
                    request_id,
                    RpcErrorCodes.INVALID_PARAMS,
                    "tools/call params.arguments must be an object",
                ),
            )

        name = params["name"]
        try:
            result = await handle_tools_call(
                client, base_url, name, arguments, timeout_seconds=timeout_seconds
            )
        except ToolGateError as exc:
            logger.info("managed_tool_failed", tool=name, error_code=exc.code, error=exc.message)
            return RpcReply(400, build_error(request_id, RpcErrorCodes.SERVER_ERROR, exc.message))

        logger.info("managed_tool_called", tool=name)
        return RpcReply(200, build_success(request_id, result))

    return RpcReply(
        404,
        build_error(request_id, RpcErrorCodes.METHOD_NOT_FOUND, f"Method not found: {method or '(empty)'}"),
    )
