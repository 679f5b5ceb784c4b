"""Managed market data tools served over the JSON-RPC tool protocol."""

from .catalog import (
    MANAGED_TOOLS,
    ManagedToolDefinition,
    get_tool_definition,
    list_tool_descriptors,
    validate_tool_arguments,
)
from .exceptions import ArgumentValidationError, UnknownToolError, UpstreamError
from .service import dispatch, handle_initialize, handle_tools_call, handle_tools_list, summarize_payload

__all__ = [
    "MANAGED_TOOLS",
    "ManagedToolDefinition",
    "get_tool_definition",
    "list_tool_descriptors",
    "validate_tool_arguments",
    "ArgumentValidationError",
    "UnknownToolError",
    "UpstreamError",
    "dispatch",
    "handle_initialize",
    "handle_tools_call",
    "handle_tools_list",
    "summarize_payload",
]
