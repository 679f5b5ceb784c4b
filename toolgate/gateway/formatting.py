"""Plain-text rendering of gateway results for the chat caller."""

import json
from typing import Any

from toolgate.registry.schemas import ServerConfig

from .exceptions import AmbiguousToolError, ServerDisabledError, ToolNotFoundError, UnknownServerError
from .schemas import ToolDescriptor

PREVIEW_LIMIT = 20
SEARCH_LIMIT = 30
FIRST_LINE_MAX = 220

UNKNOWN_SERVER_HINT = " Tip: run `mcp` with no params to list configured servers and IDs."
AMBIGUOUS_TOOL_HINT = " Tip: include the `server` parameter to disambiguate."
TOOL_NOT_FOUND_HINT = " Tip: run `search` first, then `describe`, before calling `tool`."
DISABLED_HINT = " Enable it in the integrations settings."


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def first_line(value: str) -> str:
    line = value.split("\n", 1)[0]
    if len(line) > FIRST_LINE_MAX:
        return f"{line[:FIRST_LINE_MAX - 3]}…"
    return line


def format_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def json_block(value: Any) -> str:
    return "\n".join(["```json", format_json(value), "```"])


def server_status_line(server: ServerConfig, tools: list[ToolDescriptor] | None) -> str:
    prefix = f"- {server.name} ({server.url}):"
    if not server.enabled:
        return f"{prefix} disabled"
    if tools is None:
        return f"{prefix} enabled"
    return f"{prefix} enabled, {plural(len(tools), 'tool')}"


def tool_preview(tools: list[ToolDescriptor], limit: int = PREVIEW_LIMIT) -> str:
    if not tools:
        return "No tools found."

    lines = []
    for tool in tools[:limit]:
        description = f": {tool.description}" if tool.description else ""
        lines.append(f"- {tool.name}{description}")
    if len(tools) > limit:
        lines.append(f"- … {len(tools) - limit} more")
    return "\n".join(lines)


def search_text(query: str, matches: list[ToolDescriptor], limit: int = SEARCH_LIMIT) -> str:
    lines = [f'MCP search "{query}"', ""]
    if not matches:
        lines.append("No matching tools.")
    else:
        for tool in matches[:limit]:
            description = f": {tool.description}" if tool.description else ""
            lines.append(f"- {tool.name} ({tool.server_name}){description}")
        if len(matches) > limit:
            lines.append(f"- … {len(matches) - limit} more")
    return "\n".join(lines)


def describe_text(tool: ToolDescriptor) -> str:
    schema_block = (
        "(no input schema provided)" if tool.input_schema is None else json_block(tool.input_schema)
    )
    return "\n".join(
        [
            f"MCP tool: {tool.name}",
            f"- server: {tool.server_name} ({tool.server_url})",
            f"- description: {tool.description or '(no description provided)'}",
            "",
            "Input schema:",
            schema_block,
        ]
    )


def _text_blocks(content: Any) -> list[str]:
    if not isinstance(content, list):
        return []
    blocks = []
    for item in content:
        if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str):
            text = item["text"].strip()
            if text:
                blocks.append(text)
    return blocks


def tool_call_result_text(result: Any) -> str:
    """Render a tools/call result: text summary, then structured content as JSON."""
    if not isinstance(result, dict):
        return json_block(result)

    sections = []
    blocks = _text_blocks(result.get("content"))
    if blocks:
        sections.append("\n".join(["Summary:", "\n\n".join(blocks)]))
    if "structuredContent" in result:
        sections.append("\n".join(["Structured content:", json_block(result["structuredContent"])]))

    if not sections:
        return json_block(result)
    return "\n\n".join(sections)


def remediation_hint(exc: Exception, operation: str) -> str:
    """Suggest the next step for a failed operation, or return ""."""
    if isinstance(exc, UnknownServerError):
        return UNKNOWN_SERVER_HINT
    if operation == "tool":
        if isinstance(exc, AmbiguousToolError):
            return AMBIGUOUS_TOOL_HINT
        message = str(exc).lower()
        if isinstance(exc, ToolNotFoundError) or "tool not found" in message or "unknown tool" in message:
            return TOOL_NOT_FOUND_HINT
    if isinstance(exc, ServerDisabledError):
        return DISABLED_HINT
    return ""
