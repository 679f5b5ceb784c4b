"""Validation of server URLs supplied by callers or stored documents."""

from urllib.parse import urlsplit

from .exceptions import InvalidServerConfigError


def validate_server_url(url: str) -> str:
    """Validate an http(s) server URL and strip trailing slashes.

    Raises:
        InvalidServerConfigError: If the URL is empty, malformed or not http(s).
    """
    trimmed = url.strip() if isinstance(url, str) else ""
    if not trimmed:
        raise InvalidServerConfigError("MCP server URL cannot be empty.")

    try:
        parts = urlsplit(trimmed)
    except ValueError as exc:
        raise InvalidServerConfigError("Invalid MCP server URL.") from exc
    if not parts.scheme:
        raise InvalidServerConfigError("Invalid MCP server URL.")
    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidServerConfigError("MCP server URL must use http:// or https://")
    if not parts.netloc:
        raise InvalidServerConfigError("Invalid MCP server URL.")

    return trimmed.rstrip("/")
