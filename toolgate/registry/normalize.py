"""Normalization of untrusted server entries read from the settings store.

Stored documents may have been written by older versions or edited by hand,
so every reader here tolerates junk: invalid entries are dropped, never raised.
"""

import re
import uuid
from typing import Any

from .exceptions import InvalidServerConfigError
from .schemas import ServerConfig, ServerSource
from .validation import validate_server_url

DEFAULT_ORIGIN = "http://localhost"
SLUG_MAX_LENGTH = 48
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")
_FALSE_STRINGS = {"0", "false", "off"}


def normalize_optional_string(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def normalize_enabled(value: Any) -> bool:
    """Interpret a stored enabled flag.

    Booleans are kept, numbers are true when non-zero, strings "0", "false"
    and "off" are false. Anything else, including a missing flag, is true.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
        return False
    return True


def normalize_server_id(value: Any, fallback_name: str, fallback_url: str) -> str:
    """Keep a stored id, or derive a stable slug id from name and URL."""
    existing = normalize_optional_string(value)
    if existing:
        return existing

    slug = _SLUG_SEPARATORS.sub("-", f"{fallback_name} {fallback_url}".lower())
    slug = slug.strip("-")[:SLUG_MAX_LENGTH]
    return f"mcp-{slug}" if slug else f"mcp-{uuid.uuid4()}"


def normalize_server(raw: Any) -> ServerConfig | None:
    """Turn one stored entry into a custom ServerConfig, or None to drop it.

    Entries flagged as managed are dropped: managed servers are synthesized
    from their definitions, never read back from the custom list.
    """
    if isinstance(raw, ServerConfig):
        raw = raw.model_dump(mode="json")
    if not isinstance(raw, dict):
        return None
    if raw.get("source") == ServerSource.managed.value:
        return None

    name = normalize_optional_string(raw.get("name"))
    raw_url = normalize_optional_string(raw.get("url"))
    if not name or not raw_url:
        return None

    try:
        url = validate_server_url(raw_url)
    except InvalidServerConfigError:
        return None

    return ServerConfig(
        id=normalize_server_id(raw.get("id"), name, url),
        name=name,
        url=url,
        enabled=normalize_enabled(raw.get("enabled")),
        token=normalize_optional_string(raw.get("token")),
        source=ServerSource.custom,
    )


def unique_by_id(servers: list[ServerConfig]) -> list[ServerConfig]:
    """Suffix repeated ids with -2, -3, ... keeping the first occurrence as is."""
    used: set[str] = set()
    unique: list[ServerConfig] = []
    for server in servers:
        candidate = server.id
        if candidate in used:
            suffix = 2
            while f"{candidate}-{suffix}" in used:
                suffix += 1
            candidate = f"{candidate}-{suffix}"
        used.add(candidate)
        unique.append(server if candidate == server.id else server.model_copy(update={"id": candidate}))
    return unique


def normalize_servers(raw: Any) -> list[ServerConfig]:
    """Accept a bare list or a {"servers": [...]} document."""
    if isinstance(raw, list):
        items = raw
    elif isinstance(raw, dict) and isinstance(raw.get("servers"), list):
        items = raw["servers"]
    else:
        items = []

    parsed = [server for server in (normalize_server(item) for item in items) if server is not None]
    return unique_by_id(parsed)


def parse_managed_enabled_map(raw: Any) -> dict[str, bool]:
    """Accept a {"enabledById": {...}} document or a bare flag map."""
    if isinstance(raw, dict) and isinstance(raw.get("enabledById"), dict):
        raw = raw["enabledById"]
    if not isinstance(raw, dict):
        return {}
    return {str(key): normalize_enabled(value) for key, value in raw.items()}


def resolve_origin(origin: str | None) -> str:
    resolved = normalize_optional_string(origin)
    return resolved.rstrip("/") if resolved else DEFAULT_ORIGIN
