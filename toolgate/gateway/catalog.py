"""Per-server tool catalogs and their cache."""

from typing import Any

from toolgate.registry.schemas import ServerConfig

from .schemas import CatalogEntry, ToolDescriptor


def parse_tool_list(server: ServerConfig, result: Any) -> list[ToolDescriptor]:
    """Extract tool descriptors from a tools/list result.

    Anything not shaped like {"tools": [{"name": ...}, ...]} yields no tools;
    entries without a non-blank string name are skipped.
    """
    if not isinstance(result, dict) or not isinstance(result.get("tools"), list):
        return []

    tools: list[ToolDescriptor] = []
    for item in result["tools"]:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        description = item.get("description")
        if isinstance(description, str):
            description = description.strip() or None
        else:
            description = None
        tools.append(
            ToolDescriptor(
                server_id=server.id,
                server_name=server.name,
                server_url=server.url,
                name=name.strip(),
                description=description,
                input_schema=item.get("inputSchema"),
            )
        )
    return tools


class CatalogCache:
    """Catalog entries keyed by server id.

    Lives as long as the owning client (normally the process); there is no
    TTL, entries are replaced only by an explicit refresh.
    """

    def __init__(self):
        self._entries: dict[str, CatalogEntry] = {}

    def __contains__(self, server_id: str) -> bool:
        return server_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, server_id: str) -> CatalogEntry | None:
        return self._entries.get(server_id)

    def put(self, entry: CatalogEntry) -> None:
        self._entries[entry.server.id] = entry

    def invalidate(self, server_id: str) -> None:
        self._entries.pop(server_id, None)

    def clear(self) -> None:
        self._entries.clear()
