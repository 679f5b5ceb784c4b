"""Server and tool name resolution."""

from toolgate.registry.schemas import ServerConfig

from .exceptions import AmbiguousToolError, ServerDisabledError, ToolNotFoundError, UnknownServerError
from .schemas import ToolDescriptor


def _normalize_token(value: str) -> str:
    return value.strip().lower()


def find_server(servers: list[ServerConfig], token: str) -> ServerConfig | None:
    """Exact case-insensitive match on id or name, first hit wins."""
    normalized = _normalize_token(token)
    for server in servers:
        if _normalize_token(server.id) == normalized or _normalize_token(server.name) == normalized:
            return server
    return None


def resolve_server(servers: list[ServerConfig], token: str) -> ServerConfig:
    """Resolve a server token to an enabled server.

    Raises:
        UnknownServerError: If nothing matches.
        ServerDisabledError: If the match is disabled.
    """
    server = find_server(servers, token)
    if server is None:
        raise UnknownServerError(token)
    if not server.enabled:
        raise ServerDisabledError(server.name)
    return server


def server_by_id(servers: list[ServerConfig], server_id: str) -> ServerConfig:
    """Exact id lookup for a server already chosen by its catalog.

    Raises:
        UnknownServerError: If no server has the id.
        ServerDisabledError: If the server is disabled.
    """
    for server in servers:
        if server.id == server_id:
            if not server.enabled:
                raise ServerDisabledError(server.name)
            return server
    raise UnknownServerError(server_id)


def select_tool(
    tool_name: str,
    candidates: list[ToolDescriptor],
    server_scoped: bool,
) -> ToolDescriptor:
    """Pick the single tool a call targets.

    Args:
        tool_name: Requested name (exact match).
        candidates: Tools from every server under consideration.
        server_scoped: Whether the caller named a server explicitly.

    Raises:
        ToolNotFoundError: If no candidate has the name.
        AmbiguousToolError: If unscoped and several servers offer it.
    """
    matched = [tool for tool in candidates if tool.name == tool_name]
    if not matched:
        raise ToolNotFoundError(tool_name)

    if not server_scoped and len({tool.server_id for tool in matched}) > 1:
        raise AmbiguousToolError(tool_name, sorted({tool.server_name for tool in matched}))

    return matched[0]


def matches_search(tool: ToolDescriptor, query: str) -> bool:
    """Any whitespace token of query is a substring of name + description."""
    tokens = query.lower().split()
    if not tokens:
        return True
    haystack = f"{tool.name} {tool.description or ''}".lower()
    return any(token in haystack for token in tokens)
