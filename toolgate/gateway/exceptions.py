"""Gateway client exceptions."""

from toolgate.exceptions import ToolGateError


class GatewayError(ToolGateError):
    """Base class for gateway client errors."""


class NoServersConfiguredError(GatewayError):
    def __init__(self):
        super().__init__(
            message="No MCP servers configured. Open the integrations settings to add one.",
            code="NO_SERVERS",
        )


class UnknownServerError(GatewayError):
    """Raised when a server token matches no configured server id or name."""

    def __init__(self, server_token: str):
        self.server_token = server_token
        super().__init__(message=f"Unknown MCP server: {server_token}", code="UNKNOWN_SERVER")


class ServerDisabledError(GatewayError):
    """Raised when the resolved server is switched off."""

    def __init__(self, server_name: str, message: str | None = None):
        self.server_name = server_name
        super().__init__(
            message=message or f'MCP server "{server_name}" is disabled.',
            code="SERVER_DISABLED",
        )


class ManagedServerUnavailableError(GatewayError):
    def __init__(self, managed_id: str):
        self.managed_id = managed_id
        super().__init__(
            message=f"Managed MCP server {managed_id} is unavailable.",
            code="MANAGED_SERVER_UNAVAILABLE",
        )


class ToolNotFoundError(GatewayError):
    """Raised when no candidate server lists the requested tool.

    Attributes:
        tool_name: The requested tool.
    """

    def __init__(self, tool_name: str, message: str | None = None):
        self.tool_name = tool_name
        super().__init__(
            message=message or (
                f"MCP tool not found: {tool_name}. Use `search` first to discover "
                "available tools, then `describe` to inspect inputs."
            ),
            code="TOOL_NOT_FOUND",
        )


class AmbiguousToolError(GatewayError):
    """Raised when a tool name exists on several servers and no server was given.

    Attributes:
        tool_name: The requested tool.
        server_names: Sorted names of the servers offering it.
    """

    def __init__(self, tool_name: str, server_names: list[str]):
        self.tool_name = tool_name
        self.server_names = server_names
        super().__init__(
            message=(
                f'MCP tool "{tool_name}" is available on multiple servers '
                f"({', '.join(server_names)}). Specify the server parameter."
            ),
            code="AMBIGUOUS_TOOL",
        )


class InvalidToolArgumentsError(GatewayError):
    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_TOOL_ARGUMENTS")


class TransportError(GatewayError):
    """Raised when a tool server cannot be reached at all.

    Attributes:
        server_url: URL that was called.
    """

    def __init__(self, message: str, server_url: str):
        self.server_url = server_url
        super().__init__(message=message, code="TRANSPORT_ERROR")
