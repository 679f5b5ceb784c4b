"""Server registry exceptions."""

from toolgate.exceptions import ConfigurationError, ToolGateError


class RegistryError(ToolGateError):
    """Base class for server registry errors."""


class InvalidServerConfigError(RegistryError, ConfigurationError):
    """Raised when a server name or URL is rejected."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_SERVER_CONFIG")


class ServerNotFoundError(RegistryError):
    """Raised when no configured server has the given id."""

    def __init__(self, server_id: str):
        self.server_id = server_id
        super().__init__(message=f"MCP server not found: {server_id}", code="SERVER_NOT_FOUND")


class ManagedServerReadOnlyError(RegistryError):
    """Raised when a caller tries to edit or remove a managed server."""

    def __init__(self, server_id: str):
        self.server_id = server_id
        super().__init__(
            message=f"Managed MCP server {server_id} can only be enabled or disabled.",
            code="MANAGED_SERVER_READ_ONLY",
        )
