"""Market data tool exceptions."""

from toolgate.exceptions import ToolGateError


class ArgumentValidationError(ToolGateError, ValueError):
    """Raised when a tool argument fails normalization.

    Subclasses ValueError so it can be raised from inside pydantic validators
    and recovered unchanged from the resulting ValidationError.
    """

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_ARGUMENTS")


class UnknownToolError(ToolGateError):
    """Raised when a tool name is not in the managed catalog."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(message=f"Tool not found: {tool_name}", code="TOOL_NOT_FOUND")


class UpstreamError(ToolGateError):
    """Raised when the market data REST source fails or answers garbage.

    Attributes:
        status_code: HTTP status returned by the source, if any.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message=message, code="UPSTREAM_ERROR")
        self.status_code = status_code
