"""Base exceptions shared by every ToolGate component."""


class ToolGateError(Exception):
    """Base exception for all ToolGate errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ConfigurationError(ToolGateError):
    """Raised when required configuration is missing or malformed.

    Configuration errors fail fast at construction and are never retried.
    """

    def __init__(self, message: str, code: str = "CONFIGURATION_ERROR"):
        super().__init__(message=message, code=code)


class OperationTimeoutError(ToolGateError):
    """Raised when an outbound operation exceeds its timeout.

    Attributes:
        timeout_seconds: Timeout duration that was exceeded.
    """

    def __init__(self, message: str, timeout_seconds: float):
        super().__init__(message=message, code="TIMEOUT")
        self.timeout_seconds = timeout_seconds


class OperationCancelledError(ToolGateError):
    """Raised when the caller cancels an in-flight operation."""

    def __init__(self, message: str = "Aborted"):
        super().__init__(message=message, code="CANCELLED")
