"""Edge rejections: requests refused before reaching a handler."""

from toolgate.exceptions import ToolGateError


class EdgeRejection(ToolGateError):
    """Base class for requests the edge refuses.

    Attributes:
        status_code: HTTP status returned to the caller.
    """

    status_code = 400

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message=message, code=code)


class OriginNotAllowedError(EdgeRejection):
    """Raised when a browser Origin is not on the allow-list."""

    status_code = 403

    def __init__(self, origin: str):
        self.origin = origin
        super().__init__(message="Origin not allowed", code="ORIGIN_NOT_ALLOWED")


class PayloadTooLargeError(EdgeRejection):
    """Raised when a request body exceeds the configured limit.

    Attributes:
        max_bytes: The limit that was exceeded.
    """

    status_code = 413

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(
            message=f"Request body exceeds limit ({max_bytes} bytes).",
            code="PAYLOAD_TOO_LARGE",
        )


class InvalidJsonBodyError(EdgeRejection):
    """Raised when a body that must be JSON does not parse."""

    def __init__(self, message: str = "Invalid JSON body."):
        super().__init__(message=message, code="INVALID_JSON")
