"""LLM passthrough exceptions."""

from toolgate.edge.exceptions import EdgeRejection

from .models import CURATED_MODELS


class UnmanagedCredentialsError(EdgeRejection):
    """Raised when a client sends its own credential instead of the sentinel."""

    def __init__(self):
        super().__init__(
            message=(
                "Unmanaged client credentials are not accepted. "
                "Managed server credentials are applied automatically."
            ),
            code="UNMANAGED_CREDENTIALS",
        )


class ModelNotAllowedError(EdgeRejection):
    """Raised when a completion request names a model outside the curated list."""

    def __init__(self, model: str):
        self.model = model
        super().__init__(
            message=f"Model is not allowed. Allowed models: {', '.join(CURATED_MODELS)}",
            code="MODEL_NOT_ALLOWED",
        )


class UnsupportedEndpointError(EdgeRejection):
    """Raised for passthrough paths outside the route table."""

    status_code = 404

    def __init__(self, path: str):
        self.path = path
        super().__init__(message="Unsupported OpenRouter endpoint.", code="UNSUPPORTED_ENDPOINT")


class EndpointMethodNotAllowedError(EdgeRejection):
    """Raised when a supported passthrough path is called with the wrong method."""

    status_code = 405

    def __init__(self, path: str, method: str):
        self.path = path
        self.method = method
        super().__init__(message="Method not allowed for endpoint.", code="METHOD_NOT_ALLOWED")


class UpstreamTimeoutError(EdgeRejection):
    """Raised when the LLM API does not answer in time."""

    status_code = 504

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(
            message=f"OpenRouter request timed out after {timeout_ms}ms.",
            code="UPSTREAM_TIMEOUT",
        )


class UpstreamUnavailableError(EdgeRejection):
    """Raised when the LLM API cannot be reached."""

    status_code = 502

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(message=f"OpenRouter request failed: {reason}", code="UPSTREAM_UNAVAILABLE")
