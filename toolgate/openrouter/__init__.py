"""Managed passthrough to the OpenRouter LLM API."""

from .exceptions import (
    EndpointMethodNotAllowedError,
    ModelNotAllowedError,
    UnmanagedCredentialsError,
    UnsupportedEndpointError,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
)
from .models import CURATED_MODELS, MANAGED_API_KEY_SENTINEL, is_curated_model_id

__all__ = [
    "EndpointMethodNotAllowedError",
    "ModelNotAllowedError",
    "UnmanagedCredentialsError",
    "UnsupportedEndpointError",
    "UpstreamTimeoutError",
    "UpstreamUnavailableError",
    "CURATED_MODELS",
    "MANAGED_API_KEY_SENTINEL",
    "is_curated_model_id",
]
