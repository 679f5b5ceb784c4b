"""Edge policy: origin allow-listing, body caps and fallback routes."""

from .body import parse_json_body, read_limited_body
from .exceptions import EdgeRejection, InvalidJsonBodyError, OriginNotAllowedError, PayloadTooLargeError
from .origin import allowed_origins_for, is_origin_allowed, normalize_origin

__all__ = [
    "parse_json_body",
    "read_limited_body",
    "EdgeRejection",
    "InvalidJsonBodyError",
    "OriginNotAllowedError",
    "PayloadTooLargeError",
    "allowed_origins_for",
    "is_origin_allowed",
    "normalize_origin",
]
