"""Capped request body reading."""

import json
from typing import Any

from starlette.requests import Request

from .exceptions import InvalidJsonBodyError, PayloadTooLargeError


async def read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body, aborting once it grows past max_bytes.

    A declared Content-Length above the cap is rejected before reading.

    Raises:
        PayloadTooLargeError: If the body exceeds the limit.
    """
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            size = int(declared)
        except ValueError:
            size = max_bytes + 1
        if size > max_bytes:
            raise PayloadTooLargeError(max_bytes)

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_bytes:
            raise PayloadTooLargeError(max_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def parse_json_body(body: bytes) -> Any:
    """Decode a JSON body; an empty body is treated as an empty object."""
    if not body:
        return {}
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise InvalidJsonBodyError() from exc
