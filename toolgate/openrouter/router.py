"""LLM passthrough route."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from toolgate.config import Settings
from toolgate.dependencies import get_app_settings, get_http_client
from toolgate.edge.body import parse_json_body, read_limited_body

from .exceptions import UnmanagedCredentialsError
from .proxy import (
    PASSTHROUGH_PREFIX,
    check_model,
    check_route,
    forward_to_openrouter,
    has_unmanaged_credentials,
    normalize_relative_path,
)

router = APIRouter(tags=["openrouter"])

PASSTHROUGH_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(f"{PASSTHROUGH_PREFIX}/{{upstream_path:path}}", methods=PASSTHROUGH_METHODS)
async def openrouter_passthrough(
    upstream_path: str,
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> StreamingResponse:
    """Forward curated completion requests using the server credential.

    Every check runs before the upstream is contacted: credentials, route
    table, body size and JSON shape, then the model allow-list.
    """
    if has_unmanaged_credentials(request.headers):
        raise UnmanagedCredentialsError()

    relative_path = normalize_relative_path(request.url.path)
    method = request.method.upper()
    check_route(relative_path, method)

    payload = None
    if method == "POST":
        body = await read_limited_body(request, settings.REQUEST_BODY_LIMIT_BYTES)
        payload = parse_json_body(body)
        check_model(relative_path, payload)

    return await forward_to_openrouter(
        client,
        base_url=settings.OPENROUTER_BASE_URL,
        api_key=settings.OPENROUTER_API_KEY,
        method=method,
        relative_path=relative_path,
        query=request.url.query,
        payload=payload,
        accept=request.headers.get("accept"),
        timeout_seconds=settings.openrouter_timeout_seconds,
    )
