"""HTTP route for the managed market data protocol endpoint."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from toolgate.config import Settings
from toolgate.dependencies import get_app_settings, get_http_client
from toolgate.edge.body import read_limited_body
from toolgate.protocol import ProtocolError, build_error, parse_request

from .service import dispatch

router = APIRouter(tags=["managed-mcp"])

MANAGED_ENDPOINT_PATH = "/api/mcp/jamaica-market"
ENDPOINT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(MANAGED_ENDPOINT_PATH, methods=ENDPOINT_METHODS, operation_id="managed_market_rpc")
async def managed_market_rpc(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> Response:
    """Handle JSON-RPC 2.0 messages for the market data tools."""
    if request.method != "POST":
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})

    body = await read_limited_body(request, settings.REQUEST_BODY_LIMIT_BYTES)
    try:
        rpc_request = parse_request(body)
    except ProtocolError as exc:
        return JSONResponse(status_code=400, content=build_error(None, exc.rpc_code, exc.message))

    reply = await dispatch(
        rpc_request,
        client=client,
        base_url=settings.JAMAICA_API_BASE_URL,
        timeout_seconds=settings.jamaica_timeout_seconds,
    )
    if reply.body is None:
        return Response(status_code=204)
    return JSONResponse(status_code=reply.status_code, content=reply.body)
