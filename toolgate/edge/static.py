"""Fallback routes: unknown API paths and the single-page app bundle."""

import re
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response

from toolgate.config import Settings
from toolgate.dependencies import get_app_settings

router = APIRouter(tags=["static"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
HASHED_ASSET_PATTERN = re.compile(r"-[a-zA-Z0-9]{8,}\.")
IMMUTABLE_CACHE = "public, max-age=31536000, immutable"


def safe_join(base_dir: Path, request_path: str) -> Path:
    """Resolve request_path inside base_dir.

    Raises:
        ValueError: If the resolved path escapes base_dir.
    """
    base = base_dir.resolve()
    full_path = (base / request_path.lstrip("/")).resolve()
    if full_path != base and base not in full_path.parents:
        raise ValueError(f"Path escapes static root: {request_path}")
    return full_path


def cache_control_for(request_path: str) -> str:
    if request_path.startswith("/assets/") and HASHED_ASSET_PATTERN.search(request_path):
        return IMMUTABLE_CACHE
    return "no-cache"


@router.api_route("/api/{api_path:path}", methods=ALL_METHODS, include_in_schema=False)
async def unknown_api_route(api_path: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "Unknown API route"})


@router.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
async def serve_static(
    full_path: str,
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Response:
    """Serve a file from the built bundle, falling back to index.html."""
    if request.method not in ("GET", "HEAD"):
        return PlainTextResponse("Method not allowed", status_code=405)

    request_path = "/" + full_path if full_path else "/index.html"
    dist_dir = Path(settings.DIST_DIR)

    try:
        file_path = safe_join(dist_dir, request_path)
    except ValueError:
        return PlainTextResponse("Bad request", status_code=400)

    if not file_path.is_file():
        # Client-side routes resolve through the app shell
        file_path = dist_dir / "index.html"
        if not file_path.is_file():
            return PlainTextResponse("Not found", status_code=404)

    return FileResponse(file_path, headers={"Cache-Control": cache_control_for(request_path)})
