"""Browser origin policy for API routes."""

from urllib.parse import urlsplit


def normalize_origin(value: str | None) -> str | None:
    """Reduce an Origin header to scheme://host[:port], or None if it does not parse."""
    if not value or not value.strip():
        return None
    try:
        parts = urlsplit(value.strip())
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    default_port = {"http": 80, "https": 443}.get(parts.scheme.lower())
    if port is not None and port != default_port:
        host = f"{host}:{port}"
    return f"{parts.scheme.lower()}://{host}"


def allowed_origins_for(configured: set[str], host: str | None) -> set[str]:
    """Origins accepted for a request.

    The configured allow-list wins; without one, only the service's own host
    over http or https is accepted.
    """
    if configured:
        return {normalize_origin(item) or item for item in configured}
    host = (host or "").strip()
    if not host:
        return set()
    return {f"https://{host}", f"http://{host}"}


def is_origin_allowed(origin_header: str | None, configured: set[str], host: str | None) -> bool:
    """Check a request's Origin header.

    Absent or unparsable origins are not browser cross-origin calls and pass.
    """
    origin = normalize_origin(origin_header)
    if origin is None:
        return True
    return origin in allowed_origins_for(configured, host)
