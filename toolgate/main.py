from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings, check_settings, get_settings
from .database import create_engine, create_session_factory, init_models
from .edge.exceptions import EdgeRejection
from .edge.static import router as static_router
from .exceptions import OperationCancelledError, OperationTimeoutError, ToolGateError
from .gateway import build_gateway_client, build_market_tool
from .logs import configure_logging
from .market.router import router as market_router
from .openrouter import CURATED_MODELS
from .openrouter.router import router as openrouter_router
from .ratelimit import EdgeGuardMiddleware, FixedWindowRateLimiter, RateLimitConfig
from .registry import ServerRegistry, SettingsStore, SqlSettingsStore
from .registry.models import Setting  # noqa: F401 - Import so Base.metadata sees it

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    http_client: httpx.AsyncClient | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
    settings_store: SettingsStore | None = None,
) -> FastAPI:
    """Build the edge service.

    Collaborators that are passed in are used as is and never closed by the
    app; anything missing is created in the lifespan and closed on shutdown.

    Args:
        settings: Loaded settings; read from the environment if omitted.
        http_client: Shared outbound HTTP client.
        rate_limiter: Rate limiter instance, one per process.
        settings_store: Key/value store backing the server registry.

    Raises:
        ConfigurationError: If the settings cannot run the service.
    """
    settings = check_settings(settings or get_settings())
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    limiter = rate_limiter or FixedWindowRateLimiter(
        RateLimitConfig(
            window_ms=settings.RATE_LIMIT_WINDOW_MS,
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        )
    )

    def attach_clients(app: FastAPI) -> None:
        app.state.gateway = build_gateway_client(
            app.state.http_client, app.state.registry, settings.mcp_timeout_seconds
        )
        app.state.market_tool = build_market_tool(
            app.state.http_client, app.state.registry, settings.mcp_timeout_seconds
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_client = app.state.http_client is None
        if owns_client:
            # timeout=None removes the global default; each call applies its own
            app.state.http_client = httpx.AsyncClient(timeout=None)

        engine = None
        try:
            if app.state.registry is None:
                engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG)
                await init_models(engine)
                app.state.registry = ServerRegistry(
                    SqlSettingsStore(create_session_factory(engine)),
                    origin=settings.PUBLIC_ORIGIN,
                    proxy_base_url=settings.MCP_PROXY_BASE_URL,
                )
            attach_clients(app)
            logger.info("service_started", service=settings.SERVICE_NAME, port=settings.PORT)

            yield
        finally:
            if owns_client:
                await app.state.http_client.aclose()
            if engine is not None:
                await engine.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, debug=settings.DEBUG)
    app.state.settings = settings
    app.state.rate_limiter = limiter
    app.state.http_client = http_client
    app.state.registry = None
    if settings_store is not None:
        app.state.registry = ServerRegistry(
            settings_store,
            origin=settings.PUBLIC_ORIGIN,
            proxy_base_url=settings.MCP_PROXY_BASE_URL,
        )
    if http_client is not None and app.state.registry is not None:
        attach_clients(app)

    app.add_middleware(
        EdgeGuardMiddleware,
        limiter=limiter,
        allowed_origins=settings.allowed_origins,
    )

    @app.exception_handler(EdgeRejection)
    async def edge_rejection_handler(request: Request, exc: EdgeRejection):
        logger.info("edge_rejected", path=request.url.path, status_code=exc.status_code, error=exc.code)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(OperationTimeoutError)
    async def timeout_handler(request: Request, exc: OperationTimeoutError):
        return JSONResponse(
            status_code=504,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(OperationCancelledError)
    async def cancelled_handler(request: Request, exc: OperationCancelledError):
        return JSONResponse(
            status_code=499,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(ToolGateError)
    async def toolgate_exception_handler(request: Request, exc: ToolGateError):
        logger.error("unhandled_service_error", path=request.url.path, error=exc.code, message=exc.message)
        return JSONResponse(
            status_code=500,
            content={"error": exc.code, "message": exc.message},
        )

    @app.get("/healthz")
    async def health_check():
        return {
            "ok": True,
            "service": settings.SERVICE_NAME,
            "openrouterConfigured": bool(settings.OPENROUTER_API_KEY),
            "curatedModelCount": len(CURATED_MODELS),
        }

    app.include_router(market_router)
    app.include_router(openrouter_router)
    # Catch-all routes go last
    app.include_router(static_router)

    return app
