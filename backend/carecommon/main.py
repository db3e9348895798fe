"""carecommon edge app: static assets plus health, with landing config loaded at startup."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from carecommon.api.router import api_router, static_asset_router
from carecommon.config import get_settings
from carecommon.errors import ConfigError
from carecommon.handlers.static import static_assets
from carecommon.logging_config import configure_logging
from carecommon.services.config_loader import load_config_from_json, load_config_from_param_store
from carecommon.services.request_context import bind_request_id, clear_request_id

configure_logging()

logger = structlog.get_logger()


def load_landing_config(settings) -> None:
    """Load landing config from the configured source. Failures are logged, not fatal."""
    try:
        if settings.CONFIG_SOURCE == "json":
            load_config_from_json(settings.CONFIG_JSON_PATH)
        elif settings.CONFIG_SOURCE == "param_store":
            load_config_from_param_store(settings.PARAM_STORE_PATH, region=settings.AWS_REGION)
    except ConfigError as e:
        # App can still serve static assets; profile flows will report the missing config
        logger.error("config_load_failed", source=settings.CONFIG_SOURCE, error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG)

    load_landing_config(settings)

    app.state.static_assets = static_assets
    if settings.STATIC_ROOT:
        static_assets.load_directory_tree(
            settings.STATIC_ROOT,
            settings.STATIC_PATH_PREFIX or settings.STATIC_ROOT,
            settings.STATIC_INDEX_PAGE,
        )

    logger.info("app_started")

    yield

    # ── Shutdown ──
    logger.info("app_stopped")


# ── Create Application ──

app = FastAPI(
    title="carecommon",
    description="Static asset edge function with landing configuration.",
    version="1.0.0",
    lifespan=lifespan,
)


# ── Middleware ──

@app.middleware("http")
async def request_context(request: Request, call_next):
    """Bind the incoming (or a fresh) request id for logs and upstream calls."""
    header = get_settings().REQUEST_ID_HEADER
    request_id = bind_request_id(request.headers.get(header))
    try:
        response = await call_next(request)
    finally:
        clear_request_id()
    response.headers[header] = request_id
    return response


# ── Global Exception Handlers ──

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all error handler for unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again.",
        },
    )


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=422,
        content={"error": "validation_error", "message": str(exc)},
    )


# ── Routes ──

app.include_router(api_router, prefix="/api/v1")
app.include_router(static_asset_router)  # catch-all, must stay last
