"""
Gatehouse - Main Application Entry Point

This module provides the FastAPI application factory. ``create_app`` builds
a GatehouseState from settings, mounts the global pipeline in front of the
routers and installs the exception handlers that render every failure as the
JSON envelope.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from gatehouse import __version__
from gatehouse.api.routes.admin import router as admin_router
from gatehouse.api.routes.auth import router as auth_router
from gatehouse.api.routes.demo import router as demo_router
from gatehouse.api.routes.health import router as health_router
from gatehouse.api.routes.protected import router as protected_router
from gatehouse.core.config import Settings, get_settings
from gatehouse.core.exceptions import GatehouseException, RateLimitExceededError
from gatehouse.observability.logging import configure_logging, get_logger
from gatehouse.pipeline.chain import PipelineMiddleware
from gatehouse.pipeline.state import GatehouseState

# Application metadata
APP_NAME = "Gatehouse"
APP_DESCRIPTION = "Request pipeline: rate limiting, validation, sessions and logging"

logger = get_logger(__name__)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan: start and stop the expiry sweeper.

    Uses the modern lifespan pattern instead of deprecated @app.on_event.
    """
    state: GatehouseState = app.state.gatehouse
    logger.info(
        "app.startup",
        service=state.settings.service_name,
        version=__version__,
        environment=state.settings.environment,
    )
    state.start_sweeper()

    yield

    await state.stop_sweeper()
    logger.info("app.shutdown", total_requests=state.stats.total)


# =============================================================================
# Exception Handlers
# =============================================================================


async def gatehouse_exception_handler(request: Request, exc: GatehouseException) -> JSONResponse:
    """Render a route-level failure as the JSON envelope."""
    headers = None
    if isinstance(exc, RateLimitExceededError) and exc.retry_after is not None:
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Envelope for router-level HTTP errors (unknown path, wrong method)."""
    if exc.status_code == 404:
        content: dict[str, Any] = {
            "success": False,
            "message": "Endpoint not found",
            "messageTH": "ไม่พบ endpoint ที่ต้องการ",
            "path": request.url.path,
            "method": request.method,
        }
    else:
        content = {"success": False, "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


# =============================================================================
# Application Factory
# =============================================================================


def create_app(settings: Optional[Settings] = None, state: Optional[GatehouseState] = None) -> FastAPI:
    """
    Build a Gatehouse application.

    Args:
        settings: Explicit settings (defaults to get_settings())
        state: Pre-built state, e.g. with fake clocks (defaults to one built
            from ``settings``)

    Returns:
        FastAPI application with the pipeline mounted
    """
    settings = settings or (state.settings if state else get_settings())
    configure_logging(level=settings.log_level, force=True)
    state = state or GatehouseState.from_settings(settings)

    is_production = settings.environment == "production"
    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.gatehouse = state

    app.add_middleware(PipelineMiddleware, pipeline=state.build_pipeline())
    app.add_exception_handler(GatehouseException, gatehouse_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(protected_router)
    app.include_router(admin_router)
    app.include_router(demo_router)

    @app.get("/", tags=["Info"])
    async def root() -> dict[str, Any]:
        """Root endpoint returning basic service information."""
        return {
            "service": APP_NAME,
            "version": __version__,
            "docs": "disabled" if is_production else "/docs",
            "endpoints": sorted(
                {
                    route.path
                    for route in app.routes
                    if isinstance(route, APIRoute) and route.path.startswith("/api/")
                }
            ),
        }

    return app


app = create_app()
