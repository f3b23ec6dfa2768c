"""Development server exposing the fixture endpoints for a models module."""

from __future__ import annotations

import importlib
import logging
import time
import uuid
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import DeclarativeBase

from fixturekit import __version__
from fixturekit.api.schemas import ErrorResponse, HealthResponse
from fixturekit.config import Settings, get_settings
from fixturekit.database import build_registries, create_engine_and_sessions
from fixturekit.lifecycle import init_fixtures
from fixturekit.registry import DataSourceRegistry, ModelRegistry

# Context variable for correlation ID
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = logging.getLogger(__name__)


class CorrelationIdFilter(logging.Filter):
    """Add correlation ID to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id_var.get() or "-"
        return True


def configure_logging(settings: Settings) -> None:
    """Configure structured logging with correlation IDs."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s",
    )
    for handler in logging.root.handlers:
        handler.addFilter(CorrelationIdFilter())


def import_base(path: str) -> type[DeclarativeBase]:
    """Import a declarative base from ``'package.module:Base'``."""
    module_name, _, attribute = path.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attribute or "Base")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the development application.

    Models come from the declarative base named by ``settings.models``;
    without one the fixture endpoints run against empty registries.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    engine, session_factory = create_engine_and_sessions(settings.database_url, echo=settings.debug)

    if settings.models:
        base = import_base(settings.models)
        models, data_sources = build_registries(
            base,
            engine,
            naming=settings.model_naming,
            session_factory=session_factory,
        )
    else:
        logger.warning("No models module configured; fixtures have nothing to load into")
        models, data_sources = ModelRegistry(), DataSourceRegistry()

    started_at = time.time()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        """Application lifespan handler."""
        logger.info(f"Starting fixtures server v{__version__}")
        logger.info(f"Models: {sorted(models)}")

        yield

        logger.info("Shutting down fixtures server")
        await engine.dispose()
        logger.info("Database connections closed")

    app = FastAPI(
        title="Fixtures Server",
        description="Load and tear down JSON fixtures for test and development databases",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # ========================================================================
    # Request Middleware (Correlation ID + Timing)
    # ========================================================================

    @app.middleware("http")
    async def add_correlation_id_and_timing(request: Request, call_next):
        """Add correlation ID to requests and track request timing."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())[:8]
        correlation_id_var.set(correlation_id)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.2f}"

        logger.info(
            f"{request.method} {request.url.path} - {response.status_code} - {duration_ms:.2f}ms"
        )
        return response

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                error="validation_error",
                message="Request validation failed",
                details={"errors": exc.errors()},
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="internal_error",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__} if settings.debug else None,
            ).model_dump(),
        )

    # ========================================================================
    # Routes
    # ========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check() -> HealthResponse:
        """Basic health check endpoint."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            uptime_seconds=int(time.time() - started_at),
        )

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Fixtures Server",
            "version": __version__,
            "docs": "/docs" if settings.debug else "disabled",
            "setup": f"{settings.route_prefix}/setup",
            "teardown": f"{settings.route_prefix}/teardown",
        }

    init_fixtures(app, models, data_sources, settings)
    return app


def run() -> None:
    """Run the development server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "fixturekit.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
