"""FastAPI application factory and lifespan management."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from creator_video.api.dependencies import get_settings, init_services, shutdown_services
from creator_video.api.middleware.error_handler import error_handler_middleware
from creator_video.api.middleware.logging import LoggingMiddleware
from creator_video.api.openapi.routes import health, videos, views, webhooks
from creator_video.commons.settings.models import Settings
from creator_video.commons.telemetry import configure_logging
from creator_video.commons.telemetry.logger import JsonFormatter, TextFormatter


def _get_formatter(settings: Settings) -> logging.Formatter:
    if settings.telemetry.log_format == "json":
        return JsonFormatter(service=settings.app.name, environment=settings.app.environment)
    return TextFormatter()


def _setup_logging() -> None:
    """Configure logging for the application.

    Runs at import time so the formatters are in place before uvicorn starts.
    """
    settings = get_settings()
    log_level = settings.telemetry.log_level or settings.app.log_level

    configure_logging(
        level=log_level,
        format_type=settings.telemetry.log_format,
        logger_name="creator_video",
        service=settings.app.name,
        environment=settings.app.environment,
    )
    logging.getLogger().setLevel(getattr(logging, log_level.upper()))


def _configure_uvicorn_logging() -> None:
    """Route uvicorn loggers through the application formatter.

    Called during lifespan when uvicorn handlers exist.
    """
    settings = get_settings()
    level = getattr(logging, (settings.telemetry.log_level or settings.app.log_level).upper())
    formatter = _get_formatter(settings)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.setLevel(level)
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(formatter)
            handler.setLevel(level)
            logger.addHandler(handler)
            logger.propagate = False


_setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    _configure_uvicorn_logging()

    await init_services(get_settings())

    yield

    await shutdown_services()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Creator video lifecycle, provider webhooks and view tracking",
        docs_url="/docs" if settings.server.docs_enabled else None,
        redoc_url="/redoc" if settings.server.docs_enabled else None,
        openapi_url="/openapi.json" if settings.server.docs_enabled else None,
        lifespan=lifespan,
    )

    _configure_middleware(app, settings)
    _register_routes(app, settings)

    return app


def _configure_middleware(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.middleware("http")(error_handler_middleware)


def _register_routes(app: FastAPI, settings: Settings) -> None:
    prefix = settings.server.api_prefix

    # Health routes (no prefix for standard health checks)
    app.include_router(health.router, tags=["Health"])

    app.include_router(webhooks.router, prefix=prefix, tags=["Webhooks"])
    app.include_router(videos.router, prefix=prefix, tags=["Videos"])
    app.include_router(views.router, prefix=prefix, tags=["Views"])


# Create default app instance
app = create_app()
