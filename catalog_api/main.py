"""Catalog API main application module.

This module builds the FastAPI application and configures core middleware,
routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from catalog_api.api.auth import router as auth_router
from catalog_api.api.dependencies import build_container
from catalog_api.api.exception_handlers import register_exception_handlers
from catalog_api.api.health import router as health_router
from catalog_api.api.middleware import setup_middleware
from catalog_api.api.products import router as products_router
from catalog_api.infrastructure.config import Settings, settings
from catalog_api.infrastructure.logging_setup import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Connects the database (when the SQL backend is used) before serving and
    disposes it afterwards.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    container = app.state.container
    config = container.settings

    logger.info(
        "Starting Catalog API",
        version=config.api_version,
        debug=config.debug,
        store_backend=config.store_backend,
    )

    if container.database is not None:
        await container.database.connect(
            retries=config.db_connect_retries,
            backoff_seconds=config.db_connect_backoff_seconds,
            create_schema=config.auto_create_schema,
        )

    yield

    logger.info("Shutting down Catalog API")
    if container.database is not None:
        await container.database.dispose()


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        app_settings: Settings to use, defaults to the environment.

    Returns:
        Configured application.
    """
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level, app_settings.log_json)

    container = build_container(app_settings)
    container.blobs.ensure_directory()

    app = FastAPI(
        title="Catalog API",
        description="Product catalog with ownership-aware editing",
        version=app_settings.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.container = container

    # CORS middleware (must be added before custom middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept"],
    )

    # Setup custom middleware (request ID, error handling)
    setup_middleware(app)
    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(products_router)

    # Uploaded images
    app.mount(
        container.blobs.url_prefix,
        StaticFiles(directory=container.blobs.directory),
        name="uploads",
    )

    return app


app = create_app()
