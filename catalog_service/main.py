"""Product catalog main application module.

This module builds the FastAPI application and configures core
middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from catalog_service.api import categories_router, health_router, products_router
from catalog_service.api.errors import setup_exception_handlers
from catalog_service.api.middleware import setup_middleware
from catalog_service.catalog import CatalogStore, SqlCatalogStore
from catalog_service.infrastructure.config import Settings
from catalog_service.infrastructure.database import create_engine, create_tables

logger = structlog.get_logger()

API_PREFIX = "/api/v1"


async def create_store(settings: Settings) -> SqlCatalogStore:
    """Build the SQL store; tables are created for development databases.

    Args:
        settings: Application settings.

    Returns:
        Store owning a new connection pool.
    """
    engine = create_engine(settings)
    if settings.app_env == "development" or settings.database_url.startswith("sqlite"):
        await create_tables(engine)
    return SqlCatalogStore(engine)


def create_app(settings: Settings, store: CatalogStore | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings.
        store: Catalog store to serve from. When omitted, a SQL store is
            created at startup and closed at shutdown.

    Returns:
        Configured application. ``app.state.store`` is set once the
        lifespan has started.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Starting product catalog API",
            version=settings.api_version,
            env=settings.app_env,
            debug=settings.debug,
        )
        owned = store is None
        app.state.store = await create_store(settings) if owned else store

        yield

        logger.info("Shutting down product catalog API")
        if owned:
            await app.state.store.close()

    app = FastAPI(
        title="Product Catalog API",
        description="Categories and products of the catalog",
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    if store is not None:
        app.state.store = store

    setup_middleware(app)
    setup_exception_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(categories_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=API_PREFIX)

    return app
