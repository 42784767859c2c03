"""
Application lifecycle management using the FastAPI lifespan pattern.

Startup prepares the database; shutdown releases the cart store and the
connection pool. Both use the settings the application was created with.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.config.settings import Settings, get_settings
from storefront.database.async_db import async_engine, create_async_database_engine, create_session_factory
from storefront.database.init_database import init_db

logger = logging.getLogger(__name__)


def engine_for(settings: Settings) -> AsyncEngine:
    """The shared engine when ``settings`` points at the default database, a dedicated one otherwise"""
    if settings.database_url == get_settings().database_url:
        return async_engine
    return create_async_database_engine(settings.database_url)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self, settings: Settings | None = None, engine: AsyncEngine | None = None) -> None:
        self._settings = settings or get_settings()
        self._engine = engine or engine_for(self._settings)
        self._initialized = False

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def startup(self, app: FastAPI) -> None:
        if self._initialized:
            logger.warning("Lifecycle already initialized, skipping startup")
            return

        logger.info("Starting application lifecycle...")

        self._verify_configurations()

        if self._settings.DB_AUTO_CREATE:
            async with create_session_factory(self._engine)() as session:
                await init_db(self._engine, session, self._settings)
                await session.commit()
        else:
            logger.info("DB_AUTO_CREATE disabled, expecting schema managed by alembic")

        self._initialized = True
        logger.info("Application lifecycle startup completed")

    async def shutdown(self, app: FastAPI) -> None:
        if not self._initialized:
            logger.warning("Lifecycle not initialized, skipping shutdown")
            return

        logger.info("Stopping application lifecycle...")

        cart_store = getattr(app.state, "cart_store", None)
        if cart_store is not None:
            await cart_store.close()
        await self._engine.dispose()

        self._initialized = False
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        """Log warnings for settings that silently disable features."""
        if not self._settings.google_oauth_enabled:
            logger.warning("GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET not configured - Google login disabled")

        if not (self._settings.ADMIN_EMAIL and self._settings.ADMIN_PASSWORD):
            logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set - no admin account will be bootstrapped")

        if self._settings.CART_BACKEND == "memory":
            logger.info("Using in-memory cart store; carts are lost on restart")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    The manager is built from ``app.state.settings``, set by the app factory.

    Usage:
        app = FastAPI(lifespan=lifespan)
    """
    manager = LifecycleManager(getattr(app.state, "settings", None))
    app.state.lifecycle = manager
    await manager.startup(app)
    try:
        yield
    finally:
        await manager.shutdown(app)
