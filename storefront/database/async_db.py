import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from storefront.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (url.rstrip("/").endswith(":") or ":memory:" in url)


def create_async_database_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async engine with pooling suited to the backend and environment"""
    database_url = database_url or settings.database_url
    try:
        base_config = {"echo": settings.DB_ECHO}

        if _is_memory_sqlite(database_url):
            # A single shared connection keeps the in-memory database alive
            logger.info("Creating async database engine for in-memory SQLite (StaticPool)")
            engine_config = {
                **base_config,
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        elif _is_sqlite(database_url) or settings.DEBUG:
            logger.info("Creating async database engine for DEVELOPMENT (NullPool)")
            engine_config = {**base_config, "poolclass": NullPool}
        else:
            logger.info("Creating async database engine for PRODUCTION (pooled)")
            engine_config = {
                **base_config,
                "pool_pre_ping": True,
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_recycle": settings.DB_POOL_RECYCLE,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
            }

        return create_async_engine(database_url, **engine_config)

    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = create_async_database_engine()

AsyncSessionLocal = create_session_factory(async_engine)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency yielding a session; commits on success, rolls back on error
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise


@asynccontextmanager
async def get_async_db_context():
    """
    Context manager for database work outside request handling
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise
