"""
Database Connection Management

Async SQLAlchemy 2.0 engine and session factory lifecycle.
"""

from typing import Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from backoffice.config import get_settings
from backoffice.database.models import Base

logger = structlog.get_logger(__name__)
settings = get_settings()

# Global engine and session factory
_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


async def init_database(url: Optional[str] = None, create_schema: Optional[bool] = None) -> AsyncEngine:
    """
    Initialize the database engine and session factory.

    Args:
        url: Override for the configured async database URL
        create_schema: Create missing tables (development and tests only)

    Returns:
        AsyncEngine: The initialized database engine
    """
    global _engine, _async_session_factory

    if _engine is not None:
        logger.warning("Database already initialized")
        return _engine

    database_url = url or settings.database.async_url
    engine_config = {
        "echo": settings.database.echo,
        "pool_pre_ping": True,
    }
    # asyncpg keeps its own pool
    if database_url.startswith("postgresql+asyncpg"):
        engine_config["poolclass"] = NullPool

    _engine = create_async_engine(database_url, **engine_config)
    _async_session_factory = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    should_create = settings.database.create_schema if create_schema is None else create_schema
    try:
        async with _engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if should_create:
                await conn.run_sync(Base.metadata.create_all)
        logger.info(
            "Database connection established",
            host=settings.database.host,
            database=settings.database.db,
            schema_created=should_create,
        )
    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        raise

    return _engine


async def close_database() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connection pool closed")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory the SQLAlchemy gateway is built on.

    Raises:
        RuntimeError: If database is not initialized
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")
    return _async_session_factory
