"""
Database Session Module

This module manages database connections and sessions with:
- Async SQLAlchemy engine configuration
- Session factory and dependency injection
- Table creation and connection health checks
- Error handling and logging
"""

import contextlib
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from zyrotech.core.logging import get_logger
from zyrotech.core.settings import settings
from zyrotech.db.base import Base

# Initialize logger
logger = get_logger(__name__)


def create_db_engine(url: str = None) -> AsyncEngine:
    """
    Create the async SQLAlchemy engine.

    Pool sizing only applies to server databases; SQLite uses its own pool.

    Returns:
        AsyncEngine: Configured engine
    """
    url = url or settings.db.DATABASE_URL
    log_url = make_url(url).render_as_string(hide_password=True)
    logger.info(f"Creating database engine for {log_url}")

    kwargs = {"echo": settings.db.ECHO, "future": True}
    if not url.startswith("sqlite"):
        kwargs.update(
            pool_pre_ping=True,
            pool_size=settings.db.POOL_SIZE,
            max_overflow=settings.db.MAX_OVERFLOW,
            pool_recycle=settings.db.POOL_RECYCLE,
        )

    return create_async_engine(url, **kwargs)


# Create engine instance
engine = create_db_engine()

# AsyncSessionLocal is a factory for new AsyncSession objects
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Services commit explicitly; anything left uncommitted when the request
    fails is rolled back.

    Yields:
        AsyncSession: Database session
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(
                "Database session error",
                exc_info=True,
                extra={"error": str(e)}
            )
            await session.rollback()
            raise
        except Exception:
            await session.rollback()
            raise


@contextlib.asynccontextmanager
async def get_db_context() -> AsyncIterator[AsyncSession]:
    """
    Context manager for database sessions outside a request (startup, scripts).

    Yields:
        AsyncSession: Database session, committed on clean exit
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Database session error",
                exc_info=True,
                extra={"error": str(e)}
            )
            await session.rollback()
            raise


async def init_models(bind: AsyncEngine = None) -> None:
    """Create any missing tables."""
    # Register every model on the metadata
    import zyrotech.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def check_db_connection() -> bool:
    """
    Check database connectivity.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(
            "Database connection check failed",
            exc_info=True,
            extra={"error": str(e)}
        )
        return False


__all__ = [
    "AsyncSessionLocal",
    "engine",
    "get_db",
    "get_db_context",
    "init_models",
    "check_db_connection",
]
