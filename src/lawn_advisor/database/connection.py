"""Database connection management.

Provides async database connection using SQLAlchemy.

## Configuration

Database connection is configured via environment variables:
- DATABASE_URL: Full connection string (asyncpg or aiosqlite driver)
- DATABASE_POOL_SIZE: Connection pool size (default: 5)
- DATABASE_MAX_OVERFLOW: Max overflow connections (default: 10)

## Usage

```python
from lawn_advisor.database import get_session_factory, init_db

await init_db()
store = SqlPlanStore(get_session_factory())
```
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lawn_advisor.config import get_settings
from lawn_advisor.database.models import Base

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_engine(database_url: str, echo: bool = False, **pool_options: Any) -> AsyncEngine:
    """Create an async engine with the given pool options."""
    return create_async_engine(database_url, echo=echo, **pool_options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_db() -> None:
    """Initialize the database connection.

    Creates the async engine and session factory. Should be called
    once on startup.
    """
    global _engine, _session_factory

    settings = get_settings()

    logger.info("Initializing database connection")

    # SQLite does not use a sized connection pool
    pool_options: dict[str, Any] = {}
    if not settings.is_sqlite:
        pool_options = {
            "pool_pre_ping": True,  # Verify connections before use
            "pool_size": settings.database_pool_size,
            "max_overflow": settings.database_max_overflow,
        }

    _engine = create_engine(
        settings.database_url,
        echo=settings.database_echo,
        **pool_options,
    )
    _session_factory = create_session_factory(_engine)

    logger.info("Database connection initialized")


async def close_db() -> None:
    """Close the database connection.

    Should be called on shutdown.
    """
    global _engine, _session_factory

    if _engine:
        logger.info("Closing database connection")
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def create_tables() -> None:
    """Create all database tables.

    For development/testing only. Use migrations in production.
    """
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created")


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory created by `init_db()`."""
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _session_factory


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session.

    Use as an async context manager:
    ```python
    async with get_db() as session:
        # Use session
        await session.commit()
    ```
    """
    session = get_session_factory()()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
