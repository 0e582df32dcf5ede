"""
Async engine and session wiring for the job store.

The API process keeps one pooled engine for its lifetime. A Lambda
invocation builds and disposes its own engine inside one asyncio.run(),
so it asks for an unpooled one.

Dependencies: sqlalchemy, facescan.configs
System role: Database connection lifecycle management
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from facescan.boundary.db.base import Base
from facescan.configs import get_settings
from facescan.configs.database import DatabaseSettings


def get_async_engine(
    db_config: DatabaseSettings | None = None,
    pooled: bool = True,
) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    Args:
        db_config: Database settings (defaults to the application settings)
        pooled: Keep a connection pool; False opens a connection per checkout

    Returns:
        AsyncEngine: Engine bound to db_config.async_database_url
    """
    db_config = db_config or get_settings().database
    url = db_config.async_database_url
    options: dict[str, Any] = {"echo": db_config.echo_sql}

    # SQLite keeps its default pool; the sizing options do not apply
    if url.startswith("sqlite"):
        return create_async_engine(url, **options)

    if not pooled:
        options["poolclass"] = NullPool
    else:
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            pool_pre_ping=True,
        )
    return create_async_engine(url, **options)


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Session factory for SqlJobStore.

    Objects stay usable after commit (expire_on_commit=False) because the
    store converts rows to JobRecord after the transaction ends.
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create every table registered on Base.metadata that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
