"""Database configuration and session management.

Provides the declarative base plus factories for the async SQLAlchemy
engine and session maker. Nothing is created at import time; the
bootstrap code builds the engine from ``Settings``.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from catalog_service.infrastructure.config import Settings

# Base class for models
Base = declarative_base()


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine (and its connection pool).

    Args:
        settings: Application settings.

    Returns:
        Configured AsyncEngine.
    """
    options: dict = {
        "echo": settings.database_echo,
        "pool_pre_ping": True,
    }
    sqlite = settings.database_url.startswith("sqlite")
    if not sqlite:
        options["pool_size"] = settings.database_pool_size
    engine = create_async_engine(settings.database_url, **options)
    if sqlite:
        enable_sqlite_foreign_keys(engine)
    return engine


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every SQLite connection.

    SQLite ignores REFERENCES clauses (and ON DELETE SET NULL) unless the
    pragma is set per connection.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the engine.

    Args:
        engine: Async engine.

    Returns:
        Session factory producing AsyncSession instances.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create database tables if they don't exist."""
    # Imported for its side effect of registering the tables on Base.metadata
    from catalog_service.catalog import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
