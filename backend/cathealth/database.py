"""
CatHealth Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` object owns the engine (connection pool) and the session
       factory. The application factory creates one and stores it on
       `app.state.database`; `get_db_session` hands a session to each request.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Database is built with the app; sessions are created per-request.

Connection Pooling Strategy:
    pool_size=20:     Persistent connections for normal load
    max_overflow=10:  Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour
    SQLite URLs (tests, local demos) keep SQLAlchemy's default pool.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cathealth.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share a single metadata
    object, which Alembic reads for migrations.
    """
    pass


class Database:
    """
    Process-wide handle on the connection pool.

    Lifecycle:
        1. Built by create_app() (no connection is opened yet)
        2. ping() during startup to fail early on a bad DATABASE_URL
        3. Sessions handed out per request by get_db_session()
        4. dispose() during shutdown closes every pooled connection
    """

    def __init__(self, url: str, config: Optional[Settings] = None):
        config = config or default_settings
        engine_kwargs = {
            "echo": config.log_level == "DEBUG",
        }
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=config.db_pool_size,
                max_overflow=config.db_max_overflow,
                pool_pre_ping=config.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        # expire_on_commit=False: attributes stay readable after commit,
        # outside of the session context
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def ping(self) -> None:
        """Runs SELECT 1; raises whatever the driver raises on failure."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """
        Creates every table known to Base.metadata.

        Used by the test-suite and for throwaway SQLite databases; real
        deployments run `alembic upgrade head` instead.
        """
        # Register the models with Base.metadata
        import cathealth.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Gracefully closes all connections in the pool."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's Database
        2. Yields it to the route handler (services commit their writes)
        3. On success: commits anything still pending
        4. On error: rolls back the transaction (discards changes)
        5. Always: closes the session (returns connection to pool)

    Raises:
        Any exception from the handler is re-raised after rollback so the
        global error handlers can respond.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
