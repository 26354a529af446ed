"""
Menagerie Backend: Database Engine Lifecycle
=============================================

What:  The declarative Base plus a `Database` object owning the async engine
       and its bounded connection pool.
Why:   The pool is the only state shared between concurrent requests, so it
       is constructed explicitly, handed to the app, and disposed explicitly.
How:   main.py's lifespan creates one Database at startup (unless one was
       injected into create_app), stores it on `app.state.database`, and
       disposes it at shutdown. Handlers reach it through dependencies.py.

Connection Pooling Strategy:
    pool_size=5, max_overflow=0:  a fixed ceiling of five connections
    pool_timeout:                  bounded wait when all five are in use
    pool_pre_ping:                 validates connections before use
    pool_recycle=3600:             recycles connections every hour

    Each gateway operation checks out exactly one connection for a single
    statement and returns it when the `async with` block exits, on success,
    error, timeout or cancellation alike.
"""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from menagerie.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for the table DDL
    and the test suite uses to create the schema in SQLite.
    """
    pass


class Database:
    """
    Owner of the process-wide engine.

    Created once per application; read-only from the point of view of the
    request handlers that share it.
    """

    def __init__(self, settings: Settings, engine: AsyncEngine | None = None):
        self.settings = settings
        self.engine = engine or create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            # SQL logging is noisy; only useful during development
            echo=settings.log_level == "DEBUG",
        )

    async def ping(self) -> bool:
        """
        What:  Runs SELECT 1 on a pooled connection.
        Who:   The /health endpoint.
        Returns False instead of raising so health checks can report status.
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Database ping failed: %s", type(e).__name__)
            return False
        return True

    async def dispose(self) -> None:
        """Closes every pooled connection. Called during application shutdown."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
