"""
Trophy API - Database Handle
==============================

What:  An explicitly constructed handle owning the async SQLAlchemy engine and
       session factory, with connect/disconnect lifecycle.
Why:   The process holds exactly one connection pool. Making it an object that
       is passed to the store (instead of a module-level engine) lets tests
       build isolated databases and guarantees the pool is released on shutdown.
How:   `async with Database(...)` connects on enter and disposes the engine on
       exit. `session()` yields a transaction-scoped AsyncSession that commits
       on success and rolls back on error.
Who:   Created by create_app(); used by TrophyStore; opened by the lifespan.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from Settings.
    SQLite URLs skip pool sizing because their engines use a different pool class.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings
from app.exceptions import DatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object; `Database.connect()` creates any
    missing tables from it.
    """
    pass


class Database:
    """
    Owner of the engine and session factory for one database URL.

    Lifecycle:
        db = Database(url)          # nothing opened yet
        await db.connect()          # engine created, connectivity verified
        async with db.session() as s: ...
        await db.disconnect()       # pool disposed

    or, equivalently, `async with db: ...`.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        self._pool_size = pool_size
        self._max_overflow = max_overflow
        self._pool_pre_ping = pool_pre_ping
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseError(message="Database is not connected")
        return self._engine

    def _engine_options(self) -> dict:
        options = {"pool_pre_ping": self._pool_pre_ping, "echo": self._echo}
        if not self.url.startswith("sqlite"):
            options["pool_size"] = self._pool_size
            options["max_overflow"] = self._max_overflow
            options["pool_recycle"] = 3600
        return options

    async def connect(self) -> None:
        """
        Create the engine, verify connectivity and create missing tables.

        Raises:
            DatabaseError: The URL is invalid or the server is unreachable.
        """
        if self._engine is not None:
            return

        # Import models so their tables are registered on Base.metadata
        from app.models import trophy  # noqa: F401

        engine = None
        try:
            engine = create_async_engine(self.url, **self._engine_options())
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            if engine is not None:
                await engine.dispose()
            raise DatabaseError(
                message="Could not connect to the database",
                context={"error_type": type(e).__name__, "error": str(e)},
            ) from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database connected (%s)", engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        """Close every pooled connection. Safe to call when not connected."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database disconnected")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session wrapping one transaction.

        How it works:
            1. Creates a new session from the factory
            2. Yields it to the caller
            3. On success: commits
            4. On error: rolls back and re-raises
            5. Always: closes the session (returns connection to pool)
        """
        if self._session_factory is None:
            raise DatabaseError(message="Database is not connected")

        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()
