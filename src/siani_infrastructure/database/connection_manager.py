"""Async SQLAlchemy engine and session management.

One ``DatabaseManager`` is created per application. It owns the engine,
hands out transactional sessions and creates the registered tables.

Usage:
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.initialize()

    async with manager.session() as session:
        session.add(MoodEntry(user_id=user_id, mood="calm"))
        # Commit on success, rollback on exception
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from siani_common.exceptions import DatabaseError
from .base_models import Base
from .schema_registry import SchemaRegistry

logger = structlog.get_logger(__name__)


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (":memory:" in url or url.rstrip("/").endswith(":"))


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Owns the async engine and the session factory for the service."""

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 10,
        max_overflow: int = 5,
        pool_timeout: int = 30,
        echo: bool = False,
    ) -> None:
        self._url = url
        engine_kwargs: dict[str, Any] = {"echo": echo}
        if _is_memory_sqlite(url):
            # Every session must see the same in-memory database
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        elif _is_sqlite(url) or pool_size == 0:
            engine_kwargs["poolclass"] = NullPool
        else:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = max_overflow
            engine_kwargs["pool_timeout"] = pool_timeout
        self._engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        if _is_sqlite(url):
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False,
        )
        self._stats = {"sessions": 0, "commits": 0, "rollbacks": 0}
        self._initialized = False

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def dialect(self) -> str:
        return self._engine.dialect.name

    @property
    def initialized(self) -> bool:
        return self._initialized

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Provide a transactional session scope."""
        self._stats["sessions"] += 1
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
                self._stats["commits"] += 1
            except Exception:
                await session.rollback()
                self._stats["rollbacks"] += 1
                raise

    async def initialize(self) -> None:
        """Create all registered tables if they do not exist."""
        # Importing the entities package registers every table
        from . import entities  # noqa: F401

        tables = SchemaRegistry.tables()

        start = time.perf_counter()
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, tables=tables)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to create tables: {e}", operation="initialize", cause=e,
            ) from e
        self._initialized = True
        logger.info(
            "database_initialized",
            dialect=self.dialect,
            tables=len(tables),
            time_ms=int((time.perf_counter() - start) * 1000),
        )

    async def health_check(self) -> dict[str, Any]:
        """Run a trivial query and report the outcome."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "healthy", "dialect": self.dialect}
        except SQLAlchemyError as e:
            logger.warning("database_health_check_failed", error=str(e))
            return {
                "status": "unhealthy",
                "dialect": self.dialect,
                "error": str(e),
                "error_type": type(e).__name__,
            }

    def get_statistics(self) -> dict[str, Any]:
        return {
            "dialect": self.dialect,
            "initialized": self._initialized,
            "schema": SchemaRegistry.get_statistics(),
            **self._stats,
        }

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        await self._engine.dispose()
        self._initialized = False
        logger.info("database_closed", dialect=self.dialect)
