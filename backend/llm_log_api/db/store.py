# llm_log_api/db/store.py
"""
Storage access for the llm_call_logs table.

We use:
- SQLAlchemy async engine + AsyncSession
- aiosqlite for the local file backend, asyncpg for PostgreSQL

`LogStore` is the single read interface the HTTP handlers depend on.
`SqliteLogStore` and `PostgresLogStore` only differ in how the engine is built;
`create_store()` picks one from settings.

Every driver/SQL failure leaves this module as a `StorageError`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, AsyncIterator, List, Optional

from fastapi import Request
from sqlalchemy import select, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from llm_log_api.core.config import Settings
from llm_log_api.core.errors import StorageError
from llm_log_api.db.models import Base, LlmCallLog

if TYPE_CHECKING:
    from llm_log_api.services.query_translator import QueryPlan

logger = logging.getLogger(__name__)


class LogStore:
    """Read access to llm_call_logs over an async SQLAlchemy engine."""

    backend = "sql"
    schema_pragmas: tuple = ()

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessions = async_sessionmaker(
            bind=engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Storage failure while trying to %s", action)
            raise StorageError(f"Failed to {action}") from exc

    async def count(self, plan: "QueryPlan") -> int:
        """Number of rows matching the plan's filters, ignoring paging."""
        async with self._session("count records") as session:
            total = (await session.execute(plan.count_statement())).scalar()
        return int(total or 0)

    async def fetch_page(self, plan: "QueryPlan") -> List[LlmCallLog]:
        async with self._session("fetch records") as session:
            rows = (await session.execute(plan.select_statement())).scalars().all()
        return list(rows)

    async def get(self, log_id: int) -> Optional[LlmCallLog]:
        """Primary key lookup; None when no row matches."""
        async with self._session("fetch record") as session:
            row = (
                await session.execute(select(LlmCallLog).where(LlmCallLog.id == log_id))
            ).scalar_one_or_none()
        return row

    async def ping(self) -> None:
        """Round-trip a trivial query; raises StorageError if the store is unreachable."""
        async with self._session("reach the database") as session:
            await session.execute(text("SELECT 1"))

    async def create_schema(self) -> None:
        """Create llm_call_logs if it does not exist."""
        try:
            async with self.engine.begin() as conn:
                for pragma in self.schema_pragmas:
                    await conn.execute(text(pragma))
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Schema creation failed")
            raise StorageError("Failed to create schema") from exc

    async def dispose(self) -> None:
        await self.engine.dispose()


class SqliteLogStore(LogStore):
    """
    Local file backend.

    Connections to a file are cheap, so no pool is kept: each unit of work
    opens and closes its own connection.
    """

    backend = "sqlite"
    schema_pragmas = ("PRAGMA journal_mode=WAL;",)

    def __init__(self, path: str) -> None:
        self.path = path
        url = URL.create("sqlite+aiosqlite", database=path)
        super().__init__(create_async_engine(url, echo=False, poolclass=NullPool))

    async def create_schema(self) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        await super().create_schema()


class PostgresLogStore(LogStore):
    """
    Networked backend with a bounded connection pool.

    - pool_size idle connections are retained between requests
    - max_overflow extra connections may be opened under load
    - pool_recycle retires connections older than the given lifetime
    """

    backend = "postgres"

    def __init__(self, settings: Settings) -> None:
        url = URL.create(
            "postgresql+asyncpg",
            username=settings.DB_USER,
            password=settings.DB_PASSWORD,
            host=settings.DB_HOST,
            port=settings.DB_PORT,
            database=settings.DB_NAME,
        )
        engine = create_async_engine(
            url,
            echo=False,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,
            connect_args={"timeout": settings.DB_CONNECT_TIMEOUT},
        )
        super().__init__(engine)
        self.max_connections = settings.max_connections
        logger.info(
            "PostgreSQL pool for %s:%s/%s: %d idle, %d max, recycle after %ds",
            settings.DB_HOST, settings.DB_PORT, settings.DB_NAME,
            settings.DB_POOL_SIZE, self.max_connections, settings.DB_POOL_RECYCLE,
        )


def create_store(settings: Settings) -> LogStore:
    """Build the store selected by DB_BACKEND."""
    if settings.DB_BACKEND == "postgres":
        return PostgresLogStore(settings)
    return SqliteLogStore(settings.SQLITE_PATH)


def get_store(request: Request) -> LogStore:
    """
    FastAPI dependency that provides the application's store.

    Usage:
        @router.get(...)
        async def handler(store: LogStore = Depends(get_store)):
            ...
    """
    return request.app.state.store
