"""
Tests for the storage layer (SQLite implementation, backend selection).
"""
import pytest
from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.schema import CreateTable
from sqlalchemy.pool import AsyncAdaptedQueuePool, NullPool

from llm_log_api.core.config import Settings
from llm_log_api.core.errors import StorageError
from llm_log_api.db.models import LlmCallLog
from llm_log_api.db.store import PostgresLogStore, SqliteLogStore, create_store
from llm_log_api.services.query_translator import build_query_plan, parse_query_params


class TestSchema:
    """Tests for the llm_call_logs DDL on each backend."""

    def test_postgres_id_is_64_bit(self):
        ddl = str(CreateTable(LlmCallLog.__table__).compile(dialect=postgresql.dialect()))

        assert "id BIGSERIAL NOT NULL" in ddl

    def test_sqlite_id_is_rowid_alias(self):
        ddl = str(CreateTable(LlmCallLog.__table__).compile(dialect=sqlite.dialect()))

        assert "id INTEGER NOT NULL" in ddl
        assert "PRIMARY KEY (id)" in ddl

    def test_status_check_lists_every_status(self):
        ddl = str(CreateTable(LlmCallLog.__table__).compile(dialect=sqlite.dialect()))

        assert "CHECK (status IN ('success', 'fail'))" in ddl


class TestSqliteLogStore:
    """Tests for SqliteLogStore against a temporary database file."""

    async def test_ping(self, store):
        await store.ping()

    async def test_count_and_fetch_all(self, store):
        plan = build_query_plan(parse_query_params({}))

        assert await store.count(plan) == 2
        rows = await store.fetch_page(plan)
        # Newest first by default
        assert [r.id for r in rows] == [2, 1]

    async def test_filters(self, store):
        plan = build_query_plan(parse_query_params({"status": "fail"}))

        assert await store.count(plan) == 1
        rows = await store.fetch_page(plan)
        assert [(r.id, r.status) for r in rows] == [(2, "fail")]

    async def test_time_bounds_are_inclusive(self, store):
        plan = build_query_plan(
            parse_query_params(
                {"start_time": "2024-01-01T00:00:00Z", "end_time": "2024-01-01T00:00:00Z"}
            )
        )

        rows = await store.fetch_page(plan)
        assert [r.id for r in rows] == [1]

    async def test_get_existing(self, store):
        row = await store.get(2)

        assert row is not None
        assert row.id == 2
        assert row.timestamp == "2024-01-02T00:00:00Z"
        assert row.status == "fail"
        assert row.input == "Translate this paragraph"
        assert row.output == "upstream timeout after 30s"

    async def test_get_missing_returns_none(self, store):
        assert await store.get(99) is None

    async def test_get_beyond_32_bits_returns_none(self, store):
        assert await store.get(3_000_000_000) is None

    async def test_create_schema_is_idempotent(self, store):
        await store.create_schema()
        assert await store.count(build_query_plan(parse_query_params({}))) == 2

    async def test_status_check_constraint(self, store):
        with pytest.raises(IntegrityError):
            async with store.engine.begin() as conn:
                await conn.execute(
                    insert(LlmCallLog),
                    [{"timestamp": "2024-01-03T00:00:00Z", "status": "pending", "input": "x", "output": "y"}],
                )

    async def test_missing_table_raises_storage_error(self, tmp_path):
        empty = SqliteLogStore(str(tmp_path / "empty.db"))
        try:
            with pytest.raises(StorageError) as exc_info:
                await empty.count(build_query_plan(parse_query_params({})))
            assert exc_info.value.message == "Failed to count records"
        finally:
            await empty.dispose()

    async def test_unreachable_file_fails_ping(self, tmp_path):
        broken = SqliteLogStore(str(tmp_path / "missing-dir" / "logs.db"))
        try:
            with pytest.raises(StorageError):
                await broken.ping()
        finally:
            await broken.dispose()


class TestCreateStore:
    """Tests for backend selection by configuration."""

    def test_sqlite_is_default(self, tmp_path):
        store = create_store(Settings(_env_file=None, SQLITE_PATH=str(tmp_path / "a.db")))

        assert isinstance(store, SqliteLogStore)
        assert store.backend == "sqlite"
        assert isinstance(store.engine.pool, NullPool)

    def test_postgres_uses_bounded_pool(self):
        settings = Settings(
            _env_file=None,
            DB_BACKEND="postgres",
            DB_HOST="db.internal",
            DB_PORT=5433,
            DB_NAME="kagami",
            DB_USER="reader",
            DB_PASSWORD="secret",
        )
        store = create_store(settings)

        assert isinstance(store, PostgresLogStore)
        assert store.backend == "postgres"
        assert isinstance(store.engine.pool, AsyncAdaptedQueuePool)
        assert store.engine.pool.size() == 5
        assert store.max_connections == 10
        assert store.engine.url.host == "db.internal"
        assert store.engine.url.port == 5433
        assert store.engine.url.database == "kagami"
        assert store.engine.url.drivername == "postgresql+asyncpg"
