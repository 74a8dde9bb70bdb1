"""
Pytest configuration and shared fixtures.
"""
import uuid
from contextlib import ExitStack
from typing import Callable, List, Optional, Tuple, Type

import pytest
from fastapi.testclient import TestClient

from llm_log_api.core.config import Settings
from llm_log_api.core.errors import StorageError
from llm_log_api.db.bootstrap import seed
from llm_log_api.db.store import SqliteLogStore
from llm_log_api.main import create_app


# The two rows used by the end-to-end examples
E2E_ROWS = [
    {
        "timestamp": "2024-01-01T00:00:00Z",
        "status": "success",
        "input": "Summarize the meeting notes",
        "output": "The team agreed to ship on Friday.",
    },
    {
        "timestamp": "2024-01-02T00:00:00Z",
        "status": "fail",
        "input": "Translate this paragraph",
        "output": "upstream timeout after 30s",
    },
]


def make_rows(count: int) -> List[dict]:
    """Rows one hour apart; every third one failed."""
    return [
        {
            "timestamp": f"2024-03-01T{i:02d}:00:00Z",
            "status": "fail" if i % 3 == 2 else "success",
            "input": f"prompt {i}",
            "output": f"completion {i}",
        }
        for i in range(count)
    ]


class RecordingStore:
    """Stand-in store that records every call and fails on the named queries."""

    backend = "recording"

    def __init__(self, fail_on: Tuple[str, ...] = (), error: Type[Exception] = StorageError, row=None) -> None:
        self.fail_on = fail_on
        self.error = error
        self.row = row
        self.calls: List[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise self.error(f"{name} exploded: password=hunter2")

    async def ping(self) -> None:
        self.calls.append("ping")

    async def create_schema(self) -> None:
        self.calls.append("create_schema")

    async def count(self, plan) -> int:
        self._record("count")
        return 0

    async def fetch_page(self, plan):
        self._record("fetch_page")
        return []

    async def get(self, log_id: int):
        self._record("get")
        return self.row

    async def dispose(self) -> None:
        self.calls.append("dispose")

    @property
    def queries(self) -> List[str]:
        return [c for c in self.calls if c in ("count", "fetch_page", "get")]


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        SQLITE_PATH=str(tmp_path / "logs.db"),
        DB_AUTO_MIGRATE=True,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def make_client(tmp_path, test_settings) -> Callable[..., TestClient]:
    """
    Factory for a TestClient over a fresh app.

    With no store given, a temporary SQLite file is created (schema via
    DB_AUTO_MIGRATE) and `rows` are inserted before the client is returned.
    """
    stack = ExitStack()

    def _make(rows: Optional[List[dict]] = None, store=None) -> TestClient:
        if store is None:
            store = SqliteLogStore(str(tmp_path / f"logs-{uuid.uuid4().hex[:8]}.db"))
        app = create_app(settings=test_settings, store=store)
        client = stack.enter_context(TestClient(app))
        if rows:
            client.portal.call(seed, store, rows)
        return client

    yield _make
    stack.close()


@pytest.fixture
def client(make_client) -> TestClient:
    """Client over a store holding E2E_ROWS (ids 1 and 2)."""
    return make_client(E2E_ROWS)


@pytest.fixture
async def store(tmp_path):
    """Schema-initialized SQLite store holding E2E_ROWS."""
    store = SqliteLogStore(str(tmp_path / "store.db"))
    await store.create_schema()
    await seed(store, E2E_ROWS)
    yield store
    await store.dispose()
