"""
Pytest configuration for modeller.

Provides fixtures for:
- An in-memory recording query executor for unit tests
- Database connection management for integration tests
- Settings override for integration tests
"""

from __future__ import annotations

import os
from typing import Any, Dict, Generator, List, Mapping, Optional

import psycopg
import pytest

from modeller.config import Settings

# Results an unprimed RecordingExecutor resolves to, per terminal method.
DEFAULT_RESULTS: Dict[str, Any] = {
    "select": [],
    "insert": [1],
    "update": 1,
    "delete": 1,
    "raw": ([], {"rowcount": 0, "columns": []}),
}


class _RecordingQuery:
    def __init__(self, executor: RecordingExecutor, table: str) -> None:
        self._executor = executor
        self.call: Dict[str, Any] = {
            "table": table,
            "where": {},
            "limit": None,
            "offset": None,
            "order_by": None,
        }

    def where(self, predicate: Mapping[str, Any]) -> _RecordingQuery:
        self.call["where"].update(predicate)
        return self

    def limit(self, n: int) -> _RecordingQuery:
        self.call["limit"] = n
        return self

    def offset(self, n: int) -> _RecordingQuery:
        self.call["offset"] = n
        return self

    def order_by(self, field: str, direction: str = "asc") -> _RecordingQuery:
        self.call["order_by"] = (field, direction)
        return self

    def select(self):
        return self._executor._finish("select", self.call)

    def insert(self, values: Mapping[str, Any], returning: Optional[str] = None):
        return self._executor._finish("insert", {**self.call, "values": dict(values), "returning": returning})

    def update(self, values: Mapping[str, Any]):
        return self._executor._finish("update", {**self.call, "values": dict(values)})

    def delete(self):
        return self._executor._finish("delete", self.call)


class RecordingExecutor:
    """
    Query executor double that records every terminal call.

    Calls are recorded when the terminal method is invoked, before the returned
    awaitable runs, so tests can assert nothing was issued after a synchronous
    failure. Results are served from per-method queues (``queue``), falling back
    to DEFAULT_RESULTS; queued exceptions are raised from the awaitable.
    """

    def __init__(self) -> None:
        self.queries: List[Dict[str, Any]] = []
        self._results: Dict[str, List[Any]] = {}
        self.closed = False

    def queue(self, method: str, result: Any) -> RecordingExecutor:
        self._results.setdefault(method, []).append(result)
        return self

    def table(self, name: str) -> _RecordingQuery:
        return _RecordingQuery(self, name)

    def raw(self, query: str, bindings: Any = None):
        return self._finish("raw", {"query": query, "bindings": bindings})

    def _finish(self, method: str, call: Dict[str, Any]):
        self.queries.append({"method": method, **call})
        return self._respond(method)

    async def _respond(self, method: str) -> Any:
        pending = self._results.get(method)
        result = pending.pop(0) if pending else DEFAULT_RESULTS[method]
        if isinstance(result, BaseException):
            raise result
        return result

    def methods(self) -> List[str]:
        return [q["method"] for q in self.queries]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "modeller_test"),
        db_connect_attempts=1,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.conninfo()


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_tables(db_connection: psycopg.Connection):
    """
    Create the integration test tables fresh for each test function.

    `movies` has a serial primary key; `notes` carries a `deleted` flag; `tags`
    has no primary key at all.
    """
    ddl = """
        DROP TABLE IF EXISTS movies, notes, tags;
        CREATE TABLE movies (
            movie_id SERIAL PRIMARY KEY,
            title TEXT NOT NULL,
            year INTEGER
        );
        CREATE TABLE notes (
            id SERIAL PRIMARY KEY,
            body TEXT NOT NULL,
            deleted INTEGER NOT NULL DEFAULT 0
        );
        CREATE TABLE tags (
            label TEXT NOT NULL
        );
    """
    with db_connection.cursor() as cur:
        cur.execute(ddl)
    yield
    with db_connection.cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS movies, notes, tags;")
