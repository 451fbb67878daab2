"""Shared fixtures for the avalon-id test suite."""

from collections import deque
from contextlib import contextmanager, nullcontext
from typing import Iterable, Iterator, List, Optional

import pytest

from avalon_id.config import get_settings
from avalon_id.id_generator import reset_snowflake
from avalon_id.snowflake import EPOCH_MS

# 2025-06-01T00:00:00Z
BASE_MILLIS = 1748736000000


class FakeClock:
    """Millisecond clock that stays frozen unless told otherwise.

    Values queued with ``script`` are returned first (one per read), after
    that the clock keeps returning ``now``.
    """

    def __init__(self, now: int = BASE_MILLIS) -> None:
        self.now = now
        self.reads = 0
        self._script: deque = deque()

    def __call__(self) -> int:
        self.reads += 1
        if self._script:
            return self._script.popleft()
        return self.now

    def script(self, values: Iterable[int]) -> None:
        self._script.extend(values)

    def advance(self, ms: int = 1) -> None:
        self.now += ms


class FakeCursor:
    """Records execute() calls instead of talking to PostgreSQL."""

    def __init__(self) -> None:
        self.executed: List[tuple] = []

    def execute(self, stmt, params: Optional[list] = None) -> None:
        self.executed.append((stmt, params))


class FakeConnection:
    """Connection stand-in that records commit / rollback calls."""

    def __init__(self) -> None:
        self.calls: List[str] = []
        self.cursor_obj = FakeCursor()

    def cursor(self):
        return nullcontext(self.cursor_obj)

    def commit(self) -> None:
        self.calls.append("commit")

    def rollback(self) -> None:
        self.calls.append("rollback")


class FakePool:
    """ThreadedConnectionPool stand-in handing out FakeConnection objects."""

    def __init__(self) -> None:
        self.handed_out: List[FakeConnection] = []
        self.returned: List[FakeConnection] = []
        self.closed = False

    def getconn(self) -> FakeConnection:
        conn = FakeConnection()
        self.handed_out.append(conn)
        return conn

    def putconn(self, conn: FakeConnection) -> None:
        self.returned.append(conn)

    def closeall(self) -> None:
        self.closed = True


class CountingAllocator:
    """Allocator stub returning predictable ids and counting calls."""

    def __init__(self, start: int = 1000) -> None:
        self.calls = 0
        self._next = start

    def next_id(self) -> str:
        self.calls += 1
        self._next += 1
        return str(self._next)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_pool(monkeypatch) -> FakePool:
    """Install a fake connection pool behind avalon_id.db.get_db_cursor."""
    from avalon_id import db

    pool = FakePool()
    monkeypatch.setattr(db, "_pool", pool)
    return pool


@pytest.fixture
def fake_cursor_factory(monkeypatch):
    """Patch get_db_cursor in the entity repository with fake cursors."""
    from avalon_id.repositories import entity_repository

    cursors: List[FakeCursor] = []

    @contextmanager
    def _fake_get_db_cursor() -> Iterator[FakeCursor]:
        cur = FakeCursor()
        cursors.append(cur)
        yield cur

    monkeypatch.setattr(entity_repository, "get_db_cursor", _fake_get_db_cursor)
    return cursors


@pytest.fixture(autouse=True)
def _isolate_singletons(monkeypatch):
    """Every test starts without a process allocator and with fresh settings."""
    for name in ("SNOWFLAKE_WORKER_ID", "SNOWFLAKE_DATACENTER_ID"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    reset_snowflake()
    yield
    get_settings.cache_clear()
    reset_snowflake()


def elapsed(unix_millis: int) -> int:
    return unix_millis - EPOCH_MS
