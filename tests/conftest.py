"""Shared fixtures: in-memory remote store, fake clock, stores."""

from __future__ import annotations

from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta
from itertools import count
from pathlib import Path
from typing import Any

import pytest

from taskflow.errors import RemoteStoreError
from taskflow.services import Session, TaskStore
from taskflow.storage import BoardCache, LocalStorage

OWNER = "user-1"


class FakeTable:
    """In-memory owner-scoped table that records every call."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.rows: list[dict[str, Any]] = []
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.cascades: list[tuple["FakeTable", str]] = []

    def _call(self, op: str, *args: Any) -> None:
        self.calls.append((op, *args))
        if op in self.fail_on:
            raise RemoteStoreError(f"{self.name}.{op} failed")

    def ops(self) -> list[str]:
        return [call[0] for call in self.calls]

    def owned(self, owner_id: str = OWNER) -> list[dict[str, Any]]:
        return [row for row in self.rows if row["user_id"] == owner_id]

    def list(self, owner_id: str) -> list[dict[str, Any]]:
        self._call("list", owner_id)
        return [dict(row) for row in self.owned(owner_id)]

    def insert(self, rows: list[dict[str, Any]], owner_id: str) -> None:
        self._call("insert", rows, owner_id)
        for row in rows:
            if "id" in row and any(r.get("id") == row["id"] for r in self.rows):
                raise RemoteStoreError(f"duplicate key {row['id']}")
            self.rows.append({**row, "user_id": owner_id})

    def upsert(self, rows: list[dict[str, Any]], owner_id: str) -> None:
        self._call("upsert", rows, owner_id)
        for row in rows:
            self.rows = [r for r in self.rows if r.get("id") != row["id"]]
            self.rows.append({**row, "user_id": owner_id})

    def update(self, record_id: str, owner_id: str, patch: dict[str, Any]) -> None:
        self._call("update", record_id, owner_id, patch)
        for row in self.owned(owner_id):
            if row.get("id") == record_id:
                row.update(patch)

    def delete(self, record_id: str, owner_id: str) -> None:
        self._call("delete", record_id, owner_id)
        self.rows = [
            r for r in self.rows if not (r.get("id") == record_id and r["user_id"] == owner_id)
        ]
        for table, column in self.cascades:
            table.rows = [r for r in table.rows if r[column] != record_id]

    def delete_by_task(self, task_id: str, owner_id: str) -> None:
        self._call("delete_by_task", task_id, owner_id)
        self.rows = [
            r for r in self.rows if not (r["task_id"] == task_id and r["user_id"] == owner_id)
        ]


class FakeRemoteStore:
    """Three tables with cascading deletes, like the real schema."""

    def __init__(self) -> None:
        self.tasks = FakeTable("tasks")
        self.labels = FakeTable("labels")
        self.task_labels = FakeTable("task_labels")
        self.tasks.cascades.append((self.task_labels, "task_id"))
        self.labels.cascades.append((self.task_labels, "label_id"))

    def all_calls(self) -> list[tuple]:
        return self.tasks.calls + self.labels.calls + self.task_labels.calls


class FakeClock:
    """Controllable clock; starts at 2024-06-15 12:00 UTC."""

    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 6, 15, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def cache(data_dir: Path) -> BoardCache:
    return BoardCache(LocalStorage(data_dir))


@pytest.fixture
def remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ids():
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    """Single worker so remote jobs land in dispatch order."""
    pool = ThreadPoolExecutor(max_workers=1)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def guest_store(cache: BoardCache, clock: FakeClock, ids) -> Iterator[TaskStore]:
    store = TaskStore(cache, session=Session(guest=True), clock=clock, id_factory=ids)
    store.initialize()
    yield store
    store.close()


@pytest.fixture
def synced_store(
    cache: BoardCache,
    remote: FakeRemoteStore,
    executor: ThreadPoolExecutor,
    clock: FakeClock,
    ids,
) -> TaskStore:
    store = TaskStore(
        cache,
        remote=remote,
        session=Session(owner_id=OWNER),
        executor=executor,
        clock=clock,
        id_factory=ids,
    )
    store.initialize()
    return store
