# tests/unit/store/test_unit_sqlite_store.py — v1
"""Tests for store/sqlite_store.py — full functional tests (stdlib sqlite3)."""

from __future__ import annotations

import pytest

from doctasks.core.models import TaskRecord
from doctasks.store.base_task_store import TaskStoreError
from doctasks.store.sqlite_store import SqliteTaskStore


@pytest.fixture
def store(tmp_path):
    s = SqliteTaskStore(db_path=tmp_path / "tasks.db")
    yield s
    s.close()


def _collection(*task_ids: str) -> dict[str, TaskRecord]:
    return {t: TaskRecord(task_id=t, doc_hash=f"doc_{t}") for t in task_ids}


class TestSqliteTaskStore:
    @pytest.mark.asyncio
    async def test_missing_key(self, store):
        assert await store.load("chunkTasks") == {}

    @pytest.mark.asyncio
    async def test_save_and_load(self, store):
        await store.save("chunkTasks", _collection("a", "b"))
        loaded = await store.load("chunkTasks")
        assert sorted(loaded) == ["a", "b"]
        assert loaded["a"].doc_hash == "doc_a"

    @pytest.mark.asyncio
    async def test_upsert_replaces_collection(self, store):
        await store.save("chunkTasks", _collection("a", "b"))
        await store.save("chunkTasks", _collection("c"))
        assert list(await store.load("chunkTasks")) == ["c"]
        assert await store.keys() == ["chunkTasks"]

    @pytest.mark.asyncio
    async def test_persists_across_connections(self, store, tmp_path):
        await store.save("tocTasks", _collection("a"))
        other = SqliteTaskStore(db_path=tmp_path / "tasks.db")
        try:
            assert list(await other.load("tocTasks")) == ["a"]
        finally:
            other.close()

    @pytest.mark.asyncio
    async def test_backend_errors_are_wrapped(self, store):
        store.close()
        with pytest.raises(TaskStoreError, match="task_collections"):
            await store.keys()
        with pytest.raises(TaskStoreError, match="chunkTasks"):
            await store.load("chunkTasks")
