# src/store/memory_store.py — v1
"""In-memory task store (STORE_BACKEND=memory).

Keeps serialised blobs rather than live objects so that records returned
by load() never alias what was saved. Nothing survives the process.
"""

from __future__ import annotations

from doctasks.core.models import TaskCollection
from doctasks.store.base_task_store import (
    BaseTaskStore,
    decode_collection,
    encode_collection,
)


class MemoryTaskStore(BaseTaskStore):
    """Dict-backed task store for tests and ephemeral runs."""

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}

    async def load(self, key: str) -> TaskCollection:
        return decode_collection(key, self._blobs.get(key))

    async def save(self, key: str, tasks: TaskCollection) -> None:
        self._blobs[key] = encode_collection(tasks)

    async def keys(self) -> list[str]:
        return sorted(self._blobs)
