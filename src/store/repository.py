# src/store/repository.py — v2
"""Task repository: typed access to one job kind's task collection.

Every mutation is a read-modify-write of the whole collection. Mutations
are serialised through a per-repository asyncio.Lock so that two
coroutines writing different records cannot drop each other's changes.
Other processes sharing the same backend still race last-writer-wins.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from doctasks.core.job_kinds import JobKind
from doctasks.core.models import TaskCollection, TaskRecord, TaskStatus, now_ms
from doctasks.store.base_task_store import BaseTaskStore

logger = logging.getLogger(__name__)

_LOOKUP_RANK = {
    TaskStatus.PROCESSING: 0,
    TaskStatus.PENDING: 0,
    TaskStatus.COMPLETED: 1,
    TaskStatus.FAILED: 2,
}


class TaskRepository:
    """Collection-level operations for a single job kind.

    Args:
        store: Persistent backend shared by all kinds.
        kind: Job kind whose storage_key addresses the collection.
    """

    def __init__(self, store: BaseTaskStore, kind: JobKind) -> None:
        self._store = store
        self._kind = kind
        self._lock = asyncio.Lock()

    @property
    def kind(self) -> JobKind:
        return self._kind

    async def load_all(self) -> TaskCollection:
        """Snapshot of the whole collection."""
        return await self._store.load(self._kind.storage_key)

    async def get(self, task_id: str) -> TaskRecord | None:
        tasks = await self.load_all()
        return tasks.get(task_id)

    async def find_by_doc_hash(self, doc_hash: str) -> TaskRecord | None:
        """Record serving doc_hash (linear scan).

        Collections written by older releases may hold several records for
        one document. An active record wins over a completed one, which wins
        over a failed one; ties go to the oldest.
        """
        tasks = await self.load_all()
        matches = [r for r in tasks.values() if r.doc_hash == doc_hash]
        if not matches:
            return None
        return min(matches, key=lambda r: (_LOOKUP_RANK[r.status], r.created_at))

    async def list_by_status(self, *statuses: TaskStatus) -> list[TaskRecord]:
        tasks = await self.load_all()
        return [r for r in tasks.values() if r.status in statuses]

    async def mutate(
        self, fn: Callable[[TaskCollection], bool | None],
    ) -> TaskCollection:
        """Load, apply fn, and save unless fn returns False.

        fn must be synchronous: no suspension point may separate the read
        from the write.
        """
        async with self._lock:
            tasks = await self._store.load(self._kind.storage_key)
            if fn(tasks) is False:
                return tasks
            await self._store.save(self._kind.storage_key, tasks)
            return tasks

    async def insert(self, record: TaskRecord) -> None:
        def _apply(tasks: TaskCollection) -> None:
            tasks[record.task_id] = record

        await self.mutate(_apply)

    async def delete(self, task_id: str) -> bool:
        """Remove a record. Returns False if it was already gone."""
        removed = False

        def _apply(tasks: TaskCollection) -> bool:
            nonlocal removed
            removed = tasks.pop(task_id, None) is not None
            return removed

        await self.mutate(_apply)
        return removed

    async def update_status(
        self,
        task_id: str,
        status: TaskStatus,
        error: str | None = None,
    ) -> TaskRecord | None:
        """Set status (and error), refresh updated_at, persist.

        Unknown task ids are logged and ignored: the record may have been
        superseded by a concurrent create decision.

        Returns:
            The updated record, or None if task_id was not found.
        """
        updated: TaskRecord | None = None

        def _apply(tasks: TaskCollection) -> bool:
            nonlocal updated
            record = tasks.get(task_id)
            if record is None:
                return False
            record.status = status
            if error is not None:
                record.error = error
            elif status != TaskStatus.FAILED:
                record.error = None
            record.updated_at = max(now_ms(), record.updated_at)
            updated = record
            return True

        await self.mutate(_apply)
        if updated is None:
            logger.info(
                "[%s] Status update to %s ignored: task %s not found",
                self._kind.name, status.value, task_id,
            )
        else:
            logger.debug(
                "[%s] Task %s -> %s at %d",
                self._kind.name, task_id, status.value, updated.updated_at,
            )
        return updated
