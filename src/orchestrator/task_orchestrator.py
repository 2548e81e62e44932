# src/orchestrator/task_orchestrator.py — v1
"""Task orchestrator: create/dedup decisions, dispatch, recovery sweep.

One instance per job kind. Decision flow for create_task(doc_hash):
  1. Find the existing record for doc_hash
  2. pending / processing -> return its task_id (no duplicate work)
  3. completed -> verify artifacts; present -> return its task_id,
     absent -> delete the stale record and create
  4. failed -> delete and create
  5. create: persist a pending record, dispatch in the background,
     return the new task_id immediately

The decision and the insert run under a per-doc_hash lock, so concurrent
calls for the same document cannot both create a task.

Dispatch (background): pending -> processing -> completed | failed.
Every error on that path ends as a failed status; nothing reaches the
create_task caller.
"""

from __future__ import annotations

import asyncio
import logging
import uuid

from doctasks.core.job_kinds import JobKind
from doctasks.core.models import TaskLocator, TaskRecord, TaskStatus
from doctasks.delegation.base_context_host import DelegationError
from doctasks.delegation.channel import DelegationChannel
from doctasks.logging.context import task_context
from doctasks.orchestrator.keyed_lock import KeyedLock
from doctasks.store.repository import TaskRepository

logger = logging.getLogger(__name__)


def generate_task_id() -> str:
    """Opaque unique task identifier."""
    return uuid.uuid4().hex


class TaskOrchestrator:
    """Idempotent, crash-recoverable job lifecycle for one job kind.

    Args:
        kind: Job kind handled by this instance.
        repository: Task collection access for the kind.
        channel: Delegation channel to the execution context.
    """

    def __init__(
        self,
        kind: JobKind,
        repository: TaskRepository,
        channel: DelegationChannel,
    ) -> None:
        if repository.kind != kind:
            raise ValueError(
                f"Repository for {repository.kind.name!r} cannot serve {kind.name!r}"
            )
        self._kind = kind
        self._repository = repository
        self._channel = channel
        self._doc_locks = KeyedLock()
        self._inflight: dict[str, asyncio.Task[None]] = {}

    @property
    def kind(self) -> JobKind:
        return self._kind

    @property
    def inflight(self) -> set[str]:
        """Task ids currently being dispatched by this process."""
        return set(self._inflight)

    # --- Decision engine ---

    async def create_task(
        self,
        doc_hash: str,
        locator: TaskLocator | None = None,
        variant: str | None = None,
    ) -> str:
        """Return the task id serving doc_hash, creating a task if needed.

        Raises:
            ValueError: If doc_hash is empty or variant is unsupported.
            TaskStoreError: If the store cannot be read or written.
        """
        if not doc_hash:
            raise ValueError("doc_hash is required")
        # Validates the variant before anything is persisted
        self._kind.process_message(variant)
        locator = locator or TaskLocator()

        async with self._doc_locks.hold(doc_hash):
            existing = await self._repository.find_by_doc_hash(doc_hash)
            if existing is not None:
                reused = await self._resolve_existing(existing)
                if reused is not None:
                    return reused

            record = TaskRecord(
                task_id=generate_task_id(),
                doc_hash=doc_hash,
                status=TaskStatus.PENDING,
                file_url=locator.file_url,
                upload_id=locator.upload_id,
                variant=variant,
            )
            await self._repository.insert(record)

        logger.info(
            "[%s] Created task %s for document %s",
            self._kind.name, record.task_id, doc_hash,
        )
        self._dispatch(record.task_id)
        return record.task_id

    async def _resolve_existing(self, existing: TaskRecord) -> str | None:
        """Reuse existing's task id, or delete it and return None."""
        doc_hash = existing.doc_hash

        if existing.status.is_active:
            logger.info(
                "[%s] Task already in progress for document %s (status: %s)",
                self._kind.name, doc_hash, existing.status.value,
            )
            return existing.task_id

        if existing.status == TaskStatus.COMPLETED:
            if await self._channel.verify(self._kind, doc_hash):
                logger.info(
                    "[%s] Document %s already processed with verified artifacts",
                    self._kind.name, doc_hash,
                )
                return existing.task_id
            logger.warning(
                "[%s] Task %s marked completed but artifacts are missing; "
                "reprocessing document %s",
                self._kind.name, existing.task_id, doc_hash,
            )
        else:
            logger.info(
                "[%s] Previous task %s failed (%s); creating a new task for %s",
                self._kind.name, existing.task_id, existing.error, doc_hash,
            )

        await self._repository.delete(existing.task_id)
        return None

    # --- Dispatch ---

    def _dispatch(self, task_id: str) -> asyncio.Task[None]:
        """Start delegation in the background unless already running."""
        running = self._inflight.get(task_id)
        if running is not None:
            return running

        task = asyncio.get_running_loop().create_task(
            self._process(task_id), name=f"{self._kind.name}:{task_id}",
        )
        self._inflight[task_id] = task
        task.add_done_callback(lambda _t: self._inflight.pop(task_id, None))
        return task

    async def _process(self, task_id: str) -> None:
        """Delegate one task and record the outcome as its status."""
        try:
            record = await self._repository.get(task_id)
            if record is None:
                logger.error("[%s] Task %s not found", self._kind.name, task_id)
                return
            if record.status.is_terminal:
                logger.info(
                    "[%s] Task %s already %s, not dispatching",
                    self._kind.name, task_id, record.status.value,
                )
                return

            with task_context(task_id, record.doc_hash, self._kind.name):
                if await self._repository.update_status(
                    task_id, TaskStatus.PROCESSING
                ) is None:
                    return

                response = await self._channel.process(self._kind, record)
                if not response.success:
                    raise DelegationError(
                        response.error
                        or f"Unknown error processing {self._kind.name} task"
                    )
                await self._repository.update_status(task_id, TaskStatus.COMPLETED)
                logger.info("[%s] Task %s completed", self._kind.name, task_id)
        except Exception as exc:
            logger.error(
                "[%s] Error delegating task %s: %s",
                self._kind.name, task_id, exc,
                exc_info=not isinstance(exc, DelegationError),
            )
            await self._record_failure(task_id, str(exc) or type(exc).__name__)

    async def _record_failure(self, task_id: str, message: str) -> None:
        try:
            await self._repository.update_status(task_id, TaskStatus.FAILED, message)
        except Exception:
            # Left pending/processing: the next recovery sweep retries it.
            logger.exception(
                "[%s] Could not record failure of task %s", self._kind.name, task_id,
            )

    # --- Recovery ---

    async def resume_pending(self) -> list[str]:
        """Re-dispatch every pending/processing task. Called once at startup.

        Returns:
            Task ids that were dispatched.
        """
        records = await self._repository.list_by_status(
            TaskStatus.PENDING, TaskStatus.PROCESSING,
        )
        logger.info("[%s] Found %d pending tasks", self._kind.name, len(records))
        for record in records:
            self._dispatch(record.task_id)
        return [r.task_id for r in records]

    # --- Queries ---

    async def get_task(self, task_id: str) -> TaskRecord | None:
        return await self._repository.get(task_id)

    async def find_task(self, doc_hash: str) -> TaskRecord | None:
        return await self._repository.find_by_doc_hash(doc_hash)

    async def list_tasks(self) -> list[TaskRecord]:
        tasks = await self._repository.load_all()
        return sorted(tasks.values(), key=lambda r: r.created_at)

    async def update_status(
        self, task_id: str, status: TaskStatus, error: str | None = None,
    ) -> TaskRecord | None:
        """Status transition entry point; unknown ids are a logged no-op."""
        return await self._repository.update_status(task_id, status, error)

    async def wait_idle(self) -> None:
        """Wait until no background dispatch is running."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight.values()), return_exceptions=True)
