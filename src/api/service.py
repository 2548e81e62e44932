# src/api/service.py — v2
"""Task service: wires settings, store, execution context and orchestrators.

Usage:
    service = TaskService(settings)
    configure_logging(service.settings)
    service.executor.register_processor(CHUNKING, run_chunking)
    await service.start()          # recovery sweep
    task_id = await service.orchestrator("chunking").create_task(doc_hash)

Everything the orchestrators depend on is passed in, so tests can build a
service around an in-memory store and a fake host.
"""

from __future__ import annotations

import logging

from doctasks.config.settings import Settings
from doctasks.core.job_kinds import ALL_KINDS, JobKind
from doctasks.delegation.base_context_host import BaseContextHost
from doctasks.delegation.channel import DelegationChannel
from doctasks.delegation.local_host import LocalContextHost
from doctasks.orchestrator.task_orchestrator import TaskOrchestrator
from doctasks.store.base_task_store import BaseTaskStore
from doctasks.store.repository import TaskRepository
from doctasks.store.store_factory import create_task_store
from doctasks.worker.executor import TaskExecutor, create_executor

logger = logging.getLogger(__name__)


class TaskService:
    """Host-side entry point holding one orchestrator per job kind.

    Args:
        settings: Global settings. Loaded from .env if None.
        store: Task store. Built from settings if None.
        host: Execution-context host. An in-process host around
            ``executor`` is used if None.
        executor: Executor for the in-process host. Built from settings
            if None; ignored when ``host`` is given.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: BaseTaskStore | None = None,
        host: BaseContextHost | None = None,
        executor: TaskExecutor | None = None,
        kinds: tuple[JobKind, ...] = ALL_KINDS,
    ) -> None:
        self.settings = settings or Settings()
        self.store = store or create_task_store(self.settings)

        self.executor: TaskExecutor | None = None
        if host is None:
            self.executor = executor or create_executor(self.settings)
            host = LocalContextHost(self.executor)
        self.host = host

        self.channel = DelegationChannel(
            host,
            context_url=self.settings.context_url,
            context_reason=self.settings.context_reason,
            delegation_timeout_s=self.settings.delegation_timeout_s,
            verify_timeout_s=self.settings.verify_timeout_s,
        )
        self._orchestrators = {
            kind.name: TaskOrchestrator(
                kind, TaskRepository(self.store, kind), self.channel,
            )
            for kind in kinds
        }

    @property
    def orchestrators(self) -> list[TaskOrchestrator]:
        return list(self._orchestrators.values())

    def orchestrator(self, kind: JobKind | str) -> TaskOrchestrator:
        """Orchestrator for a job kind (object or name)."""
        name = kind if isinstance(kind, str) else kind.name
        try:
            return self._orchestrators[name]
        except KeyError:
            raise ValueError(f"Unknown job kind: {name!r}") from None

    async def unserved_tasks(self) -> dict[str, list[str]]:
        """Active task ids, per kind, that no registered processor can run.

        Only known for the in-process executor; an external host is assumed
        to serve every message.
        """
        unserved: dict[str, list[str]] = {}
        if self.executor is None:
            return unserved
        for name, orchestrator in self._orchestrators.items():
            task_ids = [
                record.task_id
                for record in await orchestrator.list_tasks()
                if record.status.is_active
                and not self.executor.has_processor(orchestrator.kind, record.variant)
            ]
            if task_ids:
                unserved[name] = task_ids
        return unserved

    async def start(self) -> dict[str, list[str]]:
        """Run the recovery sweep for every kind (host startup).

        A failing sweep for one kind does not prevent the others.

        Returns:
            Resumed task ids per kind name.
        """
        resumed: dict[str, list[str]] = {}
        if not self.settings.resume_on_startup:
            logger.info("Recovery sweep disabled by settings")
            return resumed

        for name, orchestrator in self._orchestrators.items():
            try:
                resumed[name] = await orchestrator.resume_pending()
            except Exception:
                logger.exception("Failed to resume pending %s tasks", name)
                resumed[name] = []
        return resumed

    async def wait_idle(self) -> None:
        """Wait for every background dispatch to settle."""
        for orchestrator in self._orchestrators.values():
            await orchestrator.wait_idle()

    def close(self) -> None:
        self.store.close()
