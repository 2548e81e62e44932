# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory task store, a scriptable execution-context host and
orchestrators wired around them. No external dependencies; all I/O is
in-process.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from doctasks.core.job_kinds import CHUNKING, TOC
from doctasks.core.models import TaskRecord, TaskStatus
from doctasks.delegation.base_context_host import (
    BaseContextHost,
    ContextAlreadyExistsError,
)
from doctasks.delegation.channel import DelegationChannel
from doctasks.orchestrator.task_orchestrator import TaskOrchestrator
from doctasks.store.memory_store import MemoryTaskStore
from doctasks.store.repository import TaskRepository


# === FAKES ===


class FakeContextHost(BaseContextHost):
    """Scriptable execution context.

    Attributes:
        process_reply: Reply returned to PROCESS_* messages.
        exists: Reply value for VERIFY_* messages.
        gate: When set to an Event, PROCESS_* replies wait for it.
        send_error: Raised from send() when not None.
        report_absent: has_context() always answers False (creation race).
    """

    def __init__(self) -> None:
        self.created = False
        self.create_calls: list[dict[str, str]] = []
        self.sent: list[dict[str, Any]] = []
        self.process_reply: Any = {"success": True}
        self.exists = True
        self.gate: asyncio.Event | None = None
        self.send_error: Exception | None = None
        self.report_absent = False

    async def has_context(self) -> bool:
        return self.created and not self.report_absent

    async def create_context(self, url: str, reason: str, justification: str) -> None:
        self.create_calls.append(
            {"url": url, "reason": reason, "justification": justification}
        )
        if self.created:
            raise ContextAlreadyExistsError("Only a single offscreen document may be created")
        self.created = True

    async def send(self, message: dict[str, Any]) -> Any:
        self.sent.append(message)
        if self.send_error is not None:
            raise self.send_error
        if message["type"].startswith("VERIFY_"):
            return {"exists": self.exists}
        if self.gate is not None:
            await self.gate.wait()
        return self.process_reply

    def sent_types(self, prefix: str = "") -> list[str]:
        return [m["type"] for m in self.sent if m["type"].startswith(prefix)]


class YieldingMemoryStore(MemoryTaskStore):
    """Memory store that suspends on every call, exposing interleavings."""

    async def load(self, key):
        await asyncio.sleep(0)
        return await super().load(key)

    async def save(self, key, tasks):
        await asyncio.sleep(0)
        await super().save(key, tasks)


async def wait_until(predicate, attempts: int = 200) -> None:
    """Yield to the event loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


# === FIXTURES ===


@pytest.fixture
def memory_store() -> MemoryTaskStore:
    return MemoryTaskStore()


@pytest.fixture
def fake_host() -> FakeContextHost:
    return FakeContextHost()


@pytest.fixture
def channel(fake_host: FakeContextHost) -> DelegationChannel:
    return DelegationChannel(fake_host, delegation_timeout_s=5.0, verify_timeout_s=1.0)


@pytest.fixture
def chunk_repository(memory_store: MemoryTaskStore) -> TaskRepository:
    return TaskRepository(memory_store, CHUNKING)


@pytest.fixture
def chunk_orchestrator(
    chunk_repository: TaskRepository, channel: DelegationChannel,
) -> TaskOrchestrator:
    return TaskOrchestrator(CHUNKING, chunk_repository, channel)


@pytest.fixture
def toc_orchestrator(
    memory_store: MemoryTaskStore, channel: DelegationChannel,
) -> TaskOrchestrator:
    return TaskOrchestrator(TOC, TaskRepository(memory_store, TOC), channel)


@pytest.fixture
def sample_record() -> TaskRecord:
    """Minimal pending chunking task."""
    return TaskRecord(
        task_id="t_pending",
        doc_hash="abc",
        status=TaskStatus.PENDING,
        file_url="https://example.com/paper.pdf",
        created_at=1_700_000_000_000,
        updated_at=1_700_000_000_000,
    )


@pytest.fixture
def yielding_store() -> YieldingMemoryStore:
    return YieldingMemoryStore()


@pytest.fixture
def settle():
    """The wait_until helper, exposed as a fixture."""
    return wait_until
