# src/logging/context.py — v2
"""Contextual logging support: attach task_id, doc_hash, job_kind to log records."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

# Context variables for structured logging, set per task dispatch.
_task_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "task_id", default=None
)
_doc_hash: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "doc_hash", default=None
)
_job_kind: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_kind", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    task_id: str | None = None
    doc_hash: str | None = None
    job_kind: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        task_id=_task_id.get(),
        doc_hash=_doc_hash.get(),
        job_kind=_job_kind.get(),
    )


@contextmanager
def task_context(task_id: str, doc_hash: str, job_kind: str) -> Iterator[None]:
    """Scope task context to a block, restoring the previous values after."""
    tokens = (
        _task_id.set(task_id),
        _doc_hash.set(doc_hash),
        _job_kind.set(job_kind),
    )
    try:
        yield
    finally:
        _job_kind.reset(tokens[2])
        _doc_hash.reset(tokens[1])
        _task_id.reset(tokens[0])
