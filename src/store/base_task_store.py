# src/store/base_task_store.py — v1
"""Abstract persistent task store interface.

A store maps a fixed logical key (one per job kind) to a serialised task
collection. It knows nothing about task semantics: callers load, mutate
and save the whole collection.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from doctasks.core.models import TaskCollection, TaskRecord

logger = logging.getLogger(__name__)


class TaskStoreError(Exception):
    """Raised when a backend cannot read or write a collection."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Task store failure for '{key}': {reason}")


class BaseTaskStore(ABC):
    """Unified interface for task storage backends."""

    @abstractmethod
    async def load(self, key: str) -> TaskCollection:
        """Return the collection stored under key, empty on first use."""

    @abstractmethod
    async def save(self, key: str, tasks: TaskCollection) -> None:
        """Persist the full collection under key."""

    @abstractmethod
    async def keys(self) -> list[str]:
        """List keys that currently hold a collection."""

    def close(self) -> None:
        """Release backend resources. Default is a no-op."""


def encode_collection(tasks: TaskCollection) -> str:
    """Serialise a collection to the JSON blob persisted by every backend."""
    return json.dumps(
        {task_id: record.to_wire() for task_id, record in tasks.items()},
        sort_keys=True,
    )


def decode_collection(key: str, blob: str | bytes | None) -> TaskCollection:
    """Parse a persisted blob. Unreadable records are skipped with a warning."""
    if not blob:
        return {}
    try:
        raw = json.loads(blob)
    except json.JSONDecodeError as e:
        logger.warning("Discarding unreadable task collection %s: %s", key, e)
        return {}
    if not isinstance(raw, dict):
        logger.warning("Discarding task collection %s: not a mapping", key)
        return {}

    tasks: TaskCollection = {}
    for task_id, data in raw.items():
        try:
            tasks[task_id] = TaskRecord.model_validate(data)
        except ValidationError as e:
            logger.warning("Skipping invalid task record %s in %s: %s", task_id, key, e)
    return tasks
