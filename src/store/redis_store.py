# src/store/redis_store.py — v2
"""Redis-based task store (STORE_BACKEND=redis).

Requires 'redis' package: pip install redis.
"""

from __future__ import annotations

import logging

from doctasks.core.models import TaskCollection
from doctasks.store.base_task_store import (
    BaseTaskStore,
    TaskStoreError,
    decode_collection,
    encode_collection,
)

logger = logging.getLogger(__name__)

_KEY_PREFIX = "doctasks:tasks:"
_INDEX_KEY = "doctasks:tasks:__index__"


class RedisTaskStore(BaseTaskStore):
    """Redis-backed task store, one string value per collection."""

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._redis_error = redis.RedisError
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def load(self, key: str) -> TaskCollection:
        """Retrieve the collection stored under key."""
        try:
            data = self._client.get(f"{_KEY_PREFIX}{key}")
        except self._redis_error as e:
            raise TaskStoreError(key, str(e)) from e
        return decode_collection(key, data)

    async def save(self, key: str, tasks: TaskCollection) -> None:
        """Store the collection."""
        try:
            self._client.set(f"{_KEY_PREFIX}{key}", encode_collection(tasks))
            # Maintain a set of collection keys for keys()
            self._client.sadd(_INDEX_KEY, key)
        except self._redis_error as e:
            raise TaskStoreError(key, str(e)) from e

    async def keys(self) -> list[str]:
        """List stored collection keys."""
        try:
            return sorted(self._client.smembers(_INDEX_KEY))
        except self._redis_error as e:
            raise TaskStoreError(_INDEX_KEY, str(e)) from e

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
