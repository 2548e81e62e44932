# src/store/store_factory.py — v1
"""Factory for task store instantiation."""

from __future__ import annotations

from doctasks.config.settings import Settings
from doctasks.store.base_task_store import BaseTaskStore


def create_task_store(settings: Settings | None = None) -> BaseTaskStore:
    """Instantiate the configured task store backend.

    Args:
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseTaskStore implementation.
    """
    backend = "json" if settings is None else settings.store_backend
    store_root = "~/.doctasks/store" if settings is None else str(settings.store_root)

    if backend == "json":
        from doctasks.store.json_store import JsonTaskStore
        return JsonTaskStore(store_root=store_root)

    if backend == "sqlite":
        from doctasks.store.sqlite_store import SqliteTaskStore
        return SqliteTaskStore(db_path=f"{store_root}/doctasks.db")

    if backend == "redis":
        from doctasks.store.redis_store import RedisTaskStore
        if settings is None or not settings.store_redis_url:
            raise ValueError(
                "STORE_REDIS_URL must be set when STORE_BACKEND=redis"
            )
        return RedisTaskStore(redis_url=settings.store_redis_url)

    if backend == "memory":
        from doctasks.store.memory_store import MemoryTaskStore
        return MemoryTaskStore()

    raise ValueError(f"Unsupported store backend: {backend!r}")
