# src/store/json_store.py — v1
"""JSON file-based task store (default STORE_BACKEND=json).

Stores each collection as one JSON file under STORE_ROOT. Writes go to a
temporary sibling first and are renamed into place, so a process killed
mid-write leaves the previous collection intact.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from doctasks.core.models import TaskCollection
from doctasks.store.base_task_store import (
    BaseTaskStore,
    TaskStoreError,
    decode_collection,
    encode_collection,
)

logger = logging.getLogger(__name__)


class JsonTaskStore(BaseTaskStore):
    """File-based task store using one JSON file per key."""

    def __init__(self, store_root: Path | str) -> None:
        self._root = Path(store_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def load(self, key: str) -> TaskCollection:
        """Read the collection file; a missing file is an empty collection."""
        path = self._entry_path(key)
        if not path.exists():
            return {}
        try:
            blob = path.read_text(encoding="utf-8")
        except OSError as e:
            raise TaskStoreError(key, str(e)) from e
        return decode_collection(key, blob)

    async def save(self, key: str, tasks: TaskCollection) -> None:
        """Write the collection atomically (temp file + rename)."""
        path = self._entry_path(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(encode_collection(tasks), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise TaskStoreError(key, str(e)) from e

    async def keys(self) -> list[str]:
        """List stored collection keys."""
        if not self._root.is_dir():
            return []
        return sorted(p.stem for p in self._root.glob("*.json"))

    def _entry_path(self, key: str) -> Path:
        """Return file path for a storage key."""
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
