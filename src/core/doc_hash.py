# src/core/doc_hash.py — v1
"""Stable document identity (docHash) from a source locator.

Remote documents hash ``url|etag|contentLength``; uploaded blobs hash
``uploadId|size`` followed by the first and last byte windows.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

EDGE_WINDOW_BYTES = 64 * 1024


def compute_url_hash(
    url: str,
    etag: str | None = None,
    content_length: int | None = None,
) -> str:
    """docHash for a document fetched from a URL."""
    parts = [url, etag or "", "" if content_length is None else str(content_length)]
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


def compute_upload_hash(
    upload_id: str,
    size: int | None = None,
    first_bytes: bytes | None = None,
    last_bytes: bytes | None = None,
) -> str:
    """docHash for a locally uploaded blob."""
    parts = [upload_id, "" if size is None else str(size)]
    digest = hashlib.sha256("|".join(parts).encode("utf-8"))
    if first_bytes:
        digest.update(first_bytes)
    if last_bytes:
        digest.update(last_bytes)
    return digest.hexdigest()


def compute_file_hash(path: Path, upload_id: str | None = None) -> str:
    """Upload-form docHash of a local file, read from its edge windows.

    Args:
        path: File on disk.
        upload_id: Upload identifier; defaults to the file name.
    """
    path = Path(path).expanduser()
    size = path.stat().st_size
    with path.open("rb") as fh:
        first = fh.read(EDGE_WINDOW_BYTES)
        last = b""
        if size > EDGE_WINDOW_BYTES:
            fh.seek(max(size - EDGE_WINDOW_BYTES, 0))
            last = fh.read(EDGE_WINDOW_BYTES)
    return compute_upload_hash(
        upload_id or path.name, size=size, first_bytes=first, last_bytes=last,
    )
