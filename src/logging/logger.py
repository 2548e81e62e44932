# src/logging/logger.py — v2
"""Log formatters and configuration of the ``doctasks`` logger tree.

Modules log through ``logging.getLogger(__name__)``; everything below the
``doctasks`` logger picks up the handlers installed here. Task context
(task_id, doc_hash, job_kind) comes from logging/context.py and is set by
the orchestrator and the executor around each job.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from doctasks.logging.context import get_context

if TYPE_CHECKING:
    from doctasks.config.settings import Settings

ROOT_LOGGER = "doctasks"


def _timestamp(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line; task context fields sit at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(get_context().as_dict())

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line human-readable format, e.g.

    ``2026-01-01 10:00:00 [INFO    ] doctasks.x [toc:3f2a… doc=ab12cd34] - msg``
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        line = (
            f"{_timestamp(record):%Y-%m-%d %H:%M:%S} "
            f"[{record.levelname:8s}] {record.name}"
        )
        if ctx.job_kind or ctx.task_id:
            tag = ":".join(p for p in (ctx.job_kind, ctx.task_id) if p)
            if ctx.doc_hash:
                tag = f"{tag} doc={ctx.doc_hash[:8]}"
            line = f"{line} [{tag}]"
        line = f"{line} - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
}


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Logger:
    """Install stderr (and optional rotating file) handlers on ``doctasks``.

    Calling it again replaces the previous handlers.

    Returns:
        The configured ``doctasks`` logger.

    Raises:
        ValueError: If log_format is neither "json" nor "text".
    """
    try:
        formatter = _FORMATTERS[log_format]()
    except KeyError:
        raise ValueError(f"Unsupported log format: {log_format!r}") from None

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        from doctasks.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(
            log_file, rotation=rotation, retention=retention
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def configure_logging(settings: Settings, verbose: bool = False) -> logging.Logger:
    """Apply the LOG_* settings; ``verbose`` forces DEBUG."""
    return setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
