# src/worker/executor.py — v2
"""Execution-context side of the delegation protocol.

TaskExecutor is the message handler table that runs inside the execution
context. It never touches the task store: it runs the job, then reports
{success, error?} (or {exists} for verification) back to the orchestrator.

Handlers:
  - processing: async (ProcessTaskPayload) -> dict | None
  - verification: async (doc_hash) -> bool
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from doctasks.config.settings import Settings
from doctasks.core.job_kinds import CHUNKING, TOC, JobKind
from doctasks.core.models import Message, ProcessTaskPayload, VerifyPayload
from doctasks.logging.context import task_context

logger = logging.getLogger(__name__)

ProcessHandler = Callable[[ProcessTaskPayload], Awaitable["dict[str, Any] | None"]]
VerifyHandler = Callable[[str], Awaitable[bool]]


class TaskExecutor:
    """Dispatch delegation messages to registered job handlers.

    Args:
        disabled: Message types that answer with a "disabled in settings"
            failure instead of running (feature gating).
    """

    def __init__(self, disabled: set[str] | None = None) -> None:
        self._process: dict[str, tuple[JobKind, ProcessHandler]] = {}
        self._verify: dict[str, tuple[JobKind, VerifyHandler]] = {}
        self._disabled = set(disabled or ())
        self._active_jobs = 0

    @property
    def active_jobs(self) -> int:
        """Jobs currently running; the context must be kept alive while > 0."""
        return self._active_jobs

    def register_processor(
        self,
        kind: JobKind,
        handler: ProcessHandler,
        variant: str | None = None,
    ) -> None:
        self._process[kind.process_message(variant)] = (kind, handler)

    def register_verifier(self, kind: JobKind, handler: VerifyHandler) -> None:
        self._verify[kind.verify_message] = (kind, handler)

    def has_processor(self, kind: JobKind, variant: str | None = None) -> bool:
        """Whether a handler is registered; unknown variants have none."""
        try:
            return kind.process_message(variant) in self._process
        except ValueError:
            return False

    def disable(self, message_type: str) -> None:
        self._disabled.add(message_type)

    async def handle(self, message: dict[str, Any]) -> dict[str, Any]:
        """Handle one message and build its reply."""
        try:
            envelope = Message.model_validate(message)
        except ValidationError as e:
            return {"success": False, "error": f"Malformed message: {e}"}

        if envelope.type in self._process:
            return await self._handle_process(envelope)
        if envelope.type in self._verify:
            return await self._handle_verify(envelope)

        logger.warning("Unknown message type: %s", envelope.type)
        return {"success": False, "error": f"Unknown message type: {envelope.type}"}

    async def _handle_process(self, envelope: Message) -> dict[str, Any]:
        kind, handler = self._process[envelope.type]
        if envelope.type in self._disabled:
            logger.info("%s is disabled by settings", envelope.type)
            return {
                "success": False,
                "error": f"{_describe(kind, envelope.type)} disabled in settings",
            }

        try:
            payload = ProcessTaskPayload.model_validate(envelope.payload)
        except ValidationError as e:
            return {"success": False, "error": f"Invalid payload: {e}"}

        self._active_jobs += 1
        with task_context(payload.task_id, payload.doc_hash, kind.name):
            logger.info("Received %s for task %s", envelope.type, payload.task_id)
            try:
                extra = await handler(payload)
            except Exception as exc:
                logger.exception("Failed to process %s task %s", kind.name, payload.task_id)
                return {"success": False, "error": str(exc) or type(exc).__name__}
            finally:
                self._active_jobs -= 1

        logger.info("%s task %s completed successfully", kind.name, payload.task_id)
        reply: dict[str, Any] = dict(extra or {})
        reply["success"] = True
        return reply

    async def _handle_verify(self, envelope: Message) -> dict[str, Any]:
        kind, handler = self._verify[envelope.type]
        try:
            payload = VerifyPayload.model_validate(envelope.payload)
            exists = bool(await handler(payload.doc_hash))
        except Exception:
            logger.exception("Error verifying %s artifacts", kind.name)
            return {"exists": False}
        logger.debug("%s artifacts for %s exist: %s", kind.name, payload.doc_hash, exists)
        return {"exists": exists}


def _describe(kind: JobKind, message_type: str) -> str:
    """Human label for gating errors, e.g. 'Gemini chunking'."""
    for variant in kind.variants:
        if message_type == kind.process_message(variant):
            return f"{variant.capitalize()} {kind.title.lower()}"
    return kind.title


def create_executor(settings: Settings | None = None) -> TaskExecutor:
    """Build an executor with feature gating taken from settings.

    Handlers are registered afterwards by whoever embeds the context.
    """
    disabled: set[str] = set()
    if settings is not None:
        if not settings.chunking_enabled:
            disabled.add(CHUNKING.process_message())
        if not settings.chunking_gemini_enabled:
            disabled.add(CHUNKING.process_message("gemini"))
        if not settings.toc_enabled:
            disabled.add(TOC.process_message())
    return TaskExecutor(disabled=disabled)
