# src/api/router.py — v1
"""Caller-facing message router.

Maps CREATE_<KIND>_TASK and GET_<KIND>_TASK messages onto the matching
orchestrator. Replies are plain dicts; failures become
{"success": False, "error": ...} and never raise.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from doctasks.core.models import CreateTaskPayload, GetTaskPayload, Message
from doctasks.orchestrator.task_orchestrator import TaskOrchestrator

logger = logging.getLogger(__name__)


class TaskRouter:
    """Route caller messages to orchestrators by message type."""

    def __init__(self, orchestrators: list[TaskOrchestrator]) -> None:
        self._create: dict[str, TaskOrchestrator] = {}
        self._get: dict[str, TaskOrchestrator] = {}
        for orchestrator in orchestrators:
            self._create[orchestrator.kind.create_message] = orchestrator
            self._get[orchestrator.kind.get_message] = orchestrator

    @property
    def message_types(self) -> list[str]:
        return sorted([*self._create, *self._get])

    async def handle(self, message: dict[str, Any]) -> dict[str, Any]:
        """Handle one caller message."""
        try:
            envelope = Message.model_validate(message)
        except ValidationError as e:
            return {"success": False, "error": f"Malformed message: {e}"}

        if envelope.type in self._create:
            return await self._handle_create(self._create[envelope.type], envelope)
        if envelope.type in self._get:
            return await self._handle_get(self._get[envelope.type], envelope)
        return {"success": False, "error": f"Unknown message type: {envelope.type}"}

    async def _handle_create(
        self, orchestrator: TaskOrchestrator, envelope: Message,
    ) -> dict[str, Any]:
        if not envelope.payload.get("docHash"):
            return {"success": False, "error": "docHash is required"}
        try:
            payload = CreateTaskPayload.model_validate(envelope.payload)
            task_id = await orchestrator.create_task(
                payload.doc_hash, payload.locator, variant=payload.variant,
            )
        except Exception as exc:
            logger.error(
                "Failed to create %s task: %s", orchestrator.kind.name, exc,
                exc_info=not isinstance(exc, (ValueError, ValidationError)),
            )
            return {"success": False, "error": str(exc)}
        return {"success": True, "taskId": task_id}

    async def _handle_get(
        self, orchestrator: TaskOrchestrator, envelope: Message,
    ) -> dict[str, Any]:
        try:
            payload = GetTaskPayload.model_validate(envelope.payload)
            if payload.task_id:
                record = await orchestrator.get_task(payload.task_id)
            elif payload.doc_hash:
                record = await orchestrator.find_task(payload.doc_hash)
            else:
                return {"success": False, "error": "taskId or docHash is required"}
        except Exception as exc:
            logger.exception("Failed to read %s task", orchestrator.kind.name)
            return {"success": False, "error": str(exc)}
        return {"success": True, "task": record.to_wire() if record else None}
