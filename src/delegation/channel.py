# src/delegation/channel.py — v1
"""Delegation channel: request/response protocol to the execution context.

Protocol per call:
  1. Ensure the context exists (create if absent; duplicate creation is
     logged and ignored)
  2. Send a kind-tagged message
  3. Await one reply, bounded by a timeout
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from doctasks.core.job_kinds import JobKind
from doctasks.core.models import (
    ProcessTaskPayload,
    ProcessTaskResponse,
    TaskRecord,
    VerifyPayload,
    VerifyResponse,
)
from doctasks.delegation.base_context_host import (
    BaseContextHost,
    ContextAlreadyExistsError,
    DelegationError,
    DelegationTimeout,
)

logger = logging.getLogger(__name__)

DEFAULT_DELEGATION_TIMEOUT_S = 600.0
DEFAULT_VERIFY_TIMEOUT_S = 30.0


class DelegationChannel:
    """Send work and verification requests to the execution context.

    Args:
        host: Execution-context host.
        context_url: Document the context is created from.
        context_reason: Capability reason given on creation.
        delegation_timeout_s: Bound on a processing reply.
        verify_timeout_s: Bound on a verification reply.
    """

    def __init__(
        self,
        host: BaseContextHost,
        context_url: str = "offscreen.html",
        context_reason: str = "DOM_SCRAPING",
        delegation_timeout_s: float = DEFAULT_DELEGATION_TIMEOUT_S,
        verify_timeout_s: float = DEFAULT_VERIFY_TIMEOUT_S,
    ) -> None:
        self._host = host
        self._context_url = context_url
        self._context_reason = context_reason
        self._delegation_timeout_s = delegation_timeout_s
        self._verify_timeout_s = verify_timeout_s

    async def ensure_context(self, justification: str) -> None:
        """Create the execution context unless it already exists."""
        if await self._host.has_context():
            return
        try:
            await self._host.create_context(
                self._context_url, self._context_reason, justification,
            )
            logger.info("Created execution context (%s)", justification)
        except ContextAlreadyExistsError:
            logger.info("Execution context already created by a concurrent caller")

    async def process(
        self, kind: JobKind, record: TaskRecord,
    ) -> ProcessTaskResponse:
        """Delegate one task and return the parsed reply.

        Raises:
            DelegationError: On timeout, unreachable context or a malformed reply.
        """
        await self.ensure_context(kind.justification)
        message_type = kind.process_message(record.variant)
        payload = ProcessTaskPayload.from_record(record)
        reply = await self._request(
            message_type,
            payload.model_dump(by_alias=True),
            self._delegation_timeout_s,
        )
        try:
            return ProcessTaskResponse.model_validate(reply)
        except ValidationError as e:
            raise DelegationError(
                f"Malformed reply to {message_type}: {reply!r}"
            ) from e

    async def verify(self, kind: JobKind, doc_hash: str) -> bool:
        """Ask the context whether a document's output artifacts still exist.

        Any failure counts as absent.
        """
        try:
            await self.ensure_context(kind.justification)
            reply = await self._request(
                kind.verify_message,
                VerifyPayload(doc_hash=doc_hash).model_dump(by_alias=True),
                self._verify_timeout_s,
            )
            return VerifyResponse.model_validate(reply or {}).exists
        except Exception:
            logger.exception("[%s] Error verifying artifacts for %s", kind.name, doc_hash)
            return False

    async def _request(
        self, message_type: str, payload: dict[str, Any], timeout_s: float,
    ) -> Any:
        message = {"type": message_type, "payload": payload}
        logger.debug("Sending %s with payload %s", message_type, payload)
        try:
            return await asyncio.wait_for(self._host.send(message), timeout=timeout_s)
        except asyncio.TimeoutError as e:
            raise DelegationTimeout(message_type, timeout_s) from e
