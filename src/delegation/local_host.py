# src/delegation/local_host.py — v1
"""In-process execution-context host.

The "context" is a TaskExecutor living on the same event loop. Creation
and presence follow the same rules as a real host, so the channel code
path is identical.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from doctasks.delegation.base_context_host import (
    BaseContextHost,
    ContextAlreadyExistsError,
    ContextUnavailableError,
)

if TYPE_CHECKING:
    from doctasks.worker.executor import TaskExecutor

logger = logging.getLogger(__name__)


class LocalContextHost(BaseContextHost):
    """Host whose execution context is an in-process TaskExecutor."""

    def __init__(self, executor: TaskExecutor) -> None:
        self._executor = executor
        self._created = False
        self.creations: list[dict[str, str]] = []

    async def has_context(self) -> bool:
        return self._created

    async def create_context(self, url: str, reason: str, justification: str) -> None:
        if self._created:
            raise ContextAlreadyExistsError("Only a single execution context may be created")
        self._created = True
        self.creations.append(
            {"url": url, "reason": reason, "justification": justification}
        )
        logger.debug("Local execution context created from %s (%s)", url, reason)

    async def send(self, message: dict[str, Any]) -> Any:
        if not self._created:
            raise ContextUnavailableError(
                "Could not establish connection. Receiving end does not exist."
            )
        return await self._executor.handle(message)

    def destroy(self) -> None:
        """Drop the context, as the host environment may do at any time."""
        self._created = False
