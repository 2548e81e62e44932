# src/delegation/base_context_host.py — v1
"""Abstract execution-context host.

The host owns the ephemeral context that performs the real work. The core
only needs to know whether it exists, how to create it, and how to send it
a message and await the single reply.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class DelegationError(Exception):
    """Base class for failures on the delegation path."""


class ContextUnavailableError(DelegationError):
    """The execution context could not be reached or created."""


class ContextAlreadyExistsError(DelegationError):
    """Creation was attempted while a context already exists."""


class DelegationTimeout(DelegationError):
    """No reply arrived within the configured bound."""

    def __init__(self, message_type: str, timeout_s: float) -> None:
        self.message_type = message_type
        self.timeout_s = timeout_s
        super().__init__(
            f"Timed out after {timeout_s:g}s waiting for {message_type}"
        )


class BaseContextHost(ABC):
    """Interface to the environment that hosts the execution context."""

    @abstractmethod
    async def has_context(self) -> bool:
        """Whether the execution context currently exists."""

    @abstractmethod
    async def create_context(self, url: str, reason: str, justification: str) -> None:
        """Create the execution context.

        Raises:
            ContextAlreadyExistsError: If one already exists.
        """

    @abstractmethod
    async def send(self, message: dict[str, Any]) -> Any:
        """Deliver a message to the context and return its raw reply.

        Raises:
            ContextUnavailableError: If no context is listening.
        """
