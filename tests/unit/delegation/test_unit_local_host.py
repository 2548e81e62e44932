# tests/unit/delegation/test_unit_local_host.py — v1
"""Tests for delegation/local_host.py — in-process execution context."""

from __future__ import annotations

import pytest

from doctasks.core.job_kinds import TOC
from doctasks.delegation.base_context_host import (
    ContextAlreadyExistsError,
    ContextUnavailableError,
)
from doctasks.delegation.local_host import LocalContextHost
from doctasks.worker.executor import TaskExecutor


@pytest.fixture
def host():
    executor = TaskExecutor()

    async def verify(doc_hash):
        return doc_hash == "abc"

    executor.register_verifier(TOC, verify)
    return LocalContextHost(executor)


class TestLocalContextHost:
    @pytest.mark.asyncio
    async def test_send_without_context(self, host):
        with pytest.raises(ContextUnavailableError):
            await host.send({"type": "VERIFY_TOC_EXISTS", "payload": {"docHash": "abc"}})

    @pytest.mark.asyncio
    async def test_create_twice(self, host):
        await host.create_context("offscreen.html", "DOM_SCRAPING", "why")
        assert await host.has_context() is True
        with pytest.raises(ContextAlreadyExistsError):
            await host.create_context("offscreen.html", "DOM_SCRAPING", "why")
        assert len(host.creations) == 1

    @pytest.mark.asyncio
    async def test_send_reaches_executor(self, host):
        await host.create_context("offscreen.html", "DOM_SCRAPING", "why")
        reply = await host.send({"type": "VERIFY_TOC_EXISTS", "payload": {"docHash": "abc"}})
        assert reply == {"exists": True}

    @pytest.mark.asyncio
    async def test_destroy(self, host):
        await host.create_context("offscreen.html", "DOM_SCRAPING", "why")
        host.destroy()
        assert await host.has_context() is False
