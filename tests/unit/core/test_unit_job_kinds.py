# tests/unit/core/test_unit_job_kinds.py — v1
"""Tests for core/job_kinds.py."""

from __future__ import annotations

import pytest

from doctasks.core.job_kinds import ALL_KINDS, CHUNKING, TOC, get_kind


class TestJobKinds:
    def test_chunking_messages(self):
        assert CHUNKING.process_message() == "PROCESS_CHUNKING_TASK"
        assert CHUNKING.process_message("gemini") == "PROCESS_CHUNKING_TASK_GEMINI"
        assert CHUNKING.verify_message == "VERIFY_CHUNKS_EXISTS"
        assert CHUNKING.create_message == "CREATE_CHUNKING_TASK"
        assert CHUNKING.get_message == "GET_CHUNKING_TASK"

    def test_toc_messages(self):
        assert TOC.process_message() == "PROCESS_TOC_TASK"
        assert TOC.verify_message == "VERIFY_TOC_EXISTS"
        assert TOC.create_message == "CREATE_TOC_TASK"

    def test_storage_keys_are_distinct(self):
        assert {k.storage_key for k in ALL_KINDS} == {"chunkTasks", "tocTasks"}

    def test_unknown_variant(self):
        with pytest.raises(ValueError, match="variant"):
            TOC.process_message("gemini")

    def test_get_kind(self):
        assert get_kind("toc") is TOC
        with pytest.raises(ValueError):
            get_kind("ocr")
