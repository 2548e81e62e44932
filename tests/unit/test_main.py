# tests/unit/test_main.py — v2
"""Tests for main.py — CLI entry point."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from doctasks.api.service import TaskService
from doctasks.core.doc_hash import compute_file_hash
from doctasks.core.job_kinds import CHUNKING, TOC
from doctasks.core.models import TaskRecord, TaskStatus
from doctasks.logging.logger import JsonFormatter, TextFormatter
from doctasks.main import _build_parser, main
from doctasks.store.base_task_store import encode_collection


# ---------------------------------------------------------------------------
# Parser tests
# ---------------------------------------------------------------------------

class TestBuildParser:
    def test_version_flag(self):
        parser = _build_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_list_subcommand(self):
        args = _build_parser().parse_args(["list", "--kind", "toc", "--status", "failed"])
        assert args.command == "list"
        assert args.kind == "toc"
        assert args.status == "failed"

    def test_show_subcommand(self):
        args = _build_parser().parse_args(["show", "abc123"])
        assert args.task_id == "abc123"
        assert args.kind is None

    def test_hash_subcommand(self):
        args = _build_parser().parse_args(["hash", "doc.pdf", "--upload-id", "u1"])
        assert args.file == Path("doc.pdf")
        assert args.upload_id == "u1"

    def test_invalid_kind(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["list", "--kind", "ocr"])


# ---------------------------------------------------------------------------
# Command tests
# ---------------------------------------------------------------------------

@pytest.fixture
def store_env(tmp_path, monkeypatch) -> Path:
    """Point the CLI at a JSON store under tmp_path."""
    root = tmp_path / "store"
    root.mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("STORE_BACKEND", "json")
    monkeypatch.setenv("STORE_ROOT", str(root))
    return root


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger("doctasks")
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


def _seed(root: Path) -> None:
    records = {
        "t1": TaskRecord(task_id="t1", doc_hash="a" * 64, status=TaskStatus.COMPLETED),
        "t2": TaskRecord(task_id="t2", doc_hash="b" * 64, status=TaskStatus.FAILED, error="quota"),
    }
    (root / "chunkTasks.json").write_text(encode_collection(records), encoding="utf-8")


class TestCommands:
    def test_no_command(self, store_env):
        assert main([]) == 1

    def test_list_empty(self, store_env, capsys):
        assert main(["list"]) == 0
        assert "No tasks." in capsys.readouterr().out

    def test_list_filters(self, store_env, capsys):
        _seed(store_env)
        assert main(["list", "--status", "failed"]) == 0
        out = capsys.readouterr().out
        assert "t2" in out
        assert "quota" in out
        assert "t1" not in out

    def test_show(self, store_env, capsys):
        _seed(store_env)
        assert main(["show", "t1"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["kind"] == "chunking"
        assert data["status"] == "completed"

    def test_show_missing(self, store_env):
        assert main(["show", "nope"]) == 1

    def test_hash(self, store_env, tmp_path, capsys):
        doc = tmp_path / "paper.pdf"
        doc.write_bytes(b"%PDF-1.4 body")
        assert main(["hash", str(doc)]) == 0
        assert capsys.readouterr().out.strip() == compute_file_hash(doc)

    def test_hash_missing_file(self, store_env, tmp_path):
        assert main(["hash", str(tmp_path / "missing.pdf")]) == 1

    def test_resume_refuses_without_processors(self, store_env, capsys):
        pending = {"t3": TaskRecord(task_id="t3", doc_hash="c" * 64)}
        (store_env / "tocTasks.json").write_text(encode_collection(pending), encoding="utf-8")

        assert main(["resume"]) == 2
        assert "resumed" not in capsys.readouterr().out

        stored = json.loads((store_env / "tocTasks.json").read_text())
        assert stored["t3"]["status"] == "pending"
        assert "error" not in stored["t3"]

    def test_resume_with_registered_processors(self, store_env, capsys, monkeypatch):
        pending = {"t3": TaskRecord(task_id="t3", doc_hash="c" * 64)}
        (store_env / "tocTasks.json").write_text(encode_collection(pending), encoding="utf-8")
        ran: list[str] = []

        def build_service():
            service = TaskService()

            async def run(payload):
                ran.append(payload.task_id)

            service.executor.register_processor(CHUNKING, run)
            service.executor.register_processor(TOC, run)
            return service

        monkeypatch.setattr("doctasks.main._build_service", build_service)

        assert main(["resume"]) == 0
        assert "toc: resumed 1 task(s)" in capsys.readouterr().out
        assert ran == ["t3"]
        stored = json.loads((store_env / "tocTasks.json").read_text())
        assert stored["t3"]["status"] == "completed"

    def test_resume_refuses_unregistered_variant(self, store_env, monkeypatch):
        pending = {"t4": TaskRecord(task_id="t4", doc_hash="d" * 64, variant="gemini")}
        (store_env / "chunkTasks.json").write_text(encode_collection(pending), encoding="utf-8")

        def build_service():
            service = TaskService()

            async def run(payload):
                return None

            service.executor.register_processor(CHUNKING, run)
            service.executor.register_processor(TOC, run)
            return service

        monkeypatch.setattr("doctasks.main._build_service", build_service)

        assert main(["resume"]) == 2
        stored = json.loads((store_env / "chunkTasks.json").read_text())
        assert stored["t4"]["status"] == "pending"


class TestLoggingSetup:
    def test_log_format_json_from_settings(self, store_env, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        assert main(["list"]) == 0
        handlers = logging.getLogger("doctasks").handlers
        assert handlers
        assert all(isinstance(h.formatter, JsonFormatter) for h in handlers)

    def test_log_format_text_from_settings(self, store_env, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "text")
        assert main(["list"]) == 0
        assert isinstance(logging.getLogger("doctasks").handlers[0].formatter, TextFormatter)

    def test_verbose_sets_debug(self, store_env):
        assert main(["-v", "list"]) == 0
        assert logging.getLogger("doctasks").level == logging.DEBUG
