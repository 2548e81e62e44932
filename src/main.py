# src/main.py — v2
"""CLI entry point: list, show, hash, resume commands.

Usage:
    doctasks list [--kind chunking|toc] [--status STATUS]
    doctasks show <task_id> [--kind chunking|toc]
    doctasks hash <file> [--upload-id ID]
    doctasks resume

``resume`` runs the recovery sweep against the configured store using the
in-process execution context. It exits with code 2, leaving the store
untouched, while any pending or processing task has no registered processor.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from doctasks.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="doctasks",
        description=f"doctasks v{__version__} - document job orchestration",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- list ---
    p_list = subparsers.add_parser("list", help="List stored tasks")
    p_list.add_argument(
        "--kind", choices=["chunking", "toc"], default=None,
        help="Restrict to one job kind (default: all)",
    )
    p_list.add_argument(
        "--status", choices=["pending", "processing", "completed", "failed"],
        default=None, help="Restrict to one status",
    )
    p_list.set_defaults(func=_cmd_list)

    # --- show ---
    p_show = subparsers.add_parser("show", help="Show one task as JSON")
    p_show.add_argument("task_id", help="Task identifier")
    p_show.add_argument(
        "--kind", choices=["chunking", "toc"], default=None,
        help="Job kind to search (default: all)",
    )
    p_show.set_defaults(func=_cmd_show)

    # --- hash ---
    p_hash = subparsers.add_parser("hash", help="Compute the docHash of a file")
    p_hash.add_argument("file", type=Path, help="Path to document")
    p_hash.add_argument(
        "--upload-id", default=None,
        help="Upload identifier (default: file name)",
    )
    p_hash.set_defaults(func=_cmd_hash)

    # --- resume ---
    p_resume = subparsers.add_parser(
        "resume", help="Run the recovery sweep and wait for it to settle",
    )
    p_resume.set_defaults(func=_cmd_resume)

    return parser


def _build_service():
    from doctasks.api.service import TaskService

    return TaskService()


async def _cmd_list(args: argparse.Namespace) -> int:
    """Print one line per stored task."""
    service = _build_service()
    try:
        rows = 0
        for orchestrator in service.orchestrators:
            if args.kind and orchestrator.kind.name != args.kind:
                continue
            for record in await orchestrator.list_tasks():
                if args.status and record.status.value != args.status:
                    continue
                rows += 1
                print(
                    f"{orchestrator.kind.name:9s} {record.task_id}  "
                    f"{record.status.value:10s} {record.doc_hash[:16]}"
                    + (f"  {record.error}" if record.error else "")
                )
        if rows == 0:
            print("No tasks.")
    finally:
        service.close()
    return 0


async def _cmd_show(args: argparse.Namespace) -> int:
    """Print a single task record."""
    service = _build_service()
    try:
        for orchestrator in service.orchestrators:
            if args.kind and orchestrator.kind.name != args.kind:
                continue
            record = await orchestrator.get_task(args.task_id)
            if record is not None:
                data = {"kind": orchestrator.kind.name, **record.to_wire()}
                print(json.dumps(data, indent=2))
                return 0
    finally:
        service.close()
    logger.error("Task not found: %s", args.task_id)
    return 1


async def _cmd_hash(args: argparse.Namespace) -> int:
    """Print the upload-form docHash of a local file."""
    from doctasks.core.doc_hash import compute_file_hash

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1
    print(compute_file_hash(file_path, upload_id=args.upload_id))
    return 0


async def _cmd_resume(args: argparse.Namespace) -> int:
    """Run the recovery sweep and report outcomes."""
    service = _build_service()
    try:
        unserved = await service.unserved_tasks()
        if unserved:
            for name, task_ids in unserved.items():
                logger.error(
                    "No processor registered for %d %s task(s): %s",
                    len(task_ids), name, ", ".join(task_ids),
                )
            logger.error("Refusing to resume; tasks were left untouched")
            return 2
        resumed = await service.start()
        await service.wait_idle()
        for name, task_ids in resumed.items():
            print(f"{name}: resumed {len(task_ids)} task(s)")
    finally:
        service.close()
    return 0


def _setup_logging(verbose: bool) -> None:
    """Configure logging from LOG_* settings; -v forces DEBUG."""
    from doctasks.config.settings import Settings
    from doctasks.logging.logger import configure_logging

    configure_logging(Settings(), verbose=verbose)


if __name__ == "__main__":
    sys.exit(main())
