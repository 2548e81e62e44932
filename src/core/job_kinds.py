# src/core/job_kinds.py — v1
"""Job kind descriptors.

A JobKind parameterises the single orchestrator implementation: message
type names, the storage key of its task collection, and the justification
handed over when the execution context has to be created.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class JobKind:
    """Static description of one job pipeline."""

    name: str
    title: str
    label: str
    storage_key: str
    verify_label: str
    justification: str
    variants: tuple[str, ...] = field(default_factory=tuple)

    def process_message(self, variant: str | None = None) -> str:
        """PROCESS_<LABEL>_TASK, suffixed with the variant when given."""
        base = f"PROCESS_{self.label}_TASK"
        if variant is None:
            return base
        if variant not in self.variants:
            raise ValueError(
                f"Unsupported variant {variant!r} for job kind {self.name!r}"
            )
        return f"{base}_{variant.upper()}"

    @property
    def verify_message(self) -> str:
        return f"VERIFY_{self.verify_label}_EXISTS"

    @property
    def create_message(self) -> str:
        return f"CREATE_{self.label}_TASK"

    @property
    def get_message(self) -> str:
        return f"GET_{self.label}_TASK"


CHUNKING = JobKind(
    name="chunking",
    title="Chunking",
    label="CHUNKING",
    storage_key="chunkTasks",
    verify_label="CHUNKS",
    justification="Process PDF chunking with IndexedDB access",
    variants=("gemini",),
)

TOC = JobKind(
    name="toc",
    title="TOC",
    label="TOC",
    storage_key="tocTasks",
    verify_label="TOC",
    justification="Generate table of contents with IndexedDB and pdf.js access",
)

ALL_KINDS: tuple[JobKind, ...] = (CHUNKING, TOC)


def get_kind(name: str) -> JobKind:
    """Look up a job kind by name."""
    for kind in ALL_KINDS:
        if kind.name == name:
            return kind
    raise ValueError(f"Unknown job kind: {name!r}")
