# src/core/models.py — v1
"""Shared Pydantic models: task records and the wire messages around them.

Field names on the wire use camelCase (taskId, docHash, ...); Python code
uses snake_case attributes. Always serialise with ``by_alias=True``.
"""

from __future__ import annotations

import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class TaskStatus(str, Enum):
    """Fixed four-state task lifecycle."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self in (TaskStatus.PENDING, TaskStatus.PROCESSING)

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)


# === TASK STATE ===


class TaskLocator(_WireModel):
    """Where the document bytes live. Both fields are optional and opaque."""

    file_url: str | None = Field(default=None, alias="fileUrl")
    upload_id: str | None = Field(default=None, alias="uploadId")


class TaskRecord(_WireModel):
    """One job of one kind, keyed by task_id."""

    task_id: str = Field(alias="taskId")
    doc_hash: str = Field(alias="docHash")
    status: TaskStatus = TaskStatus.PENDING
    file_url: str | None = Field(default=None, alias="fileUrl")
    upload_id: str | None = Field(default=None, alias="uploadId")
    variant: str | None = None
    error: str | None = None
    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    updated_at: int = Field(default_factory=now_ms, alias="updatedAt")

    @property
    def locator(self) -> TaskLocator:
        return TaskLocator(file_url=self.file_url, upload_id=self.upload_id)

    def to_wire(self) -> dict:
        """Serialise with wire names, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


TaskCollection = dict[str, TaskRecord]


# === DELEGATION MESSAGES (core -> execution context) ===


class ProcessTaskPayload(_WireModel):
    """Payload of PROCESS_<KIND>_TASK."""

    task_id: str = Field(alias="taskId")
    doc_hash: str = Field(alias="docHash")
    file_url: str | None = Field(default=None, alias="fileUrl")
    upload_id: str | None = Field(default=None, alias="uploadId")

    @classmethod
    def from_record(cls, record: TaskRecord) -> ProcessTaskPayload:
        return cls(
            task_id=record.task_id,
            doc_hash=record.doc_hash,
            file_url=record.file_url,
            upload_id=record.upload_id,
        )


class ProcessTaskResponse(_WireModel):
    """Reply to PROCESS_<KIND>_TASK. Kind-specific extras are kept."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    success: bool
    error: str | None = None


class VerifyPayload(_WireModel):
    """Payload of VERIFY_<KIND>_EXISTS."""

    doc_hash: str = Field(alias="docHash")


class VerifyResponse(_WireModel):
    exists: bool = False


# === CALLER MESSAGES (caller -> core) ===


class CreateTaskPayload(_WireModel):
    """Payload of CREATE_<KIND>_TASK."""

    doc_hash: str = Field(alias="docHash", min_length=1)
    file_url: str | None = Field(default=None, alias="fileUrl")
    upload_id: str | None = Field(default=None, alias="uploadId")
    variant: str | None = None

    @property
    def locator(self) -> TaskLocator:
        return TaskLocator(file_url=self.file_url, upload_id=self.upload_id)


class GetTaskPayload(_WireModel):
    """Payload of GET_<KIND>_TASK: lookup by task id or by document."""

    task_id: str | None = Field(default=None, alias="taskId")
    doc_hash: str | None = Field(default=None, alias="docHash")


class Message(_WireModel):
    """Envelope shared by every message: a type tag plus a payload dict."""

    type: str
    payload: dict = Field(default_factory=dict)
