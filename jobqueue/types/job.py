"""
Job-related type definitions for internal use.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class JobPayload(BaseModel):
    """
    Job payload structure.
    The unit of work held on a queue: a handler name plus positional arguments.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    class_name: str = Field(alias="class")
    args: list[Any] = Field(default_factory=list)

    def to_json(self) -> str:
        """Encode for storage on a queue list."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "JobPayload":
        """Decode a payload popped from a queue list."""
        return cls.model_validate_json(raw)


class Task(BaseModel):
    """
    A reserved payload, published as a worker's status while it is processed.
    """

    queue: str
    run_at: datetime
    payload: JobPayload

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Task":
        return cls.model_validate_json(raw)


class FailedEntry(BaseModel):
    """
    Record of a failed job execution.
    Appended to the failure log and never expired.
    """

    failed_at: datetime
    payload: JobPayload
    worker: str
    queue: str
    exception: str
    error: str
    backtrace: list[str] = Field(default_factory=list)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "FailedEntry":
        return cls.model_validate_json(raw)


class JobResult(BaseModel):
    """
    Result of job execution.
    Returned by the task runner after processing.
    """

    success: bool
    output: Any | None = None
    exception: str | None = None
    error: str | None = None
    backtrace: list[str] | None = None
    duration_ms: float | None = None


@dataclass
class JobContext:
    """
    Context passed to job handlers during execution.
    """

    class_name: str
    args: list[Any]
    queue: str
    worker: str
    run_at: datetime

    def arg(self, index: int, default: Any = None) -> Any:
        """Positional argument at index, or default when absent."""
        if index < len(self.args):
            return self.args[index]
        return default
