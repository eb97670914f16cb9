"""
Type definitions for the job processor.
Contains input/output type definitions for all functions, grouped by module.
"""

from jobqueue.types.api import (
    FailedListResponse,
    HealthResponse,
    QueueJobsResponse,
    QueueListResponse,
    QueueResponse,
    StatsResponse,
    WorkerListResponse,
    WorkerResponse,
)
from jobqueue.types.job import (
    FailedEntry,
    JobContext,
    JobPayload,
    JobResult,
    Task,
)
from jobqueue.types.worker import WorkerIdentity

__all__ = [
    # API types
    "WorkerResponse",
    "WorkerListResponse",
    "QueueResponse",
    "QueueListResponse",
    "QueueJobsResponse",
    "FailedListResponse",
    "StatsResponse",
    "HealthResponse",
    # Job types
    "JobPayload",
    "Task",
    "FailedEntry",
    "JobResult",
    "JobContext",
    # Worker types
    "WorkerIdentity",
]
