"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class WorkerState(StrEnum):
    """
    Worker lifecycle states.

    State transitions:
    - IDLE -> RESERVING (poll)
    - RESERVING -> PROCESSING (task reserved)
    - RESERVING -> IDLE (nothing to do)
    - PROCESSING -> IDLE (task finished, success or failure)
    - any -> SHUTTING_DOWN -> DEREGISTERED
    """

    IDLE = "idle"
    RESERVING = "reserving"
    PROCESSING = "processing"
    SHUTTING_DOWN = "shutting_down"
    DEREGISTERED = "deregistered"


class JobOutcome(StrEnum):
    """Outcome of a single task execution."""

    PROCESSED = "processed"
    FAILED = "failed"


# Store key layout, relative to the configured namespace
KEY_QUEUE = "queue:{name}"
KEY_QUEUES = "queues"
KEY_WORKERS = "workers"
KEY_WORKER_STATUS = "worker:{identity}"
KEY_WORKER_STARTED = "worker_started:{identity}"
KEY_STAT = "stat:{stat}"
KEY_WORKER_STAT = "stat:{stat}:{identity}"
KEY_FAILED = "failed"

# Identity format: hostname:pid:queue1,queue2
IDENTITY_SEPARATOR = ":"
QUEUE_SEPARATOR = ","

# Process title shown while working
PROCLINE_PREFIX = "jobqueue"

# Exception name recorded when no handler is registered for a class
UNKNOWN_JOB_EXCEPTION = "UnknownJobError"

# API constants
API_V1_PREFIX = "/v1"

# Metrics names
METRIC_QUEUE_DEPTH = "job_queue_depth"
METRIC_JOBS_COMPLETED = "jobs_completed_total"
METRIC_JOB_DURATION = "job_duration_seconds"
METRIC_RESERVATIONS = "job_reservations_total"
METRIC_WORKERS_PRUNED = "workers_pruned_total"

# Trace span names
SPAN_RESERVE_JOB = "reserve_job"
SPAN_PROCESS_JOB = "process_job"
SPAN_PRUNE_WORKERS = "prune_dead_workers"
