"""
Queue module.
Contains the queue registry and the failure log.
"""

from jobqueue.queue.failures import FailureLog
from jobqueue.queue.registry import QueueRegistry

__all__ = ["QueueRegistry", "FailureLog"]
