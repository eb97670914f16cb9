"""
API routes module.
"""

from jobqueue.api.routes.health import router as health_router
from jobqueue.api.routes.queues import router as queues_router
from jobqueue.api.routes.workers import router as workers_router

__all__ = ["health_router", "queues_router", "workers_router"]
