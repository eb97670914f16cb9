"""
Job handlers registry and implementations.

A handler is registered under the class name producers put in the payload.
Jobs are delivered at most once and lost if the worker crashes mid-run, so
handlers should tolerate being re-enqueued by hand after a crash.
"""

import asyncio
import logging
import time
import traceback
from typing import Awaitable, Callable

from jobqueue.constants import UNKNOWN_JOB_EXCEPTION
from jobqueue.types.job import JobContext, JobResult

logger = logging.getLogger(__name__)

# Type alias for job handler functions
JobHandler = Callable[[JobContext], Awaitable[JobResult | None]]


class HandlerRegistry:
    """
    Maps job class names to handlers and runs them under failure isolation.

    Unknown class names and handler exceptions are reported as failed
    results; they never propagate to the worker.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, JobHandler] = {}

    def register(self, class_name: str) -> Callable[[JobHandler], JobHandler]:
        """
        Decorator to register a job handler.

        Args:
            class_name: The payload class name this handler processes.

        Returns:
            Decorator function.

        Example:
            @registry.register("SendEmail")
            async def send_email(context: JobContext) -> None:
                ...
        """
        def decorator(handler: JobHandler) -> JobHandler:
            self._handlers[class_name] = handler
            logger.debug(f"Registered handler for job class: {class_name}")
            return handler
        return decorator

    def get(self, class_name: str) -> JobHandler | None:
        return self._handlers.get(class_name)

    def names(self) -> list[str]:
        return list(self._handlers.keys())

    async def run(self, context: JobContext) -> JobResult:
        """
        Execute a job using the handler registered for its class.

        Args:
            context: The job context.

        Returns:
            JobResult describing success or the captured failure.
        """
        started = time.perf_counter()
        handler = self.get(context.class_name)

        if handler is None:
            logger.error(
                f"No handler for job class: {context.class_name}",
                extra={"queue": context.queue, "worker": context.worker},
            )
            return JobResult(
                success=False,
                exception=UNKNOWN_JOB_EXCEPTION,
                error=f"No handler registered for job class: {context.class_name}",
                backtrace=[],
                duration_ms=_elapsed_ms(started),
            )

        try:
            result = await handler(context)
        except Exception as e:
            return JobResult(
                success=False,
                exception=type(e).__name__,
                error=str(e),
                backtrace=traceback.format_exception(e),
                duration_ms=_elapsed_ms(started),
            )

        if result is None:
            result = JobResult(success=True)
        if not result.success and result.exception is None:
            result = result.model_copy(update={"exception": "JobFailure"})

        return result.model_copy(update={"duration_ms": _elapsed_ms(started)})


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


# Default registry shared by the module-level helpers
_registry = HandlerRegistry()


def get_registry() -> HandlerRegistry:
    """Get the default handler registry."""
    return _registry


def register_handler(class_name: str) -> Callable[[JobHandler], JobHandler]:
    """Register a handler on the default registry."""
    return _registry.register(class_name)


def get_handler(class_name: str) -> JobHandler | None:
    """
    Get the handler for a job class.

    Returns:
        The handler function or None if not found.
    """
    return _registry.get(class_name)


def list_handlers() -> list[str]:
    """List all registered job classes."""
    return _registry.names()


async def execute_job(context: JobContext) -> JobResult:
    """Execute a job with the default registry."""
    return await _registry.run(context)


# ============================================================================
# Built-in job handlers
# ============================================================================


@register_handler("echo")
async def handle_echo(context: JobContext) -> JobResult:
    """
    Echo handler for testing.

    Simply returns the arguments as output.
    """
    logger.info("Echo job executing", extra={"queue": context.queue})

    return JobResult(
        success=True,
        output={"echo": context.args},
    )


@register_handler("sleep")
async def handle_sleep(context: JobContext) -> JobResult:
    """
    Sleep handler for testing delays.

    Args: [duration_seconds]
    """
    duration = float(context.arg(0, 1))

    logger.info("Sleep job starting", extra={"duration": duration})

    await asyncio.sleep(duration)

    return JobResult(
        success=True,
        output={"slept_for": duration},
    )


@register_handler("failing_job")
async def handle_failing_job(context: JobContext) -> None:
    """
    Handler that always fails - for testing the failure log.
    """
    raise RuntimeError(f"Intentional failure on queue {context.queue}")


@register_handler("http_request")
async def handle_http_request(context: JobContext) -> JobResult:
    """
    Make an HTTP request.

    Args: [url, method="GET", body=None]
    """
    import httpx

    url = context.arg(0)
    method = str(context.arg(1, "GET")).upper()
    body = context.arg(2)

    if not url:
        return JobResult(
            success=False,
            error="Missing url argument",
        )

    logger.info("HTTP request job", extra={"method": method, "url": url})

    async with httpx.AsyncClient() as client:
        response = await client.request(
            method=method,
            url=url,
            json=body if method in ["POST", "PUT", "PATCH"] else None,
            timeout=30.0,
        )

    return JobResult(
        success=response.is_success,
        output={
            "status_code": response.status_code,
            "body": response.text[:1000],  # Truncate response
        },
        error=None if response.is_success else f"HTTP {response.status_code}",
    )
