"""Run webhook follow-up work off the request thread."""

from contextvars import copy_context
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

import structlog
from structlog.contextvars import bind_contextvars


_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="approval-relay")


def _log_failure(future: Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        structlog.get_logger().error(
            "background_task_failed",
            error=repr(exc),
            exc_info=(type(exc), exc, exc.__traceback__),
        )


def run_async(
    func: Callable[..., Any],
    /,
    *args: Any,
    trace_id: str | None = None,
    **kwargs: Any,
) -> Future:
    """Submit *func* to the shared pool, carrying over the structlog context.

    Exceptions raised by *func* are logged when the future completes; they
    still surface through ``Future.result()`` for callers that wait.
    """

    context = copy_context()

    if trace_id is not None:
        context.run(bind_contextvars, trace_id=trace_id)

    def runner() -> Any:
        return context.run(func, *args, **kwargs)

    future = _executor.submit(runner)
    future.add_done_callback(lambda done: context.run(_log_failure, done))
    return future
