"""Tests for background task utilities."""

from __future__ import annotations

import time

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars
from structlog.testing import capture_logs

from slack_approval_relay.background import run_async


def test_run_async_propagates_structlog_context():
    """Trace IDs bound in the caller should be visible within the worker thread."""

    clear_contextvars()
    bind_contextvars(trace_id="trace-123")
    captured: dict[str, str] = {}

    future = run_async(lambda: captured.update(get_contextvars()))
    future.result(timeout=1)

    assert captured.get("trace_id") == "trace-123"

    clear_contextvars()


def test_run_async_accepts_explicit_trace_id():
    clear_contextvars()
    captured: dict[str, str] = {}

    future = run_async(lambda: captured.update(get_contextvars()), trace_id="trace-456")
    future.result(timeout=1)

    assert captured.get("trace_id") == "trace-456"
    assert "trace_id" not in get_contextvars()

    clear_contextvars()


def test_run_async_passes_arguments():
    future = run_async(lambda a, *, b: a + b, 2, b=3)

    assert future.result(timeout=1) == 5


def test_run_async_logs_task_failures():
    """Exceptions raised in the worker are logged instead of vanishing."""

    clear_contextvars()

    def boom():
        raise RuntimeError("directory unavailable")

    def failures(logs):
        return [entry for entry in logs if entry.get("event") == "background_task_failed"]

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        run_async(boom, trace_id="trace-789")
        # the done callback runs on the worker thread right after the task fails
        for _ in range(100):
            if failures(logs):
                break
            time.sleep(0.01)

    captured = failures(logs)
    assert captured
    assert "directory unavailable" in captured[0]["error"]
    assert captured[0]["trace_id"] == "trace-789"

    clear_contextvars()
