"""Fire-and-forget background tasks for parent notifications.

This is not a queue: a task runs once on a small in-process thread pool after
the handler has moved on. Failures are logged and dropped, never retried and
never reported to the caller.
"""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

from flask import Flask, current_app

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _get_executor(max_workers: int) -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="notify")
        return _executor


def _run_task(app: Flask, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
    with app.app_context():
        try:
            fn(*args, **kwargs)
        except Exception:
            app.logger.exception("Queued task %s failed", getattr(fn, "__name__", repr(fn)))


def queue_task(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Run ``fn(*args, **kwargs)`` later inside its own app context.

    With ``TASKS_EAGER`` set the task runs inline, still swallowing errors.
    """
    app = current_app._get_current_object()  # type: ignore[attr-defined]
    if app.config.get("TASKS_EAGER"):
        _run_task(app, fn, args, kwargs)
        return
    executor = _get_executor(int(app.config.get("NOTIFY_WORKERS", 4)))
    executor.submit(_run_task, app, fn, args, kwargs)
