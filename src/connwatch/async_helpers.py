"""Fire-and-forget scheduling for listener coroutines."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Union

logger = logging.getLogger(__name__)

CoroutineFactory = Callable[[], Coroutine[Any, Any, Any]]
CoroutineSource = Union[Coroutine[Any, Any, Any], CoroutineFactory]


def safely_schedule_coroutine(coro_or_factory: CoroutineSource) -> Optional[asyncio.Task[Any]]:
    """
    Run a coroutine in the background of the current loop.

    A zero-argument factory is only called once scheduling is certain. With
    no running loop the coroutine runs to completion here and None is
    returned. Failures of scheduled tasks are logged, never raised.
    """
    coro = _resolve_coroutine(coro_or_factory)
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(coro)
        return None

    task = loop.create_task(coro)
    task.add_done_callback(_log_task_failure)
    return task


def _log_task_failure(task: asyncio.Task[Any]) -> None:
    if task.cancelled() or task.exception() is None:
        return
    logger.error("Scheduled task %s failed", task.get_name(), exc_info=task.exception())


def _resolve_coroutine(coro_or_factory: CoroutineSource) -> Coroutine[Any, Any, Any]:
    if asyncio.iscoroutine(coro_or_factory):
        return coro_or_factory
    if not callable(coro_or_factory):
        raise TypeError("safely_schedule_coroutine expects a coroutine or a callable returning one")
    coro = coro_or_factory()
    if not asyncio.iscoroutine(coro):
        raise TypeError("Callable passed to safely_schedule_coroutine must return a coroutine")
    return coro
