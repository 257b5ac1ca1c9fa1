"""Execution of deferred tasks outside message handling.

Background tasks run on a small thread pool and report through a queue the
loop drains; delayed tasks wait in a heap until due and then run on the
loop thread.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from queue import Empty, Queue

from ..messages import DeferredTask, Message, TaskFailed

LOGGER = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


def execute_task(task: DeferredTask) -> Message | None:
    """Run ``task`` and return its message; exceptions become messages too."""
    try:
        return task.run()
    except Exception as exc:
        LOGGER.exception("task %r failed", task.label)
        if task.on_error is not None:
            return task.on_error(exc)
        return TaskFailed(label=task.label, error=str(exc))


class TaskRunner:
    """Run deferred tasks and collect their result messages."""

    def __init__(self, max_workers: int = DEFAULT_WORKERS, clock: Callable[[], float] = time.monotonic) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="tfm-task")
        self._clock = clock
        self._results: Queue[Message] = Queue()
        self._timers: list[tuple[float, int, DeferredTask]] = []
        self._sequence = itertools.count()

    def submit(self, task: DeferredTask) -> None:
        """Schedule a non-interactive task."""
        if task.delay > 0:
            heapq.heappush(self._timers, (self._clock() + task.delay, next(self._sequence), task))
            return
        self._executor.submit(self._run, task)

    def _run(self, task: DeferredTask) -> None:
        message = execute_task(task)
        if message is not None:
            self._results.put(message)

    def drain_results(self) -> list[Message]:
        """Drain all completed background results."""
        out: list[Message] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def run_due_timers(self) -> list[Message]:
        """Run delayed tasks whose time has come, in due order."""
        now = self._clock()
        out: list[Message] = []
        while self._timers and self._timers[0][0] <= now:
            _, _, task = heapq.heappop(self._timers)
            message = execute_task(task)
            if message is not None:
                out.append(message)
        return out

    def next_timeout_ms(self, idle_ms: int) -> int:
        """Milliseconds the loop may block before a timer falls due."""
        if not self._timers:
            return idle_ms
        remaining = (self._timers[0][0] - self._clock()) * 1000.0
        return max(0, min(idle_ms, int(remaining) + 1))

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["TaskRunner", "execute_task"]
