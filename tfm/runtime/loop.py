"""Main interactive event loop for the terminal UI.

Feeds keys, resizes and task results through ``update`` one message at a
time, redraws after changes, and hands deferred tasks to the task runner.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections import deque
from collections.abc import Callable

from ..input import read_key
from ..messages import DeferredTask, KeyPressed, Message, Resized
from ..render import frame_text, render
from ..state import AppState
from ..ui_theme import UITheme
from ..update import update
from .tasks import TaskRunner, execute_task
from .terminal import TerminalController

LOGGER = logging.getLogger(__name__)

IDLE_POLL_MS = 120


def run_main_loop(
    state: AppState,
    terminal: TerminalController,
    stdin_fd: int,
    runner: TaskRunner,
    theme: UITheme,
    *,
    get_terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
    read_key_fn: Callable[..., str] = read_key,
) -> None:
    """Run the TUI until a quit action sets ``state.quit``."""
    pending: deque[Message] = deque()
    dirty = True

    def schedule(task: DeferredTask) -> None:
        if task.interactive:
            with terminal.suspended():
                message = execute_task(task)
            if message is not None:
                pending.append(message)
            return
        runner.submit(task)

    def handle(message: Message) -> None:
        nonlocal dirty
        _, task = update(state, message)
        dirty = True
        if task is not None:
            schedule(task)

    with terminal.raw_mode():
        while not state.quit:
            term = get_terminal_size((80, 24))
            if (term.columns, term.lines) != (state.viewport.width, state.viewport.height):
                pending.append(Resized(term.columns, term.lines))
            pending.extend(runner.drain_results())
            pending.extend(runner.run_due_timers())
            while pending and not state.quit:
                handle(pending.popleft())
            if state.quit:
                break

            if dirty:
                terminal.draw(frame_text(render(state), theme))
                dirty = False

            key = read_key_fn(stdin_fd, timeout_ms=runner.next_timeout_ms(IDLE_POLL_MS))
            if key:
                handle(KeyPressed(key))


__all__ = ["IDLE_POLL_MS", "run_main_loop"]
