"""The single message handler driving the browser.

``update(state, message)`` applies one message synchronously and returns the
state together with at most one deferred task for the loop to run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from .actions import dispatch
from .chords import CHORD_TIMEOUT_SECONDS, Pending, Resolved
from .commands import CommandOps
from .input_layout import normalize_token
from .messages import (
    ChordTimeout,
    CommandFinished,
    DeferredTask,
    DirectoryPrefetched,
    FilesPasted,
    KeyPressed,
    Message,
    Resized,
    TaskFailed,
)
from .navigation import NavigationOps
from .state import MODE_COMMAND, MODE_MODAL, MODE_NORMAL, AppState

LOGGER = logging.getLogger(__name__)

Handler = Callable[[AppState, NavigationOps, CommandOps, Message], DeferredTask | None]


def chord_timeout_task(generation: int) -> DeferredTask:
    return DeferredTask(
        run=lambda: ChordTimeout(generation),
        label="chord timeout",
        delay=CHORD_TIMEOUT_SECONDS,
    )


def _on_key(state: AppState, nav: NavigationOps, cmds: CommandOps, message: KeyPressed) -> DeferredTask | None:
    if state.mode == MODE_MODAL:
        state.close_modal()
        return None
    if state.mode == MODE_COMMAND:
        return _on_command_key(state, cmds, message.token)

    result = state.chords.feed(normalize_token(message.token))
    if isinstance(result, Resolved):
        return dispatch(result.action, nav, cmds)
    if isinstance(result, Pending):
        return chord_timeout_task(result.generation)
    return None


def _on_command_key(state: AppState, cmds: CommandOps, token: str) -> DeferredTask | None:
    if token == "esc":
        state.mode = MODE_NORMAL
        state.command_buffer = ""
        return None
    if token == "enter":
        line = state.command_buffer
        state.mode = MODE_NORMAL
        state.command_buffer = ""
        return cmds.execute(line)
    if token == "backspace":
        state.command_buffer = state.command_buffer[:-1]
    elif token == "space":
        state.command_buffer += " "
    elif len(token) == 1 and token.isprintable():
        state.command_buffer += token
    return None


def _on_chord_timeout(state: AppState, nav: NavigationOps, cmds: CommandOps, message: ChordTimeout) -> DeferredTask | None:
    if state.mode != MODE_NORMAL:
        return None
    action = state.chords.on_timeout(message.generation)
    if action is None:
        return None
    return dispatch(action, nav, cmds)


def _on_resize(state: AppState, nav: NavigationOps, cmds: CommandOps, message: Resized) -> None:
    state.viewport.width = max(1, message.width)
    state.viewport.height = max(1, message.height)
    nav.ensure_visible()


def _on_prefetched(state: AppState, nav: NavigationOps, cmds: CommandOps, message: DirectoryPrefetched) -> None:
    nav.merge_prefetched(message)


def _on_command_finished(state: AppState, nav: NavigationOps, cmds: CommandOps, message: CommandFinished) -> None:
    LOGGER.info("command %r exited with %s", message.command, message.exit_code)
    nav.refresh_focused()
    if message.interactive:
        if message.output:
            state.show_modal("Command error", message.output.rstrip("\n").split("\n"))
        elif message.exit_code != 0:
            state.error = f"{message.title} exited with status {message.exit_code}"
        return
    title = "Command output" if message.exit_code == 0 else "Command error"
    output = message.output.rstrip("\n")
    state.show_modal(title, output.split("\n") if output else ["(no output)"])


def _on_files_pasted(state: AppState, nav: NavigationOps, cmds: CommandOps, message: FilesPasted) -> None:
    if state.focused_panel.cwd == message.destination:
        nav.refresh_focused()
    if message.error:
        state.error = f"paste failed: {message.error}"


def _on_task_failed(state: AppState, nav: NavigationOps, cmds: CommandOps, message: TaskFailed) -> None:
    state.error = f"{message.label}: {message.error}"


_HANDLERS: dict[type, Handler] = {
    KeyPressed: _on_key,
    ChordTimeout: _on_chord_timeout,
    Resized: _on_resize,
    DirectoryPrefetched: _on_prefetched,
    CommandFinished: _on_command_finished,
    FilesPasted: _on_files_pasted,
    TaskFailed: _on_task_failed,
}


def update(state: AppState, message: Message) -> tuple[AppState, DeferredTask | None]:
    """Apply ``message`` to ``state``; return it with an optional deferred task."""
    handler = _HANDLERS.get(type(message))
    if handler is None:
        LOGGER.warning("unhandled message %r", message)
        return state, None
    nav = NavigationOps(state)
    cmds = CommandOps(state, nav)
    task = handler(state, nav, cmds, message)
    state.refresh_selection()
    return state, task


__all__ = ["chord_timeout_task", "update"]
