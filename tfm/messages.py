"""Messages delivered to the event loop and deferred work it schedules.

Deferred tasks compute a value off the synchronous path and hand it back
as exactly one message; they never touch navigation state themselves.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .listing import Entry


@dataclass(frozen=True)
class KeyPressed:
    token: str


@dataclass(frozen=True)
class ChordTimeout:
    generation: int


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class DirectoryPrefetched:
    """Result of a background listing read; ``entries`` is ``None`` on error."""

    path: str
    entries: tuple[Entry, ...] | None
    error: str | None = None


@dataclass(frozen=True)
class CommandFinished:
    """An external command exited; ``output`` is empty for interactive runs."""

    title: str
    command: str
    exit_code: int
    output: str = ""
    interactive: bool = False


@dataclass(frozen=True)
class FilesPasted:
    destination: str
    created: tuple[str, ...]
    error: str | None = None


@dataclass(frozen=True)
class TaskFailed:
    label: str
    error: str


Message = KeyPressed | ChordTimeout | Resized | DirectoryPrefetched | CommandFinished | FilesPasted | TaskFailed


@dataclass(frozen=True)
class DeferredTask:
    """Work the loop runs outside message handling.

    ``delay`` postpones the run; ``interactive`` tasks get the real terminal
    and run with the UI suspended. ``on_error`` turns an exception raised by
    ``run`` into the result message.
    """

    run: Callable[[], Message | None]
    label: str = ""
    delay: float = 0.0
    interactive: bool = False
    on_error: Callable[[Exception], Message] | None = None


__all__ = [
    "ChordTimeout",
    "CommandFinished",
    "DeferredTask",
    "DirectoryPrefetched",
    "FilesPasted",
    "KeyPressed",
    "Message",
    "Resized",
    "TaskFailed",
]
