"""Exhaustive mapping from :class:`~tfm.keymap.Action` to state operations."""

from __future__ import annotations

from collections.abc import Callable

from .commands import CommandOps
from .keymap import Action
from .messages import DeferredTask
from .navigation import NavigationOps
from .state import MODE_COMMAND

ActionHandler = Callable[[NavigationOps, CommandOps], DeferredTask | None]


def _enter_command_mode(nav: NavigationOps, cmds: CommandOps) -> None:
    nav.state.mode = MODE_COMMAND
    nav.state.command_buffer = ""


def _quit(nav: NavigationOps, cmds: CommandOps) -> None:
    nav.state.quit = True


def _unsupported(nav: NavigationOps, cmds: CommandOps) -> None:
    return None


ACTION_HANDLERS: dict[Action, ActionHandler] = {
    Action.LEFT: lambda nav, cmds: nav.up(),
    Action.RIGHT: lambda nav, cmds: nav.enter(),
    Action.UP: lambda nav, cmds: nav.move(-1),
    Action.DOWN: lambda nav, cmds: nav.move(1),
    Action.TOP: lambda nav, cmds: nav.top(),
    Action.BOTTOM: lambda nav, cmds: nav.bottom(),
    Action.PAGE_DOWN: lambda nav, cmds: nav.page(1),
    Action.PAGE_UP: lambda nav, cmds: nav.page(-1),
    Action.HALF_PAGE_DOWN: lambda nav, cmds: nav.half_page(1),
    Action.HALF_PAGE_UP: lambda nav, cmds: nav.half_page(-1),
    Action.TOGGLE_HIDDEN: lambda nav, cmds: nav.toggle_hidden(),
    Action.NEW_TAB: lambda nav, cmds: nav.new_tab(),
    Action.CLOSE_TAB: lambda nav, cmds: nav.close_tab(),
    Action.NEXT_TAB: lambda nav, cmds: nav.next_tab(),
    Action.PREV_TAB: lambda nav, cmds: nav.prev_tab(),
    Action.TOGGLE_PREVIEW: lambda nav, cmds: nav.toggle_preview(),
    Action.TOGGLE_RIGHT_OPEN_MODE: lambda nav, cmds: nav.toggle_open_right(),
    Action.CLOSE_RIGHT: lambda nav, cmds: nav.close_right(),
    Action.TOGGLE_FOCUS: lambda nav, cmds: nav.toggle_focus(),
    Action.FOCUS_LEFT: lambda nav, cmds: nav.focus_left(),
    Action.FOCUS_RIGHT: lambda nav, cmds: nav.focus_right(),
    Action.COMMAND: _enter_command_mode,
    Action.HELP: lambda nav, cmds: cmds.show_help(),
    Action.COPY: lambda nav, cmds: cmds.copy_selected(),
    Action.PASTE: lambda nav, cmds: cmds.paste(),
    Action.COPY_PATH: lambda nav, cmds: cmds.copy_path(),
    Action.PASTE_PATH: lambda nav, cmds: cmds.paste_path(),
    Action.QUIT: _quit,
    Action.RENAME: _unsupported,
    Action.DELETE: _unsupported,
    Action.FILTER: _unsupported,
    Action.FUZZY: _unsupported,
}

_MISSING = set(Action) - set(ACTION_HANDLERS)
if _MISSING:
    raise RuntimeError(f"actions without a handler: {sorted(action.value for action in _MISSING)}")


def dispatch(action: Action, nav: NavigationOps, cmds: CommandOps) -> DeferredTask | None:
    """Apply ``action`` and return the deferred task it produced, if any."""
    return ACTION_HANDLERS[action](nav, cmds)


__all__ = ["ACTION_HANDLERS", "dispatch"]
