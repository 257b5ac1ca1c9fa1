"""Key specifications, the closed set of browser actions, and the keymap.

A keymap binds token sequences to ``Action`` members. Specification strings
such as ``"gg"``, ``"ctrl+d"`` or ``"g t"`` are split into tokens by
:func:`tokens_of`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

LOGGER = logging.getLogger(__name__)

NAMED_KEYS = frozenset(
    {
        "left",
        "right",
        "up",
        "down",
        "enter",
        "backspace",
        "pgdown",
        "pgup",
        "home",
        "end",
        "tab",
        "esc",
        "space",
        "delete",
    }
)


class Action(str, Enum):
    """Every semantic action a key chord can resolve to."""

    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    TOP = "top"
    BOTTOM = "bottom"
    PAGE_DOWN = "page-down"
    PAGE_UP = "page-up"
    HALF_PAGE_DOWN = "half-page-down"
    HALF_PAGE_UP = "half-page-up"
    TOGGLE_HIDDEN = "toggle-hidden"
    NEW_TAB = "new-tab"
    CLOSE_TAB = "close-tab"
    NEXT_TAB = "next-tab"
    PREV_TAB = "prev-tab"
    TOGGLE_PREVIEW = "toggle-preview"
    TOGGLE_RIGHT_OPEN_MODE = "toggle-right-open-mode"
    CLOSE_RIGHT = "close-right"
    TOGGLE_FOCUS = "toggle-focus"
    FOCUS_LEFT = "focus-left"
    FOCUS_RIGHT = "focus-right"
    COMMAND = "command"
    HELP = "help"
    COPY = "copy"
    PASTE = "paste"
    COPY_PATH = "copy-path"
    PASTE_PATH = "paste-path"
    QUIT = "quit"
    RENAME = "rename"
    DELETE = "delete"
    FILTER = "filter"
    FUZZY = "fuzzy"


DEFAULT_BINDINGS: dict[str, Action] = {
    "h": Action.LEFT,
    "left": Action.LEFT,
    "backspace": Action.LEFT,
    "j": Action.DOWN,
    "down": Action.DOWN,
    "k": Action.UP,
    "up": Action.UP,
    "l": Action.RIGHT,
    "right": Action.RIGHT,
    "enter": Action.RIGHT,
    "gg": Action.TOP,
    "home": Action.TOP,
    "G": Action.BOTTOM,
    "end": Action.BOTTOM,
    ".": Action.TOGGLE_HIDDEN,
    "pgdown": Action.PAGE_DOWN,
    "pgup": Action.PAGE_UP,
    "ctrl+d": Action.HALF_PAGE_DOWN,
    "ctrl+u": Action.HALF_PAGE_UP,
    "t": Action.NEW_TAB,
    "]": Action.NEXT_TAB,
    "[": Action.PREV_TAB,
    "w": Action.CLOSE_TAB,
    "ctrl+p": Action.TOGGLE_PREVIEW,
    "ctrl+o": Action.TOGGLE_RIGHT_OPEN_MODE,
    "ctrl+x": Action.CLOSE_RIGHT,
    "tab": Action.TOGGLE_FOCUS,
    ":": Action.COMMAND,
    "?": Action.HELP,
    "yy": Action.COPY,
    "pp": Action.PASTE,
    "Y": Action.COPY_PATH,
    "P": Action.PASTE_PATH,
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
    "r": Action.RENAME,
    "d": Action.DELETE,
    "/": Action.FILTER,
    "f": Action.FUZZY,
}


def tokens_of(spec: str) -> tuple[str, ...]:
    """Split a key specification into the token sequence it denotes.

    Whitespace-separated specs yield one token per word, named keys and
    anything with a modifier stay whole, and a bare run of ASCII letters
    yields one token per letter (``"gg"`` -> ``("g", "g")``).
    """
    spec = spec.strip()
    if not spec:
        return ()
    if any(ch.isspace() for ch in spec):
        return tuple(spec.split())
    if spec in NAMED_KEYS:
        return (spec,)
    if len(spec) > 1 and spec.isascii() and spec.isalpha():
        return tuple(spec)
    return (spec,)


def parse_action(name: str) -> Action | None:
    try:
        return Action(name.strip().lower())
    except ValueError:
        return None


class Keymap:
    """Token-sequence keymap with exact and prefix lookups."""

    def __init__(self, bindings: Mapping[str, Action]) -> None:
        self._by_tokens: dict[tuple[str, ...], Action] = {}
        self._prefixes: set[tuple[str, ...]] = set()
        for spec, action in bindings.items():
            tokens = tokens_of(spec)
            if not tokens:
                continue
            self._by_tokens[tokens] = action
            for size in range(1, len(tokens)):
                self._prefixes.add(tokens[:size])

    def exact(self, tokens: tuple[str, ...]) -> Action | None:
        """Return the action bound to exactly ``tokens``, if any."""
        return self._by_tokens.get(tokens)

    def is_prefix(self, tokens: tuple[str, ...]) -> bool:
        """Return whether ``tokens`` is a strict prefix of a longer binding."""
        return tokens in self._prefixes

    def keys_for(self, action: Action) -> list[str]:
        """Return display specs for ``action``, shortest first."""
        specs = [_display_spec(tokens) for tokens, bound in self._by_tokens.items() if bound is action]
        return sorted(specs, key=lambda spec: (len(spec), spec))


def _display_spec(tokens: tuple[str, ...]) -> str:
    if all(len(token) == 1 for token in tokens):
        return "".join(tokens)
    return " ".join(tokens)


def build_keymap(overrides: Mapping[str, str] | None = None) -> Keymap:
    """Return the default keymap with user ``overrides`` applied.

    ``overrides`` maps key specs to action names; unknown action names are
    logged and skipped.
    """
    bindings: dict[str, Action] = dict(DEFAULT_BINDINGS)
    for spec, name in (overrides or {}).items():
        if not isinstance(spec, str) or not isinstance(name, str):
            LOGGER.warning("ignoring malformed key binding %r -> %r", spec, name)
            continue
        action = parse_action(name)
        if action is None:
            LOGGER.warning("unknown action %r bound to %r", name, spec)
            continue
        bindings[spec] = action
    return Keymap(bindings)


__all__ = [
    "Action",
    "DEFAULT_BINDINGS",
    "Keymap",
    "NAMED_KEYS",
    "build_keymap",
    "parse_action",
    "tokens_of",
]
