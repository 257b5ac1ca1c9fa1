"""Display-cell measurement and escape-aware clipping.

Terminal rows are budgeted in display cells, not code points. Escape
sequences (SGR styling and OSC inline-image payloads) occupy no cells.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
OSC_ESCAPE_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
TAB_STOP = 8


def char_display_width(ch: str, col: int = 0) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def _match_escape(text: str, i: int) -> re.Match[str] | None:
    return ANSI_ESCAPE_RE.match(text, i) or OSC_ESCAPE_RE.match(text, i)


def strip_escapes(text: str) -> str:
    """Remove CSI and OSC escape sequences from ``text``."""
    return OSC_ESCAPE_RE.sub("", ANSI_ESCAPE_RE.sub("", text))


def display_width(text: str) -> int:
    """Return how many terminal cells ``text`` occupies when printed."""
    if "\x1b" in text:
        text = strip_escapes(text)
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


def clip_to_width(text: str, max_cols: int) -> str:
    """Trim ``text`` to at most ``max_cols`` display columns.

    Escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = _match_escape(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    return "".join(out)


def expand_tabs(text: str) -> str:
    """Replace tabs with spaces up to the next tab stop."""
    if "\t" not in text:
        return text
    out: list[str] = []
    col = 0
    for ch in text:
        w = char_display_width(ch, col)
        out.append(" " * w if ch == "\t" else ch)
        col += w
    return "".join(out)


__all__ = [
    "ANSI_ESCAPE_RE",
    "OSC_ESCAPE_RE",
    "char_display_width",
    "clip_to_width",
    "display_width",
    "expand_tabs",
    "strip_escapes",
]
