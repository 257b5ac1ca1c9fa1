"""Column width allocation, text trimming and row merging.

Every function here works in display cells, so wide and combining
characters line up with what the terminal actually draws.
"""

from __future__ import annotations

from collections.abc import Sequence

from .ansi import char_display_width, clip_to_width, display_width
from .panels import Panel
from .styled import DIVIDER, ELLIPSIS, Segment, StyledLine, fit_line

MIN_COLUMN_WIDTH = 10
COLUMN_PADDING = 2
SEPARATOR = " "


def desired_column_width(panel: Panel) -> int:
    """Width a panel would like: its widest directory name plus padding."""
    return max(MIN_COLUMN_WIDTH, panel.max_dir_name_width + COLUMN_PADDING)


def compute_column_widths(columns: Sequence[Panel], total_width: int, separator_width: int = 1) -> list[int]:
    """Split ``total_width`` between ``columns`` left to right.

    Each column gets its desired width as long as every column still to be
    placed keeps ``MIN_COLUMN_WIDTH``; no column drops below the minimum and
    the last one absorbs what is left. When the total is too small for
    ``MIN_COLUMN_WIDTH`` per column the widths overflow it.
    """
    count = len(columns)
    if count == 0:
        return []
    remaining = total_width - (count - 1) * separator_width
    widths: list[int] = []
    for idx, panel in enumerate(columns):
        still_to_place = count - idx - 1
        if still_to_place == 0:
            width = max(MIN_COLUMN_WIDTH, remaining)
        else:
            width = min(desired_column_width(panel), remaining - MIN_COLUMN_WIDTH * still_to_place)
            width = max(MIN_COLUMN_WIDTH, width)
        widths.append(width)
        remaining -= width
    return widths


def preview_split(total_width: int, percent: int) -> tuple[int, int]:
    """Return ``(left_width, preview_width)`` around a one-cell separator.

    The preview takes ``percent`` of the total, kept within
    ``[MIN_COLUMN_WIDTH, total_width - MIN_COLUMN_WIDTH]``.
    """
    preview = total_width * percent // 100
    preview = min(max(preview, MIN_COLUMN_WIDTH), max(MIN_COLUMN_WIDTH, total_width - MIN_COLUMN_WIDTH))
    left = max(0, total_width - preview - len(SEPARATOR))
    return left, preview


def trim_to_width(text: str, width: int) -> str:
    """Shorten ``text`` to ``width`` display cells, ending in ``…`` if cut.

    Widths of 0 and 1 leave no room for the ellipsis, so the text is simply
    cut there.
    """
    if display_width(text) <= width:
        return text
    if width <= 1:
        return clip_to_width(text, width)
    out: list[str] = []
    col = 0
    for ch in text:
        w = char_display_width(ch, col)
        if col + w > width - 1:
            break
        out.append(ch)
        col += w
    return "".join(out) + ELLIPSIS


def pad_to_width(text: str, width: int) -> str:
    """Return ``text`` occupying exactly ``width`` cells."""
    text = clip_to_width(text, width)
    return text + " " * max(0, width - display_width(text))


def merge_columns(columns: Sequence[Sequence[str]], widths: Sequence[int], separator: str = SEPARATOR) -> str:
    """Interleave per-column lines into newline-joined rows.

    Each cell is padded to its column width; shorter columns are filled with
    blank cells down to the tallest column.
    """
    height = max((len(lines) for lines in columns), default=0)
    rows: list[str] = []
    for row in range(height):
        cells = []
        for lines, width in zip(columns, widths):
            cells.append(pad_to_width(lines[row] if row < len(lines) else "", width))
        rows.append(separator.join(cells))
    return "\n".join(rows)


def merge_styled_columns(
    columns: Sequence[Sequence[StyledLine]],
    widths: Sequence[int],
    height: int,
    separator: str = SEPARATOR,
) -> list[StyledLine]:
    """Styled counterpart of :func:`merge_columns` producing ``height`` rows."""
    rows: list[StyledLine] = []
    for row in range(height):
        merged: StyledLine = []
        for idx, (lines, width) in enumerate(zip(columns, widths)):
            if idx:
                merged.append(Segment(separator, DIVIDER))
            merged.extend(fit_line(lines[row] if row < len(lines) else [], width))
        rows.append(merged)
    return rows


__all__ = [
    "COLUMN_PADDING",
    "MIN_COLUMN_WIDTH",
    "SEPARATOR",
    "compute_column_widths",
    "desired_column_width",
    "merge_columns",
    "merge_styled_columns",
    "pad_to_width",
    "preview_split",
    "trim_to_width",
]
