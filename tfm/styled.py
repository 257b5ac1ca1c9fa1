"""Styled text segments: a line is a list of ``(text, style-name)`` runs."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .ansi import char_display_width, display_width, expand_tabs

HEADER = "header"
STATUS = "status"
DIRECTORY = "directory"
SELECTED = "selected"
NORMAL = "normal"
ERROR = "error"
DIVIDER = "divider"
ELLIPSIS = "…"


@dataclass(frozen=True)
class Segment:
    """A run of text drawn in one named style.

    ``raw`` segments carry escape payloads passed to the terminal untouched.
    """

    text: str
    style: str = NORMAL
    raw: bool = False


StyledLine = list[Segment]


def line_width(line: Iterable[Segment]) -> int:
    return sum(display_width(segment.text) for segment in line)


def plain_text(line: Iterable[Segment]) -> str:
    return "".join(segment.text for segment in line)


def fit_line(line: Sequence[Segment], width: int, *, ellipsis: bool = False, fill_style: str = NORMAL) -> StyledLine:
    """Clip or pad ``line`` to exactly ``width`` display cells.

    With ``ellipsis`` an overflowing line ends in ``…`` (when ``width`` > 1).
    A wide character that would straddle the edge is replaced by a space.
    """
    if width <= 0:
        return [segment for segment in line if segment.raw]
    line = [_expanded(segment) for segment in line]
    total = line_width(line)
    if total > width:
        budget = width - 1 if ellipsis and width > 1 else width
        line = _clip(line, budget)
        if ellipsis and width > 1:
            last_style = line[-1].style if line else fill_style
            line = [*line, Segment(ELLIPSIS, last_style)]
        total = line_width(line)
    if total < width:
        line.append(Segment(" " * (width - total), fill_style))
    return line


def _expanded(segment: Segment) -> Segment:
    if segment.raw or "\t" not in segment.text:
        return segment
    return Segment(expand_tabs(segment.text), segment.style)


def _clip(line: Sequence[Segment], budget: int) -> StyledLine:
    out: StyledLine = []
    col = 0
    for segment in line:
        if segment.raw:
            out.append(segment)
            continue
        kept: list[str] = []
        full = False
        for ch in expand_tabs(segment.text):
            w = char_display_width(ch, col)
            if col + w > budget:
                full = True
                break
            kept.append(ch)
            col += w
        if kept:
            out.append(Segment("".join(kept), segment.style))
        if full:
            break
    return out


__all__ = [
    "DIRECTORY",
    "DIVIDER",
    "ELLIPSIS",
    "ERROR",
    "HEADER",
    "NORMAL",
    "SELECTED",
    "STATUS",
    "Segment",
    "StyledLine",
    "fit_line",
    "line_width",
    "plain_text",
]
