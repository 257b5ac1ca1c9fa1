"""Syntax highlighting of text previews into named style segments."""

from __future__ import annotations

from functools import lru_cache

from pygments import lex
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.token import Comment, Keyword, Name, Number, Operator, String, Token
from pygments.util import ClassNotFound

from .ansi import expand_tabs
from .styled import NORMAL, Segment, StyledLine

_TOKEN_STYLES = (
    (Comment, "syntax.comment"),
    (Keyword, "syntax.keyword"),
    (String, "syntax.string"),
    (Number, "syntax.number"),
    (Name.Function, "syntax.name"),
    (Name.Class, "syntax.name"),
    (Name.Builtin, "syntax.name"),
    (Name.Decorator, "syntax.name"),
    (Operator, "syntax.operator"),
)


def style_for_token(ttype) -> str:
    for parent, style in _TOKEN_STYLES:
        if ttype in parent:
            return style
    return NORMAL


def _lexer_for(filename: str, text: str):
    try:
        return get_lexer_for_filename(filename, text, stripnl=False, ensurenl=False)
    except ClassNotFound:
        return None


@lru_cache(maxsize=32)
def _highlight(filename: str, text: str) -> tuple[tuple[Segment, ...], ...]:
    lexer = _lexer_for(filename, text)
    if lexer is None or isinstance(lexer, TextLexer):
        return tuple((Segment(expand_tabs(line)),) if line else () for line in text.split("\n"))

    lines: list[list[Segment]] = [[]]
    for ttype, value in lex(text, lexer):
        style = style_for_token(ttype) if ttype is not Token.Text else NORMAL
        parts = value.split("\n")
        for idx, part in enumerate(parts):
            if idx:
                lines.append([])
            if part:
                lines[-1].append(Segment(part, style))
    expected = text.count("\n") + 1
    return tuple(tuple(_expand_line(line)) for line in lines[:expected])


def _expand_line(line: list[Segment]) -> list[Segment]:
    out: list[Segment] = []
    col = 0
    for segment in line:
        text = segment.text
        if "\t" in text:
            text = expand_tabs(" " * (col % 8) + text)[col % 8 :]
        out.append(Segment(text, segment.style))
        col += len(text)
    return out


def highlight_lines(text: str, filename: str) -> list[StyledLine]:
    """Split ``text`` into lines of segments styled by the lexer for ``filename``.

    Files without a known lexer come back as unstyled lines.
    """
    return [list(line) for line in _highlight(filename, text)]


__all__ = ["highlight_lines", "style_for_token"]
