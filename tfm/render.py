"""Pure frame rendering: state in, exactly ``height`` rows of ``width`` cells out."""

from __future__ import annotations

import os

from .highlight import highlight_lines
from .layout import compute_column_widths, merge_styled_columns, preview_split
from .listing import Entry
from .panels import Tab
from .preview import KIND_TEXT, PreviewResult, sanitize_text
from .state import FOCUS_LEFT, MODE_COMMAND, MODE_MODAL, AppState
from .styled import (
    DIRECTORY,
    ERROR,
    HEADER,
    NORMAL,
    SELECTED,
    STATUS,
    Segment,
    StyledLine,
    fit_line,
)
from .ui_theme import UITheme

STATUS_HINT = "? help  : cmd  q quit"


def header_line(state: AppState) -> StyledLine:
    text = f"tfm | tab {state.active + 1}/{len(state.tabs)} | {state.focused_panel.cwd}"
    return [Segment(text, HEADER)]


def _selected_file_label(state: AppState, tab: Tab) -> str:
    entry = tab.selected_entry()
    if entry is None or entry.is_dir:
        return ""
    if state.selected_size is None or state.selection_path != tab.panel.path_of(entry):
        return f"{entry.name} | "
    return f"{entry.name} | {state.selected_size}B | "


def status_line(state: AppState) -> StyledLine:
    if state.mode == MODE_COMMAND:
        return [Segment(":" + state.command_buffer, STATUS)]
    tab = state.focused_tab
    count = len(tab.panel.entries)
    position = tab.selected + 1 if count else 0
    percent = position * 100 // count if count else 0
    focus = "L" if state.focus == FOCUS_LEFT else "R"
    flags = (
        f"[{position}/{count}] {percent}%  F:{focus} "
        f"RO:{'on' if state.open_right else 'off'} "
        f"PV:{'on' if state.show_preview else 'off'} "
        f"CB:{state.clipboard.label}  {STATUS_HINT}"
    )
    line: StyledLine = []
    if state.error:
        line.append(Segment(f"ERR: {state.error} | ", ERROR))
    line.append(Segment(_selected_file_label(state, tab) + flags, STATUS))
    return line


def entry_label(entry: Entry) -> str:
    return sanitize_text(entry.name + "/" if entry.is_dir else entry.name)


def column_lines(tab: Tab, width: int, height: int, focused: bool) -> list[StyledLine]:
    """Visible rows of one panel starting at its scroll offset."""
    lines: list[StyledLine] = []
    entries = tab.panel.entries
    for idx in range(tab.scroll, min(len(entries), tab.scroll + height)):
        entry = entries[idx]
        style = DIRECTORY if entry.is_dir else NORMAL
        if focused and idx == tab.selected:
            style = SELECTED
        name = entry_label(entry)
        lines.append(fit_line([Segment(name, style)], width, ellipsis=True, fill_style=style))
    return lines


def _inline_rows(result: PreviewResult, width: int) -> list[StyledLine]:
    rows = result.content.split("\n")
    first = rows[0]
    cut = first.index("\x07") + 1
    out: list[StyledLine] = [[Segment(first[:cut], raw=True), Segment(" " * width)]]
    out.extend([Segment(row)] for row in rows[1:])
    return out


def preview_body(state: AppState, result: PreviewResult, path: str, width: int, height: int) -> list[StyledLine]:
    if result.entries or result.mime == "inode/directory":
        return [
            fit_line([Segment(entry_label(entry), DIRECTORY if entry.is_dir else NORMAL)], width, ellipsis=True)
            for entry in result.entries[:height]
        ]
    if result.is_inline:
        return _inline_rows(result, width)[:height]
    if result.kind == KIND_TEXT and state.config.syntax_highlight:
        lines = highlight_lines(result.content, os.path.basename(path))
    else:
        lines = [[Segment(line)] for line in result.lines]
    return [fit_line(line, width, ellipsis=True) for line in lines[:height]]


def preview_lines(state: AppState, width: int, height: int) -> list[StyledLine]:
    """Preview column: a path header followed by the selection's preview."""
    tab = state.focused_tab
    path = tab.selected_path()
    if path is None:
        return [fit_line([Segment(tab.panel.cwd, STATUS)], width, ellipsis=True, fill_style=STATUS)]
    lines = [fit_line([Segment(path, STATUS)], width, ellipsis=True, fill_style=STATUS)]
    body_height = max(0, height - 1)
    if body_height == 0:
        return lines
    result = state.preview
    if result is None or state.selection_path != path:
        return lines
    lines.extend(preview_body(state, result, path, width, body_height))
    return lines


def _columns_body(state: AppState, width: int, height: int) -> list[StyledLine]:
    tabs = state.visible_tabs()
    focused_index = len(tabs) - 1 if state.focused_tab is not state.active_tab else 0
    if state.show_preview:
        left_width, preview_width = preview_split(width, state.right_pane_percent)
        if len(tabs) == 1:
            widths = [left_width]
        else:
            widths = compute_column_widths([tab.panel for tab in tabs], left_width, 1)
        widths.append(preview_width)
    elif len(tabs) == 1:
        widths = [width]
    else:
        widths = compute_column_widths([tab.panel for tab in tabs], width, 1)

    columns = [
        column_lines(tab, widths[idx], height, idx == focused_index)
        for idx, tab in enumerate(tabs)
    ]
    if state.show_preview:
        columns.append(preview_lines(state, widths[-1], height))
    return merge_styled_columns(columns, widths, height)


def _modal_body(state: AppState, height: int) -> list[StyledLine]:
    lines: list[StyledLine] = [[Segment(state.modal_title, STATUS)]]
    lines.extend([Segment(sanitize_text(line))] for line in state.modal_lines)
    return lines[:height]


def render(state: AppState) -> list[StyledLine]:
    """Render the whole screen as ``height`` rows of exactly ``width`` cells."""
    width = max(1, state.viewport.width)
    height = state.viewport.height
    if height <= 0:
        return []
    if height == 1:
        return [fit_line(status_line(state), width, ellipsis=True, fill_style=STATUS)]

    body_height = height - 2
    if state.mode == MODE_MODAL:
        body = _modal_body(state, body_height)
    elif body_height > 0:
        body = _columns_body(state, width, body_height)
    else:
        body = []
    body = body + [[] for _ in range(body_height - len(body))]

    rows = [fit_line(header_line(state), width, ellipsis=True, fill_style=HEADER)]
    rows.extend(fit_line(row, width) for row in body)
    rows.append(fit_line(status_line(state), width, ellipsis=True, fill_style=STATUS))
    return rows


def frame_text(rows: list[StyledLine], theme: UITheme) -> str:
    """Paint rendered rows into terminal text separated by ``\\r\\n``."""
    return "\r\n".join(theme.paint(row) for row in rows)


__all__ = [
    "column_lines",
    "frame_text",
    "header_line",
    "preview_lines",
    "render",
    "status_line",
]
