"""Navigation state owned by the event loop."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .cache import DEFAULT_CAPACITY, FifoCache, PrefetchTracker
from .chords import ChordResolver
from .clipboard import Clipboard
from .config import Config
from .keymap import build_keymap
from .layout import preview_split
from .listing import LocalFileSystem
from .panels import Panel, Tab
from .preview import PreviewResolver, PreviewResult

LOGGER = logging.getLogger(__name__)

FOCUS_LEFT = "left"
FOCUS_RIGHT = "right"

RIGHT_NONE = "none"
RIGHT_PREVIEW = "preview"
RIGHT_PANEL = "panel"

MODE_NORMAL = "normal"
MODE_COMMAND = "command"
MODE_MODAL = "modal"

CHROME_ROWS = 2


@dataclass
class Viewport:
    width: int = 80
    height: int = 24
    y_offset: int = 0

    @property
    def content_height(self) -> int:
        """Rows left for columns after the header and status lines."""
        return max(1, self.height - CHROME_ROWS)


@dataclass
class AppState:
    """Everything the browser shows, mutated only by message handling."""

    tabs: list[Tab]
    config: Config
    reader: LocalFileSystem
    chords: ChordResolver
    previews: PreviewResolver
    dir_cache: FifoCache
    file_cache: FifoCache
    active: int = 0
    right_columns: list[Tab] = field(default_factory=list)
    focus: str = FOCUS_LEFT
    right_mode: str = RIGHT_NONE
    mode: str = MODE_NORMAL
    viewport: Viewport = field(default_factory=Viewport)
    show_preview: bool = True
    open_right: bool = False
    right_pane_percent: int = 40
    prefetching: PrefetchTracker = field(default_factory=PrefetchTracker)
    error: str | None = None
    command_buffer: str = ""
    modal_title: str = ""
    modal_lines: list[str] = field(default_factory=list)
    clipboard: Clipboard = field(default_factory=Clipboard)
    selection_path: str | None = None
    selected_size: int | None = None
    preview: PreviewResult | None = None
    quit: bool = False

    @property
    def active_tab(self) -> Tab:
        return self.tabs[self.active]

    @property
    def focused_tab(self) -> Tab:
        """The tab receiving cursor movement: last right column or active tab."""
        if self.focus == FOCUS_RIGHT and self.right_mode == RIGHT_PANEL and self.right_columns:
            return self.right_columns[-1]
        return self.active_tab

    @property
    def focused_panel(self) -> Panel:
        return self.focused_tab.panel

    def visible_tabs(self) -> list[Tab]:
        """Tabs laid out as columns, left to right."""
        columns = [self.active_tab]
        if self.right_mode == RIGHT_PANEL:
            columns.extend(self.right_columns)
        return columns

    def refresh_selection(self) -> None:
        """Stat and preview the focused selection so rendering only reads state.

        Runs after every handled message. Non-regular files are described
        from their metadata and never opened.
        """
        tab = self.focused_tab
        entry = tab.selected_entry()
        self.selection_path = None
        self.selected_size = None
        self.preview = None
        if entry is None:
            return
        path = self.selection_path = tab.panel.path_of(entry)
        if not entry.is_dir:
            try:
                self.selected_size = self.reader.stat(path).size
            except OSError as exc:
                LOGGER.debug("stat of selection %s failed: %s", path, exc)
        if not self.show_preview:
            return
        _, width = preview_split(max(1, self.viewport.width), self.right_pane_percent)
        height = max(1, self.viewport.content_height - 1)
        self.preview = self.previews.resolve(path, width, height, show_hidden=tab.panel.show_hidden)

    def show_modal(self, title: str, lines: list[str]) -> None:
        self.mode = MODE_MODAL
        self.modal_title = title
        self.modal_lines = list(lines)

    def close_modal(self) -> None:
        self.mode = MODE_NORMAL
        self.modal_title = ""
        self.modal_lines = []


def new_state(
    start_path: str,
    show_hidden: bool = False,
    *,
    config: Config | None = None,
    reader: LocalFileSystem | None = None,
    env: Mapping[str, str] | None = None,
    width: int = 80,
    height: int = 24,
) -> AppState:
    """Build the initial state with one tab listing ``start_path``.

    A listing error leaves the tab empty and is reported through ``error``.
    """
    config = config or Config()
    reader = reader or LocalFileSystem()
    dir_cache = FifoCache(DEFAULT_CAPACITY)
    file_cache = FifoCache(DEFAULT_CAPACITY)
    previews = PreviewResolver(
        file_cache,
        dir_cache,
        reader,
        max_bytes=config.preview_max_bytes,
        inline_images=config.inline_images,
        inline_limit=config.inline_max_bytes,
        env=env,
    )
    cwd = os.path.abspath(os.path.expanduser(start_path))
    panel = Panel(cwd=cwd, show_hidden=show_hidden)
    state = AppState(
        tabs=[Tab(panel)],
        config=config,
        reader=reader,
        chords=ChordResolver(build_keymap(config.keys)),
        previews=previews,
        dir_cache=dir_cache,
        file_cache=file_cache,
        viewport=Viewport(width=width, height=height),
        show_preview=config.show_preview,
        open_right=config.open_dirs_right,
        right_pane_percent=config.right_pane_width,
    )
    state.right_mode = RIGHT_PREVIEW if state.show_preview else RIGHT_NONE
    try:
        listing = reader.list_directory(cwd)
    except OSError as exc:
        LOGGER.debug("initial listing of %s failed: %s", cwd, exc)
        state.error = exc.strerror or str(exc)
    else:
        dir_cache.put(cwd, listing)
        panel.load(cwd, listing)
    state.refresh_selection()
    return state


__all__ = [
    "AppState",
    "CHROME_ROWS",
    "FOCUS_LEFT",
    "FOCUS_RIGHT",
    "MODE_COMMAND",
    "MODE_MODAL",
    "MODE_NORMAL",
    "RIGHT_NONE",
    "RIGHT_PANEL",
    "RIGHT_PREVIEW",
    "Viewport",
    "new_state",
]
