"""Navigation operations over :class:`~tfm.state.AppState`.

Every operation is a no-op on an invalid target. Filesystem failures are
stored in ``state.error`` for the status line and never raised.
"""

from __future__ import annotations

import logging
import os

from .listing import Entry
from .messages import DeferredTask, DirectoryPrefetched
from .panels import Panel, Tab
from .state import (
    FOCUS_LEFT,
    FOCUS_RIGHT,
    RIGHT_NONE,
    RIGHT_PANEL,
    RIGHT_PREVIEW,
    AppState,
)

LOGGER = logging.getLogger(__name__)


def describe_os_error(exc: OSError) -> str:
    reason = exc.strerror or str(exc)
    if exc.filename:
        return f"{exc.filename}: {reason}"
    return reason


class NavigationOps:
    """Cursor, directory, tab and column operations bound to one state."""

    def __init__(self, state: AppState) -> None:
        self.state = state

    # Listing reads

    def read_listing(self, path: str) -> list[Entry]:
        """Return the full listing of ``path``, from cache when present.

        Raises ``OSError`` when the directory cannot be read.
        """
        cached = self.state.dir_cache.get(path)
        if cached is not None:
            return cached
        listing = self.state.reader.list_directory(path)
        self.state.dir_cache.put(path, listing)
        return listing

    def _fail(self, exc: OSError) -> None:
        self.state.error = describe_os_error(exc)
        LOGGER.debug("navigation error: %s", self.state.error)

    def _chdir(self, tab: Tab, path: str, *, use_cache: bool = True) -> bool:
        try:
            listing = self.read_listing(path) if use_cache else self.state.reader.list_directory(path)
        except OSError as exc:
            self._fail(exc)
            return False
        tab.panel.load(path, listing)
        tab.reset_cursor()
        self.state.error = None
        return True

    # Cursor movement

    def set_selected(self, index: int) -> None:
        tab = self.state.focused_tab
        tab.selected = index
        tab.clamp()
        self.ensure_visible()

    def move(self, delta: int) -> DeferredTask | None:
        tab = self.state.focused_tab
        if not tab.panel.entries:
            return None
        self.set_selected(tab.selected + delta)
        return self.request_prefetch()

    def page(self, delta: int) -> DeferredTask | None:
        return self.move(delta * max(1, self.state.viewport.content_height))

    def half_page(self, delta: int) -> DeferredTask | None:
        return self.move(delta * max(1, self.state.viewport.content_height // 2))

    def top(self) -> DeferredTask | None:
        tab = self.state.focused_tab
        if not tab.panel.entries:
            return None
        self.set_selected(0)
        return self.request_prefetch()

    def bottom(self) -> DeferredTask | None:
        tab = self.state.focused_tab
        if not tab.panel.entries:
            return None
        self.set_selected(len(tab.panel.entries) - 1)
        return self.request_prefetch()

    def ensure_visible(self) -> None:
        tab = self.state.focused_tab
        tab.ensure_visible(self.state.viewport.content_height)
        self.state.viewport.y_offset = tab.scroll

    # Directory changes

    def enter(self) -> DeferredTask | None:
        """Open the selected directory in place or as a new right column."""
        tab = self.state.focused_tab
        entry = tab.selected_entry()
        if entry is None or not entry.is_dir:
            return None
        path = tab.panel.path_of(entry)
        if self.state.open_right:
            if not self.open_right_column(path, tab.panel.show_hidden):
                return None
        elif not self._chdir(tab, path):
            return None
        self.ensure_visible()
        return self.request_prefetch()

    def open_right_column(self, path: str, show_hidden: bool) -> bool:
        try:
            listing = self.read_listing(path)
        except OSError as exc:
            self._fail(exc)
            return False
        panel = Panel(cwd=path, show_hidden=show_hidden)
        panel.load(path, listing)
        self.state.right_columns.append(Tab(panel))
        self.state.right_mode = RIGHT_PANEL
        self.state.focus = FOCUS_RIGHT
        self.state.error = None
        return True

    def up(self) -> DeferredTask | None:
        """Close the focused right column, or go to the parent directory."""
        state = self.state
        if state.focus == FOCUS_RIGHT and state.right_mode == RIGHT_PANEL and state.right_columns:
            state.right_columns.pop()
            if not state.right_columns:
                self._collapse_right()
            self.ensure_visible()
            return self.request_prefetch()

        tab = state.focused_tab
        cwd = tab.panel.cwd
        parent = os.path.dirname(cwd)
        if not parent or parent == cwd:
            return None
        if not self._chdir(tab, parent):
            return None
        previous = tab.panel.index_of(os.path.basename(cwd))
        if previous is not None:
            tab.selected = previous
        self.ensure_visible()
        return self.request_prefetch()

    def toggle_hidden(self) -> DeferredTask | None:
        """Flip hidden-file visibility of the focused panel and re-read it."""
        tab = self.state.focused_tab
        panel = tab.panel
        panel.show_hidden = not panel.show_hidden
        if not self._chdir(tab, panel.cwd, use_cache=False):
            panel.show_hidden = not panel.show_hidden
            return None
        self.ensure_visible()
        return self.request_prefetch()

    def change_directory(self, path: str) -> bool:
        """Point the focused panel at ``path`` (a directory)."""
        if not self._chdir(self.state.focused_tab, path):
            return False
        self.ensure_visible()
        return True

    def reveal_path(self, path: str) -> bool:
        """Show ``path``: open it if a directory, else select it in its parent."""
        try:
            info = self.state.reader.stat(path)
        except OSError as exc:
            self._fail(exc)
            return False
        if info.is_dir:
            return self.change_directory(path)
        tab = self.state.focused_tab
        if not self._chdir(tab, os.path.dirname(path)):
            return False
        index = tab.panel.index_of(os.path.basename(path))
        if index is not None:
            tab.selected = index
        self.ensure_visible()
        return True

    def refresh_focused(self) -> None:
        """Re-read the focused panel from disk, keeping the selected name."""
        tab = self.state.focused_tab
        entry = tab.selected_entry()
        try:
            listing = self.state.reader.list_directory(tab.panel.cwd)
        except OSError as exc:
            self._fail(exc)
            return
        tab.panel.load(tab.panel.cwd, listing)
        index = tab.panel.index_of(entry.name) if entry is not None else None
        tab.selected = index or 0
        tab.clamp()
        self.ensure_visible()

    # Tabs

    def new_tab(self) -> DeferredTask | None:
        current = self.state.active_tab.panel
        tab = Tab(Panel(cwd=current.cwd, show_hidden=current.show_hidden))
        try:
            tab.panel.load(current.cwd, self.read_listing(current.cwd))
        except OSError as exc:
            self._fail(exc)
        self.state.tabs.append(tab)
        self._switch_tab(len(self.state.tabs) - 1)
        return self.request_prefetch()

    def close_tab(self) -> None:
        state = self.state
        if len(state.tabs) <= 1:
            return
        del state.tabs[state.active]
        state.right_columns.clear()
        self._collapse_right()
        self._switch_tab(min(state.active, len(state.tabs) - 1))

    def next_tab(self) -> DeferredTask | None:
        self._switch_tab((self.state.active + 1) % len(self.state.tabs))
        return self.request_prefetch()

    def prev_tab(self) -> DeferredTask | None:
        self._switch_tab((self.state.active - 1) % len(self.state.tabs))
        return self.request_prefetch()

    def _switch_tab(self, index: int) -> None:
        state = self.state
        if index != state.active and state.right_columns:
            state.right_columns.clear()
            self._collapse_right()
        state.active = index
        self.ensure_visible()

    # Right side

    def _collapse_right(self) -> None:
        self.state.focus = FOCUS_LEFT
        self.state.right_mode = RIGHT_PREVIEW if self.state.show_preview else RIGHT_NONE

    def toggle_preview(self) -> None:
        state = self.state
        state.show_preview = not state.show_preview
        if state.show_preview:
            if state.right_mode != RIGHT_PANEL:
                state.right_mode = RIGHT_PREVIEW
                state.focus = FOCUS_LEFT
        elif state.right_mode == RIGHT_PREVIEW:
            state.right_mode = RIGHT_NONE
            state.focus = FOCUS_LEFT

    def toggle_open_right(self) -> None:
        self.state.open_right = not self.state.open_right

    def close_right(self) -> None:
        self.state.right_columns.clear()
        self._collapse_right()
        self.ensure_visible()

    def toggle_focus(self) -> None:
        state = self.state
        if state.right_mode == RIGHT_PANEL and state.right_columns:
            state.focus = FOCUS_LEFT if state.focus == FOCUS_RIGHT else FOCUS_RIGHT
        else:
            state.focus = FOCUS_LEFT
        self.ensure_visible()

    def focus_left(self) -> None:
        self.state.focus = FOCUS_LEFT
        self.ensure_visible()

    def focus_right(self) -> None:
        if self.state.right_mode == RIGHT_PANEL and self.state.right_columns:
            self.state.focus = FOCUS_RIGHT
            self.ensure_visible()

    # Prefetch

    def request_prefetch(self) -> DeferredTask | None:
        """Schedule a background read of the selected directory.

        Nothing is scheduled when the selection is not a directory, is
        already cached, or already has a read in flight.
        """
        tab = self.state.focused_tab
        entry = tab.selected_entry()
        if entry is None or not entry.is_dir:
            return None
        path = tab.panel.path_of(entry)
        if self.state.dir_cache.has(path) or not self.state.prefetching.begin(path):
            return None
        reader = self.state.reader

        def run() -> DirectoryPrefetched:
            return DirectoryPrefetched(path=path, entries=tuple(reader.list_directory(path)))

        def on_error(exc: Exception) -> DirectoryPrefetched:
            return DirectoryPrefetched(path=path, entries=None, error=str(exc))

        return DeferredTask(run=run, label=f"prefetch {path}", on_error=on_error)

    def merge_prefetched(self, message: DirectoryPrefetched) -> None:
        """Store a prefetched listing unless the path is already cached."""
        self.state.prefetching.finish(message.path)
        if message.entries is None:
            LOGGER.debug("prefetch of %s failed: %s", message.path, message.error)
            return
        self.state.dir_cache.put(message.path, list(message.entries))


__all__ = ["NavigationOps", "describe_os_error"]
