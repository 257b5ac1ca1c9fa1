"""Panel and tab data model."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field

from .listing import MIN_DIR_NAME_WIDTH, Entry, max_dir_name_width, visible_entries


@dataclass
class Panel:
    """One directory view: its path, visible entries and layout hint."""

    cwd: str
    entries: list[Entry] = field(default_factory=list)
    show_hidden: bool = False
    max_dir_name_width: int = MIN_DIR_NAME_WIDTH

    def load(self, cwd: str, listing: Sequence[Entry]) -> None:
        """Replace the panel contents with ``listing`` read from ``cwd``.

        ``listing`` is the full sorted directory listing; hidden entries are
        filtered here according to ``show_hidden``.
        """
        self.cwd = cwd
        self.entries = visible_entries(listing, self.show_hidden)
        self.max_dir_name_width = max_dir_name_width(self.entries)

    def path_of(self, entry: Entry) -> str:
        return os.path.join(self.cwd, entry.name)

    def index_of(self, name: str) -> int | None:
        for idx, entry in enumerate(self.entries):
            if entry.name == name:
                return idx
        return None


@dataclass
class Tab:
    """A panel plus its cursor and scroll position."""

    panel: Panel
    selected: int = 0
    scroll: int = 0

    def clamp(self) -> None:
        """Keep ``selected`` inside the entry range (0 for an empty panel)."""
        count = len(self.panel.entries)
        if count == 0:
            self.selected = 0
        else:
            self.selected = max(0, min(self.selected, count - 1))
        self.scroll = max(0, min(self.scroll, max(0, count - 1)))

    def reset_cursor(self) -> None:
        self.selected = 0
        self.scroll = 0

    def selected_entry(self) -> Entry | None:
        if not self.panel.entries:
            return None
        self.clamp()
        return self.panel.entries[self.selected]

    def selected_path(self) -> str | None:
        entry = self.selected_entry()
        if entry is None:
            return None
        return self.panel.path_of(entry)

    def ensure_visible(self, height: int) -> None:
        """Scroll so the selected row lies within ``height`` visible rows."""
        height = max(1, height)
        if self.selected < self.scroll:
            self.scroll = self.selected
        elif self.selected >= self.scroll + height:
            self.scroll = self.selected - height + 1
        self.scroll = max(0, self.scroll)


__all__ = ["Panel", "Tab"]
