"""Directory listing reads and the filesystem reader used by navigation."""

from __future__ import annotations

import os
import stat as stat_module
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from .ansi import display_width

HIDDEN_MARKER = "."
MIN_DIR_NAME_WIDTH = 10


@dataclass(frozen=True)
class Entry:
    """One directory child as shown in a panel."""

    name: str
    is_dir: bool


@dataclass(frozen=True)
class FileStat:
    """Subset of ``os.stat`` the browser displays."""

    is_dir: bool
    size: int
    mode: int
    modified: float
    is_regular: bool = True

    @property
    def mode_string(self) -> str:
        return stat_module.filemode(self.mode)

    @property
    def modified_iso(self) -> str:
        return datetime.fromtimestamp(self.modified).astimezone().isoformat(timespec="seconds")


class LocalFileSystem:
    """Filesystem reader backed by ``os.scandir`` and ``os.stat``.

    Both methods raise ``OSError`` on failure; callers decide how to surface it.
    """

    def list_directory(self, path: str) -> list[Entry]:
        entries: list[Entry] = []
        with os.scandir(path) as it:
            for child in it:
                try:
                    is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                entries.append(Entry(name=child.name, is_dir=is_dir))
        return sort_entries(entries)

    def stat(self, path: str) -> FileStat:
        st = os.stat(path)
        return FileStat(
            is_dir=stat_module.S_ISDIR(st.st_mode),
            size=int(st.st_size),
            mode=st.st_mode,
            modified=st.st_mtime,
            is_regular=stat_module.S_ISREG(st.st_mode),
        )


def sort_entries(entries: Iterable[Entry]) -> list[Entry]:
    """Directories first, then by name in code point order."""
    return sorted(entries, key=lambda entry: (not entry.is_dir, entry.name))


def visible_entries(entries: Sequence[Entry], show_hidden: bool) -> list[Entry]:
    if show_hidden:
        return list(entries)
    return [entry for entry in entries if not entry.name.startswith(HIDDEN_MARKER)]


def list_directory(path: str, show_hidden: bool, reader: LocalFileSystem | None = None) -> list[Entry]:
    """Read ``path`` and return its visible entries, directories first.

    Raises ``OSError`` when the directory cannot be read.
    """
    reader = reader or LocalFileSystem()
    return visible_entries(sort_entries(reader.list_directory(path)), show_hidden)


def max_dir_name_width(entries: Sequence[Entry]) -> int:
    """Return the widest directory name plus its trailing slash.

    Falls back to ``MIN_DIR_NAME_WIDTH`` when the listing has no directories.
    """
    widths = [display_width(entry.name) + 1 for entry in entries if entry.is_dir]
    if not widths:
        return MIN_DIR_NAME_WIDTH
    return max(widths)


__all__ = [
    "Entry",
    "FileStat",
    "HIDDEN_MARKER",
    "LocalFileSystem",
    "MIN_DIR_NAME_WIDTH",
    "list_directory",
    "max_dir_name_width",
    "sort_entries",
    "visible_entries",
]
