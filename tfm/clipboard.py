"""In-app clipboard holding either copied files or a single path."""

from __future__ import annotations

from dataclasses import dataclass

CLIP_NONE = ""
CLIP_FILE = "file"
CLIP_PATH = "path"


@dataclass(frozen=True)
class Clipboard:
    kind: str = CLIP_NONE
    paths: tuple[str, ...] = ()

    @classmethod
    def files(cls, paths: list[str] | tuple[str, ...]) -> Clipboard:
        return cls(kind=CLIP_FILE, paths=tuple(paths))

    @classmethod
    def path(cls, path: str) -> Clipboard:
        return cls(kind=CLIP_PATH, paths=(path,))

    @property
    def label(self) -> str:
        return self.kind or "-"


__all__ = ["CLIP_FILE", "CLIP_NONE", "CLIP_PATH", "Clipboard"]
