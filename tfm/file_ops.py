"""Filesystem copy helpers used by paste."""

from __future__ import annotations

import os
import shutil
from collections.abc import Callable, Iterable

MAX_COPY_SUFFIX = 999


def unique_dest_path(directory: str, name: str, exists: Callable[[str], bool] = os.path.lexists) -> str:
    """Return a free path for ``name`` inside ``directory``.

    Collisions become ``"<base> copy N<ext>"`` for N from 1 upwards. Raises
    ``FileExistsError`` once every suffix is taken.
    """
    candidate = os.path.join(directory, name)
    if not exists(candidate):
        return candidate
    base, ext = os.path.splitext(name)
    if name.startswith(".") and not ext:
        base, ext = name, ""
    for idx in range(1, MAX_COPY_SUFFIX + 1):
        candidate = os.path.join(directory, f"{base} copy {idx}{ext}")
        if not exists(candidate):
            return candidate
    raise FileExistsError(f"no free name for {name} in {directory}")


def copy_entry(source: str, destination: str) -> None:
    """Copy a file or directory tree, keeping symlinks as links."""
    if os.path.isdir(source) and not os.path.islink(source):
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination, follow_symlinks=False)


def copy_into(sources: Iterable[str], directory: str) -> list[str]:
    """Copy every source into ``directory`` under a free name.

    Returns the created paths. The first failure raises ``OSError``.
    """
    created: list[str] = []
    for source in sources:
        target = unique_dest_path(directory, os.path.basename(os.path.normpath(source)))
        copy_entry(source, target)
        created.append(target)
    return created


__all__ = ["MAX_COPY_SUFFIX", "copy_entry", "copy_into", "unique_dest_path"]
