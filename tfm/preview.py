"""Preview content for the selected entry.

Files resolve to a text snippet, an ASCII or inline-escape image, or a short
metadata block. Results are cached per path for the whole session.
"""

from __future__ import annotations

import base64
import logging
import os
import re
import stat as stat_module
from collections.abc import Mapping
from dataclasses import dataclass, replace

from PIL import Image

from .cache import FifoCache
from .listing import Entry, FileStat, LocalFileSystem, visible_entries

LOGGER = logging.getLogger(__name__)

KIND_TEXT = "text"
KIND_INFO = "info"
KIND_IMAGE = "image"

DEFAULT_MAX_BYTES = 8192
DEFAULT_INLINE_MAX_BYTES = 1_572_864
MAX_TEXT_LINES = 256
TEXT_RATIO = 0.85
TRUNCATION_MARKER = "…"

ASCII_RAMP = " .:-=+*#%@"
ASCII_MAX_WIDTH = 64
ASCII_MAX_ROWS = 80

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif"})
_PRINTABLE_WHITESPACE = frozenset(b"\n\r\t\f\v")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


@dataclass(frozen=True)
class PreviewResult:
    """One rendered preview, immutable and safe to reuse across frames.

    ``entries`` is set for directory mirrors. ``inline_payload`` holds the
    base64 image bytes of an inline-image preview; ``content`` is then the
    escape block sized for the most recent request.
    """

    kind: str
    content: str
    mime: str
    entries: tuple[Entry, ...] = ()
    inline_payload: str = ""
    inline_name: str = ""
    inline_size: int = 0

    @property
    def is_inline(self) -> bool:
        return bool(self.inline_payload)

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n") if self.content else []


def is_text(sample: bytes) -> bool:
    """Classify a byte sample as text.

    Any NUL byte means binary. Otherwise the sample is text when at least
    85% of its bytes are printable ASCII or common whitespace; an empty
    sample counts as text.
    """
    if not sample:
        return True
    if b"\x00" in sample:
        return False
    printable = sum(1 for byte in sample if 0x20 <= byte <= 0x7E or byte in _PRINTABLE_WHITESPACE)
    return printable / len(sample) >= TEXT_RATIO


def sanitize_text(text: str) -> str:
    """Escape control characters so previews cannot drive the terminal."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", text)


def text_snippet(sample: bytes) -> str:
    """Decode ``sample``, normalize line endings and cap the line count."""
    text = sample.decode("utf-8", errors="replace").replace("\r\n", "\n").replace("\r", "\n")
    lines = text.split("\n")
    truncated = len(lines) > MAX_TEXT_LINES
    text = "\n".join(lines[:MAX_TEXT_LINES])
    if truncated:
        text += "\n" + TRUNCATION_MARKER
    return sanitize_text(text)


def inline_images_supported(env: Mapping[str, str] | None = None) -> bool:
    """Return whether the terminal understands iTerm2 inline-image escapes."""
    env = os.environ if env is None else env
    if env.get("TFM_NO_INLINE_IMAGES"):
        return False
    forced = env.get("TFM_INLINE", "").strip().lower()
    if forced in {"off", "none", "0", "false"}:
        return False
    if forced in {"iterm2", "wezterm"}:
        return True
    if env.get("ITERM_SESSION_ID") or env.get("WEZTERM_PANE"):
        return True
    return "wezterm" in env.get("TERM_PROGRAM", "").lower()


def inline_max_bytes(env: Mapping[str, str] | None = None, default: int = DEFAULT_INLINE_MAX_BYTES) -> int:
    env = os.environ if env is None else env
    raw = env.get("TFM_INLINE_MAX_BYTES", "").strip()
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def inline_image_block(payload: str, name: str, size: int, width: int, height: int) -> str:
    """Build an iTerm2 inline-image escape block of ``height`` rows.

    The first row carries the escape followed by ``width`` spaces; the rest
    are blank rows the image is drawn over.
    """
    width = max(1, width)
    height = max(1, height)
    encoded_name = base64.b64encode(name.encode("utf-8")).decode("ascii")
    sequence = (
        f"\x1b]1337;File=name={encoded_name};size={size};inline=1;"
        f"width={width};height={height};preserveAspectRatio=1:{payload}\x07"
    )
    rows = [sequence + " " * width]
    rows.extend(" " * width for _ in range(height - 1))
    return "\n".join(rows)


def ascii_thumbnail(path: str, max_width: int = ASCII_MAX_WIDTH) -> tuple[str, str]:
    """Decode an image into grayscale ASCII art.

    Returns ``(art, format_name)``. Raises ``OSError`` or ``ValueError`` when
    the file is not a decodable image.
    """
    with Image.open(path) as img:
        fmt = (img.format or "").lower()
        gray = img.convert("L")
    width, height = gray.size
    if width <= 0 or height <= 0:
        raise ValueError(f"empty image: {path}")
    target_w = max(1, min(max_width, width))
    rows = max(1, min(ASCII_MAX_ROWS, height * target_w // width // 2))
    small = gray.resize((target_w, rows))
    pixels = small.load()
    last = len(ASCII_RAMP) - 1
    lines = [
        "".join(ASCII_RAMP[pixels[x, y] * last // 255] for x in range(target_w))
        for y in range(rows)
    ]
    return "\n".join(lines), fmt


def special_file_info(name: str, st: FileStat) -> PreviewResult:
    """Describe a pipe, socket or device from its metadata alone.

    The file itself is never opened.
    """
    if stat_module.S_ISFIFO(st.mode):
        kind = "named pipe"
    elif stat_module.S_ISSOCK(st.mode):
        kind = "socket"
    elif stat_module.S_ISCHR(st.mode) or stat_module.S_ISBLK(st.mode):
        kind = "device"
    else:
        kind = "special file"
    return PreviewResult(
        kind=KIND_INFO,
        content=f"{name} ({kind})\nmode: {st.mode_string}\nmodified: {st.modified_iso}",
        mime="inode/" + kind.replace(" ", "-"),
    )


class PreviewResolver:
    """Resolve and cache previews for the selected path."""

    def __init__(
        self,
        file_cache: FifoCache,
        dir_cache: FifoCache,
        reader: LocalFileSystem | None = None,
        *,
        max_bytes: int = DEFAULT_MAX_BYTES,
        inline_images: bool = True,
        inline_limit: int | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.file_cache = file_cache
        self.dir_cache = dir_cache
        self.reader = reader or LocalFileSystem()
        self.max_bytes = max_bytes if max_bytes > 0 else DEFAULT_MAX_BYTES
        self.inline_enabled = inline_images and inline_images_supported(env)
        self.inline_limit = inline_limit if inline_limit is not None else inline_max_bytes(env)

    def resolve(self, path: str, width: int, height: int, show_hidden: bool = False) -> PreviewResult:
        """Return the preview of ``path`` sized to ``width`` x ``height`` cells.

        Directories mirror their listing through the directory cache. A file
        is read at most once per session; inline-image blocks are rebuilt
        from the cached payload for each size.
        """
        cached = self.file_cache.get(path)
        if cached is not None:
            return self._sized(cached, width, height)
        try:
            st = self.reader.stat(path)
        except OSError as exc:
            LOGGER.debug("preview stat failed for %s: %s", path, exc)
            return PreviewResult(kind=KIND_INFO, content=f"cannot preview: {exc.strerror or exc}", mime="")

        if st.is_dir:
            return self._directory(path, show_hidden)
        if not st.is_regular:
            result = special_file_info(os.path.basename(path), st)
            self.file_cache.put(path, result)
            return result

        try:
            result = self._file(path, st.size, st.mode_string, st.modified_iso)
        except OSError as exc:
            LOGGER.debug("preview read failed for %s: %s", path, exc)
            return PreviewResult(kind=KIND_INFO, content=f"cannot preview: {exc.strerror or exc}", mime="")
        self.file_cache.put(path, result)
        return self._sized(result, width, height)

    def _directory(self, path: str, show_hidden: bool) -> PreviewResult:
        listing = self.dir_cache.get(path)
        if listing is None:
            try:
                listing = self.reader.list_directory(path)
            except OSError as exc:
                return PreviewResult(kind=KIND_INFO, content=f"cannot list: {exc.strerror or exc}", mime="")
            self.dir_cache.put(path, listing)
        return PreviewResult(
            kind=KIND_INFO,
            content="directory",
            mime="inode/directory",
            entries=tuple(visible_entries(listing, show_hidden)),
        )

    def _file(self, path: str, size: int, mode: str, modified: str) -> PreviewResult:
        name = os.path.basename(path)
        extension = os.path.splitext(name)[1].lower()
        if extension in IMAGE_EXTENSIONS:
            if self.inline_enabled and size < self.inline_limit:
                with open(path, "rb") as handle:
                    data = handle.read()
                return PreviewResult(
                    kind=KIND_IMAGE,
                    content="",
                    mime=f"image/{extension.lstrip('.')}",
                    inline_payload=base64.b64encode(data).decode("ascii"),
                    inline_name=name,
                    inline_size=len(data),
                )
            try:
                art, fmt = ascii_thumbnail(path)
            except (OSError, ValueError, Image.DecompressionBombError) as exc:
                LOGGER.debug("image decode failed for %s: %s", path, exc)
            else:
                return PreviewResult(kind=KIND_IMAGE, content=art, mime=f"image/{fmt or extension.lstrip('.')}")

        with open(path, "rb") as handle:
            sample = handle.read(self.max_bytes)
        if is_text(sample):
            return PreviewResult(kind=KIND_TEXT, content=text_snippet(sample), mime="text/plain")
        return PreviewResult(
            kind=KIND_INFO,
            content=f"{name} ({size} bytes)\nmode: {mode}\nmodified: {modified}",
            mime="application/octet-stream",
        )

    def _sized(self, result: PreviewResult, width: int, height: int) -> PreviewResult:
        if not result.is_inline:
            return result
        block = inline_image_block(result.inline_payload, result.inline_name, result.inline_size, width, height)
        return replace(result, content=block)


__all__ = [
    "ASCII_RAMP",
    "IMAGE_EXTENSIONS",
    "KIND_IMAGE",
    "KIND_INFO",
    "KIND_TEXT",
    "MAX_TEXT_LINES",
    "PreviewResolver",
    "PreviewResult",
    "ascii_thumbnail",
    "inline_image_block",
    "inline_images_supported",
    "inline_max_bytes",
    "is_text",
    "sanitize_text",
    "special_file_info",
    "text_snippet",
]
