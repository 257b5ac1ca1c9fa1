"""Tests for preview classification, caching and inline-image blocks."""

from __future__ import annotations

import base64
import os
import tempfile
import threading
import unittest
from pathlib import Path

from PIL import Image

from tfm.cache import FifoCache
from tfm.listing import Entry
from tfm.preview import (
    KIND_IMAGE,
    KIND_INFO,
    KIND_TEXT,
    MAX_TEXT_LINES,
    PreviewResolver,
    inline_image_block,
    inline_images_supported,
    inline_max_bytes,
    is_text,
    text_snippet,
)
from tfm.ansi import display_width


def _resolver(env: dict[str, str] | None = None, **kwargs) -> PreviewResolver:
    return PreviewResolver(FifoCache(), FifoCache(), env=env or {}, **kwargs)


class IsTextTests(unittest.TestCase):
    def test_empty_sample_is_text(self) -> None:
        self.assertTrue(is_text(b""))

    def test_nul_byte_means_binary(self) -> None:
        self.assertFalse(is_text(b"plain text\x00more"))

    def test_printable_ratio_threshold(self) -> None:
        self.assertTrue(is_text(b"a" * 85 + b"\xff" * 15))
        self.assertFalse(is_text(b"a" * 84 + b"\xff" * 16))

    def test_common_whitespace_counts_as_printable(self) -> None:
        self.assertTrue(is_text(b"a\tb\r\nc\x0c\x0b"))


class TextSnippetTests(unittest.TestCase):
    def test_line_endings_are_normalized(self) -> None:
        self.assertEqual(text_snippet(b"a\r\nb\rc\n"), "a\nb\nc\n")

    def test_long_files_are_capped_with_marker(self) -> None:
        sample = "\n".join(str(idx) for idx in range(400)).encode("ascii")
        lines = text_snippet(sample).split("\n")
        self.assertEqual(len(lines), MAX_TEXT_LINES + 1)
        self.assertEqual(lines[-1], "…")
        self.assertEqual(lines[MAX_TEXT_LINES - 1], str(MAX_TEXT_LINES - 1))

    def test_control_characters_are_escaped(self) -> None:
        self.assertEqual(text_snippet(b"red\x1b[31m"), "red\\x1b[31m")


class ResolveTests(unittest.TestCase):
    def test_text_file_preview(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "notes.txt"
            path.write_text("hello\nworld\n", encoding="utf-8")
            result = _resolver().resolve(str(path), 40, 10)

        self.assertEqual(result.kind, KIND_TEXT)
        self.assertEqual(result.mime, "text/plain")
        self.assertEqual(result.lines[:2], ["hello", "world"])

    def test_binary_file_preview_shows_metadata(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "blob.bin"
            path.write_bytes(b"\x00\x01\x02" * 10)
            result = _resolver().resolve(str(path), 40, 10)

        self.assertEqual(result.kind, KIND_INFO)
        self.assertEqual(result.mime, "application/octet-stream")
        self.assertTrue(result.content.startswith("blob.bin (30 bytes)\nmode: -"))
        self.assertIn("\nmodified: ", result.content)

    def test_sampling_reads_only_the_byte_budget(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "big.txt"
            path.write_text("x" * 100, encoding="utf-8")
            result = _resolver(max_bytes=10).resolve(str(path), 40, 10)

        self.assertEqual(result.content, "x" * 10)

    def test_repeated_resolution_never_rereads_the_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "once.txt"
            path.write_text("first", encoding="utf-8")
            resolver = _resolver()
            first = resolver.resolve(str(path), 40, 10)
            path.write_text("second", encoding="utf-8")
            second = resolver.resolve(str(path), 40, 10)
            os.remove(path)
            third = resolver.resolve(str(path), 40, 10)

        self.assertEqual(first.content, "first")
        self.assertIs(second, first)
        self.assertIs(third, first)

    def test_directory_mirrors_listing_and_populates_dir_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "sub").mkdir()
            (root / "a.txt").write_text("a", encoding="utf-8")
            (root / ".dot").write_text("d", encoding="utf-8")
            resolver = _resolver()
            result = resolver.resolve(tmp, 40, 10)
            with_hidden = resolver.resolve(tmp, 40, 10, show_hidden=True)

        self.assertEqual(result.mime, "inode/directory")
        self.assertEqual(result.entries, (Entry("sub", True), Entry("a.txt", False)))
        self.assertEqual(len(with_hidden.entries), 3)
        self.assertTrue(resolver.dir_cache.has(tmp))
        self.assertFalse(resolver.file_cache.has(tmp))

    @unittest.skipUnless(hasattr(os, "mkfifo"), "named pipes not supported")
    def test_named_pipe_is_described_without_being_opened(self) -> None:
        results: list = []
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "pipe")
            os.mkfifo(path)
            worker = threading.Thread(target=lambda: results.append(_resolver().resolve(path, 40, 10)), daemon=True)
            worker.start()
            worker.join(2)

        self.assertFalse(worker.is_alive())
        result = results[0]
        self.assertEqual(result.kind, KIND_INFO)
        self.assertEqual(result.mime, "inode/named-pipe")
        self.assertTrue(result.content.startswith("pipe (named pipe)\nmode: p"))

    def test_missing_path_returns_info_without_caching(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = os.path.join(tmp, "gone.txt")
            resolver = _resolver()
            result = resolver.resolve(missing, 40, 10)

        self.assertEqual(result.kind, KIND_INFO)
        self.assertIn("cannot preview", result.content)
        self.assertFalse(resolver.file_cache.has(missing))


class ImagePreviewTests(unittest.TestCase):
    def _write_png(self, root: Path, size: tuple[int, int] = (40, 20)) -> Path:
        path = root / "pic.png"
        Image.new("RGB", size, color=(255, 255, 255)).save(path)
        return path

    def test_inline_block_is_sized_to_the_budget(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_png(Path(tmp))
            data = path.read_bytes()
            resolver = _resolver({"TFM_INLINE": "iterm2"})
            result = resolver.resolve(str(path), 12, 4)

        self.assertEqual(result.kind, KIND_IMAGE)
        self.assertTrue(result.is_inline)
        rows = result.content.split("\n")
        self.assertEqual(len(rows), 4)
        self.assertTrue(rows[0].startswith("\x1b]1337;File=name="))
        self.assertIn(f";size={len(data)};inline=1;width=12;height=4;preserveAspectRatio=1:", rows[0])
        self.assertIn(base64.b64encode(data).decode("ascii"), rows[0])
        self.assertTrue(all(display_width(row) == 12 for row in rows))

    def test_inline_block_is_rebuilt_for_new_size_from_cache(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_png(Path(tmp))
            resolver = _resolver({"ITERM_SESSION_ID": "w0t0p0"})
            resolver.resolve(str(path), 12, 4)
            os.remove(path)
            resized = resolver.resolve(str(path), 20, 6)

        self.assertEqual(len(resized.content.split("\n")), 6)
        self.assertIn("width=20;height=6", resized.content)

    def test_images_over_the_byte_ceiling_fall_back_to_ascii(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_png(Path(tmp))
            result = _resolver({"TFM_INLINE": "iterm2"}, inline_limit=10).resolve(str(path), 40, 10)

        self.assertFalse(result.is_inline)
        self.assertEqual(result.kind, KIND_IMAGE)
        self.assertEqual(result.mime, "image/png")
        self.assertEqual(result.lines, ["@" * 40] * 10)

    def test_image_exactly_at_the_byte_ceiling_is_not_inlined(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = self._write_png(Path(tmp))
            size = path.stat().st_size
            at_limit = _resolver({"TFM_INLINE": "iterm2"}, inline_limit=size).resolve(str(path), 40, 10)
            under_limit = _resolver({"TFM_INLINE": "iterm2"}, inline_limit=size + 1).resolve(str(path), 40, 10)

        self.assertFalse(at_limit.is_inline)
        self.assertTrue(under_limit.is_inline)

    def test_ascii_thumbnail_uses_dark_ramp_for_black(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "dark.png"
            Image.new("L", (100, 10), color=0).save(path)
            result = _resolver().resolve(str(path), 80, 10)

        self.assertEqual(result.lines, [" " * 64] * 3)

    def test_undecodable_image_falls_back_to_sampling(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "fake.png"
            path.write_text("not really an image", encoding="utf-8")
            result = _resolver().resolve(str(path), 40, 10)

        self.assertEqual(result.kind, KIND_TEXT)


class InlineDetectionTests(unittest.TestCase):
    def test_detection_from_environment(self) -> None:
        self.assertTrue(inline_images_supported({"ITERM_SESSION_ID": "x"}))
        self.assertTrue(inline_images_supported({"WEZTERM_PANE": "1"}))
        self.assertTrue(inline_images_supported({"TERM_PROGRAM": "WezTerm"}))
        self.assertFalse(inline_images_supported({"TERM_PROGRAM": "Apple_Terminal"}))

    def test_overrides_win(self) -> None:
        self.assertFalse(inline_images_supported({"ITERM_SESSION_ID": "x", "TFM_INLINE": "off"}))
        self.assertFalse(inline_images_supported({"ITERM_SESSION_ID": "x", "TFM_NO_INLINE_IMAGES": "1"}))
        self.assertTrue(inline_images_supported({"TFM_INLINE": "wezterm"}))

    def test_disabled_by_config_even_when_supported(self) -> None:
        resolver = _resolver({"ITERM_SESSION_ID": "x"}, inline_images=False)
        self.assertFalse(resolver.inline_enabled)

    def test_max_bytes_override(self) -> None:
        self.assertEqual(inline_max_bytes({"TFM_INLINE_MAX_BYTES": "2048"}), 2048)
        self.assertEqual(inline_max_bytes({"TFM_INLINE_MAX_BYTES": "junk"}), 1_572_864)
        self.assertEqual(inline_max_bytes({}), 1_572_864)

    def test_block_has_payload_row_and_blank_filler(self) -> None:
        block = inline_image_block("QUJD", "a.png", 3, 5, 3).split("\n")
        self.assertEqual(block[1:], ["     ", "     "])
        self.assertTrue(block[0].endswith("QUJD\x07     "))


if __name__ == "__main__":
    unittest.main()
