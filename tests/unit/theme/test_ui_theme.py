"""Tests for theme resolution, style overrides and syntax highlighting."""

from __future__ import annotations

import unittest

from tfm.highlight import highlight_lines, style_for_token
from tfm.styled import NORMAL, Segment, plain_text
from tfm.ui_theme import (
    DEFAULT_THEME,
    OCEAN_THEME,
    PLAIN_THEME,
    RESET,
    available_theme_names,
    resolve_theme,
    style_sgr,
)
from pygments.token import Comment, Keyword, Text


class ThemeResolutionTests(unittest.TestCase):
    def test_named_themes_and_fallback(self) -> None:
        self.assertEqual(available_theme_names(), ("default", "ocean"))
        self.assertIs(resolve_theme("Ocean"), OCEAN_THEME)
        self.assertIs(resolve_theme("no-such-theme"), DEFAULT_THEME)
        self.assertIs(resolve_theme(None), DEFAULT_THEME)

    def test_no_color_uses_plain_theme(self) -> None:
        theme = resolve_theme("ocean", no_color=True, overrides={"header": {"bold": True}})
        self.assertIs(theme, PLAIN_THEME)
        self.assertEqual(theme.sgr("header"), "")
        self.assertEqual(theme.sgr("selected"), "\033[7m")

    def test_overrides_replace_single_styles(self) -> None:
        with self.assertLogs("tfm.ui_theme", level="WARNING"):
            theme = resolve_theme("default", overrides={"header": {"fg": "#ff8000", "bold": True}, "bogus": {}})
        self.assertEqual(theme.sgr("header"), "\033[1;38;2;255;128;0m")
        self.assertEqual(theme.sgr("status"), DEFAULT_THEME.sgr("status"))

    def test_style_sgr_palette_and_flags(self) -> None:
        self.assertEqual(style_sgr({"fg": 33, "bg": "236", "reverse": True}), "\033[7;38;5;33;48;5;236m")
        self.assertEqual(style_sgr({"fg": "#zzzzzz"}), "")
        self.assertEqual(style_sgr({}), "")

    def test_paint_resets_styled_runs_and_passes_raw_text(self) -> None:
        line = [Segment("a", "selected"), Segment("\x1b]1337;x\x07", raw=True), Segment("b")]
        self.assertEqual(PLAIN_THEME.paint(line), f"\033[7ma{RESET}\x1b]1337;x\x07b")


class HighlightTests(unittest.TestCase):
    def test_token_styles(self) -> None:
        self.assertEqual(style_for_token(Keyword.Namespace), "syntax.keyword")
        self.assertEqual(style_for_token(Comment.Single), "syntax.comment")
        self.assertEqual(style_for_token(Text), NORMAL)

    def test_python_source_keeps_line_structure(self) -> None:
        source = "import os\n\n# note\nx = 'a'\tb"
        lines = highlight_lines(source, "example.py")
        self.assertEqual([plain_text(line) for line in lines], ["import os", "", "# note", "x = 'a' b"])
        styles = {segment.style for segment in lines[0]}
        self.assertIn("syntax.keyword", styles)
        self.assertEqual(lines[2][0].style, "syntax.comment")

    def test_unknown_extension_is_unstyled(self) -> None:
        lines = highlight_lines("plain\ttext\nmore", "data.unknownext")
        self.assertEqual(lines, [[Segment("plain   text")], [Segment("more")]])


if __name__ == "__main__":
    unittest.main()
