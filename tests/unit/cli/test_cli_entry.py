"""CLI argument handling for ``tfm.cli.main``."""

from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tfm import cli


class CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(os.path.realpath(self._tmp.name))
        (self.root / "sub").mkdir()
        (self.root / "file.txt").write_text("x", encoding="utf-8")
        for patcher in (
            mock.patch("tfm.cli.configure_logging"),
            mock.patch("tfm.config.CONFIG_PATH", self.root / "no-config.json"),
            mock.patch.dict(os.environ, {"NO_COLOR": ""}),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)


class CliStartupTests(CliTestCase):
    def test_positional_path_starts_browser(self) -> None:
        with mock.patch("tfm.cli.run_app") as run_app:
            cli.main([str(self.root)])

        run_app.assert_called_once()
        start, config = run_app.call_args.args
        self.assertEqual(start, str(self.root))
        self.assertFalse(config.no_color)
        self.assertIsNone(run_app.call_args.kwargs["show_hidden"])

    def test_working_dir_option_and_show_hidden(self) -> None:
        with mock.patch("tfm.cli.run_app") as run_app:
            cli.main(["-w", str(self.root / "sub"), "--show-hidden"])

        self.assertEqual(run_app.call_args.args[0], str(self.root / "sub"))
        self.assertTrue(run_app.call_args.kwargs["show_hidden"])

    def test_defaults_to_current_directory(self) -> None:
        previous = Path.cwd()
        try:
            os.chdir(self.root)
            with mock.patch("tfm.cli.run_app") as run_app:
                cli.main([])
        finally:
            os.chdir(previous)

        self.assertEqual(Path(run_app.call_args.args[0]).resolve(), self.root)

    def test_file_path_is_rejected(self) -> None:
        with mock.patch("tfm.cli.run_app") as run_app, self.assertRaises(SystemExit) as caught:
            cli.main([str(self.root / "file.txt")])

        run_app.assert_not_called()
        self.assertIn("Not a directory", str(caught.exception))

    def test_config_file_and_flags_are_merged(self) -> None:
        config_path = self.root / "tfm.json"
        config_path.write_text(json.dumps({"theme": "ocean", "open_dirs_right": True}), encoding="utf-8")
        with mock.patch("tfm.cli.run_app") as run_app:
            cli.main([str(self.root), "--config", str(config_path), "--no-color", "--log-level", "debug"])

        config = run_app.call_args.args[1]
        self.assertEqual(config.theme, "ocean")
        self.assertTrue(config.open_dirs_right)
        self.assertTrue(config.no_color)
        self.assertEqual(config.log_level, "debug")

    def test_no_color_environment_variable(self) -> None:
        with mock.patch.dict(os.environ, {"NO_COLOR": "1"}), mock.patch("tfm.cli.run_app") as run_app:
            cli.main([str(self.root)])

        self.assertTrue(run_app.call_args.args[1].no_color)

    def test_missing_config_file_exits(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            cli.main([str(self.root), "--config", str(self.root / "nope.json")])
        self.assertIn("Config not found", str(caught.exception))

    def test_version_flag(self) -> None:
        with mock.patch("sys.stdout", new_callable=io.StringIO) as out, self.assertRaises(SystemExit):
            cli.main(["--version"])
        self.assertEqual(out.getvalue().strip(), f"tfm {cli.__version__}")

    def test_non_positive_sizes_are_rejected(self) -> None:
        with mock.patch("sys.stderr", new_callable=io.StringIO), self.assertRaises(SystemExit):
            cli.main(["--render", str(self.root), "--max-cols", "0"])


class CliRenderTests(CliTestCase):
    def test_render_prints_one_frame(self) -> None:
        with mock.patch("sys.stdout", new_callable=io.StringIO) as out:
            cli.main(["--render", str(self.root), "--max-cols", "40", "--rows", "6", "--no-color"])

        lines = out.getvalue().split("\n")
        self.assertEqual(lines[-1], "")
        self.assertEqual(len(lines), 7)
        self.assertTrue(lines[0].startswith("tfm | tab 1/1 | "))
        self.assertIn("sub/", lines[1])
        self.assertIn("file.txt", lines[2])

    def test_render_rejects_positional_path(self) -> None:
        with self.assertRaises(SystemExit):
            cli.main([str(self.root), "--render", str(self.root)])

    def test_render_requires_directory(self) -> None:
        with self.assertRaises(SystemExit) as caught:
            cli.main(["--render", str(self.root / "file.txt")])
        self.assertIn("Not a directory", str(caught.exception))


if __name__ == "__main__":
    unittest.main()
