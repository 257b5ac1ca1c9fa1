"""Tests for message handling: keys, chords, command mode and task results."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path

from tfm.chords import CHORD_TIMEOUT_SECONDS
from tfm.messages import (
    ChordTimeout,
    CommandFinished,
    FilesPasted,
    KeyPressed,
    Resized,
    TaskFailed,
)
from tfm.state import MODE_COMMAND, MODE_MODAL, MODE_NORMAL, new_state
from tfm.update import update


class UpdateTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = os.path.realpath(self._tmp.name)
        base = Path(self.root)
        for name in ("alpha", "beta", "gamma"):
            (base / name).mkdir()
        (base / "notes.txt").write_text("n", encoding="utf-8")
        self.state = new_state(self.root, width=80, height=20)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def press(self, *tokens: str):
        task = None
        for token in tokens:
            _, task = update(self.state, KeyPressed(token))
        return task


class KeyTests(UpdateTestCase):
    def test_single_key_dispatches_action(self) -> None:
        task = self.press("j")
        self.assertEqual(self.state.active_tab.selected, 1)
        self.assertIsNotNone(task)
        self.assertEqual(task.label, f"prefetch {os.path.join(self.root, 'beta')}")

    def test_layout_keys_act_like_qwerty(self) -> None:
        self.press("о", "о")
        self.assertEqual(self.state.active_tab.selected, 2)

    def test_two_key_chord_resolves_on_second_key(self) -> None:
        self.press("G")
        self.assertEqual(self.state.active_tab.selected, 3)
        task = self.press("g")
        self.assertEqual(task.delay, CHORD_TIMEOUT_SECONDS)
        self.assertIsInstance(task.run(), ChordTimeout)
        self.assertEqual(self.state.active_tab.selected, 3)
        self.press("g")
        self.assertEqual(self.state.active_tab.selected, 0)

    def test_timeout_clears_unfinished_chord(self) -> None:
        task = self.press("g")
        _, follow_up = update(self.state, task.run())
        self.assertIsNone(follow_up)
        self.assertEqual(self.state.chords.pending, [])
        self.press("g")
        self.assertEqual(self.state.chords.pending, ["g"])

    def test_stale_timeout_is_ignored(self) -> None:
        stale = self.press("g").run()
        self.press("j")
        self.press("y")
        update(self.state, stale)
        self.assertEqual(self.state.chords.pending, ["y"])

    def test_broken_chord_retries_the_new_key(self) -> None:
        self.press("g", "j")
        self.assertEqual(self.state.active_tab.selected, 1)
        self.assertEqual(self.state.chords.pending, [])

    def test_quit_key_sets_flag(self) -> None:
        self.press("q")
        self.assertTrue(self.state.quit)

    def test_unbound_and_reserved_keys_do_nothing(self) -> None:
        self.assertIsNone(self.press("z"))
        self.assertIsNone(self.press("r"))
        self.assertEqual(self.state.active_tab.selected, 0)
        self.assertEqual(self.state.mode, MODE_NORMAL)


class ModeTests(UpdateTestCase):
    def test_help_modal_is_dismissed_by_any_key(self) -> None:
        self.press("?")
        self.assertEqual(self.state.mode, MODE_MODAL)
        self.assertEqual(self.state.modal_title, "tfm help")
        self.assertIn("Keys:", self.state.modal_lines)
        self.press("j")
        self.assertEqual(self.state.mode, MODE_NORMAL)
        self.assertEqual(self.state.active_tab.selected, 0)

    def test_command_line_editing_and_submit(self) -> None:
        self.press(":")
        self.assertEqual(self.state.mode, MODE_COMMAND)
        self.press("c", "d", "space", "b", "e", "t", "x", "backspace", "a")
        self.assertEqual(self.state.command_buffer, "cd beta")
        self.press("enter")
        self.assertEqual(self.state.mode, MODE_NORMAL)
        self.assertEqual(self.state.command_buffer, "")
        self.assertEqual(self.state.active_tab.panel.cwd, os.path.join(self.root, "beta"))

    def test_command_keys_do_not_trigger_bindings(self) -> None:
        self.press(":", "j", "q")
        self.assertEqual(self.state.command_buffer, "jq")
        self.assertFalse(self.state.quit)
        self.assertEqual(self.state.active_tab.selected, 0)

    def test_escape_cancels_command_line(self) -> None:
        self.press(":", "q", "esc")
        self.assertEqual(self.state.mode, MODE_NORMAL)
        self.assertFalse(self.state.quit)

    def test_chord_timeout_is_ignored_outside_normal_mode(self) -> None:
        timeout = self.press("g").run()
        self.state.mode = MODE_COMMAND
        _, task = update(self.state, timeout)
        self.assertIsNone(task)


class ResultMessageTests(UpdateTestCase):
    def test_resize_updates_viewport(self) -> None:
        update(self.state, Resized(100, 30))
        self.assertEqual((self.state.viewport.width, self.state.viewport.height), (100, 30))
        update(self.state, Resized(0, 0))
        self.assertEqual((self.state.viewport.width, self.state.viewport.height), (1, 1))

    def test_captured_command_output_opens_modal(self) -> None:
        update(self.state, CommandFinished(title="ls", command="ls", exit_code=0, output="a\nb\n"))
        self.assertEqual(self.state.mode, MODE_MODAL)
        self.assertEqual(self.state.modal_title, "Command output")
        self.assertEqual(self.state.modal_lines, ["a", "b"])

    def test_failed_command_uses_error_title(self) -> None:
        update(self.state, CommandFinished(title="x", command="x", exit_code=2, output=""))
        self.assertEqual(self.state.modal_title, "Command error")
        self.assertEqual(self.state.modal_lines, ["(no output)"])

    def test_interactive_failure_goes_to_status_line(self) -> None:
        update(self.state, CommandFinished(title="vim", command="vim", exit_code=1, interactive=True))
        self.assertEqual(self.state.mode, MODE_NORMAL)
        self.assertEqual(self.state.error, "vim exited with status 1")

    def test_command_finish_refreshes_focused_panel(self) -> None:
        (Path(self.root) / "delta").mkdir()
        update(self.state, CommandFinished(title="mk", command="mkdir delta", exit_code=0))
        names = [entry.name for entry in self.state.active_tab.panel.entries]
        self.assertIn("delta", names)

    def test_paste_error_and_task_failure_reach_status(self) -> None:
        update(self.state, FilesPasted(destination=self.root, created=(), error="disk full"))
        self.assertEqual(self.state.error, "paste failed: disk full")
        update(self.state, TaskFailed(label="prefetch /x", error="boom"))
        self.assertEqual(self.state.error, "prefetch /x: boom")

    def test_selection_preview_is_resolved_after_each_message(self) -> None:
        self.press("G")
        notes = os.path.join(self.root, "notes.txt")
        self.assertEqual(self.state.selection_path, notes)
        self.assertEqual(self.state.selected_size, 1)
        self.assertEqual(self.state.preview.lines, ["n"])
        self.press("k")
        self.assertEqual(self.state.selection_path, os.path.join(self.root, "gamma"))
        self.assertIsNone(self.state.selected_size)
        self.assertEqual(self.state.preview.mime, "inode/directory")

    def test_unknown_message_is_ignored(self) -> None:
        returned, task = update(self.state, object())
        self.assertIs(returned, self.state)
        self.assertIsNone(task)


if __name__ == "__main__":
    unittest.main()
