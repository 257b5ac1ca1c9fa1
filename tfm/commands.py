"""Command-line (``:``) mode: built-in commands, clipboard and custom commands.

Custom commands come from the ``commands`` config table and run through
``sh -c``. Templates may use ``{cwd}``, ``{file}`` and ``{path}``; without a
placeholder the selected path is appended.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable

from . import file_ops
from .clipboard import CLIP_FILE, CLIP_PATH, Clipboard
from .keymap import Action
from .messages import CommandFinished, DeferredTask, FilesPasted
from .navigation import NavigationOps
from .state import AppState
from .ui_theme import STYLE_NAMES, resolve_theme

LOGGER = logging.getLogger(__name__)

PLACEHOLDERS = ("{cwd}", "{file}", "{path}")
INTERACTIVE_PROGRAMS = frozenset({"nano", "vim", "nvim", "vi", "less", "more", "micro"})

HELP_COMMANDS = [
    ":help | :h | :?          show this help",
    ":q | :quit | :exit       quit",
    ":cd <path>               change the focused panel's directory",
    ":preview on|off|toggle   show or hide the preview pane",
    ":hidden                  toggle hidden files",
    ":tabnew | :tabclose      open or close a tab",
    ":copy | :paste           copy the selection, paste into this directory",
    ":copy-path | :paste-path remember a path, jump to it",
    ":theme                   show the active styles",
]

HELP_ACTIONS = (
    Action.UP,
    Action.DOWN,
    Action.LEFT,
    Action.RIGHT,
    Action.TOP,
    Action.BOTTOM,
    Action.PAGE_DOWN,
    Action.PAGE_UP,
    Action.HALF_PAGE_DOWN,
    Action.HALF_PAGE_UP,
    Action.TOGGLE_HIDDEN,
    Action.NEW_TAB,
    Action.NEXT_TAB,
    Action.PREV_TAB,
    Action.CLOSE_TAB,
    Action.TOGGLE_PREVIEW,
    Action.TOGGLE_RIGHT_OPEN_MODE,
    Action.CLOSE_RIGHT,
    Action.TOGGLE_FOCUS,
    Action.COPY,
    Action.PASTE,
    Action.COPY_PATH,
    Action.PASTE_PATH,
    Action.COMMAND,
    Action.QUIT,
)


def shell_quote(text: str) -> str:
    """Single-quote ``text`` for ``sh -c``."""
    return "'" + text.replace("'", "'\\''") + "'"


def expand_template(template: str, cwd: str, name: str, path: str) -> str:
    """Substitute placeholders, or append the quoted path when there are none."""
    command = template.strip()
    if not any(placeholder in command for placeholder in PLACEHOLDERS):
        return f"{command} {shell_quote(path or cwd)}"
    command = command.replace("{cwd}", shell_quote(cwd))
    command = command.replace("{file}", shell_quote(name))
    return command.replace("{path}", shell_quote(path))


def split_interactive(name: str, command: str) -> tuple[bool, str]:
    """Return ``(interactive, command)`` with any leading ``!`` removed.

    Commands named after, or starting with, a full-screen program take over
    the terminal; ``!`` forces that for anything else.
    """
    if command.startswith("!"):
        return True, command[1:].strip()
    words = command.split()
    program = os.path.basename(words[0]) if words else ""
    return name.lower() in INTERACTIVE_PROGRAMS or program in INTERACTIVE_PROGRAMS, command


def _resolve_cd_target(arg: str, cwd: str) -> str:
    path = os.path.expanduser(arg)
    if not os.path.isabs(path):
        path = os.path.join(cwd, path)
    return os.path.normpath(path)


class CommandOps:
    """Execute command-line input and clipboard operations."""

    def __init__(
        self,
        state: AppState,
        nav: NavigationOps,
        *,
        run_process: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.state = state
        self.nav = nav
        self._run_process = run_process
        self._builtins: dict[str, Callable[[list[str]], DeferredTask | None]] = {
            "help": self._help,
            "h": self._help,
            "?": self._help,
            "q": self._quit,
            "quit": self._quit,
            "exit": self._quit,
            "cd": self._cd,
            "preview": self._preview,
            "hidden": lambda args: self.nav.toggle_hidden(),
            "tabnew": lambda args: self.nav.new_tab(),
            "tabclose": lambda args: self.nav.close_tab(),
            "copy": lambda args: self.copy_selected(),
            "paste": lambda args: self.paste(),
            "copy-path": lambda args: self.copy_path(),
            "paste-path": lambda args: self.paste_path(),
            "theme": self._theme,
        }

    def execute(self, line: str) -> DeferredTask | None:
        """Run one submitted command line."""
        line = line.strip()
        if line.startswith(":"):
            line = line[1:]
        fields = line.split()
        if not fields:
            return None
        name = fields[0].lower()
        handler = self._builtins.get(name)
        if handler is not None:
            return handler(fields[1:])
        template = self.state.config.commands.get(name)
        if template is not None:
            return self.run_custom(name, template)
        self.state.show_modal("Unknown command", [f"Unknown: {name}"])
        return None

    # Built-ins

    def show_help(self) -> None:
        keymap = self.state.chords.keymap
        lines = ["Keys:"]
        for action in HELP_ACTIONS:
            keys = ", ".join(keymap.keys_for(action)) or "-"
            lines.append(f"  {keys:<22} {action.value}")
        lines.append("")
        lines.append("Commands:")
        lines.extend(f"  {text}" for text in HELP_COMMANDS)
        custom = sorted(self.state.config.commands)
        if custom:
            lines.append("")
            lines.append("Custom commands: " + ", ".join(custom))
        lines.append("Placeholders: {cwd} {file} {path}")
        lines.append("")
        lines.append("Press any key to close")
        self.state.show_modal("tfm help", lines)

    def _help(self, args: list[str]) -> None:
        self.show_help()

    def _quit(self, args: list[str]) -> None:
        self.state.quit = True

    def _cd(self, args: list[str]) -> DeferredTask | None:
        if not args:
            self.state.error = "usage: :cd <path>"
            return None
        target = _resolve_cd_target(" ".join(args), self.state.focused_panel.cwd)
        try:
            info = self.state.reader.stat(target)
        except OSError as exc:
            self.state.error = f"{target}: {exc.strerror or exc}"
            return None
        if not info.is_dir:
            self.state.error = f"not a directory: {target}"
            return None
        if self.nav.change_directory(target):
            return self.nav.request_prefetch()
        return None

    def _preview(self, args: list[str]) -> None:
        mode = args[0].lower() if args else "toggle"
        if mode == "toggle" or (mode == "on" and not self.state.show_preview):
            self.nav.toggle_preview()
        elif mode == "off" and self.state.show_preview:
            self.nav.toggle_preview()
        elif mode not in {"on", "off"}:
            self.state.error = "usage: :preview on|off|toggle"

    def _theme(self, args: list[str]) -> None:
        config = self.state.config
        theme = resolve_theme(config.theme, no_color=config.no_color, overrides=config.styles)
        lines = [
            f"theme: {theme.name}",
            f"TERM={os.environ.get('TERM', '')} COLORTERM={os.environ.get('COLORTERM', '')}",
            "",
        ]
        for style in STYLE_NAMES:
            code = theme.sgr(style)
            lines.append(f"{style:<18} {code.replace(chr(27), 'ESC') or '(terminal default)'}")
        self.state.show_modal("Theme", lines)

    # Clipboard

    def copy_selected(self) -> None:
        path = self.state.focused_tab.selected_path()
        if path is None:
            return
        self.state.clipboard = Clipboard.files([path])

    def copy_path(self) -> None:
        tab = self.state.focused_tab
        self.state.clipboard = Clipboard.path(tab.selected_path() or tab.panel.cwd)

    def paste(self) -> DeferredTask | None:
        """Copy clipboard files into the focused directory in the background."""
        clipboard = self.state.clipboard
        if clipboard.kind != CLIP_FILE or not clipboard.paths:
            return None
        destination = self.state.focused_panel.cwd
        sources = clipboard.paths

        def run() -> FilesPasted:
            return FilesPasted(destination=destination, created=tuple(file_ops.copy_into(sources, destination)))

        def on_error(exc: Exception) -> FilesPasted:
            return FilesPasted(destination=destination, created=(), error=str(exc))

        return DeferredTask(run=run, label=f"paste into {destination}", on_error=on_error)

    def paste_path(self) -> DeferredTask | None:
        clipboard = self.state.clipboard
        if clipboard.kind != CLIP_PATH or not clipboard.paths:
            return None
        if self.nav.reveal_path(clipboard.paths[0]):
            return self.nav.request_prefetch()
        return None

    # Custom commands

    def run_custom(self, name: str, template: str) -> DeferredTask:
        tab = self.state.focused_tab
        cwd = tab.panel.cwd
        entry = tab.selected_entry()
        file_name = entry.name if entry is not None else ""
        path = tab.panel.path_of(entry) if entry is not None else cwd
        interactive, template = split_interactive(name, template.strip())
        command = expand_template(template, cwd, file_name, path)
        LOGGER.info("running %s command %r", "interactive" if interactive else "background", command)
        run_process = self._run_process

        if interactive:
            def run_interactive() -> CommandFinished:
                completed = run_process(["sh", "-c", command], cwd=cwd, check=False)
                return CommandFinished(title=name, command=command, exit_code=completed.returncode, interactive=True)

            return DeferredTask(
                run=run_interactive,
                label=f"command {name}",
                interactive=True,
                on_error=lambda exc: CommandFinished(
                    title=name, command=command, exit_code=-1, output=str(exc), interactive=True
                ),
            )

        def run_captured() -> CommandFinished:
            completed = run_process(
                ["sh", "-c", command],
                cwd=cwd,
                check=False,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
            return CommandFinished(title=name, command=command, exit_code=completed.returncode, output=completed.stdout or "")

        return DeferredTask(
            run=run_captured,
            label=f"command {name}",
            on_error=lambda exc: CommandFinished(title=name, command=command, exit_code=-1, output=str(exc)),
        )


__all__ = [
    "CommandOps",
    "INTERACTIVE_PROGRAMS",
    "expand_template",
    "shell_quote",
    "split_interactive",
]
