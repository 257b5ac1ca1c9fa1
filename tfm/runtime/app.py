"""Interactive session bootstrap: state, terminal, task runner, loop."""

from __future__ import annotations

import logging
import shutil
import sys

from ..config import Config
from ..state import new_state
from ..ui_theme import resolve_theme
from .loop import run_main_loop
from .tasks import TaskRunner
from .terminal import TerminalController

LOGGER = logging.getLogger(__name__)


def run_app(start_path: str, config: Config, *, show_hidden: bool | None = None) -> None:
    """Browse ``start_path`` interactively until the user quits."""
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("tfm needs an interactive terminal (use --render for a one-shot frame).")
    term = shutil.get_terminal_size((80, 24))
    state = new_state(
        start_path,
        config.show_hidden if show_hidden is None else show_hidden,
        config=config,
        width=term.columns,
        height=term.lines,
    )
    theme = resolve_theme(config.theme, no_color=config.no_color, overrides=config.styles)
    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    runner = TaskRunner()
    LOGGER.info("starting in %s", state.active_tab.panel.cwd)
    try:
        run_main_loop(state, terminal, stdin_fd, runner, theme)
    finally:
        runner.shutdown()
        LOGGER.info("exiting")


__all__ = ["run_app"]
