"""Command-line front door for tfm.

Parses CLI options, loads configuration and sets up logging, then either
prints a single rendered frame or starts the interactive browser.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import shutil
import sys
from pathlib import Path

from .config import LOG_LEVELS, Config, load_config
from .logs import configure_logging
from .render import frame_text, render
from .runtime import run_app
from .state import new_state
from .ui_theme import available_theme_names, resolve_theme

__version__ = "0.1.0"

LOGGER = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tfm", description="Keyboard-driven terminal file manager.")
    parser.add_argument("path", nargs="?", default=None, help="Directory to open. Defaults to the current directory.")
    parser.add_argument("--working-dir", "-w", default=None, help="Directory to open (same as PATH).")
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON config file.")
    parser.add_argument("--show-hidden", action="store_true", default=None, help="Show dotfiles on startup.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None, help="Log verbosity (default from config).")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs here instead of the user log dir.")
    parser.add_argument("--render", metavar="PATH", help="Print one rendered frame for PATH and exit.")
    parser.add_argument("--max-cols", type=_positive_int, default=None, help="Frame width for --render.")
    parser.add_argument("--rows", type=_positive_int, default=None, help="Frame height for --render.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _effective_config(args: argparse.Namespace) -> Config:
    if args.config is not None and not args.config.is_file():
        raise SystemExit(f"Config not found: {args.config}")
    config = load_config(args.config)
    overrides: dict[str, object] = {}
    if args.theme is not None:
        overrides["theme"] = args.theme
    if args.no_color or os.environ.get("NO_COLOR"):
        overrides["no_color"] = True
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    return dataclasses.replace(config, **overrides) if overrides else config


def render_frame(path: Path, config: Config, width: int, height: int, show_hidden: bool | None = None) -> str:
    """Render the browser opened at ``path`` as plain terminal text."""
    state = new_state(
        str(path),
        config.show_hidden if show_hidden is None else show_hidden,
        config=config,
        width=width,
        height=height,
    )
    theme = resolve_theme(config.theme, no_color=config.no_color, overrides=config.styles)
    return frame_text(render(state), theme).replace("\r\n", "\n") + "\n"


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch tfm."""
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _effective_config(args)
    configure_logging(config.log_level, args.log_file)

    if args.render is not None:
        if args.path is not None:
            raise SystemExit("Cannot combine positional path with --render.")
        render_path = Path(args.render)
        if not render_path.is_dir():
            raise SystemExit(f"Not a directory: {render_path}")
        term = shutil.get_terminal_size((80, 24))
        width = args.max_cols or term.columns
        height = args.rows or term.lines
        sys.stdout.write(render_frame(render_path, config, width, height, args.show_hidden))
        return

    start = Path(args.path or args.working_dir or Path.cwd())
    if not start.is_dir():
        raise SystemExit(f"Not a directory: {start}")

    run_app(str(start), config, show_hidden=args.show_hidden)


if __name__ == "__main__":
    main()
