"""User configuration loaded from a JSON file.

A missing or malformed file, or a value of the wrong type, falls back to
the default for that setting.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

LOGGER = logging.getLogger(__name__)

APP_NAME = "tfm"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

MIN_RIGHT_PANE_WIDTH = 10
MAX_RIGHT_PANE_WIDTH = 80
LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class Config:
    """Resolved settings; every field has a working default."""

    show_hidden: bool = False
    show_preview: bool = True
    open_dirs_right: bool = False
    right_pane_width: int = 40
    inline_images: bool = True
    inline_max_bytes: int = 1_572_864
    preview_max_bytes: int = 8192
    syntax_highlight: bool = True
    theme: str = "default"
    no_color: bool = False
    log_level: str = "info"
    keys: dict[str, str] = field(default_factory=dict)
    commands: dict[str, str] = field(default_factory=dict)
    styles: dict[str, dict[str, object]] = field(default_factory=dict)


def read_config_data(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        LOGGER.warning("could not read config %s: %s", config_path, exc)
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("config %s is not a JSON object", config_path)
        return {}
    return data


def _bool(data: dict[str, object], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if isinstance(value, bool):
        return value
    LOGGER.warning("config %s: expected a boolean, got %r", key, value)
    return default


def _int(data: dict[str, object], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    LOGGER.warning("config %s: expected a positive integer, got %r", key, value)
    return default


def _str(data: dict[str, object], key: str, default: str) -> str:
    value = data.get(key, default)
    if isinstance(value, str) and value.strip():
        return value.strip()
    LOGGER.warning("config %s: expected a string, got %r", key, value)
    return default


def _str_map(data: dict[str, object], key: str) -> dict[str, str]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        LOGGER.warning("config %s: expected an object", key)
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, str)}


def _style_map(data: dict[str, object]) -> dict[str, dict[str, object]]:
    value = data.get("styles", {})
    if not isinstance(value, dict):
        LOGGER.warning("config styles: expected an object")
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, dict)}


def parse_config(data: dict[str, object]) -> Config:
    """Build a :class:`Config` from decoded JSON, keeping defaults for bad values."""
    defaults = Config()
    right = _int(data, "right_pane_width", defaults.right_pane_width)
    level = _str(data, "log_level", defaults.log_level).lower()
    if level not in LOG_LEVELS:
        LOGGER.warning("config log_level: unknown level %r", level)
        level = defaults.log_level
    return Config(
        show_hidden=_bool(data, "show_hidden", defaults.show_hidden),
        show_preview=_bool(data, "show_preview", defaults.show_preview),
        open_dirs_right=_bool(data, "open_dirs_right", defaults.open_dirs_right),
        right_pane_width=max(MIN_RIGHT_PANE_WIDTH, min(MAX_RIGHT_PANE_WIDTH, right)),
        inline_images=_bool(data, "inline_images", defaults.inline_images),
        inline_max_bytes=_int(data, "inline_max_bytes", defaults.inline_max_bytes),
        preview_max_bytes=_int(data, "preview_max_bytes", defaults.preview_max_bytes),
        syntax_highlight=_bool(data, "syntax_highlight", defaults.syntax_highlight),
        theme=_str(data, "theme", defaults.theme),
        no_color=_bool(data, "no_color", defaults.no_color),
        log_level=level,
        keys=_str_map(data, "keys"),
        commands=_str_map(data, "commands"),
        styles=_style_map(data),
    )


def load_config(path: Path | None = None) -> Config:
    """Read and parse the config file at ``path`` (default location if omitted)."""
    return parse_config(read_config_data(path))


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "Config",
    "load_config",
    "parse_config",
    "read_config_data",
]
