"""Logging setup: records go to a file, never to the raw-mode terminal."""

from __future__ import annotations

import logging
from pathlib import Path

from platformdirs import user_log_dir

from .config import APP_NAME

LOG_FILENAME = "tfm.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_log_path() -> Path:
    return Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME


def configure_logging(level: str = "info", log_file: Path | None = None) -> Path | None:
    """Attach a single file handler to the ``tfm`` logger.

    Returns the log path, or ``None`` when the file could not be opened (in
    which case records are discarded).
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(getattr(logging, level.strip().upper(), logging.INFO))
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    path = log_file or default_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        logger.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return path


__all__ = ["LOG_FILENAME", "configure_logging", "default_log_path"]
