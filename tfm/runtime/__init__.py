"""Interactive runtime: terminal control, task execution and the event loop."""

from __future__ import annotations

from .app import run_app

__all__ = ["run_app"]
