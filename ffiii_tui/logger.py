"""
Logger factory for ffiii-tui.

curses owns the terminal while the UI runs, so records go to a file:
``--log-file``, ``FFIII_TUI_LOG_FILE`` or the default state path.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

ROOT = "ffiii_tui"
DEFAULT_LOG_FILE = Path.home() / ".local" / "state" / "ffiii-tui" / "ffiii-tui.log"
FILE_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str = ROOT) -> logging.Logger:
    """Return a logger namespaced under the package root."""
    if name != ROOT and not name.startswith(ROOT + "."):
        name = f"{ROOT}.{name}"
    return logging.getLogger(name)


def setup_logging(*, debug: bool = False, file_path: Optional[str | Path] = None) -> logging.Logger:
    """
    Attach a file handler to the package root logger.
    Idempotent: calling twice returns the same configured logger.
    """
    logger = logging.getLogger(ROOT)
    if getattr(logger, "_ffiii_configured", False):
        return logger

    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    path = Path(file_path or os.getenv("FFIII_TUI_LOG_FILE") or DEFAULT_LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(path, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(FILE_FMT))
    logger.addHandler(fh)

    logger._ffiii_configured = True  # type: ignore[attr-defined]
    return logger
