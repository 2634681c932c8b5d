"""Logging configuration for the watcher.

The terminal belongs to the UI, so records go to a log file under the
platform's user log directory instead of stdout.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from platformdirs import user_log_dir

SIMPLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"

LOG_LEVEL_ENV = "WATCHHOUND_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_PATH = Path(user_log_dir("watchhound", appauthor=False)) / "watchhound.log"


def resolve_log_level(level: str | None = None) -> int:
    level_name = (level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    resolved = logging.getLevelName(level_name)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | None = None, log_path: Path | None = None) -> Path | None:
    """Configure the ``watchhound`` logger hierarchy.

    Args:
        level: Level name override; falls back to ``WATCHHOUND_LOG_LEVEL`` then WARNING.
        log_path: Destination file; defaults to the user log directory.

    Returns the log file in use, or ``None`` when it could not be opened (the
    logger is then left with a ``NullHandler``).
    """
    log_level = resolve_log_level(level)
    fmt = DETAILED_FORMAT if log_level == logging.DEBUG else SIMPLE_FORMAT
    target = log_path if log_path is not None else DEFAULT_LOG_PATH

    root_logger = logging.getLogger("watchhound")
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)
    root_logger.propagate = False

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(target, encoding="utf-8")
    except OSError:
        root_logger.addHandler(logging.NullHandler())
        return None

    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(handler)
    # watchdog logs every emitter hiccup at DEBUG.
    logging.getLogger("watchdog").setLevel(logging.WARNING)
    return target
