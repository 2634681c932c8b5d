"""Recursive filesystem event source backed by watchdog.

Forwards one changed path per notification to a callback. Directory events
and anything inside the ``.git`` metadata directory are dropped; git queries
touch the index themselves and would otherwise retrigger refreshes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from .vcs import VCS_MARKER

logger = logging.getLogger(__name__)


def is_vcs_internal_path(path: Path, root: Path) -> bool:
    try:
        relative = path.relative_to(root)
    except ValueError:
        return False
    return bool(relative.parts) and relative.parts[0] == VCS_MARKER


class ChangedPathHandler(FileSystemEventHandler):
    """Translate watchdog events into changed-path callbacks."""

    def __init__(self, root: Path, on_path: Callable[[Path], object]) -> None:
        super().__init__()
        self.root = root
        self._on_path = on_path

    def event_path(self, event: FileSystemEvent) -> Path | None:
        if event.is_directory:
            return None
        raw = getattr(event, "dest_path", "") or event.src_path
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="surrogateescape")
        path = Path(raw)
        if is_vcs_internal_path(path, self.root):
            return None
        return path

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in {"opened", "closed_no_write"}:
            return
        path = self.event_path(event)
        if path is None:
            return
        self._on_path(path)


def start_watch(root: Path, on_path: Callable[[Path], object]) -> BaseObserver:
    """Start a recursive observer on ``root`` and return it (already running)."""
    observer = Observer()
    observer.schedule(ChangedPathHandler(root, on_path), str(root), recursive=True)
    observer.daemon = True
    observer.start()
    logger.info("watching %s", root)
    return observer


def stop_watch(observer: BaseObserver) -> None:
    observer.stop()
    observer.join(timeout=1.0)
    logger.info("watcher stopped")
