"""Session state shared by the UI loop and background refreshes.

``SharedSession`` is the only handle to the mutable record; every read and
write goes through its lock. The renderer works from frozen snapshots.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

from .history import HistoryStore

VIEW_MODE_SINGLE_FILE = "single_file"
VIEW_MODE_HISTORY = "accumulated_history"

LOADING_STATUS_TEXT = "Loading git status..."
LOADING_DIFF_TEXT = "Loading diff..."


@dataclass
class SessionState:
    status_summary: str = LOADING_STATUS_TEXT
    current_diff: str = LOADING_DIFF_TEXT
    # Last fetched single-file diff; ``current_diff`` may hold the accumulated view instead.
    file_diff: str = ""
    changed_files: list[str] = field(default_factory=list)
    current_file_index: int = 0
    scroll_offset: int = 0
    last_update: datetime | None = None
    error_message: str | None = None
    file_metadata: dict[str, datetime] = field(default_factory=dict)
    view_mode: str = VIEW_MODE_SINGLE_FILE
    loading: str | None = None

    def current_file(self) -> str | None:
        if not self.changed_files:
            return None
        return self.changed_files[self.current_file_index]

    def clamp_file_index(self) -> None:
        if not self.changed_files:
            self.current_file_index = 0
            return
        self.current_file_index = max(0, min(self.current_file_index, len(self.changed_files) - 1))


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only copy of the session handed to the rendering surface."""

    status_summary: str
    current_diff: str
    changed_files: tuple[str, ...]
    current_file_index: int
    scroll_offset: int
    last_update: datetime | None
    error_message: str | None
    file_metadata: dict[str, datetime]
    view_mode: str
    loading: str | None
    history_length: int
    revision: int

    @property
    def current_file(self) -> str | None:
        if not self.changed_files:
            return None
        return self.changed_files[self.current_file_index]


class SharedSession:
    """Single lock guarding the session record and its diff history."""

    def __init__(self, state: SessionState | None = None, history: HistoryStore | None = None) -> None:
        self._lock = threading.Lock()
        self._state = state if state is not None else SessionState()
        self._history = history if history is not None else HistoryStore()
        self._revision = 0

    @contextlib.contextmanager
    def mutate(self) -> Iterator[tuple[SessionState, HistoryStore]]:
        """Hold the lock for one short critical section and bump the revision."""
        with self._lock:
            yield self._state, self._history
            self._revision += 1

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            state = self._state
            return SessionSnapshot(
                status_summary=state.status_summary,
                current_diff=state.current_diff,
                changed_files=tuple(state.changed_files),
                current_file_index=state.current_file_index,
                scroll_offset=state.scroll_offset,
                last_update=state.last_update,
                error_message=state.error_message,
                file_metadata=dict(state.file_metadata),
                view_mode=state.view_mode,
                loading=state.loading,
                history_length=len(self._history),
                revision=self._revision,
            )
