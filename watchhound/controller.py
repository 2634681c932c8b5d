"""Session transitions for startup, filesystem events, and user commands.

Refreshes that touch git run as fire-and-forget background tasks against the
shared session; the one that finishes last wins the final write. Fetch errors
are turned into ``error_message`` and never leave a task.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from pathlib import Path, PurePosixPath

from .debounce import Debouncer
from .fetcher import ChangeFetcher
from .history import HistoryStore
from .scroll import resolve_scroll_offset
from .state import VIEW_MODE_HISTORY, VIEW_MODE_SINGLE_FILE, SessionState, SharedSession
from .vcs import VcsError

logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No changes detected in working directory."
NO_CHANGES_FILE_LABEL = "(no changes)"
HISTORY_CLEARED_MESSAGE = "History cleared. Waiting for new changes..."
HISTORY_EMPTY_MESSAGE = "No diff history recorded yet."
FINE_SCROLL_LINES = 1
COARSE_SCROLL_LINES = 5
DEBOUNCE_EVICTION_WINDOWS = 10


@dataclass(frozen=True)
class ControllerTiming:
    """Delays applied inside refresh tasks."""

    settle_seconds: float
    loading_delay_seconds: float


def spawn_thread(target: Callable[[], None], name: str) -> None:
    """Run ``target`` on its own daemon thread without waiting for it."""
    worker = threading.Thread(target=target, name=name, daemon=True)
    worker.start()


def match_changed_path(path: Path, changed_files: list[str], root: Path) -> int | None:
    """Find ``path`` in the changed-file list.

    Tries the path relative to ``root`` first, then a trailing-component
    match, then a bare file-name match.
    """
    try:
        relative = path.resolve().relative_to(root.resolve()).as_posix()
    except (OSError, ValueError):
        relative = None
    if relative is not None and relative in changed_files:
        return changed_files.index(relative)

    posix = path.as_posix()
    for index, candidate in enumerate(changed_files):
        if posix == candidate or posix.endswith("/" + candidate):
            return index

    for index, candidate in enumerate(changed_files):
        if PurePosixPath(candidate).name == path.name:
            return index
    return None


def display_text_for(state: SessionState, history: HistoryStore) -> str:
    """Text the diff pane should show for the current view mode."""
    if state.view_mode == VIEW_MODE_HISTORY:
        if not len(history):
            return HISTORY_EMPTY_MESSAGE
        return history.build_accumulated_view()
    if not state.changed_files:
        return NO_CHANGES_MESSAGE
    return state.file_diff


class Controller:
    def __init__(
        self,
        session: SharedSession,
        fetcher: ChangeFetcher,
        debouncer: Debouncer,
        timing: ControllerTiming,
        *,
        spawn: Callable[[Callable[[], None], str], None] = spawn_thread,
        sleep: Callable[[float], None] = time.sleep,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.session = session
        self.fetcher = fetcher
        self.debouncer = debouncer
        self.timing = timing
        self._spawn = spawn
        self._sleep = sleep
        self._monotonic = monotonic
        self._clock = clock

    # -- triggers -----------------------------------------------------------

    def start(self) -> None:
        self._spawn_task(self.load_initial_state, "watchhound-startup")

    def request_refresh(self) -> None:
        self._spawn_task(self.load_initial_state, "watchhound-manual-refresh")

    def on_filesystem_event(self, path: Path) -> bool:
        """Debounce one watcher notification and schedule a refresh when accepted."""
        now = self._monotonic()
        if not self.debouncer.accept(path, now):
            logger.debug("debounced event for %s", path)
            return False
        self.debouncer.evict_stale(now, self.debouncer.window_seconds * DEBOUNCE_EVICTION_WINDOWS)
        logger.debug("accepted event for %s", path)
        self._spawn_task(partial(self.handle_file_change, path), "watchhound-fs-refresh")
        return True

    def navigate(self, delta: int) -> bool:
        """Move to a neighbouring file without wrapping; refetch its diff when moved."""
        with self.session.mutate() as (state, _history):
            if not state.changed_files:
                return False
            target = max(0, min(state.current_file_index + delta, len(state.changed_files) - 1))
            if target == state.current_file_index:
                return False
            state.current_file_index = target
            state.scroll_offset = 0
        self._spawn_task(self.update_current_file_diff, "watchhound-navigate")
        return True

    def previous_file(self) -> bool:
        return self.navigate(-1)

    def next_file(self) -> bool:
        return self.navigate(1)

    def scroll(self, delta: int) -> None:
        with self.session.mutate() as (state, _history):
            state.scroll_offset = max(0, state.scroll_offset + delta)

    def clear_history(self) -> None:
        with self.session.mutate() as (state, history):
            history.clear()
            state.scroll_offset = 0
            state.current_diff = HISTORY_CLEARED_MESSAGE

    def toggle_history_view(self) -> None:
        with self.session.mutate() as (state, history):
            if state.view_mode == VIEW_MODE_HISTORY:
                state.view_mode = VIEW_MODE_SINGLE_FILE
            else:
                state.view_mode = VIEW_MODE_HISTORY
            state.scroll_offset = 0
            state.current_diff = display_text_for(state, history)

    # -- tasks --------------------------------------------------------------

    def load_initial_state(self) -> None:
        """Fetch status and file list, select the first file, and record its diff."""
        self._refresh(changed_path=None)

    def handle_file_change(self, path: Path) -> None:
        """Let the burst settle, then refresh and focus the file that changed."""
        self._sleep(self.timing.settle_seconds)
        self._refresh(changed_path=path)

    def update_current_file_diff(self) -> None:
        """Refetch the selected file's diff without recording it into history."""
        with self.session.mutate() as (state, _history):
            current_file = state.current_file()
        if current_file is None:
            return

        diff_text = self._fetch_diff(current_file)
        if diff_text is None:
            return

        with self.session.mutate() as (state, _history):
            state.file_diff = diff_text
            if state.view_mode == VIEW_MODE_SINGLE_FILE:
                state.current_diff = diff_text
            state.loading = None

    def _refresh(self, changed_path: Path | None) -> None:
        started = self._monotonic()
        with self.session.mutate() as (state, _history):
            state.error_message = None
            previous_index = state.current_file_index

        try:
            status_summary = self.fetcher.fetch_status_summary()
        except VcsError as exc:
            self._fail(f"Git stat error: {exc}")
            return
        try:
            changed_files = self.fetcher.fetch_changed_files()
        except VcsError as exc:
            self._fail(f"Error finding changed files: {exc}")
            return
        metadata = self.fetcher.refresh_file_metadata(changed_files)

        if changed_path is None:
            index = 0
        else:
            matched = match_changed_path(changed_path, changed_files, self.fetcher.root)
            index = matched if matched is not None else previous_index
        if changed_files:
            index = max(0, min(index, len(changed_files) - 1))
        else:
            index = 0

        diff_text = ""
        if changed_files:
            fetched = self._fetch_diff(changed_files[index])
            if fetched is None:
                return
            diff_text = fetched

        with self.session.mutate() as (state, history):
            state.status_summary = status_summary
            state.changed_files = changed_files
            state.current_file_index = index
            state.file_metadata.update(metadata)
            state.last_update = self._clock()
            state.loading = None
            if changed_files:
                self._record_diff(state, history, changed_files[index], diff_text)
            else:
                self._record_no_changes(state, history)
        logger.debug(
            "refresh for %s finished in %.1fms",
            changed_path if changed_path is not None else "startup",
            (self._monotonic() - started) * 1000,
        )

    def _fetch_diff(self, file_name: str) -> str | None:
        with self.session.mutate() as (state, _history):
            state.loading = f"Loading diff for {file_name}..."
        self._sleep(self.timing.loading_delay_seconds)
        try:
            return self.fetcher.fetch_diff_for_file(file_name)
        except VcsError as exc:
            self._fail(f"Error getting diff for {file_name}: {exc}")
            return None

    def _record_diff(self, state: SessionState, history: HistoryStore, file_name: str, diff_text: str) -> None:
        previous = history.append(file_name, diff_text, timestamp=self._clock())
        state.file_diff = diff_text
        if state.view_mode == VIEW_MODE_HISTORY:
            state.current_diff = history.build_accumulated_view()
            state.scroll_offset = history.accumulated_scroll_offset()
        else:
            state.current_diff = diff_text
            state.scroll_offset = resolve_scroll_offset(diff_text, previous)

    def _record_no_changes(self, state: SessionState, history: HistoryStore) -> None:
        newest = history.newest()
        if newest is None or newest.file_name != NO_CHANGES_FILE_LABEL:
            history.append(NO_CHANGES_FILE_LABEL, NO_CHANGES_MESSAGE, timestamp=self._clock())
        state.file_diff = ""
        state.scroll_offset = 0
        state.current_diff = display_text_for(state, history)

    def _fail(self, message: str) -> None:
        logger.warning("%s", message)
        with self.session.mutate() as (state, _history):
            state.error_message = message
            state.loading = None

    def _spawn_task(self, target: Callable[[], None], name: str) -> None:
        def run() -> None:
            try:
                target()
            except Exception as exc:
                logger.exception("background task %s failed", name)
                self._fail(f"Unexpected error: {exc}")

        self._spawn(run, name)
