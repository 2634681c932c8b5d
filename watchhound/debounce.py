"""Per-path cool-down for filesystem events."""

from __future__ import annotations

import threading
from pathlib import Path

DEFAULT_DEBOUNCE_SECONDS = 1.0


class Debouncer:
    """Accept at most one event per path per cool-down window.

    The map of last accepted instants grows with the set of touched paths;
    ``evict_stale`` trims entries that can no longer reject anything.
    """

    def __init__(self, window_seconds: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        self.window_seconds = window_seconds
        self._last_accepted: dict[Path, float] = {}
        self._lock = threading.Lock()

    def should_process(self, path: Path, now: float) -> bool:
        with self._lock:
            last = self._last_accepted.get(path)
        return last is None or (now - last) >= self.window_seconds

    def record(self, path: Path, now: float) -> None:
        with self._lock:
            self._last_accepted[path] = now

    def accept(self, path: Path, now: float) -> bool:
        """Check and record in one step; return whether the event passes."""
        with self._lock:
            last = self._last_accepted.get(path)
            if last is not None and (now - last) < self.window_seconds:
                return False
            self._last_accepted[path] = now
            return True

    def evict_stale(self, now: float, max_age_seconds: float) -> int:
        """Forget paths whose last accepted event is older than ``max_age_seconds``."""
        with self._lock:
            stale = [path for path, last in self._last_accepted.items() if (now - last) > max_age_seconds]
            for path in stale:
                del self._last_accepted[path]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_accepted)
