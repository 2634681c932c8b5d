"""Bounded ledger of fetched diffs.

Entries are immutable and evicted oldest-first once the bound is exceeded.
The accumulated view stitches every retained entry into one scrollable text.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime

from .scroll import split_diff_lines

HISTORY_MAX_ENTRIES = 50
SEPARATOR_LINE_COUNT = 3


@dataclass(frozen=True)
class DiffHistoryEntry:
    timestamp: datetime
    file_name: str
    diff_text: str
    previous_diff_text: str | None = None


def format_separator(number: int, entry: DiffHistoryEntry) -> list[str]:
    """Return the blank/header/blank block placed before a non-first entry."""
    header = f"=== Update {number} at {entry.timestamp:%H:%M:%S} (File: {entry.file_name}) ==="
    return ["", header, ""]


class HistoryStore:
    """Append-only diff history keyed by file name, FIFO-bounded."""

    def __init__(self, max_entries: int = HISTORY_MAX_ENTRIES) -> None:
        self.max_entries = max_entries
        self._entries: deque[DiffHistoryEntry] = deque()

    def append(
        self,
        file_name: str,
        diff_text: str,
        timestamp: datetime | None = None,
    ) -> str | None:
        """Record ``diff_text`` for ``file_name`` and return the prior text for that file."""
        previous = self.latest_for(file_name)
        previous_text = previous.diff_text if previous is not None else None
        self._entries.append(
            DiffHistoryEntry(
                timestamp=timestamp if timestamp is not None else datetime.now(),
                file_name=file_name,
                diff_text=diff_text,
                previous_diff_text=previous_text,
            )
        )
        while len(self._entries) > self.max_entries:
            self._entries.popleft()
        return previous_text

    def latest_for(self, file_name: str) -> DiffHistoryEntry | None:
        for entry in reversed(self._entries):
            if entry.file_name == file_name:
                return entry
        return None

    def newest(self) -> DiffHistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def entries(self) -> list[DiffHistoryEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def build_accumulated_lines(self) -> list[str]:
        lines: list[str] = []
        for index, entry in enumerate(self._entries):
            if index > 0:
                lines.extend(format_separator(index + 1, entry))
            lines.extend(split_diff_lines(entry.diff_text))
        return lines

    def build_accumulated_view(self) -> str:
        """Concatenate all entries chronologically with separator headers."""
        return "\n".join(self.build_accumulated_lines())

    def accumulated_scroll_offset(self) -> int:
        """Line offset of the newest entry's block inside the accumulated view.

        Each entry before the newest contributes its diff lines, plus the
        separator block for every entry except the first.
        """
        offset = 0
        entries = list(self._entries)
        for index, entry in enumerate(entries[:-1]):
            if index > 0:
                offset += SEPARATOR_LINE_COUNT
            offset += len(split_diff_lines(entry.diff_text))
        return offset
