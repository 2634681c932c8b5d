"""Tests for the bounded diff history and its accumulated view."""

from __future__ import annotations

import unittest
from datetime import datetime

from watchhound.history import HISTORY_MAX_ENTRIES, HistoryStore, format_separator


def _ts(second: int) -> datetime:
    return datetime(2024, 5, 1, 12, 0, second)


class HistoryStoreTests(unittest.TestCase):
    def test_append_returns_previous_text_for_same_file_only(self) -> None:
        history = HistoryStore()
        self.assertIsNone(history.append("a.py", "+one\n", _ts(1)))
        self.assertIsNone(history.append("b.py", "+bee\n", _ts(2)))
        self.assertEqual(history.append("a.py", "+two\n", _ts(3)), "+one\n")

        newest = history.newest()
        assert newest is not None
        self.assertEqual(newest.previous_diff_text, "+one\n")
        self.assertEqual(newest.timestamp, _ts(3))

    def test_store_is_bounded_and_evicts_oldest_first(self) -> None:
        history = HistoryStore()
        for index in range(HISTORY_MAX_ENTRIES + 5):
            history.append(f"f{index}.py", f"+{index}\n")

        entries = history.entries()
        self.assertEqual(len(history), HISTORY_MAX_ENTRIES)
        self.assertEqual(entries[0].file_name, "f5.py")
        self.assertEqual(entries[-1].file_name, f"f{HISTORY_MAX_ENTRIES + 4}.py")

    def test_evicted_entry_is_no_longer_a_previous_version(self) -> None:
        history = HistoryStore(max_entries=2)
        history.append("a.py", "+a1\n")
        history.append("b.py", "+b1\n")
        history.append("c.py", "+c1\n")
        self.assertIsNone(history.latest_for("a.py"))
        self.assertIsNone(history.append("a.py", "+a2\n"))

    def test_accumulated_view_places_separator_before_every_entry_but_the_first(self) -> None:
        history = HistoryStore()
        history.append("a.py", "+a\n", _ts(1))
        history.append("b.py", "+b1\n+b2\n", _ts(2))

        self.assertEqual(
            history.build_accumulated_lines(),
            ["+a", "", "=== Update 2 at 12:00:02 (File: b.py) ===", "", "+b1", "+b2"],
        )
        self.assertEqual(
            history.build_accumulated_view(),
            "+a\n\n=== Update 2 at 12:00:02 (File: b.py) ===\n\n+b1\n+b2",
        )

    def test_accumulated_scroll_offset_points_at_newest_block(self) -> None:
        history = HistoryStore()
        self.assertEqual(history.accumulated_scroll_offset(), 0)
        history.append("a.py", "+a1\n+a2\n", _ts(1))
        self.assertEqual(history.accumulated_scroll_offset(), 0)
        history.append("b.py", "+b\n", _ts(2))
        self.assertEqual(history.accumulated_scroll_offset(), 2)
        history.append("c.py", "+c\n", _ts(3))
        # a: 2 lines, b: separator + 1 line
        self.assertEqual(history.accumulated_scroll_offset(), 6)

        lines = history.build_accumulated_lines()
        self.assertEqual(lines[6], "")
        self.assertEqual(lines[7], "=== Update 3 at 12:00:03 (File: c.py) ===")

    def test_form_feed_inside_a_line_does_not_shift_the_offset(self) -> None:
        history = HistoryStore()
        history.append("a.c", " a\n \x0c\n b\n \x0c\n", _ts(1))
        history.append("b.c", "+b\n", _ts(2))
        self.assertEqual(history.accumulated_scroll_offset(), 4)
        self.assertEqual(history.build_accumulated_lines()[5], "=== Update 2 at 12:00:02 (File: b.c) ===")

    def test_clear_empties_store(self) -> None:
        history = HistoryStore()
        history.append("a.py", "+a\n")
        history.clear()
        self.assertEqual(len(history), 0)
        self.assertIsNone(history.newest())
        self.assertEqual(history.build_accumulated_view(), "")

    def test_format_separator_layout(self) -> None:
        history = HistoryStore()
        history.append("x.txt", "", _ts(9))
        entry = history.entries()[0]
        self.assertEqual(format_separator(4, entry), ["", "=== Update 4 at 12:00:09 (File: x.txt) ===", ""])


if __name__ == "__main__":
    unittest.main()
