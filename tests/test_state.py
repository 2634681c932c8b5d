from __future__ import annotations

import threading
import unittest
from datetime import datetime

from watchhound.state import (
    LOADING_DIFF_TEXT,
    LOADING_STATUS_TEXT,
    VIEW_MODE_SINGLE_FILE,
    SessionState,
    SharedSession,
)


class SessionStateTests(unittest.TestCase):
    def test_defaults_show_loading_placeholders(self) -> None:
        state = SessionState()
        self.assertEqual(state.status_summary, LOADING_STATUS_TEXT)
        self.assertEqual(state.current_diff, LOADING_DIFF_TEXT)
        self.assertEqual(state.view_mode, VIEW_MODE_SINGLE_FILE)
        self.assertIsNone(state.current_file())

    def test_clamp_file_index(self) -> None:
        state = SessionState(changed_files=["a", "b"], current_file_index=7)
        state.clamp_file_index()
        self.assertEqual(state.current_file_index, 1)
        self.assertEqual(state.current_file(), "b")

        state.changed_files = []
        state.clamp_file_index()
        self.assertEqual(state.current_file_index, 0)


class SharedSessionTests(unittest.TestCase):
    def test_mutate_bumps_revision_and_snapshot_is_detached(self) -> None:
        session = SharedSession()
        stamp = datetime(2024, 1, 1, 9, 30)
        with session.mutate() as (state, history):
            state.changed_files = ["a.py"]
            state.file_metadata["a.py"] = stamp
            history.append("a.py", "+x\n")

        snapshot = session.snapshot()
        self.assertEqual(snapshot.revision, 1)
        self.assertEqual(session.revision, 1)
        self.assertEqual(snapshot.changed_files, ("a.py",))
        self.assertEqual(snapshot.current_file, "a.py")
        self.assertEqual(snapshot.history_length, 1)

        with session.mutate() as (state, _history):
            state.changed_files.append("b.py")
            state.file_metadata.clear()
        self.assertEqual(snapshot.changed_files, ("a.py",))
        self.assertEqual(snapshot.file_metadata, {"a.py": stamp})

    def test_mutations_from_threads_are_serialized(self) -> None:
        session = SharedSession()

        def bump() -> None:
            for _ in range(500):
                with session.mutate() as (state, _history):
                    state.scroll_offset += 1

        workers = [threading.Thread(target=bump) for _ in range(4)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()

        self.assertEqual(session.snapshot().scroll_offset, 2000)
        self.assertEqual(session.revision, 2000)


if __name__ == "__main__":
    unittest.main()
