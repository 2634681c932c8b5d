"""Change fetching on top of the git query interface.

Rebuilds the changed-file list, status summary, and per-file diff text.
Never touches session state; callers apply the returned values.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from .vcs import GitQuery


def parse_changed_files(output: str) -> list[str]:
    """Split NUL-terminated ``--name-only -z`` output into paths.

    Paths are kept verbatim; only the empty tail after the last NUL is dropped.
    """
    return [path for path in output.split("\0") if path]


class ChangeFetcher:
    """Orchestrates git queries for one working tree."""

    def __init__(self, root: Path, query: GitQuery | None = None) -> None:
        self.root = root
        self.query = query if query is not None else GitQuery(root)

    def fetch_status_summary(self) -> str:
        return self.query.status_summary()

    def fetch_changed_files(self) -> list[str]:
        return parse_changed_files(self.query.changed_files())

    def fetch_diff_for_file(self, path: str) -> str:
        # Empty output means "nothing visible", not a failure.
        return self.query.diff_for_file(path)

    def refresh_file_metadata(self, paths: list[str]) -> dict[str, datetime]:
        """Stat each path and return its last-modified time.

        Paths that cannot be stated (deleted or renamed between the listing and
        the stat) are left out of the result.
        """
        metadata: dict[str, datetime] = {}
        for rel_path in paths:
            try:
                st = (self.root / rel_path).stat()
            except OSError:
                continue
            metadata[rel_path] = datetime.fromtimestamp(st.st_mtime)
        return metadata
