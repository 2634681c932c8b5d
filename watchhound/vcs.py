"""Git query interface for the working tree under watch.

Runs ``git diff`` variants as subprocesses against the target directory.
Output is returned as opaque text; non-zero exits raise ``VcsCommandError``.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

VCS_MARKER = ".git"
DEFAULT_TIMEOUT_SECONDS: float | None = None
# Keep non-ASCII paths verbatim instead of C-style quoted.
_RAW_PATHS = ["-c", "core.quotePath=false"]


class VcsError(Exception):
    """Base class for version-control query failures."""


class VcsCommandError(VcsError):
    """A git invocation failed to spawn or exited non-zero."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self._describe())

    def _describe(self) -> str:
        detail = self.stderr.strip() or "no error output"
        if self.returncode is None:
            return f"Git command failed: {detail}"
        return f"Git command failed ({self.returncode}): {detail}"


def find_vcs_marker(directory: Path) -> Path | None:
    """Return the ``.git`` marker inside ``directory`` or ``None`` when absent.

    Worktrees and submodules use a ``.git`` file instead of a directory; both
    count as a marker.
    """
    marker = directory / VCS_MARKER
    if marker.exists():
        return marker
    return None


class GitQuery:
    """Runs the three queries the fetcher needs, rooted at ``directory``."""

    def __init__(
        self,
        directory: Path,
        *,
        git_executable: str = "git",
        timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.directory = directory
        self.git_executable = git_executable
        self.timeout_seconds = timeout_seconds

    def run(self, args: list[str]) -> str:
        """Run ``git <args>`` in the working directory and return stdout.

        Raises ``VcsCommandError`` when git cannot be started, times out, or
        exits with a non-zero status. Undecodable bytes are replaced rather
        than failing the query.
        """
        command = [self.git_executable, *args]
        try:
            proc = subprocess.run(
                command,
                cwd=str(self.directory),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            raise VcsCommandError(command, None, f"timed out after {exc.timeout}s") from exc
        except OSError as exc:
            raise VcsCommandError(command, None, str(exc)) from exc

        if proc.returncode != 0:
            logger.debug("git %s exited %s", " ".join(args), proc.returncode)
            raise VcsCommandError(command, proc.returncode, proc.stderr)
        return proc.stdout

    def status_summary(self) -> str:
        return self.run([*_RAW_PATHS, "diff", "--no-color", "--stat"])

    def changed_files(self) -> str:
        """NUL-separated, unquoted paths of files with unstaged changes."""
        return self.run([*_RAW_PATHS, "diff", "--no-color", "--name-only", "-z"])

    def diff_for_file(self, path: str) -> str:
        return self.run([*_RAW_PATHS, "diff", "--no-color", "--", path])
