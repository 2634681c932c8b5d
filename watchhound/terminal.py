"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle and alternate-screen switching. Restoring the tty is
idempotent so the context manager, exit hooks, and signal handlers can all
call it without stepping on each other.
"""

from __future__ import annotations

import atexit
import contextlib
import os
import signal
import sys
import termios
import tty

_ENTER_TUI = b"\x1b[?1049h\x1b[?25l"
_EXIT_TUI = b"\x1b[?25h\x1b[?1049l"


class TerminalController:
    """Manage terminal mode transitions for one stdin/stdout pair."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._tui_enabled = False
        self._hooks_installed = False

    @property
    def tui_enabled(self) -> bool:
        return self._tui_enabled

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self._tui_enabled = True
        os.write(self.stdout_fd, _ENTER_TUI)

    def disable_tui_mode(self) -> None:
        """Restore the saved tty attributes and the main screen buffer."""
        if not self._tui_enabled:
            return
        self._tui_enabled = False
        try:
            os.write(self.stdout_fd, _EXIT_TUI)
        finally:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    def install_restore_hooks(self) -> None:
        """Register last-resort restore paths for exits that skip ``raw_mode``.

        Covers interpreter shutdown, uncaught exceptions reaching
        ``sys.excepthook``, and SIGTERM/SIGHUP.
        """
        if self._hooks_installed:
            return
        self._hooks_installed = True
        atexit.register(self.disable_tui_mode)

        previous_excepthook = sys.excepthook

        def restoring_excepthook(exc_type, exc, tb) -> None:
            with contextlib.suppress(OSError, termios.error):
                self.disable_tui_mode()
            previous_excepthook(exc_type, exc, tb)

        sys.excepthook = restoring_excepthook

        def restoring_signal_handler(signum, _frame) -> None:
            with contextlib.suppress(OSError, termios.error):
                self.disable_tui_mode()
            raise SystemExit(128 + signum)

        for signum in (signal.SIGTERM, signal.SIGHUP):
            signal.signal(signum, restoring_signal_handler)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
