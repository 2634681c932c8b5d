"""Main interactive event loop for the terminal UI.

Redraws whenever the shared session changes or the terminal is resized, and
dispatches decoded keys to the command registry. Feature logic lives in the
injected callbacks; the loop only wires them together.
"""

from __future__ import annotations

import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass

from .input import read_key
from .state import SessionSnapshot
from .terminal import TerminalController

PANE_RESIZE_STEP = 2


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_poll_ms: int = 50
    # Recent-touch markers age out without any state change.
    idle_redraw_seconds: float = 1.0


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    snapshot: Callable[[], SessionSnapshot]
    build_frame: Callable[[SessionSnapshot, int, int], list[str]]
    write_frame: Callable[[list[str]], None]
    dispatch_key: Callable[[str], bool | None]
    adjust_left_pane: Callable[[int, int], bool]


def run_main_loop(
    terminal: TerminalController,
    stdin_fd: int,
    timing: RuntimeLoopTiming,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the TUI until a bound key handler returns ``True``.

    Each iteration checks whether a redraw is due, then waits up to
    ``timing.key_poll_ms`` for one key.
    """
    ops = callbacks
    drawn_for: tuple[int, int, int] | None = None
    last_draw_at = 0.0
    force_redraw = True

    with terminal.raw_mode():
        while True:
            term = shutil.get_terminal_size((80, 24))
            now = time.monotonic()
            snapshot = ops.snapshot()
            frame_key = (snapshot.revision, term.columns, term.lines)
            if force_redraw or frame_key != drawn_for or now - last_draw_at >= timing.idle_redraw_seconds:
                ops.write_frame(ops.build_frame(snapshot, term.columns, term.lines))
                drawn_for = frame_key
                last_draw_at = now
                force_redraw = False

            try:
                key = read_key(stdin_fd, timeout_ms=timing.key_poll_ms)
            except KeyboardInterrupt:
                # Raw mode delivers Ctrl-C as a key; a stray SIGINT is ignored.
                continue
            if key == "":
                continue

            if key == "SHIFT_LEFT":
                force_redraw = ops.adjust_left_pane(term.columns, -PANE_RESIZE_STEP)
                continue
            if key == "SHIFT_RIGHT":
                force_redraw = ops.adjust_left_pane(term.columns, PANE_RESIZE_STEP)
                continue

            if ops.dispatch_key(key) is True:
                break
