"""Composition root for the interactive watcher.

Builds the shared session, fetcher, debouncer, and controller, starts the
filesystem watcher, and hands control to the main loop. The terminal restore
hooks are installed before any background work starts.
"""

from __future__ import annotations

import logging
import os
import sys
from functools import partial
from pathlib import Path

from .config import Settings, save_left_pane_percent
from .controller import Controller, ControllerTiming
from .debounce import Debouncer
from .fetcher import ChangeFetcher
from .keys import build_command_registry
from .loop import RuntimeLoopCallbacks, RuntimeLoopTiming, run_main_loop
from .render import FrameComposer, RenderOptions, render_frame
from .state import SharedSession
from .terminal import TerminalController
from .watch import start_watch, stop_watch

logger = logging.getLogger(__name__)


def run_app(directory: Path, settings: Settings, colorize: bool = True) -> None:
    """Watch ``directory`` and run the two-pane diff view until the user quits."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        raise SystemExit("watchhound needs an interactive terminal on stdin and stdout.")

    root = directory.resolve()
    terminal = TerminalController(stdin_fd, stdout_fd)
    terminal.install_restore_hooks()

    session = SharedSession()
    controller = Controller(
        session,
        ChangeFetcher(root),
        Debouncer(settings.debounce_seconds),
        ControllerTiming(
            settle_seconds=settings.debounce_seconds,
            loading_delay_seconds=settings.loading_delay_seconds,
        ),
    )
    composer = FrameComposer(
        RenderOptions(
            left_pane_percent=settings.left_pane_percent,
            colorize=colorize,
            style=settings.style,
            recent_touch_seconds=settings.recent_touch_seconds,
        ),
        save_left_pane_percent,
    )
    registry = build_command_registry(controller)

    logger.info("starting watch session for %s", root)
    controller.start()
    observer = start_watch(root, controller.on_filesystem_event)
    try:
        run_main_loop(
            terminal,
            stdin_fd,
            RuntimeLoopTiming(),
            RuntimeLoopCallbacks(
                snapshot=session.snapshot,
                build_frame=composer.build,
                write_frame=partial(render_frame, stdout_fd=stdout_fd),
                dispatch_key=registry.dispatch,
                adjust_left_pane=composer.adjust_left_pane,
            ),
        )
    finally:
        stop_watch(observer)
        logger.info("watch session for %s ended", root)
