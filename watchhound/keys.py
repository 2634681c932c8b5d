"""Keymap for the diff viewer: key tokens to controller commands."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .controller import COARSE_SCROLL_LINES, FINE_SCROLL_LINES, Controller

CONTROLS_HINT = (
    "Controls: ←→ Navigate files | ↑↓ Scroll | PgUp/PgDn/Space: Page | "
    "c: Clear history | t: History view | r: Refresh | q: Quit"
)
QUIT_KEYS = ("q", "Q", "ESC", "CTRL_C")


class CommandKeymap:
    """Table of key token to command.

    ``dispatch`` returns ``True`` when the command asks the loop to stop,
    ``False`` after any other command, and ``None`` for unbound keys.
    """

    def __init__(self) -> None:
        self._commands: dict[str, Callable[[], bool]] = {}

    def bind(self, keys: Iterable[str], command: Callable[[], object], *, stops: bool = False) -> CommandKeymap:
        def run() -> bool:
            command()
            return stops

        for key in keys:
            self._commands[key] = run
        return self

    def bound_keys(self) -> set[str]:
        return set(self._commands)

    def dispatch(self, key: str) -> bool | None:
        command = self._commands.get(key)
        if command is None:
            return None
        return command()


def _noop() -> None:
    return None


def build_command_registry(controller: Controller) -> CommandKeymap:
    """Bind the command surface to controller transitions."""
    return (
        CommandKeymap()
        .bind(QUIT_KEYS, _noop, stops=True)
        .bind(("r", "R"), controller.request_refresh)
        .bind(("LEFT", "h"), controller.previous_file)
        .bind(("RIGHT", "l"), controller.next_file)
        .bind(("UP", "k"), lambda: controller.scroll(-FINE_SCROLL_LINES))
        .bind(("DOWN", "j"), lambda: controller.scroll(FINE_SCROLL_LINES))
        .bind(("PAGE_UP", "u"), lambda: controller.scroll(-COARSE_SCROLL_LINES))
        .bind(("PAGE_DOWN", "d", " "), lambda: controller.scroll(COARSE_SCROLL_LINES))
        .bind(("c", "C"), controller.clear_history)
        .bind(("t", "T"), controller.toggle_history_view)
    )
