from __future__ import annotations

import unittest
from pathlib import Path
from unittest import mock

from watchhound import app
from watchhound.config import Settings


class RunAppTests(unittest.TestCase):
    def test_requires_interactive_terminal(self) -> None:
        with mock.patch("watchhound.app.os.isatty", return_value=False), mock.patch(
            "watchhound.app.sys"
        ) as sys_mock, mock.patch("watchhound.app.TerminalController") as terminal_cls:
            sys_mock.stdin.fileno.return_value = 0
            sys_mock.stdout.fileno.return_value = 1
            with self.assertRaises(SystemExit):
                app.run_app(Path("/repo"), Settings())
        terminal_cls.assert_not_called()

    def test_wires_watcher_and_stops_it_after_loop(self) -> None:
        order: list[str] = []
        with mock.patch("watchhound.app.os.isatty", return_value=True), mock.patch(
            "watchhound.app.sys"
        ) as sys_mock, mock.patch("watchhound.app.TerminalController") as terminal_cls, mock.patch(
            "watchhound.app.Controller"
        ) as controller_cls, mock.patch(
            "watchhound.app.start_watch", return_value="observer"
        ) as start_mock, mock.patch(
            "watchhound.app.stop_watch", side_effect=lambda observer: order.append("stop")
        ) as stop_mock, mock.patch(
            "watchhound.app.run_main_loop", side_effect=RuntimeError("loop died")
        ):
            sys_mock.stdin.fileno.return_value = 0
            sys_mock.stdout.fileno.return_value = 1
            terminal_cls.return_value.install_restore_hooks.side_effect = lambda: order.append("hooks")
            controller_cls.return_value.start.side_effect = lambda: order.append("start")

            with self.assertRaises(RuntimeError):
                app.run_app(Path("/repo"), Settings(debounce_seconds=0.5, loading_delay_seconds=0.2))

        self.assertEqual(order, ["hooks", "start", "stop"])
        timing = controller_cls.call_args.args[3]
        self.assertEqual(timing.settle_seconds, 0.5)
        self.assertEqual(timing.loading_delay_seconds, 0.2)
        start_mock.assert_called_once_with(Path("/repo").resolve(), controller_cls.return_value.on_filesystem_event)
        stop_mock.assert_called_once_with("observer")


if __name__ == "__main__":
    unittest.main()
