"""Tests for terminal mode lifecycle.

Verifies raw-mode lifecycle safety and restore hooks for abnormal exits.
"""

from __future__ import annotations

import signal
import termios
import unittest
from unittest import mock

from watchhound.terminal import TerminalController


def _controller() -> TerminalController:
    with mock.patch("watchhound.terminal.termios.tcgetattr", return_value=[1, 2, 3]):
        return TerminalController(stdin_fd=0, stdout_fd=1)


class TerminalBehaviorTests(unittest.TestCase):
    def test_enable_and_disable_tui_mode_use_alternate_screen_sequences(self) -> None:
        controller = _controller()
        with mock.patch("watchhound.terminal.tty.setraw") as setraw_mock, mock.patch(
            "watchhound.terminal.os.write"
        ) as write_mock, mock.patch("watchhound.terminal.termios.tcsetattr") as setattr_mock:
            controller.enable_tui_mode()
            self.assertTrue(controller.tui_enabled)
            controller.disable_tui_mode()

        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        self.assertEqual(write_mock.call_args_list[0].args, (1, b"\x1b[?1049h\x1b[?25l"))
        self.assertEqual(write_mock.call_args_list[1].args, (1, b"\x1b[?25h\x1b[?1049l"))
        setattr_mock.assert_called_once_with(0, termios.TCSAFLUSH, [1, 2, 3])
        self.assertFalse(controller.tui_enabled)

    def test_disable_is_idempotent(self) -> None:
        controller = _controller()
        with mock.patch("watchhound.terminal.tty.setraw"), mock.patch(
            "watchhound.terminal.os.write"
        ), mock.patch("watchhound.terminal.termios.tcsetattr") as setattr_mock:
            controller.disable_tui_mode()
            controller.enable_tui_mode()
            controller.disable_tui_mode()
            controller.disable_tui_mode()

        setattr_mock.assert_called_once()

    def test_tty_is_restored_even_when_write_fails(self) -> None:
        controller = _controller()
        with mock.patch("watchhound.terminal.tty.setraw"), mock.patch(
            "watchhound.terminal.os.write", side_effect=[None, OSError("closed")]
        ), mock.patch("watchhound.terminal.termios.tcsetattr") as setattr_mock:
            controller.enable_tui_mode()
            with self.assertRaises(OSError):
                controller.disable_tui_mode()

        setattr_mock.assert_called_once()

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        controller = _controller()
        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        disable_mock.assert_called_once()

    def test_install_restore_hooks_registers_exit_paths_once(self) -> None:
        controller = _controller()
        with mock.patch("watchhound.terminal.atexit.register") as register_mock, mock.patch(
            "watchhound.terminal.signal.signal"
        ) as signal_mock, mock.patch("watchhound.terminal.sys") as sys_mock:
            original_hook = mock.Mock()
            sys_mock.excepthook = original_hook
            controller.install_restore_hooks()
            controller.install_restore_hooks()

            register_mock.assert_called_once_with(controller.disable_tui_mode)
            hooked_signals = [call.args[0] for call in signal_mock.call_args_list]
            self.assertEqual(hooked_signals, [signal.SIGTERM, signal.SIGHUP])

            with mock.patch.object(controller, "disable_tui_mode") as disable_mock:
                sys_mock.excepthook(ValueError, ValueError("x"), None)
                disable_mock.assert_called_once()
            original_hook.assert_called_once()

            handler = signal_mock.call_args_list[0].args[1]
            with mock.patch.object(controller, "disable_tui_mode") as disable_mock:
                with self.assertRaises(SystemExit) as ctx:
                    handler(signal.SIGTERM, None)
                disable_mock.assert_called_once()
            self.assertEqual(ctx.exception.code, 128 + signal.SIGTERM)


if __name__ == "__main__":
    unittest.main()
