from __future__ import annotations

import unittest
from unittest import mock

from watchhound.controller import COARSE_SCROLL_LINES, FINE_SCROLL_LINES
from watchhound.input import UNKNOWN_KEY
from watchhound.keys import CommandKeymap, build_command_registry


class CommandKeymapTests(unittest.TestCase):
    def test_dispatch_returns_none_for_unbound_key(self) -> None:
        calls: list[str] = []
        keymap = CommandKeymap().bind(("x",), lambda: calls.append("x"))
        self.assertIs(keymap.dispatch("x"), False)
        self.assertIsNone(keymap.dispatch("y"))
        self.assertEqual(calls, ["x"])

    def test_stopping_binding_returns_true(self) -> None:
        keymap = CommandKeymap().bind(("q",), lambda: None, stops=True)
        self.assertIs(keymap.dispatch("q"), True)


class CommandRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = mock.Mock()
        self.registry = build_command_registry(self.controller)

    def test_quit_keys(self) -> None:
        for key in ("q", "ESC", "CTRL_C"):
            self.assertIs(self.registry.dispatch(key), True)

    def test_unrecognized_escape_sequences_do_not_quit(self) -> None:
        self.assertIsNone(self.registry.dispatch(UNKNOWN_KEY))
        self.assertNotIn(UNKNOWN_KEY, self.registry.bound_keys())
        self.assertEqual(self.controller.method_calls, [])

    def test_navigation_and_refresh(self) -> None:
        self.assertIs(self.registry.dispatch("RIGHT"), False)
        self.registry.dispatch("l")
        self.registry.dispatch("LEFT")
        self.registry.dispatch("r")
        self.assertEqual(self.controller.next_file.call_count, 2)
        self.controller.previous_file.assert_called_once()
        self.controller.request_refresh.assert_called_once()

    def test_scroll_keys(self) -> None:
        for key in ("UP", "DOWN", "PAGE_UP", " "):
            self.registry.dispatch(key)
        self.assertEqual(
            [call.args[0] for call in self.controller.scroll.call_args_list],
            [-FINE_SCROLL_LINES, FINE_SCROLL_LINES, -COARSE_SCROLL_LINES, COARSE_SCROLL_LINES],
        )

    def test_history_keys(self) -> None:
        self.registry.dispatch("c")
        self.registry.dispatch("t")
        self.controller.clear_history.assert_called_once()
        self.controller.toggle_history_view.assert_called_once()


if __name__ == "__main__":
    unittest.main()
