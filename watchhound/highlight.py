"""Diff sanitization and syntax highlighting.

Neutralizes terminal control bytes in git output, then colors diff text with
Pygments' diff lexer. Formatters are cached per style name.
"""

from __future__ import annotations

import re

from pygments import highlight as pygments_highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import DiffLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .scroll import split_diff_lines

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_DIFF_LEXER = DiffLexer(stripnl=False, ensurenl=True)
_FORMATTERS: dict[str, Terminal256Formatter] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=normalize_style(style))
        _FORMATTERS[style] = formatter
    return formatter


def colorize_diff(diff_text: str, style: str = DEFAULT_STYLE) -> str:
    """Return ``diff_text`` with ANSI colors; line count is preserved."""
    if not diff_text:
        return diff_text
    rendered = pygments_highlight(diff_text, _DIFF_LEXER, _formatter_for_style(style))
    # The formatter always terminates output with a newline.
    if not diff_text.endswith("\n") and rendered.endswith("\n"):
        rendered = rendered[:-1]
    if len(split_diff_lines(rendered)) != len(split_diff_lines(diff_text)):
        return diff_text
    return rendered
