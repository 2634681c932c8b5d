"""Column arithmetic for lines that carry ANSI color codes.

The panes are fixed-width boxes, so every cut, pad and wrap works in terminal
cells rather than characters. Escape sequences take no cells and are kept.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8

# One escape sequence, or else one character.
_TOKEN_RE = re.compile(f"{ANSI_ESCAPE_RE.pattern}|.", re.DOTALL)


def _tokens(text: str) -> Iterator[str]:
    for match in _TOKEN_RE.finditer(text):
        yield match.group(0)


def _is_escape(token: str) -> bool:
    return len(token) > 1


def cell_width(ch: str, column: int) -> int:
    """Cells taken by ``ch`` when drawn at ``column``."""
    if ch == "\t":
        return TAB_STOP - (column % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def _drawn(token: str, width: int) -> str:
    return " " * width if token == "\t" else token


def display_width(text: str) -> int:
    column = 0
    for token in _tokens(text):
        if not _is_escape(token):
            column += cell_width(token, column)
    return column


def slice_columns(text: str, start: int, count: int) -> str:
    """Cut ``count`` cells out of ``text`` beginning at cell ``start``.

    Escapes inside the window are copied through. The last SGR code seen
    before the window is re-emitted ahead of the first visible cell. A wide
    character cut in half by ``start`` shows as blanks.
    """
    if count <= 0 or not text:
        return ""
    start = max(0, start)

    kept: list[str] = []
    carried = ""
    column = 0
    used = 0
    for token in _tokens(text):
        if used >= count:
            break
        if _is_escape(token):
            if column >= start:
                kept.append(token)
                carried = ""
            elif token.endswith("m"):
                carried = token
            continue

        width = cell_width(token, column)
        if column < start:
            column += width
            if column > start:
                overhang = min(column - start, count)
                kept.append(" " * overhang)
                used += overhang
            continue
        if used + width > count:
            break
        if carried:
            kept.append(carried)
            carried = ""
        kept.append(_drawn(token, width))
        column += width
        used += width
    return "".join(kept)


def clip_columns(text: str, count: int) -> str:
    return slice_columns(text, 0, count)


def fit_columns(text: str, width: int) -> str:
    """Exactly ``width`` cells: clipped, blank-padded, and reset if colored."""
    clipped = clip_columns(text, width)
    padding = " " * max(0, width - display_width(clipped))
    if "\x1b" in clipped:
        return f"{clipped}\x1b[0m{padding}"
    return f"{clipped}{padding}"


def wrap_columns(text: str, width: int) -> list[str]:
    """Break one styled line into rows of at most ``width`` cells."""
    if width <= 0 or not text:
        return [""]

    rows: list[str] = []
    current: list[str] = []
    column = 0
    for token in _tokens(text):
        if _is_escape(token):
            current.append(token)
            continue
        cells = cell_width(token, column)
        if current and column + cells > width:
            rows.append("".join(current))
            current = []
            column = 0
            cells = cell_width(token, column)
        current.append(_drawn(token, cells))
        column += cells
    rows.append("".join(current))
    return rows


def wrap_text_lines(text: str, width: int) -> list[str]:
    rows: list[str] = []
    for line in text.splitlines():
        rows.extend(wrap_columns(line, width))
    return rows
