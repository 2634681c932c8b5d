"""Rendering surface for the two-pane diff view.

Frames are composed as plain row strings from a ``SessionSnapshot`` and
written in one ``os.write`` call. Composition never touches shared state.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from .ansi import clip_columns, display_width, fit_columns, slice_columns, wrap_text_lines
from .highlight import DEFAULT_STYLE, colorize_diff, sanitize_terminal_text
from .keys import CONTROLS_HINT
from .scroll import split_diff_lines
from .state import VIEW_MODE_HISTORY, SessionSnapshot

STATUS_PANE_TITLE = "Git Status"
DIFF_PANE_TITLE = "Git Diff"
EMPTY_STATUS_TEXT = "No changes detected"
EMPTY_DIFF_TEXT = "No changes to show"
ERROR_TITLE = "Error"
ERROR_WIDTH_PERCENT = 60
ERROR_HEIGHT_PERCENT = 20
MIN_PANE_WIDTH = 12
CURRENT_FILE_MARKER = "▶"
RECENT_FILE_MARKER = "●"
RESET = "\033[0m"


@dataclass(frozen=True)
class RenderOptions:
    left_pane_percent: float = 40.0
    colorize: bool = True
    style: str = DEFAULT_STYLE
    recent_touch_seconds: float = 10.0


def clamp_left_width(total_width: int, left_width: int) -> int:
    if total_width < MIN_PANE_WIDTH * 2:
        return max(1, total_width // 2)
    return max(MIN_PANE_WIDTH, min(left_width, total_width - MIN_PANE_WIDTH))


def left_width_for(total_width: int, percent: float) -> int:
    return clamp_left_width(total_width, int(round(total_width * percent / 100.0)))


def diff_pane_title(snapshot: SessionSnapshot) -> str:
    current_file = snapshot.current_file
    if current_file is None:
        title = DIFF_PANE_TITLE
    else:
        title = (
            f"{DIFF_PANE_TITLE} - {current_file} "
            f"({snapshot.current_file_index + 1}/{len(snapshot.changed_files)})"
        )
    if snapshot.view_mode == VIEW_MODE_HISTORY:
        title += f" [history: {snapshot.history_length}]"
    if snapshot.loading:
        title += " (loading)"
    return title


def status_line_text(snapshot: SessionSnapshot) -> str:
    if snapshot.last_update is None:
        return CONTROLS_HINT
    return f"{CONTROLS_HINT} | Last updated: {snapshot.last_update:%H:%M:%S}"


def recently_touched(snapshot: SessionSnapshot, now: datetime, window_seconds: float) -> set[str]:
    touched: set[str] = set()
    for path, modified in snapshot.file_metadata.items():
        if (now - modified).total_seconds() <= window_seconds:
            touched.add(path)
    return touched


def summary_pane_lines(snapshot: SessionSnapshot, width: int, now: datetime, recent_touch_seconds: float) -> list[str]:
    summary = sanitize_terminal_text(snapshot.status_summary)
    lines = wrap_text_lines(summary if summary.strip() else EMPTY_STATUS_TEXT, width)
    if not snapshot.changed_files:
        return lines

    touched = recently_touched(snapshot, now, recent_touch_seconds)
    lines.extend(["", "Files:"])
    for index, path in enumerate(snapshot.changed_files):
        marker = CURRENT_FILE_MARKER if index == snapshot.current_file_index else " "
        flag = RECENT_FILE_MARKER if path in touched else " "
        entry = f"{marker}{flag} {sanitize_terminal_text(path)}"
        if index == snapshot.current_file_index:
            entry = f"\033[1m{entry}{RESET}"
        lines.append(entry)
    return lines


def diff_pane_lines(snapshot: SessionSnapshot, options: RenderOptions) -> list[str]:
    diff_text = sanitize_terminal_text(snapshot.current_diff)
    if not diff_text:
        return [EMPTY_DIFF_TEXT]
    if options.colorize:
        diff_text = colorize_diff(diff_text, options.style)
    return split_diff_lines(diff_text)


def _box(title: str, body: list[str], width: int, height: int) -> list[str]:
    """Draw a bordered box of exactly ``width`` x ``height`` cells."""
    if height <= 0 or width <= 0:
        return []
    if width < 2 or height < 2:
        return [" " * width for _ in range(height)]
    inner = width - 2
    label = clip_columns(f" {title} ", inner)
    top = f"┌{label}{'─' * max(0, inner - display_width(label))}┐"
    rows = [top]
    for row in range(height - 2):
        text = body[row] if row < len(body) else ""
        rows.append(f"│{fit_columns(text, inner)}│")
    rows.append(f"└{'─' * inner}┘")
    return rows


def _overlay(rows: list[str], box: list[str], x: int, y: int, box_width: int, total_width: int) -> None:
    for offset, box_row in enumerate(box):
        row_index = y + offset
        if not 0 <= row_index < len(rows):
            continue
        base = rows[row_index]
        left = clip_columns(base, x)
        right = slice_columns(base, x + box_width, max(0, total_width - x - box_width))
        rows[row_index] = f"{left}{RESET}\033[31m{box_row}{RESET}{right}"


def build_frame(
    snapshot: SessionSnapshot,
    width: int,
    height: int,
    options: RenderOptions,
    now: datetime | None = None,
) -> list[str]:
    """Compose every screen row for ``snapshot`` at the given terminal size.

    The last row is the status line; the rest is split into the summary pane
    and the diff pane, scrolled by ``snapshot.scroll_offset``. An error box is
    drawn over the middle of the screen when an error message is present.
    """
    now = now if now is not None else datetime.now()
    width = max(1, width)
    height = max(1, height)
    status = f"\033[7m{fit_columns(status_line_text(snapshot), width)}{RESET}"
    content_rows = height - 1
    if content_rows < 3:
        return [status]

    left_width = left_width_for(width, options.left_pane_percent)
    right_width = width - left_width
    left_box = _box(
        STATUS_PANE_TITLE,
        summary_pane_lines(snapshot, left_width - 2, now, options.recent_touch_seconds),
        left_width,
        content_rows,
    )
    diff_lines = diff_pane_lines(snapshot, options)
    right_box = _box(
        diff_pane_title(snapshot),
        diff_lines[snapshot.scroll_offset:],
        right_width,
        content_rows,
    )
    rows = [f"{left}{right}" for left, right in zip(left_box, right_box)]

    if snapshot.error_message:
        box_width = max(MIN_PANE_WIDTH, width * ERROR_WIDTH_PERCENT // 100)
        box_height = max(3, content_rows * ERROR_HEIGHT_PERCENT // 100)
        box_width = min(box_width, width)
        box_height = min(box_height, content_rows)
        error_lines = wrap_text_lines(sanitize_terminal_text(snapshot.error_message), box_width - 2)
        error_box = _box(ERROR_TITLE, error_lines, box_width, box_height)
        _overlay(
            rows,
            error_box,
            (width - box_width) // 2,
            (content_rows - box_height) // 2,
            box_width,
            width,
        )

    rows.append(status)
    return rows


def render_frame(rows: list[str], stdout_fd: int) -> None:
    """Home the cursor and write all rows in one call."""
    out = ["\033[H\033[J", "\r\n".join(rows)]
    os.write(stdout_fd, "".join(out).encode("utf-8", errors="replace"))


class FrameComposer:
    """Holds render options that can change at runtime (pane split)."""

    def __init__(self, options: RenderOptions, save_left_pane_percent: Callable[[int, int], None]) -> None:
        self.options = options
        self._save_left_pane_percent = save_left_pane_percent

    def build(self, snapshot: SessionSnapshot, width: int, height: int) -> list[str]:
        return build_frame(snapshot, width, height, self.options)

    def adjust_left_pane(self, term_columns: int, delta: int) -> bool:
        """Resize the summary pane by ``delta`` columns and persist the split."""
        current = left_width_for(term_columns, self.options.left_pane_percent)
        resized = clamp_left_width(term_columns, current + delta)
        if resized == current:
            return False
        self.options = replace(self.options, left_pane_percent=resized * 100.0 / term_columns)
        self._save_left_pane_percent(term_columns, resized)
        return True
