"""Scroll placement for freshly fetched diffs.

Pure functions over diff text. They pick the first line a reader should see:
the first addition for a new diff, or the first changed line relative to the
previously shown diff for the same file.
"""

from __future__ import annotations

LEADING_CONTEXT_LINES = 3
DIVERGENCE_CONTEXT_LINES = 2
TAIL_THRESHOLD_LINES = 10
TAIL_VISIBLE_LINES = 8


def split_diff_lines(text: str) -> list[str]:
    """Split diff text on newlines only.

    Form feeds and other separators that ``str.splitlines`` honours stay inside
    their line, so offsets match what the diff pane draws. A trailing carriage
    return is dropped from each line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _is_addition(line: str) -> bool:
    return line.startswith("+") and not line.startswith("+++")


def _is_removal(line: str) -> bool:
    return line.startswith("-") and not line.startswith("---")


def _is_content_change(line: str) -> bool:
    return _is_addition(line) or _is_removal(line)


def smart_scroll(diff_text: str) -> int:
    """Offset that shows the first added line with a little leading context.

    Without additions, long diffs scroll to their tail and short ones stay at
    the top.
    """
    lines = split_diff_lines(diff_text)
    for index, line in enumerate(lines):
        if _is_addition(line):
            return max(0, index - LEADING_CONTEXT_LINES)
    if len(lines) > TAIL_THRESHOLD_LINES:
        return len(lines) - TAIL_VISIBLE_LINES
    return 0


def first_divergence(current: list[str], previous: list[str]) -> int | None:
    """Index of the first differing line, or ``None`` when both are identical."""
    for index in range(max(len(current), len(previous))):
        if index >= len(current) or index >= len(previous):
            return index
        if current[index] != previous[index]:
            return index
    return None


def diff_against_previous(current: str, previous: str) -> int:
    """Offset of the first content change at or after where ``current`` departs from ``previous``.

    Hunk headers at the divergence point are skipped by the same scan. When no
    added/removed line follows the divergence, land just above it. Identical
    inputs fall back to ``smart_scroll``.
    """
    current_lines = split_diff_lines(current)
    divergence = first_divergence(current_lines, split_diff_lines(previous))
    if divergence is None:
        return smart_scroll(current)

    for index in range(divergence, len(current_lines)):
        if _is_content_change(current_lines[index]):
            return max(0, index - LEADING_CONTEXT_LINES)
    return max(0, divergence - DIVERGENCE_CONTEXT_LINES)


def resolve_scroll_offset(diff_text: str, previous_diff_text: str | None) -> int:
    """Choose between the two strategies based on whether a prior diff exists."""
    if previous_diff_text is None:
        return smart_scroll(diff_text)
    return diff_against_previous(diff_text, previous_diff_text)
