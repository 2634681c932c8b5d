"""Command-line front door for watchhound.

Parses CLI options, checks that the target is a git working tree, configures
logging, and dispatches into the interactive runtime.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from .app import run_app
from .config import load_settings
from .logging_config import setup_logging
from .vcs import VCS_MARKER, find_vcs_marker

logger = logging.getLogger(__name__)


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watchhound",
        description="Watch a git working tree and show live diffs of changed files.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Repository root to watch. Defaults to the current directory.",
    )
    parser.add_argument(
        "--debounce",
        type=_positive_float,
        default=None,
        help="Seconds to ignore repeat events for the same path (default from config, else 1.0).",
    )
    parser.add_argument("--style", default=None, help="Pygments style name for diff coloring.")
    parser.add_argument("--no-color", action="store_true", help="Show diffs without syntax coloring.")
    parser.add_argument("--log-level", default=None, help="Log level (default: $WATCHHOUND_LOG_LEVEL or WARNING).")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs to this file.")
    return parser


def resolve_directory(raw: str | None, default_path: Path | None = None) -> Path:
    """Return the directory to watch or exit with a remediation hint."""
    if raw is not None:
        directory = Path(raw)
    elif default_path is not None:
        directory = default_path
    else:
        directory = Path.cwd()
    if not directory.exists():
        raise SystemExit(f"Path not found: {directory}")
    if not directory.is_dir():
        raise SystemExit(f"Not a directory: {directory}")
    if find_vcs_marker(directory) is None:
        raise SystemExit(
            f"No {VCS_MARKER} found in {directory}. "
            "Pass the repository root, or run `git init` there first."
        )
    return directory


def main(argv: list[str] | None = None, default_path: Path | None = None) -> None:
    """Parse CLI arguments and launch the watcher.

    ``default_path`` is primarily for tests; when omitted the current working
    directory is used.
    """
    args = build_parser().parse_args(argv)
    directory = resolve_directory(args.directory, default_path)

    log_path = setup_logging(args.log_level, args.log_file)
    logger.debug("logging to %s", log_path)

    settings = load_settings()
    if args.debounce is not None:
        settings = replace(settings, debounce_seconds=args.debounce)
    if args.style:
        settings = replace(settings, style=args.style)

    run_app(directory, settings, colorize=not args.no_color)


if __name__ == "__main__":
    main()
