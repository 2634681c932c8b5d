"""Persistent JSON config helpers.

Stores the debounce window, loading delay, pane split, and diff color style.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .debounce import DEFAULT_DEBOUNCE_SECONDS
from .highlight import DEFAULT_STYLE

APP_NAME = "watchhound"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_LOADING_DELAY_SECONDS = 0.1
DEFAULT_RECENT_TOUCH_SECONDS = 10.0
DEFAULT_LEFT_PANE_PERCENT = 40.0


@dataclass(frozen=True)
class Settings:
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    loading_delay_seconds: float = DEFAULT_LOADING_DELAY_SECONDS
    recent_touch_seconds: float = DEFAULT_RECENT_TOUCH_SECONDS
    left_pane_percent: float = DEFAULT_LEFT_PANE_PERCENT
    style: str = DEFAULT_STYLE


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def _positive_float(value: object) -> float | None:
    """Accept ints/floats above zero; booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def _nonnegative_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value < 0:
        return None
    return float(value)


def _load_percent(value: object) -> float | None:
    """Read a percentage constrained to the open interval (0, 100)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0 or value >= 100:
        return None
    return float(value)


def load_settings() -> Settings:
    """Build ``Settings`` from config, keeping defaults for invalid keys."""
    data = load_config()
    defaults = Settings()
    style = data.get("style")
    loading_delay = _nonnegative_float(data.get("loading_delay_seconds"))
    return Settings(
        debounce_seconds=_positive_float(data.get("debounce_seconds")) or defaults.debounce_seconds,
        loading_delay_seconds=loading_delay if loading_delay is not None else defaults.loading_delay_seconds,
        recent_touch_seconds=_positive_float(data.get("recent_touch_seconds")) or defaults.recent_touch_seconds,
        left_pane_percent=_load_percent(data.get("left_pane_percent")) or defaults.left_pane_percent,
        style=style.strip() if isinstance(style, str) and style.strip() else defaults.style,
    )


def save_left_pane_percent(total_width: int, left_width: int) -> None:
    """Store the summary-pane width as a percentage clamped to ``[1, 99]``."""
    if total_width <= 0:
        return
    percent = max(1.0, min(99.0, (left_width / total_width) * 100.0))
    config = load_config()
    config["left_pane_percent"] = round(percent, 2)
    save_config(config)
