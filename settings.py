"""JSON-based settings persistence for the mini date picker."""

from __future__ import annotations

import json
import logging
import os

from selection import SelectionMode

logger = logging.getLogger(__name__)

_DEFAULT_PATH = os.path.join(os.path.expanduser("~"), ".mini-date-picker-settings.json")
_ENV_VAR = "MINI_DATE_PICKER_SETTINGS"

_DEFAULTS = {
    "selection_mode": SelectionMode.SINGLE.value,
    "allows_repetition": False,
    "first_weekday": 0,
    "window_width": None,
    "window_height": None,
    "grid_cols": None,
    "grid_rows": None,
}

_MODES = {m.value for m in SelectionMode}


def settings_path(path: str | None = None) -> str:
    """Explicit path, else $MINI_DATE_PICKER_SETTINGS, else a file in $HOME."""
    return path or os.environ.get(_ENV_VAR) or _DEFAULT_PATH


def load_settings(path: str | None = None) -> dict:
    """Load settings from disk, returning defaults for missing keys."""
    settings = dict(_DEFAULTS)
    target = settings_path(path)
    try:
        with open(target, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except FileNotFoundError:
        logger.debug("No settings file at %s, using defaults", target)
        return settings
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", target, exc)
        return settings
    if not isinstance(stored, dict):
        logger.warning("Ignoring settings file %s: top level is not an object", target)
        return settings

    if stored.get("selection_mode") in _MODES:
        settings["selection_mode"] = stored["selection_mode"]
    if isinstance(stored.get("allows_repetition"), bool):
        settings["allows_repetition"] = stored["allows_repetition"]
    fw = stored.get("first_weekday")
    if isinstance(fw, int) and not isinstance(fw, bool) and 0 <= fw <= 6:
        settings["first_weekday"] = fw
    for key in ("window_width", "window_height", "grid_cols", "grid_rows"):
        value = stored.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            settings[key] = value
    return settings


def save_settings(settings: dict, path: str | None = None) -> None:
    """Persist settings to disk."""
    target = settings_path(path)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)
    logger.debug("Saved settings to %s", target)


def selection_mode(settings: dict) -> SelectionMode:
    return SelectionMode(settings.get("selection_mode", _DEFAULTS["selection_mode"]))
