"""
Helper utilities for the Gridpad launcher.

Provides common functions used across the services and panels:
- Settings loading (TOML, deep-merged over defaults)
- XDG config/data locations
- App launching and launcher window management
"""

import json
import os
import subprocess
from pathlib import Path
from typing import Any, Dict

import toml
from loguru import logger


DEFAULT_SETTINGS: Dict[str, Any] = {
    "launcher": {
        "close_delay_ms": 300,
    },
    "grid": {
        "columns": 7,
        "rows": 5,
    },
    "hover": {
        "group_delay_ms": 1500,
    },
    "discovery": {
        "roots": [
            "/usr/share/applications",
            "~/.local/share/applications",
        ],
        "suffix": ".desktop",
        "debounce_ms": 300,
    },
}


def _xdg_dir(env_var: str, fallback: str) -> Path:
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / fallback
    return root / "gridpad"


def config_dir() -> Path:
    """~/.config/gridpad (or $XDG_CONFIG_HOME/gridpad)."""
    return _xdg_dir("XDG_CONFIG_HOME", ".config")


def data_dir() -> Path:
    """~/.local/share/gridpad (or $XDG_DATA_HOME/gridpad)."""
    return _xdg_dir("XDG_DATA_HOME", ".local/share")


def _settings_path() -> Path:
    return config_dir() / "settings.toml"


def load_settings() -> Dict[str, Any]:
    """
    Load launcher settings from TOML file.

    Returns:
        Dictionary containing settings with defaults applied

    Example settings.toml:
        [grid]
        columns = 8
        rows = 4

        [hover]
        group_delay_ms = 1200

        [discovery]
        roots = ["/Applications", "~/Applications"]
        suffix = ".app"
    """
    settings_path = _settings_path()

    if not settings_path.exists():
        logger.debug(f"Settings file not found at {settings_path}, using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}")
        return _deep_merge(DEFAULT_SETTINGS, {})

    return _deep_merge(DEFAULT_SETTINGS, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence, inputs untouched)
    """
    result = {}
    for key, value in base.items():
        result[key] = _deep_merge(value, {}) if isinstance(value, dict) else value

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def page_size(settings: Dict[str, Any]) -> int:
    """Slots per page from the grid settings (columns x rows)."""
    grid = settings["grid"]
    return int(grid["columns"]) * int(grid["rows"])


def launch_command(path: str) -> list[str]:
    """Command line that opens an application entry."""
    if path.endswith(".desktop"):
        return ["gio", "launch", path]
    return ["xdg-open", path]


def launch_app(app, close_delay_ms: int = 300) -> bool:
    """
    Launch an application and auto-close the launcher.

    Args:
        app: Application element (only its path is used)
        close_delay_ms: Delay in milliseconds before closing launcher

    Returns:
        True if the process was started
    """
    from gi.repository import GLib

    try:
        subprocess.Popen(
            launch_command(app.path),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError:
        logger.exception(f"Failed to launch {app.name} ({app.path})")
        return False

    logger.debug(f"Launched {app.name}")
    GLib.timeout_add(close_delay_ms, _close_launcher_callback)
    return True


def _close_launcher_callback() -> bool:
    """
    Callback for GLib.timeout_add to close launcher.

    Returns:
        False to prevent timeout from repeating
    """
    close_launcher()
    return False  # Don't repeat


def close_launcher():
    """Hide every window whose namespace starts with "gridpad"."""
    from ignis.app import IgnisApp

    app = IgnisApp.get_default()
    for window in app.get_windows():
        if window.namespace and window.namespace.startswith("gridpad"):
            window.set_visible(False)


def get_focused_monitor() -> int:
    """
    Get the ID of the currently focused monitor in Hyprland.

    Returns:
        Monitor ID (int), defaults to 0 if detection fails
    """
    try:
        result = subprocess.run(
            ['hyprctl', 'monitors', '-j'],
            capture_output=True,
            text=True,
            timeout=1
        )
        if result.returncode == 0:
            for monitor in json.loads(result.stdout):
                if monitor.get('focused', False):
                    return monitor['id']
    except (OSError, subprocess.TimeoutExpired, ValueError):
        pass

    # Fallback to monitor 0
    return 0
