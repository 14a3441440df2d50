"""
Gridpad Launcher - Main Ignis Configuration

This file is the entry point for Ignis. It loads (or discovers) the
layout, starts watching the application folders and creates the grid
window.

Usage (with the package installed, e.g. pip install -e ".[ui]"):
  ignis init -c /path/to/gridpad/config.py
  ignis open-window gridpad
"""

import os

from ignis.app import IgnisApp
from loguru import logger

from gridpad.panels import GridPanel
from gridpad.services import get_launchpad_service
from gridpad.services.watcher import AppFolderWatcher
from gridpad.utils.timers import GLibScheduler

config_dir = os.path.dirname(os.path.realpath(__file__))

app = IgnisApp.get_default()

styles_dir = os.path.join(config_dir, "styles")
try:
    app.apply_css(os.path.join(styles_dir, "main.css"))
except Exception as e:
    # Ignis raises its own CSS errors; a missing stylesheet is not fatal
    logger.warning(f"Could not load main.css: {e}")

service = get_launchpad_service()
service.start()

# Catch up with installs made while the launcher was not running
service.rescan()

watcher = AppFolderWatcher(
    service.roots,
    on_change=service.rescan,
    scheduler=GLibScheduler(),
    debounce_ms=service.settings["discovery"]["debounce_ms"],
)
watcher.start()

grid_panel = GridPanel(service)
grid_window = grid_panel.create_window()
grid_window.panel = grid_panel

logger.info("Gridpad launcher initialized")
