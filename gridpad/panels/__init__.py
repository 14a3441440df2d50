# Gridpad Panels Package
"""
Panel implementations for the launcher grid.

Each panel is responsible for its own UI and maps gestures onto the
LaunchpadService.
"""

from .folder import FolderView
from .grid import GridPanel

__all__ = ["GridPanel", "FolderView"]
