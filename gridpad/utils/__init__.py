# Gridpad Utilities Package
"""
Shared utility functions and helpers for the Gridpad launcher.
"""

from .helpers import launch_app, close_launcher, load_settings
from .timers import GLibScheduler, Debouncer

__all__ = ["launch_app", "close_launcher", "load_settings", "GLibScheduler", "Debouncer"]
