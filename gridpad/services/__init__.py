# Gridpad Services Package
"""
Backend services for the Gridpad launcher.

Services handle discovery, data persistence, and system integration
around the layout engine.
"""

from .launchpad import LaunchpadService, get_launchpad_service

__all__ = ["LaunchpadService", "get_launchpad_service"]
