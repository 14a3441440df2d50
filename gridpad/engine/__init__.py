# Gridpad Engine Package
"""
Layout/state engine for the Gridpad launcher grid.

Everything in this package is plain Python: no GTK imports, so it can be
driven from tests or any event loop.
"""

from .elements import Application, Folder, Empty, new_id
from .errors import GridpadError, PlacementError, DiscoveryError, LayoutDocumentError
from .layout import LayoutStore, Location
from .drop import DropResolver
from .hover import HoverIntentTimer, HoverState
from .sync import DiscoveredApp, reconcile, initial_layout

__all__ = [
    "Application",
    "Folder",
    "Empty",
    "new_id",
    "GridpadError",
    "PlacementError",
    "DiscoveryError",
    "LayoutDocumentError",
    "LayoutStore",
    "Location",
    "DropResolver",
    "HoverIntentTimer",
    "HoverState",
    "DiscoveredApp",
    "reconcile",
    "initial_layout",
]
