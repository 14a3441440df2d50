"""Exception types raised inside the Gridpad engine and services."""


class GridpadError(Exception):
    """Base class for all Gridpad errors."""


class PlacementError(GridpadError):
    """No empty slot is left in the page window an element must land in."""


class DiscoveryError(GridpadError):
    """An application root could not be scanned."""


class LayoutDocumentError(GridpadError):
    """A persisted layout document failed structural validation."""
