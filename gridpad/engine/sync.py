"""
Discovery sync - Reconcile the layout with a fresh scan of installed apps.

Apps that vanished from disk are removed (top level and folders alike),
newly installed ones are appended in name order, and everything the user
arranged by hand stays where it was.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from loguru import logger

from .elements import Application, Empty, Folder, is_empty
from .layout import LayoutStore, pad_to_page


@dataclass(frozen=True)
class DiscoveredApp:
    """One application entry found by a filesystem scan."""
    name: str
    path: str
    icon: Optional[str] = field(default=None, compare=False)

    def to_application(self) -> Application:
        return Application(name=self.name, path=self.path, icon=self.icon)


def _by_name(app) -> tuple[str, str]:
    # Path breaks ties so same-named apps keep a stable order
    return app.name.lower(), app.path


def initial_layout(scanned: Iterable[DiscoveredApp], page_size: int) -> list:
    """Build a first-run layout: every app sorted by name, padded to a page."""
    items = [app.to_application() for app in sorted(scanned, key=_by_name)]
    pad_to_page(items, page_size)
    return items


def reconcile(store: LayoutStore, scanned: Iterable[DiscoveredApp]) -> bool:
    """
    Apply a scan result to the store in a single transaction.

    Args:
        store: Layout to update
        scanned: Every application currently installed

    Returns:
        True if anything was added or removed
    """
    scanned = list(scanned)
    valid_paths = {app.path for app in scanned}
    known = store.known_paths()
    removed = known - valid_paths
    newly = sorted(
        {app.path: app for app in scanned if app.path not in known}.values(),
        key=_by_name,
    )

    if not removed and not newly:
        return False

    with store.transaction() as items:
        kept = []
        for element in items:
            match element:
                case Application(path=path) if path in removed:
                    continue
                case Folder(items=apps) if any(a.path in removed for a in apps):
                    survivors = [a for a in apps if a.path not in removed]
                    # Keep the slot so nothing after it shifts
                    kept.append(element.with_items(survivors) if survivors else Empty())
                case _:
                    kept.append(element)

        if newly:
            kept = [e for e in kept if not is_empty(e)]
            kept.extend(app.to_application() for app in newly)

        items[:] = kept

    logger.info(f"Rescan: {len(removed)} removed, {len(newly)} added")
    return True
