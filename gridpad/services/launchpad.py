"""
Launchpad Service - The layout engine wired to disk, timers and threads.

Owns one LayoutStore plus the collaborators around it:
  - DropResolver for every gesture
  - HoverIntentTimer for swap-vs-group arbitration
  - A store subscriber that saves each commit in the background
    (failures are logged and dropped) and emits "changed"
  - Discovery scans off the main thread, applied as one reconcile()
  - Search query, open folder and drag state for the panels

Panels call into this service and re-render on its "changed" signal.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Callable, Optional

from gi.repository import GObject
from ignis.base_service import BaseService
from loguru import logger

from gridpad.engine.drop import DropResolver
from gridpad.engine.elements import Application, Folder
from gridpad.engine.errors import DiscoveryError
from gridpad.engine.hover import HoverIntentTimer
from gridpad.engine.layout import LayoutStore
from gridpad.engine.sync import initial_layout, reconcile
from gridpad.services import discovery, persistence
from gridpad.utils.helpers import launch_app, load_settings, page_size
from gridpad.utils.timers import GLibScheduler


class LaunchpadService(BaseService):
    """
    Service coordinating the grid layout and everything that touches it.

    Args:
        settings: Settings dict (defaults to load_settings())
        scheduler: Timer source for the hover timer (GLibScheduler)
        threaded: Run scans and saves off the main thread. Tests pass
            False to make both synchronous.
        layout_path: Override for the saved layout location

    Signals:
        changed: Emitted after every committed layout change

    Methods:
        start(): Load the saved layout or build one from discovery
        rescan(): Reconcile with the installed applications
        begin_drag / drag_enter / drag_leave / drop / end_drag: Gestures
        delete_app / return_app / reorder_in_folder / rename_folder
    """

    __gtype_name__ = "LaunchpadService"

    __gsignals__ = {
        "changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, settings=None, scheduler=None, threaded: bool = True,
                 layout_path: Optional[Path] = None):
        super().__init__()

        self.settings = settings or load_settings()
        self.layout_path = layout_path
        self._threaded = threaded

        self.store = LayoutStore(page_size=page_size(self.settings))
        self.resolver = DropResolver(self.store)
        self.hover = HoverIntentTimer(
            self.resolver.resolve_drop,
            scheduler or GLibScheduler(),
            self.settings["hover"]["group_delay_ms"],
        )

        self.query = ""
        self.active_folder_id: Optional[str] = None
        self.dragging_id: Optional[str] = None

        self._save_executor = ThreadPoolExecutor(max_workers=1) if threaded else None
        self.store.subscribe(self._on_layout_changed)

    # Lifecycle

    @property
    def roots(self) -> list:
        return list(self.settings["discovery"]["roots"])

    @property
    def suffix(self) -> str:
        return self.settings["discovery"]["suffix"]

    def start(self) -> None:
        """Populate the store: saved layout first, fresh discovery otherwise."""
        saved = persistence.load_layout(self.layout_path)
        if saved is not None:
            self.store.replace(self._with_icons(saved))
            logger.info(f"Loaded saved layout ({len(self.store)} slots)")
            return

        try:
            found = discovery.scan(self.roots, self.suffix)
        except DiscoveryError as e:
            logger.warning(f"Initial scan failed, starting empty: {e}")
            found = set()
        self.store.replace(initial_layout(found, self.store.page_size))
        logger.info(f"Built layout from {len(found)} discovered applications")

    def shutdown(self) -> None:
        self.hover.reset()
        if self._save_executor is not None:
            self._save_executor.shutdown(wait=True)

    def _with_icons(self, elements) -> list:
        """Re-resolve icons for loaded elements (icons are never saved)."""
        def _app(app):
            return replace(app, icon=discovery.resolve_icon(app.path))

        resolved = []
        for element in elements:
            match element:
                case Application():
                    resolved.append(_app(element))
                case Folder(items=items):
                    resolved.append(element.with_items(_app(a) for a in items))
                case _:
                    resolved.append(element)
        return resolved

    # Persistence & notification

    def _on_layout_changed(self, layout) -> None:
        if self.active_folder_id is not None and self.store.locate(self.active_folder_id) is None:
            self.active_folder_id = None

        if self._save_executor is None:
            persistence.save_layout(layout, self.store.page_size, self.layout_path)
        else:
            self._save_executor.submit(
                persistence.save_layout, layout, self.store.page_size, self.layout_path
            )

        # Notify listeners (panels redraw)
        self.emit("changed")

    # Discovery

    def rescan(self) -> None:
        """Scan application roots and reconcile (scan runs off-thread)."""
        self._run_off_thread(self._scan_or_none, self.apply_scan)

    def _scan_or_none(self):
        try:
            return discovery.scan(self.roots, self.suffix)
        except DiscoveryError as e:
            logger.warning(f"Rescan failed, keeping current layout: {e}")
            return None

    def apply_scan(self, found) -> bool:
        if found is None:
            return False
        return reconcile(self.store, found)

    def _run_off_thread(self, work: Callable, done: Callable) -> None:
        if not self._threaded:
            done(work())
            return

        from gi.repository import GLib

        def _deliver(result):
            done(result)
            return False  # Don't repeat

        def _worker():
            result = work()
            GLib.idle_add(_deliver, result)

        threading.Thread(target=_worker, daemon=True).start()

    # Views

    def set_query(self, query: str) -> None:
        self.query = query or ""

    def pages(self) -> list:
        return self.store.pages(self.query)

    def clamp_page(self, current: int) -> int:
        """Keep a page index inside the visible page range."""
        count = len(self.pages())
        if current >= count:
            return max(count - 1, 0)
        return max(current, 0)

    def toggle_folder(self, folder_id: str) -> Optional[str]:
        self.active_folder_id = None if self.active_folder_id == folder_id else folder_id
        return self.active_folder_id

    def active_folder(self) -> Optional[Folder]:
        if self.active_folder_id is None:
            return None
        element = self.store.find(self.active_folder_id)
        return element if isinstance(element, Folder) else None

    def launch(self, app: Application) -> bool:
        return launch_app(app, self.settings["launcher"]["close_delay_ms"])

    # Gestures

    def swap(self, page: int, slot_a: int, slot_b: int) -> bool:
        return self.store.swap(page, slot_a, slot_b)

    def begin_drag(self, element_id: str) -> None:
        self.hover.reset()
        self.dragging_id = element_id

    def drag_enter(self, target_id: str) -> bool:
        if self.dragging_id is None:
            return False
        return self.hover.enter(self.dragging_id, target_id)

    def drag_leave(self, target_id: Optional[str] = None) -> None:
        self.hover.leave(target_id)

    def drop(self, dragged_id: str, target_id: str) -> bool:
        """Drop from the drag payload onto a grid slot."""
        changed = self.hover.drop(dragged_id, target_id)
        self.dragging_id = None
        return changed

    def drop_on_folder_backdrop(self, dragged_id: str) -> bool:
        """Drop outside the open folder's popover: return the app to the grid."""
        folder_id = self.active_folder_id
        self.dragging_id = None
        if folder_id is None:
            return False
        return self.resolver.return_app(dragged_id, folder_id)

    def end_drag(self) -> None:
        self.hover.reset()
        self.dragging_id = None

    def delete_app(self, element_id: str) -> bool:
        return self.resolver.delete_app(element_id)

    def return_app(self, app_id: str, folder_id: str) -> bool:
        return self.resolver.return_app(app_id, folder_id)

    def reorder_in_folder(self, folder_id: str, from_index: int, to_index: int) -> bool:
        return self.resolver.reorder_in_folder(folder_id, from_index, to_index)

    def rename_folder(self, folder_id: str, name: str) -> bool:
        return self.resolver.rename_folder(folder_id, name)


# Singleton accessor
_launchpad_service_instance = None


def get_launchpad_service() -> LaunchpadService:
    """
    Get the singleton LaunchpadService instance.

    Returns:
        LaunchpadService: The global instance
    """
    global _launchpad_service_instance
    if _launchpad_service_instance is None:
        _launchpad_service_instance = LaunchpadService()
    return _launchpad_service_instance
