"""
Application folder watcher - Trigger a rescan when app roots change.

Uses Gio directory monitors on every existing root. Bursts of events
(a package install touches many files) are coalesced by a Debouncer, so
the rescan callback runs once after things settle.
"""

from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from gridpad.utils.timers import Debouncer

# Event types that can add, remove or rename an application entry
_RELEVANT_EVENTS = (
    "CREATED",
    "DELETED",
    "MOVED_IN",
    "MOVED_OUT",
    "RENAMED",
    "CHANGES_DONE_HINT",
    "ATTRIBUTE_CHANGED",
)


class AppFolderWatcher:
    """
    Watch application roots and call on_change (debounced).

    Args:
        roots: Directories to watch; missing ones are skipped
        on_change: Called once per burst of filesystem events
        scheduler: Timer source for the debounce
        debounce_ms: Quiet period before on_change runs
    """

    def __init__(self, roots: Iterable, on_change: Callable[[], object], scheduler, debounce_ms: int = 300):
        self.roots = [Path(r).expanduser() for r in roots]
        self.debouncer = Debouncer(on_change, scheduler, debounce_ms)
        self._monitors = []

    def start(self) -> None:
        from gi.repository import Gio, GLib

        relevant = {getattr(Gio.FileMonitorEvent, name) for name in _RELEVANT_EVENTS}

        for root in self.roots:
            if not root.is_dir():
                logger.debug(f"Not watching missing root {root}")
                continue
            try:
                monitor = Gio.File.new_for_path(str(root)).monitor_directory(
                    Gio.FileMonitorFlags.WATCH_MOVES, None
                )
            except GLib.Error as e:
                logger.warning(f"Cannot watch {root}: {e}")
                continue

            monitor.connect(
                "changed",
                lambda _m, _f, _o, event, relevant=relevant: self._on_event(event in relevant),
            )
            self._monitors.append(monitor)
            logger.debug(f"Watching {root}")

    def _on_event(self, relevant: bool) -> None:
        if relevant:
            self.debouncer.trigger()

    def stop(self) -> None:
        self.debouncer.cancel()
        for monitor in self._monitors:
            monitor.cancel()
        self._monitors = []
