"""
Timer helpers backed by the GLib main loop.

GLibScheduler is the production timer source for HoverIntentTimer and
Debouncer. GLib is imported on first use so the engine and its tests
never need GTK installed.
"""

from typing import Callable

from loguru import logger


class GLibScheduler:
    """call_later / cancel on top of GLib.timeout_add / GLib.source_remove."""

    def call_later(self, delay_ms: int, callback: Callable[[], object]) -> int:
        from gi.repository import GLib

        def _run():
            callback()
            return False  # Don't repeat

        return GLib.timeout_add(delay_ms, _run)

    def cancel(self, handle: int) -> None:
        from gi.repository import GLib

        # Removing an already-fired source only logs a GLib warning
        if GLib.MainContext.default().find_source_by_id(handle) is not None:
            GLib.source_remove(handle)


class Debouncer:
    """
    Coalesce bursts of calls into one, run after a quiet period.

    Each trigger() restarts the wait; only the last burst's callback runs.

    Args:
        callback: Function to run once things settle
        scheduler: Timer source (call_later / cancel)
        delay_ms: Quiet period in milliseconds
    """

    def __init__(self, callback: Callable[[], object], scheduler, delay_ms: int = 300):
        self._callback = callback
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self.delay_ms, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
            self._handle = None

    def _fire(self) -> bool:
        self._handle = None
        try:
            self._callback()
        except Exception:
            logger.exception("Debounced callback failed")
        return False
