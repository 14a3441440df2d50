"""
Hover-Intent Timer - Tells "drop here" apart from "hold here to group".

One timer per drag session:

  IDLE --enter--> PENDING --timer elapses--> resolve(long_hover=True), IDLE
                     |
                     +--leave / reset--> IDLE (nothing resolved)
                     +--drop----------> resolve(long_hover=False), IDLE

While PENDING, entering another target does not restart the timer, so at
most one long-hover resolution is ever scheduled.

The timer source is injected: anything with call_later(delay_ms, callback)
returning a handle, and cancel(handle). Production code passes a
GLibScheduler; tests pass a manual clock.
"""

from enum import Enum
from typing import Callable, Optional

from loguru import logger

DEFAULT_GROUP_DELAY_MS = 1500

Resolver = Callable[[str, str, bool], bool]


class HoverState(Enum):
    IDLE = "idle"
    PENDING = "pending"


class HoverIntentTimer:
    """
    Single-shot hover timer arbitrating between swap and group.

    Args:
        resolve: Called as resolve(dragged_id, target_id, long_hover)
        scheduler: Timer source (call_later / cancel)
        delay_ms: How long a hover must last to count as "hold"
    """

    def __init__(self, resolve: Resolver, scheduler, delay_ms: int = DEFAULT_GROUP_DELAY_MS):
        self._resolve = resolve
        self._scheduler = scheduler
        self.delay_ms = delay_ms

        self._state = HoverState.IDLE
        self._pending: Optional[tuple[str, str]] = None
        self._handle = None
        # Pair whose long-hover action already ran; its drop is a no-op
        self._fired: Optional[tuple[str, str]] = None

    @property
    def state(self) -> HoverState:
        return self._state

    @property
    def pending(self) -> Optional[tuple[str, str]]:
        return self._pending

    def enter(self, dragged_id: str, target_id: str) -> bool:
        """
        Pointer entered a candidate drop target.

        Returns:
            True if a new timer was started
        """
        if self._state is HoverState.PENDING or dragged_id == target_id:
            return False

        self._pending = (dragged_id, target_id)
        self._fired = None
        self._state = HoverState.PENDING
        self._handle = self._scheduler.call_later(self.delay_ms, self._on_timeout)
        return True

    def leave(self, target_id: Optional[str] = None) -> None:
        """Pointer left the target; a pending timer is cancelled."""
        if self._state is not HoverState.PENDING:
            return
        if target_id is not None and self._pending[1] != target_id:
            return
        self._cancel()

    def drop(self, dragged_id: str, target_id: str) -> bool:
        """
        Drop completed over target_id.

        A drop before the timer fires is a short hover. A drop on the pair
        whose timer already fired was handled by that timer.

        Returns:
            True if the layout changed (or already changed by the timer)
        """
        if self._state is HoverState.PENDING:
            self._cancel()
        elif self._fired == (dragged_id, target_id):
            self._fired = None
            return True

        self._fired = None
        return self._resolve(dragged_id, target_id, False)

    def reset(self) -> None:
        """Drag session ended; forget everything."""
        if self._state is HoverState.PENDING:
            self._cancel()
        self._fired = None

    def _cancel(self) -> None:
        if self._handle is not None:
            self._scheduler.cancel(self._handle)
        self._handle = None
        self._pending = None
        self._state = HoverState.IDLE

    def _on_timeout(self) -> bool:
        if self._state is not HoverState.PENDING:
            return False

        pair = self._pending
        self._handle = None
        self._pending = None
        self._state = HoverState.IDLE
        self._fired = pair

        logger.debug(f"Long hover {pair[0]} -> {pair[1]}")
        self._resolve(pair[0], pair[1], True)
        return False  # single shot
