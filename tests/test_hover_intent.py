"""
Tests for the HoverIntentTimer state machine, driven by a manual clock.
"""

from unittest.mock import MagicMock

from gridpad.engine.drop import DropResolver
from gridpad.engine.elements import Application, Folder
from gridpad.engine.hover import HoverIntentTimer, HoverState
from gridpad.engine.layout import LayoutStore


def _timer(scheduler, delay_ms=1500):
    resolve = MagicMock(return_value=True)
    return HoverIntentTimer(resolve, scheduler, delay_ms=delay_ms), resolve


class TestLongHover:
    """Holding over a target long enough fires exactly once."""

    def test_fires_after_delay(self, scheduler):
        timer, resolve = _timer(scheduler)
        assert timer.enter("a", "b") is True
        assert timer.state is HoverState.PENDING

        scheduler.advance(1499)
        resolve.assert_not_called()

        scheduler.advance(1)
        resolve.assert_called_once_with("a", "b", True)
        assert timer.state is HoverState.IDLE
        assert timer.pending is None

    def test_fires_only_once(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        scheduler.advance(10_000)
        assert resolve.call_count == 1
        assert scheduler.pending == 0

    def test_leave_before_delay_cancels(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        scheduler.advance(1000)
        timer.leave("b")
        scheduler.advance(5000)
        resolve.assert_not_called()
        assert timer.state is HoverState.IDLE

    def test_custom_delay(self, scheduler):
        timer, resolve = _timer(scheduler, delay_ms=200)
        timer.enter("a", "b")
        scheduler.advance(200)
        resolve.assert_called_once()


class TestNoPreemption:
    """A pending timer is never restarted or replaced."""

    def test_second_enter_is_ignored(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        scheduler.advance(1000)
        assert timer.enter("a", "c") is False
        assert timer.pending == ("a", "b")

        scheduler.advance(500)
        resolve.assert_called_once_with("a", "b", True)

    def test_leave_of_other_target_keeps_timer(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        timer.leave("c")
        scheduler.advance(1500)
        resolve.assert_called_once_with("a", "b", True)

    def test_enter_on_self_is_ignored(self, scheduler):
        timer, resolve = _timer(scheduler)
        assert timer.enter("a", "a") is False
        assert scheduler.pending == 0

    def test_leave_while_idle_is_harmless(self, scheduler):
        timer, _ = _timer(scheduler)
        timer.leave()
        assert timer.state is HoverState.IDLE


class TestDrop:
    """Drops before and after the timer fires."""

    def test_drop_while_pending_is_short_hover(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        scheduler.advance(700)

        assert timer.drop("a", "b") is True

        resolve.assert_called_once_with("a", "b", False)
        scheduler.advance(5000)
        assert resolve.call_count == 1

    def test_drop_after_fire_does_not_resolve_again(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        scheduler.advance(1500)

        assert timer.drop("a", "b") is True
        resolve.assert_called_once_with("a", "b", True)

    def test_drop_elsewhere_after_fire_is_short(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        scheduler.advance(1500)
        timer.drop("a", "c")
        assert resolve.call_args_list[-1].args == ("a", "c", False)

    def test_drop_without_hover(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.drop("a", "b")
        resolve.assert_called_once_with("a", "b", False)

    def test_reset_cancels_pending(self, scheduler):
        timer, resolve = _timer(scheduler)
        timer.enter("a", "b")
        timer.reset()
        scheduler.advance(5000)
        resolve.assert_not_called()


class TestWithResolver:
    """The timer wired to a real DropResolver."""

    def _setup(self, scheduler):
        apps = [Application(name=f"App{i}", path=f"/apps/{i}.desktop") for i in range(5)]
        store = LayoutStore(apps)
        timer = HoverIntentTimer(DropResolver(store).resolve_drop, scheduler)
        return store, timer, apps

    def test_hold_groups(self, scheduler):
        store, timer, apps = self._setup(scheduler)
        timer.enter(apps[4].id, apps[0].id)
        scheduler.advance(1500)
        timer.drop(apps[4].id, apps[0].id)

        folder = store.current_layout()[0]
        assert isinstance(folder, Folder)
        assert [a.id for a in folder.items] == [apps[0].id, apps[4].id]
        assert sum(isinstance(e, Folder) for e in store.current_layout()) == 1

    def test_quick_drop_swaps(self, scheduler):
        store, timer, apps = self._setup(scheduler)
        timer.enter(apps[4].id, apps[0].id)
        scheduler.advance(1000)
        timer.leave(apps[0].id)
        scheduler.advance(1000)
        timer.drop(apps[4].id, apps[0].id)

        layout = store.current_layout()
        assert not any(isinstance(e, Folder) for e in layout)
        assert layout[0].id == apps[4].id
        assert layout[4].id == apps[0].id
