"""
Shared test fixtures for the Gridpad test suite.

Provides a manual timer scheduler, application roots populated with real
.desktop files, and settings/layout files that use real file I/O (no
mocking of the filesystem).

GObject/Ignis are faked while the services package is imported, and Gio's
desktop-entry loader is replaced per test, so the suite runs headless.
"""

import sys
import types
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import toml

from gridpad.utils.helpers import DEFAULT_SETTINGS, _deep_merge

# Save original modules before patching
_saved_modules = {}
_modules_to_fake = ["gi", "gi.repository", "gi.repository.GObject",
                    "ignis", "ignis.base_service"]
for _mod in _modules_to_fake:
    if _mod in sys.modules:
        _saved_modules[_mod] = sys.modules[_mod]

# Create fake modules for headless testing
_fake_gi = types.ModuleType("gi")
_fake_gi_repo = types.ModuleType("gi.repository")
_fake_gobject = MagicMock()
_fake_gobject.SignalFlags.RUN_FIRST = 0
_fake_gi_repo.GObject = _fake_gobject
_fake_gi.repository = _fake_gi_repo

_fake_ignis = types.ModuleType("ignis")
_fake_base_service = types.ModuleType("ignis.base_service")


class _FakeBaseService:
    """BaseService stand-in with just enough of connect/emit to observe signals."""

    def __init__(self):
        self._handlers = {}

    def connect(self, signal, callback):
        self._handlers.setdefault(signal, []).append(callback)

    def emit(self, signal, *args):
        for callback in self._handlers.get(signal, []):
            callback(self, *args)


_fake_base_service.BaseService = _FakeBaseService
_fake_ignis.base_service = _fake_base_service

# Install fakes
sys.modules["gi"] = _fake_gi
sys.modules["gi.repository"] = _fake_gi_repo
sys.modules["gi.repository.GObject"] = _fake_gobject
sys.modules["ignis"] = _fake_ignis
sys.modules["ignis.base_service"] = _fake_base_service

# Import the services package (uses fake dependencies)
import gridpad.services.launchpad  # noqa: E402,F401

# Restore original modules so nothing else is affected
for _mod in _modules_to_fake:
    if _mod in _saved_modules:
        sys.modules[_mod] = _saved_modules[_mod]
    elif _mod in sys.modules:
        del sys.modules[_mod]


class ManualScheduler:
    """
    Deterministic stand-in for GLibScheduler.

    Time only moves when advance() is called; due callbacks run in order.
    """

    def __init__(self):
        self.now = 0
        self._timers = {}
        self._next_handle = 1

    def call_later(self, delay_ms, callback):
        handle = self._next_handle
        self._next_handle += 1
        self._timers[handle] = (self.now + delay_ms, callback)
        return handle

    def cancel(self, handle):
        self._timers.pop(handle, None)

    def advance(self, ms):
        target = self.now + ms
        while True:
            due = sorted((when, handle) for handle, (when, _) in self._timers.items() if when <= target)
            if not due:
                break
            when, handle = due[0]
            self.now = when
            _, callback = self._timers.pop(handle)
            callback()
        self.now = target

    @property
    def pending(self):
        return len(self._timers)


@pytest.fixture
def scheduler():
    return ManualScheduler()


class FakeGio:
    """
    Gio stand-in whose DesktopAppInfo loads entries registered by tests.

    Files that were never registered load as None, like a file Gio rejects.
    """

    def __init__(self):
        self.entries = {}
        self.DesktopAppInfo = MagicMock()
        self.DesktopAppInfo.new_from_filename.side_effect = self._load

    def register(self, path, name, icon="", nodisplay=False, hidden=False):
        self.entries[str(path)] = (name, icon, nodisplay, hidden)

    def _load(self, filename):
        entry = self.entries.get(filename)
        if entry is None:
            return None
        name, icon, nodisplay, hidden = entry
        info = MagicMock()
        info.get_display_name.return_value = name
        info.get_nodisplay.return_value = nodisplay
        info.get_is_hidden.return_value = hidden
        if icon:
            info.get_icon.return_value.to_string.return_value = icon
        else:
            info.get_icon.return_value = None
        return info


@pytest.fixture
def fake_gio(monkeypatch):
    """Install FakeGio as gi.repository.Gio for the duration of a test."""
    gio = FakeGio()
    fake_repo = types.ModuleType("gi.repository")
    fake_repo.Gio = gio
    fake_gi = types.ModuleType("gi")
    fake_gi.repository = fake_repo
    monkeypatch.setitem(sys.modules, "gi", fake_gi)
    monkeypatch.setitem(sys.modules, "gi.repository", fake_repo)
    return gio


@pytest.fixture
def desktop_entry(fake_gio):
    """Write a freedesktop entry file and register what Gio reads from it."""

    def write(root: Path, filename: str, name: str, icon: str = "",
              nodisplay: bool = False, hidden: bool = False) -> Path:
        path = root / filename
        lines = ["[Desktop Entry]", "Type=Application", f"Name={name}", f"Exec={filename}"]
        if icon:
            lines.append(f"Icon={icon}")
        if nodisplay:
            lines.append("NoDisplay=true")
        if hidden:
            lines.append("Hidden=true")
        path.write_text("\n".join(lines) + "\n")
        fake_gio.register(path, name, icon, nodisplay, hidden)
        return path

    return write


@pytest.fixture
def app_roots(tmp_path, desktop_entry):
    """A system and a user application root with a few real entries."""
    system = tmp_path / "system"
    user = tmp_path / "user"
    system.mkdir()
    user.mkdir()
    desktop_entry(system, "firefox.desktop", "Firefox", icon="firefox")
    desktop_entry(system, "org.gnome.Nautilus.desktop", "Files", icon="org.gnome.Nautilus")
    desktop_entry(user, "alacritty.desktop", "alacritty")
    desktop_entry(system, "hidden-helper.desktop", "Helper", nodisplay=True)
    return system, user


@pytest.fixture
def settings(app_roots):
    """Default settings pointed at the temporary application roots."""
    system, user = app_roots
    return _deep_merge(DEFAULT_SETTINGS, {
        "discovery": {"roots": [str(system), str(user)]},
    })


@pytest.fixture
def layout_path(tmp_path):
    return tmp_path / "data" / "layout.json"


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with a few overrides."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "launcher": {"close_delay_ms": 300},
        "grid": {"columns": 6, "rows": 4},
        "hover": {"group_delay_ms": 1200},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path
