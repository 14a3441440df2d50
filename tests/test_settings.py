"""
Tests for settings loading and deep merge logic.

Uses real TOML files on disk; only the settings path is redirected.
"""

from unittest.mock import patch

from gridpad.utils.helpers import (
    DEFAULT_SETTINGS,
    _deep_merge,
    config_dir,
    data_dir,
    launch_command,
    load_settings,
    page_size,
)


class TestDeepMerge:
    """Test the _deep_merge function directly."""

    def test_override_replaces_flat_key(self):
        assert _deep_merge({"a": 1, "b": 2}, {"b": 99}) == {"a": 1, "b": 99}

    def test_override_adds_new_key(self):
        assert _deep_merge({"a": 1}, {"b": 2}) == {"a": 1, "b": 2}

    def test_nested_dicts_are_merged(self):
        base = {"section": {"a": 1, "b": 2}}
        override = {"section": {"b": 99, "c": 3}}
        assert _deep_merge(base, override) == {"section": {"a": 1, "b": 99, "c": 3}}

    def test_base_is_not_mutated(self):
        base = {"a": {"x": 1}}
        _deep_merge(base, {"a": {"x": 2}})
        assert base["a"]["x"] == 1

    def test_result_does_not_share_nested_dicts(self):
        merged = _deep_merge(DEFAULT_SETTINGS, {})
        merged["grid"]["columns"] = 99
        assert DEFAULT_SETTINGS["grid"]["columns"] == 7


class TestLoadSettings:
    """Test load_settings with real TOML files."""

    def test_defaults_when_file_missing(self, tmp_path):
        with patch("gridpad.utils.helpers._settings_path", return_value=tmp_path / "nope.toml"):
            settings = load_settings()
        assert settings["launcher"]["close_delay_ms"] == 300
        assert settings["hover"]["group_delay_ms"] == 1500
        assert page_size(settings) == 35

    def test_file_overrides_defaults(self, tmp_settings):
        with patch("gridpad.utils.helpers._settings_path", return_value=tmp_settings):
            settings = load_settings()
        assert page_size(settings) == 24
        assert settings["hover"]["group_delay_ms"] == 1200
        # Untouched sections keep their defaults
        assert settings["discovery"]["suffix"] == ".desktop"

    def test_invalid_toml_falls_back(self, tmp_path):
        broken = tmp_path / "settings.toml"
        broken.write_text("[grid\ncolumns = = 4\n")
        with patch("gridpad.utils.helpers._settings_path", return_value=broken):
            settings = load_settings()
        assert settings == DEFAULT_SETTINGS


class TestLocations:
    """XDG base directories."""

    def test_xdg_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
        assert config_dir() == tmp_path / "cfg" / "gridpad"
        assert data_dir() == tmp_path / "data" / "gridpad"

    def test_home_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert data_dir() == tmp_path / ".local" / "share" / "gridpad"


class TestLaunchCommand:
    def test_desktop_entry_uses_gio(self):
        assert launch_command("/usr/share/applications/firefox.desktop") == \
            ["gio", "launch", "/usr/share/applications/firefox.desktop"]

    def test_other_paths_use_xdg_open(self):
        assert launch_command("/Applications/Safari.app") == ["xdg-open", "/Applications/Safari.app"]
