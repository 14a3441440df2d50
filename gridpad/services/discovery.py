"""
Discovery Service - Scan application roots for launchable entries.

Scans a system-wide and a per-user directory (by default the freedesktop
application dirs) for entries whose name ends with a suffix:

  - Files such as firefox.desktop: loaded with Gio.DesktopAppInfo, which
    gives the display name and icon; NoDisplay/Hidden entries and files
    Gio cannot load are skipped
  - Directory bundles such as Firefox.app: name is the bundle name
    without its suffix

Entries that end up without a name are skipped. Roots that do not exist
are skipped. A root that exists but cannot be listed raises DiscoveryError
so the caller can keep its current layout.
"""

from pathlib import Path
from typing import Iterable

from loguru import logger

from gridpad.engine.errors import DiscoveryError
from gridpad.engine.sync import DiscoveredApp


def _load_app_info(path: Path):
    """Gio.DesktopAppInfo for a desktop entry file, or None if Gio rejects it."""
    from gi.repository import Gio

    info = Gio.DesktopAppInfo.new_from_filename(str(path))
    if info is None:
        logger.debug(f"Unreadable desktop entry {path}")
    return info


def _icon_name(info):
    icon = info.get_icon()
    return icon.to_string() if icon is not None else None


def describe_entry(path: Path, suffix: str):
    """
    Build a DiscoveredApp for one filesystem entry.

    Returns:
        DiscoveredApp, or None if the entry is hidden, unreadable or
        has no name
    """
    if path.is_file():
        info = _load_app_info(path)
        if info is None or info.get_nodisplay() or info.get_is_hidden():
            return None
        name = info.get_display_name()
        if not name:
            return None
        return DiscoveredApp(name=name, path=str(path), icon=_icon_name(info))

    name = path.name[: -len(suffix)] if suffix and path.name.endswith(suffix) else path.stem
    if not name:
        return None
    return DiscoveredApp(name=name, path=str(path))


def scan(roots: Iterable, suffix: str = ".desktop") -> set[DiscoveredApp]:
    """
    Scan every root (one directory level) for application entries.

    Args:
        roots: Directories to scan; "~" is expanded
        suffix: Name suffix identifying an application entry

    Returns:
        Set of DiscoveredApp

    Raises:
        DiscoveryError: An existing root could not be listed
    """
    found: set[DiscoveredApp] = set()

    for root in roots:
        root = Path(root).expanduser()
        if not root.is_dir():
            logger.debug(f"Skipping missing application root {root}")
            continue

        try:
            entries = sorted(root.iterdir(), key=lambda p: p.name.lower())
        except OSError as e:
            raise DiscoveryError(f"Cannot list {root}: {e}") from e

        for entry in entries:
            if not entry.name.endswith(suffix):
                continue
            app = describe_entry(entry, suffix)
            if app is not None:
                found.add(app)

    logger.debug(f"Discovered {len(found)} applications")
    return found


def resolve_icon(path: str):
    """Icon name for a saved application path (None if it has none)."""
    entry_path = Path(path)
    if not entry_path.is_file():
        return None
    info = _load_app_info(entry_path)
    return _icon_name(info) if info is not None else None
