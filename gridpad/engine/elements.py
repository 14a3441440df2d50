"""
Element Model - The three kinds of slot a grid page can hold.

  - Application: a launchable entry, keyed by its filesystem path
  - Folder: a named, ordered group of Applications (folders never nest)
  - Empty: a placeholder that pads a page to full capacity

Elements are frozen dataclasses. Mutating operations build new instances
with dataclasses.replace(), so a layout snapshot handed to an observer can
never change underneath it.
"""

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Union

from .errors import LayoutDocumentError


def new_id() -> str:
    """Generate a fresh element identifier (never reused)."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Application:
    """A launchable application discovered on disk."""
    name: str
    path: str
    id: str = field(default_factory=new_id)
    # Resolved from path on load, never persisted
    icon: Optional[str] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Folder:
    """A user-created group of applications."""
    name: str
    items: tuple[Application, ...] = ()
    id: str = field(default_factory=new_id)

    def contains(self, app_id: str) -> bool:
        return any(app.id == app_id for app in self.items)

    def index_of(self, app_id: str) -> Optional[int]:
        for i, app in enumerate(self.items):
            if app.id == app_id:
                return i
        return None

    def with_items(self, items) -> "Folder":
        """Return a copy of this folder holding items."""
        return replace(self, items=tuple(items))


@dataclass(frozen=True)
class Empty:
    """Placeholder slot with no content."""
    id: str = field(default_factory=new_id)


Element = Union[Application, Folder, Empty]


def is_empty(element: Element) -> bool:
    return isinstance(element, Empty)


def matches_query(element: Element, query: str) -> bool:
    """
    Case-insensitive substring match used by search filtering.

    Args:
        element: Any layout element
        query: Search text (already known to be non-empty)

    Returns:
        True if the application name, or the name of any application
        inside a folder, contains the query. Empty never matches.
    """
    needle = query.lower()
    match element:
        case Application(name=name):
            return needle in name.lower()
        case Folder(items=items):
            return any(needle in app.name.lower() for app in items)
        case Empty():
            return False
    raise TypeError(f"Unknown element type: {type(element).__name__}")


# Serialization


def _app_to_dict(app: Application) -> dict[str, Any]:
    return {"id": app.id, "name": app.name, "path": app.path}


def element_to_dict(element: Element) -> dict[str, Any]:
    """Encode an element as a tagged JSON-ready dict (icons are dropped)."""
    match element:
        case Application():
            return {"type": "app", "app": _app_to_dict(element)}
        case Folder():
            return {
                "type": "folder",
                "folder": {
                    "id": element.id,
                    "name": element.name,
                    "items": [_app_to_dict(app) for app in element.items],
                },
            }
        case Empty():
            return {"type": "empty", "id": element.id}
    raise TypeError(f"Unknown element type: {type(element).__name__}")


def _require_str(data: dict, key: str, context: str) -> str:
    value = data.get(key) if isinstance(data, dict) else None
    if not isinstance(value, str) or not value:
        raise LayoutDocumentError(f"{context}: missing or invalid '{key}'")
    return value


def _app_from_dict(data: Any) -> Application:
    if not isinstance(data, dict):
        raise LayoutDocumentError("application entry is not an object")
    return Application(
        id=_require_str(data, "id", "application"),
        name=_require_str(data, "name", "application"),
        path=_require_str(data, "path", "application"),
    )


def element_from_dict(data: Any) -> Element:
    """
    Decode one tagged element.

    Raises:
        LayoutDocumentError: Unknown type tag, missing fields, or a folder
            without items.
    """
    if not isinstance(data, dict):
        raise LayoutDocumentError("element is not an object")

    kind = data.get("type")
    if kind == "app":
        return _app_from_dict(data.get("app"))

    if kind == "folder":
        raw = data.get("folder")
        folder_id = _require_str(raw, "id", "folder")
        name = raw.get("name")
        if not isinstance(name, str):
            raise LayoutDocumentError("folder: missing or invalid 'name'")
        items = raw.get("items")
        if not isinstance(items, list) or not items:
            raise LayoutDocumentError(f"folder {folder_id} has no items")
        return Folder(id=folder_id, name=name, items=tuple(_app_from_dict(i) for i in items))

    if kind == "empty":
        return Empty(id=_require_str(data, "id", "empty"))

    raise LayoutDocumentError(f"unknown element type: {kind!r}")
