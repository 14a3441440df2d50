"""
Layout persistence - Load and save the grid arrangement as JSON.

Document format (icons are never stored, they are re-resolved on load):

    {
      "version": 1,
      "page_size": 35,
      "elements": [
        {"type": "app", "app": {"id": "...", "name": "Firefox", "path": "..."}},
        {"type": "folder", "folder": {"id": "...", "name": "Web", "items": [...]}},
        {"type": "empty", "id": "..."}
      ]
    }

A bare list of elements is accepted too. Anything that fails validation is
treated as "no saved layout" so the caller falls back to fresh discovery.
Saves write to a .tmp file first and then replace the real one.
"""

import json
import os
from pathlib import Path
from typing import Any, Iterable, Optional

from loguru import logger

from gridpad.engine.elements import Folder, element_from_dict, element_to_dict
from gridpad.engine.errors import LayoutDocumentError
from gridpad.utils.helpers import data_dir

DOCUMENT_VERSION = 1


def _layout_path() -> Path:
    return data_dir() / "layout.json"


def encode_document(elements: Iterable, page_size: int) -> dict[str, Any]:
    return {
        "version": DOCUMENT_VERSION,
        "page_size": page_size,
        "elements": [element_to_dict(e) for e in elements],
    }


def decode_document(data: Any) -> list:
    """
    Validate and decode a parsed layout document.

    Raises:
        LayoutDocumentError: Structural problem anywhere in the document
    """
    if isinstance(data, dict):
        raw_elements = data.get("elements")
    else:
        raw_elements = data
    if not isinstance(raw_elements, list):
        raise LayoutDocumentError("document has no element list")

    elements = [element_from_dict(raw) for raw in raw_elements]

    seen: set[str] = set()
    for element in elements:
        ids = [element.id]
        if isinstance(element, Folder):
            ids.extend(app.id for app in element.items)
        for element_id in ids:
            if element_id in seen:
                raise LayoutDocumentError(f"duplicate identifier {element_id}")
            seen.add(element_id)

    return elements


def load_layout(path: Optional[Path] = None) -> Optional[list]:
    """
    Load the saved layout.

    Returns:
        List of elements, or None if there is no usable saved layout
    """
    path = path or _layout_path()

    if not path.exists():
        logger.info(f"No saved layout at {path}")
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return decode_document(data)
    except (OSError, ValueError, LayoutDocumentError) as e:
        logger.warning(f"Ignoring saved layout at {path}: {e}")
        return None


def save_layout(elements: Iterable, page_size: int, path: Optional[Path] = None) -> bool:
    """
    Write the layout atomically.

    Failures are logged and dropped; the in-memory layout stays
    authoritative for the running process.

    Returns:
        True if the file was written
    """
    path = path or _layout_path()
    tmp_path = path.with_suffix(".tmp")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(encode_document(elements, page_size), f, indent=2)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError):
        logger.exception(f"Could not save layout to {path}")
        return False

    return True
