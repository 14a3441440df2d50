"""
Layout Store - The flat, paginated sequence of grid slots.

The layout is one ordered list of elements. Pages are positional: the
element at flat index i lives on page i // page_size. After every commit
the length is a multiple of page_size (the tail is padded with Empty
placeholders) and no folder is left without items.

All mutation goes through transaction(), which works on a copy and
commits it in one step, so subscribers only ever see complete layouts.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from loguru import logger

from .elements import Application, Element, Empty, Folder, is_empty, matches_query

DEFAULT_PAGE_SIZE = 35  # 7 columns x 5 rows

Subscriber = Callable[[tuple[Element, ...]], None]


@dataclass(frozen=True)
class Location:
    """Where an element lives: a top-level index, or a slot inside a folder."""
    index: int
    folder_id: Optional[str] = None
    inner_index: Optional[int] = None

    @property
    def in_folder(self) -> bool:
        return self.folder_id is not None


def page_bounds(index: int, page_size: int) -> tuple[int, int]:
    """Return (first, last) flat indices of the page holding index."""
    start = (index // page_size) * page_size
    return start, start + page_size - 1


def normalize_page(items: list, index: int, page_size: int) -> None:
    """
    Compact one page in place: content to the front, placeholders behind.

    Relative order of non-Empty elements is preserved and the page's own
    Empty elements are reused, so normalizing twice is a no-op.
    """
    if not 0 <= index < len(items):
        return
    start, end = page_bounds(index, page_size)
    end = min(end, len(items) - 1)
    page = items[start:end + 1]
    content = [e for e in page if not is_empty(e)]
    holes = [e for e in page if is_empty(e)]
    items[start:end + 1] = content + holes


def normalize_all(items: list, page_size: int) -> None:
    for start in range(0, len(items), page_size):
        normalize_page(items, start, page_size)


def collapse_empty_folders(items: list) -> None:
    """Replace any folder that lost its last item with a placeholder."""
    for i, element in enumerate(items):
        if isinstance(element, Folder) and not element.items:
            items[i] = Empty()


def fix_tail(items: list, page_size: int) -> None:
    """
    Restore the page-boundary invariant by touching only the tail.

    Trailing placeholders are trimmed back to the previous boundary first;
    if content still overhangs a boundary, placeholders are appended.
    """
    while len(items) % page_size and items and is_empty(items[-1]):
        items.pop()
    pad_to_page(items, page_size)


def pad_to_page(items: list, page_size: int) -> None:
    """Append placeholders up to the next page boundary."""
    remainder = len(items) % page_size
    if remainder:
        items.extend(Empty() for _ in range(page_size - remainder))


class LayoutStore:
    """
    Owner of the ordered element list.

    Observers register with subscribe(); each commit calls them with the
    new layout tuple. Lookups go through a single id index rebuilt on
    commit, covering both top-level elements and folder contents.

    Methods:
        current_layout(): Full flat layout
        filtered(query) / pages(query): Display views
        swap(page, a, b): Exchange two slots on a page
        normalize_page(index) / normalize_all(): Defragment pages
        locate(id) / find(id): Identifier lookup
        transaction(): Context manager for atomic multi-step edits
    """

    def __init__(self, elements=(), page_size: int = DEFAULT_PAGE_SIZE):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.page_size = page_size
        self._items: tuple[Element, ...] = ()
        self._index: dict[str, Location] = {}
        self._subscribers: list[Subscriber] = []
        self._commit(list(elements), notify=False)

    # Observation

    def subscribe(self, callback: Subscriber) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        snapshot = self._items
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                logger.exception(f"Layout subscriber {callback!r} failed")

    # Reads

    def current_layout(self) -> tuple[Element, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    @property
    def page_count(self) -> int:
        return len(self._items) // self.page_size

    def filtered(self, query: str = "") -> list[Element]:
        """
        Elements matching a search query, in layout order.

        An empty query returns the whole layout. The result is a fresh
        list used only for display; it is not a multiple of page_size.
        """
        if not query:
            return list(self._items)
        return [e for e in self._items if matches_query(e, query)]

    def pages(self, query: str = "") -> list[list[Element]]:
        """Chunk filtered(query) into display pages (last one may be short)."""
        visible = self.filtered(query)
        size = self.page_size
        return [visible[i:i + size] for i in range(0, len(visible), size)]

    def locate(self, element_id: str) -> Optional[Location]:
        return self._index.get(element_id)

    def find(self, element_id: str) -> Optional[Element]:
        """Return the element with this id, top-level or inside a folder."""
        location = self._index.get(element_id)
        if location is None:
            return None
        element = self._items[location.index]
        if location.in_folder:
            return element.items[location.inner_index]
        return element

    def known_paths(self) -> set[str]:
        """Paths of every application in the layout, folders included."""
        paths = set()
        for element in self._items:
            match element:
                case Application(path=path):
                    paths.add(path)
                case Folder(items=items):
                    paths.update(app.path for app in items)
        return paths

    # Writes

    @contextmanager
    def transaction(self) -> Iterator[list]:
        """
        Edit a working copy of the layout and commit it in one step.

        Any exception raised inside the block discards the copy and
        propagates; the published layout is left exactly as it was.

        Example:
            with store.transaction() as items:
                items[0], items[1] = items[1], items[0]
        """
        working = list(self._items)
        yield working
        self._commit(working)

    def replace(self, elements) -> None:
        """Swap in a whole new layout (startup, reload)."""
        self._commit(list(elements))

    def swap(self, page: int, slot_a: int, slot_b: int) -> bool:
        """
        Exchange two slots on one page.

        Args:
            page: Page index
            slot_a: Page-relative slot of the first element
            slot_b: Page-relative slot of the second element

        Returns:
            True if the layout changed
        """
        size = self.page_size
        if not (0 <= slot_a < size and 0 <= slot_b < size):
            return False
        flat_a = page * size + slot_a
        flat_b = page * size + slot_b
        if flat_a == flat_b or not (0 <= flat_a < len(self._items) and 0 <= flat_b < len(self._items)):
            return False
        with self.transaction() as items:
            items[flat_a], items[flat_b] = items[flat_b], items[flat_a]
        return True

    def normalize_page(self, index: int) -> bool:
        if not 0 <= index < len(self._items):
            return False
        with self.transaction() as items:
            normalize_page(items, index, self.page_size)
        return True

    def normalize_all(self) -> bool:
        with self.transaction() as items:
            normalize_all(items, self.page_size)
        return True

    def _commit(self, items: list, notify: bool = True) -> None:
        collapse_empty_folders(items)
        fix_tail(items, self.page_size)
        changed = tuple(items) != self._items
        self._items = tuple(items)
        self._rebuild_index()
        if changed and notify:
            self._notify()

    def _rebuild_index(self) -> None:
        index: dict[str, Location] = {}
        for i, element in enumerate(self._items):
            index[element.id] = Location(i)
            if isinstance(element, Folder):
                for j, app in enumerate(element.items):
                    index[app.id] = Location(i, element.id, j)
        self._index = index
