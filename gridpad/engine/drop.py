"""
Drop Resolver - Turns drag-and-drop gestures into new layouts.

Rules for resolve_drop(dragged, target, long_hover), first match wins:

  - App dragged out of a folder, short hover: pull it out and insert it
    right after the target, staying on the target's page
  - App held over a folder: add it to the folder
  - App held over an app: create a folder named after the target
  - Anything else held: plain swap
  - Short hover: plain swap

Every operation runs in one store transaction. When an insertion finds no
free slot in its page window the transaction is rolled back, so the
application stays where it was instead of disappearing.
"""

from loguru import logger

from .elements import Application, Empty, Folder, is_empty
from .errors import PlacementError
from .layout import LayoutStore, normalize_all, normalize_page, page_bounds


def insert_at(items: list, pos: int, window_end: int, element) -> None:
    """
    Write element at pos, shifting neighbours right into the nearest hole.

    Args:
        items: Working layout list (modified in place)
        pos: Flat index the element should occupy
        window_end: Last flat index the shift may reach
        element: Element to place

    Raises:
        PlacementError: No Empty slot between pos and window_end
    """
    if is_empty(items[pos]):
        items[pos] = element
        return

    for hole in range(pos, window_end + 1):
        if is_empty(items[hole]):
            break
    else:
        raise PlacementError(f"no free slot in {pos}..{window_end}")

    items[pos + 1:hole + 1] = items[pos:hole]
    items[pos] = element


class DropResolver:
    """
    Applies drag-and-drop decisions to a LayoutStore.

    All public methods return True when the layout changed and False for
    a no-op (unknown ids, invalid indices, or no room to place an app).
    """

    def __init__(self, store: LayoutStore):
        self.store = store

    @property
    def page_size(self) -> int:
        return self.store.page_size

    def resolve_drop(self, dragged_id: str, target_id: str, long_hover: bool = False) -> bool:
        """
        Resolve a drop of dragged_id onto target_id.

        Args:
            dragged_id: Identifier carried by the drag payload
            target_id: Identifier of the top-level slot under the pointer
            long_hover: True when the hover timer fired before the drop

        Returns:
            True if the layout changed
        """
        if dragged_id == target_id:
            return False

        source = self.store.locate(dragged_id)
        target = self.store.locate(target_id)
        if source is None or target is None or target.in_folder:
            # Drag raced with a rescan or targets a folder interior
            logger.debug(f"Ignoring drop {dragged_id} -> {target_id}: not on the grid")
            return False

        if source.in_folder:
            if long_hover:
                return False
            return self._extract_after(source, target.index)

        if long_hover:
            return self._group(source.index, target.index)
        return self._swap(source.index, target.index)

    def _swap(self, src: int, dst: int) -> bool:
        if src == dst:
            return False
        with self.store.transaction() as items:
            items[src], items[dst] = items[dst], items[src]
        return True

    def _group(self, src: int, dst: int) -> bool:
        layout = self.store.current_layout()
        dragged, target = layout[src], layout[dst]

        match (dragged, target):
            case (Application(), Folder()):
                if target.contains(dragged.id):
                    folder = target
                else:
                    folder = target.with_items(target.items + (dragged,))
                logger.debug(f"Adding {dragged.name} to folder {target.name}")
            case (Application(), Application()):
                folder = Folder(name=target.name, items=(target, dragged))
                logger.debug(f"Grouping {dragged.name} with {target.name}")
            case _:
                return self._swap(src, dst)

        with self.store.transaction() as items:
            items[dst] = folder
            items[src] = Empty()
            normalize_all(items, self.page_size)
        return True

    def _extract_after(self, source, target_index: int) -> bool:
        """Move a folder item to the slot after target_index on its page."""
        _, page_end = page_bounds(target_index, self.page_size)
        insert_pos = min(target_index + 1, page_end)

        try:
            with self.store.transaction() as items:
                app = self._take_from_folder(items, source)
                insert_at(items, insert_pos, page_end, app)
                normalize_page(items, insert_pos, self.page_size)
        except PlacementError as e:
            logger.debug(f"Keeping app in its folder, page is full: {e}")
            return False
        return True

    def _take_from_folder(self, items: list, location, collapse_to=None):
        """Remove the app at location from its folder inside a working list."""
        folder = items[location.index]
        app = folder.items[location.inner_index]
        remaining = [a for a in folder.items if a.id != app.id]
        if remaining:
            items[location.index] = folder.with_items(remaining)
        else:
            items[location.index] = collapse_to if collapse_to is not None else Empty()
        return app

    def return_app(self, app_id: str, folder_id: str) -> bool:
        """
        Move an app from an open folder back onto the grid.

        If it was the folder's last item the app takes over the folder's
        slot. Otherwise it is inserted right after the folder.
        """
        location = self.store.locate(app_id)
        if location is None or location.folder_id != folder_id:
            return False

        folder = self.store.current_layout()[location.index]
        if len(folder.items) == 1:
            with self.store.transaction() as items:
                self._take_from_folder(items, location, collapse_to=folder.items[0])
                normalize_all(items, self.page_size)
            return True

        try:
            with self.store.transaction() as items:
                app = self._take_from_folder(items, location)
                insert_pos = min(location.index + 1, len(items) - 1)
                _, page_end = page_bounds(insert_pos, self.page_size)
                insert_at(items, insert_pos, page_end, app)
                normalize_page(items, insert_pos, self.page_size)
        except PlacementError as e:
            logger.debug(f"Cannot return {app_id} from folder {folder_id}: {e}")
            return False
        return True

    def delete_app(self, element_id: str) -> bool:
        """
        Remove an element from the grid or from its folder.

        Top-level removals close the gap within the page and leave a
        placeholder at the page's last slot.
        """
        location = self.store.locate(element_id)
        if location is None:
            return False

        with self.store.transaction() as items:
            if location.in_folder:
                self._take_from_folder(items, location)
                if is_empty(items[location.index]):
                    normalize_all(items, self.page_size)
            else:
                index = location.index
                _, page_end = page_bounds(index, self.page_size)
                items[index:page_end] = items[index + 1:page_end + 1]
                items[page_end] = Empty()
                normalize_page(items, index, self.page_size)
        return True

    def reorder_in_folder(self, folder_id: str, from_index: int, to_index: int) -> bool:
        """Move a folder item from one position to another."""
        folder = self.store.find(folder_id)
        if not isinstance(folder, Folder):
            return False
        count = len(folder.items)
        if not (0 <= from_index < count and 0 <= to_index < count) or from_index == to_index:
            return False

        reordered = list(folder.items)
        reordered.insert(to_index, reordered.pop(from_index))
        index = self.store.locate(folder_id).index
        with self.store.transaction() as items:
            items[index] = folder.with_items(reordered)
        return True

    def rename_folder(self, folder_id: str, name: str) -> bool:
        folder = self.store.find(folder_id)
        name = name.strip()
        if not isinstance(folder, Folder) or not name or name == folder.name:
            return False
        index = self.store.locate(folder_id).index
        with self.store.transaction() as items:
            items[index] = Folder(id=folder.id, name=name, items=folder.items)
        return True
