"""
Folder View - Pop-over showing the contents of an open folder.

Features:
- Editable folder name (Enter to rename)
- Items in a 3-column grid; drag one onto another to reorder
- Right-click an item to delete its icon
- Drag an item onto the dimmed backdrop to put it back on the grid
- Click the backdrop to close
"""

from gi.repository import Gdk, GObject, Gtk
from ignis import widgets

_COLUMNS = 3


class FolderView:
    """Overlay widget for LaunchpadService.active_folder()."""

    def __init__(self, service, on_close):
        self.service = service
        self.on_close = on_close

        self.name_entry = widgets.Entry(
            css_classes=["folder-name"],
            on_accept=lambda x: self._on_rename(),
        )
        self.name_entry.set_alignment(0.5)

        self.items_grid = Gtk.Grid(column_homogeneous=True, row_spacing=20, column_spacing=20)

        popover = widgets.Box(
            vertical=True,
            spacing=16,
            halign="center",
            valign="center",
            css_classes=["folder-popover"],
            child=[self.name_entry, self.items_grid],
        )

        self.widget = Gtk.Overlay(child=self._create_backdrop(), visible=False)
        self.widget.add_overlay(popover)

    def _create_backdrop(self):
        backdrop = widgets.Box(css_classes=["folder-backdrop"], hexpand=True, vexpand=True)

        click = Gtk.GestureClick()
        click.connect("pressed", lambda g, n, x, y: self.on_close())
        backdrop.add_controller(click)

        drop_target = Gtk.DropTarget.new(GObject.TYPE_STRING, Gdk.DragAction.MOVE)
        drop_target.connect("drop", lambda tgt, value, x, y: self.service.drop_on_folder_backdrop(value))
        backdrop.add_controller(drop_target)
        return backdrop

    def refresh(self):
        """Show, hide or redraw according to the service's open folder."""
        folder = self.service.active_folder()
        self.widget.set_visible(folder is not None)
        if folder is None:
            return

        if not self.name_entry.has_focus():
            self.name_entry.set_text(folder.name)

        child = self.items_grid.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self.items_grid.remove(child)
            child = next_child

        for index, app in enumerate(folder.items):
            row, column = divmod(index, _COLUMNS)
            self.items_grid.attach(self._create_item(folder.id, app, index), column, row, 1, 1)

    def _create_item(self, folder_id, app, index):
        button = widgets.Button(
            css_classes=["app-item"],
            on_click=lambda x, app=app: self.service.launch(app),
            child=widgets.Box(
                vertical=True,
                spacing=6,
                child=[
                    widgets.Icon(image=app.icon or "application-x-executable", pixel_size=64),
                    widgets.Label(label=app.name, css_classes=["app-name"], ellipsize="end", max_width_chars=14),
                ],
            ),
        )

        gesture = Gtk.GestureClick()
        gesture.set_button(3)
        gesture.connect("pressed", lambda g, n, x, y, app_id=app.id: self.service.delete_app(app_id))
        button.add_controller(gesture)

        drag_source = Gtk.DragSource()
        drag_source.set_actions(Gdk.DragAction.MOVE)
        drag_source.connect("prepare", lambda src, x, y, app_id=app.id: self._on_drag_prepare(app_id))
        drag_source.connect("drag-end", lambda src, drag, delete: self.service.end_drag())
        button.add_controller(drag_source)

        drop_target = Gtk.DropTarget.new(GObject.TYPE_STRING, Gdk.DragAction.MOVE)
        drop_target.connect(
            "drop",
            lambda tgt, value, x, y, to=index: self._on_reorder_drop(folder_id, value, to),
        )
        button.add_controller(drop_target)
        return button

    def _on_drag_prepare(self, app_id):
        self.service.begin_drag(app_id)
        return Gdk.ContentProvider.new_for_value(GObject.Value(str, app_id))

    def _on_reorder_drop(self, folder_id, dragged_id, to_index):
        location = self.service.store.locate(dragged_id)
        self.service.end_drag()
        if location is None or location.folder_id != folder_id:
            return False
        return self.service.reorder_in_folder(folder_id, location.inner_index, to_index)

    def _on_rename(self):
        folder_id = self.service.active_folder_id
        if folder_id is not None:
            self.service.rename_folder(folder_id, self.name_entry.text)
