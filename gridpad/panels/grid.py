"""
Grid Panel - Full-screen paginated launcher grid.

Features:
- Search entry filtering apps (and folders containing matching apps)
- Fixed columns x rows pages with previous/next navigation
- Drag-and-drop: short hover swaps, holding over an app or folder groups
- Right-click an app to delete its icon
- Click a folder to open it (see FolderView)
- Re-renders whenever the layout service commits a change
"""

from gi.repository import Gdk, GObject, Gtk
from ignis import widgets

from gridpad.engine.elements import Application, Empty, Folder
from gridpad.panels.folder import FolderView
from gridpad.services import get_launchpad_service
from gridpad.utils.helpers import close_launcher, get_focused_monitor


class GridPanel:
    """
    Launchpad-style grid of application slots.

    All layout decisions live in LaunchpadService; this class only maps
    GTK gestures onto service calls and draws the current page.
    """

    def __init__(self, service=None):
        self.service = service or get_launchpad_service()
        self.columns = self.service.settings["grid"]["columns"]
        self.rows = self.service.settings["grid"]["rows"]
        self.current_page = 0

        # Widgets (created in create_window)
        self.search_entry = None
        self.grid = None
        self.page_label = None
        self.folder_view = None

        # Connect to layout changes
        self.service.connect("changed", lambda x: self._refresh())

    def create_window(self):
        """
        Create the launcher window.

        Returns:
            widgets.Window covering the focused monitor
        """
        self.search_entry = widgets.Entry(
            placeholder_text="Search...",
            css_classes=["search-entry"],
            on_change=lambda x: self._on_search_changed(),
        )
        self.search_entry.set_alignment(0.5)

        self.grid = Gtk.Grid(column_homogeneous=True, row_homogeneous=True, vexpand=True, hexpand=True)
        self.grid.add_css_class("app-grid")

        self.page_label = widgets.Label(label="", css_classes=["page-label"])

        self.folder_view = FolderView(self.service, on_close=self._close_folder)

        grid_area = Gtk.Overlay(child=self.grid, vexpand=True, hexpand=True)
        grid_area.add_overlay(self.folder_view.widget)

        window = widgets.Window(
            namespace="gridpad",
            css_classes=["gridpad-window"],
            monitor=get_focused_monitor(),
            anchor=["top", "bottom", "left", "right"],
            exclusivity="ignore",
            kb_mode="on_demand",
            layer="overlay",
            visible=False,  # Start hidden, show via hotkey
            child=widgets.Box(
                vertical=True,
                spacing=12,
                css_classes=["panel", "grid-panel"],
                child=[
                    self.search_entry,
                    grid_area,
                    widgets.Box(
                        halign="center",
                        spacing=16,
                        child=[
                            widgets.Button(
                                child=widgets.Icon(image="go-previous-symbolic"),
                                css_classes=["page-button"],
                                on_click=lambda x: self._go_to_page(self.current_page - 1),
                            ),
                            self.page_label,
                            widgets.Button(
                                child=widgets.Icon(image="go-next-symbolic"),
                                css_classes=["page-button"],
                                on_click=lambda x: self._go_to_page(self.current_page + 1),
                            ),
                        ],
                    ),
                ],
            ),
        )

        key_controller = Gtk.EventControllerKey()
        key_controller.connect("key-pressed", self._on_key_press)
        window.add_controller(key_controller)

        window.connect("notify::visible", self._on_visibility_changed)

        self._refresh()
        return window

    # Rendering

    def _refresh(self):
        """Redraw the current page from the service's layout."""
        if self.grid is None:
            return

        child = self.grid.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self.grid.remove(child)
            child = next_child

        pages = self.service.pages()
        self.current_page = self.service.clamp_page(self.current_page)
        page = pages[self.current_page] if pages else []

        for slot, element in enumerate(page):
            row, column = divmod(slot, self.columns)
            self.grid.attach(self._create_slot(element), column, row, 1, 1)

        self.page_label.set_label(f"{self.current_page + 1} / {max(len(pages), 1)}")
        self.folder_view.refresh()

    def _create_slot(self, element):
        match element:
            case Application():
                widget = self._create_app_button(element)
            case Folder():
                widget = self._create_folder_button(element)
            case Empty():
                widget = widgets.Box(css_classes=["empty-slot"], hexpand=True, vexpand=True)

        self._add_drop_target(widget, element.id)
        return widget

    def _create_app_button(self, app):
        button = widgets.Button(
            css_classes=["app-item"],
            on_click=lambda x, app=app: self.service.launch(app),
            child=widgets.Box(
                vertical=True,
                spacing=6,
                valign="center",
                child=[
                    widgets.Icon(
                        image=app.icon or "application-x-executable",
                        pixel_size=64,
                        css_classes=["app-icon"],
                    ),
                    widgets.Label(
                        label=app.name,
                        css_classes=["app-name"],
                        ellipsize="end",
                        max_width_chars=14,
                    ),
                ],
            ),
        )

        # Right-click deletes the icon
        gesture = Gtk.GestureClick()
        gesture.set_button(3)
        gesture.connect("pressed", lambda g, n, x, y, app_id=app.id: self.service.delete_app(app_id))
        button.add_controller(gesture)

        self._add_drag_source(button, app.id)
        return button

    def _create_folder_button(self, folder):
        # Up to 9 mini icons, 3 per row
        preview = Gtk.Grid(column_homogeneous=True, row_homogeneous=True, css_classes=["folder-preview"])
        for i, app in enumerate(folder.items[:9]):
            preview.attach(
                widgets.Icon(image=app.icon or "application-x-executable", pixel_size=18),
                i % 3, i // 3, 1, 1,
            )

        button = widgets.Button(
            css_classes=["app-item", "folder-item"],
            on_click=lambda x, folder_id=folder.id: self._toggle_folder(folder_id),
            child=widgets.Box(
                vertical=True,
                spacing=6,
                valign="center",
                child=[
                    preview,
                    widgets.Label(
                        label=folder.name,
                        css_classes=["app-name"],
                        ellipsize="end",
                        max_width_chars=14,
                    ),
                ],
            ),
        )
        self._add_drag_source(button, folder.id)
        return button

    # Drag-and-drop

    def _add_drag_source(self, widget, element_id):
        drag_source = Gtk.DragSource()
        drag_source.set_actions(Gdk.DragAction.MOVE)
        drag_source.connect("prepare", lambda src, x, y, eid=element_id: self._on_drag_prepare(eid))
        drag_source.connect("drag-end", lambda src, drag, delete: self.service.end_drag())
        widget.add_controller(drag_source)

    def _add_drop_target(self, widget, element_id):
        drop_target = Gtk.DropTarget.new(GObject.TYPE_STRING, Gdk.DragAction.MOVE)
        drop_target.connect("enter", lambda tgt, x, y, eid=element_id: self._on_drop_enter(widget, eid))
        drop_target.connect("leave", lambda tgt, eid=element_id: self._on_drop_leave(widget, eid))
        drop_target.connect("drop", lambda tgt, value, x, y, eid=element_id: self.service.drop(value, eid))
        widget.add_controller(drop_target)

    def _on_drag_prepare(self, element_id):
        """Drag payload is the element id as plain text."""
        self.service.begin_drag(element_id)
        return Gdk.ContentProvider.new_for_value(GObject.Value(str, element_id))

    def _on_drop_enter(self, widget, element_id):
        widget.add_css_class("drag-hover")
        self.service.drag_enter(element_id)
        return Gdk.DragAction.MOVE

    def _on_drop_leave(self, widget, element_id):
        widget.remove_css_class("drag-hover")
        self.service.drag_leave(element_id)

    # Navigation

    def _go_to_page(self, page):
        self.current_page = self.service.clamp_page(page)
        self._refresh()

    def _on_search_changed(self):
        self.service.set_query(self.search_entry.text.strip())
        self.current_page = 0
        self._refresh()

    def _toggle_folder(self, folder_id):
        self.service.toggle_folder(folder_id)
        self.folder_view.refresh()

    def _close_folder(self):
        self.service.active_folder_id = None
        self.folder_view.refresh()

    def _on_key_press(self, controller, keyval, keycode, state):
        """Escape closes the open folder (or the launcher), arrows flip pages."""
        if keyval == Gdk.KEY_Escape:
            if self.service.active_folder_id is not None:
                self._close_folder()
            else:
                close_launcher()
            return True

        if keyval in (Gdk.KEY_Right, Gdk.KEY_Page_Down):
            self._go_to_page(self.current_page + 1)
            return True

        if keyval in (Gdk.KEY_Left, Gdk.KEY_Page_Up):
            self._go_to_page(self.current_page - 1)
            return True

        return False

    def _on_visibility_changed(self, window, param):
        """Reset search on close; follow the focused monitor on open."""
        if window.get_visible():
            monitor = get_focused_monitor()
            if window.monitor != monitor:
                window.monitor = monitor
            self.search_entry.grab_focus()
        else:
            self.search_entry.set_text("")
            self.service.end_drag()
            self._close_folder()
