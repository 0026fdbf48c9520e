"""
EditPanel - Group sidebar plus mask editing canvas for one print

Layout:
    +-------------+--------------------------------+
    | Groups      |                                |
    | [Q1 (3)]    |         EditCanvas             |
    | [Q2 (1)]    |                                |
    | buttons     |                                |
    +-------------+--------------------------------+
"""

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout, QInputDialog, QLabel, QListWidget, QListWidgetItem,
    QPushButton, QVBoxLayout, QWidget
)

from ..core.page_importer import PageImporter
from ..events.event_bus import EventBus, get_event_bus
from ..services.mask_editor import MaskEditor
from .edit_canvas import EditCanvas


class EditPanel(QWidget):
    """
    Editor for the groups and masks of one print

    Signals:
        practice_requested(str): print_id to open in the practice picker
        study_requested(str): print_id whose due groups should be reviewed
    """

    practice_requested = pyqtSignal(str)
    study_requested = pyqtSignal(str)

    def __init__(self, editor: MaskEditor, importer: Optional[PageImporter] = None,
                 event_bus: Optional[EventBus] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._editor = editor
        self._event_bus = event_bus or get_event_bus()
        self._updating_list = False

        self._create_widgets(importer)
        self._create_layout()
        self._connect_signals()

    def _create_widgets(self, importer: Optional[PageImporter]):
        self._title_label = QLabel()
        self._title_label.setStyleSheet("font-weight: bold;")

        self._group_list = QListWidget()

        self._new_btn = QPushButton("New group")
        self._rename_btn = QPushButton("Rename")
        self._up_btn = QPushButton("Up")
        self._down_btn = QPushButton("Down")
        self._delete_btn = QPushButton("Delete group")
        self._assign_btn = QPushButton("Move selection here")
        self._delete_masks_btn = QPushButton("Delete selected masks")
        self._practice_btn = QPushButton("Practice...")
        self._study_btn = QPushButton("Study due")
        self._zoom_in_btn = QPushButton("+")
        self._zoom_out_btn = QPushButton("-")
        self._fit_btn = QPushButton("Fit")

        self._canvas = EditCanvas(self._editor, importer)

    def _create_layout(self):
        sidebar = QVBoxLayout()
        sidebar.addWidget(self._title_label)
        sidebar.addWidget(self._group_list, 1)

        order_row = QHBoxLayout()
        order_row.addWidget(self._up_btn)
        order_row.addWidget(self._down_btn)

        for widget in (self._new_btn, self._rename_btn):
            sidebar.addWidget(widget)
        sidebar.addLayout(order_row)
        for widget in (self._delete_btn, self._assign_btn, self._delete_masks_btn,
                       self._practice_btn, self._study_btn):
            sidebar.addWidget(widget)

        zoom_row = QHBoxLayout()
        zoom_row.addWidget(self._zoom_out_btn)
        zoom_row.addWidget(self._fit_btn)
        zoom_row.addWidget(self._zoom_in_btn)
        sidebar.addLayout(zoom_row)

        sidebar_widget = QWidget()
        sidebar_widget.setLayout(sidebar)
        sidebar_widget.setFixedWidth(220)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(sidebar_widget)
        layout.addWidget(self._canvas, 1)

    def _connect_signals(self):
        self._group_list.currentItemChanged.connect(self._on_group_item_changed)
        self._new_btn.clicked.connect(self._on_new_group)
        self._rename_btn.clicked.connect(self._on_rename_group)
        self._up_btn.clicked.connect(lambda: self._on_reorder(-1))
        self._down_btn.clicked.connect(lambda: self._on_reorder(1))
        self._delete_btn.clicked.connect(self._on_delete_group)
        self._assign_btn.clicked.connect(self._on_assign_selection)
        self._delete_masks_btn.clicked.connect(self._on_delete_masks)
        self._practice_btn.clicked.connect(lambda: self.practice_requested.emit(self._editor.print_id or ''))
        self._study_btn.clicked.connect(lambda: self.study_requested.emit(self._editor.print_id or ''))
        self._zoom_in_btn.clicked.connect(self._canvas.zoom_in)
        self._zoom_out_btn.clicked.connect(self._canvas.zoom_out)
        self._fit_btn.clicked.connect(self._canvas.fit_to_view)

        self._event_bus.groups_changed.connect(self._on_data_changed)
        self._event_bus.masks_changed.connect(self._on_data_changed)
        self._event_bus.current_group_changed.connect(self._sync_current_item)
        self._event_bus.mask_selection_changed.connect(lambda _ids: self._canvas.update())

    # ==================== Public ====================

    def open_print(self, print_id: str):
        """
        Load a print into the editor

        Raises:
            MissingPageError: If the print has no page
        """
        self._editor.load(print_id)
        record = self._editor.cache.get_print(print_id)
        self._title_label.setText(record.title if record else '')
        self._canvas.reload()
        self._refresh_groups()

    # ==================== Refresh ====================

    def _on_data_changed(self, print_id: str):
        if print_id == self._editor.print_id:
            self._refresh_groups()
            self._canvas.update()

    def _refresh_groups(self):
        self._updating_list = True
        self._group_list.clear()
        for group in self._editor.groups():
            item = QListWidgetItem(f"{group.label} ({self._editor.masks_in_group(group.id)})")
            item.setData(Qt.ItemDataRole.UserRole, group.id)
            self._group_list.addItem(item)
            if group.id == self._editor.current_group_id:
                self._group_list.setCurrentItem(item)
        self._updating_list = False
        self._canvas.update()

    def _sync_current_item(self, group_id):
        self._updating_list = True
        for row in range(self._group_list.count()):
            item = self._group_list.item(row)
            if item.data(Qt.ItemDataRole.UserRole) == group_id:
                if self._group_list.currentItem() is not item:
                    self._group_list.setCurrentItem(item)
                break
        self._updating_list = False
        self._canvas.update()

    # ==================== Actions ====================

    def _on_group_item_changed(self, current, previous):
        if self._updating_list or current is None:
            return
        self._editor.select_group(current.data(Qt.ItemDataRole.UserRole))
        self._canvas.update()

    def _on_new_group(self):
        self._editor.create_group()

    def _on_rename_group(self):
        group = self._editor.cache.get_group(self._editor.current_group_id)
        if group is None:
            return
        label, ok = QInputDialog.getText(self, "Rename group", "Label:", text=group.label)
        if ok and label.strip():
            self._editor.rename_group(group.id, label.strip())

    def _on_reorder(self, delta: int):
        if self._editor.current_group_id:
            self._editor.reorder_group(self._editor.current_group_id, delta)

    def _on_delete_group(self):
        if self._editor.current_group_id:
            self._editor.delete_group(self._editor.current_group_id)

    def _on_assign_selection(self):
        selected = self._editor.selected_mask_ids
        if selected and self._editor.current_group_id:
            self._editor.reassign_masks(selected, self._editor.current_group_id)

    def _on_delete_masks(self):
        selected = self._editor.selected_mask_ids
        if selected:
            self._editor.delete_masks(selected)


__all__ = ['EditPanel']
