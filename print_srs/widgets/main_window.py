"""
MainWindow - Main application window

Pattern: QMainWindow with a prints sidebar and a stacked work area

Layout:
    +------------------------------------------------------+
    |  Subject filter  |  Today: N due  [Review]           |
    +------------------+-----------------------------------+
    |  Prints list     |  EditPanel / ReviewPanel /        |
    |  [Import] ...    |  PickerPanel                      |
    +------------------+-----------------------------------+
    |  StatusBar                                           |
    +------------------------------------------------------+
"""

import logging
from pathlib import Path

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QAbstractItemView, QComboBox, QFileDialog, QHBoxLayout, QInputDialog,
    QLabel, QListWidget, QListWidgetItem, QMainWindow, QMessageBox,
    QPushButton, QStackedWidget, QStatusBar, QVBoxLayout, QWidget
)

from ..config import Config
from ..core.page_importer import ImageDecodeError
from ..events.event_bus import get_event_bus
from ..services.database_service import get_database_service
from ..services.mask_editor import MaskEditor
from ..services.print_service import PrintService
from ..services.record_cache import MissingPageError
from ..services.review_session import PracticePicker, ReviewSession
from .edit_panel import EditPanel
from .review_panel import PickerPanel, ReviewPanel


logger = logging.getLogger(__name__)

ALL_SUBJECTS = "All subjects"
IMAGE_FILTER = "Images (*.jpg *.jpeg *.png *.heic *.webp *.bmp);;All files (*)"


class MainWindow(QMainWindow):
    """
    Main application window

    Features:
    - Prints list with subject filter, import, rename, re-subject and delete
    - Mask editor for the selected print
    - Due review session and practice picker
    - Error reporting through the event bus
    """

    EDIT_PAGE, REVIEW_PAGE, PICKER_PAGE = range(3)

    def __init__(self, parent=None, db_service=None, event_bus=None):
        super().__init__(parent)

        # Services and event bus (injectable for testing)
        self._event_bus = event_bus or get_event_bus()
        self._db_service = db_service or get_database_service()
        self._print_service = PrintService(self._db_service, event_bus=self._event_bus)
        self._editor = MaskEditor(self._db_service, self._event_bus)
        self._session = ReviewSession(self._db_service, event_bus=self._event_bus)
        self._picker = PracticePicker(self._db_service)

        self._setup_window()
        self._create_widgets()
        self._create_layout()
        self._connect_signals()
        self._load_subject_filter()
        self._refresh_prints()

    def _setup_window(self):
        self.setWindowTitle(f"{Config.APP_NAME} {Config.APP_VERSION}")
        self.resize(Config.DEFAULT_WINDOW_WIDTH, Config.DEFAULT_WINDOW_HEIGHT)

    def _create_widgets(self):
        importer = self._print_service.importer

        self._subject_combo = QComboBox()
        self._due_label = QLabel()
        self._review_btn = QPushButton("Review due")

        self._print_list = QListWidget()
        self._print_list.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)

        self._import_btn = QPushButton("Import photo...")
        self._rename_btn = QPushButton("Rename")
        self._subject_btn = QPushButton("Set subject...")
        self._export_btn = QPushButton("Export masked...")
        self._delete_btn = QPushButton("Delete")

        self._edit_panel = EditPanel(self._editor, importer, self._event_bus)
        self._review_panel = ReviewPanel(self._session, importer, self._event_bus)
        self._picker_panel = PickerPanel(self._picker, importer)

        self._stack = QStackedWidget()
        self._stack.addWidget(self._edit_panel)
        self._stack.addWidget(self._review_panel)
        self._stack.addWidget(self._picker_panel)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

    def _create_layout(self):
        header = QHBoxLayout()
        header.addWidget(self._subject_combo)
        header.addStretch()
        header.addWidget(self._due_label)
        header.addWidget(self._review_btn)

        sidebar = QVBoxLayout()
        sidebar.addWidget(self._print_list, 1)
        for widget in (self._import_btn, self._rename_btn, self._subject_btn,
                       self._export_btn, self._delete_btn):
            sidebar.addWidget(widget)
        sidebar_widget = QWidget()
        sidebar_widget.setLayout(sidebar)
        sidebar_widget.setFixedWidth(240)

        body = QHBoxLayout()
        body.addWidget(sidebar_widget)
        body.addWidget(self._stack, 1)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addLayout(header)
        layout.addLayout(body, 1)
        self.setCentralWidget(central)

    def _connect_signals(self):
        self._subject_combo.currentIndexChanged.connect(self._on_subject_filter_changed)
        self._print_list.currentItemChanged.connect(self._on_print_selected)
        self._review_btn.clicked.connect(self._start_due_review)
        self._import_btn.clicked.connect(self._on_import)
        self._rename_btn.clicked.connect(self._on_rename)
        self._subject_btn.clicked.connect(self._on_set_subject)
        self._export_btn.clicked.connect(self._on_export)
        self._delete_btn.clicked.connect(self._on_delete)

        self._edit_panel.practice_requested.connect(self._open_picker)
        self._edit_panel.study_requested.connect(self._start_print_review)
        self._picker_panel.start_requested.connect(self._start_practice)
        self._review_panel.finished.connect(self._back_to_editor)

        self._event_bus.print_added.connect(lambda _pid: self._refresh_prints())
        self._event_bus.print_updated.connect(lambda _pid: self._refresh_prints())
        self._event_bus.prints_deleted.connect(lambda _ids: self._refresh_prints())
        self._event_bus.group_rated.connect(lambda _gid, _rating: self._update_due_label())
        self._event_bus.group_skipped.connect(lambda _gid: self._update_due_label())
        self._event_bus.groups_changed.connect(lambda _pid: self._update_due_label())
        self._event_bus.error_occurred.connect(self._on_error)

    # ==================== Subject Filter ====================

    def _load_subject_filter(self):
        self._subject_combo.blockSignals(True)
        self._subject_combo.clear()
        self._subject_combo.addItem(ALL_SUBJECTS)
        for subject in self._print_service.subjects_in_data():
            self._subject_combo.addItem(subject)

        saved = Config.load_subject_filter()
        if saved:
            index = self._subject_combo.findText(saved[0])
            self._subject_combo.setCurrentIndex(max(0, index))
        self._subject_combo.blockSignals(False)

    def _selected_subjects(self):
        text = self._subject_combo.currentText()
        return None if text == ALL_SUBJECTS or not text else [text]

    def _on_subject_filter_changed(self, _index: int):
        Config.save_subject_filter(self._selected_subjects())
        self._refresh_prints()

    # ==================== Prints ====================

    def _refresh_prints(self):
        current_id = self._current_print_id()
        subjects = self._selected_subjects()

        self._print_list.blockSignals(True)
        self._print_list.clear()
        for record in self._print_service.list_prints():
            if subjects and record.display_subject() not in subjects:
                continue
            item = QListWidgetItem(f"{record.title}\n{record.display_subject()}")
            item.setData(Qt.ItemDataRole.UserRole, record.id)
            self._print_list.addItem(item)
            if record.id == current_id:
                self._print_list.setCurrentItem(item)
        self._print_list.blockSignals(False)
        self._update_due_label()

    def _current_print_id(self):
        item = self._print_list.currentItem()
        return item.data(Qt.ItemDataRole.UserRole) if item else None

    def _selected_print_ids(self):
        return [item.data(Qt.ItemDataRole.UserRole) for item in self._print_list.selectedItems()]

    def _update_due_label(self):
        count = len(self._session.scheduler.compute_due(self._selected_subjects()))
        self._due_label.setText(f"Today: {count} due")
        self._review_btn.setEnabled(count > 0)

    def _on_print_selected(self, current, previous):
        if current is None:
            return
        self._open_editor(current.data(Qt.ItemDataRole.UserRole))

    def _open_editor(self, print_id: str):
        try:
            self._edit_panel.open_print(print_id)
        except MissingPageError as e:
            self._event_bus.report_error("missing_page", str(e))
            return
        self._stack.setCurrentIndex(self.EDIT_PAGE)

    def _on_import(self):
        path, _ = QFileDialog.getOpenFileName(self, "Import worksheet photo", "", IMAGE_FILTER)
        if not path:
            return
        subject, ok = QInputDialog.getItem(
            self, "Subject", "Subject:", list(Config.SUBJECT_PRESETS), 0, True
        )
        if not ok:
            return
        try:
            record = self._print_service.import_print(Path(path), subject=subject)
        except ImageDecodeError as e:
            self._event_bus.report_error("import", str(e))
            return
        self._load_subject_filter()
        self._refresh_prints()
        self._select_print(record.id)
        self._status_bar.showMessage(f"Imported {record.title}", 3000)

    def _select_print(self, print_id: str):
        for row in range(self._print_list.count()):
            item = self._print_list.item(row)
            if item.data(Qt.ItemDataRole.UserRole) == print_id:
                self._print_list.setCurrentItem(item)
                return

    def _on_rename(self):
        print_id = self._current_print_id()
        record = self._db_service.cache.get_print(print_id)
        if record is None:
            return
        title, ok = QInputDialog.getText(self, "Rename print", "Title:", text=record.title)
        if ok and title.strip():
            self._print_service.rename_print(print_id, title.strip())

    def _on_set_subject(self):
        print_ids = self._selected_print_ids()
        if not print_ids:
            return
        subject, ok = QInputDialog.getItem(
            self, "Set subject", "Subject:", self._print_service.subjects_in_data(), 0, True
        )
        if ok:
            updated = self._print_service.set_subject(print_ids, subject)
            self._load_subject_filter()
            self._status_bar.showMessage(f"Updated {updated} print(s)", 3000)

    def _on_export(self):
        print_id = self._current_print_id()
        if print_id is None:
            return
        path, _ = QFileDialog.getSaveFileName(self, "Export masked page", "masked.png", "PNG (*.png)")
        if not path:
            return
        try:
            Path(path).write_bytes(self._print_service.export_masked_page(print_id))
        except (MissingPageError, OSError) as e:
            self._event_bus.report_error("export", str(e))

    def _on_delete(self):
        print_ids = self._selected_print_ids()
        if not print_ids:
            return
        reply = QMessageBox.question(
            self, "Delete prints",
            f"Delete {len(print_ids)} print(s) with all their questions and history?",
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        removed = self._print_service.delete_prints(print_ids)
        self._load_subject_filter()
        self._status_bar.showMessage(f"Deleted {removed} print(s)", 3000)

    # ==================== Review ====================

    def _start_due_review(self):
        self._run_session(self._session.start_due, self._selected_subjects())

    def _start_print_review(self, print_id: str):
        group_ids = [item.group.id for item in self._session.scheduler.due_for_print(print_id)]
        if not group_ids:
            self._status_bar.showMessage("Nothing due for this print", 3000)
            return
        self._run_session(self._session.start_practice, group_ids)

    def _open_picker(self, print_id: str):
        if not print_id:
            return
        try:
            self._picker_panel.open_print(print_id)
        except MissingPageError as e:
            self._event_bus.report_error("missing_page", str(e))
            return
        self._stack.setCurrentIndex(self.PICKER_PAGE)

    def _start_practice(self, group_ids: list):
        self._run_session(self._session.start_practice, group_ids)

    def _run_session(self, start, *args):
        try:
            start(*args)
        except MissingPageError as e:
            self._event_bus.report_error("missing_page", str(e))
            return
        self._review_panel.refresh()
        self._stack.setCurrentIndex(self.REVIEW_PAGE)

    def _back_to_editor(self):
        self._update_due_label()
        print_id = self._current_print_id()
        if print_id:
            self._open_editor(print_id)
        else:
            self._stack.setCurrentIndex(self.EDIT_PAGE)

    # ==================== Errors ====================

    def _on_error(self, error_type: str, message: str):
        logger.error(f"{error_type}: {message}")
        QMessageBox.warning(self, "Print SRS", message)


__all__ = ['MainWindow']
