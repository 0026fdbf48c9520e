"""
ReviewPanel / PickerPanel - Review session and practice picker screens
"""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout, QLabel, QPushButton, QStackedLayout, QVBoxLayout, QWidget
)

from ..core.page_importer import PageImporter
from ..events.event_bus import EventBus, get_event_bus
from ..models.records import Rating
from ..services.record_cache import MissingPageError
from ..services.review_session import PracticePicker, ReviewSession, SessionMode
from .review_canvas import PickerCanvas, ReviewCanvas


logger = logging.getLogger(__name__)


class ReviewPanel(QWidget):
    """
    Review screen

    Header shows the group label and remaining count; the footer carries
    navigation, skip and the four rating buttons. A finished session swaps the
    canvas for a summary.

    Signals:
        finished: User left the finished screen
    """

    finished = pyqtSignal()

    def __init__(self, session: ReviewSession, importer: Optional[PageImporter] = None,
                 event_bus: Optional[EventBus] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._session = session
        self._event_bus = event_bus or get_event_bus()

        self._header = QLabel()
        self._header.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._canvas = ReviewCanvas(session, importer)

        self._done_label = QLabel()
        self._done_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._done_btn = QPushButton("Back")
        done_widget = QWidget()
        done_layout = QVBoxLayout(done_widget)
        done_layout.addStretch()
        done_layout.addWidget(self._done_label)
        done_layout.addWidget(self._done_btn, 0, Qt.AlignmentFlag.AlignCenter)
        done_layout.addStretch()

        self._stack = QStackedLayout()
        self._stack.addWidget(self._canvas)
        self._stack.addWidget(done_widget)

        self._prev_btn = QPushButton("Previous")
        self._next_btn = QPushButton("Next")
        self._skip_btn = QPushButton("Skip today")
        self._reveal_btn = QPushButton("Reveal all")
        self._rating_btns = {rating: QPushButton(rating.value.capitalize()) for rating in Rating}

        footer = QHBoxLayout()
        for widget in (self._prev_btn, self._next_btn, self._skip_btn, self._reveal_btn):
            footer.addWidget(widget)
        footer.addStretch()
        for btn in self._rating_btns.values():
            footer.addWidget(btn)

        layout = QVBoxLayout(self)
        layout.addWidget(self._header)
        layout.addLayout(self._stack, 1)
        layout.addLayout(footer)

        self._prev_btn.clicked.connect(self._on_previous)
        self._next_btn.clicked.connect(self._on_next)
        self._skip_btn.clicked.connect(self._on_skip)
        self._reveal_btn.clicked.connect(self._on_reveal_all)
        for rating, btn in self._rating_btns.items():
            btn.clicked.connect(lambda _checked=False, r=rating: self._on_rate(r))
        self._done_btn.clicked.connect(self.finished.emit)
        self._event_bus.review_group_opened.connect(lambda _gid, _remaining: self.refresh())

    def refresh(self):
        """Sync header, canvas and buttons with the session."""
        if self._session.is_done:
            self._done_label.setText(f"All done! {self._session.done_count} reviewed.")
            self._stack.setCurrentIndex(1)
            self._header.setText("")
            self._set_controls_enabled(False)
            return

        group = self._session.current_group
        self._header.setText(f"{group.label if group else ''}  -  {self._session.remaining} remaining")
        self._stack.setCurrentIndex(0)
        self._set_controls_enabled(group is not None)
        self._skip_btn.setVisible(self._session.mode == SessionMode.DUE)
        self._canvas.reload()
        self._canvas.update()

    def _set_controls_enabled(self, enabled: bool):
        for widget in (self._prev_btn, self._next_btn, self._skip_btn, self._reveal_btn,
                       *self._rating_btns.values()):
            widget.setEnabled(enabled)

    def _run(self, action, *args):
        try:
            action(*args)
        except MissingPageError as e:
            logger.error(f"Review stopped: {e}")
            self._event_bus.report_error("missing_page", str(e))
        self.refresh()

    def _on_previous(self):
        self._run(self._session.previous)

    def _on_next(self):
        self._run(self._session.next)

    def _on_rate(self, rating: Rating):
        self._run(self._session.rate, rating)

    def _on_skip(self):
        self._run(self._session.skip_current)

    def _on_reveal_all(self):
        self._session.reveal_all()
        self._canvas.update()


class PickerPanel(QWidget):
    """
    Practice picker screen

    Signals:
        start_requested(list): Selected group ids in group order
    """

    start_requested = pyqtSignal(list)

    def __init__(self, picker: PracticePicker, importer: Optional[PageImporter] = None,
                 parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._picker = picker

        self._hint = QLabel("Tap answers to choose questions")
        self._canvas = PickerCanvas(picker, importer)
        self._all_btn = QPushButton("Select all")
        self._clear_btn = QPushButton("Clear")
        self._start_btn = QPushButton("Start practice")

        footer = QHBoxLayout()
        footer.addWidget(self._all_btn)
        footer.addWidget(self._clear_btn)
        footer.addStretch()
        footer.addWidget(self._start_btn)

        layout = QVBoxLayout(self)
        layout.addWidget(self._hint)
        layout.addWidget(self._canvas, 1)
        layout.addLayout(footer)

        self._canvas.selection_changed.connect(self._update_buttons)
        self._all_btn.clicked.connect(self._on_select_all)
        self._clear_btn.clicked.connect(self._on_clear)
        self._start_btn.clicked.connect(lambda: self.start_requested.emit(self._picker.build_queue()))

    def open_print(self, print_id: str):
        """
        Raises:
            MissingPageError: If the print has no page
        """
        self._picker.load(print_id)
        self._canvas.reload()
        self._update_buttons()

    def _on_select_all(self):
        self._picker.select_all()
        self._canvas.update()
        self._update_buttons()

    def _on_clear(self):
        self._picker.clear()
        self._canvas.update()
        self._update_buttons()

    def _update_buttons(self):
        count = len(self._picker.selected)
        self._start_btn.setEnabled(count > 0)
        self._start_btn.setText(f"Start practice ({count})" if count else "Start practice")


__all__ = ['ReviewPanel', 'PickerPanel']
