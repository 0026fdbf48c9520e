"""
ReviewCanvas / PickerCanvas - Read-only page canvases driven by pinch gestures

ReviewCanvas hides the current group's answers until tapped. PickerCanvas
toggles whole groups for a practice session.
"""

from typing import Optional

from PyQt6.QtCore import QPointF, pyqtSignal
from PyQt6.QtGui import QColor, QPainter
from PyQt6.QtWidgets import QWidget

from ..config import Config
from ..core.page_importer import PageImporter
from ..gestures import PinchGestureEngine
from ..services.review_session import PracticePicker, ReviewSession
from .page_canvas import PageCanvas


class _PinchCanvas(PageCanvas):
    """Page canvas that feeds pointers into a PinchGestureEngine."""

    def __init__(self, importer: Optional[PageImporter] = None, parent: Optional[QWidget] = None):
        super().__init__(importer, parent)
        self._engine = PinchGestureEngine(self._transform, self)
        self._engine.changed.connect(self.update)
        self._engine.tapped.connect(self._on_tapped)

    @property
    def engine(self) -> PinchGestureEngine:
        return self._engine

    def _pointer_down(self, pointer_id, pos, modifiers):
        self._engine.pointer_down(pointer_id, pos)

    def _pointer_move(self, pointer_id, pos):
        self._engine.pointer_move(pointer_id, pos)

    def _pointer_up(self, pointer_id, pos):
        self._engine.pointer_up(pointer_id, pos)

    def _pointer_cancel(self):
        self._engine.pointer_cancel()

    def _wheel(self, pos, delta_y):
        self._engine.wheel(pos, delta_y)

    def _on_tapped(self, pos: QPointF):
        pass


class ReviewCanvas(_PinchCanvas):
    """
    Review surface.

    Current-group masks are opaque until revealed, then drawn at
    REVEALED_MASK_OPACITY. Masks of other groups stay covered in grey.
    """

    HIDDEN_FILL = QColor(0, 0, 0)
    OTHER_GROUP_FILL = QColor(90, 90, 90, 230)

    mask_tapped = pyqtSignal(str)

    def __init__(self, session: ReviewSession, importer: Optional[PageImporter] = None,
                 parent: Optional[QWidget] = None):
        super().__init__(importer, parent)
        self._session = session

    def reload(self):
        self.set_page(self._session.page)

    def _on_tapped(self, pos: QPointF):
        norm = self.to_normalized(pos)
        mask_id = self._session.tap_at(norm.x(), norm.y())
        if mask_id is not None:
            self.mask_tapped.emit(mask_id)
            self.update()

    def _paint_overlay(self, painter: QPainter):
        current = self._session.current_group_id
        highlight = QColor(Config.HIGHLIGHT_COLOR)
        for mask in self._session.page_masks():
            rect = self._transform.normalized_rect_to_screen(mask.rect)
            if mask.group_id != current:
                painter.fillRect(rect, self.OTHER_GROUP_FILL)
            elif mask.id in self._session.revealed:
                painter.save()
                painter.setOpacity(Config.REVEALED_MASK_OPACITY)
                painter.fillRect(rect, highlight)
                painter.restore()
            else:
                painter.fillRect(rect, self.HIDDEN_FILL)


class PickerCanvas(_PinchCanvas):
    """Practice picker surface; selected groups are highlighted."""

    UNSELECTED_FILL = QColor(20, 20, 20, 200)

    selection_changed = pyqtSignal()

    def __init__(self, picker: PracticePicker, importer: Optional[PageImporter] = None,
                 parent: Optional[QWidget] = None):
        super().__init__(importer, parent)
        self._picker = picker

    def reload(self):
        self.set_page(self._picker.page)

    def _on_tapped(self, pos: QPointF):
        norm = self.to_normalized(pos)
        if self._picker.toggle_group_at(norm.x(), norm.y()) is not None:
            self.selection_changed.emit()
            self.update()

    def _paint_overlay(self, painter: QPainter):
        highlight = QColor(Config.HIGHLIGHT_COLOR)
        for mask in self._picker.masks():
            rect = self._transform.normalized_rect_to_screen(mask.rect)
            painter.fillRect(rect, highlight if mask.group_id in self._picker.selected else self.UNSELECTED_FILL)


__all__ = ['ReviewCanvas', 'PickerCanvas']
