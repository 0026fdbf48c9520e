"""
EditCanvas - Page canvas for drawing and moving answer masks
"""

from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget

from ..config import Config
from ..core.page_importer import PageImporter
from ..gestures import EditGestureEngine
from ..services.mask_editor import MaskEditor
from .page_canvas import PageCanvas


class EditCanvas(PageCanvas):
    """
    Mask editing canvas.

    Masks of the current group are filled with the highlight color, masks of
    other groups are drawn dark. Every mask shows its group label.
    """

    OTHER_GROUP_FILL = QColor(20, 20, 20, 200)
    SELECTION_PEN = QColor(40, 140, 255)

    def __init__(self, editor: MaskEditor, importer: Optional[PageImporter] = None,
                 parent: Optional[QWidget] = None):
        super().__init__(importer, parent)
        self._editor = editor
        self._engine = EditGestureEngine(editor, self._transform, self)
        self._engine.changed.connect(self.update)

    @property
    def engine(self) -> EditGestureEngine:
        return self._engine

    def reload(self):
        self.set_page(self._editor.page)

    def zoom_in(self):
        self._engine.zoom_step(QPointF(self.width() / 2.0, self.height() / 2.0), True)

    def zoom_out(self):
        self._engine.zoom_step(QPointF(self.width() / 2.0, self.height() / 2.0), False)

    # ==================== Pointer Hooks ====================

    def _pointer_down(self, pointer_id, pos, modifiers):
        self._engine.pointer_down(pointer_id, pos, bool(modifiers & Qt.KeyboardModifier.ShiftModifier))

    def _pointer_move(self, pointer_id, pos):
        self._engine.pointer_move(pointer_id, pos)

    def _pointer_up(self, pointer_id, pos):
        self._engine.pointer_up(pointer_id, pos)

    def _pointer_cancel(self):
        self._engine.pointer_cancel()

    def _wheel(self, pos, delta_y):
        self._engine.wheel(pos, delta_y)

    def keyPressEvent(self, event):
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            selected = self._editor.selected_mask_ids
            if selected:
                self._editor.delete_masks(selected)
                self.update()
                event.accept()
                return
        super().keyPressEvent(event)

    # ==================== Painting ====================

    def _paint_overlay(self, painter: QPainter):
        current = self._editor.current_group_id
        selected = self._editor.selected_mask_ids
        labels = {g.id: g.label for g in self._editor.groups()}
        highlight = QColor(Config.HIGHLIGHT_COLOR)

        font = QFont()
        font.setPixelSize(Config.MASK_LABEL_FONT_PX)
        painter.setFont(font)

        for mask in self._editor.masks():
            rect = self._transform.normalized_rect_to_screen(mask.rect)
            fill = highlight if mask.group_id == current else self.OTHER_GROUP_FILL
            painter.fillRect(rect, fill)

            if mask.id in selected:
                painter.setPen(QPen(self.SELECTION_PEN, 2))
                painter.setBrush(Qt.BrushStyle.NoBrush)
                painter.drawRect(rect)

            label = labels.get(mask.group_id, '')
            if label:
                painter.setPen(Qt.GlobalColor.black if mask.group_id == current else Qt.GlobalColor.white)
                painter.drawText(rect.adjusted(3, 1, 0, 0), Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignTop, label)

        draft = self._engine.draft
        if draft is not None:
            rect = self._transform.normalized_rect_to_screen(draft)
            pen = QPen(highlight, 2, Qt.PenStyle.DashLine)
            painter.setPen(pen)
            painter.setBrush(QBrush(QColor(255, 211, 77, 60)))
            painter.drawRect(QRectF(rect))


__all__ = ['EditCanvas']
