"""
PageCanvas - Base widget that shows one page under a pan/zoom transform

Translates mouse and touch input into pointer calls so subclasses only deal
with pointer ids and screen positions. Mouse events are ignored while a touch
sequence is active.
"""

from typing import Optional, Tuple

from PyQt6.QtCore import QEvent, QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QEventPoint, QImage, QPainter, QTouchEvent
from PyQt6.QtWidgets import QWidget

from ..core.page_importer import PageImporter
from ..models.records import NormRect, Page
from ..utils.coordinate_utils import ViewTransform

MOUSE_POINTER_ID = -1
FULL_PAGE = NormRect(0.0, 0.0, 1.0, 1.0)


class PageCanvas(QWidget):
    """
    Page display with pan/zoom state.

    Subclasses override:
        _pointer_down(pointer_id, pos, modifiers)
        _pointer_move(pointer_id, pos)
        _pointer_up(pointer_id, pos)
        _pointer_cancel()
        _wheel(pos, delta_y)
        _paint_overlay(painter)
    """

    BACKGROUND = QColor(38, 38, 42)

    def __init__(self, importer: Optional[PageImporter] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._importer = importer or PageImporter()
        self._transform = ViewTransform()
        self._image: Optional[QImage] = None
        self._page_id: Optional[str] = None
        self._touch_active = False
        self._fitted_view: Optional[Tuple[float, QPointF]] = None

        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(320, 240)

    # ==================== Page ====================

    @property
    def transform(self) -> ViewTransform:
        return self._transform

    def set_page(self, page: Optional[Page]):
        """Show a page, refitting only when the page changes."""
        if page is None:
            self._image = None
            self._page_id = None
            self.update()
            return
        if page.id != self._page_id:
            self._image = self._importer.load_image(page.image)
            self._page_id = page.id
            self._transform.set_page_size(page.width, page.height)
            self.fit_to_view()
        self.update()

    def fit_to_view(self):
        self._transform.fit(self.width(), self.height())
        self._fitted_view = (self._transform.zoom, self._transform.pan)
        self.update()

    def is_at_fit(self) -> bool:
        """True until the user pans or zooms away from the fitted view."""
        return self._fitted_view == (self._transform.zoom, self._transform.pan)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        # Follow the viewport only while the view is still fitted
        if self._image is not None and self.is_at_fit():
            self.fit_to_view()

    # ==================== Event Interception (for Touch Support) ====================

    def event(self, event):
        """Intercept touch events so multi-finger gestures reach the engines."""
        if event.type() in (QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate,
                            QEvent.Type.TouchEnd, QEvent.Type.TouchCancel):
            self._handle_touch_event(event)
            return True
        return super().event(event)

    def _handle_touch_event(self, event: QTouchEvent):
        if event.type() == QEvent.Type.TouchCancel:
            self._touch_active = False
            self._pointer_cancel()
            self.update()
            return

        self._touch_active = True
        for point in event.points():
            state = point.state()
            pos = QPointF(point.position())
            if state == QEventPoint.State.Pressed:
                self._pointer_down(point.id(), pos, event.modifiers())
            elif state == QEventPoint.State.Updated:
                self._pointer_move(point.id(), pos)
            elif state == QEventPoint.State.Released:
                self._pointer_up(point.id(), pos)

        if event.type() == QEvent.Type.TouchEnd:
            self._touch_active = False
        self.update()

    # ==================== Mouse Events ====================

    def mousePressEvent(self, event):
        if self._touch_active or event.button() != Qt.MouseButton.LeftButton:
            event.ignore()
            return
        self._pointer_down(MOUSE_POINTER_ID, event.position(), event.modifiers())
        event.accept()

    def mouseMoveEvent(self, event):
        if self._touch_active:
            event.ignore()
            return
        if event.buttons() & Qt.MouseButton.LeftButton:
            self._pointer_move(MOUSE_POINTER_ID, event.position())
        event.accept()

    def mouseReleaseEvent(self, event):
        if self._touch_active or event.button() != Qt.MouseButton.LeftButton:
            event.ignore()
            return
        self._pointer_up(MOUSE_POINTER_ID, event.position())
        event.accept()

    def wheelEvent(self, event):
        self._wheel(event.position(), event.angleDelta().y())
        event.accept()

    def keyPressEvent(self, event):
        if event.key() == Qt.Key.Key_Escape:
            self._pointer_cancel()
            self.update()
            event.accept()
            return
        super().keyPressEvent(event)

    # ==================== Pointer Hooks ====================

    def _pointer_down(self, pointer_id: int, pos: QPointF, modifiers):
        pass

    def _pointer_move(self, pointer_id: int, pos: QPointF):
        pass

    def _pointer_up(self, pointer_id: int, pos: QPointF):
        pass

    def _pointer_cancel(self):
        pass

    def _wheel(self, pos: QPointF, delta_y: float):
        pass

    # ==================== Painting ====================

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), self.BACKGROUND)

        if self._image is not None:
            target = self._transform.normalized_rect_to_screen(FULL_PAGE)
            painter.drawImage(target, self._image, QRectF(0, 0, self._image.width(), self._image.height()))
            self._paint_overlay(painter)

        painter.end()

    def _paint_overlay(self, painter: QPainter):
        pass

    def to_normalized(self, pos: QPointF) -> QPointF:
        return self._transform.screen_to_normalized(pos)


__all__ = ['PageCanvas', 'MOUSE_POINTER_ID']
