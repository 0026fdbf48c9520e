"""
EditGestureEngine - Pointer state machine for the mask editing canvas

Single-pointer gestures:
- Press on a mask and drag to move it
- Press on empty page and drag to draw a mask
- Press and hold (350 ms, without moving) to pan instead of drawing
- Shift + drag pans immediately
- Wheel zooms around the cursor

Pointers other than the one that started the gesture are ignored.
"""

import logging
import math
from typing import Optional

from PyQt6.QtCore import QObject, QPointF, QTimer, pyqtSignal

from ..config import Config
from ..models.records import NormRect
from ..services.mask_editor import MaskEditor
from ..utils.coordinate_utils import ViewTransform
from .states import GestureState


logger = logging.getLogger(__name__)


class EditGestureEngine(QObject):
    """
    Gesture FSM for the edit surface.

    Canvases translate mouse/touch events into pointer_down / pointer_move /
    pointer_up / pointer_cancel calls and repaint on `changed`.

    Signals:
        changed: View, draft or mask geometry changed (repaint)
        state_changed(GestureState): FSM state changed
        mask_drawn(str): A new mask was persisted
        mask_moved(str): A dragged mask was committed
    """

    changed = pyqtSignal()
    state_changed = pyqtSignal(object)
    mask_drawn = pyqtSignal(str)
    mask_moved = pyqtSignal(str)

    def __init__(self, editor: MaskEditor, transform: ViewTransform, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._editor = editor
        self._transform = transform

        self._state = GestureState.IDLE
        self._pointer_id: Optional[int] = None
        self._down_pos = QPointF()
        self._start_pan = QPointF()
        self._moved = False

        # Drawing
        self._draft: Optional[NormRect] = None

        # Moving
        self._mask_id: Optional[str] = None
        self._mask_origin: Optional[NormRect] = None
        self._grab_point = QPointF()

        self._long_press_timer = QTimer(self)
        self._long_press_timer.setSingleShot(True)
        self._long_press_timer.setInterval(Config.LONG_PRESS_MS)
        self._long_press_timer.timeout.connect(self.long_press_fired)

    # ==================== Properties ====================

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def draft(self) -> Optional[NormRect]:
        """Rectangle being drawn, in normalized coordinates."""
        return self._draft

    @property
    def long_press_pending(self) -> bool:
        return self._long_press_timer.isActive()

    @property
    def transform(self) -> ViewTransform:
        return self._transform

    def _set_state(self, state: GestureState):
        if state != self._state:
            self._state = state
            self.state_changed.emit(state)

    # ==================== Pointer Input ====================

    def pointer_down(self, pointer_id: int, pos: QPointF, pan_modifier: bool = False) -> bool:
        """
        Start a gesture

        Args:
            pointer_id: Mouse (0) or touch point id
            pos: Screen position
            pan_modifier: Shift held - pan immediately

        Returns:
            True if the pointer started a gesture
        """
        if self._state != GestureState.IDLE:
            return False

        self._pointer_id = pointer_id
        self._down_pos = QPointF(pos)
        self._start_pan = self._transform.pan
        self._moved = False

        if pan_modifier:
            self._set_state(GestureState.PANNING)
            return True

        norm = self._transform.screen_to_normalized(pos)
        mask = self._editor.hit_test(norm.x(), norm.y())
        if mask is not None:
            self._mask_id = mask.id
            self._mask_origin = mask.rect
            self._grab_point = norm
            self._editor.select_mask(mask.id)
            self._set_state(GestureState.MOVING_MASK)
        else:
            self._editor.clear_selection()
            self._draft = self._transform.screen_rect_to_normalized(pos, pos)
            self._long_press_timer.start()
            self._set_state(GestureState.DRAWING_MASK)

        self.changed.emit()
        return True

    def pointer_move(self, pointer_id: int, pos: QPointF) -> bool:
        """Continue the active gesture. Returns False for unrelated pointers."""
        if self._state == GestureState.IDLE or pointer_id != self._pointer_id:
            return False

        if not self._moved and self._distance(pos, self._down_pos) > Config.MOVE_JITTER_PX:
            self._moved = True
            self._long_press_timer.stop()

        if self._state == GestureState.PANNING:
            self._transform.pan_by(self._start_pan, pos - self._down_pos)

        elif self._state == GestureState.DRAWING_MASK:
            self._draft = self._transform.screen_rect_to_normalized(self._down_pos, pos)

        elif self._state == GestureState.MOVING_MASK:
            norm = self._transform.screen_to_normalized(pos)
            self._editor.move_mask(
                self._mask_id,
                self._mask_origin.x + (norm.x() - self._grab_point.x()),
                self._mask_origin.y + (norm.y() - self._grab_point.y()),
                commit=False,
            )

        self.changed.emit()
        return True

    def pointer_up(self, pointer_id: int, pos: QPointF) -> bool:
        """Finish the active gesture."""
        if self._state == GestureState.IDLE or pointer_id != self._pointer_id:
            return False

        self._long_press_timer.stop()

        if self._state == GestureState.MOVING_MASK:
            mask = self._editor.cache.get_mask(self._mask_id)
            if mask is not None and mask.rect != self._mask_origin:
                self._editor.commit_mask(self._mask_id)
                self.mask_moved.emit(self._mask_id)

        elif self._state == GestureState.DRAWING_MASK:
            rect = self._transform.screen_rect_to_normalized(self._down_pos, pos)
            mask = self._editor.draw_mask(rect, self._transform)
            if mask is not None:
                self._editor.select_mask(mask.id)
                self.mask_drawn.emit(mask.id)

        self._reset()
        self.changed.emit()
        return True

    def pointer_cancel(self):
        """Abort the gesture: drop the draft and revert an uncommitted move."""
        if self._state == GestureState.IDLE:
            return
        self._long_press_timer.stop()
        if self._state == GestureState.MOVING_MASK:
            self._editor.discard_pending()
        self._reset()
        self.changed.emit()

    def long_press_fired(self):
        """Hold without moving: switch from drawing to panning."""
        if self._state != GestureState.DRAWING_MASK or self._moved:
            return
        logger.debug("Long press: drawing -> panning")
        self._draft = None
        self._start_pan = self._transform.pan
        self._set_state(GestureState.PANNING)
        self.changed.emit()

    # ==================== Zoom ====================

    def wheel(self, pos: QPointF, delta_y: float):
        """Zoom in (delta_y > 0) or out around the cursor."""
        if delta_y == 0:
            return
        factor = Config.WHEEL_ZOOM_IN if delta_y > 0 else Config.WHEEL_ZOOM_OUT
        self._transform.zoom_at(pos, self._transform.zoom * factor)
        self.changed.emit()

    def zoom_step(self, anchor: QPointF, zoom_in: bool):
        """Button zoom around a screen anchor (usually the viewport center)."""
        factor = Config.BUTTON_ZOOM_STEP if zoom_in else 1.0 / Config.BUTTON_ZOOM_STEP
        self._transform.zoom_at(anchor, self._transform.zoom * factor)
        self.changed.emit()

    # ==================== Helpers ====================

    def _reset(self):
        self._pointer_id = None
        self._draft = None
        self._mask_id = None
        self._mask_origin = None
        self._moved = False
        self._set_state(GestureState.IDLE)

    @staticmethod
    def _distance(a: QPointF, b: QPointF) -> float:
        return math.hypot(a.x() - b.x(), a.y() - b.y())


__all__ = ['EditGestureEngine']
