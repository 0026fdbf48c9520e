"""
PinchGestureEngine - Pan, pinch-zoom and tap for the review and picker canvases

- One pointer pans once it has moved past the jitter threshold
- Two pointers pinch: zoom follows the finger distance and the page point
  under the starting midpoint stays under the current midpoint
- Lifting back to one pointer re-anchors the pan on the remaining pointer
- A sequence that never moved ends with `tapped`
"""

import logging
import math
from typing import Dict, Optional

from PyQt6.QtCore import QObject, QPointF, pyqtSignal

from ..config import Config
from ..utils.coordinate_utils import ViewTransform
from .states import GestureState


logger = logging.getLogger(__name__)


class PinchGestureEngine(QObject):
    """
    Gesture FSM for read-only page canvases.

    Signals:
        changed: Pan or zoom changed (repaint)
        state_changed(GestureState): FSM state changed
        tapped(QPointF): Screen position of a tap
    """

    changed = pyqtSignal()
    state_changed = pyqtSignal(object)
    tapped = pyqtSignal(QPointF)

    def __init__(self, transform: ViewTransform, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._transform = transform
        self._state = GestureState.IDLE
        self._pointers: Dict[int, QPointF] = {}
        self._moved = False

        # Panning
        self._anchor = QPointF()
        self._start_pan = QPointF()
        self._pan_active = False

        # Pinching
        self._pinch_ids = (0, 0)
        self._start_zoom = 1.0
        self._start_distance = 1.0
        self._start_mid = QPointF()
        self._start_world_mid = QPointF()

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def moved(self) -> bool:
        return self._moved

    @property
    def pointer_count(self) -> int:
        return len(self._pointers)

    def _set_state(self, state: GestureState):
        if state != self._state:
            self._state = state
            self.state_changed.emit(state)

    # ==================== Pointer Input ====================

    def pointer_down(self, pointer_id: int, pos: QPointF):
        if not self._pointers:
            self._moved = False
        self._pointers[pointer_id] = QPointF(pos)

        if len(self._pointers) >= 2:
            self._begin_pinch()
        else:
            self._begin_pan(pos, active=False)

    def pointer_move(self, pointer_id: int, pos: QPointF):
        if pointer_id not in self._pointers:
            return
        self._pointers[pointer_id] = QPointF(pos)

        if self._state == GestureState.PINCHING:
            self._update_pinch()
        elif self._state == GestureState.PANNING:
            if not self._pan_active and self._distance(pos, self._anchor) > Config.MOVE_JITTER_PX:
                self._pan_active = True
                self._moved = True
            if self._pan_active:
                self._transform.pan_by(self._start_pan, pos - self._anchor)
                self.changed.emit()

    def pointer_up(self, pointer_id: int, pos: QPointF):
        if pointer_id not in self._pointers:
            return
        del self._pointers[pointer_id]

        if len(self._pointers) >= 2:
            self._begin_pinch()
        elif len(self._pointers) == 1:
            remaining = next(iter(self._pointers.values()))
            self._begin_pan(remaining, active=self._moved)
        else:
            self._set_state(GestureState.IDLE)
            if not self._moved:
                self.tapped.emit(QPointF(pos))

    def pointer_cancel(self):
        """Drop all pointers without a tap."""
        self._pointers.clear()
        self._moved = False
        self._set_state(GestureState.IDLE)

    def wheel(self, pos: QPointF, delta_y: float):
        """Zoom in (delta_y > 0) or out around the cursor."""
        if delta_y == 0:
            return
        factor = Config.WHEEL_ZOOM_IN if delta_y > 0 else Config.WHEEL_ZOOM_OUT
        self._transform.zoom_at(pos, self._transform.zoom * factor)
        self.changed.emit()

    # ==================== Pan / Pinch ====================

    def _begin_pan(self, pos: QPointF, active: bool):
        self._anchor = QPointF(pos)
        self._start_pan = self._transform.pan
        self._pan_active = active
        self._set_state(GestureState.PANNING)

    def _begin_pinch(self):
        ids = list(self._pointers.keys())[:2]
        a, b = self._pointers[ids[0]], self._pointers[ids[1]]
        self._pinch_ids = (ids[0], ids[1])
        self._start_zoom = self._transform.zoom
        self._start_distance = max(1.0, self._distance(a, b))
        self._start_mid = self._midpoint(a, b)
        self._start_world_mid = self._transform.screen_to_world(self._start_mid)
        logger.debug(f"Pinch started at zoom {self._start_zoom:.2f}")
        self._set_state(GestureState.PINCHING)

    def _update_pinch(self):
        a = self._pointers[self._pinch_ids[0]]
        b = self._pointers[self._pinch_ids[1]]
        distance = self._distance(a, b)
        mid = self._midpoint(a, b)

        if (abs(distance - self._start_distance) > Config.PINCH_JITTER_PX
                or self._distance(mid, self._start_mid) > Config.MOVE_JITTER_PX):
            self._moved = True

        self._transform.set_zoom(self._start_zoom * (distance / self._start_distance))
        zoom = self._transform.zoom
        self._transform.set_pan(QPointF(
            mid.x() - self._start_world_mid.x() * zoom,
            mid.y() - self._start_world_mid.y() * zoom,
        ))
        self.changed.emit()

    @staticmethod
    def _distance(a: QPointF, b: QPointF) -> float:
        return math.hypot(a.x() - b.x(), a.y() - b.y())

    @staticmethod
    def _midpoint(a: QPointF, b: QPointF) -> QPointF:
        return QPointF((a.x() + b.x()) / 2.0, (a.y() + b.y()) / 2.0)


__all__ = ['PinchGestureEngine']
