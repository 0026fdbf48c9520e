"""
Gesture states shared by the edit and pinch engines
"""

from enum import Enum


class GestureState(Enum):
    """Pointer gesture states."""
    IDLE = 0          # No pointer down
    PANNING = 1       # Dragging the view
    DRAWING_MASK = 2  # Dragging out a new mask rectangle
    MOVING_MASK = 3   # Dragging an existing mask
    PINCHING = 4      # Two pointers zooming


__all__ = ['GestureState']
