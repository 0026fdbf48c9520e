"""Pointer gesture engines for Print SRS canvases"""

from .states import GestureState
from .edit_engine import EditGestureEngine
from .pinch_engine import PinchGestureEngine

__all__ = ['GestureState', 'EditGestureEngine', 'PinchGestureEngine']
