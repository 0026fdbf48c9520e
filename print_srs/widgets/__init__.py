"""UI widgets for Print SRS"""

from .page_canvas import PageCanvas
from .edit_canvas import EditCanvas
from .review_canvas import ReviewCanvas, PickerCanvas
from .edit_panel import EditPanel
from .review_panel import ReviewPanel, PickerPanel
from .main_window import MainWindow

__all__ = [
    'PageCanvas',
    'EditCanvas',
    'ReviewCanvas',
    'PickerCanvas',
    'EditPanel',
    'ReviewPanel',
    'PickerPanel',
    'MainWindow',
]
