"""
Print SRS

Turn photos of paper worksheets into spaced-repetition review items by
masking their answers.
"""

__version__ = "1.0.0"

from .config import Config
from .events.event_bus import EventBus, get_event_bus

__all__ = [
    'Config',
    'EventBus',
    'get_event_bus',
]
