"""Services for Print SRS"""

from .database_service import DatabaseService, get_database_service
from .record_cache import RecordCache, MissingPageError
from .print_service import PrintService, normalize_subject
from .mask_editor import MaskEditor
from .review_scheduler import ReviewScheduler
from .review_session import ReviewSession, PracticePicker, SessionMode

__all__ = [
    'DatabaseService',
    'get_database_service',
    'RecordCache',
    'MissingPageError',
    'PrintService',
    'normalize_subject',
    'MaskEditor',
    'ReviewScheduler',
    'ReviewSession',
    'PracticePicker',
    'SessionMode',
]
