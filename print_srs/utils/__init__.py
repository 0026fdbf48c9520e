"""Utility functions for Print SRS"""

from .coordinate_utils import ViewTransform
from .logging_config import LoggingConfig

__all__ = [
    'ViewTransform',
    'LoggingConfig',
]
