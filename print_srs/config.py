"""
Global configuration for Print SRS

Holds application metadata, storage locations, gesture thresholds and
scheduler-facing constants used across the canvas and review layers.
"""

import json
import os
import sys
from pathlib import Path
from typing import Final, List, Optional


class Config:
    """Central configuration class for all application settings"""

    # Application metadata
    APP_NAME: Final[str] = "Print SRS"
    APP_VERSION: Final[str] = "1.0.0"
    APP_AUTHOR: Final[str] = "Print SRS"

    # Paths
    APP_ROOT: Final[Path] = Path(__file__).parent

    # Database configuration
    DEFAULT_DB_NAME: Final[str] = "print_srs.db"
    LOG_FOLDER_NAME: Final[str] = "logs"
    SETTINGS_FILE_NAME: Final[str] = "settings.json"

    # Page import (photo -> stored JPEG)
    IMPORT_MAX_WIDTH: Final[int] = 1600
    IMPORT_JPEG_QUALITY: Final[int] = 80

    # Gesture thresholds (screen pixels / milliseconds)
    LONG_PRESS_MS: Final[int] = 350
    MOVE_JITTER_PX: Final[float] = 6.0       # movement that cancels long-press / marks a pan
    PINCH_JITTER_PX: Final[float] = 2.0      # distance change that marks a pinch as moved
    MIN_DRAW_PX: Final[float] = 8.0          # smaller drafts are treated as taps
    MIN_MASK_SIZE: Final[float] = 0.0005     # normalized minimum mask width/height

    # Zoom behaviour
    WHEEL_ZOOM_IN: Final[float] = 1.1
    WHEEL_ZOOM_OUT: Final[float] = 0.9
    BUTTON_ZOOM_STEP: Final[float] = 1.25
    MIN_ZOOM_FIT_RATIO: Final[float] = 0.6
    MAX_ZOOM_FIT_RATIO: Final[float] = 6.0
    MIN_ZOOM_FLOOR: Final[float] = 0.1
    MAX_ZOOM_FLOOR: Final[float] = 2.5

    # Rendering
    MASK_LABEL_FONT_PX: Final[int] = 12
    REVEALED_MASK_OPACITY: Final[float] = 0.15
    HIGHLIGHT_COLOR: Final[str] = "#ffd34d"

    # Subjects (category filter for the due list)
    OTHER_SUBJECT: Final[str] = "Other"
    SUBJECT_PRESETS: Final[List[str]] = [
        "Math",
        "Language",
        "English",
        "Science",
        "Social Studies",
        OTHER_SUBJECT,
    ]

    # Window settings
    DEFAULT_WINDOW_WIDTH: Final[int] = 1200
    DEFAULT_WINDOW_HEIGHT: Final[int] = 820

    @classmethod
    def get_user_data_dir(cls) -> Path:
        """
        Get user data directory.

        Uses system AppData/Local (Windows), Application Support (macOS) or
        .local/share (Linux). A 'portable.txt' next to the package keeps data
        in a local 'data' folder instead.
        """
        portable_flag = cls.APP_ROOT.parent / 'portable.txt'
        if portable_flag.exists():
            user_dir = cls.APP_ROOT.parent / 'data'
        else:
            if sys.platform == 'win32':
                base_path = Path(os.environ.get('LOCALAPPDATA', os.path.expanduser('~')))
                user_dir = base_path / 'PrintSRS'
            elif sys.platform == 'darwin':
                user_dir = Path.home() / 'Library' / 'Application Support' / 'PrintSRS'
            else:
                user_dir = Path.home() / '.local' / 'share' / 'PrintSRS'

        user_dir.mkdir(parents=True, exist_ok=True)
        return user_dir

    @classmethod
    def get_database_path(cls) -> Path:
        """Get the SQLite database file path"""
        return cls.get_user_data_dir() / cls.DEFAULT_DB_NAME

    @classmethod
    def get_log_dir(cls) -> Path:
        """Get log directory"""
        return cls.get_user_data_dir() / cls.LOG_FOLDER_NAME

    @classmethod
    def get_settings_file(cls) -> Path:
        """Get settings JSON file path"""
        return cls.get_user_data_dir() / cls.SETTINGS_FILE_NAME

    @classmethod
    def load_subject_filter(cls) -> Optional[List[str]]:
        """
        Load the saved subject filter for the due list

        Returns:
            List of subject names, or None when no filter is saved
        """
        settings_file = cls.get_settings_file()
        if settings_file.exists():
            try:
                with open(settings_file, 'r', encoding='utf-8') as f:
                    subjects = json.load(f).get('subject_filter')
                if isinstance(subjects, list):
                    return [str(s) for s in subjects]
            except (OSError, ValueError):
                pass  # Fall through to "no filter"
        return None

    @classmethod
    def save_subject_filter(cls, subjects: Optional[List[str]]) -> bool:
        """
        Save the subject filter for the due list

        Args:
            subjects: Subject names, or None to clear the filter

        Returns:
            bool: True if saved successfully, False otherwise
        """
        try:
            settings_file = cls.get_settings_file()
            settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(settings_file, 'w', encoding='utf-8') as f:
                json.dump({'subject_filter': subjects}, f, indent=2)
            return True
        except OSError:
            return False


__all__ = ['Config']
