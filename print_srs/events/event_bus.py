"""
EventBus - Central event system for application-wide notifications

Pattern: Observer/Publisher-Subscriber over Qt signals. Services publish
after each committed mutation; widgets subscribe and repaint or reload.
"""

from PyQt6.QtCore import QObject, pyqtSignal
from typing import Optional


class EventBus(QObject):
    """
    Central event bus for decoupled communication between components

    Usage:
        event_bus = get_event_bus()
        event_bus.group_rated.connect(some_handler)
    """

    # Print events
    print_added = pyqtSignal(str)  # print_id
    print_updated = pyqtSignal(str)  # print_id
    prints_deleted = pyqtSignal(list)  # List[print_id]

    # Editing events
    groups_changed = pyqtSignal(str)  # print_id
    masks_changed = pyqtSignal(str)  # print_id
    current_group_changed = pyqtSignal(object)  # group_id or None
    mask_selection_changed = pyqtSignal(set)  # Set[mask_id]

    # Scheduling events
    group_rated = pyqtSignal(str, str)  # group_id, rating
    group_skipped = pyqtSignal(str)  # group_id

    # Review session events
    review_group_opened = pyqtSignal(str, int)  # group_id, remaining
    mask_reveal_toggled = pyqtSignal(str, bool)  # mask_id, revealed
    review_session_finished = pyqtSignal(int)  # rated count

    # Error events
    error_occurred = pyqtSignal(str, str)  # error_type, error_message

    def report_error(self, error_type: str, message: str):
        """
        Report an error to the UI

        Args:
            error_type: Type of error (e.g., "missing_page", "import")
            message: Human-readable error message
        """
        self.error_occurred.emit(error_type, message)


# Singleton instance (lazy initialization)
_event_bus_instance: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """
    Get global EventBus singleton instance

    Returns:
        Global EventBus instance
    """
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance


__all__ = ['EventBus', 'get_event_bus']
