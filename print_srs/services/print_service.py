"""
PrintService - Import, rename, re-subject and delete worksheets

A print is created once with its single page; groups and masks are managed
by MaskEditor.
"""

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from ..config import Config
from ..core.page_importer import PageImporter
from ..events.event_bus import EventBus, get_event_bus
from ..models.records import Page, Print, new_id
from .database_service import DatabaseService, get_database_service


logger = logging.getLogger(__name__)


def normalize_subject(subject: Optional[str], other_text: str = '') -> Tuple[str, str]:
    """
    Split a subject choice into (subject, subject_other) for storage.

    Presets other than "Other" are stored as-is. "Other" keeps the free-text
    description, and an unknown subject name is stored as "Other" + that name.
    """
    s = (subject or Config.OTHER_SUBJECT).strip() or Config.OTHER_SUBJECT
    if s in Config.SUBJECT_PRESETS and s != Config.OTHER_SUBJECT:
        return s, ''
    if s == Config.OTHER_SUBJECT:
        return Config.OTHER_SUBJECT, (other_text or '').strip()
    return Config.OTHER_SUBJECT, s


class PrintService:
    """
    Service for print-level operations

    Features:
    - Import a photo as a new print with one page
    - Rename and change subject
    - Cascading delete of one or many prints
    - Masked page export
    """

    def __init__(
        self,
        db_service: Optional[DatabaseService] = None,
        importer: Optional[PageImporter] = None,
        event_bus: Optional[EventBus] = None
    ):
        """
        Initialize print service

        Args:
            db_service: Database service instance (uses singleton if not provided)
            importer: Page importer (default settings if not provided)
            event_bus: Event bus (uses singleton if not provided)
        """
        self._db = db_service or get_database_service()
        self._importer = importer or PageImporter()
        self._events = event_bus or get_event_bus()

    @property
    def importer(self) -> PageImporter:
        return self._importer

    def list_prints(self) -> List[Print]:
        """All prints, newest first."""
        return sorted(self._db.cache.prints, key=lambda p: p.created_at, reverse=True)

    def import_print(
        self,
        source: Union[Path, str, bytes],
        title: str = '',
        subject: Optional[str] = None,
        subject_other: str = ''
    ) -> Print:
        """
        Import a worksheet photo

        Args:
            source: Image path or encoded bytes
            title: Display title (defaults to the file name or a timestamp)
            subject: Subject preset or custom name
            subject_other: Free text used with the "Other" preset

        Returns:
            The new Print

        Raises:
            ImageDecodeError: If the photo cannot be read
        """
        image_bytes, width, height = self._importer.import_image(source)

        now = datetime.now()
        if not title:
            title = Path(source).stem if isinstance(source, (str, Path)) else now.strftime('Print %Y-%m-%d %H:%M')
        subj, other = normalize_subject(subject, subject_other)

        record = Print(id=new_id(), title=title, subject=subj, subject_other=other, created_at=now)
        page = Page(
            id=new_id(),
            print_id=record.id,
            width=width,
            height=height,
            image=image_bytes,
            page_index=0,
            created_at=now,
        )
        with self._db.transaction() as tx:
            tx.put('prints', record)
            tx.put('pages', page)
        self._db.cache.reload()

        logger.info(f"Imported print '{title}' ({width}x{height})")
        self._events.print_added.emit(record.id)
        return record

    def rename_print(self, print_id: str, title: str) -> bool:
        """Rename a print. Returns False if it no longer exists."""
        record = self._db.cache.get_print(print_id)
        if record is None:
            logger.warning(f"rename_print: unknown print {print_id}")
            return False
        self._db.store.put('prints', replace(record, title=title))
        self._db.cache.reload()
        self._events.print_updated.emit(print_id)
        return True

    def set_subject(self, print_ids: Iterable[str], subject: str, subject_other: str = '') -> int:
        """
        Move prints to a subject

        Returns:
            Number of prints updated
        """
        subj, other = normalize_subject(subject, subject_other)
        updated = []
        with self._db.transaction() as tx:
            for print_id in print_ids:
                record = self._db.cache.get_print(print_id)
                if record is None:
                    continue
                tx.put('prints', replace(record, subject=subj, subject_other=other))
                updated.append(print_id)
        self._db.cache.reload()
        for print_id in updated:
            self._events.print_updated.emit(print_id)
        return len(updated)

    def delete_prints(self, print_ids: Iterable[str]) -> int:
        """
        Delete prints and everything they own in one transaction

        Returns:
            Number of prints removed
        """
        print_ids = list(print_ids)
        counts = self._db.cascade.delete_prints(print_ids)
        self._db.cache.reload()
        self._events.prints_deleted.emit(print_ids)
        return counts.get('prints', 0)

    def subjects_in_data(self) -> List[str]:
        """Presets first (in preset order), then custom subjects alphabetically."""
        custom = {p.display_subject() for p in self._db.cache.prints}
        custom -= set(Config.SUBJECT_PRESETS)
        return list(Config.SUBJECT_PRESETS) + sorted(custom)

    def export_masked_page(self, print_id: str) -> bytes:
        """
        Render a print's page with all masks blacked out

        Raises:
            MissingPageError: If the print has no page
        """
        page = self._db.cache.require_page(print_id)
        return self._importer.render_masked_page(page, self._db.cache.masks_for_print(print_id))


__all__ = ['PrintService', 'normalize_subject']
