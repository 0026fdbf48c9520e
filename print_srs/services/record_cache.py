"""
RecordCache - Read-through snapshot of every stored record

Components read from the cache and call reload() after each committed
mutation. Between a pointer-down and pointer-up the editor may patch a mask in
the snapshot directly (optimistic drag); the next reload() replaces it with
the persisted value.
"""

import logging
from typing import Dict, List, Optional

from ..models.records import Group, Mask, Page, Print, ReviewLogEntry, SkipRecord, SRSState
from .database import RecordStore


logger = logging.getLogger(__name__)


class MissingPageError(Exception):
    """Raised when the page image of a print being opened is absent."""
    pass


class RecordCache:
    """
    In-memory snapshot of the record store.

    Usage:
        cache = RecordCache(store)
        cache.reload()
        groups = cache.groups_for_print(print_id)
    """

    def __init__(self, store: RecordStore):
        """
        Initialize record cache.

        Args:
            store: Record store to read from
        """
        self._store = store
        self.prints: List[Print] = []
        self.pages: List[Page] = []
        self.groups: List[Group] = []
        self.masks: List[Mask] = []
        self.srs: List[SRSState] = []
        self.reviews: List[ReviewLogEntry] = []
        self.skips: List[SkipRecord] = []

    @property
    def store(self) -> RecordStore:
        return self._store

    def reload(self):
        """Replace the snapshot with the current store contents."""
        self.prints = self._store.get_all('prints')
        self.pages = self._store.get_all('pages')
        self.groups = self._store.get_all('groups')
        self.masks = self._store.get_all('masks')
        self.srs = self._store.get_all('srs')
        self.reviews = self._store.get_all('reviews')
        self.skips = self._store.get_all('skips')

    # ==================== Lookups ====================

    def get_print(self, print_id: Optional[str]) -> Optional[Print]:
        return next((p for p in self.prints if p.id == print_id), None)

    def get_group(self, group_id: Optional[str]) -> Optional[Group]:
        return next((g for g in self.groups if g.id == group_id), None)

    def get_mask(self, mask_id: Optional[str]) -> Optional[Mask]:
        return next((m for m in self.masks if m.id == mask_id), None)

    def page_for_print(self, print_id: str, page_index: int = 0) -> Optional[Page]:
        return next(
            (p for p in self.pages if p.print_id == print_id and p.page_index == page_index),
            None
        )

    def require_page(self, print_id: str, page_index: int = 0) -> Page:
        """
        Get the page of a print or fail

        Raises:
            MissingPageError: If the print has no stored page
        """
        page = self.page_for_print(print_id, page_index)
        if page is None:
            logger.error(f"Page {page_index} missing for print {print_id}")
            raise MissingPageError(f"Page not found for print {print_id}")
        return page

    def groups_for_print(self, print_id: str) -> List[Group]:
        """Groups of a print ordered by order_index."""
        groups = [g for g in self.groups if g.print_id == print_id]
        return sorted(groups, key=lambda g: g.order_index)

    def masks_for_print(self, print_id: str) -> List[Mask]:
        """Masks of a print in creation (z) order."""
        return [m for m in self.masks if m.print_id == print_id]

    def masks_for_group(self, group_id: str) -> List[Mask]:
        return [m for m in self.masks if m.group_id == group_id]

    def srs_by_group(self) -> Dict[str, SRSState]:
        return {s.group_id: s for s in self.srs}

    def skips_by_group(self) -> Dict[str, SkipRecord]:
        return {s.group_id: s for s in self.skips}

    def srs_for(self, group_id: str) -> Optional[SRSState]:
        return next((s for s in self.srs if s.group_id == group_id), None)

    def reviews_for(self, group_id: str) -> List[ReviewLogEntry]:
        return [r for r in self.reviews if r.group_id == group_id]

    def replace_mask(self, mask: Mask):
        """Patch a mask in the snapshot without touching the store."""
        for i, existing in enumerate(self.masks):
            if existing.id == mask.id:
                self.masks[i] = mask
                return


__all__ = ['RecordCache', 'MissingPageError']
