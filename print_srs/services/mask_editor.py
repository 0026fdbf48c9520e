"""
MaskEditor - Editing surface for question groups and answer masks

Bound to one print at a time. Every committed mutation writes through the
record store in one transaction and then reloads the shared cache.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional, Set

from ..config import Config
from ..core.scheduler import init_srs_state
from ..events.event_bus import EventBus, get_event_bus
from ..models.records import Group, Mask, NormRect, Page, clamp, new_id
from ..utils.coordinate_utils import ViewTransform
from .database_service import DatabaseService, get_database_service


logger = logging.getLogger(__name__)


class MaskEditor:
    """
    Group and mask editing for one print.

    Handles:
    - Creating, renaming, reordering and deleting groups
    - Current group selection with fallback on delete
    - Drawing, moving, reassigning and deleting masks
    - Hit-testing masks (topmost wins)

    Usage:
        editor = MaskEditor(db_service)
        editor.load(print_id)
        mask = editor.draw_mask(NormRect(0.1, 0.1, 0.2, 0.05))
    """

    def __init__(self, db_service: Optional[DatabaseService] = None, event_bus: Optional[EventBus] = None):
        """
        Initialize mask editor

        Args:
            db_service: Database service instance (uses singleton if not provided)
            event_bus: Event bus (uses singleton if not provided)
        """
        self._db = db_service or get_database_service()
        self._events = event_bus or get_event_bus()
        self._print_id: Optional[str] = None
        self._page: Optional[Page] = None
        self._current_group_id: Optional[str] = None
        self._selected_mask_ids: Set[str] = set()

    # ==================== Properties ====================

    @property
    def print_id(self) -> Optional[str]:
        return self._print_id

    @property
    def page(self) -> Optional[Page]:
        return self._page

    @property
    def current_group_id(self) -> Optional[str]:
        return self._current_group_id

    @property
    def selected_mask_ids(self) -> Set[str]:
        return set(self._selected_mask_ids)

    @property
    def cache(self):
        return self._db.cache

    def groups(self) -> List[Group]:
        """Groups of the loaded print in display order."""
        if self._print_id is None:
            return []
        return self._db.cache.groups_for_print(self._print_id)

    def masks(self) -> List[Mask]:
        """Masks of the loaded print in z order (oldest first)."""
        if self._print_id is None:
            return []
        return self._db.cache.masks_for_print(self._print_id)

    def masks_in_group(self, group_id: str) -> int:
        """Number of masks owned by a group."""
        return len(self._db.cache.masks_for_group(group_id))

    # ==================== Loading ====================

    def load(self, print_id: str, group_id: Optional[str] = None) -> Page:
        """
        Open a print for editing

        Ensures the print has at least one group and selects the requested
        group, or the first group by order.

        Args:
            print_id: Print to edit
            group_id: Group to select initially

        Returns:
            The print's page

        Raises:
            MissingPageError: If the print has no page
        """
        self._db.cache.reload()
        page = self._db.cache.require_page(print_id)

        self._print_id = print_id
        self._page = page
        self._selected_mask_ids.clear()

        if not self.groups():
            self.create_group()

        if group_id is not None and self._owns_group(group_id):
            self._current_group_id = group_id
        elif not self._owns_group(self._current_group_id):
            self._current_group_id = self.groups()[0].id
        logger.debug(f"Editing print {print_id}, current group {self._current_group_id}")
        return page

    def _owns_group(self, group_id: Optional[str]) -> bool:
        group = self._db.cache.get_group(group_id)
        return group is not None and group.print_id == self._print_id

    def _require_loaded(self) -> bool:
        if self._print_id is None:
            logger.warning("MaskEditor used before load()")
            return False
        return True

    # ==================== Groups ====================

    def create_group(self, label: Optional[str] = None, now: Optional[datetime] = None) -> Optional[Group]:
        """
        Create a group at the end of the order and make it current

        The group's SRS state is created in the same transaction, due now.

        Args:
            label: Display label (defaults to Q<n>)
            now: Creation time

        Returns:
            The new Group, or None if no print is loaded
        """
        if not self._require_loaded():
            return None
        now = now or datetime.now()
        siblings = self.groups()
        order_index = max((g.order_index for g in siblings), default=-1) + 1
        group = Group(
            id=new_id(),
            print_id=self._print_id,
            label=label if label is not None else f"Q{len(siblings) + 1}",
            order_index=order_index,
            is_active=True,
            created_at=now,
        )
        with self._db.transaction() as tx:
            tx.put('groups', group)
            tx.put('srs', init_srs_state(group.id, now))
        self._db.cache.reload()

        self._set_current(group.id)
        self._events.groups_changed.emit(self._print_id)
        return group

    def rename_group(self, group_id: str, label: str) -> bool:
        """Rename a group. Returns False for a stale id."""
        group = self._db.cache.get_group(group_id)
        if group is None:
            logger.warning(f"rename_group: unknown group {group_id}")
            return False
        self._db.store.put('groups', replace(group, label=label))
        self._db.cache.reload()
        self._events.groups_changed.emit(group.print_id)
        return True

    def reorder_group(self, group_id: str, delta: int) -> bool:
        """
        Swap a group's order_index with its neighbour

        Args:
            group_id: Group to move
            delta: -1 for up, +1 for down

        Returns:
            True if a swap happened; False past either end or for a stale id
        """
        groups = self.groups()
        index = next((i for i, g in enumerate(groups) if g.id == group_id), -1)
        if index < 0:
            return False
        target = index + delta
        if target < 0 or target >= len(groups):
            return False

        a = replace(groups[index], order_index=groups[target].order_index)
        b = replace(groups[target], order_index=groups[index].order_index)
        with self._db.transaction() as tx:
            tx.put('groups', a)
            tx.put('groups', b)
        self._db.cache.reload()
        self._events.groups_changed.emit(self._print_id)
        return True

    def delete_group(self, group_id: str) -> Optional[str]:
        """
        Delete a group with its masks, SRS state, skip and reviews

        If the deleted group was current, the first remaining sibling becomes
        current (or None when none remain).

        Returns:
            The current group id after the delete
        """
        group = self._db.cache.get_group(group_id)
        if group is None:
            logger.warning(f"delete_group: unknown group {group_id}")
            return self._current_group_id

        owned_masks = {m.id for m in self._db.cache.masks_for_group(group_id)}
        self._db.cascade.delete_groups([group_id])
        self._db.cache.reload()

        self._selected_mask_ids -= owned_masks
        if self._current_group_id == group_id or not self._owns_group(self._current_group_id):
            remaining = self.groups()
            self._set_current(remaining[0].id if remaining else None)

        self._events.groups_changed.emit(group.print_id)
        self._events.masks_changed.emit(group.print_id)
        return self._current_group_id

    def select_group(self, group_id: Optional[str]) -> bool:
        """
        Make a group current

        The mask selection is kept so it can be reassigned to this group.
        """
        if group_id is not None and not self._owns_group(group_id):
            logger.warning(f"select_group: unknown group {group_id}")
            return False
        self._set_current(group_id)
        return True

    def _set_current(self, group_id: Optional[str]):
        if group_id != self._current_group_id:
            self._current_group_id = group_id
            self._events.current_group_changed.emit(group_id)

    # ==================== Masks ====================

    def draw_mask(self, rect: NormRect, transform: Optional[ViewTransform] = None) -> Optional[Mask]:
        """
        Persist a new mask in the current group

        The rect is cut to the page and clamped. A rect that projects to less
        than MIN_DRAW_PX on screen (when a transform is given) or that has no
        area on the page is discarded. A group is created when none is current.

        Args:
            rect: Normalized rectangle
            transform: View transform used to measure the on-screen size

        Returns:
            The new Mask, or None if discarded
        """
        if not self._require_loaded():
            return None

        if transform is not None:
            screen = transform.normalized_rect_to_screen(rect)
            if screen.width() < Config.MIN_DRAW_PX or screen.height() < Config.MIN_DRAW_PX:
                logger.debug("Discarding draft smaller than the tap threshold")
                return None

        x1, y1 = clamp(rect.x, 0.0, 1.0), clamp(rect.y, 0.0, 1.0)
        x2, y2 = clamp(rect.x + rect.w, 0.0, 1.0), clamp(rect.y + rect.h, 0.0, 1.0)
        if x2 - x1 <= 0 or y2 - y1 <= 0:
            logger.debug("Discarding draft with no area on the page")
            return None

        if not self._owns_group(self._current_group_id):
            self.create_group()

        clamped = NormRect(x1, y1, x2 - x1, y2 - y1).clamped()
        mask = Mask(
            id=new_id(),
            group_id=self._current_group_id,
            print_id=self._print_id,
            x=clamped.x,
            y=clamped.y,
            w=clamped.w,
            h=clamped.h,
            created_at=datetime.now(),
        )
        self._db.store.put('masks', mask)
        self._db.cache.reload()
        self._events.masks_changed.emit(self._print_id)
        return mask

    def move_mask(self, mask_id: str, x: float, y: float, commit: bool = True) -> Optional[Mask]:
        """
        Move a mask to a new origin, keeping its size

        The origin is clamped into [0, 1-w] x [0, 1-h]. With commit=False only
        the cached snapshot changes (drag preview); commit_mask() persists it.

        Returns:
            The moved Mask, or None for a stale id
        """
        mask = self._db.cache.get_mask(mask_id)
        if mask is None:
            logger.warning(f"move_mask: unknown mask {mask_id}")
            return None
        moved = mask.with_rect(mask.rect.moved_to(x, y))
        self._db.cache.replace_mask(moved)
        if commit:
            self.commit_mask(mask_id)
        return moved

    def commit_mask(self, mask_id: str) -> bool:
        """Persist the cached geometry of a mask."""
        mask = self._db.cache.get_mask(mask_id)
        if mask is None:
            return False
        self._db.store.put('masks', mask)
        self._db.cache.reload()
        self._events.masks_changed.emit(mask.print_id)
        return True

    def discard_pending(self):
        """Drop uncommitted cached edits by reloading from the store."""
        self._db.cache.reload()

    def reassign_masks(self, mask_ids: Iterable[str], group_id: Optional[str] = None) -> int:
        """
        Move masks into another group of the same print

        Args:
            mask_ids: Masks to reassign
            group_id: Target group (defaults to the current group)

        Returns:
            Number of masks reassigned
        """
        group_id = group_id or self._current_group_id
        target = self._db.cache.get_group(group_id)
        if target is None:
            logger.warning(f"reassign_masks: unknown group {group_id}")
            return 0

        moved = 0
        with self._db.transaction() as tx:
            for mask_id in mask_ids:
                mask = self._db.cache.get_mask(mask_id)
                if mask is None or mask.print_id != target.print_id:
                    continue
                tx.put('masks', replace(mask, group_id=target.id))
                moved += 1
        self._db.cache.reload()
        self.clear_selection()
        self._events.masks_changed.emit(target.print_id)
        return moved

    def delete_masks(self, mask_ids: Iterable[str]) -> int:
        """Delete masks. Returns the number removed."""
        mask_ids = list(mask_ids)
        removed = 0
        with self._db.transaction() as tx:
            for mask_id in mask_ids:
                if tx.delete('masks', mask_id):
                    removed += 1
        self._db.cache.reload()
        self._selected_mask_ids -= set(mask_ids)
        self._events.mask_selection_changed.emit(self.selected_mask_ids)
        if self._print_id:
            self._events.masks_changed.emit(self._print_id)
        return removed

    def hit_test(self, nx: float, ny: float) -> Optional[Mask]:
        """
        Topmost mask of the loaded print containing a normalized point

        Masks are walked newest first so the one drawn on top wins.
        """
        for mask in reversed(self.masks()):
            if mask.rect.contains(nx, ny):
                return mask
        return None

    # ==================== Selection ====================

    def select_mask(self, mask_id: str, additive: bool = False):
        """Select a mask, replacing the selection unless additive."""
        if not additive:
            self._selected_mask_ids.clear()
        self._selected_mask_ids.add(mask_id)
        self._events.mask_selection_changed.emit(self.selected_mask_ids)

    def clear_selection(self):
        if self._selected_mask_ids:
            self._selected_mask_ids.clear()
            self._events.mask_selection_changed.emit(set())


__all__ = ['MaskEditor']
