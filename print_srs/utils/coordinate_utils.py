"""
Coordinate conversion utilities for page canvases.

Three spaces are involved:
- screen: widget pixels where pointer events arrive
- world: page pixels, i.e. screen with pan and zoom removed
- normalized: page-relative 0-1 coordinates used for stored geometry
"""

from typing import Tuple

from PyQt6.QtCore import QPointF, QRectF, QSizeF

from ..config import Config
from ..models.records import NormRect, clamp


class ViewTransform:
    """
    Pan/zoom state of a canvas showing one page.

    world = (screen - pan) / zoom
    normalized = world / page_size
    """

    def __init__(self, page_width: float = 1.0, page_height: float = 1.0):
        self._page_size = QSizeF(max(1.0, page_width), max(1.0, page_height))
        self._pan = QPointF(0.0, 0.0)
        self._zoom = 1.0
        self._fit_zoom = 1.0
        self.min_zoom = Config.MIN_ZOOM_FLOOR
        self.max_zoom = Config.MAX_ZOOM_FLOOR * Config.MAX_ZOOM_FIT_RATIO

    # ==================== State ====================

    @property
    def pan(self) -> QPointF:
        return QPointF(self._pan)

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def fit_zoom(self) -> float:
        return self._fit_zoom

    @property
    def page_size(self) -> QSizeF:
        return QSizeF(self._page_size)

    def set_page_size(self, width: float, height: float):
        """Set the page pixel dimensions."""
        self._page_size = QSizeF(max(1.0, width), max(1.0, height))

    def set_pan(self, pan: QPointF):
        self._pan = QPointF(pan)

    def set_zoom(self, zoom: float):
        """Set zoom without anchoring (pan unchanged), clamped to the zoom range."""
        self._zoom = clamp(zoom, self.min_zoom, self.max_zoom)

    def pan_by(self, start_pan: QPointF, delta: QPointF):
        """Pan relative to a pan captured at gesture start."""
        self._pan = QPointF(start_pan.x() + delta.x(), start_pan.y() + delta.y())

    # ==================== Conversions ====================

    def screen_to_world(self, screen_pos: QPointF) -> QPointF:
        return QPointF(
            (screen_pos.x() - self._pan.x()) / self._zoom,
            (screen_pos.y() - self._pan.y()) / self._zoom,
        )

    def world_to_screen(self, world_pos: QPointF) -> QPointF:
        return QPointF(
            world_pos.x() * self._zoom + self._pan.x(),
            world_pos.y() * self._zoom + self._pan.y(),
        )

    def world_to_normalized(self, world_pos: QPointF) -> QPointF:
        return QPointF(
            world_pos.x() / self._page_size.width(),
            world_pos.y() / self._page_size.height(),
        )

    def normalized_to_world(self, norm_pos: QPointF) -> QPointF:
        return QPointF(
            norm_pos.x() * self._page_size.width(),
            norm_pos.y() * self._page_size.height(),
        )

    def screen_to_normalized(self, screen_pos: QPointF) -> QPointF:
        return self.world_to_normalized(self.screen_to_world(screen_pos))

    def normalized_to_screen(self, norm_pos: QPointF) -> QPointF:
        return self.world_to_screen(self.normalized_to_world(norm_pos))

    def normalized_rect_to_world(self, rect: NormRect) -> QRectF:
        """Page-pixel rectangle of a normalized rect."""
        return QRectF(
            rect.x * self._page_size.width(),
            rect.y * self._page_size.height(),
            rect.w * self._page_size.width(),
            rect.h * self._page_size.height(),
        )

    def normalized_rect_to_screen(self, rect: NormRect) -> QRectF:
        """Screen rectangle of a normalized rect under the current pan/zoom."""
        world = self.normalized_rect_to_world(rect)
        top_left = self.world_to_screen(world.topLeft())
        return QRectF(top_left.x(), top_left.y(), world.width() * self._zoom, world.height() * self._zoom)

    def screen_rect_to_normalized(self, p1: QPointF, p2: QPointF) -> NormRect:
        """Normalized rect spanned by two screen points (not clamped)."""
        n1 = self.screen_to_normalized(p1)
        n2 = self.screen_to_normalized(p2)
        return NormRect.from_corners(n1.x(), n1.y(), n2.x(), n2.y())

    def world_delta_to_normalized(self, dx: float, dy: float) -> Tuple[float, float]:
        return dx / self._page_size.width(), dy / self._page_size.height()

    # ==================== Zoom ====================

    def zoom_at(self, anchor: QPointF, new_zoom: float) -> float:
        """
        Zoom keeping the world point under the anchor fixed on screen.

        pan' = anchor - world_under_anchor * zoom'

        Args:
            anchor: Screen position that stays put
            new_zoom: Requested zoom (clamped to [min_zoom, max_zoom])

        Returns:
            The zoom actually applied
        """
        world = self.screen_to_world(anchor)
        self._zoom = clamp(new_zoom, self.min_zoom, self.max_zoom)
        self._pan = QPointF(
            anchor.x() - world.x() * self._zoom,
            anchor.y() - world.y() * self._zoom,
        )
        return self._zoom

    def fit(self, viewport_width: float, viewport_height: float):
        """
        Fit the whole page inside the viewport and center it.

        Also derives the zoom range from the fit zoom so that pinch and wheel
        gestures stay within a useful range for this page/viewport pair.
        """
        viewport_width = max(1.0, viewport_width)
        viewport_height = max(1.0, viewport_height)
        fit = min(viewport_width / self._page_size.width(), viewport_height / self._page_size.height())
        self._fit_zoom = fit
        self.min_zoom = max(Config.MIN_ZOOM_FLOOR, fit * Config.MIN_ZOOM_FIT_RATIO)
        self.max_zoom = max(Config.MAX_ZOOM_FLOOR, fit * Config.MAX_ZOOM_FIT_RATIO)
        self._zoom = fit
        self._pan = QPointF(
            (viewport_width - self._page_size.width() * fit) / 2.0,
            (viewport_height - self._page_size.height() * fit) / 2.0,
        )


__all__ = ['ViewTransform']
