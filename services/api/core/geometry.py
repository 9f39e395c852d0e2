"""
Page-relative geometry for signature zones.

Pointer positions arrive as raw pixels in the coordinate space of whatever is
currently on screen. Zones are stored as percentages of the rendered page, so
they stay valid across zoom levels, devices and render sizes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


def clamp_pct(v: float) -> float:
    return max(0.0, min(100.0, v))


@dataclass(frozen=True)
class PixelPoint:
    """Raw pointer position (viewport pixels)."""
    x: float
    y: float


@dataclass(frozen=True)
class ContainerRect:
    """
    Measurable reference rectangle of the rendered page surface, in the same
    pixel space as PixelPoint. Supplied by the renderer.
    """
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def is_measurable(self) -> bool:
        return self.width > 0 and self.height > 0

    def contains(self, point: PixelPoint) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom


@dataclass(frozen=True)
class PercentPoint:
    """
    Point in page percent space.

    `indeterminate` is set when no reference container was available; such a
    point reads as (0, 0) but is not a real origin and must never be committed.
    """
    x: float
    y: float
    indeterminate: bool = False


@dataclass(frozen=True)
class PercentRect:
    x: float
    y: float
    width: float
    height: float
    indeterminate: bool = False

    def to_pixels(self, container: ContainerRect) -> tuple[float, float, float, float]:
        """Inverse mapping used to place an overlay over the rendered page."""
        return (
            container.left + self.x / 100.0 * container.width,
            container.top + self.y / 100.0 * container.height,
            self.width / 100.0 * container.width,
            self.height / 100.0 * container.height,
        )


def to_percent(point: PixelPoint, container: Optional[ContainerRect]) -> PercentPoint:
    """
    Convert a pixel position to page percentages, clamped to [0, 100].

    Returns an indeterminate (0, 0) when there is no measurable container.
    """
    if container is None or not container.is_measurable:
        return PercentPoint(0.0, 0.0, indeterminate=True)

    return PercentPoint(
        x=clamp_pct((point.x - container.left) / container.width * 100.0),
        y=clamp_pct((point.y - container.top) / container.height * 100.0),
    )


def normalize_rect(start: PercentPoint, end: PercentPoint) -> PercentRect:
    """
    Top-left + extents of the rectangle spanned by two percent points.

    Both points are already clamped, so x + width and y + height never exceed 100.
    """
    return PercentRect(
        x=min(start.x, end.x),
        y=min(start.y, end.y),
        width=abs(end.x - start.x),
        height=abs(end.y - start.y),
        indeterminate=start.indeterminate or end.indeterminate,
    )


def rect_from_pixels(
    start: PixelPoint,
    end: PixelPoint,
    container: Optional[ContainerRect],
) -> PercentRect:
    """Map both raw points independently, then normalize."""
    return normalize_rect(to_percent(start, container), to_percent(end, container))
