"""
Coordinate model for the editor canvas.

Stored positions are percentages of the container; pointer events arrive
in pixels. Conversions always take the container rectangle measured for
the current event, since the canvas can be resized between renders.

Clamping happens when a value is written (clamp_point / clamp_box_origin),
never when it is read, so out-of-range legacy values still render.
"""

from dataclasses import dataclass
from typing import Tuple

from imagesurvey.edit.constants import PERCENT_MAX


@dataclass(frozen=True)
class Rect:
    """Bounding rectangle of the rendered container, in pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def to_percent(pixel: Tuple[float, float], rect: Rect) -> Tuple[float, float]:
    """Project a client-space pixel onto the container's percentage space."""
    if rect.is_empty:
        return 0.0, 0.0
    px, py = pixel
    x = (px - rect.left) / rect.width * PERCENT_MAX
    y = (py - rect.top) / rect.height * PERCENT_MAX
    return x, y


def to_pixel(x: float, y: float, rect: Rect) -> Tuple[float, float]:
    """Inverse of to_percent."""
    return (
        rect.left + x / PERCENT_MAX * rect.width,
        rect.top + y / PERCENT_MAX * rect.height,
    )


def to_pixel_size(width: float, height: float, rect: Rect) -> Tuple[float, float]:
    return width / PERCENT_MAX * rect.width, height / PERCENT_MAX * rect.height


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_point(x: float, y: float) -> Tuple[float, float]:
    """Clamp a marker position into [0, 100] x [0, 100]."""
    return clamp(x, 0.0, PERCENT_MAX), clamp(y, 0.0, PERCENT_MAX)


def clamp_box_origin(x: float, y: float, width: float, height: float) -> Tuple[float, float]:
    """Clamp a box's top-left corner so the whole box stays on the canvas."""
    return (
        clamp(x, 0.0, max(0.0, PERCENT_MAX - width)),
        clamp(y, 0.0, max(0.0, PERCENT_MAX - height)),
    )
