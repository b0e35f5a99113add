"""
Planar geometry primitives shared by the capture model and the placement engine.

Positions are plain floats in universe coordinates (metres). Containment is
boundary inclusive with a small relative tolerance so that points computed
as circle-circle intersections still count as inside both circles.
"""

from __future__ import annotations

from dataclasses import dataclass
import math


# Relative slack used for boundary-inclusive containment tests.
CONTAINMENT_TOLERANCE = 1e-9


@dataclass(frozen=True, order=True)
class Point:
    """Immutable 2D position; ordered lexicographically by (x, y)."""

    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Circle:
    """Circle with a center and a non-negative radius."""

    center: Point
    radius: float

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ValueError(f"Circle radius must be non-negative, got {self.radius}")

    def contains(self, point: Point) -> bool:
        """Boundary-inclusive point-in-circle test."""
        slack = CONTAINMENT_TOLERANCE * max(1.0, self.radius)
        dx = point.x - self.center.x
        dy = point.y - self.center.y
        return dx * dx + dy * dy <= (self.radius + slack) ** 2

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Return (min_x, min_y, max_x, max_y)."""
        cx, cy, r = self.center.x, self.center.y, self.radius
        return cx - r, cy - r, cx + r, cy + r


def in_rectangle(point: Point, width: float, height: float) -> bool:
    """True when ``point`` lies in the closed rectangle [0, width] x [0, height]."""
    return 0.0 <= point.x <= width and 0.0 <= point.y <= height
