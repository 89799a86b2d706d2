"""
Rectangle geometry in two coordinate spaces.

Scoring space is the pixel grid of the original, unscaled image. Display space
is the pixel grid of the canvas currently on screen. The two point types are
deliberately distinct classes so that one can never be passed where the other
is expected; `src.core.transform.ViewportTransform` is the only bridge.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar


@dataclass(frozen=True)
class ScoringPoint:
    """Point in original-image pixels."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class DisplayPoint:
    """Point in rendered-canvas pixels."""

    x: float
    y: float


Point = TypeVar("Point", ScoringPoint, DisplayPoint)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle normalized to left <= right and top <= bottom."""

    left: float
    right: float
    top: float
    bottom: float

    @classmethod
    def from_corners(cls, a: ScoringPoint | DisplayPoint, b: ScoringPoint | DisplayPoint) -> Bounds:
        return cls(
            left=min(a.x, b.x),
            right=max(a.x, b.x),
            top=min(a.y, b.y),
            bottom=max(a.y, b.y),
        )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.left + self.right) / 2, (self.top + self.bottom) / 2

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom


def bounds_of(corners: Sequence[ScoringPoint | DisplayPoint] | None) -> Bounds | None:
    """
    Normalize a two-corner rectangle.

    Returns None for anything that is not a usable rectangle: fewer than two
    corners, or coordinates that are not finite numbers.
    """
    if not corners or len(corners) < 2:
        return None

    a, b = corners[0], corners[1]
    try:
        values = (float(a.x), float(a.y), float(b.x), float(b.y))
    except (AttributeError, TypeError, ValueError):
        return None
    if not all(math.isfinite(v) for v in values):
        return None

    return Bounds.from_corners(a, b)


def center_distance(a: Bounds, b: Bounds) -> float:
    """Euclidean distance between two rectangle centers."""
    ax, ay = a.center
    bx, by = b.center
    return math.hypot(ax - bx, ay - by)


def intersection_area(a: Bounds, b: Bounds) -> float:
    x_overlap = max(0.0, min(a.right, b.right) - max(a.left, b.left))
    y_overlap = max(0.0, min(a.bottom, b.bottom) - max(a.top, b.top))
    return x_overlap * y_overlap


def iou(a: Bounds, b: Bounds) -> float:
    """
    Standard intersection over union.

    Degenerate rectangles (zero union) yield 0.0 instead of dividing by zero.
    """
    intersection = intersection_area(a, b)
    union = a.area + b.area - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def edge_gaps(a: Bounds, b: Bounds) -> tuple[float, float]:
    """Edge-to-edge gap on the x and y axes (0 where the projections overlap)."""
    x_gap = max(0.0, max(a.left, b.left) - min(a.right, b.right))
    y_gap = max(0.0, max(a.top, b.top) - min(a.bottom, b.bottom))
    return x_gap, y_gap


def point_distance(a: Point, b: Point) -> float:
    """Distance between two points of the same space."""
    return math.hypot(b.x - a.x, b.y - a.y)
