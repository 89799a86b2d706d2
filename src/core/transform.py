"""Display-space <-> scoring-space conversion for a scaled canvas."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from src.core.geometry import DisplayPoint, ScoringPoint


def _usable(scale: float | None) -> bool:
    return scale is not None and math.isfinite(scale) and scale > 0


@dataclass(frozen=True)
class ViewportTransform:
    """
    Linear scale between the original image and the rendered canvas.

    Scales are kept per axis. `fit()` produces equal scales (aspect ratio
    preserved) but a transform built from explicit sizes may not. When a
    scale is missing or zero, e.g. before the container has been measured,
    conversions pass points through unchanged.
    """

    image_width: float
    image_height: float
    scale_x: float | None = None
    scale_y: float | None = None

    @classmethod
    def fit(
        cls,
        image_width: float,
        image_height: float,
        container_width: float,
        container_height: float,
    ) -> ViewportTransform:
        """Largest scale at which the whole image fits inside the container."""
        if image_width <= 0 or image_height <= 0 or container_width <= 0 or container_height <= 0:
            return cls(image_width, image_height)

        scale = min(container_width / image_width, container_height / image_height)
        return cls(image_width, image_height, scale, scale)

    @classmethod
    def from_sizes(
        cls,
        image_width: float,
        image_height: float,
        display_width: float,
        display_height: float,
    ) -> ViewportTransform:
        """Independent per-axis scale from a known display size."""
        scale_x = display_width / image_width if image_width > 0 else None
        scale_y = display_height / image_height if image_height > 0 else None
        return cls(image_width, image_height, scale_x, scale_y)

    @classmethod
    def identity(cls, image_width: float = 0, image_height: float = 0) -> ViewportTransform:
        return cls(image_width, image_height, 1.0, 1.0)

    @property
    def is_ready(self) -> bool:
        return _usable(self.scale_x) and _usable(self.scale_y)

    @property
    def display_size(self) -> tuple[int, int]:
        """Canvas size in whole pixels (the original size when unscaled)."""
        sx = self.scale_x if _usable(self.scale_x) else 1.0
        sy = self.scale_y if _usable(self.scale_y) else 1.0
        return int(round(self.image_width * sx)), int(round(self.image_height * sy))

    def to_display(self, point: ScoringPoint) -> DisplayPoint:
        sx = self.scale_x if _usable(self.scale_x) else 1.0
        sy = self.scale_y if _usable(self.scale_y) else 1.0
        return DisplayPoint(point.x * sx, point.y * sy)

    def to_scoring(self, point: DisplayPoint) -> ScoringPoint:
        sx = self.scale_x if _usable(self.scale_x) else 1.0
        sy = self.scale_y if _usable(self.scale_y) else 1.0
        return ScoringPoint(point.x / sx, point.y / sy)

    def many_to_display(self, points: Sequence[ScoringPoint]) -> list[DisplayPoint]:
        return [self.to_display(p) for p in points]

    def many_to_scoring(self, points: Sequence[DisplayPoint]) -> list[ScoringPoint]:
        return [self.to_scoring(p) for p in points]
