"""User and ground-truth rectangle annotations."""

from __future__ import annotations

import uuid
import zlib
from dataclasses import dataclass, field, replace
from typing import Any, Literal

from src.core.geometry import Bounds, DisplayPoint, ScoringPoint, bounds_of

AnnotationType = Literal["rectangle"]

# Label -> color used for outlines, fills and label chips
LABEL_COLORS: dict[str, str] = {
    "Whale": "#0EA5E9",
    "Great White Shark": "#FF6B6B",
    "Fish": "#FFB347",
    "Coral": "#FF719A",
    "Kelp": "#4CAF50",
    "Seaweed": "#2E8B57",
    "Sea Turtle": "#96CEB4",
    "Jellyfish": "#DDA0DD",
    "Dolphin": "#45B7D1",
    "Octopus": "#9B59B6",
    "Rock": "#8D8D8D",
    "Bubbles": "#98D8C8",
}

# Fallback palette for labels without a fixed color
_PALETTE = ["#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7", "#DDA0DD", "#98D8C8"]

GROUND_TRUTH_COLOR = "#FFFFFF"


def color_for_label(label: str) -> str:
    """Map a label to its display color (stable across runs)."""
    if label in LABEL_COLORS:
        return LABEL_COLORS[label]
    return _PALETTE[zlib.crc32(label.encode("utf-8")) % len(_PALETTE)]


def hex_to_bgr(color: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' to an OpenCV BGR tuple."""
    value = color.lstrip("#")
    if len(value) != 6:
        return (255, 255, 255)
    r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


def generate_id() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class UserAnnotation:
    """
    A rectangle drawn by the player.

    `coordinates` is the canonical geometry, always in scoring space.
    `display_coordinates` is a cache of the same corners projected into the
    current canvas and is rebuilt whenever the display scale changes.
    """

    label: str
    coordinates: list[ScoringPoint] = field(default_factory=list)
    id: str = field(default_factory=generate_id)
    type: AnnotationType = "rectangle"
    is_complete: bool = False
    display_coordinates: list[DisplayPoint] | None = None
    color: str = ""

    kind: Literal["user"] = field(default="user", init=False, repr=False)

    def __post_init__(self):
        if not self.color:
            self.color = color_for_label(self.label)

    @property
    def bounds(self) -> Bounds | None:
        return bounds_of(self.coordinates)

    @property
    def display_bounds(self) -> Bounds | None:
        return bounds_of(self.display_coordinates)

    @property
    def is_editable(self) -> bool:
        """Only finalized, well-formed rectangles can be moved, resized or deleted."""
        return self.is_complete and len(self.coordinates) == 2 and self.bounds is not None

    def relabel(self, label: str) -> None:
        self.label = label
        self.color = color_for_label(label)

    def copy(self) -> UserAnnotation:
        return replace(
            self,
            coordinates=list(self.coordinates),
            display_coordinates=list(self.display_coordinates) if self.display_coordinates else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "color": self.color,
            "isComplete": self.is_complete,
            "coordinates": [p.to_dict() for p in self.coordinates],
        }


@dataclass(frozen=True)
class TargetAnnotation:
    """Immutable ground-truth rectangle, in scoring space."""

    id: str
    label: str
    coordinates: tuple[ScoringPoint, ...]
    type: AnnotationType = "rectangle"

    kind: Literal["target"] = field(default="target", init=False, repr=False)

    @classmethod
    def from_corners(cls, id: str, label: str, x1: float, y1: float, x2: float, y2: float) -> TargetAnnotation:
        return cls(id=id, label=label, coordinates=(ScoringPoint(x1, y1), ScoringPoint(x2, y2)))

    @property
    def bounds(self) -> Bounds | None:
        return bounds_of(self.coordinates)

    @property
    def color(self) -> str:
        return color_for_label(self.label)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "coordinates": [p.to_dict() for p in self.coordinates],
        }


Annotation = UserAnnotation | TargetAnnotation
