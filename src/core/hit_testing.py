"""
Hit testing for the box editor.

Everything here works in display space: tolerances are screen pixels, so a
handle is equally easy to grab at any zoom level. Only complete, well-formed
rectangles with a display projection can be hit.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import cv2

from src.core.annotations import UserAnnotation
from src.core.geometry import Bounds, DisplayPoint

Handle = Literal["nw", "ne", "sw", "se"]

HitKind = Literal["label", "delete", "handle", "body"]

_FONT = cv2.FONT_HERSHEY_SIMPLEX


@dataclass(frozen=True)
class Hit:
    """What a pointer-down landed on."""

    kind: HitKind
    annotation_id: str
    handle: Handle | None = None


def handle_positions(corners: Sequence[DisplayPoint]) -> dict[Handle, DisplayPoint]:
    """
    Handle locations derived from the stored corner order.

    Corner 0 owns the nw x/y, corner 1 owns the se x/y; ne and sw mix them.
    Deriving from storage order (rather than normalized bounds) keeps each
    handle attached to the corner components it edits.
    """
    c0, c1 = corners[0], corners[1]
    return {
        "nw": DisplayPoint(c0.x, c0.y),
        "ne": DisplayPoint(c1.x, c0.y),
        "sw": DisplayPoint(c0.x, c1.y),
        "se": DisplayPoint(c1.x, c1.y),
    }


def label_text_size(label: str, font_scale: float, thickness: int) -> tuple[int, int]:
    """Rendered label size in pixels (width, height including baseline)."""
    (width, height), baseline = cv2.getTextSize(label, _FONT, font_scale, thickness)
    return width, height + baseline


def label_tag_bounds(
    bounds: Bounds,
    label: str,
    font_scale: float,
    thickness: int,
    padding: int,
    canvas_width: float | None = None,
) -> Bounds:
    """
    Box occupied by a rectangle's label chip.

    Sits above the top-left corner; if that would leave the top of the canvas
    it moves below the bottom-right corner instead. When `canvas_width` is
    known the chip is slid horizontally to stay inside the canvas.
    """
    text_w, text_h = label_text_size(label, font_scale, thickness)
    chip_w = text_w + 2 * padding
    chip_h = text_h + 2 * padding

    if bounds.top - chip_h >= 0:
        left, top = bounds.left, bounds.top - chip_h
    else:
        left, top = bounds.right - chip_w, bounds.bottom

    if canvas_width is not None and left + chip_w > canvas_width:
        left = canvas_width - chip_w
    left = max(left, 0)

    return Bounds(left=left, right=left + chip_w, top=top, bottom=top + chip_h)


def delete_button_bounds(bounds: Bounds, size: float) -> Bounds:
    """Square button centered on the rectangle's top-right corner."""
    half = size / 2
    return Bounds(
        left=bounds.right - half,
        right=bounds.right + half,
        top=bounds.top - half,
        bottom=bounds.top + half,
    )


def hit_handle(corners: Sequence[DisplayPoint], point: DisplayPoint, radius: float) -> Handle | None:
    for name, position in handle_positions(corners).items():
        if abs(point.x - position.x) <= radius and abs(point.y - position.y) <= radius:
            return name
    return None


def _hittable(annotations: Sequence[UserAnnotation]) -> list[UserAnnotation]:
    # Topmost (most recently drawn) first
    return [
        a
        for a in reversed(annotations)
        if a.is_editable and a.display_coordinates and len(a.display_coordinates) == 2
    ]


def find_hit(
    annotations: Sequence[UserAnnotation],
    point: DisplayPoint,
    *,
    handle_radius: float,
    delete_button_size: float,
    font_scale: float,
    thickness: int,
    padding: int,
    canvas_width: float | None = None,
) -> Hit | None:
    """
    Resolve a pointer-down against every editable rectangle.

    Priority is fixed and applies across all rectangles: label tag, then
    delete button, then resize handle, then box body.
    """
    candidates = _hittable(annotations)

    for annotation in candidates:
        tag = label_tag_bounds(
            annotation.display_bounds, annotation.label, font_scale, thickness, padding, canvas_width
        )
        if tag.contains(point.x, point.y):
            return Hit("label", annotation.id)

    for annotation in candidates:
        button = delete_button_bounds(annotation.display_bounds, delete_button_size)
        if button.contains(point.x, point.y):
            return Hit("delete", annotation.id)

    for annotation in candidates:
        handle = hit_handle(annotation.display_coordinates, point, handle_radius)
        if handle is not None:
            return Hit("handle", annotation.id, handle)

    for annotation in candidates:
        if annotation.display_bounds.contains(point.x, point.y):
            return Hit("body", annotation.id)

    return None
