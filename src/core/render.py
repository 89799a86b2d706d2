"""
Canvas rendering for the box editor.

Produces the frame the player sees: completed rectangles with label chips,
corner handles and delete buttons, the rectangle being dragged, and
optionally the ground truth in a dashed, non-interactive style.
"""

from __future__ import annotations

from collections.abc import Sequence

import cv2
import numpy as np

from src.core.annotations import GROUND_TRUTH_COLOR, TargetAnnotation, UserAnnotation, hex_to_bgr
from src.core.config import Settings, settings
from src.core.geometry import Bounds, DisplayPoint, bounds_of
from src.core.hit_testing import delete_button_bounds, handle_positions, label_tag_bounds
from src.core.transform import ViewportTransform

FILL_ALPHA = 0.15
GROUND_TRUTH_FILL_ALPHA = 0.25
HANDLE_SIZE = 4
DASH_LENGTH = 8


def _pt(x: float, y: float) -> tuple[int, int]:
    return int(round(x)), int(round(y))


def fill_rectangle(image: np.ndarray, bounds: Bounds, color: tuple[int, int, int], alpha: float) -> None:
    """Blend a translucent fill into the image in place."""
    overlay = image.copy()
    cv2.rectangle(overlay, _pt(bounds.left, bounds.top), _pt(bounds.right, bounds.bottom), color, -1)
    cv2.addWeighted(overlay, alpha, image, 1 - alpha, 0, dst=image)


def draw_dashed_rectangle(
    image: np.ndarray,
    bounds: Bounds,
    color: tuple[int, int, int],
    thickness: int = 2,
    dash: int = DASH_LENGTH,
) -> None:
    """OpenCV has no dashed line style; draw each edge as short segments."""
    corners = [
        (bounds.left, bounds.top),
        (bounds.right, bounds.top),
        (bounds.right, bounds.bottom),
        (bounds.left, bounds.bottom),
    ]
    for (x1, y1), (x2, y2) in zip(corners, corners[1:] + corners[:1]):
        length = max(abs(x2 - x1), abs(y2 - y1))
        steps = max(1, int(length // dash))
        for i in range(0, steps, 2):
            start = i / steps
            end = min(1.0, (i + 1) / steps)
            cv2.line(
                image,
                _pt(x1 + (x2 - x1) * start, y1 + (y2 - y1) * start),
                _pt(x1 + (x2 - x1) * end, y1 + (y2 - y1) * end),
                color,
                thickness,
            )


def draw_label_chip(image: np.ndarray, bounds: Bounds, label: str, color: tuple[int, int, int], config: Settings) -> None:
    """Label chip, placed exactly where hit testing looks for it."""
    chip = label_tag_bounds(
        bounds, label, config.label_font_scale, config.label_thickness, config.label_padding, image.shape[1]
    )
    cv2.rectangle(image, _pt(chip.left, chip.top), _pt(chip.right, chip.bottom), color, -1)

    _, baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, config.label_font_scale, config.label_thickness)
    cv2.putText(
        image,
        label,
        _pt(chip.left + config.label_padding, chip.bottom - config.label_padding - baseline),
        cv2.FONT_HERSHEY_SIMPLEX,
        config.label_font_scale,
        (255, 255, 255),
        config.label_thickness,
        cv2.LINE_AA,
    )


def draw_handles(image: np.ndarray, corners: Sequence[DisplayPoint], color: tuple[int, int, int]) -> None:
    for position in handle_positions(corners).values():
        cx, cy = _pt(position.x, position.y)
        cv2.rectangle(image, (cx - HANDLE_SIZE, cy - HANDLE_SIZE), (cx + HANDLE_SIZE, cy + HANDLE_SIZE), (255, 255, 255), -1)
        cv2.rectangle(image, (cx - HANDLE_SIZE, cy - HANDLE_SIZE), (cx + HANDLE_SIZE, cy + HANDLE_SIZE), color, 1)


def draw_delete_button(image: np.ndarray, bounds: Bounds, size: float) -> None:
    button = delete_button_bounds(bounds, size)
    cv2.rectangle(image, _pt(button.left, button.top), _pt(button.right, button.bottom), (60, 60, 220), -1)
    inset = size / 4
    cv2.line(image, _pt(button.left + inset, button.top + inset), _pt(button.right - inset, button.bottom - inset), (255, 255, 255), 2)
    cv2.line(image, _pt(button.right - inset, button.top + inset), _pt(button.left + inset, button.bottom - inset), (255, 255, 255), 2)


def draw_ground_truth(image: np.ndarray, transform: ViewportTransform, targets: Sequence[TargetAnnotation]) -> None:
    color = hex_to_bgr(GROUND_TRUTH_COLOR)
    for target in targets:
        bounds = bounds_of(transform.many_to_display(target.coordinates))
        if bounds is None:
            continue
        fill_rectangle(image, bounds, color, GROUND_TRUTH_FILL_ALPHA)
        draw_dashed_rectangle(image, bounds, color)


def draw_editor(
    image: np.ndarray,
    transform: ViewportTransform,
    annotations: Sequence[UserAnnotation],
    in_progress: UserAnnotation | None = None,
    targets: Sequence[TargetAnnotation] = (),
    show_ground_truth: bool = False,
    show_controls: bool = True,
    config: Settings | None = None,
) -> np.ndarray:
    """
    Draw the editor canvas.

    Args:
        image: BGR image already sized to the display canvas
        transform: Scoring -> display transform for this canvas
        annotations: The player's rectangles
        in_progress: Rectangle currently being dragged out (outline only)
        targets: Ground-truth rectangles
        show_ground_truth: Overlay the targets
        show_controls: Draw handles and delete buttons on complete rectangles
        config: Settings for label chip and button sizes

    Returns:
        Annotated copy of the image
    """
    config = config or settings
    result = image.copy()

    if show_ground_truth:
        draw_ground_truth(result, transform, targets)

    for annotation in annotations:
        if not annotation.is_editable:
            continue
        corners = transform.many_to_display(annotation.coordinates)
        bounds = bounds_of(corners)
        color = hex_to_bgr(annotation.color)

        fill_rectangle(result, bounds, color, FILL_ALPHA)
        cv2.rectangle(result, _pt(bounds.left, bounds.top), _pt(bounds.right, bounds.bottom), color, 2)
        draw_label_chip(result, bounds, annotation.label, color, config)
        if show_controls:
            draw_handles(result, corners, color)
            draw_delete_button(result, bounds, config.delete_button_size)

    if in_progress is not None and len(in_progress.coordinates) == 2:
        bounds = bounds_of(transform.many_to_display(in_progress.coordinates))
        if bounds is not None:
            cv2.rectangle(
                result,
                _pt(bounds.left, bounds.top),
                _pt(bounds.right, bounds.bottom),
                hex_to_bgr(in_progress.color),
                2,
            )

    return result
