"""
Interactive box editor.

Turns pointer input on a scaled canvas into create / move / resize / delete /
relabel operations on the player's rectangles. The editor keeps exactly one
gesture state at a time and never owns the rectangle collection: it reads the
owner's list on every event and hands back a complete replacement list after
each change.

Coordinates arrive in display space and are converted to scoring space
immediately, so gesture bookkeeping survives a canvas resize mid-drag and
scores never depend on the viewport size.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import cv2
import numpy as np
from loguru import logger

from src.core.annotations import TargetAnnotation, UserAnnotation, color_for_label
from src.core.config import Settings, settings
from src.core.geometry import DisplayPoint, ScoringPoint, point_distance
from src.core.hit_testing import Handle, Hit, find_hit
from src.core.images import ImageLoadResult
from src.core.render import draw_editor
from src.core.transform import ViewportTransform


# -----------------------------------------------------------------------------
# Gesture states
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""


@dataclass(frozen=True)
class Drawing:
    """A new rectangle is being dragged out from `anchor`."""

    annotation: UserAnnotation
    anchor: ScoringPoint


@dataclass(frozen=True)
class Moving:
    """A complete rectangle is being translated rigidly."""

    annotation_id: str
    origin: ScoringPoint
    start: tuple[ScoringPoint, ScoringPoint]


@dataclass(frozen=True)
class Resizing:
    """One corner handle of a complete rectangle is being dragged."""

    annotation_id: str
    handle: Handle
    start: tuple[ScoringPoint, ScoringPoint]


@dataclass(frozen=True)
class LabelPopup:
    """The label chooser is open for one rectangle."""

    annotation_id: str
    options: tuple[str, ...]


GestureState = Idle | Drawing | Moving | Resizing | LabelPopup

IDLE = Idle()

AnnotationsSource = Sequence[UserAnnotation] | Callable[[], Sequence[UserAnnotation]]


def resize_corners(
    start: tuple[ScoringPoint, ScoringPoint],
    handle: Handle,
    point: ScoringPoint,
) -> tuple[ScoringPoint, ScoringPoint]:
    """
    Move only the corner components a handle controls.

    nw -> x0, y0   ne -> y0, x1   sw -> x0, y1   se -> x1, y1
    """
    c0, c1 = start
    if handle == "nw":
        return ScoringPoint(point.x, point.y), c1
    if handle == "ne":
        return ScoringPoint(c0.x, point.y), ScoringPoint(point.x, c1.y)
    if handle == "sw":
        return ScoringPoint(point.x, c0.y), ScoringPoint(c1.x, point.y)
    return c0, ScoringPoint(point.x, point.y)


def normalized_corners(a: ScoringPoint, b: ScoringPoint) -> tuple[ScoringPoint, ScoringPoint]:
    """Reorder two corners as (top-left, bottom-right)."""
    return (
        ScoringPoint(min(a.x, b.x), min(a.y, b.y)),
        ScoringPoint(max(a.x, b.x), max(a.y, b.y)),
    )


class BoxEditor:
    """
    Rectangle editing surface over one image.

    Callbacks:
        on_annotation_complete(annotation): a newly drawn rectangle was finalized
        on_annotations_updated(annotations): full replacement list after a
            move, resize, delete or relabel
        on_label_change(label): a label was picked from the popup
        on_image_error(message): the image could not be loaded
    """

    def __init__(
        self,
        annotations: AnnotationsSource = (),
        *,
        targets: Sequence[TargetAnnotation] = (),
        available_labels: Sequence[str] = (),
        current_label: str | None = None,
        show_ground_truth: bool = False,
        disabled: bool = False,
        on_annotation_complete: Callable[[UserAnnotation], None] | None = None,
        on_annotations_updated: Callable[[list[UserAnnotation]], None] | None = None,
        on_label_change: Callable[[str], None] | None = None,
        on_image_error: Callable[[str], None] | None = None,
        config: Settings | None = None,
    ):
        if callable(annotations):
            self._source = annotations
            self._local: list[UserAnnotation] = []
        else:
            self._source = None
            self._local = list(annotations)

        self.targets = list(targets)
        self.available_labels = list(available_labels)
        self.config = config or settings
        self.current_label = current_label or (self.available_labels[0] if self.available_labels else self.config.default_label)
        self.show_ground_truth = show_ground_truth
        self._disabled = disabled

        self.on_annotation_complete = on_annotation_complete
        self.on_annotations_updated = on_annotations_updated
        self.on_label_change = on_label_change
        self.on_image_error = on_image_error

        self._state: GestureState = IDLE
        self._image: np.ndarray | None = None
        self._transform: ViewportTransform | None = None
        self._container: tuple[float, float] | None = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def annotations(self) -> list[UserAnnotation]:
        """The owner's current collection."""
        if self._source is not None:
            return list(self._source())
        return list(self._local)

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def in_progress(self) -> UserAnnotation | None:
        if isinstance(self._state, Drawing):
            return self._state.annotation
        return None

    @property
    def is_ready(self) -> bool:
        """True once an image is loaded; no geometry is handled before that."""
        return self._image is not None and self._transform is not None

    @property
    def transform(self) -> ViewportTransform | None:
        return self._transform

    @property
    def canvas_size(self) -> tuple[int, int] | None:
        if self._transform is None:
            return None
        return self._transform.display_size

    @property
    def disabled(self) -> bool:
        return self._disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._disabled = value
        if value:
            self._state = IDLE

    # -------------------------------------------------------------------------
    # Image and viewport
    # -------------------------------------------------------------------------

    def load_image(
        self,
        result: ImageLoadResult,
        original_width: float | None = None,
        original_height: float | None = None,
    ) -> bool:
        """
        Attach the image the rectangles are drawn over.

        `original_width`/`original_height` define scoring space; they default
        to the loaded image's pixel size. On failure the editor drops any
        previous image and stays non-interactive until a later load succeeds.
        """
        self._state = IDLE

        if not result.ok:
            self._image = None
            self._transform = None
            message = result.error or f"Failed to load image: {result.source}"
            logger.warning(message)
            if self.on_image_error:
                self.on_image_error(message)
            return False

        self._image = result.image
        width = original_width or result.width
        height = original_height or result.height
        if self._container is not None:
            self._transform = ViewportTransform.fit(width, height, *self._container)
        else:
            self._transform = ViewportTransform(width, height)

        self._project_all()
        logger.info(f"Editor ready: {result.source} (scoring space {width:g}x{height:g})")
        return True

    def resize(self, container_width: float, container_height: float) -> None:
        """
        Fit the canvas to a new container size.

        Every rectangle's display projection is rebuilt; scoring coordinates
        are left exactly as they were.
        """
        self._container = (container_width, container_height)
        if self._transform is None:
            logger.debug("Resize ignored: no image loaded")
            return

        self._transform = ViewportTransform.fit(
            self._transform.image_width,
            self._transform.image_height,
            container_width,
            container_height,
        )
        self._project_all()
        if isinstance(self._state, Drawing):
            self._project(self._state.annotation)

    def _project(self, annotation: UserAnnotation) -> None:
        annotation.display_coordinates = self._transform.many_to_display(annotation.coordinates)

    def _project_all(self) -> None:
        for annotation in self.annotations:
            self._project(annotation)

    # -------------------------------------------------------------------------
    # Pointer events
    # -------------------------------------------------------------------------

    def _accepts_input(self) -> bool:
        if self._disabled:
            logger.debug("Pointer event ignored: editor disabled")
            return False
        if not self.is_ready:
            logger.debug("Pointer event ignored: no image loaded")
            return False
        return True

    def pointer_down(self, point: DisplayPoint) -> GestureState:
        if not self._accepts_input():
            return self._state
        if not isinstance(self._state, Idle):
            logger.debug(f"Pointer down ignored during {type(self._state).__name__}")
            return self._state

        self._project_all()
        annotations = self.annotations

        hit = find_hit(
            annotations,
            point,
            handle_radius=self.config.handle_radius,
            delete_button_size=self.config.delete_button_size,
            font_scale=self.config.label_font_scale,
            thickness=self.config.label_thickness,
            padding=self.config.label_padding,
            canvas_width=self._transform.display_size[0],
        )
        logger.debug(f"Pointer down at ({point.x:.1f}, {point.y:.1f}): {hit}")

        if hit is None:
            self._start_drawing(point)
        else:
            self._start_hit(hit, annotations, point)

        return self._state

    def _start_drawing(self, point: DisplayPoint) -> None:
        anchor = self._transform.to_scoring(point)
        annotation = UserAnnotation(
            label=self.current_label,
            coordinates=[anchor],
            display_coordinates=[point],
            color=color_for_label(self.current_label),
            is_complete=False,
        )
        self._state = Drawing(annotation=annotation, anchor=anchor)

    def _start_hit(self, hit: Hit, annotations: list[UserAnnotation], point: DisplayPoint) -> None:
        target = next(a for a in annotations if a.id == hit.annotation_id)

        if hit.kind == "label":
            self._state = LabelPopup(annotation_id=target.id, options=tuple(self.available_labels))
        elif hit.kind == "delete":
            remaining = [a for a in annotations if a.id != target.id]
            logger.debug(f"Deleted annotation {target.id} ({target.label})")
            self._emit_update(remaining)
        elif hit.kind == "handle":
            self._state = Resizing(
                annotation_id=target.id,
                handle=hit.handle,
                start=(target.coordinates[0], target.coordinates[1]),
            )
        else:
            self._state = Moving(
                annotation_id=target.id,
                origin=self._transform.to_scoring(point),
                start=(target.coordinates[0], target.coordinates[1]),
            )

    def pointer_move(self, point: DisplayPoint) -> None:
        if self._disabled or not self.is_ready:
            return
        state = self._state

        if isinstance(state, Drawing):
            annotation = state.annotation
            annotation.coordinates = [state.anchor, self._transform.to_scoring(point)]
            self._project(annotation)
        elif isinstance(state, Moving):
            current = self._transform.to_scoring(point)
            dx = current.x - state.origin.x
            dy = current.y - state.origin.y
            c0, c1 = state.start
            self._replace_coordinates(
                state.annotation_id,
                (ScoringPoint(c0.x + dx, c0.y + dy), ScoringPoint(c1.x + dx, c1.y + dy)),
            )
        elif isinstance(state, Resizing):
            corners = resize_corners(state.start, state.handle, self._transform.to_scoring(point))
            self._replace_coordinates(state.annotation_id, corners)

    def pointer_up(self, point: DisplayPoint | None = None) -> UserAnnotation | None:
        """
        End the current gesture.

        Returns the finalized rectangle when a drawing gesture produced one.
        """
        if point is not None:
            self.pointer_move(point)
        state = self._state

        if isinstance(state, Drawing):
            self._state = IDLE
            return self._finish_drawing(state)
        if isinstance(state, (Moving, Resizing)):
            self._state = IDLE
        return None

    def pointer_leave(self) -> None:
        """Pointer left the canvas (or the touch was cancelled)."""
        if isinstance(self._state, Drawing):
            logger.debug("Drawing aborted: pointer left canvas")
            self._state = IDLE

    pointer_cancel = pointer_leave

    def _finish_drawing(self, state: Drawing) -> UserAnnotation | None:
        annotation = state.annotation
        if len(annotation.coordinates) < 2 or self._transform is None:
            return None

        start = self._transform.to_display(state.anchor)
        end = self._transform.to_display(annotation.coordinates[1])
        distance = point_distance(start, end)
        if distance < self.config.min_drag_distance:
            logger.debug(f"Drag of {distance:.1f}px discarded (< {self.config.min_drag_distance}px)")
            return None

        c0, c1 = normalized_corners(annotation.coordinates[0], annotation.coordinates[1])
        annotation.coordinates = [c0, c1]
        annotation.is_complete = True
        self._project(annotation)

        if self._source is None:
            self._local = [*self._local, annotation]
        logger.debug(f"Annotation {annotation.id} ({annotation.label}) completed")
        if self.on_annotation_complete:
            self.on_annotation_complete(annotation)
        return annotation

    # -------------------------------------------------------------------------
    # Label popup
    # -------------------------------------------------------------------------

    def choose_label(self, label: str) -> bool:
        """Apply a label from the open popup and close it."""
        state = self._state
        if not isinstance(state, LabelPopup):
            return False
        if state.options and label not in state.options:
            logger.warning(f"Label '{label}' is not one of the available labels")
            return False

        updated = []
        for annotation in self.annotations:
            if annotation.id == state.annotation_id:
                annotation = annotation.copy()
                annotation.relabel(label)
                annotation.is_complete = True
            updated.append(annotation)

        self._state = IDLE
        self.current_label = label
        self._emit_update(updated)
        if self.on_label_change:
            self.on_label_change(label)
        return True

    def dismiss_popup(self) -> None:
        if isinstance(self._state, LabelPopup):
            self._state = IDLE

    # -------------------------------------------------------------------------
    # Collection updates
    # -------------------------------------------------------------------------

    def _replace_coordinates(self, annotation_id: str, corners: tuple[ScoringPoint, ScoringPoint]) -> None:
        updated = []
        for annotation in self.annotations:
            if annotation.id == annotation_id:
                annotation = annotation.copy()
                annotation.coordinates = list(corners)
                self._project(annotation)
            updated.append(annotation)
        self._emit_update(updated)

    def _emit_update(self, annotations: list[UserAnnotation]) -> None:
        if self._source is None:
            self._local = list(annotations)
        if self.on_annotations_updated:
            self.on_annotations_updated(list(annotations))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> np.ndarray | None:
        """Draw the current canvas; None while no image is loaded."""
        if not self.is_ready:
            return None

        width, height = self._transform.display_size
        canvas = cv2.resize(self._image, (max(1, width), max(1, height)), interpolation=cv2.INTER_AREA)
        return draw_editor(
            canvas,
            self._transform,
            self.annotations,
            in_progress=self.in_progress,
            targets=self.targets,
            show_ground_truth=self.show_ground_truth,
            show_controls=not self._disabled,
            config=self.config,
        )
