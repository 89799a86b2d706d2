"""
Game session: the owner of a round's rectangles.

The session holds the annotation collection the editor works on, the round
timer, per-image results and the cumulative score. Only the session touches
the key-value store; scoring and the editor never persist anything.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from src.core.annotations import UserAnnotation
from src.core.catalog import ImageCatalog, OceanImage, labels_for
from src.core.config import Settings, settings
from src.core.editor import BoxEditor
from src.core.scoring import MatchSummary, RoundScore, match_summary, round_score, score_feedback
from src.core.store import InMemoryStore, KeyValueStore, get_int


class Countdown:
    """Round timer driven by explicit ticks."""

    def __init__(self, duration: float):
        if duration <= 0:
            raise ValueError(f"Countdown duration must be positive, got {duration}")
        self.duration = duration
        self._elapsed = 0.0
        self._running = True

    @property
    def time_left(self) -> float:
        return max(0.0, self.duration - self._elapsed)

    @property
    def expired(self) -> bool:
        return self.time_left <= 0

    @property
    def running(self) -> bool:
        return self._running and not self.expired

    def tick(self, seconds: float = 1.0) -> float:
        """Advance the clock; returns the time left."""
        if self.running and seconds > 0:
            self._elapsed = min(self.duration, self._elapsed + seconds)
        return self.time_left

    def stop(self) -> None:
        self._running = False

    def reset(self) -> None:
        self._elapsed = 0.0
        self._running = True

    def time_bonus(self, max_bonus: int) -> int:
        """Bonus proportional to the time left, rounded down."""
        return math.floor(self.time_left / self.duration * max_bonus)


@dataclass
class RoundResult:
    """Outcome of submitting one image."""

    image_id: str
    score: RoundScore
    time_bonus: int
    final_score: int
    summary: MatchSummary
    feedback: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "imageId": self.image_id,
            "score": self.score.to_dict(),
            "timeBonus": self.time_bonus,
            "finalScore": self.final_score,
            "found": self.summary.found_count,
            "total": self.summary.total,
            "message": self.summary.message,
            "feedback": self.feedback,
        }


def completion_feedback(total_score: int) -> str:
    """Message for the end-of-game dialog."""
    if total_score >= 100:
        return "Amazing job! You're an annotation expert!"
    if total_score >= 70:
        return "Good work! Keep practicing to improve!"
    return "Nice try! Practice makes perfect!"


@dataclass
class GameSummary:
    """End-of-game totals."""

    total_score: int
    best_score: int
    new_best: bool
    images_annotated: int
    feedback: str = field(default="")


class GameSession:
    """
    One play-through over a progressive set of catalog images.

    Args:
        catalog: Images to play
        store: Key-value store for the best score (in-memory by default)
        round_number: Difficulty round (1 = easy only)
        config: Settings for timer and bonus values
    """

    def __init__(
        self,
        catalog: ImageCatalog,
        store: KeyValueStore | None = None,
        round_number: int = 1,
        config: Settings | None = None,
    ):
        self.catalog = catalog
        self.store = store if store is not None else InMemoryStore()
        self.config = config or settings
        self.round_number = round_number

        self.images: list[OceanImage] = []
        self.available_labels: list[str] = []
        self.current_index = 0
        self.current_label = self.config.default_label
        self.timer = Countdown(self.config.timer_duration_seconds)
        self.show_ground_truth = False

        self._annotations: list[UserAnnotation] = []
        self.results: dict[str, RoundResult] = {}
        self.total_score = 0
        self._editor: BoxEditor | None = None

        self._load_round(round_number)

    def _load_round(self, round_number: int) -> None:
        self.round_number = round_number
        self.images = self.catalog.progressive_image_set(round_number)
        self.available_labels = labels_for(self.images)
        if self.available_labels and self.current_label not in self.available_labels:
            self.current_label = self.available_labels[0]

        self.current_index = 0
        self._annotations = []
        self.results = {}
        self.total_score = 0
        self.show_ground_truth = False
        self.timer.reset()
        self._sync_editor()
        logger.info(f"Round {round_number}: {len(self.images)} image(s), labels={self.available_labels}")

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    @property
    def current_image(self) -> OceanImage | None:
        if not self.images:
            return None
        return self.images[self.current_index]

    @property
    def is_last_image(self) -> bool:
        return self.current_index >= len(self.images) - 1

    @property
    def all_images_annotated(self) -> bool:
        return bool(self.images) and all(img.id in self.results for img in self.images)

    def select_image(self, image_id: str) -> OceanImage:
        """Switch to an image of the current round; clears the working set."""
        for index, image in enumerate(self.images):
            if image.id == image_id:
                self.current_index = index
                self._start_image()
                return image
        raise ValueError(f"Image '{image_id}' is not part of round {self.round_number}")

    def next_image(self) -> OceanImage | None:
        """Advance to the next image; None when the round has no more."""
        if self.is_last_image:
            return None
        self.current_index += 1
        self._start_image()
        return self.current_image

    def _start_image(self) -> None:
        self._annotations = []
        self.show_ground_truth = False
        self.timer.reset()
        self._sync_editor()

    def _sync_editor(self) -> None:
        """Point the editor at the current image and unlock it."""
        if self._editor is None:
            return
        image = self.current_image
        self._editor.targets = list(image.targets) if image else []
        self._editor.available_labels = list(self.available_labels)
        self._editor.current_label = self.current_label
        self._editor.show_ground_truth = self.show_ground_truth
        self._editor.disabled = False

    def toggle_ground_truth(self) -> bool:
        """Flip the ground truth overlay; returns the new visibility."""
        self.show_ground_truth = not self.show_ground_truth
        if self._editor is not None:
            self._editor.show_ground_truth = self.show_ground_truth
        return self.show_ground_truth

    # -------------------------------------------------------------------------
    # Annotations (owned here, replaced wholesale by the editor)
    # -------------------------------------------------------------------------

    @property
    def annotations(self) -> list[UserAnnotation]:
        return list(self._annotations)

    def add_annotation(self, annotation: UserAnnotation) -> None:
        self._annotations = [*self._annotations, annotation]

    def replace_annotations(self, annotations: list[UserAnnotation]) -> None:
        self._annotations = list(annotations)

    def clear_annotations(self) -> None:
        self._annotations = []

    def set_current_label(self, label: str) -> None:
        if self.available_labels and label not in self.available_labels:
            raise ValueError(f"Unknown label '{label}'")
        self.current_label = label

    def create_editor(self, **kwargs) -> BoxEditor:
        """
        A BoxEditor reading from and writing back to this session.

        The session keeps driving it: submitting locks it and reveals the
        ground truth, moving to another image unlocks it again.
        """
        image = self.current_image
        editor = BoxEditor(
            lambda: self._annotations,
            targets=image.targets if image else (),
            available_labels=self.available_labels,
            current_label=self.current_label,
            show_ground_truth=self.show_ground_truth,
            on_annotation_complete=self.add_annotation,
            on_annotations_updated=self.replace_annotations,
            on_label_change=self.set_current_label,
            config=self.config,
            **kwargs,
        )
        if image is not None and image.id in self.results:
            editor.disabled = True
        self._editor = editor
        return editor

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def submit(self) -> RoundResult:
        """
        Score the current image and stop its timer.

        Reveals the ground truth. Submitting the same image twice replaces its
        earlier result in the cumulative score.
        """
        image = self.current_image
        if image is None:
            raise ValueError("No image to submit")

        self.timer.stop()
        result = round_score(self._annotations, image.targets)
        bonus = self.timer.time_bonus(self.config.max_time_bonus)
        final = result.final(bonus)

        previous = self.results.get(image.id)
        if previous is not None:
            self.total_score -= previous.final_score

        round_result = RoundResult(
            image_id=image.id,
            score=result,
            time_bonus=bonus,
            final_score=final,
            summary=match_summary(self._annotations, image.targets),
            feedback=score_feedback(final),
        )
        self.results[image.id] = round_result
        self.total_score += final
        self.show_ground_truth = True
        if self._editor is not None:
            self._editor.disabled = True
            self._editor.show_ground_truth = True

        logger.info(
            f"Submitted {image.id}: normalized={result.normalized}, bonus={bonus}, "
            f"final={final}, total={self.total_score}"
        )
        return round_result

    @property
    def best_score(self) -> int:
        return get_int(self.store, self.config.best_score_key)

    def finish(self) -> GameSummary:
        """End the game and record a new best score if it was beaten."""
        best = self.best_score
        new_best = self.total_score > best
        if new_best:
            self.store.set(self.config.best_score_key, str(self.total_score))
            logger.info(f"New best score: {self.total_score} (was {best})")
            best = self.total_score

        return GameSummary(
            total_score=self.total_score,
            best_score=best,
            new_best=new_best,
            images_annotated=len(self.results),
            feedback=completion_feedback(self.total_score),
        )

    def play_again(self, next_round: bool = True) -> None:
        """Start over, unlocking the next difficulty round by default."""
        self._load_round(self.round_number + 1 if next_round else self.round_number)
