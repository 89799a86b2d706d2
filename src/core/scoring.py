"""
Annotation scoring.

Matches the player's rectangles against the ground-truth rectangles of an
image. Plain IoU is too harsh for a timed casual game, so the overlap score
is loosened: any real overlap is boosted and floored, and near misses earn a
little proximity credit. A tight box lands around 95, a loose one around 60.

Nothing in this module raises: malformed rectangles, mismatched types and
empty inputs all score 0.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from src.core.geometry import Bounds, bounds_of, center_distance, edge_gaps, iou

# Centers further apart than this are never related, whatever the overlap
CENTER_DISTANCE_CUTOFF = 300.0
LENIENCY_BOOST = 1.3
MIN_OVERLAP_SCORE = 0.2
# Near-miss credit (no overlap, centers within the cutoff)
PROXIMITY_RATIO = 0.2
PROXIMITY_SCORE = 0.1
NEAR_CENTER_SCORE = 0.3
# A target counts as found only above this score (0 and 1 are "missed")
FOUND_THRESHOLD = 1


def round_half_up(value: float) -> int:
    """Round .5 up, the way the game UI rounds (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _bounds(shape: Any) -> Bounds | None:
    corners = getattr(shape, "coordinates", shape)
    try:
        return bounds_of(corners)
    except TypeError:
        return None


def rect_overlap_score(a: Any, b: Any) -> float:
    """
    Lenient overlap between two rectangles, in [0, 1].

    Args:
        a: Annotation (anything with `coordinates`) or a two-corner sequence
        b: Annotation (anything with `coordinates`) or a two-corner sequence

    Returns:
        0 when the centers are more than 300 units apart. Otherwise the IoU
        boosted by 30% and floored at 0.2 when the rectangles overlap, or a
        proximity credit (0.1 for close edges, at least 0.3 for centers within
        150 units) when they do not. Symmetric in its arguments.
    """
    r1 = _bounds(a)
    r2 = _bounds(b)
    if r1 is None or r2 is None:
        return 0.0

    distance = center_distance(r1, r2)
    if distance > CENTER_DISTANCE_CUTOFF:
        return 0.0

    overlap = iou(r1, r2)
    score = 0.0

    if overlap > 0:
        score = max(overlap * LENIENCY_BOOST, MIN_OVERLAP_SCORE)
    else:
        avg_size = (math.sqrt(r1.area) + math.sqrt(r2.area)) / 2
        proximity = PROXIMITY_RATIO * avg_size
        x_gap, y_gap = edge_gaps(r1, r2)

        if x_gap < proximity and y_gap < proximity:
            score = PROXIMITY_SCORE
        # Applied after the edge check so it can only raise the score
        if distance <= CENTER_DISTANCE_CUTOFF / 2:
            score = max(score, NEAR_CENTER_SCORE)

    return min(max(score, 0.0), 1.0)


def score(user: Any, target: Any) -> int:
    """
    Score a user rectangle against one target, 0-100.

    Labels must match exactly; geometry is only compared between same-label
    pairs. Incomplete user rectangles score 0.
    """
    if getattr(user, "type", None) != getattr(target, "type", None):
        return 0
    if getattr(user, "label", None) != getattr(target, "label", None):
        return 0
    if not getattr(user, "is_complete", True):
        return 0

    return round_half_up(100 * rect_overlap_score(user, target))


@dataclass
class TargetScore:
    """Best-match result for one ground-truth rectangle."""

    target_id: str
    label: str
    score: int
    found: bool
    matched_annotation_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetId": self.target_id,
            "label": self.label,
            "score": self.score,
            "found": self.found,
            "matchedAnnotationId": self.matched_annotation_id,
        }


@dataclass
class RoundScore:
    """Per-target breakdown plus aggregates for one image."""

    per_target: list[TargetScore] = field(default_factory=list)
    total: int = 0
    normalized: int = 0

    @property
    def found_count(self) -> int:
        return sum(1 for item in self.per_target if item.found)

    def final(self, time_bonus: int | float = 0) -> int:
        return final_round_score(self.normalized, time_bonus)

    def to_dict(self) -> dict[str, Any]:
        return {
            "perTarget": [item.to_dict() for item in self.per_target],
            "total": self.total,
            "normalized": self.normalized,
        }


def best_match(users: Iterable[Any], target: Any) -> tuple[int, str | None]:
    """Highest score any same-label user rectangle achieves against a target."""
    best_score = 0
    best_id = None
    label = getattr(target, "label", None)

    for user in users:
        if getattr(user, "label", None) != label:
            continue
        candidate = score(user, target)
        if candidate > best_score:
            best_score = candidate
            best_id = getattr(user, "id", None)

    return best_score, best_id


def round_score(users: Sequence[Any], targets: Sequence[Any]) -> RoundScore:
    """
    Score a full set of user rectangles against an image's targets.

    Each target takes its best same-label match. A user rectangle may be the
    best match for several targets; there is no one-to-one assignment.
    """
    result = RoundScore()
    if not targets:
        return result

    users = list(users or [])
    for target in targets:
        best_score, best_id = best_match(users, target)
        result.per_target.append(
            TargetScore(
                target_id=getattr(target, "id", ""),
                label=getattr(target, "label", ""),
                score=best_score,
                found=best_score > FOUND_THRESHOLD,
                matched_annotation_id=best_id,
            )
        )

    result.total = sum(item.score for item in result.per_target)
    result.normalized = round_half_up(result.total / len(targets))

    logger.debug(
        f"Round score: {result.found_count}/{len(targets)} found, "
        f"total={result.total}, normalized={result.normalized}"
    )
    return result


def final_round_score(normalized: int | float, time_bonus: int | float) -> int:
    return round_half_up(normalized + time_bonus)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


@dataclass
class MatchSummary:
    """Submit-time feedback on how many targets were found."""

    found_count: int
    total: int

    @property
    def missed_count(self) -> int:
        return self.total - self.found_count

    @property
    def all_found(self) -> bool:
        return self.total > 0 and self.found_count == self.total

    @property
    def message(self) -> str:
        if self.total == 0:
            return "There is nothing to find in this image."
        if self.all_found:
            return "Great job! You found all the targets!"
        if self.found_count > 0:
            return (
                f"You found {_plural(self.found_count, 'target')}, "
                f"but missed {_plural(self.missed_count, 'target')}!"
            )
        return f"You missed all {_plural(self.total, 'target')}!"


def match_summary(users: Sequence[Any], targets: Sequence[Any]) -> MatchSummary:
    result = round_score(users, targets)
    return MatchSummary(found_count=result.found_count, total=len(targets))


def annotation_set_score(annotations: Sequence[Any], targets: Sequence[Any]) -> int:
    """
    Average best score of annotations that have at least one same-label target.

    Used when authoring ground truth: annotations with no candidate target are
    left out of the average instead of dragging it down.
    """
    scores = []
    for annotation in annotations:
        candidates = [t for t in targets if getattr(t, "label", None) == getattr(annotation, "label", None)]
        if not candidates:
            continue
        scores.append(max(score(annotation, t) for t in candidates))

    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def score_feedback(final_score: int) -> str:
    """Encouragement line shown under a round's final score."""
    if final_score >= 120:
        return "Excellent work! You're an annotation expert!"
    if final_score >= 80:
        return "Good job! Keep practicing to improve!"
    return "Nice try! Practice makes perfect!"
