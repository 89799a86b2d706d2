"""
Tests for rectangle overlap scoring and round aggregation.
"""

import pytest

from src.core.geometry import ScoringPoint
from src.core.scoring import (
    MatchSummary,
    annotation_set_score,
    final_round_score,
    match_summary,
    rect_overlap_score,
    round_half_up,
    round_score,
    score,
    score_feedback,
)
from tests.conftest import rect, target


class TestRectOverlapScore:
    def test_identical_rectangles(self):
        """Identical rectangles overlap fully"""
        assert rect_overlap_score(rect(0, 0, 100, 100), target(0, 0, 100, 100)) == 1.0

    def test_far_apart_is_zero(self):
        """Centers more than 300 apart score nothing"""
        assert rect_overlap_score(rect(500, 500, 600, 600), target(0, 0, 100, 100)) == 0.0

    def test_iou_is_boosted(self):
        """Overlapping rectangles get IoU * 1.3"""
        # intersection 90x90 = 8100, union 10000 + 10000 - 8100 = 11900
        expected = 8100 / 11900 * 1.3
        assert rect_overlap_score(rect(10, 10, 110, 110), target(0, 0, 100, 100)) == pytest.approx(expected)

    def test_boost_is_capped(self):
        """A contained box with IoU above 1/1.3 caps at 1.0"""
        # 95x95 inside 100x100: IoU 0.9025
        assert rect_overlap_score(rect(0, 0, 95, 95), target(0, 0, 100, 100)) == 1.0

    def test_tiny_overlap_gets_floor(self):
        """Any overlap is worth at least 0.2"""
        assert rect_overlap_score(rect(99, 99, 199, 199), target(0, 0, 100, 100)) == pytest.approx(0.2)

    def test_near_center_without_overlap(self):
        """Touching-but-disjoint boxes with close centers get 0.3"""
        assert rect_overlap_score(rect(105, 0, 205, 100), target(0, 0, 100, 100)) == pytest.approx(0.3)

    def test_close_edges_only(self):
        """Close edges with centers beyond 150 get the 0.1 proximity credit"""
        # gap 10 < 0.2 * 200, center distance 210
        assert rect_overlap_score(rect(210, 0, 410, 200), target(0, 0, 200, 200)) == pytest.approx(0.1)

    def test_disjoint_and_not_close(self):
        """Disjoint boxes with far edges and centers beyond 150 score 0"""
        assert rect_overlap_score(rect(0, 170, 100, 270), target(0, 0, 100, 100)) == 0.0

    def test_reversed_corners_are_normalized(self):
        """Corner order does not matter"""
        assert rect_overlap_score(rect(100, 100, 0, 0), target(0, 0, 100, 100)) == 1.0

    @pytest.mark.parametrize(
        "a, b",
        [
            ((0, 0, 100, 100), (10, 10, 110, 110)),
            ((0, 0, 100, 100), (105, 0, 205, 100)),
            ((0, 0, 200, 200), (210, 0, 410, 200)),
            ((0, 0, 50, 300), (20, 40, 260, 90)),
            ((0, 0, 100, 100), (99, 99, 199, 199)),
        ],
    )
    def test_symmetric(self, a, b):
        """Swapping arguments never changes the result"""
        assert rect_overlap_score(rect(*a), rect(*b)) == rect_overlap_score(rect(*b), rect(*a))

    def test_malformed_input_is_zero(self):
        """Fewer than two corners or non-finite values degrade to 0"""
        one_corner = rect(0, 0, 100, 100)
        one_corner.coordinates = [ScoringPoint(0, 0)]
        assert rect_overlap_score(one_corner, target(0, 0, 100, 100)) == 0.0
        assert rect_overlap_score(rect(0, 0, float("nan"), 100), target(0, 0, 100, 100)) == 0.0
        assert rect_overlap_score(None, target(0, 0, 100, 100)) == 0.0

    def test_accepts_raw_corner_sequences(self):
        corners = [ScoringPoint(0, 0), ScoringPoint(100, 100)]
        assert rect_overlap_score(corners, corners) == 1.0


class TestScore:
    def test_identical_same_label(self):
        """Matching label and corners score 100"""
        assert score(rect(0, 0, 100, 100), target(0, 0, 100, 100)) == 100

    def test_distant_same_label(self):
        """Center distance 707 is past the cutoff"""
        assert score(rect(500, 500, 600, 600), target(0, 0, 100, 100)) == 0

    def test_offset_box(self):
        """10px offset on a 100px box: IoU 0.68, boosted to 0.885"""
        assert score(rect(10, 10, 110, 110), target(0, 0, 100, 100)) == 88

    def test_label_mismatch(self):
        """Identical geometry with a different label scores 0"""
        assert score(rect(0, 0, 100, 100, label="Kelp"), target(0, 0, 100, 100)) == 0

    def test_incomplete_user_rectangle(self):
        assert score(rect(0, 0, 100, 100, complete=False), target(0, 0, 100, 100)) == 0

    def test_rounds_half_up(self):
        assert round_half_up(82.5) == 83
        assert round_half_up(79.95) == 80
        assert round_half_up(0.4) == 0


class TestRoundScore:
    def test_empty_targets(self):
        """No targets: nothing to average, normalized is 0"""
        result = round_score([rect(0, 0, 100, 100)], [])
        assert result.per_target == []
        assert result.normalized == 0
        assert result.total == 0

    def test_two_targets_one_matched(self):
        """One target at 80 and one missed average to 40"""
        targets = [target(0, 0, 100, 100, id="a"), target(1000, 1000, 1100, 1100, id="b")]
        # IoU 0.615 * 1.3 = 0.7995
        users = [rect(0, 0, 100, 61.5)]

        result = round_score(users, targets)

        assert [item.score for item in result.per_target] == [80, 0]
        assert result.total == 80
        assert result.normalized == 40

    def test_user_rectangle_reused_across_targets(self):
        """One rectangle may be the best match for several targets"""
        targets = [target(0, 0, 100, 100, id="a"), target(0, 0, 100, 100, id="b")]
        user = rect(0, 0, 100, 100)

        result = round_score([user], targets)

        assert [item.score for item in result.per_target] == [100, 100]
        assert all(item.matched_annotation_id == user.id for item in result.per_target)

    def test_best_match_wins(self):
        targets = [target(0, 0, 100, 100)]
        users = [rect(99, 99, 199, 199), rect(0, 0, 100, 100), rect(10, 10, 110, 110)]

        result = round_score(users, targets)

        assert result.per_target[0].score == 100
        assert result.per_target[0].matched_annotation_id == users[1].id

    def test_found_requires_score_above_one(self):
        targets = [target(0, 0, 100, 100, id="a"), target(0, 0, 100, 100, label="Kelp", id="b")]

        result = round_score([rect(105, 0, 205, 100)], targets)

        assert result.per_target[0].score == 30
        assert result.per_target[0].found is True
        assert result.per_target[1].score == 0
        assert result.per_target[1].found is False
        assert result.found_count == 1

    def test_final_adds_time_bonus(self):
        assert final_round_score(88, 12) == 100
        assert round_score([rect(0, 0, 100, 100)], [target(0, 0, 100, 100)]).final(25) == 125


class TestMatchSummary:
    def test_all_found(self):
        summary = match_summary([rect(0, 0, 100, 100)], [target(0, 0, 100, 100)])
        assert summary.all_found
        assert summary.message == "Great job! You found all the targets!"

    def test_some_missed(self):
        targets = [target(0, 0, 100, 100, id="a"), target(1000, 1000, 1100, 1100, id="b")]
        summary = match_summary([rect(0, 0, 100, 100)], targets)
        assert summary.missed_count == 1
        assert summary.message == "You found 1 target, but missed 1 target!"

    def test_none_found(self):
        targets = [target(0, 0, 100, 100, id="a"), target(1000, 1000, 1100, 1100, id="b")]
        assert match_summary([], targets).message == "You missed all 2 targets!"

    def test_nothing_to_find(self):
        assert not MatchSummary(found_count=0, total=0).all_found
        assert match_summary([], []).message == "There is nothing to find in this image."


class TestAnnotationSetScore:
    def test_ignores_annotations_without_candidates(self):
        """Annotations with no same-label target do not drag the average down"""
        targets = [target(0, 0, 100, 100)]
        annotations = [rect(0, 0, 100, 100), rect(0, 0, 100, 100, label="Coral")]
        assert annotation_set_score(annotations, targets) == 100

    def test_averages_best_scores(self):
        targets = [target(0, 0, 100, 100, id="a"), target(500, 500, 600, 600, id="b")]
        annotations = [rect(0, 0, 100, 100), rect(99, 99, 199, 199)]
        # 100 and 20 (floor), each against its best target
        assert annotation_set_score(annotations, targets) == 60

    def test_no_annotations(self):
        assert annotation_set_score([], [target(0, 0, 100, 100)]) == 0


class TestScoreFeedback:
    @pytest.mark.parametrize(
        "final, message",
        [
            (125, "Excellent work! You're an annotation expert!"),
            (120, "Excellent work! You're an annotation expert!"),
            (80, "Good job! Keep practicing to improve!"),
            (79, "Nice try! Practice makes perfect!"),
            (0, "Nice try! Practice makes perfect!"),
        ],
    )
    def test_tiers(self, final, message):
        assert score_feedback(final) == message
