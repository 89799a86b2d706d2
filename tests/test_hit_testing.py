"""
Tests for editor hit testing in display space.
"""

from src.core.annotations import UserAnnotation
from src.core.geometry import Bounds, DisplayPoint, ScoringPoint
from src.core.hit_testing import (
    delete_button_bounds,
    find_hit,
    handle_positions,
    label_tag_bounds,
)

HIT_ARGS = dict(handle_radius=8, delete_button_size=20, font_scale=0.45, thickness=1, padding=3)


def shown(x1, y1, x2, y2, label="Whale", complete=True):
    """Annotation whose display projection equals its coordinates."""
    return UserAnnotation(
        label=label,
        coordinates=[ScoringPoint(x1, y1), ScoringPoint(x2, y2)],
        display_coordinates=[DisplayPoint(x1, y1), DisplayPoint(x2, y2)],
        is_complete=complete,
    )


class TestHandles:
    def test_positions_follow_stored_corner_order(self):
        positions = handle_positions([DisplayPoint(10, 20), DisplayPoint(110, 220)])
        assert positions == {
            "nw": DisplayPoint(10, 20),
            "ne": DisplayPoint(110, 20),
            "sw": DisplayPoint(10, 220),
            "se": DisplayPoint(110, 220),
        }

    def test_handle_tolerance(self):
        annotation = shown(100, 100, 300, 250)
        assert find_hit([annotation], DisplayPoint(307, 257), **HIT_ARGS).handle == "se"
        assert find_hit([annotation], DisplayPoint(309, 259), **HIT_ARGS) is None


class TestDecorations:
    def test_delete_button_centered_on_top_right(self):
        button = delete_button_bounds(Bounds(left=100, right=300, top=100, bottom=250), 20)
        assert button == Bounds(left=290, right=310, top=90, bottom=110)

    def test_label_tag_above_top_left(self):
        tag = label_tag_bounds(Bounds(left=100, right=300, top=100, bottom=250), "Whale", 0.45, 1, 3)
        assert tag.left == 100
        assert tag.bottom == 100
        assert tag.width > 0 and tag.height > 0

    def test_label_tag_moves_below_at_top_edge(self):
        """A rectangle touching the top of the canvas gets its tag below"""
        tag = label_tag_bounds(Bounds(left=100, right=300, top=0, bottom=250), "Whale", 0.45, 1, 3)
        assert tag.right == 300
        assert tag.top == 250

    def test_label_tag_stays_inside_right_edge(self):
        """A tag that would run past the canvas is slid back inside"""
        bounds = Bounds(left=580, right=600, top=100, bottom=150)
        tag = label_tag_bounds(bounds, "Great White Shark", 0.45, 1, 3, canvas_width=600)
        assert tag.right == 600
        assert tag.left < 580
        assert tag.bottom == 100

    def test_shifted_label_tag_is_hittable(self):
        annotation = shown(580, 100, 600, 150, label="Great White Shark")
        hit = find_hit([annotation], DisplayPoint(500, 95), canvas_width=600, **HIT_ARGS)
        assert hit.kind == "label"
        assert find_hit([annotation], DisplayPoint(500, 95), **HIT_ARGS) is None

    def test_longer_label_wider_tag(self):
        bounds = Bounds(left=100, right=300, top=100, bottom=250)
        short = label_tag_bounds(bounds, "Fish", 0.45, 1, 3)
        long = label_tag_bounds(bounds, "Great White Shark", 0.45, 1, 3)
        assert long.width > short.width


class TestFindHit:
    def test_priority_order(self):
        annotation = shown(100, 100, 300, 250)
        assert find_hit([annotation], DisplayPoint(105, 95), **HIT_ARGS).kind == "label"
        assert find_hit([annotation], DisplayPoint(300, 100), **HIT_ARGS).kind == "delete"
        assert find_hit([annotation], DisplayPoint(100, 250), **HIT_ARGS).kind == "handle"
        assert find_hit([annotation], DisplayPoint(200, 200), **HIT_ARGS).kind == "body"
        assert find_hit([annotation], DisplayPoint(600, 600), **HIT_ARGS) is None

    def test_skips_incomplete_and_unprojected(self):
        incomplete = shown(100, 100, 300, 250, complete=False)
        unprojected = shown(100, 100, 300, 250)
        unprojected.display_coordinates = None
        assert find_hit([incomplete, unprojected], DisplayPoint(200, 200), **HIT_ARGS) is None

    def test_topmost_first(self):
        below = shown(100, 100, 300, 250)
        above = shown(150, 150, 400, 400)
        assert find_hit([below, above], DisplayPoint(200, 200), **HIT_ARGS).annotation_id == above.id
