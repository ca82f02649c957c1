"""
Tests for the pure geometry helpers.

Covers:
- Segment basis selection and evaluation (line / quadratic / cubic)
- Chord-based hit-testing: thresholds, anchor exclusion, zoom scaling
- Handle synthesis from neighbours, including degenerate tangents
- Drag-authored handles and angle constraint
"""
import math

import pytest

from conftest import corners
from quill.core import DEFAULT_THRESHOLDS, CurvePoint, DegenerateGeometry, SegmentKind
from quill.core.math import (constrain_angle, distance_to_segment, handles_from_drag, nearest_segment,
                             point_on_segment, project_to_chord, segment_kind, synthesize_handles, unit)


class TestSegmentEvaluation:

    def test_outgoing_only_is_quadratic(self):
        p1 = CurvePoint((10.0, 10.0), outgoing=(40.0, -10.0))
        p2 = CurvePoint((60.0, 10.0))
        assert segment_kind(p1, p2) is SegmentKind.QUADRATIC
        x, y = point_on_segment(p1, p2, 0.5)
        assert x == pytest.approx(37.5)
        assert y == pytest.approx(0.0)
        # not the straight-line midpoint
        assert (x, y) != pytest.approx((35.0, 10.0))

    def test_incoming_only_is_quadratic(self):
        p1 = CurvePoint((0.0, 0.0))
        p2 = CurvePoint((100.0, 0.0), incoming=(50.0, 100.0))
        assert segment_kind(p1, p2) is SegmentKind.QUADRATIC
        assert point_on_segment(p1, p2, 0.5) == pytest.approx((50.0, 50.0))

    def test_both_handles_are_cubic(self):
        p1 = CurvePoint((0.0, 0.0), outgoing=(0.0, 100.0))
        p2 = CurvePoint((100.0, 0.0), incoming=(100.0, 100.0))
        assert segment_kind(p1, p2) is SegmentKind.CUBIC
        assert point_on_segment(p1, p2, 0.5) == pytest.approx((50.0, 75.0))

    def test_handles_facing_away_do_not_count(self):
        # p1.incoming and p2.outgoing belong to other segments
        p1 = CurvePoint((0.0, 0.0), incoming=(-10.0, 0.0))
        p2 = CurvePoint((100.0, 0.0), outgoing=(110.0, 0.0))
        assert segment_kind(p1, p2) is SegmentKind.LINE
        assert point_on_segment(p1, p2, 0.25) == pytest.approx((25.0, 0.0))

    @pytest.mark.parametrize("t", [0.0, 1.0])
    def test_endpoints_are_anchors(self, t):
        p1 = CurvePoint((0.0, 0.0), outgoing=(10.0, 30.0))
        p2 = CurvePoint((100.0, 20.0), incoming=(90.0, -30.0))
        expected = p1.position if t == 0.0 else p2.position
        assert point_on_segment(p1, p2, t) == pytest.approx(expected)


class TestChordDistance:

    def test_projection_is_clamped(self):
        t, d = project_to_chord((-10.0, 0.0), (0.0, 0.0), (100.0, 0.0))
        assert t == 0.0
        assert d == pytest.approx(10.0)
        t, d = project_to_chord((130.0, 40.0), (0.0, 0.0), (100.0, 0.0))
        assert t == 1.0
        assert d == pytest.approx(50.0)

    def test_zero_length_chord(self):
        assert project_to_chord((3.0, 4.0), (0.0, 0.0), (0.0, 0.0)) == (0.0, pytest.approx(5.0))

    def test_curved_segment_uses_chord(self):
        p1 = CurvePoint((0.0, 0.0), outgoing=(50.0, 200.0))
        p2 = CurvePoint((100.0, 0.0))
        assert distance_to_segment((50.0, 5.0), p1, p2) == pytest.approx(5.0)


class TestNearestSegment:

    @pytest.fixture
    def line(self):
        return corners((0, 0), (100, 0))

    def test_hit_reports_index_and_t(self, line):
        assert nearest_segment(line, False, (25.0, 4.0), 1.0) == (0, pytest.approx(0.25))

    def test_miss_beyond_threshold(self, line):
        assert nearest_segment(line, False, (50.0, 10.0), 1.0) is None

    def test_anchor_exclusion_wins(self, line):
        # 3 px from the anchor and 0 px from the segment
        assert nearest_segment(line, False, (3.0, 0.0), 1.0) is None

    def test_default_exclusion_is_wider_than_threshold(self, line):
        assert DEFAULT_THRESHOLDS.segment_anchor_exclusion == 12.0
        # on the segment, but 11 px from the first anchor
        assert nearest_segment(line, False, (11.0, 0.0), 1.0) is None
        assert nearest_segment(line, False, (13.0, 0.0), 1.0) == (0, pytest.approx(0.13))

    def test_exclusion_is_independent_of_threshold(self, line):
        hit = nearest_segment(line, False, (3.0, 0.0), 1.0, threshold_px=50.0, exclusion_px=2.0)
        assert hit is not None

    def test_zoom_tracks_screen_pixels(self, line):
        # 8 screen pixels away at both zoom levels
        assert nearest_segment(line, False, (50.0, 8.0), 1.0) == (0, pytest.approx(0.5))
        assert nearest_segment(line, False, (50.0, 2.0), 4.0) == (0, pytest.approx(0.5))
        # 32 screen pixels at zoom 4
        assert nearest_segment(line, False, (50.0, 8.0), 4.0) is None

    def test_closing_segment_only_when_closed(self):
        tri = corners((0, 0), (100, 0), (100, 100))
        assert nearest_segment(tri, False, (50.0, 52.0), 1.0) is None
        assert nearest_segment(tri, True, (50.0, 52.0), 1.0) == (2, pytest.approx(0.5, abs=0.02))

    def test_closest_of_several(self):
        pts = corners((0, 0), (100, 0), (100, 12))
        assert nearest_segment(pts, False, (97.0, 6.0), 1.0, exclusion_px=2.0)[0] == 1

    def test_rejects_non_positive_zoom(self, line):
        with pytest.raises(ValueError):
            nearest_segment(line, False, (50.0, 0.0), 0.0)


class TestSynthesizeHandles:

    def test_interior_follows_neighbour_tangent(self):
        prev, cur, nxt = corners((0, 0), (10, 0), (30, 0))
        incoming, outgoing = synthesize_handles(prev, cur, nxt, 0.3)
        assert incoming == pytest.approx((7.0, 0.0))
        assert outgoing == pytest.approx((16.0, 0.0))

    def test_endpoints_get_one_handle(self):
        a, b = corners((0, 0), (0, 10))
        assert synthesize_handles(None, a, b, 0.5) == (None, pytest.approx((0.0, 5.0)))
        assert synthesize_handles(a, b, None, 0.5) == (pytest.approx((0.0, 5.0)), None)

    def test_coincident_endpoint_keeps_one_handle(self):
        a, b = corners((0, 0), (0, 0))
        assert synthesize_handles(None, a, b, 0.3) == (None, (0.0, 0.0))
        assert synthesize_handles(a, b, None, 0.3) == ((0.0, 0.0), None)

    def test_isolated_point(self):
        (a,) = corners((5, 5))
        assert synthesize_handles(None, a, None, 0.3) == (None, None)

    def test_coincident_neighbours_collapse(self):
        prev, cur, nxt = corners((0, 0), (10, 0), (0, 0))
        assert synthesize_handles(prev, cur, nxt, 0.3) == ((10.0, 0.0), (10.0, 0.0))

    def test_smoothing_is_clamped(self):
        prev, cur, nxt = corners((0, 0), (10, 0), (20, 0))
        assert synthesize_handles(prev, cur, nxt, 5.0) == (pytest.approx((0.0, 0.0)), pytest.approx((20.0, 0.0)))

    def test_unit_of_zero_vector(self):
        with pytest.raises(DegenerateGeometry):
            unit((0.0, 0.0))


class TestDragHandles:

    def test_symmetric(self):
        assert handles_from_drag((10.0, 10.0), (5.0, -5.0)) == ((5.0, 15.0), (15.0, 5.0))

    def test_asymmetric_has_no_incoming(self):
        assert handles_from_drag((10.0, 10.0), (5.0, -5.0), asymmetric=True) == (None, (15.0, 5.0))

    def test_constrain_angle_snaps_to_45(self):
        x, y = constrain_angle((10.0, 1.0))
        assert y == pytest.approx(0.0, abs=1e-9)
        assert x == pytest.approx(math.hypot(10.0, 1.0))
        x, y = constrain_angle((10.0, 9.0))
        assert x == pytest.approx(y)
