"""
Tests for the curve model: path conversion, bounds, normalization and the
structural edits (insert, remove, move, toggle).
"""
from dataclasses import replace

import pytest

from conftest import corners, make_curve
from quill.core import (Curve, CurvePoint, InvalidPointIndex, InvalidSegmentIndex, MinimumPointsViolation,
                        insert_point, move_point, normalize, recompute_bounds, remove_point,
                        to_path, to_svg_path, toggle_point_type)
from quill.core.math import point_on_segment


CURVES = [
    make_curve((0, 0), (50, 0), (50, 50)),
    make_curve((-20, 5), (30, -40), (12, 9), closed=True),
    normalize(Curve(x=7.0, y=-3.0, points=(
        CurvePoint((10.0, 10.0), outgoing=(40.0, -10.0)),
        CurvePoint((60.0, 10.0), incoming=(70.0, 80.0), outgoing=(50.0, -60.0)),
        CurvePoint((-5.0, 30.0)),
    ))),
    make_curve((3, 3), (3, 3)),
]


class TestToPath:

    def test_open_corner_curve_is_straight_lines(self):
        ops = to_path(make_curve((0, 0), (50, 0), (50, 50)))
        assert ops == [("M", (0.0, 0.0)), ("L", (50.0, 0.0)), ("L", (50.0, 50.0))]

    def test_closed_curve_emits_closing_segment(self):
        ops = to_path(make_curve((0, 0), (50, 0), (50, 50), closed=True))
        assert ops[-2] == ("L", (0.0, 0.0))
        assert ops[-1] == ("Z", ())

    def test_closing_segment_uses_facing_handles(self):
        curve = normalize(Curve(points=(
            CurvePoint((0.0, 0.0), incoming=(0.0, 20.0)),
            CurvePoint((50.0, 0.0)),
            CurvePoint((50.0, 50.0), outgoing=(20.0, 60.0)),
        ), is_closed=True))
        op, data = to_path(curve)[3]
        assert op == "C"
        assert data == ((20.0, 60.0), (0.0, 20.0), (0.0, 0.0))

    def test_quadratic_op_takes_the_single_handle(self):
        curve = Curve(points=(CurvePoint((0.0, 0.0)), CurvePoint((10.0, 0.0), incoming=(5.0, 5.0))))
        assert to_path(curve)[1] == ("Q", ((5.0, 5.0), (10.0, 0.0)))

    def test_empty_curve(self):
        assert to_path(Curve()) == []

    def test_svg(self):
        curve = make_curve((0, 0), (50, 0), (50, 50), closed=True)
        assert to_svg_path(to_path(curve)) == "M 0 0 L 50 0 L 50 50 L 0 0 Z"

    def test_svg_rejects_unknown_ops(self):
        with pytest.raises(ValueError):
            to_svg_path([("X", ())])


class TestBoundsAndNormalize:

    @pytest.mark.parametrize("curve", CURVES)
    def test_normalize_is_idempotent(self, curve):
        once = normalize(curve)
        twice = normalize(once)
        assert twice.points == once.points
        assert (twice.x, twice.y, twice.w, twice.h) == (once.x, once.y, once.w, once.h)

    @pytest.mark.parametrize("curve", CURVES)
    def test_every_coordinate_is_inside_the_box(self, curve):
        curve = normalize(curve)
        for p in curve.points:
            for x, y in p.coords():
                assert 0.0 <= x <= curve.w
                assert 0.0 <= y <= curve.h

    def test_handles_extend_the_bounds(self):
        pts = (CurvePoint((0.0, 0.0), outgoing=(10.0, -30.0)), CurvePoint((20.0, 0.0)))
        assert recompute_bounds(pts) == (0.0, -30.0, 20.0, 30.0)

    def test_degenerate_bounds_are_floored(self):
        assert recompute_bounds(corners((4, 4), (4, 4))) == (4.0, 4.0, 1.0, 1.0)
        assert recompute_bounds(()) == (0.0, 0.0, 1.0, 1.0)

    def test_translation_moves_into_origin(self):
        curve = normalize(Curve(x=100.0, y=100.0, points=corners((10, 20), (30, 5))))
        assert (curve.x, curve.y) == (110.0, 105.0)
        assert curve.points[0].position == (0.0, 15.0)
        assert curve.page_points()[1].position == (130.0, 105.0)

    def test_hover_point_follows_the_shift(self):
        curve = normalize(Curve(points=corners((10, 10), (30, 10)), hover_point=(20.0, 10.0)))
        assert curve.hover_point == (10.0, 0.0)


class TestInsertPoint:

    def test_insert_at_segment_midpoint(self):
        curve = make_curve((0, 0), (100, 0))
        mid = point_on_segment(*curve.segment(0), 0.5)
        updated = insert_point(curve, 0, CurvePoint(mid))
        assert len(updated.points) == 3
        assert updated.points[1].position == (50.0, 0.0)
        assert all(p.is_corner for p in updated.points)

    def test_insert_on_closing_segment_appends(self):
        curve = make_curve((0, 0), (100, 0), (100, 100), closed=True)
        updated = insert_point(curve, 2, CurvePoint((50.0, 50.0)))
        assert updated.points[-1].position == (50.0, 50.0)

    def test_invalid_segment_index(self):
        curve = make_curve((0, 0), (100, 0))
        with pytest.raises(InvalidSegmentIndex) as err:
            insert_point(curve, 1, CurvePoint((1.0, 1.0)))
        assert err.value.segment_count == 1
        assert isinstance(err.value, IndexError)

    def test_input_is_not_mutated(self):
        curve = make_curve((0, 0), (100, 0))
        insert_point(curve, 0, CurvePoint((50.0, 0.0)))
        assert len(curve.points) == 2


class TestRemovePoint:

    def test_two_points_is_the_minimum(self):
        curve = make_curve((0, 0), (100, 0))
        with pytest.raises(MinimumPointsViolation):
            remove_point(curve, 0)
        assert len(curve.points) == 2

    @pytest.mark.parametrize("index", [0, 1, 2, 3])
    def test_never_below_two(self, index):
        curve = make_curve((0, 0), (10, 0), (10, 10), (0, 10))
        while True:
            try:
                curve = remove_point(curve, min(index, len(curve.points) - 1))
            except MinimumPointsViolation:
                break
        assert len(curve.points) == 2

    def test_closed_curve_reopens_below_three(self):
        curve = make_curve((0, 0), (100, 0), (100, 100), closed=True)
        assert not remove_point(curve, 1).is_closed

    def test_closed_curve_stays_closed(self):
        curve = make_curve((0, 0), (100, 0), (100, 100), (0, 100), closed=True)
        assert remove_point(curve, 1).is_closed

    def test_bounds_shrink(self):
        curve = make_curve((0, 0), (100, 0), (100, 100))
        updated = remove_point(curve, 2)
        assert (updated.w, updated.h) == (100.0, 1.0)

    def test_invalid_index(self):
        with pytest.raises(InvalidPointIndex):
            remove_point(make_curve((0, 0), (1, 0), (2, 0)), 5)


class TestPointEdits:

    def test_move_point_carries_handles(self):
        curve = normalize(Curve(points=(
            CurvePoint((0.0, 0.0)),
            CurvePoint((50.0, 0.0), incoming=(40.0, 0.0), outgoing=(60.0, 0.0)),
        )))
        moved = move_point(curve, 1, (50.0, 20.0))
        p = moved.points[1]
        assert p.incoming == (40.0, 20.0)
        assert p.outgoing == (60.0, 20.0)

    def test_toggle_point_type(self):
        curve = make_curve((0, 0), (50, 0), (100, 0))
        smooth = toggle_point_type(curve, 1, 0.3)
        assert smooth.points[1].incoming == pytest.approx((35.0, 0.0))
        assert smooth.points[1].outgoing == pytest.approx((65.0, 0.0))
        assert toggle_point_type(smooth, 1, 0.3).points[1].is_corner

    def test_toggle_on_closed_curve_wraps_neighbours(self):
        curve = make_curve((0, 0), (100, 0), (100, 100), closed=True)
        assert not toggle_point_type(curve, 0, 0.3).points[0].is_corner

    def test_segment_count(self):
        assert make_curve((0, 0)).segment_count == 0
        assert make_curve((0, 0), (1, 0), closed=True).segment_count == 1
        assert make_curve((0, 0), (1, 0), (1, 1), closed=True).segment_count == 3


class TestSerialization:

    def test_dict_round_trip(self):
        curve = replace(CURVES[2], id="curve:abc", color="#ff0000", fill=True)
        restored = Curve.from_dict(curve.to_dict())
        assert restored.points == curve.points
        assert (restored.x, restored.y) == (curve.x, curve.y)
        assert restored.color == "#ff0000"
        assert restored.fill

    def test_stored_bounds_are_recomputed(self):
        data = make_curve((0, 0), (10, 20)).to_dict()
        data["w"] = 999
        assert Curve.from_dict(data).w == 10.0

    def test_hover_is_not_serialized(self):
        data = replace(make_curve((0, 0), (10, 0)), hover_point=(5.0, 0.0)).to_dict()
        assert "hover_point" not in data
