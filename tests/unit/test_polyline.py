"""
Unit tests for polyline geometry helpers.
"""

import pytest
from models.drawing import BaseClass, DrawingObject, ObjectType, Point, Rect, NO_OBJECT
from services.polyline import (
    angle_from_points, segment_count, hit_segment, project_onto_segment,
    insert_corner, split_polyline, poly_frame,
)


SQUARE = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]


class TestGeometry:

    @pytest.mark.parametrize("end,angle", [
        (Point(10, 0), 0),
        (Point(0, 10), 90),
        (Point(-10, 0), 180),
        (Point(0, -10), 270),
    ])
    def test_angle_from_points(self, end, angle):
        assert angle_from_points(Point(0, 0), end) == pytest.approx(angle)

    def test_segment_count(self):
        assert segment_count(SQUARE, False) == 3
        assert segment_count(SQUARE, True) == 4
        assert segment_count([Point(0, 0)], True) == 0

    def test_projection_is_clamped(self):
        assert project_onto_segment(Point(150, 20), Point(0, 0), Point(100, 0)) == Point(100, 0)
        assert project_onto_segment(Point(40, 20), Point(0, 0), Point(100, 0)) == Point(40, 0)

    def test_poly_frame(self):
        assert poly_frame(SQUARE) == Rect(0, 0, 100, 100)
        assert poly_frame([]) == Rect()


class TestHitSegment:

    def test_nearest_segment(self):
        assert hit_segment(SQUARE, True, Point(50, 3)) == 0
        assert hit_segment(SQUARE, True, Point(98, 50)) == 1
        assert hit_segment(SQUARE, True, Point(2, 50)) == 3

    def test_closing_segment_needs_closed(self):
        assert hit_segment(SQUARE, False, Point(2, 50)) != 3

    def test_tolerance(self):
        assert hit_segment(SQUARE, True, Point(50, 40), tolerance=5) == NO_OBJECT

    def test_no_segments(self):
        assert hit_segment([Point(0, 0)], False, Point(0, 0)) == NO_OBJECT


class TestInsertCorner:

    def test_inserts_projected_vertex(self):
        wall = DrawingObject(
            id=1, base_class=BaseClass.LINE, object_type=ObjectType.WALL,
            points=[Point(0, 0), Point(100, 0)],
        )
        assert insert_corner(wall, Point(40, 5)) == 1
        assert wall.points == [Point(0, 0), Point(40, 0), Point(100, 0)]
        assert wall.frame == Rect(0, 0, 100, 0)

    def test_miss(self):
        wall = DrawingObject(id=1, base_class=BaseClass.LINE, points=[Point(0, 0), Point(100, 0)])
        assert insert_corner(wall, Point(50, 50), tolerance=10) == NO_OBJECT
        assert len(wall.points) == 2


class TestSplitPolyline:

    def test_open_polyline_splits_in_two(self):
        points = [Point(0, 0), Point(100, 0), Point(100, 100)]
        first, second = split_polyline(points, False, 1, Point(95, 40))
        assert first == [Point(0, 0), Point(100, 0), Point(100, 40)]
        assert second == [Point(100, 40), Point(100, 100)]

    def test_open_polyline_default_midpoint(self):
        first, second = split_polyline([Point(0, 0), Point(100, 0)], False, 0)
        assert first[-1] == Point(50, 0)
        assert second[0] == Point(50, 0)

    def test_closed_polyline_opens_at_segment(self):
        pieces = split_polyline(SQUARE, True, 0)
        assert pieces == [[Point(100, 0), Point(100, 100), Point(0, 100), Point(0, 0)]]

    def test_closed_polyline_closing_segment(self):
        pieces = split_polyline(SQUARE, True, 3)
        assert pieces == [SQUARE]

    def test_invalid_segment(self):
        assert split_polyline(SQUARE, False, 5) == [SQUARE]
