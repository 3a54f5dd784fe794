# -*- coding: utf-8 -*-
"""
Tests for the value types behind the geometric codecs.
"""

import pytest

from ghjson.geometry import (
    Arc, Circle, Interval, Line, Plane, Point3d, Rectangle3d, Vector3d,
)


class TestPointsAndVectors:
    """Arithmetic and identity."""

    def test_points_and_vectors_are_distinct(self):
        assert Point3d(1, 2, 3) != Vector3d(1, 2, 3)

    def test_difference_is_a_vector(self):
        assert Point3d(3, 4, 0) - Point3d(0, 0, 0) == Vector3d(3, 4, 0)
        assert (Point3d(3, 4, 0) - Point3d()).length == 5.0

    def test_unitize_zero_vector(self):
        with pytest.raises(ValueError):
            Vector3d().unitized()


class TestShapes:
    """Derived properties."""

    def test_line(self):
        line = Line(Point3d(0, 0, 0), Point3d(0, 3, 4))
        assert line.length == 5.0
        assert line.direction == Vector3d(0, 3, 4)

    def test_interval_may_decrease(self):
        domain = Interval(5, -1)
        assert (domain.min, domain.max, domain.length) == (-1, 5, -6)

    def test_plane_from_frame_is_orthonormal(self):
        plane = Plane.from_frame(Point3d(), Vector3d(2, 0, 0), Vector3d(1, 5, 0))
        assert tuple(plane.y_axis) == pytest.approx((0.0, 1.0, 0.0))
        assert tuple(plane.z_axis) == pytest.approx((0.0, 0.0, 1.0))

    def test_circle_from_center_normal_start(self):
        circle = Circle.from_center_normal_start(
            Point3d(1, 1, 0), Vector3d(0, 0, 2), 3.0, Point3d(1, 4, 0))
        assert tuple(circle.start_point) == pytest.approx((1.0, 4.0, 0.0))
        assert tuple(circle.normal) == pytest.approx((0.0, 0.0, 1.0))

    def test_collinear_arc(self):
        with pytest.raises(ValueError):
            Arc(Point3d(0, 0, 0), Point3d(1, 0, 0), Point3d(2, 0, 0)).center

    def test_rectangle_center(self):
        rect = Rectangle3d(Plane.world_xy(), Interval(0, 4), Interval(0, 2))
        assert rect.center == Point3d(2, 1, 0)
        assert (rect.width, rect.height) == (4, 2)

    def test_rectangle_is_stored_centred(self):
        rect = Rectangle3d(Plane.world_xy(), Interval(0, 4), Interval(0, 2))
        assert rect.plane.origin == Point3d(2, 1, 0)
        assert (rect.x, rect.y) == (Interval(-2, 2), Interval(-1, 1))
        assert rect == Rectangle3d.centered(Plane(Point3d(2, 1, 0)), 4, 2)

    def test_zero_radius_circle_gets_a_perpendicular_axis(self):
        circle = Circle.from_center_normal_start(Point3d(), Vector3d(1, 0, 0), 0.0, Point3d())
        assert circle.plane.x_axis.dot(Vector3d(1, 0, 0)) == pytest.approx(0.0)
        assert tuple(circle.normal) == pytest.approx((1.0, 0.0, 0.0))

    def test_perpendicular(self):
        for v in (Vector3d(0, 0, 5), Vector3d(1, 0, 0), Vector3d(1, 2, 3)):
            p = v.perpendicular()
            assert p.dot(v) == pytest.approx(0.0, abs=1e-12)
            assert p.length == pytest.approx(1.0)
