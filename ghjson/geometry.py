# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

geometry.py
-----------
Immutable geometric value types carried by parameters and data trees.

These are plain value objects, not a geometry kernel: they only hold
what the wire format needs plus a few derived quantities (unit axes,
normals, arc centers) computed with numpy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, Tuple

import numpy as np

TOLERANCE = 1e-9


def _as_vector(arr: np.ndarray) -> Tuple[float, float, float]:
    return float(arr[0]), float(arr[1]), float(arr[2])


def _close(a: "_Coordinates", b: "_Coordinates") -> bool:
    return bool(np.allclose(a.to_array(), b.to_array(), rtol=TOLERANCE, atol=TOLERANCE))


# ==============================================================================
# POINTS & VECTORS
# ==============================================================================

@dataclass(frozen=True)
class _Coordinates:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr) -> "_Coordinates":
        return cls(*_as_vector(np.asarray(arr, dtype=np.float64)))


@dataclass(frozen=True)
class Point3d(_Coordinates):
    """A location in 3D space."""

    def __add__(self, other: "Vector3d") -> "Point3d":
        return Point3d.from_array(self.to_array() + other.to_array())

    def __sub__(self, other: "Point3d") -> "Vector3d":
        return Vector3d.from_array(self.to_array() - other.to_array())

    def distance_to(self, other: "Point3d") -> float:
        return float(np.linalg.norm(self.to_array() - other.to_array()))


@dataclass(frozen=True)
class Vector3d(_Coordinates):
    """A direction and magnitude in 3D space."""

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.to_array()))

    def unitized(self) -> "Vector3d":
        length = self.length
        if length == 0.0:
            raise ValueError("Cannot unitize a zero-length vector")
        return Vector3d.from_array(self.to_array() / length)

    def cross(self, other: "Vector3d") -> "Vector3d":
        return Vector3d.from_array(np.cross(self.to_array(), other.to_array()))

    def dot(self, other: "Vector3d") -> float:
        return float(np.dot(self.to_array(), other.to_array()))

    def perpendicular(self) -> "Vector3d":
        """A unit vector at right angles to this one."""
        unit = self.unitized()
        hint = Vector3d.y_axis() if abs(unit.x) > 0.9 else Vector3d.x_axis()
        return Vector3d.from_array(hint.to_array() - unit.dot(hint) * unit.to_array()).unitized()

    def __mul__(self, factor: float) -> "Vector3d":
        return Vector3d.from_array(self.to_array() * float(factor))

    __rmul__ = __mul__

    @classmethod
    def x_axis(cls) -> "Vector3d":
        return cls(1.0, 0.0, 0.0)

    @classmethod
    def y_axis(cls) -> "Vector3d":
        return cls(0.0, 1.0, 0.0)


# ==============================================================================
# INTERVALS & LINES
# ==============================================================================

@dataclass(frozen=True)
class Interval:
    """A numeric domain from ``t0`` to ``t1`` (may be decreasing)."""
    t0: float = 0.0
    t1: float = 0.0

    @property
    def min(self) -> float:
        return min(self.t0, self.t1)

    @property
    def max(self) -> float:
        return max(self.t0, self.t1)

    @property
    def length(self) -> float:
        return self.t1 - self.t0

    @property
    def mid(self) -> float:
        return (self.t0 + self.t1) / 2.0


@dataclass(frozen=True)
class Line:
    start: Point3d = field(default_factory=Point3d)
    end: Point3d = field(default_factory=Point3d)

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> Vector3d:
        return self.end - self.start


# ==============================================================================
# PLANES & PLANAR SHAPES
# ==============================================================================

@dataclass(frozen=True)
class Plane:
    """An oriented plane given by an origin and two in-plane axes."""
    origin: Point3d = field(default_factory=Point3d)
    x_axis: Vector3d = field(default_factory=Vector3d.x_axis)
    y_axis: Vector3d = field(default_factory=Vector3d.y_axis)

    @classmethod
    def world_xy(cls) -> "Plane":
        return cls()

    @classmethod
    def from_frame(cls, origin: Point3d, x_dir: Vector3d, y_hint: Vector3d) -> "Plane":
        """
        Build an orthonormal plane from an x direction and any vector
        lying in the plane (``y_hint`` only fixes the side).
        """
        x_axis = x_dir.unitized()
        normal = x_axis.cross(y_hint)
        y_axis = normal.cross(x_axis).unitized()
        return cls(origin, x_axis, y_axis)

    @property
    def z_axis(self) -> Vector3d:
        return self.x_axis.cross(self.y_axis)

    def point_at(self, u: float, v: float) -> Point3d:
        arr = (self.origin.to_array()
               + u * self.x_axis.to_array()
               + v * self.y_axis.to_array())
        return Point3d.from_array(arr)


@dataclass(frozen=True, eq=False)
class Circle:
    """
    A circle on a plane.  Only the center, normal, radius and start point
    travel on the wire, so two circles compare equal when those agree
    within :data:`TOLERANCE`; the plane's axes are rebuilt on decode.
    """
    plane: Plane = field(default_factory=Plane)
    radius: float = 1.0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Circle):
            return NotImplemented
        return (math.isclose(self.radius, other.radius, rel_tol=TOLERANCE, abs_tol=TOLERANCE)
                and _close(self.center, other.center)
                and _close(self.normal, other.normal)
                and _close(self.start_point, other.start_point))

    def __hash__(self) -> int:
        return hash((Circle, round(self.radius, 6)))

    @property
    def center(self) -> Point3d:
        return self.plane.origin

    @property
    def normal(self) -> Vector3d:
        return self.plane.z_axis

    @property
    def start_point(self) -> Point3d:
        return self.plane.point_at(self.radius, 0.0)

    @classmethod
    def from_center_normal_start(cls, center: Point3d, normal: Vector3d,
                                 radius: float, start: Point3d) -> "Circle":
        axis = normal.unitized()
        offset = start - center
        # A zero radius leaves the start point on the center
        x_axis = offset.unitized() if offset.length > 0.0 else axis.perpendicular()
        return cls(Plane.from_frame(center, x_axis, axis.cross(x_axis)), radius)


@dataclass(frozen=True)
class Arc:
    """A circular arc through three points."""
    start: Point3d = field(default_factory=Point3d)
    mid: Point3d = field(default_factory=Point3d)
    end: Point3d = field(default_factory=Point3d)

    @property
    def center(self) -> Point3d:
        a, b, c = self.start.to_array(), self.mid.to_array(), self.end.to_array()
        ab, ac = b - a, c - a
        n = np.cross(ab, ac)
        denom = 2.0 * float(np.dot(n, n))
        if denom == 0.0:
            raise ValueError("Arc points are collinear")
        offset = (np.dot(ac, ac) * np.cross(n, ab) + np.dot(ab, ab) * np.cross(ac, n)) / denom
        return Point3d.from_array(a + offset)

    @property
    def radius(self) -> float:
        return self.center.distance_to(self.start)


@dataclass(frozen=True)
class Rectangle3d:
    """
    A planar rectangle spanning two intervals of its plane.

    Stored in centred form: the plane origin sits on the rectangle's
    center and both intervals run from ``-size/2`` to ``size/2``, which
    is exactly what ``rectangleCXY`` carries.
    """
    plane: Plane = field(default_factory=Plane)
    x: Interval = field(default_factory=Interval)
    y: Interval = field(default_factory=Interval)

    def __post_init__(self) -> None:
        if (self.x.t0 == -self.x.t1 <= 0.0) and (self.y.t0 == -self.y.t1 <= 0.0):
            return
        plane = Plane(self.center, self.plane.x_axis, self.plane.y_axis)
        half_w, half_h = self.width / 2.0, self.height / 2.0
        object.__setattr__(self, "plane", plane)
        object.__setattr__(self, "x", Interval(-half_w, half_w))
        object.__setattr__(self, "y", Interval(-half_h, half_h))

    @property
    def width(self) -> float:
        return abs(self.x.length)

    @property
    def height(self) -> float:
        return abs(self.y.length)

    @property
    def center(self) -> Point3d:
        return self.plane.point_at(self.x.mid, self.y.mid)

    @classmethod
    def centered(cls, plane: Plane, width: float, height: float) -> "Rectangle3d":
        """Rectangle of the given size centred on ``plane.origin``."""
        return cls(plane,
                   Interval(-width / 2.0, width / 2.0),
                   Interval(-height / 2.0, height / 2.0))


@dataclass(frozen=True)
class Box:
    plane: Plane = field(default_factory=Plane)
    x: Interval = field(default_factory=Interval)
    y: Interval = field(default_factory=Interval)
    z: Interval = field(default_factory=Interval)

    @property
    def volume(self) -> float:
        return abs(self.x.length * self.y.length * self.z.length)
