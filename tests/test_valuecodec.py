# -*- coding: utf-8 -*-
"""
Tests for the value codec registry and the built-in codecs.

Covers prefixing, the documented payload grammars, boundary values,
decode failures and registration of externally defined kinds.
"""

import math

import numpy as np
import pytest
from PySide6.QtCore import QSizeF
from PySide6.QtGui import QColor

from ghjson.datatypes.codecs import format_number, parse_number
from ghjson.datatypes.valuecodec import DataTypeRegistry, ValueCodec
from ghjson.errors import (
    MalformedPayloadError, PrefixCollisionError, UnknownPrefixError,
    UnsupportedTypeError,
)
from ghjson.geometry import (
    Arc, Box, Circle, Interval, Line, Plane, Point3d, Rectangle3d, Vector3d,
)


class TestScalarCodecs:
    """Text, number, integer and boolean payloads."""

    def test_text_keeps_colons(self, registry):
        """Only the first colon separates prefix and payload."""
        assert registry.encode("a:b:c") == "text:a:b:c"
        assert registry.decode("text:a:b:c") == "a:b:c"

    def test_empty_text(self, registry):
        assert registry.encode("") == "text:"
        assert registry.decode("text:") == ""

    def test_number_uses_invariant_format(self, registry):
        assert registry.encode(3.0) == "number:3"
        assert registry.encode(-0.5) == "number:-0.5"
        assert registry.decode("number:1e-3") == pytest.approx(0.001)

    def test_number_round_trips_exactly(self, registry):
        for value in (0.1, 1 / 3, 1e300, -2.5e-12, 123456789.125):
            assert registry.decode(registry.encode(value)) == value

    def test_number_special_values(self):
        assert math.isnan(parse_number("nan"))
        assert parse_number("-inf") == float("-inf")

    def test_integer_and_boolean(self, registry):
        assert registry.encode(42) == "integer:42"
        assert registry.decode("integer:-7") == -7
        assert registry.encode(True) == "boolean:true"
        assert registry.decode("boolean:False") is False

    def test_bool_is_not_encoded_as_integer(self, registry):
        """bool subclasses int but has its own codec."""
        assert registry.encode(False) == "boolean:false"

    def test_numpy_scalars(self, registry):
        assert registry.encode(np.float64(2.5)) == "number:2.5"
        assert registry.encode(np.int32(4)) == "integer:4"
        assert registry.encode(np.bool_(True)) == "boolean:true"

    def test_format_number_large_integral(self):
        assert format_number(1e20) == "1e+20"
        assert format_number(10.0) == "10"


class TestColorAndBounds:
    """argb and bounds payloads."""

    def test_argb_example(self, registry):
        """A=255, R=128, G=64, B=255 encodes exactly and decodes back."""
        color = QColor(128, 64, 255, 255)
        assert registry.encode(color) == "argb:255,128,64,255"
        decoded = registry.decode("argb:255,128,64,255")
        assert (decoded.alpha(), decoded.red(), decoded.green(), decoded.blue()) == (255, 128, 64, 255)

    def test_argb_channel_boundaries(self, registry):
        assert registry.decode("argb:0,0,0,0").alpha() == 0
        assert registry.decode("argb:255,255,255,255").red() == 255

    @pytest.mark.parametrize("text", [
        "argb:256,0,0,0",
        "argb:-1,0,0,0",
        "argb:255,0,0",
        "argb:255,0,0,x",
    ])
    def test_argb_rejects_bad_payloads(self, registry, text):
        with pytest.raises(MalformedPayloadError):
            registry.decode(text)

    def test_bounds(self, registry):
        assert registry.encode(QSizeF(150, 100)) == "bounds:150x100"
        size = registry.decode("bounds:12.5x3")
        assert (size.width(), size.height()) == (12.5, 3.0)


class TestGeometryCodecs:
    """Geometric payload grammars."""

    def test_point_and_vector_prefixes_differ(self, registry):
        assert registry.encode(Point3d(1, 2, 3)) == "pointXYZ:1,2,3"
        assert registry.encode(Vector3d(0, 0, 1)) == "vectorXYZ:0,0,1"
        assert registry.decode("vectorXYZ:0,0,1") == Vector3d(0, 0, 1)

    def test_line(self, registry):
        line = Line(Point3d(0, 0, 0), Point3d(1.5, 2, 0))
        assert registry.encode(line) == "line2p:0,0,0;1.5,2,0"
        assert registry.decode("line2p:0,0,0;1.5,2,0") == line

    def test_plane(self, registry):
        assert registry.encode(Plane.world_xy()) == "planeOXY:0,0,0;1,0,0;0,1,0"
        plane = registry.decode("planeOXY:1,2,3;1,0,0;0,1,0")
        assert plane.origin == Point3d(1, 2, 3)

    def test_circle(self, registry):
        circle = Circle(Plane.world_xy(), 2.0)
        text = registry.encode(circle)
        assert text == "circleCNRS:0,0,0;0,0,1;2;2,0,0"
        assert registry.decode(text) == circle

    def test_zero_radius_circle(self, registry):
        circle = Circle(Plane.world_xy(), 0.0)
        text = registry.encode(circle)
        assert text == "circleCNRS:0,0,0;0,0,1;0;0,0,0"
        decoded = registry.decode(text)
        assert decoded == circle
        assert decoded.plane == Plane.world_xy()

    def test_rotated_circle_compares_within_tolerance(self, registry):
        plane = Plane(Point3d(1, -2, 0.5), Vector3d(0.6, 0.8, 0), Vector3d(-0.8, 0.6, 0))
        circle = Circle(plane, 3.0)
        decoded = registry.decode(registry.encode(circle))
        assert decoded == circle
        assert decoded != Circle(plane, 3.1)

    def test_arc(self, registry):
        arc = Arc(Point3d(1, 0, 0), Point3d(0, 1, 0), Point3d(-1, 0, 0))
        decoded = registry.decode(registry.encode(arc))
        assert decoded == arc
        assert decoded.radius == pytest.approx(1.0)
        assert tuple(decoded.center) == pytest.approx((0.0, 0.0, 0.0))

    def test_box(self, registry):
        box = Box(Plane.world_xy(), Interval(0, 1), Interval(0, 2), Interval(0, 3))
        text = registry.encode(box)
        assert text == "boxOXY:0,0,0;1,0,0;0,1,0;0,1;0,2;0,3"
        decoded = registry.decode(text)
        assert decoded == box
        assert decoded.volume == pytest.approx(6.0)

    def test_rectangle_is_centered(self, registry):
        rect = Rectangle3d.centered(Plane.world_xy(), 4.0, 2.0)
        text = registry.encode(rect)
        assert text == "rectangleCXY:0,0,0;1,0,0;0,1,0;4,2"
        assert registry.decode(text) == rect

    def test_offset_rectangle_round_trips(self, registry):
        rect = Rectangle3d(Plane.world_xy(), Interval(0, 4), Interval(0, 2))
        text = registry.encode(rect)
        assert text == "rectangleCXY:2,1,0;1,0,0;0,1,0;4,2"
        assert registry.decode(text) == rect

    def test_interval(self, registry):
        assert registry.encode(Interval(-1, 2.5)) == "interval:-1<2.5"
        assert registry.decode("interval:0<10") == Interval(0, 10)

    def test_point_rejects_wrong_arity(self, registry):
        with pytest.raises(MalformedPayloadError):
            registry.decode("pointXYZ:1,2")


_ROTATED = Plane(Point3d(5, 5, 0), Vector3d(0.6, 0.8, 0), Vector3d(-0.8, 0.6, 0))


class TestRoundTripIdentity:
    """``decode(encode(v)) == v`` for every built-in kind, boundaries included."""

    @pytest.mark.parametrize("value", [
        "", "a: b", 0.0, -2.5, 0, -7, True, False,
        QColor(0, 0, 0, 0), QColor(128, 64, 255), QSizeF(0, 0), QSizeF(150, 100.5),
        Interval(0, 0), Interval(5, -1),
        Point3d(), Point3d(-1.5, 2, 3), Vector3d(0, 0, -1),
        Line(Point3d(), Point3d(1, 2, 3)),
        Plane.world_xy(), Plane(Point3d(1, 2, 3), Vector3d(0, 1, 0), Vector3d(0, 0, 1)),
        Circle(Plane.world_xy(), 0.0), Circle(_ROTATED, 3.0),
        Arc(Point3d(0, 0, 0), Point3d(1, 1, 0), Point3d(2, 0, 0)),
        Box(Plane.world_xy(), Interval(0, 1), Interval(-2, 2), Interval(0, 0)),
        Rectangle3d(_ROTATED, Interval(-1, 3), Interval(0, 2)),
        Rectangle3d.centered(_ROTATED, 0.0, 3.5),
    ])
    def test_round_trip(self, registry, value):
        decoded = registry.decode(registry.encode(value))
        assert decoded == value
        assert type(decoded) is type(value)


class TestRegistry:
    """Lookup, prefix handling and registration."""

    def test_prefix_lookup_is_case_insensitive(self, registry):
        assert registry.decode("POINTXYZ:1,2,3") == Point3d(1, 2, 3)
        assert registry.has_prefix("Number:1")

    def test_prefix_detection(self, registry):
        assert registry.has_prefix("argb:1,2,3,4")
        assert not registry.has_prefix("hello world")
        assert not registry.has_prefix("unknown:1")
        assert not registry.has_prefix(5)

    def test_encoding_is_deterministic(self, registry):
        """Equal values always produce the same string."""
        values = [Point3d(0.1, 0.2, 0.3), QColor(1, 2, 3, 4), 0.1 + 0.2]
        for value in values:
            assert registry.encode(value) == registry.encode(value)

    def test_unknown_prefix(self, registry):
        with pytest.raises(UnknownPrefixError):
            registry.decode("mesh:whatever")

    def test_missing_prefix(self, registry):
        with pytest.raises(MalformedPayloadError):
            registry.decode("no prefix here")

    def test_unsupported_type(self, registry):
        assert registry.try_encode(object()) is None
        with pytest.raises(UnsupportedTypeError):
            registry.encode(object())

    def test_register_external_kind(self, registry):
        class Complex2:
            def __init__(self, re, im):
                self.re, self.im = re, im

        registry.register_codec(
            "Complex", "complex", Complex2,
            lambda c: f"{c.re},{c.im}",
            lambda p: Complex2(*map(float, p.split(","))),
        )
        assert registry.encode(Complex2(1, 2)) == "complex:1,2"
        assert registry.decode("complex:3,4").im == 4.0

    def test_prefix_collision(self, registry):
        with pytest.raises(PrefixCollisionError):
            registry.register_codec("Other", "number", complex, str, complex)

    def test_replace_overrides(self, registry):
        registry.register(ValueCodec("Number", "number", float,
                                     lambda v: f"{v:.2f}", float), replace=True)
        assert registry.encode(1.0) == "number:1.00"

    def test_unregister(self, registry):
        registry.unregister("interval")
        assert registry.try_encode(Interval(0, 1)) is None
        assert "interval" not in registry.prefixes()

    def test_registries_are_independent(self):
        first, second = DataTypeRegistry(), DataTypeRegistry()
        first.unregister("text")
        assert second.has_prefix("text:x")
