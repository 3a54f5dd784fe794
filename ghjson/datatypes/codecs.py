# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

codecs.py
---------
The built-in value kinds and their payload grammars.

    text:<anything>                  number:<float>        integer:<int>
    boolean:true|false               argb:A,R,G,B          bounds:WxH
    pointXYZ:x,y,z                   vectorXYZ:x,y,z       interval:t0<t1
    line2p:x,y,z;x,y,z               planeOXY:o;x;y
    circleCNRS:c;n;r;s               arc3P:start;mid;end
    boxOXY:o;x;y;x0,x1;y0,y1;z0,z1   rectangleCXY:c;x;y;w,h

Delimiters are part of the wire format: comma between scalar
components, semicolon between groups, ``<`` inside intervals and ``x``
between width and height.  All numbers are formatted invariantly.
"""

import re
from typing import List, Tuple

import numpy as np
from PySide6.QtCore import QSizeF
from PySide6.QtGui import QColor

from ghjson.datatypes.valuecodec import DataTypeRegistry, ValueCodec
from ghjson.errors import MalformedPayloadError
from ghjson.geometry import (
    Arc, Box, Circle, Interval, Line, Plane, Point3d, Rectangle3d, Vector3d,
)

# ==============================================================================
# NUMBER FORMATTING
# ==============================================================================

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_SPECIAL_NUMBERS = {
    "nan": float("nan"),
    "inf": float("inf"), "+inf": float("inf"), "-inf": float("-inf"),
    "infinity": float("inf"), "+infinity": float("inf"), "-infinity": float("-inf"),
}


def format_number(value: float) -> str:
    """
    Invariant, round-trip-safe text for a float.

    Integral values render without a fraction (``10``, ``-3``); everything
    else uses the shortest repr that parses back to the same double.
    """
    number = float(value)
    if number.is_integer() and abs(number) < 1e16:
        return str(int(number))
    return repr(number)


def parse_number(text: str) -> float:
    token = text.strip()
    if _NUMBER_RE.match(token):
        return float(token)
    special = _SPECIAL_NUMBERS.get(token.lower())
    if special is not None:
        return special
    raise MalformedPayloadError(f"'{text}' is not an invariant number", text)


def parse_integer(text: str) -> int:
    token = text.strip()
    if not _INTEGER_RE.match(token):
        raise MalformedPayloadError(f"'{text}' is not an integer", text)
    return int(token)


def _split(payload: str, sep: str, count: int, what: str) -> List[str]:
    parts = payload.split(sep)
    if len(parts) != count:
        raise MalformedPayloadError(
            f"{what} expects {count} '{sep}'-separated parts, got {len(parts)}", payload)
    return parts


def _numbers(group: str, count: int, what: str) -> List[float]:
    return [parse_number(p) for p in _split(group, ",", count, what)]


def _triple(group: str, what: str) -> Tuple[float, float, float]:
    x, y, z = _numbers(group, 3, what)
    return x, y, z


def _fmt(*values: float) -> str:
    return ",".join(format_number(v) for v in values)


# ==============================================================================
# SCALARS
# ==============================================================================

def _encode_text(value: str) -> str:
    return value


def _decode_text(payload: str) -> str:
    return payload


def _encode_number(value) -> str:
    return format_number(value)


def _encode_integer(value) -> str:
    return str(int(value))


def _encode_boolean(value) -> str:
    return "true" if value else "false"


def _decode_boolean(payload: str) -> bool:
    token = payload.strip().lower()
    if token == "true":
        return True
    if token == "false":
        return False
    raise MalformedPayloadError(f"'{payload}' is not a boolean", payload)


def _encode_argb(color: QColor) -> str:
    return f"{color.alpha()},{color.red()},{color.green()},{color.blue()}"


def _decode_argb(payload: str) -> QColor:
    channels = []
    for part in _split(payload, ",", 4, "argb"):
        value = parse_integer(part)
        if not 0 <= value <= 255:
            raise MalformedPayloadError(f"Color channel {value} outside 0..255", payload)
        channels.append(value)
    a, r, g, b = channels
    return QColor(r, g, b, a)


def _encode_bounds(size: QSizeF) -> str:
    return f"{format_number(size.width())}x{format_number(size.height())}"


def _decode_bounds(payload: str) -> QSizeF:
    w, h = _split(payload, "x", 2, "bounds")
    return QSizeF(parse_number(w), parse_number(h))


def _encode_interval(value: Interval) -> str:
    return f"{format_number(value.t0)}<{format_number(value.t1)}"


def _decode_interval(payload: str) -> Interval:
    t0, t1 = _split(payload, "<", 2, "interval")
    return Interval(parse_number(t0), parse_number(t1))


# ==============================================================================
# GEOMETRY
# ==============================================================================

def _encode_point(value: Point3d) -> str:
    return _fmt(*value)


def _decode_point(payload: str) -> Point3d:
    return Point3d(*_triple(payload, "pointXYZ"))


def _decode_vector(payload: str) -> Vector3d:
    return Vector3d(*_triple(payload, "vectorXYZ"))


def _encode_line(value: Line) -> str:
    return f"{_fmt(*value.start)};{_fmt(*value.end)}"


def _decode_line(payload: str) -> Line:
    a, b = _split(payload, ";", 2, "line2p")
    return Line(Point3d(*_triple(a, "line2p")), Point3d(*_triple(b, "line2p")))


def _encode_plane(value: Plane) -> str:
    return f"{_fmt(*value.origin)};{_fmt(*value.x_axis)};{_fmt(*value.y_axis)}"


def _decode_plane(payload: str) -> Plane:
    o, x, y = _split(payload, ";", 3, "planeOXY")
    return Plane(Point3d(*_triple(o, "planeOXY")),
                 Vector3d(*_triple(x, "planeOXY")),
                 Vector3d(*_triple(y, "planeOXY")))


def _encode_circle(value: Circle) -> str:
    return ";".join([_fmt(*value.center), _fmt(*value.normal),
                     format_number(value.radius), _fmt(*value.start_point)])


def _decode_circle(payload: str) -> Circle:
    c, n, r, s = _split(payload, ";", 4, "circleCNRS")
    center = Point3d(*_triple(c, "circleCNRS"))
    normal = Vector3d(*_triple(n, "circleCNRS"))
    start = Point3d(*_triple(s, "circleCNRS"))
    return Circle.from_center_normal_start(center, normal, parse_number(r), start)


def _encode_arc(value: Arc) -> str:
    return ";".join([_fmt(*value.start), _fmt(*value.mid), _fmt(*value.end)])


def _decode_arc(payload: str) -> Arc:
    s, m, e = _split(payload, ";", 3, "arc3P")
    return Arc(Point3d(*_triple(s, "arc3P")),
               Point3d(*_triple(m, "arc3P")),
               Point3d(*_triple(e, "arc3P")))


def _encode_box(value: Box) -> str:
    return ";".join([
        _encode_plane(value.plane),
        _fmt(value.x.t0, value.x.t1),
        _fmt(value.y.t0, value.y.t1),
        _fmt(value.z.t0, value.z.t1),
    ])


def _decode_box(payload: str) -> Box:
    o, x, y, ix, iy, iz = _split(payload, ";", 6, "boxOXY")
    plane = _decode_plane(f"{o};{x};{y}")
    intervals = [Interval(*_numbers(group, 2, "boxOXY")) for group in (ix, iy, iz)]
    return Box(plane, *intervals)


def _encode_rectangle(value: Rectangle3d) -> str:
    plane = value.plane
    return ";".join([_fmt(*value.center), _fmt(*plane.x_axis), _fmt(*plane.y_axis),
                     _fmt(value.width, value.height)])


def _decode_rectangle(payload: str) -> Rectangle3d:
    c, x, y, dims = _split(payload, ";", 4, "rectangleCXY")
    plane = Plane(Point3d(*_triple(c, "rectangleCXY")),
                  Vector3d(*_triple(x, "rectangleCXY")),
                  Vector3d(*_triple(y, "rectangleCXY")))
    width, height = _numbers(dims, 2, "rectangleCXY")
    return Rectangle3d.centered(plane, width, height)


# ==============================================================================
# DEFAULT TABLE
# ==============================================================================

BUILTIN_CODECS: Tuple[ValueCodec, ...] = (
    ValueCodec("Text", "text", str, _encode_text, _decode_text),
    ValueCodec("Number", "number", float, _encode_number, parse_number),
    ValueCodec("Integer", "integer", int, _encode_integer, parse_integer),
    ValueCodec("Boolean", "boolean", bool, _encode_boolean, _decode_boolean),
    ValueCodec("Color", "argb", QColor, _encode_argb, _decode_argb),
    ValueCodec("Point", "pointXYZ", Point3d, _encode_point, _decode_point),
    ValueCodec("Vector", "vectorXYZ", Vector3d, _encode_point, _decode_vector),
    ValueCodec("Line", "line2p", Line, _encode_line, _decode_line),
    ValueCodec("Plane", "planeOXY", Plane, _encode_plane, _decode_plane),
    ValueCodec("Circle", "circleCNRS", Circle, _encode_circle, _decode_circle),
    ValueCodec("Arc", "arc3P", Arc, _encode_arc, _decode_arc),
    ValueCodec("Box", "boxOXY", Box, _encode_box, _decode_box),
    ValueCodec("Rectangle", "rectangleCXY", Rectangle3d, _encode_rectangle, _decode_rectangle),
    ValueCodec("Interval", "interval", Interval, _encode_interval, _decode_interval),
    ValueCodec("Bounds", "bounds", QSizeF, _encode_bounds, _decode_bounds),
)


def register_builtin_codecs(registry: DataTypeRegistry) -> None:
    """Populate ``registry`` with the built-in kinds and numpy scalar aliases."""
    for codec in BUILTIN_CODECS:
        registry.register(codec)

    # numpy scalars coming out of array-backed trees
    registry.alias_type(np.floating, "number")
    registry.alias_type(np.integer, "integer")
    registry.alias_type(np.bool_, "boolean")
