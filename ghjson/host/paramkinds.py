# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

paramkinds.py
-------------
Concrete persistent parameter kinds, one per built-in value kind.

Each kind's :meth:`coerce_item` is the host item constructor used when
a data tree is rebuilt from JSON: decoded values of the right type pass
straight through, native JSON scalars are cast, anything else is a
:class:`~ghjson.errors.MalformedPayloadError`.
"""

from typing import Any

from PySide6.QtGui import QColor

from ghjson.geometry import (
    Arc, Box, Circle, Interval, Line, Plane, Point3d, Rectangle3d, Vector3d,
)
from ghjson.host.hostobjects import PersistentParam


def _parse_bool(token: Any) -> bool:
    if isinstance(token, str):
        lowered = token.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        raise ValueError(f"'{token}' is not a boolean")
    if isinstance(token, (int, float)):
        return bool(token)
    raise TypeError(f"{type(token).__name__} is not a boolean")


def _parse_float(token: Any) -> float:
    if isinstance(token, (int, float, str)) and not isinstance(token, bool):
        return float(token)
    raise TypeError(f"{type(token).__name__} is not a number")


def _parse_int(token: Any) -> int:
    if isinstance(token, float) and token.is_integer():
        return int(token)
    if isinstance(token, (int, str)) and not isinstance(token, bool):
        return int(token)
    raise TypeError(f"{type(token).__name__} is not an integer")


# ==============================================================================
# SCALAR PARAMS
# ==============================================================================

class NumberParam(PersistentParam):
    COMPONENT_GUID = "3e8ca6be-fda8-4aaf-b5c0-3c54c8bb7312"
    NAME = "Number"
    ITEM_TYPE = float

    def _coerce(self, token: Any) -> float:
        return self._coerce_with(token, _parse_float)


class IntegerParam(PersistentParam):
    COMPONENT_GUID = "2e3ab970-8545-46bb-836c-1c11e5610bce"
    NAME = "Integer"
    ITEM_TYPE = int

    def _coerce(self, token: Any) -> int:
        return self._coerce_with(token, _parse_int)


class TextParam(PersistentParam):
    COMPONENT_GUID = "3ede854e-c753-40eb-84cb-b48008f14fd4"
    NAME = "Text"
    ITEM_TYPE = str

    def _coerce(self, token: Any) -> str:
        if isinstance(token, (dict, list)):
            return super()._coerce(token)
        return str(token).lower() if isinstance(token, bool) else str(token)


class BooleanParam(PersistentParam):
    COMPONENT_GUID = "cb95db89-6165-43b6-9c41-5702bc5bf137"
    NAME = "Boolean"
    ITEM_TYPE = bool

    def _coerce(self, token: Any) -> bool:
        return self._coerce_with(token, _parse_bool)


class ColourParam(PersistentParam):
    COMPONENT_GUID = "203a91c3-287a-43b6-a9c5-ebb96240a650"
    NAME = "Colour"
    ITEM_TYPE = QColor

    def _coerce(self, token: Any) -> QColor:
        # Imported lazily: the string converter depends on the property layer
        from ghjson.properties.stringconverter import parse_color
        return self._coerce_with(token, parse_color)


# ==============================================================================
# GEOMETRY PARAMS
# ==============================================================================

class _GeometryParam(PersistentParam):
    """Geometry params only accept already-decoded values."""


class PointParam(_GeometryParam):
    COMPONENT_GUID = "fbac3e32-f100-4292-8692-77240a42fd1a"
    NAME = "Point"
    ITEM_TYPE = Point3d


class VectorParam(_GeometryParam):
    COMPONENT_GUID = "16ef3e75-e315-4899-b531-d3166b42dac9"
    NAME = "Vector"
    ITEM_TYPE = Vector3d


class LineParam(_GeometryParam):
    COMPONENT_GUID = "8529dbdf-9b6f-42e9-8e1f-c7a2bde56a70"
    NAME = "Line"
    ITEM_TYPE = Line


class PlaneParam(_GeometryParam):
    COMPONENT_GUID = "4f8984c4-7c7a-4d69-b0a2-183cbb330d20"
    NAME = "Plane"
    ITEM_TYPE = Plane


class CircleParam(_GeometryParam):
    COMPONENT_GUID = "d1028c72-ff86-4057-9eb0-36c687a4d98c"
    NAME = "Circle"
    ITEM_TYPE = Circle


class ArcParam(_GeometryParam):
    COMPONENT_GUID = "04d3eace-deaa-475e-9e69-8f804d687998"
    NAME = "Arc"
    ITEM_TYPE = Arc


class BoxParam(_GeometryParam):
    COMPONENT_GUID = "c9482db6-bea9-448d-98ff-fed6d69a8efc"
    NAME = "Box"
    ITEM_TYPE = Box


class RectangleParam(_GeometryParam):
    COMPONENT_GUID = "abf9c670-5462-4cd8-acb3-f1ab0256dbf3"
    NAME = "Rectangle"
    ITEM_TYPE = Rectangle3d


class IntervalParam(_GeometryParam):
    COMPONENT_GUID = "15b7afe5-d0d0-43e1-b894-34fcfe3be384"
    NAME = "Domain"
    ITEM_TYPE = Interval


class GenericParam(PersistentParam):
    """Accepts any item unchanged."""
    COMPONENT_GUID = "8ec86459-bf01-4409-baee-174d0d2b13d0"
    NAME = "Generic Data"
    ITEM_TYPE = object


PARAM_KINDS = (
    NumberParam, IntegerParam, TextParam, BooleanParam, ColourParam,
    PointParam, VectorParam, LineParam, PlaneParam, CircleParam,
    ArcParam, BoxParam, RectangleParam, IntervalParam, GenericParam,
)
