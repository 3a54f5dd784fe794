# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

specialized.py
--------------
Property handlers for values whose wire form differs from their host
form: internalised data trees, slider values, value-list items, Qt
colours and fonts, enum-like flags.

Handler priorities::

    100  PersistentData
     95  ValueList ListItems         (pulls ListMode along)
     94  ValueList ListMode
     90  Slider CurrentValue         (pulls Minimum..Rounding along)
     85  Slider Rounding
     80  Expression
     70  Color / Font / DataMapping
     60  Panel Alignment and flags
      0  Default
"""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence, Tuple

from PySide6.QtGui import QColor, QFont

from ghjson.datatypes.codecs import format_number, parse_number
from ghjson.datatypes.datatree import flatten, unflatten
from ghjson.datatypes.valuecodec import DataTypeRegistry
from ghjson.errors import MalformedPayloadError
from ghjson.host.hostobjects import DocumentObject, PersistentParam
from ghjson.host.specialobjects import (
    NumberSlider, Panel, PanelAlignment, SliderRounding, ValueList,
    ValueListItem, ValueListMode,
)
from ghjson.properties.propertyhandlers import (
    ABSENT, DefaultPropertyHandler, PropertyHandler, PropertyHandlerRegistry,
    enum_from_wire, enum_to_wire, to_bool,
)
from ghjson.properties.stringconverter import (
    font_to_string, parse_color, parse_data_mapping, parse_font,
)


# ==============================================================================
# SLIDER VALUE TEXT
# ==============================================================================

# "5.5<0,10>"; "~" is the legacy separator
_SLIDER_RE = re.compile(r"^\s*([^<>]+?)\s*<\s*([^,~<>]+?)\s*[,~]\s*([^,~<>]+?)\s*>\s*$")


def decimal_places(text: str) -> int:
    """Digits after the decimal point, ignoring any exponent."""
    mantissa = re.split(r"[eE]", text.strip(), maxsplit=1)[0]
    _, dot, fraction = mantissa.partition(".")
    return len(fraction) if dot else 0


def encode_slider_value(slider: NumberSlider) -> str:
    decimals = max(0, int(slider.decimals))
    return (f"{slider.current_value:.{decimals}f}"
            f"<{format_number(slider.minimum)},{format_number(slider.maximum)}>")


def decode_slider_value(text: str) -> Tuple[float, Optional[float], Optional[float], int]:
    """
    Parse ``"value<min,max>"`` (or a bare number).

    Returns ``(value, minimum, maximum, decimals)``; the limits are
    ``None`` for a bare number.

    Raises:
        MalformedPayloadError: Neither form matches.
    """
    text = str(text)
    try:
        match = _SLIDER_RE.match(text)
        if match:
            current, minimum, maximum = match.groups()
            return (parse_number(current), parse_number(minimum),
                    parse_number(maximum), decimal_places(current))
        return parse_number(text), None, None, decimal_places(text)
    except ValueError as exc:
        raise MalformedPayloadError(f"Invalid slider value '{text}'", text) from exc


def apply_slider_value(slider: NumberSlider, text: str) -> None:
    value, minimum, maximum, decimals = decode_slider_value(text)
    if minimum is not None:
        slider.decimals = decimals
        slider.set_limits(minimum, maximum)
    slider.set_value(value)


# ==============================================================================
# DATA
# ==============================================================================

class PersistentDataPropertyHandler(PropertyHandler):
    priority = 100

    def __init__(self, datatypes: DataTypeRegistry) -> None:
        self.datatypes = datatypes

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "PersistentData" and isinstance(node, PersistentParam)

    def extract(self, node: PersistentParam, name: str) -> Any:
        if node.persistent_data.is_empty():
            return ABSENT
        return flatten(node.persistent_data, self.datatypes)

    def apply(self, node: PersistentParam, name: str, value: Any) -> bool:
        node.set_persistent_data(unflatten(value, node.coerce_item, self.datatypes))
        return True


class ExpressionPropertyHandler(PropertyHandler):
    priority = 80

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "Expression" and node.is_parameter

    def extract(self, node: DocumentObject, name: str) -> Any:
        return node.expression or ABSENT

    def apply(self, node: DocumentObject, name: str, value: Any) -> bool:
        node.expression = "" if value is None else str(value)
        return True


# ==============================================================================
# VALUE LIST
# ==============================================================================

def _field(entry: dict, key: str, default: Any = None) -> Any:
    """Look ``key`` up in either PascalCase or camelCase."""
    if key in entry:
        return entry[key]
    return entry.get(key[0].lower() + key[1:], default)


class ValueListItemsPropertyHandler(PropertyHandler):
    priority = 95

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "ListItems" and isinstance(node, ValueList)

    def extract(self, node: ValueList, name: str) -> Any:
        if not node.list_items:
            return ABSENT
        return [{"Name": item.name, "Expression": item.expression, "Selected": item.selected}
                for item in node.list_items]

    def apply(self, node: ValueList, name: str, value: Any) -> bool:
        if not isinstance(value, list):
            raise TypeError(f"ListItems must be a list, got {type(value).__name__}")
        items = []
        for entry in value:
            if not isinstance(entry, dict):
                raise TypeError(f"List item must be an object, got {entry!r}")
            items.append(ValueListItem(
                name=str(_field(entry, "Name", "")),
                expression=str(_field(entry, "Expression", "")),
                selected=to_bool(_field(entry, "Selected", False)),
            ))
        node.list_items = items
        return True

    def related_properties(self, node: DocumentObject, name: str) -> Sequence[str]:
        return ("ListMode",)


class ValueListModePropertyHandler(PropertyHandler):
    priority = 94

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "ListMode" and isinstance(node, ValueList)

    def extract(self, node: ValueList, name: str) -> Any:
        return enum_to_wire(node.list_mode)

    def apply(self, node: ValueList, name: str, value: Any) -> bool:
        node.list_mode = enum_from_wire(ValueListMode, value)
        return True


# ==============================================================================
# SLIDER
# ==============================================================================

class SliderCurrentValuePropertyHandler(PropertyHandler):
    priority = 90

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "CurrentValue" and isinstance(node, NumberSlider)

    def extract(self, node: NumberSlider, name: str) -> Any:
        return encode_slider_value(node)

    def apply(self, node: NumberSlider, name: str, value: Any) -> bool:
        apply_slider_value(node, value)
        return True

    def related_properties(self, node: DocumentObject, name: str) -> Sequence[str]:
        return ("Minimum", "Maximum", "Range", "Decimals", "Rounding")


_ROUNDING_CODES = {
    SliderRounding.FLOAT: "R",
    SliderRounding.INTEGER: "N",
    SliderRounding.EVEN: "E",
    SliderRounding.ODD: "O",
}


class SliderRoundingPropertyHandler(PropertyHandler):
    priority = 85

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "Rounding" and isinstance(node, NumberSlider)

    def extract(self, node: NumberSlider, name: str) -> Any:
        return _ROUNDING_CODES[node.rounding]

    def apply(self, node: NumberSlider, name: str, value: Any) -> bool:
        node.rounding = rounding_from_code(value)
        return True


def rounding_from_code(value: Any) -> SliderRounding:
    """Accept ``R`` / ``N`` / ``E`` / ``O`` or a rounding name."""
    text = str(value).strip()
    for rounding, code in _ROUNDING_CODES.items():
        if text.upper() == code:
            return rounding
    return enum_from_wire(SliderRounding, text)


def rounding_code(rounding: SliderRounding) -> str:
    return _ROUNDING_CODES[rounding]


# ==============================================================================
# QT VALUES & FLAGS
# ==============================================================================

class ColorPropertyHandler(PropertyHandler):
    priority = 70

    def __init__(self, datatypes: DataTypeRegistry) -> None:
        self.datatypes = datatypes

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return node.property_type(name) is QColor

    def extract(self, node: DocumentObject, name: str) -> Any:
        return self.datatypes.encode(node.get_property(name))

    def apply(self, node: DocumentObject, name: str, value: Any) -> bool:
        node.set_property(name, parse_color(value))
        return True


class FontPropertyHandler(PropertyHandler):
    priority = 70

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return node.property_type(name) is QFont

    def extract(self, node: DocumentObject, name: str) -> Any:
        return font_to_string(node.get_property(name))

    def apply(self, node: DocumentObject, name: str, value: Any) -> bool:
        node.set_property(name, parse_font(value))
        return True


class DataMappingPropertyHandler(PropertyHandler):
    priority = 70

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return name == "DataMapping" and node.has_property(name)

    def extract(self, node: DocumentObject, name: str) -> Any:
        return enum_to_wire(node.get_property(name))

    def apply(self, node: DocumentObject, name: str, value: Any) -> bool:
        node.set_property(name, parse_data_mapping(value))
        return True


class PanelPropertyHandler(PropertyHandler):
    """Panel alignment by name, plus the panel's display flags."""

    priority = 60
    FLAGS = ("SpecialCodes", "DrawIndices", "DrawPaths")

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return isinstance(node, Panel) and (name == "Alignment" or name in self.FLAGS)

    def extract(self, node: Panel, name: str) -> Any:
        if name == "Alignment":
            if node.alignment is PanelAlignment.DEFAULT:
                return ABSENT
            return enum_to_wire(node.alignment)
        return bool(node.get_property(name))

    def apply(self, node: Panel, name: str, value: Any) -> bool:
        if name == "Alignment":
            node.alignment = enum_from_wire(PanelAlignment, value)
        else:
            node.set_property(name, to_bool(value))
        return True


# ==============================================================================
# DEFAULT SET
# ==============================================================================

def default_property_handlers(datatypes: DataTypeRegistry) -> PropertyHandlerRegistry:
    """A registry holding every built-in property handler."""
    return PropertyHandlerRegistry([
        PersistentDataPropertyHandler(datatypes),
        ValueListItemsPropertyHandler(),
        ValueListModePropertyHandler(),
        SliderCurrentValuePropertyHandler(),
        SliderRoundingPropertyHandler(),
        ExpressionPropertyHandler(),
        ColorPropertyHandler(datatypes),
        FontPropertyHandler(),
        DataMappingPropertyHandler(),
        PanelPropertyHandler(),
        DefaultPropertyHandler(datatypes),
    ])
