# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

family.py
---------
Handlers for node families with state of their own.  Each one writes a
single namespace under ``componentState.extensions``::

    gh.numberslider  {"value": "5.5<0,10>", "rounding": "R"}
    gh.panel         {"text", "multiline", "wrap", "drawIndices", ...}
    gh.valuelist     {"listMode", "items": [{"name", "expression", "selected"}]}
    gh.toggle        {"value"}
    gh.colorswatch   {"color": "argb:..."}
    gh.button        {"normal", "pressed"}
    gh.scribble      {"text", "font": {...}, "corners": ["x,y", ...]}
    gh.python        {"code", "showStandardOutput", "marshInputs", "marshOutputs"}

When its namespace is present in a record, a family handler also owns
the property-bag entries it covers, so the default handler does not
write them a second time.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Iterable, Tuple, Type

from PySide6.QtCore import QSizeF
from PySide6.QtGui import QFont

from ghjson.datatypes.codecs import format_number, parse_number
from ghjson.errors import MalformedPayloadError
from ghjson.handlers.objecthandler import (
    PRIORITY_FAMILY, ApplyContext, ObjectHandler, SerializeContext,
    extension_field, property_field,
)
from ghjson.host.hostobjects import DocumentObject
from ghjson.host.specialobjects import (
    BooleanToggle, Button, ColourSwatch, NumberSlider, Panel, PanelAlignment,
    Scribble, ScriptComponent, ValueList, ValueListItem, ValueListMode,
)
from ghjson.models import ComponentState, NodeRecord
from ghjson.properties.propertyhandlers import enum_from_wire, enum_to_wire, to_bool
from ghjson.properties.specialized import (
    apply_slider_value, encode_slider_value, rounding_code, rounding_from_code,
)
from ghjson.properties.stringconverter import apply_font_style, font_style, parse_color


class FamilyHandler(ObjectHandler):
    """
    Base for one-namespace family handlers.

    Subclasses set ``KIND``, ``extension_key`` and ``CLAIMED_PROPERTIES``
    and implement :meth:`encode` / :meth:`decode`.
    """

    priority = PRIORITY_FAMILY
    KIND: ClassVar[Type[DocumentObject]] = DocumentObject
    CLAIMED_PROPERTIES: ClassVar[Tuple[str, ...]] = ()

    def can_handle(self, node: DocumentObject) -> bool:
        return isinstance(node, self.KIND)

    def can_handle_record(self, record: NodeRecord) -> bool:
        guid = (record.component_guid or "").lower()
        return super().can_handle_record(record) or (
            bool(guid) and guid == self.KIND.COMPONENT_GUID.lower())

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        payload = self.encode(node, ctx)
        ctx.covered_properties.update(self.CLAIMED_PROPERTIES)
        return NodeRecord(component_state=ComponentState(extensions={self.extension_key: payload}))

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        if record.extension(self.extension_key) is None:
            return ()
        return (extension_field(self.extension_key),
                *(property_field(name) for name in self.CLAIMED_PROPERTIES))

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        payload = record.extension(self.extension_key)
        if payload is None or not ctx.options.apply_component_state:
            return
        if not isinstance(payload, dict):
            raise MalformedPayloadError(
                f"Extension '{self.extension_key}' must be an object, got {type(payload).__name__}")
        self.decode(payload, node, ctx)

    def encode(self, node: DocumentObject, ctx: SerializeContext) -> Dict[str, Any]:
        raise NotImplementedError

    def decode(self, payload: Dict[str, Any], node: DocumentObject, ctx: ApplyContext) -> None:
        raise NotImplementedError


# ══════════════════════════════════════════════════════════════════════════════
# Inputs
# ══════════════════════════════════════════════════════════════════════════════

class NumberSliderHandler(FamilyHandler):
    KIND = NumberSlider
    extension_key = "gh.numberslider"
    CLAIMED_PROPERTIES = ("CurrentValue", "Minimum", "Maximum", "Range", "Decimals", "Rounding")

    def encode(self, node: NumberSlider, ctx: SerializeContext) -> Dict[str, Any]:
        return {"value": encode_slider_value(node), "rounding": rounding_code(node.rounding)}

    def decode(self, payload: Dict[str, Any], node: NumberSlider, ctx: ApplyContext) -> None:
        if payload.get("value") is not None:
            apply_slider_value(node, payload["value"])
        if payload.get("rounding") is not None:
            node.rounding = rounding_from_code(payload["rounding"])


class ValueListHandler(FamilyHandler):
    KIND = ValueList
    extension_key = "gh.valuelist"
    CLAIMED_PROPERTIES = ("ListMode", "ListItems")

    def encode(self, node: ValueList, ctx: SerializeContext) -> Dict[str, Any]:
        return {
            "listMode": enum_to_wire(node.list_mode),
            "items": [{"name": i.name, "expression": i.expression, "selected": i.selected}
                      for i in node.list_items],
        }

    def decode(self, payload: Dict[str, Any], node: ValueList, ctx: ApplyContext) -> None:
        if payload.get("listMode") is not None:
            node.list_mode = enum_from_wire(ValueListMode, payload["listMode"])
        items = payload.get("items")
        if items is not None:
            node.list_items = [
                ValueListItem(str(entry.get("name", "")), str(entry.get("expression", "")),
                              to_bool(entry.get("selected", False)))
                for entry in items
            ]


class ToggleHandler(FamilyHandler):
    KIND = BooleanToggle
    extension_key = "gh.toggle"
    CLAIMED_PROPERTIES = ("Value",)

    def encode(self, node: BooleanToggle, ctx: SerializeContext) -> Dict[str, Any]:
        return {"value": node.value}

    def decode(self, payload: Dict[str, Any], node: BooleanToggle, ctx: ApplyContext) -> None:
        if "value" in payload:
            node.value = to_bool(payload["value"])


class ColorSwatchHandler(FamilyHandler):
    KIND = ColourSwatch
    extension_key = "gh.colorswatch"
    CLAIMED_PROPERTIES = ("SwatchColour",)

    def encode(self, node: ColourSwatch, ctx: SerializeContext) -> Dict[str, Any]:
        return {"color": ctx.datatypes.encode(node.swatch_colour)}

    def decode(self, payload: Dict[str, Any], node: ColourSwatch, ctx: ApplyContext) -> None:
        if payload.get("color") is not None:
            node.swatch_colour = parse_color(payload["color"])


class ButtonHandler(FamilyHandler):
    KIND = Button
    extension_key = "gh.button"
    CLAIMED_PROPERTIES = ("ExpressionNormal", "ExpressionPressed")

    def encode(self, node: Button, ctx: SerializeContext) -> Dict[str, Any]:
        return {"normal": node.expression_normal, "pressed": node.expression_pressed}

    def decode(self, payload: Dict[str, Any], node: Button, ctx: ApplyContext) -> None:
        if payload.get("normal") is not None:
            node.expression_normal = str(payload["normal"])
        if payload.get("pressed") is not None:
            node.expression_pressed = str(payload["pressed"])


# ══════════════════════════════════════════════════════════════════════════════
# Panel
# ══════════════════════════════════════════════════════════════════════════════

def _parse_bounds(value: Any) -> QSizeF:
    width, sep, height = str(value).lower().partition("x")
    if not sep:
        raise MalformedPayloadError(f"Invalid panel bounds '{value}'; expected 'WxH'", str(value))
    return QSizeF(parse_number(width), parse_number(height))


class PanelHandler(FamilyHandler):
    KIND = Panel
    extension_key = "gh.panel"
    CLAIMED_PROPERTIES = ("UserText", "Multiline", "Wrap", "DrawIndices", "DrawPaths",
                          "SpecialCodes", "Alignment", "Font", "Colour", "Bounds")
    _FLAGS = (("multiline", "multiline"), ("wrap", "wrap"),
              ("drawIndices", "draw_indices"), ("drawPaths", "draw_paths"))

    def encode(self, node: Panel, ctx: SerializeContext) -> Dict[str, Any]:
        data: Dict[str, Any] = {"text": node.user_text}
        for key, attr in self._FLAGS:
            data[key] = getattr(node, attr)
        data["color"] = ctx.datatypes.encode(node.colour)
        data["bounds"] = f"{format_number(node.bounds.width())}x{format_number(node.bounds.height())}"
        if node.alignment is not PanelAlignment.DEFAULT:
            data["alignment"] = enum_to_wire(node.alignment)
        if node.special_codes:
            data["specialCodes"] = True
        data["font"] = self._encode_font(node.font)
        return data

    @staticmethod
    def _encode_font(font: QFont) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if font.family() and font.family() != Panel.DEFAULT_FONT_FAMILY:
            data["name"] = font.family()
        if font.bold():
            data["bold"] = True
        if font.italic():
            data["italic"] = True
        data["size"] = font.pointSizeF()
        return data

    def decode(self, payload: Dict[str, Any], node: Panel, ctx: ApplyContext) -> None:
        if "text" in payload:
            node.user_text = "" if payload["text"] is None else str(payload["text"])
        for key, attr in self._FLAGS:
            if key in payload:
                setattr(node, attr, to_bool(payload[key]))
        if payload.get("color") is not None:
            node.colour = parse_color(payload["color"])
        if payload.get("bounds") is not None:
            node.bounds = _parse_bounds(payload["bounds"])
        if payload.get("alignment") is not None:
            node.alignment = enum_from_wire(PanelAlignment, payload["alignment"])
        if "specialCodes" in payload:
            node.special_codes = to_bool(payload["specialCodes"])
        if isinstance(payload.get("font"), dict):
            node.font = self._decode_font(payload["font"])

    @staticmethod
    def _decode_font(data: Dict[str, Any]) -> QFont:
        font = QFont(str(data.get("name") or Panel.DEFAULT_FONT_FAMILY))
        if data.get("size") is not None:
            font.setPointSizeF(float(data["size"]))
        font.setBold(to_bool(data.get("bold", False)))
        font.setItalic(to_bool(data.get("italic", False)))
        return font


# ══════════════════════════════════════════════════════════════════════════════
# Scribble & script
# ══════════════════════════════════════════════════════════════════════════════

def _parse_corner(value: Any) -> Tuple[float, float]:
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return float(value[0]), float(value[1])
    parts = str(value).split(",")
    if len(parts) != 2:
        raise MalformedPayloadError(f"Invalid corner '{value}'; expected 'x,y'", str(value))
    return parse_number(parts[0]), parse_number(parts[1])


class ScribbleHandler(FamilyHandler):
    KIND = Scribble
    extension_key = "gh.scribble"
    CLAIMED_PROPERTIES = ("Text", "Font", "Corners")

    def encode(self, node: Scribble, ctx: SerializeContext) -> Dict[str, Any]:
        return {
            "text": node.text,
            "font": {"name": node.font.family(), "size": node.font.pointSizeF(),
                     "style": font_style(node.font)},
            "corners": [f"{format_number(x)},{format_number(y)}" for x, y in node.corners],
        }

    def decode(self, payload: Dict[str, Any], node: Scribble, ctx: ApplyContext) -> None:
        if "text" in payload:
            node.text = "" if payload["text"] is None else str(payload["text"])
        font_data = payload.get("font")
        if isinstance(font_data, dict):
            font = QFont(str(font_data.get("name") or node.font.family()))
            font.setPointSizeF(float(font_data.get("size") or node.font.pointSizeF()))
            apply_font_style(font, font_data.get("style", "Regular"))
            node.font = font
        corners = payload.get("corners")
        if corners is not None:
            if len(corners) != 4:
                raise MalformedPayloadError(f"Scribble needs 4 corners, got {len(corners)}")
            node.corners = [_parse_corner(c) for c in corners]


class ScriptHandler(FamilyHandler):
    KIND = ScriptComponent
    extension_key = "gh.python"
    CLAIMED_PROPERTIES = ("Script", "MarshInputs", "MarshOutputs")

    def encode(self, node: ScriptComponent, ctx: SerializeContext) -> Dict[str, Any]:
        return {
            "code": node.script,
            "showStandardOutput": node.show_standard_output,
            "marshInputs": node.marsh_inputs,
            "marshOutputs": node.marsh_outputs,
        }

    def decode(self, payload: Dict[str, Any], node: ScriptComponent, ctx: ApplyContext) -> None:
        if payload.get("code") is not None:
            node.script = str(payload["code"])
        if "showStandardOutput" in payload:
            node.show_standard_output = to_bool(payload["showStandardOutput"])
        if "marshInputs" in payload:
            node.marsh_inputs = to_bool(payload["marshInputs"])
        if "marshOutputs" in payload:
            node.marsh_outputs = to_bool(payload["marshOutputs"])


FAMILY_HANDLERS: Tuple[Type[FamilyHandler], ...] = (
    NumberSliderHandler, PanelHandler, ValueListHandler, ToggleHandler,
    ColorSwatchHandler, ButtonHandler, ScribbleHandler, ScriptHandler,
)
