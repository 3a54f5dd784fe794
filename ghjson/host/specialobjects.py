# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

specialobjects.py
-----------------
Host node kinds with family-specific state: input widgets (slider,
panel, value list, toggle, swatch, button), the scribble annotation,
the script component and two ordinary components.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from PySide6.QtCore import QSizeF
from PySide6.QtGui import QColor, QFont

from ghjson.host.hostobjects import (
    Access, Component, DocumentObject, FieldDescriptor, Param,
)
from ghjson.host.paramkinds import GenericParam, NumberParam, PointParam


# ══════════════════════════════════════════════════════════════════════════════
# Number slider
# ══════════════════════════════════════════════════════════════════════════════

class SliderRounding(Enum):
    FLOAT = "Float"
    INTEGER = "Integer"
    EVEN = "Even"
    ODD = "Odd"


class NumberSlider(Param):
    COMPONENT_GUID = "57da07bd-ecab-415d-9d86-af36d7073abc"
    NAME = "Number Slider"
    KIND_FAMILY = "slider"
    ITEM_TYPE = float
    PROPERTIES = {
        "CurrentValue": FieldDescriptor("current_value", float),
        "Minimum": FieldDescriptor("minimum", float),
        "Maximum": FieldDescriptor("maximum", float),
        "Range": FieldDescriptor("range", float, readonly=True),
        "Decimals": FieldDescriptor("decimals", int),
        "Rounding": FieldDescriptor("rounding", SliderRounding),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.current_value: float = 0.25
        self.minimum: float = 0.0
        self.maximum: float = 1.0
        self.decimals: int = 3
        self.rounding = SliderRounding.FLOAT

    @property
    def range(self) -> float:
        return self.maximum - self.minimum

    def set_limits(self, minimum: float, maximum: float) -> None:
        self.minimum, self.maximum = float(minimum), float(maximum)

    def set_value(self, value: float) -> None:
        """Set the current value, clamped into the slider limits."""
        self.current_value = min(max(float(value), self.minimum), self.maximum)


# ══════════════════════════════════════════════════════════════════════════════
# Panel
# ══════════════════════════════════════════════════════════════════════════════

class PanelAlignment(Enum):
    DEFAULT = 0
    LEFT = 1
    CENTER = 2
    RIGHT = 3


class Panel(Param):
    COMPONENT_GUID = "59e0b89a-e487-49f8-bab8-b5bab16be14c"
    NAME = "Panel"
    KIND_FAMILY = "panel"
    ITEM_TYPE = str
    DEFAULT_FONT_FAMILY = "Courier New"
    PROPERTIES = {
        "UserText": FieldDescriptor("user_text", str),
        "Multiline": FieldDescriptor("multiline", bool),
        "Wrap": FieldDescriptor("wrap", bool),
        "DrawIndices": FieldDescriptor("draw_indices", bool),
        "DrawPaths": FieldDescriptor("draw_paths", bool),
        "SpecialCodes": FieldDescriptor("special_codes", bool),
        "Alignment": FieldDescriptor("alignment", PanelAlignment),
        "Font": FieldDescriptor("font", QFont),
        "Colour": FieldDescriptor("colour", QColor),
        "Bounds": FieldDescriptor("bounds", QSizeF),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.user_text = ""
        self.multiline = True
        self.wrap = True
        self.draw_indices = True
        self.draw_paths = True
        self.special_codes = False
        self.alignment = PanelAlignment.DEFAULT
        self.font = QFont(self.DEFAULT_FONT_FAMILY)
        self.font.setPointSizeF(10.0)
        self.colour = QColor(255, 250, 90)
        self.bounds = QSizeF(150.0, 100.0)


# ══════════════════════════════════════════════════════════════════════════════
# Value list
# ══════════════════════════════════════════════════════════════════════════════

class ValueListMode(Enum):
    CHECK_LIST = "CheckList"
    DROP_DOWN = "DropDown"
    SEQUENCE = "Sequence"
    CYCLE = "Cycle"


@dataclass
class ValueListItem:
    name: str
    expression: str
    selected: bool = False


class ValueList(Param):
    COMPONENT_GUID = "0b59d304-6b5c-49ce-baaf-041dc057adcc"
    NAME = "Value List"
    KIND_FAMILY = "value-list"
    PROPERTIES = {
        "ListMode": FieldDescriptor("list_mode", ValueListMode),
        "ListItems": FieldDescriptor("list_items", list),
        "SelectedIndices": FieldDescriptor("selected_indices", list, readonly=True),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.list_mode = ValueListMode.DROP_DOWN
        self.list_items: List[ValueListItem] = []

    @property
    def selected_indices(self) -> List[int]:
        return [i for i, item in enumerate(self.list_items) if item.selected]

    def add_item(self, name: str, expression: str, selected: bool = False) -> ValueListItem:
        item = ValueListItem(name, expression, selected)
        self.list_items.append(item)
        return item

    def select(self, index: int) -> None:
        """Select one item; only check lists keep several selections."""
        if self.list_mode is not ValueListMode.CHECK_LIST:
            for item in self.list_items:
                item.selected = False
        self.list_items[index].selected = True


# ══════════════════════════════════════════════════════════════════════════════
# Toggle / swatch / button
# ══════════════════════════════════════════════════════════════════════════════

class BooleanToggle(Param):
    COMPONENT_GUID = "2e78987b-9dfb-42a2-8b76-3923ac8bd91a"
    NAME = "Boolean Toggle"
    KIND_FAMILY = "toggle"
    ITEM_TYPE = bool
    PROPERTIES = {"Value": FieldDescriptor("value", bool)}

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.value = False


class ColourSwatch(Param):
    COMPONENT_GUID = "9c53bac0-ba66-40bd-8154-ce9829b9db1a"
    NAME = "Colour Swatch"
    KIND_FAMILY = "colour-swatch"
    ITEM_TYPE = QColor
    PROPERTIES = {"SwatchColour": FieldDescriptor("swatch_colour", QColor)}

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.swatch_colour = QColor(255, 255, 255)


class Button(Param):
    COMPONENT_GUID = "a8b97322-2d53-47cd-905e-e3a78807825d"
    NAME = "Button"
    KIND_FAMILY = "button"
    PROPERTIES = {
        "ExpressionNormal": FieldDescriptor("expression_normal", str),
        "ExpressionPressed": FieldDescriptor("expression_pressed", str),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.expression_normal = "False"
        self.expression_pressed = "True"


# ══════════════════════════════════════════════════════════════════════════════
# Scribble
# ══════════════════════════════════════════════════════════════════════════════

class Scribble(DocumentObject):
    """Free text annotation; not an active object, so it cannot be locked."""

    COMPONENT_GUID = "7f5c6c55-f846-4a08-9c9a-cfdc285cc6fe"
    NAME = "Scribble"
    LIBRARY = "Params"
    KIND_FAMILY = "scribble"
    PROPERTIES = {
        "Text": FieldDescriptor("text", str),
        "Font": FieldDescriptor("font", QFont),
        "Corners": FieldDescriptor("corners", list),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.text = "Double click to edit"
        self.font = QFont("Microsoft Sans Serif")
        self.font.setPointSizeF(25.0)
        self.corners: List[Tuple[float, float]] = [(0.0, 0.0), (100.0, 0.0),
                                                   (100.0, 30.0), (0.0, 30.0)]


# ══════════════════════════════════════════════════════════════════════════════
# Components
# ══════════════════════════════════════════════════════════════════════════════

class ScriptComponent(Component):
    COMPONENT_GUID = "719467e6-7cf5-4848-99b0-c5dd57e5442c"
    NAME = "Python 3 Script"
    LIBRARY = "Maths"
    KIND_FAMILY = "script"
    # Inputs and outputs are user-defined and rebuilt from the record
    VARIABLE_PARAMS = True
    PROPERTIES = {
        "Script": FieldDescriptor("script", str),
        "MarshInputs": FieldDescriptor("marsh_inputs", bool),
        "MarshOutputs": FieldDescriptor("marsh_outputs", bool),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.script = ""
        self.show_standard_output = True
        self.marsh_inputs = True
        self.marsh_outputs = True

    def build_params(self) -> None:
        self.add_input(GenericParam("x", access=Access.ITEM, optional=True))
        self.add_input(GenericParam("y", access=Access.ITEM, optional=True))
        self.add_output(GenericParam("a"))


class Addition(Component):
    COMPONENT_GUID = "a0d62394-a118-422d-abb3-6af115c75b25"
    NAME = "Addition"
    LIBRARY = "Maths"

    def build_params(self) -> None:
        self.add_input(NumberParam("A", description="First item for addition"))
        self.add_input(NumberParam("B", description="Second item for addition"))
        self.add_output(NumberParam("Result", description="Result of addition"))


class ConstructPoint(Component):
    COMPONENT_GUID = "3581f42a-9592-4549-bd6b-1c0fc39d067b"
    NAME = "Construct Point"
    LIBRARY = "Vector"

    def build_params(self) -> None:
        for axis in ("X", "Y", "Z"):
            self.add_input(NumberParam(axis, description=f"{axis} coordinate"))
        self.add_output(PointParam("Pt", description="Point coordinate"))
