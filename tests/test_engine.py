# -*- coding: utf-8 -*-
"""
End-to-end node conversion through the Engine: every built-in family,
component settings with internalised data, options, contexts and the
hard-failure contract.
"""

from unittest import mock

import pytest
from PySide6.QtCore import QSizeF
from PySide6.QtGui import QColor, QFont

import ghjson
from ghjson.datatypes.datatree import DataTree
from ghjson.engine import Engine
from ghjson.errors import StructuralError, UnknownKindError
from ghjson.handlers.family import NumberSliderHandler, PanelHandler
from ghjson.host.hostobjects import Access, DataMapping
from ghjson.host.paramkinds import GenericParam, NumberParam
from ghjson.host.specialobjects import (
    Addition, BooleanToggle, Button, ColourSwatch, NumberSlider, Panel,
    PanelAlignment, Scribble, ScriptComponent, SliderRounding, ValueList,
    ValueListMode,
)
from ghjson.options import DeserializationOptions, SerializationOptions
from ghjson.properties.propertyfilter import PropertyFilterBuilder


def round_trip(engine, node, **kwargs):
    """Serialize to a plain dict and rebuild a fresh node from it."""
    data = engine.serialize_node(node, **kwargs).record.to_dict()
    result = engine.deserialize_node(data)
    assert result.warnings == []
    return data, result.node


class TestSlider:
    """The number slider scenario."""

    def test_serialized_shape(self, engine):
        slider = NumberSlider()
        slider.set_limits(0, 10)
        slider.decimals = 1
        slider.set_value(5.5)
        data = engine.serialize_node(slider).record.to_dict()
        assert data["name"] == "Number Slider"
        assert data["componentGuid"] == NumberSlider.COMPONENT_GUID
        assert data["componentState"]["extensions"]["gh.numberslider"] == {
            "value": "5.5<0,10>", "rounding": "R"}
        assert "CurrentValue" not in data["componentState"]
        assert "Decimals" not in data["componentState"]

    def test_round_trip(self, engine):
        slider = NumberSlider(nick_name="Radius")
        slider.set_limits(-5, 20)
        slider.decimals = 2
        slider.set_value(3.25)
        slider.rounding = SliderRounding.EVEN
        slider.pivot = (120.0, 40.0)
        _, restored = round_trip(engine, slider)
        assert isinstance(restored, NumberSlider)
        assert (restored.minimum, restored.maximum) == (-5.0, 20.0)
        assert restored.current_value == 3.25
        assert restored.decimals == 2
        assert restored.rounding is SliderRounding.EVEN
        assert restored.nick_name == "Radius"
        assert restored.pivot == (120.0, 40.0)
        assert restored.instance_guid == slider.instance_guid

    def test_legacy_value_text(self, engine):
        node = engine.deserialize_node({
            "name": "Number Slider",
            "componentState": {"extensions": {"gh.numberslider": {"value": "4<0~8>"}}},
        }).node
        assert (node.current_value, node.maximum, node.decimals) == (4.0, 8.0, 0)


class TestPanel:
    """Panel text, flags, font and geometry."""

    def test_round_trip(self, engine):
        panel = Panel()
        panel.user_text = "line one\nline two"
        panel.multiline = False
        panel.draw_paths = False
        panel.special_codes = True
        panel.alignment = PanelAlignment.RIGHT
        panel.font = QFont("Arial")
        panel.font.setPointSizeF(12.0)
        panel.font.setBold(True)
        panel.colour = QColor(200, 220, 255)
        panel.bounds = QSizeF(300.0, 80.5)
        data, restored = round_trip(engine, panel)

        ext = data["componentState"]["extensions"]["gh.panel"]
        assert ext["alignment"] == "Right"
        assert ext["font"] == {"name": "Arial", "bold": True, "size": 12.0}
        assert ext["bounds"] == "300x80.5"

        assert restored.user_text == "line one\nline two"
        assert (restored.multiline, restored.draw_paths, restored.special_codes) == (False, False, True)
        assert restored.alignment is PanelAlignment.RIGHT
        assert restored.font.family() == "Arial"
        assert restored.font.bold()
        assert restored.colour == QColor(200, 220, 255)
        assert (restored.bounds.width(), restored.bounds.height()) == (300.0, 80.5)

    def test_default_font_name_is_omitted(self, engine):
        ext = engine.serialize_node(Panel()).record.extension("gh.panel")
        assert ext["font"] == {"size": 10.0}
        assert "alignment" not in ext
        assert "specialCodes" not in ext

    def test_bad_bounds_is_a_warning(self, engine):
        result = engine.deserialize_node({
            "name": "Panel",
            "componentState": {"extensions": {"gh.panel": {"bounds": "wide"}}},
        })
        assert isinstance(result.node, Panel)
        assert len(result.warnings) == 1


class TestInputFamilies:
    """Value list, toggle, swatch and button."""

    def test_value_list(self, engine):
        vl = ValueList()
        vl.list_mode = ValueListMode.CHECK_LIST
        vl.add_item("Red", "\"red\"", selected=True)
        vl.add_item("Green", "\"green\"")
        vl.add_item("Blue", "\"blue\"", selected=True)
        data, restored = round_trip(engine, vl)
        assert data["componentState"]["extensions"]["gh.valuelist"]["listMode"] == "CheckList"
        assert restored.list_mode is ValueListMode.CHECK_LIST
        assert [i.name for i in restored.list_items] == ["Red", "Green", "Blue"]
        assert restored.selected_indices == [0, 2]

    def test_toggle(self, engine):
        toggle = BooleanToggle()
        toggle.value = True
        data, restored = round_trip(engine, toggle)
        assert data["componentState"]["extensions"]["gh.toggle"] == {"value": True}
        assert "Value" not in data["componentState"]
        assert restored.value is True

    def test_colour_swatch(self, engine):
        swatch = ColourSwatch()
        swatch.swatch_colour = QColor(128, 64, 255, 255)
        data, restored = round_trip(engine, swatch)
        assert data["componentState"]["extensions"]["gh.colorswatch"] == {"color": "argb:255,128,64,255"}
        assert restored.swatch_colour == swatch.swatch_colour

    def test_button(self, engine):
        button = Button()
        button.expression_normal = "0"
        button.expression_pressed = "1"
        _, restored = round_trip(engine, button)
        assert (restored.expression_normal, restored.expression_pressed) == ("0", "1")


class TestScribble:
    """Free-text annotations."""

    def test_round_trip(self, engine):
        scribble = Scribble()
        scribble.text = "Notes"
        scribble.font = QFont("Arial")
        scribble.font.setPointSizeF(14.0)
        scribble.font.setItalic(True)
        scribble.corners = [(0.0, 0.0), (50.5, 0.0), (50.5, 20.0), (0.0, 20.0)]
        data, restored = round_trip(engine, scribble)
        ext = data["componentState"]["extensions"]["gh.scribble"]
        assert ext["corners"] == ["0,0", "50.5,0", "50.5,20", "0,20"]
        assert ext["font"]["style"] == "Italic"
        assert restored.text == "Notes"
        assert restored.font.italic()
        assert restored.font.pointSizeF() == 14.0
        assert restored.corners == scribble.corners

    def test_wrong_corner_count(self, engine):
        result = engine.deserialize_node({
            "name": "Scribble",
            "componentState": {"extensions": {"gh.scribble": {"corners": ["0,0", "1,1", "2,2"]}}},
        })
        assert result.node.corners == Scribble().corners
        assert result.warnings[0].source == "ScribbleHandler"


class TestComponents:
    """Parameter settings and internalised data."""

    def test_settings_and_internalized_data(self, engine):
        add = Addition()
        a, b = add.inputs
        a.set_persistent_data(DataTree({(0,): [2.0, 3.0]}))
        b.nick_name = "Bee"
        b.data_mapping = DataMapping.GRAFT
        b.reverse = True
        add.outputs[0].expression = "x * 2"
        data, restored = round_trip(engine, add)

        first = data["inputSettings"][0]
        assert first["parameterName"] == "A"
        assert first["internalizedData"] == {"{0}": {"{0}(0)": 2.0, "{0}(1)": 3.0}}
        assert data["inputSettings"][1]["dataMapping"] == "Graft"
        assert data["inputSettings"][1]["nickName"] == "Bee"

        ra, rb = restored.inputs
        assert ra.persistent_data == a.persistent_data
        assert (rb.nick_name, rb.data_mapping, rb.reverse) == ("Bee", DataMapping.GRAFT, True)
        assert restored.outputs[0].expression == "x * 2"

    def test_settings_match_by_position_without_names(self, engine):
        node = engine.deserialize_node({
            "name": "Addition",
            "inputSettings": [{"nickName": "first"}, {"nickName": "second"}],
        }).node
        assert [p.nick_name for p in node.inputs] == ["first", "second"]

    def test_corrupt_internalized_data_is_isolated(self, engine):
        result = engine.deserialize_node({
            "name": "Addition",
            "inputSettings": [
                {"parameterName": "A", "internalizedData": {"{0}": {"{0}(0)": "argb:1,2"}}},
                {"parameterName": "B", "internalizedData": {"{0}": {"{0}(0)": 4.0}}},
            ],
        })
        a, b = result.node.inputs
        assert a.persistent_data.is_empty()
        assert b.persistent_data.branch((0,)) == [4.0]
        assert [w.field for w in result.warnings] == ["A"]

    def test_state_flags(self, engine):
        add = Addition()
        add.hidden = True
        add.locked = True
        add.selected = True
        data, restored = round_trip(engine, add)
        state = data["componentState"]
        assert (state["selected"], state["locked"], state["hidden"]) == (True, True, True)
        assert "Locked" not in state and "Hidden" not in state
        assert (restored.hidden, restored.locked, restored.selected) == (True, True, True)

    def test_runtime_messages(self, engine):
        add = Addition()
        add.add_runtime_message("error", "Input A failed to collect data")
        add.add_runtime_message("remark", "ok")
        data, restored = round_trip(engine, add)
        assert data["errors"] == ["Input A failed to collect data"]
        assert restored.runtime_messages["error"] == ["Input A failed to collect data"]
        assert restored.runtime_messages["remark"] == ["ok"]

    def test_script_rebuilds_variable_params(self, engine):
        script = ScriptComponent()
        script.script = "a = count * factor"
        script.inputs = []
        script.outputs = []
        script.add_input(GenericParam("count", access=Access.LIST))
        script.add_input(GenericParam("factor"))
        script.add_output(GenericParam("a"))
        data, restored = round_trip(engine, script)
        assert data["inputSettings"][0]["variableName"] == "count"
        assert data["componentState"]["extensions"]["gh.python"]["code"] == "a = count * factor"
        assert [p.param_name for p in restored.inputs] == ["count", "factor"]
        assert restored.inputs[0].access is Access.LIST
        assert [p.param_name for p in restored.outputs] == ["a"]
        assert restored.script == "a = count * factor"


class TestStandaloneParams:
    """Parameter nodes carry identity in settings and modifiers in the bag."""

    def test_round_trip(self, engine):
        param = NumberParam("Radius", description="Circle radius", access=Access.LIST)
        param.reverse = True
        param.set_persistent_data(DataTree({(0,): [1.0], (1,): [2.0]}))
        data, restored = round_trip(engine, param)
        assert data["outputSettings"] == [
            {"parameterName": "Radius", "description": "Circle radius", "access": "list"}]
        assert data["componentState"]["Reverse"] is True
        assert restored.nick_name == "Radius"
        assert restored.description == "Circle radius"
        assert restored.access is Access.LIST
        assert restored.reverse is True
        assert restored.persistent_data == param.persistent_data


class TestOptionsAndContexts:
    """Per-call options and property contexts."""

    def test_lite_options(self, engine):
        slider = NumberSlider()
        slider.add_runtime_message("warning", "w")
        data = engine.serialize_node(slider, options=SerializationOptions.lite()).record.to_dict()
        assert set(data) == {"name", "library", "componentGuid", "instanceGuid", "pivot"}

    def test_lite_context_drops_ui_properties(self, engine):
        names = engine.property_filter("Lite").allowed_properties(Panel())
        assert "Font" not in names
        assert "Multiline" in names

    def test_family_properties_are_not_repeated_in_the_bag(self, engine):
        panel = Panel(nick_name="notes")
        panel.user_text = "hi"
        state = engine.serialize_node(panel).record.component_state
        assert state.extensions["gh.panel"]["text"] == "hi"
        assert not set(state.properties) & set(PanelHandler.CLAIMED_PROPERTIES)
        assert state.properties["NickName"] == "notes"

    def test_failed_family_keeps_its_properties_in_the_bag(self, engine):
        with mock.patch.object(NumberSliderHandler, "encode", side_effect=RuntimeError("boom")):
            result = engine.serialize_node(NumberSlider())
        state = result.record.component_state
        assert "gh.numberslider" not in state.extensions
        assert "CurrentValue" in state.properties
        assert [w.source for w in result.warnings] == ["NumberSliderHandler"]

    def test_custom_rule(self, engine):
        rule = PropertyFilterBuilder.create().minimal().include("Reverse").build()
        param = NumberParam("n")
        param.reverse = True
        state = engine.serialize_node(param, context=rule).record.component_state
        assert state.properties == {"NickName": "n", "Reverse": True}

    def test_pruning_can_be_disabled(self, engine):
        options = SerializationOptions(prune_defaults=False)
        props = engine.serialize_node(NumberParam(), options=options).record.component_state.properties
        assert props["Simplify"] is False
        assert props["DataMapping"] == "None"

    def test_minimal_deserialization(self, engine):
        slider = NumberSlider(nick_name="s")
        slider.set_value(0.75)
        data = engine.serialize_node(slider).record.to_dict()
        restored = engine.deserialize_node(data, DeserializationOptions.minimal()).node
        assert restored.current_value == 0.25
        assert restored.nick_name == "s"

    def test_minimal_deserialization_skips_runtime_messages(self, engine):
        add = Addition()
        add.add_runtime_message("warning", "Input B is empty")
        data = engine.serialize_node(add).record.to_dict()
        assert data["warnings"] == ["Input B is empty"]
        restored = engine.deserialize_node(data, DeserializationOptions.minimal()).node
        assert not restored.runtime_messages.get("warning")
        assert engine.deserialize_node(data).node.runtime_messages["warning"] == ["Input B is empty"]

    def test_fresh_instance_guids(self, engine):
        param = NumberParam()
        data = engine.serialize_node(param).record.to_dict()
        options = DeserializationOptions(preserve_instance_guids=False)
        assert engine.deserialize_node(data, options).node.instance_guid != param.instance_guid

    def test_apply_onto_existing_node(self, engine):
        slider = NumberSlider()
        warnings = engine.apply_record(slider, {
            "name": "Number Slider",
            "componentState": {"extensions": {"gh.numberslider": {"value": "9<0,10>"}}},
        })
        assert warnings == []
        assert slider.current_value == 9.0


class TestFailures:
    """Hard failures only on the structural contract."""

    def test_unknown_kind(self, engine):
        with pytest.raises(UnknownKindError):
            engine.deserialize_node({"name": "Mystery Widget"})

    def test_missing_identity(self, engine):
        with pytest.raises(StructuralError):
            engine.deserialize_node({"nickName": "orphan"})

    def test_non_integer_id(self, engine):
        with pytest.raises(StructuralError):
            engine.deserialize_node({"name": "Number", "id": "3"})

    def test_lookup_by_guid_when_name_differs(self, engine):
        node = engine.deserialize_node(
            {"name": "Renamed", "componentGuid": NumberSlider.COMPONENT_GUID.upper()}).node
        assert isinstance(node, NumberSlider)


class TestRegistration:
    """Engine-level registration and isolation between engines."""

    def test_value_codec(self, engine):
        class Money:
            def __init__(self, cents):
                self.cents = cents

        engine.register_value_codec("Money", "money", Money,
                                    lambda m: str(m.cents), lambda p: Money(int(p)))
        assert engine.encode_value(Money(250)) == "money:250"
        assert engine.decode_value("money:99").cents == 99
        assert not Engine().datatypes.has_prefix("money:1")

    def test_register_kind(self, engine):
        class Doubler(Addition):
            COMPONENT_GUID = "00000000-0000-0000-0000-00000000d0b1"
            NAME = "Doubler"

        engine.register_kind(Doubler)
        assert isinstance(engine.deserialize_node({"name": "Doubler"}).node, Doubler)
        assert Doubler in engine.kinds.kinds()
        assert Doubler not in Engine().kinds.kinds()

    def test_tree_helpers(self, engine):
        tree = DataTree({(0,): [1.0, None]})
        assert engine.unflatten_tree(engine.flatten_tree(tree)) == tree

    def test_package_exports(self):
        assert ghjson.Engine is Engine
        assert "SerializationContext" in dir(ghjson)
        with pytest.raises(AttributeError):
            ghjson.NotAThing
