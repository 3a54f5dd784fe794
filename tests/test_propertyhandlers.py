# -*- coding: utf-8 -*-
"""
Tests for per-property conversion: the default handler, the specialised
handlers and the priority registry with its failure isolation.
"""

import pytest
from PySide6.QtGui import QColor, QFont

from ghjson.datatypes.datatree import DataTree
from ghjson.errors import MalformedPayloadError
from ghjson.host.hostobjects import DataMapping
from ghjson.host.paramkinds import NumberParam
from ghjson.host.specialobjects import (
    BooleanToggle, ColourSwatch, NumberSlider, Panel, PanelAlignment,
    SliderRounding, ValueList, ValueListMode,
)
from ghjson.properties.propertyhandlers import (
    ABSENT, DefaultPropertyHandler, PropertyHandler, PropertyHandlerRegistry,
    enum_from_wire, enum_to_wire,
)
from ghjson.properties.specialized import (
    decimal_places, decode_slider_value, default_property_handlers,
    rounding_code, rounding_from_code,
)
from ghjson.report import ConversionReport


@pytest.fixture
def handlers(registry):
    return default_property_handlers(registry)


class TestEnumWire:
    """Enum names on the wire."""

    def test_string_valued_enum_uses_value(self):
        assert enum_to_wire(ValueListMode.CHECK_LIST) == "CheckList"

    def test_int_valued_enum_uses_title_name(self):
        assert enum_to_wire(PanelAlignment.CENTER) == "Center"

    def test_decode_accepts_name_value_or_index(self):
        assert enum_from_wire(ValueListMode, "checklist") is ValueListMode.CHECK_LIST
        assert enum_from_wire(ValueListMode, "check_list") is ValueListMode.CHECK_LIST
        assert enum_from_wire(PanelAlignment, 3) is PanelAlignment.RIGHT

    def test_decode_rejects_unknown(self):
        with pytest.raises(ValueError):
            enum_from_wire(ValueListMode, "Carousel")


class TestDefaultHandler:
    """Descriptor-driven get / set."""

    def test_scalars_pass_through(self, registry):
        handler = DefaultPropertyHandler(registry)
        param = NumberParam("A")
        param.reverse = True
        assert handler.extract(param, "Reverse") is True
        assert handler.extract(param, "NickName") == "A"

    def test_non_native_values_use_codec(self, registry):
        assert DefaultPropertyHandler(registry).extract(Panel(), "Bounds") == "bounds:150x100"

    def test_unencodable_value_is_absent(self):
        assert DefaultPropertyHandler().extract(Panel(), "Bounds") is ABSENT

    def test_apply_coerces_declared_kind(self, registry):
        handler = DefaultPropertyHandler(registry)
        param = NumberParam()
        assert handler.apply(param, "Simplify", "true")
        assert param.simplify is True

    def test_prefixed_string_into_text_property_stays_text(self, registry):
        param = NumberParam()
        DefaultPropertyHandler(registry).apply(param, "NickName", "number:5")
        assert param.nick_name == "number:5"

    def test_prefixed_value_decoded_for_typed_property(self, registry):
        slider = NumberSlider()
        DefaultPropertyHandler(registry).apply(slider, "Minimum", "number:-2")
        assert slider.minimum == -2.0

    def test_readonly_property_is_not_written(self, registry):
        slider = NumberSlider()
        assert not DefaultPropertyHandler(registry).apply(slider, "Range", 99)
        assert slider.range == 1.0

    def test_bad_value_raises(self, registry):
        with pytest.raises(ValueError):
            DefaultPropertyHandler(registry).apply(NumberParam(), "Simplify", "maybe")


class TestSliderValue:
    """The ``value<min,max>`` text form."""

    def test_documented_example(self, handlers):
        slider = NumberSlider()
        assert handlers.apply(slider, "CurrentValue", "5.5<0,10>")
        assert slider.current_value == 5.5
        assert (slider.minimum, slider.maximum, slider.decimals) == (0.0, 10.0, 1)

    def test_extract(self, handlers):
        slider = NumberSlider()
        slider.set_limits(0, 10)
        slider.decimals = 2
        slider.set_value(5.5)
        assert handlers.extract(slider, "CurrentValue") == "5.50<0,10>"

    def test_legacy_separator(self):
        assert decode_slider_value("3<1~7>") == (3.0, 1.0, 7.0, 0)

    def test_bare_number_keeps_limits(self, handlers):
        slider = NumberSlider()
        slider.set_limits(0, 100)
        handlers.apply(slider, "CurrentValue", "42")
        assert (slider.current_value, slider.maximum) == (42.0, 100.0)

    def test_decimals_ignore_exponent(self):
        assert decimal_places("1.25e-3") == 2
        assert decimal_places("7") == 0

    def test_malformed_value_is_isolated(self, handlers):
        slider = NumberSlider()
        report = ConversionReport()
        assert not handlers.apply(slider, "CurrentValue", "abc<0,1>", report)
        assert slider.current_value == 0.25
        assert len(report) == 1
        assert report.warnings[0].field == "CurrentValue"

    def test_decode_raises(self):
        with pytest.raises(MalformedPayloadError):
            decode_slider_value("<>")

    def test_related_properties_follow_current_value(self, handlers):
        slider = NumberSlider()
        names = list(handlers.extract_properties(slider, ["NickName", "CurrentValue", "Locked"]))
        assert names == ["NickName", "CurrentValue", "Minimum", "Maximum", "Range",
                         "Decimals", "Rounding", "Locked"]


class TestRounding:
    """Single-letter rounding codes."""

    @pytest.mark.parametrize("code, rounding", [
        ("R", SliderRounding.FLOAT),
        ("N", SliderRounding.INTEGER),
        ("E", SliderRounding.EVEN),
        ("O", SliderRounding.ODD),
    ])
    def test_codes(self, code, rounding):
        assert rounding_code(rounding) == code
        assert rounding_from_code(code) is rounding

    def test_long_names_accepted(self):
        assert rounding_from_code("Integer") is SliderRounding.INTEGER

    def test_extract_through_registry(self, handlers):
        slider = NumberSlider()
        slider.rounding = SliderRounding.EVEN
        assert handlers.extract(slider, "Rounding") == "E"


class TestValueList:
    """List items and list mode."""

    def test_extract_items_with_mode(self, handlers):
        vl = ValueList()
        vl.add_item("One", "1", selected=True)
        vl.add_item("Two", "2")
        bag = handlers.extract_properties(vl, ["ListItems"])
        assert bag == {
            "ListItems": [
                {"Name": "One", "Expression": "1", "Selected": True},
                {"Name": "Two", "Expression": "2", "Selected": False},
            ],
            "ListMode": "DropDown",
        }

    def test_apply_accepts_camel_case_keys(self, handlers):
        vl = ValueList()
        handlers.apply(vl, "ListItems", [{"name": "A", "expression": "\"a\"", "selected": "true"}])
        assert vl.list_items[0].name == "A"
        assert vl.list_items[0].selected is True
        assert vl.selected_indices == [0]

    def test_apply_mode(self, handlers):
        vl = ValueList()
        assert handlers.apply(vl, "ListMode", "Cycle")
        assert vl.list_mode is ValueListMode.CYCLE

    def test_bad_items_are_isolated(self, handlers):
        report = ConversionReport()
        assert not handlers.apply(ValueList(), "ListItems", "oops", report)
        assert report.has_warnings()


class TestQtValues:
    """Colours, fonts, data mapping and panel flags."""

    def test_colour_extracts_as_argb(self, handlers):
        swatch = ColourSwatch()
        swatch.swatch_colour = QColor(10, 20, 30, 40)
        assert handlers.extract(swatch, "SwatchColour") == "argb:40,10,20,30"

    @pytest.mark.parametrize("text", ["argb:255,1,2,3", "1,2,3", "255,1,2,3", "#010203"])
    def test_colour_apply_forms(self, handlers, text):
        swatch = ColourSwatch()
        handlers.apply(swatch, "SwatchColour", text)
        assert (swatch.swatch_colour.red(), swatch.swatch_colour.green(),
                swatch.swatch_colour.blue()) == (1, 2, 3)

    def test_font(self, handlers):
        panel = Panel()
        assert handlers.extract(panel, "Font") == "Courier New, 10pt"
        handlers.apply(panel, "Font", "Arial, 12.5pt")
        assert isinstance(panel.font, QFont)
        assert panel.font.pointSizeF() == 12.5

    def test_data_mapping(self, handlers):
        param = NumberParam()
        handlers.apply(param, "DataMapping", "graft")
        assert param.data_mapping is DataMapping.GRAFT
        handlers.apply(param, "DataMapping", 1)
        assert handlers.extract(param, "DataMapping") == "Flatten"

    def test_default_alignment_is_absent(self, handlers):
        panel = Panel()
        assert handlers.extract(panel, "Alignment") is ABSENT
        handlers.apply(panel, "Alignment", "Right")
        assert handlers.extract(panel, "Alignment") == "Right"

    def test_panel_flags(self, handlers):
        panel = Panel()
        handlers.apply(panel, "DrawPaths", "false")
        assert panel.draw_paths is False
        assert handlers.extract(panel, "DrawPaths") is False


class TestPersistentData:
    """Internalised data through the property bag."""

    def test_round_trip(self, handlers):
        param = NumberParam()
        param.set_persistent_data(DataTree({(0,): [1.5, 2.5]}))
        wire = handlers.extract(param, "PersistentData")
        assert wire == {"{0}": {"{0}(0)": 1.5, "{0}(1)": 2.5}}
        target = NumberParam()
        handlers.apply(target, "PersistentData", wire)
        assert target.persistent_data == param.persistent_data

    def test_empty_tree_is_absent(self, handlers):
        assert handlers.extract(NumberParam(), "PersistentData") is ABSENT


class _Exploding(PropertyHandler):
    priority = 500

    def can_handle(self, node, name):
        return name == "Value"

    def extract(self, node, name):
        raise RuntimeError("boom")


class _Upper(PropertyHandler):
    priority = 500

    def can_handle(self, node, name):
        return name == "NickName"

    def extract(self, node, name):
        return node.nick_name.upper()


class TestRegistry:
    """Priority routing and error isolation."""

    def test_order_is_descending_priority(self, handlers):
        priorities = [h.priority for h in handlers.handlers()]
        assert priorities == sorted(priorities, reverse=True)
        assert isinstance(handlers.handlers()[-1], DefaultPropertyHandler)

    def test_higher_priority_wins(self, handlers):
        handlers.register(_Upper())
        assert handlers.extract(NumberParam("abc"), "NickName") == "ABC"

    def test_registration_order_breaks_ties(self, registry):
        first, second = _Upper(), _Upper()
        reg = PropertyHandlerRegistry([first, second])
        assert reg.handler_for(NumberParam(), "NickName") is first

    def test_unregister(self, handlers):
        upper = handlers.register(_Upper())
        assert handlers.unregister(upper)
        assert not handlers.unregister(upper)
        assert handlers.extract(NumberParam("abc"), "NickName") == "abc"

    def test_failure_isolated_and_reported(self, handlers):
        handlers.register(_Exploding())
        toggle = BooleanToggle(nick_name="Switch")
        toggle.locked = True
        report = ConversionReport()
        bag = handlers.extract_properties(toggle, ["Value", "Locked"], report)
        assert bag == {"Locked": True}
        assert len(report) == 1
        warning = report.warnings[0]
        assert warning.source == "_Exploding"
        assert warning.field == "Value"
        assert "boom" in warning.message

    def test_unknown_property_has_no_handler(self, handlers):
        assert handlers.handler_for(NumberParam(), "Nonexistent") is None
        assert not handlers.apply(NumberParam(), "Nonexistent", 1)

    def test_apply_properties_returns_written_names(self, handlers):
        slider = NumberSlider()
        written = handlers.apply_properties(slider, {"Range": 5, "Decimals": 2, "NickName": "s"})
        assert written == ["Decimals", "NickName"]
