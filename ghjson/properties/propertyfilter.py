# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

propertyfilter.py
-----------------
Declarative selection of the properties that take part in a
serialization profile.

A :class:`PropertyFilterRule` names which property groups are in play
(core, parameter-level, component-level, and family categories) plus
explicit include / exclude lists.  The three built-in contexts are
three rule instances; custom rules go through exactly the same code.

Family categories are looked up from a static table keyed by the
node's ``KIND_FAMILY``.  Supporting a new family means adding one entry
to :data:`FAMILY_CATEGORIES` (and its handler), never editing the filter.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, Flag
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ghjson.host.hostobjects import DocumentObject
from ghjson.logger import get_logger

log = get_logger("PropertyFilter")


# ==============================================================================
# CONTEXTS & CATEGORIES
# ==============================================================================

class SerializationContext(Enum):
    STANDARD = "Standard"
    OPTIMIZED = "Optimized"
    LITE = "Lite"


class ComponentCategory(Flag):
    NONE = 0
    PANEL = 1 << 0
    SCRIBBLE = 1 << 1
    SLIDER = 1 << 2
    MULTIDIMENSIONAL_SLIDER = 1 << 3
    VALUE_LIST = 1 << 4
    BUTTON = 1 << 5
    BOOLEAN_TOGGLE = 1 << 6
    COLOUR_SWATCH = 1 << 7
    SCRIPT = 1 << 8
    GEOMETRY_PIPELINE = 1 << 9
    GRAPH_MAPPER = 1 << 10
    PATH_MAPPER = 1 << 11
    COLOR_WHEEL = 1 << 12
    DATA_RECORDER = 1 << 13
    ITEM_PICKER = 1 << 14

    ESSENTIAL = PANEL | SCRIBBLE | SLIDER | VALUE_LIST | SCRIPT
    UI = PANEL | SCRIBBLE | BUTTON | BOOLEAN_TOGGLE | COLOUR_SWATCH | COLOR_WHEEL
    ALL = (1 << 15) - 1


# ==============================================================================
# STATIC TABLES
# ==============================================================================

GLOBAL_BLACKLIST: FrozenSet[str] = frozenset({
    "VolatileData", "IsValid", "IsValidWhyNot", "TypeDescription", "TypeName",
    "Boundingbox", "ClippingBox", "ReferenceID", "IsReferencedGeometry",
    "IsGeometryLoaded", "QC_Type", "BoxName", "BoxLeft", "BoxRight",
    "Value", "IsVisible", "humanReadable", "Properties",
})

CORE_PROPERTIES: Tuple[str, ...] = ("NickName", "Locked", "PersistentData")

PARAMETER_PROPERTIES: Tuple[str, ...] = (
    "DataMapping", "Simplify", "Reverse", "Expression",
    "Invert", "Unitize", "Hidden", "Locked",
)

COMPONENT_PROPERTIES: Tuple[str, ...] = ("Hidden", "DisplayName")

CATEGORY_PROPERTIES: Dict[ComponentCategory, Tuple[str, ...]] = {
    ComponentCategory.PANEL: ("Font", "Alignment", "Multiline", "DrawIndices",
                              "DrawPaths", "SpecialCodes"),
    ComponentCategory.SCRIBBLE: ("Text", "Font", "Corners"),
    ComponentCategory.SLIDER: ("CurrentValue", "Minimum", "Maximum", "Range",
                               "Decimals", "Rounding", "Limit", "DisplayFormat"),
    ComponentCategory.MULTIDIMENSIONAL_SLIDER: ("SliderMode", "XInterval", "YInterval",
                                                "ZInterval", "X", "Y", "Z"),
    ComponentCategory.VALUE_LIST: ("ListMode", "ListItems", "SelectedIndices"),
    ComponentCategory.BUTTON: ("ExpressionNormal", "ExpressionPressed"),
    ComponentCategory.BOOLEAN_TOGGLE: (),
    ComponentCategory.COLOUR_SWATCH: (),
    ComponentCategory.SCRIPT: ("Script", "MarshInputs", "MarshOutputs", "VariableName"),
    ComponentCategory.GEOMETRY_PIPELINE: ("LayerFilter", "NameFilter", "TypeFilter",
                                          "IncludeLocked", "IncludeHidden",
                                          "GroupByLayer", "GroupByType"),
    ComponentCategory.GRAPH_MAPPER: ("GraphType",),
    ComponentCategory.PATH_MAPPER: ("Lexers",),
    ComponentCategory.COLOR_WHEEL: ("State",),
    ComponentCategory.DATA_RECORDER: ("DataLimit", "RecordData"),
    ComponentCategory.ITEM_PICKER: ("TreePath", "TreeIndex"),
}

# KIND_FAMILY → category
FAMILY_CATEGORIES: Dict[str, ComponentCategory] = {
    "panel": ComponentCategory.PANEL,
    "scribble": ComponentCategory.SCRIBBLE,
    "slider": ComponentCategory.SLIDER,
    "md-slider": ComponentCategory.MULTIDIMENSIONAL_SLIDER,
    "value-list": ComponentCategory.VALUE_LIST,
    "button": ComponentCategory.BUTTON,
    "toggle": ComponentCategory.BOOLEAN_TOGGLE,
    "colour-swatch": ComponentCategory.COLOUR_SWATCH,
    "script": ComponentCategory.SCRIPT,
    "geometry-pipeline": ComponentCategory.GEOMETRY_PIPELINE,
    "graph-mapper": ComponentCategory.GRAPH_MAPPER,
    "path-mapper": ComponentCategory.PATH_MAPPER,
    "color-wheel": ComponentCategory.COLOR_WHEEL,
    "data-recorder": ComponentCategory.DATA_RECORDER,
    "item-picker": ComponentCategory.ITEM_PICKER,
}

RUNTIME_PROPERTIES: Tuple[str, ...] = (
    "VolatileData", "IsValid", "IsValidWhyNot", "TypeDescription", "TypeName",
    "Boundingbox", "ClippingBox", "ReferenceID", "IsReferencedGeometry",
    "IsGeometryLoaded", "QC_Type",
)

# ── Irrelevance pruning ──────────────────────────────────────────────────────

# Integer / enum flags whose zero value means "not set"
ZERO_DEFAULT_PROPERTIES: FrozenSet[str] = frozenset({
    "DataMapping", "Alignment", "Decimals", "ListMode",
})

# Family → properties whose "empty" value is real state and must be kept
PRUNE_EXCEPTIONS: Dict[str, FrozenSet[str]] = {
    "slider": frozenset({"Decimals"}),
    "value-list": frozenset({"ListMode"}),
    "panel": frozenset({"Multiline", "DrawIndices", "DrawPaths"}),
}


# ==============================================================================
# RULES
# ==============================================================================

@dataclass(frozen=True)
class PropertyFilterRule:
    include_core: bool = True
    include_parameters: bool = True
    include_components: bool = True
    include_categories: ComponentCategory = ComponentCategory.NONE
    additional_includes: FrozenSet[str] = field(default_factory=frozenset)
    additional_excludes: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def for_context(cls, context: SerializationContext) -> "PropertyFilterRule":
        return _CONTEXT_RULES[SerializationContext(context)]


_STANDARD_RULE = PropertyFilterRule(
    include_categories=ComponentCategory.ESSENTIAL | ComponentCategory.UI,
)

_CONTEXT_RULES: Dict[SerializationContext, PropertyFilterRule] = {
    SerializationContext.STANDARD: _STANDARD_RULE,
    SerializationContext.OPTIMIZED: replace(
        _STANDARD_RULE, additional_excludes=frozenset({"PersistentData"})),
    SerializationContext.LITE: PropertyFilterRule(
        include_components=False,
        include_categories=ComponentCategory.ESSENTIAL,
        additional_excludes=frozenset({
            "ComponentGuid", "InstanceGuid", "Selected", "DisplayName",
            "Alignment", "Font", "SpecialCodes", "DrawIndices", "DrawPaths",
            "PersistentData",
        }),
    ),
}


# ==============================================================================
# FILTER
# ==============================================================================

class PropertyFilter:
    """
    Decides which named properties of a node take part in serialization.

    Example::

        flt = PropertyFilter(SerializationContext.STANDARD)
        flt.allowed_properties(slider)   # ['NickName', 'Locked', ..., 'CurrentValue', ...]
    """

    def __init__(
        self,
        rule: Union[PropertyFilterRule, SerializationContext, str] = SerializationContext.STANDARD,
        family_categories: Optional[Mapping[str, ComponentCategory]] = None,
    ) -> None:
        if not isinstance(rule, PropertyFilterRule):
            rule = PropertyFilterRule.for_context(SerializationContext(rule))
        self.rule = rule
        self.family_categories = dict(FAMILY_CATEGORIES if family_categories is None
                                      else family_categories)

    @classmethod
    def create_custom(cls, rule: PropertyFilterRule) -> "PropertyFilter":
        return cls(rule)

    # ── Selection ────────────────────────────────────────────────────────

    def category_of(self, node: DocumentObject) -> ComponentCategory:
        family = getattr(node, "KIND_FAMILY", None)
        return self.family_categories.get(family, ComponentCategory.NONE) if family else ComponentCategory.NONE

    def _candidates(self, node: DocumentObject) -> Iterable[str]:
        rule = self.rule
        if rule.include_core:
            yield from CORE_PROPERTIES
        if node.is_parameter:
            if rule.include_parameters:
                yield from PARAMETER_PROPERTIES
        elif rule.include_components:
            yield from COMPONENT_PROPERTIES

        category = self.category_of(node)
        if category and category in rule.include_categories:
            yield from CATEGORY_PROPERTIES.get(category, ())

        yield from sorted(rule.additional_includes)

    def allowed_properties(self, node: DocumentObject) -> List[str]:
        """Ordered, de-duplicated names eligible for extraction on ``node``."""
        excluded = GLOBAL_BLACKLIST | self.rule.additional_excludes
        result: List[str] = []
        for name in self._candidates(node):
            if name in excluded or name in result:
                continue
            if node.has_property(name):
                result.append(name)
        return result

    def should_include(self, name: str, node: DocumentObject) -> bool:
        return name in self.allowed_properties(node)

    # ── Pruning ──────────────────────────────────────────────────────────

    def prune_irrelevant(self, node: DocumentObject, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Drop values equal to their kind's "absent" default."""
        keep = PRUNE_EXCEPTIONS.get(getattr(node, "KIND_FAMILY", None) or "", frozenset())
        result: Dict[str, Any] = {}
        for name, value in values.items():
            if name not in keep and self._is_irrelevant(node, name, value):
                continue
            result[name] = value
        return result

    @staticmethod
    def _is_irrelevant(node: DocumentObject, name: str, value: Any) -> bool:
        if value is None or value is False:
            return True
        if name in ZERO_DEFAULT_PROPERTIES and (value == "None" or
                                                (value == 0 and not isinstance(value, bool))):
            return True
        if name == "Expression" and value == "":
            return True
        if name == "DisplayName" and value in ("", node.name, node.nick_name):
            return True
        return False


# ==============================================================================
# BUILDER
# ==============================================================================

class PropertyFilterBuilder:
    """
    Fluent construction of custom rules::

        rule = (PropertyFilterBuilder.from_context(SerializationContext.STANDARD)
                .with_categories(ComponentCategory.SLIDER)
                .exclude("PersistentData")
                .build())
    """

    def __init__(self, rule: Optional[PropertyFilterRule] = None) -> None:
        self._rule = rule or PropertyFilterRule()

    @classmethod
    def create(cls) -> "PropertyFilterBuilder":
        return cls()

    @classmethod
    def from_context(cls, context: SerializationContext) -> "PropertyFilterBuilder":
        return cls(PropertyFilterRule.for_context(context))

    def _set(self, **changes) -> "PropertyFilterBuilder":
        self._rule = replace(self._rule, **changes)
        return self

    # ── Groups ───────────────────────────────────────────────────────────

    def with_core(self, include: bool = True) -> "PropertyFilterBuilder":
        return self._set(include_core=include)

    def with_parameters(self, include: bool = True) -> "PropertyFilterBuilder":
        return self._set(include_parameters=include)

    def with_components(self, include: bool = True) -> "PropertyFilterBuilder":
        return self._set(include_components=include)

    def with_categories(self, categories: ComponentCategory) -> "PropertyFilterBuilder":
        return self._set(include_categories=categories)

    def add_categories(self, categories: ComponentCategory) -> "PropertyFilterBuilder":
        return self._set(include_categories=self._rule.include_categories | categories)

    def remove_categories(self, categories: ComponentCategory) -> "PropertyFilterBuilder":
        return self._set(include_categories=self._rule.include_categories & ~categories)

    def with_essential_categories(self) -> "PropertyFilterBuilder":
        return self.with_categories(ComponentCategory.ESSENTIAL)

    def with_ui_categories(self) -> "PropertyFilterBuilder":
        return self.with_categories(ComponentCategory.UI)

    # ── Explicit names ───────────────────────────────────────────────────

    def include(self, *names: str) -> "PropertyFilterBuilder":
        return self._set(additional_includes=self._rule.additional_includes | frozenset(names),
                         additional_excludes=self._rule.additional_excludes - frozenset(names))

    def exclude(self, *names: str) -> "PropertyFilterBuilder":
        return self._set(additional_excludes=self._rule.additional_excludes | frozenset(names),
                         additional_includes=self._rule.additional_includes - frozenset(names))

    def configure(self, fn: Callable[[PropertyFilterRule], PropertyFilterRule]) -> "PropertyFilterBuilder":
        self._rule = fn(self._rule)
        return self

    # ── Presets ──────────────────────────────────────────────────────────

    def minimal(self) -> "PropertyFilterBuilder":
        return (self.with_core(True).with_parameters(False).with_components(False)
                .with_categories(ComponentCategory.NONE))

    def maximum(self) -> "PropertyFilterBuilder":
        return (self.with_core(True).with_parameters(True).with_components(True)
                .with_categories(ComponentCategory.ALL))

    def for_ai(self) -> "PropertyFilterBuilder":
        return (self.with_core(True).with_parameters(True).with_components(True)
                .with_essential_categories()
                .exclude("VolatileData", "IsValid", "TypeDescription"))

    def for_debugging(self) -> "PropertyFilterBuilder":
        return self.maximum().include("InstanceDescription", "ComponentGuid", "InstanceGuid")

    def exclude_runtime(self) -> "PropertyFilterBuilder":
        return self.exclude(*RUNTIME_PROPERTIES)

    # ── Output ───────────────────────────────────────────────────────────

    def build(self) -> PropertyFilterRule:
        return self._rule

    def build_filter(self) -> PropertyFilter:
        return PropertyFilter.create_custom(self._rule)
