# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

core.py
-------
Handlers every node goes through: identity, pivot, parameter settings,
internalised data, runtime messages, and the default handler that
carries core flags, the filtered property bag and any extension
namespaces this build does not understand.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from ghjson.datatypes.codecs import format_number, parse_number
from ghjson.datatypes.datatree import flatten, unflatten
from ghjson.errors import MalformedPayloadError
from ghjson.handlers.objecthandler import (
    PRIORITY_CORE, PRIORITY_DEFAULT, ApplyContext, ObjectHandler,
    SerializeContext, extension_field, property_field,
)
from ghjson.host.hostobjects import (
    Access, Component, DataMapping, DocumentObject, Param, PersistentParam,
)
from ghjson.host.paramkinds import GenericParam
from ghjson.logger import get_logger, log_handler_failure
from ghjson.models import ComponentState, NodeRecord, ParameterSettings
from ghjson.properties.propertyhandlers import enum_to_wire, to_bool
from ghjson.properties.stringconverter import parse_data_mapping

log = get_logger("CoreHandlers")

# Bag properties that already travel as componentState flags
_STATE_PROPERTIES = ("Locked", "Hidden")


# ==============================================================================
# DEFAULT
# ==============================================================================

class DefaultObjectHandler(ObjectHandler):
    """
    Core flags, the filtered property bag and foreign extensions.

    Runs last on serialize (lowest priority) and first on apply, so
    anything a specialised handler claims is left alone.  Properties a
    family handler already wrote into its namespace are not repeated in
    the bag.
    """

    priority = PRIORITY_DEFAULT

    def can_handle(self, node: DocumentObject) -> bool:
        return True

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        state = ComponentState(
            selected=True if node.selected else None,
            locked=True if getattr(node, "locked", False) else None,
            hidden=True if getattr(node, "hidden", False) else None,
        )

        # Properties a family namespace already carries stay out of the bag
        skip = set(_STATE_PROPERTIES) | ctx.covered_properties
        names = [n for n in ctx.property_filter.allowed_properties(node) if n not in skip]
        values = ctx.properties.extract_properties(node, names, ctx.report)
        if ctx.options.prune_defaults:
            values = ctx.property_filter.prune_irrelevant(node, values)
        state.properties.update(values)

        # Re-emitted verbatim; family handlers win any overlap in the merge
        state.extensions.update(node.foreign_extensions)
        return NodeRecord(component_state=state)

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        state = record.component_state
        if ctx.options.apply_component_state:
            self._apply_flags(state, node, ctx)
            self._store_foreign(state, node, ctx)

        if ctx.options.apply_properties and state.properties:
            values = {name: value for name, value in state.properties.items()
                      if ctx.may_apply(self, property_field(name))}
            ctx.properties.apply_properties(node, values, ctx.report)

    def _apply_flags(self, state: ComponentState, node: DocumentObject, ctx: ApplyContext) -> None:
        if state.selected is not None and ctx.may_apply(self, "selected"):
            node.selected = to_bool(state.selected)
        if state.locked is not None and hasattr(node, "locked") and ctx.may_apply(self, "locked"):
            node.locked = to_bool(state.locked)
        if state.hidden is not None and hasattr(node, "hidden") and ctx.may_apply(self, "hidden"):
            node.hidden = to_bool(state.hidden)

    def _store_foreign(self, state: ComponentState, node: DocumentObject, ctx: ApplyContext) -> None:
        for key, payload in state.extensions.items():
            if ctx.owner_of(extension_field(key)) is not None:
                continue
            if key in ctx.known_extensions:
                log.debug(f"Extension '{key}' does not apply to {node}; keeping it")
            else:
                log.info(f"Preserving unknown extension '{key}' on {node}")
            node.foreign_extensions[key] = payload


# ==============================================================================
# IDENTITY & LAYOUT
# ==============================================================================

class IdentificationHandler(ObjectHandler):
    priority = PRIORITY_CORE

    def can_handle(self, node: DocumentObject) -> bool:
        return True

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        return NodeRecord(
            name=node.name,
            library=node.LIBRARY or None,
            nick_name=node.nick_name if node.nick_name and node.nick_name != node.name else None,
            component_guid=node.component_guid or None,
            instance_guid=node.instance_guid,
        )

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        return ("nickName", "instanceGuid")

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        if record.nick_name:
            node.nick_name = record.nick_name
        if ctx.options.preserve_instance_guids and record.instance_guid:
            node.instance_guid = record.instance_guid


def format_pivot(pivot: Tuple[float, float]) -> str:
    return f"{format_number(pivot[0])},{format_number(pivot[1])}"


def parse_pivot(value: Any) -> Tuple[float, float]:
    """Accept ``"x,y"``, ``[x, y]`` or ``{"X": x, "Y": y}``."""
    if isinstance(value, str):
        parts = value.split(",")
        if len(parts) == 2:
            return parse_number(parts[0]), parse_number(parts[1])
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        return float(value[0]), float(value[1])
    elif isinstance(value, dict):
        x, y = value.get("X", value.get("x")), value.get("Y", value.get("y"))
        if x is not None and y is not None:
            return float(x), float(y)
    raise MalformedPayloadError(f"Invalid pivot {value!r}")


class PivotHandler(ObjectHandler):
    priority = PRIORITY_CORE

    def can_handle(self, node: DocumentObject) -> bool:
        return True

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        return NodeRecord(pivot=format_pivot(node.pivot))

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        return ("pivot",)

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        if record.pivot is not None:
            node.pivot = parse_pivot(record.pivot)


# ==============================================================================
# PARAMETERS
# ==============================================================================

def _flag(value: bool) -> Optional[bool]:
    return True if value else None


def _match_params(params: List[Param], settings: List[ParameterSettings]):
    """Pair settings with params by name, falling back to position."""
    by_name = {p.param_name: p for p in params}
    for index, entry in enumerate(settings):
        param = by_name.get(entry.parameter_name) if entry.parameter_name else None
        if param is None and index < len(params) and entry.parameter_name is None:
            param = params[index]
        if param is None:
            log.debug(f"No parameter matches settings '{entry.parameter_name}' (index {index})")
            continue
        yield param, entry


class ParameterSettingsHandler(ObjectHandler):
    """
    Input and output settings of components.

    A standalone parameter node is written as a single output entry
    carrying its identity; its modifiers travel in the property bag.
    """

    priority = PRIORITY_CORE

    def can_handle(self, node: DocumentObject) -> bool:
        return isinstance(node, (Component, Param))

    # ── Serialize ────────────────────────────────────────────────────────

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        if isinstance(node, Param):
            return NodeRecord(output_settings=[self._identity(node)])
        script = getattr(node, "VARIABLE_PARAMS", False)
        return NodeRecord(
            input_settings=[self._settings(p, script) for p in node.inputs],
            output_settings=[self._settings(p, script) for p in node.outputs],
        )

    @staticmethod
    def _identity(param: Param) -> ParameterSettings:
        return ParameterSettings(
            parameter_name=param.param_name,
            description=param.description or None,
            access=param.access.value,
            type_hint=param.type_hint,
        )

    def _settings(self, param: Param, script: bool) -> ParameterSettings:
        settings = self._identity(param)
        settings.variable_name = param.nick_name if script else None
        settings.nick_name = (param.nick_name
                              if param.nick_name and param.nick_name != param.param_name else None)
        settings.data_mapping = (enum_to_wire(param.data_mapping)
                                 if param.data_mapping is not DataMapping.NONE else None)
        settings.expression = param.expression or None
        settings.is_principal = _flag(param.is_principal)
        settings.is_required = _flag(not param.optional)
        settings.is_reversed = _flag(param.reverse)
        settings.is_simplified = _flag(param.simplify)
        settings.is_inverted = _flag(param.invert)
        settings.is_unitized = _flag(param.unitize)
        return settings

    # ── Apply ────────────────────────────────────────────────────────────

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        return ("inputSettings", "outputSettings")

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        if not ctx.options.apply_parameter_settings:
            return
        if isinstance(node, Param):
            for entry in record.output_settings[:1]:
                self._apply_identity(node, entry)
            return

        if getattr(node, "VARIABLE_PARAMS", False):
            self._rebuild(node, record)
        for param, entry in _match_params(node.inputs, record.input_settings):
            self._apply(param, entry)
        for param, entry in _match_params(node.outputs, record.output_settings):
            self._apply(param, entry)

    @staticmethod
    def _rebuild(node: Component, record: NodeRecord) -> None:
        if record.input_settings:
            node.inputs = []
            for entry in record.input_settings:
                node.add_input(GenericParam(entry.parameter_name or entry.variable_name))
        if record.output_settings:
            node.outputs = []
            for entry in record.output_settings:
                node.add_output(GenericParam(entry.parameter_name or entry.variable_name))

    @staticmethod
    def _apply_identity(param: Param, entry: ParameterSettings) -> None:
        if entry.description is not None:
            param.description = entry.description
        if entry.access is not None:
            param.access = Access(str(entry.access).lower())
        if entry.type_hint is not None:
            param.type_hint = entry.type_hint

    def _apply(self, param: Param, entry: ParameterSettings) -> None:
        self._apply_identity(param, entry)
        nick = entry.nick_name or entry.variable_name
        if nick:
            param.nick_name = nick
        if entry.data_mapping is not None:
            param.data_mapping = parse_data_mapping(entry.data_mapping)
        if entry.expression is not None:
            param.expression = entry.expression
        if entry.is_principal is not None:
            param.is_principal = to_bool(entry.is_principal)
        if entry.is_required is not None:
            param.optional = not to_bool(entry.is_required)
        if entry.is_reversed is not None:
            param.reverse = to_bool(entry.is_reversed)
        if entry.is_simplified is not None:
            param.simplify = to_bool(entry.is_simplified)
        if entry.is_inverted is not None:
            param.invert = to_bool(entry.is_inverted)
        if entry.is_unitized is not None:
            param.unitize = to_bool(entry.is_unitized)


class InternalizedDataHandler(ObjectHandler):
    """Internalised data of component inputs, as data-tree JSON."""

    priority = PRIORITY_CORE

    def can_handle(self, node: DocumentObject) -> bool:
        return isinstance(node, Component)

    def serialize(self, node: Component, ctx: SerializeContext) -> NodeRecord:
        settings = [
            ParameterSettings(parameter_name=p.param_name,
                              internalized_data=flatten(p.persistent_data, ctx.datatypes))
            for p in node.inputs
            if isinstance(p, PersistentParam) and not p.persistent_data.is_empty()
        ]
        return NodeRecord(input_settings=settings)

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        return ("internalizedData",)

    def deserialize(self, record: NodeRecord, node: Component, ctx: ApplyContext) -> None:
        if not ctx.options.apply_parameter_settings:
            return
        for param, entry in _match_params(node.inputs, record.input_settings):
            if entry.internalized_data is None or not isinstance(param, PersistentParam):
                continue
            try:
                param.set_persistent_data(
                    unflatten(entry.internalized_data, param.coerce_item, ctx.datatypes))
            except Exception as exc:
                message = log_handler_failure(log, self.name, node, exc, field=param.param_name)
                ctx.report.add_failure(self.name, node, exc, message, field=param.param_name)


# ==============================================================================
# RUNTIME MESSAGES
# ==============================================================================

class RuntimeMessagesHandler(ObjectHandler):
    priority = PRIORITY_CORE

    def can_handle(self, node: DocumentObject) -> bool:
        return True

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        messages = node.runtime_messages
        return NodeRecord(
            errors=list(messages.get("error", [])),
            warnings=list(messages.get("warning", [])),
            remarks=list(messages.get("remark", [])),
        )

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        return ("errors", "warnings", "remarks")

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        if not ctx.options.apply_component_state:
            return
        for level, texts in (("error", record.errors), ("warning", record.warnings),
                             ("remark", record.remarks)):
            for text in texts:
                node.add_runtime_message(level, str(text))
