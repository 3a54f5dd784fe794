# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

models.py
---------
Serialized records.  Every field defaults to ``None`` ("absent"), which
is what the first-writer-wins merge keys on; ``to_dict()`` omits absent
fields so documents stay compact.

Record shape::

    {
        "name": "Number Slider", "componentGuid": "57da07bd-...",
        "instanceGuid": "...", "id": 3, "pivot": "120,40",
        "inputSettings": [...], "outputSettings": [...],
        "componentState": {
            "selected": true, "locked": false, "hidden": false,
            "extensions": {"gh.numberslider": {"value": "5.5<0,10>"}},
            "CurrentValue": "5.5<0,10>"          # filtered property bag
        },
        "errors": [...], "warnings": [...], "remarks": [...]
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ghjson.errors import StructuralError


def _prune(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None and v != [] and v != {}}


# ==============================================================================
# PARAMETER SETTINGS
# ==============================================================================

# python attribute → JSON key
_PARAM_KEYS: Dict[str, str] = {
    "parameter_name": "parameterName",
    "variable_name": "variableName",
    "nick_name": "nickName",
    "description": "description",
    "data_mapping": "dataMapping",
    "expression": "expression",
    "access": "access",
    "type_hint": "typeHint",
    "is_principal": "isPrincipal",
    "is_required": "isRequired",
    "is_reparameterized": "isReparameterized",
    "is_reversed": "isReversed",
    "is_simplified": "isSimplified",
    "is_inverted": "isInverted",
    "is_unitized": "isUnitized",
    "internalized_data": "internalizedData",
}


@dataclass
class ParameterSettings:
    parameter_name: Optional[str] = None
    variable_name: Optional[str] = None
    nick_name: Optional[str] = None
    description: Optional[str] = None
    data_mapping: Optional[str] = None
    expression: Optional[str] = None
    access: Optional[str] = None
    type_hint: Optional[str] = None
    is_principal: Optional[bool] = None
    is_required: Optional[bool] = None
    is_reparameterized: Optional[bool] = None
    is_reversed: Optional[bool] = None
    is_simplified: Optional[bool] = None
    is_inverted: Optional[bool] = None
    is_unitized: Optional[bool] = None
    internalized_data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _prune({key: getattr(self, attr) for attr, key in _PARAM_KEYS.items()})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterSettings":
        return cls(**{attr: data.get(key) for attr, key in _PARAM_KEYS.items()})


# ==============================================================================
# COMPONENT STATE
# ==============================================================================

@dataclass
class ComponentState:
    """
    Core flags, namespaced extensions and the filtered property bag.

    ``properties`` is written as additional keys of the JSON object.
    """
    selected: Optional[bool] = None
    locked: Optional[bool] = None
    hidden: Optional[bool] = None
    extensions: Dict[str, Any] = field(default_factory=dict)
    properties: Dict[str, Any] = field(default_factory=dict)

    CORE_KEYS = ("selected", "locked", "hidden")

    def is_empty(self) -> bool:
        return (self.selected is None and self.locked is None and self.hidden is None
                and not self.extensions and not self.properties)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for key in self.CORE_KEYS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.extensions:
            data["extensions"] = dict(self.extensions)
        for name, value in self.properties.items():
            if name not in data and name != "extensions":
                data[name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentState":
        state = cls(
            selected=data.get("selected"),
            locked=data.get("locked"),
            hidden=data.get("hidden"),
            extensions=dict(data.get("extensions") or {}),
        )
        for name, value in data.items():
            if name not in cls.CORE_KEYS and name != "extensions":
                state.properties[name] = value
        return state


# ==============================================================================
# NODE RECORD
# ==============================================================================

@dataclass
class NodeRecord:
    """Serialized form of one canvas node."""
    name: Optional[str] = None
    library: Optional[str] = None
    nick_name: Optional[str] = None
    component_guid: Optional[str] = None
    instance_guid: Optional[str] = None
    id: Optional[int] = None
    pivot: Optional[str] = None
    input_settings: List[ParameterSettings] = field(default_factory=list)
    output_settings: List[ParameterSettings] = field(default_factory=list)
    component_state: ComponentState = field(default_factory=ComponentState)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    remarks: List[str] = field(default_factory=list)

    @property
    def kind_key(self) -> str:
        return (self.component_guid or self.name or "").lower()

    def validate_identity(self) -> None:
        """Raise :class:`StructuralError` when the record names no kind."""
        if not self.name and not self.component_guid:
            raise StructuralError("Record has neither 'name' nor 'componentGuid'")

    def extension(self, key: str) -> Optional[Any]:
        return self.component_state.extensions.get(key)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "library": self.library,
            "nickName": self.nick_name,
            "componentGuid": self.component_guid,
            "instanceGuid": self.instance_guid,
            "id": self.id,
            "pivot": self.pivot,
            "inputSettings": [s.to_dict() for s in self.input_settings],
            "outputSettings": [s.to_dict() for s in self.output_settings],
            "componentState": None if self.component_state.is_empty() else self.component_state.to_dict(),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "remarks": list(self.remarks),
        }
        return _prune(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeRecord":
        if not isinstance(data, dict):
            raise StructuralError(f"Node record must be an object, got {type(data).__name__}")
        raw_id = data.get("id")
        if raw_id is not None and (isinstance(raw_id, bool) or not isinstance(raw_id, int)):
            raise StructuralError(f"Record id must be an integer, got {raw_id!r}")
        return cls(
            name=data.get("name"),
            library=data.get("library"),
            nick_name=data.get("nickName"),
            component_guid=data.get("componentGuid"),
            instance_guid=data.get("instanceGuid"),
            id=raw_id,
            pivot=data.get("pivot"),
            input_settings=[ParameterSettings.from_dict(s) for s in data.get("inputSettings") or []],
            output_settings=[ParameterSettings.from_dict(s) for s in data.get("outputSettings") or []],
            component_state=ComponentState.from_dict(data.get("componentState") or {}),
            errors=list(data.get("errors") or []),
            warnings=list(data.get("warnings") or []),
            remarks=list(data.get("remarks") or []),
        )


# ==============================================================================
# CONNECTIONS & DOCUMENT
# ==============================================================================

@dataclass(frozen=True)
class ConnectionEndpoint:
    id: int
    param_name: Optional[str] = None
    param_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _prune({"id": self.id, "paramName": self.param_name,
                       "paramIndex": self.param_index})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionEndpoint":
        if not isinstance(data, dict) or not isinstance(data.get("id"), int):
            raise StructuralError(f"Connection endpoint needs an integer 'id': {data!r}")
        return cls(data["id"], data.get("paramName"), data.get("paramIndex"))


@dataclass(frozen=True)
class Connection:
    source: ConnectionEndpoint
    target: ConnectionEndpoint

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.source.to_dict(), "to": self.target.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Connection":
        try:
            return cls(ConnectionEndpoint.from_dict(data["from"]),
                       ConnectionEndpoint.from_dict(data["to"]))
        except (KeyError, TypeError) as exc:
            raise StructuralError(f"Malformed connection {data!r}") from exc


@dataclass
class Document:
    schema_version: str = "1.0"
    metadata: Dict[str, Any] = field(default_factory=dict)
    components: List[NodeRecord] = field(default_factory=list)
    connections: List[Connection] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"schemaVersion": self.schema_version}
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        data["components"] = [c.to_dict() for c in self.components]
        if self.connections:
            data["connections"] = [c.to_dict() for c in self.connections]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        if not isinstance(data, dict):
            raise StructuralError("Document must be a JSON object")
        components = data.get("components", [])
        if not isinstance(components, list):
            raise StructuralError("'components' must be a list")
        return cls(
            schema_version=str(data.get("schemaVersion", "1.0")),
            metadata=dict(data.get("metadata") or {}),
            components=[NodeRecord.from_dict(c) for c in components],
            connections=[Connection.from_dict(c) for c in data.get("connections") or []],
        )


