# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

hostobjects.py
--------------
In-memory host object model the engine converts to and from.

Property access goes through a declarative ``PROPERTIES`` table of
:class:`FieldDescriptor` entries instead of runtime introspection::

    class Panel(Param):
        PROPERTIES = {
            "Multiline": FieldDescriptor("multiline", bool),
            "Font":      FieldDescriptor("font", QFont),
        }

Tables are merged along the class hierarchy, so a new node kind only
declares the properties it adds.

Hierarchy::

    DocumentObject            nick name, selection, pivot, messages
      ├── ActiveObject        + locked
      │     ├── Param         + data mapping, flags, sources
      │     │     └── PersistentParam   + persistent data tree
      │     └── Component     + inputs / outputs, hidden
      └── (passive objects such as Scribble)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from ghjson.datatypes.datatree import DataTree
from ghjson.errors import MalformedPayloadError


# ==============================================================================
# ENUMS
# ==============================================================================

class DataMapping(Enum):
    NONE = "None"
    FLATTEN = "Flatten"
    GRAFT = "Graft"


class Access(Enum):
    ITEM = "item"
    LIST = "list"
    TREE = "tree"


# ==============================================================================
# FIELD DESCRIPTORS
# ==============================================================================

@dataclass(frozen=True)
class FieldDescriptor:
    """
    Maps a serialized property name onto an instance attribute.

    Attributes:
        attr:     Attribute name on the host object.
        kind:     Declared value type (drives conversion on apply).
        readonly: Reject writes through :meth:`DocumentObject.set_property`.
    """
    attr: str
    kind: Optional[type] = None
    readonly: bool = False


@lru_cache(maxsize=None)
def _property_table(cls: type) -> Dict[str, FieldDescriptor]:
    table: Dict[str, FieldDescriptor] = {}
    for klass in reversed(cls.__mro__):
        table.update(klass.__dict__.get("PROPERTIES", {}))
    return table


# ==============================================================================
# DOCUMENT OBJECTS
# ==============================================================================

class DocumentObject:
    """Base of every node kind that can live on the canvas."""

    COMPONENT_GUID: ClassVar[str] = ""
    NAME: ClassVar[str] = ""
    LIBRARY: ClassVar[str] = ""
    KIND_FAMILY: ClassVar[Optional[str]] = None
    PROPERTIES: ClassVar[Dict[str, FieldDescriptor]] = {
        "NickName": FieldDescriptor("nick_name", str),
        "InstanceGuid": FieldDescriptor("instance_guid", str, readonly=True),
        "ComponentGuid": FieldDescriptor("component_guid", str, readonly=True),
    }

    def __init__(self, nick_name: Optional[str] = None,
                 instance_guid: Optional[str] = None) -> None:
        self.instance_guid: str = instance_guid or str(uuid.uuid4())
        self.nick_name: str = nick_name or self.NAME
        self.selected: bool = False
        self.pivot: Tuple[float, float] = (0.0, 0.0)
        self.runtime_messages: Dict[str, List[str]] = {"error": [], "warning": [], "remark": []}
        # Extension payloads nobody in this build understands, kept verbatim
        self.foreign_extensions: Dict[str, Any] = {}

    # ── Identity ─────────────────────────────────────────────────────────

    @property
    def component_guid(self) -> str:
        return self.COMPONENT_GUID

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def is_parameter(self) -> bool:
        return False

    @property
    def kind_key(self) -> str:
        return (self.COMPONENT_GUID or self.NAME or type(self).__name__).lower()

    # ── Property access ──────────────────────────────────────────────────

    @classmethod
    def property_table(cls) -> Dict[str, FieldDescriptor]:
        return _property_table(cls)

    def property_names(self) -> List[str]:
        return list(self.property_table())

    def has_property(self, name: str) -> bool:
        return name in self.property_table()

    def property_type(self, name: str) -> Optional[type]:
        descriptor = self.property_table().get(name)
        return descriptor.kind if descriptor else None

    def get_property(self, name: str) -> Any:
        descriptor = self.property_table().get(name)
        if descriptor is None:
            raise KeyError(f"{self.NAME} has no property '{name}'")
        return getattr(self, descriptor.attr)

    def set_property(self, name: str, value: Any) -> None:
        descriptor = self.property_table().get(name)
        if descriptor is None:
            raise KeyError(f"{self.NAME} has no property '{name}'")
        if descriptor.readonly:
            raise AttributeError(f"Property '{name}' of {self.NAME} is read-only")
        setattr(self, descriptor.attr, value)

    # ── Runtime messages ─────────────────────────────────────────────────

    def add_runtime_message(self, level: str, text: str) -> None:
        self.runtime_messages.setdefault(level, []).append(text)

    def __str__(self) -> str:
        if self.nick_name and self.nick_name != self.NAME:
            return f"{self.NAME} '{self.nick_name}'"
        return self.NAME or type(self).__name__


class ActiveObject(DocumentObject):
    PROPERTIES = {"Locked": FieldDescriptor("locked", bool)}

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.locked: bool = False


# ==============================================================================
# PARAMETERS
# ==============================================================================

class Param(ActiveObject):
    """
    A typed input or output.  Standalone params are canvas nodes in
    their own right; params owned by a :class:`Component` are not.
    """

    LIBRARY = "Params"
    ITEM_TYPE: ClassVar[type] = object
    PROPERTIES = {
        "DataMapping": FieldDescriptor("data_mapping", DataMapping),
        "Simplify": FieldDescriptor("simplify", bool),
        "Reverse": FieldDescriptor("reverse", bool),
        "Expression": FieldDescriptor("expression", str),
        "Invert": FieldDescriptor("invert", bool),
        "Unitize": FieldDescriptor("unitize", bool),
        "Hidden": FieldDescriptor("hidden", bool),
    }

    def __init__(self, param_name: Optional[str] = None, nick_name: Optional[str] = None,
                 description: str = "", access: Access = Access.ITEM,
                 optional: bool = False, **kwargs) -> None:
        super().__init__(nick_name=nick_name or param_name, **kwargs)
        self.param_name: str = param_name or self.NAME
        self.description = description
        self.access = access
        self.optional = optional
        self.data_mapping = DataMapping.NONE
        self.simplify = False
        self.reverse = False
        self.expression = ""
        self.invert = False
        self.unitize = False
        self.hidden = False
        self.is_principal = False
        self.type_hint: Optional[str] = None
        self.sources: List[Param] = []
        self.owner: Optional[Component] = None

    @property
    def is_parameter(self) -> bool:
        return True

    @property
    def node(self) -> DocumentObject:
        """The canvas node this param belongs to (itself when standalone)."""
        return self.owner if self.owner is not None else self

    def add_source(self, source: "Param") -> None:
        if source not in self.sources:
            self.sources.append(source)

    def coerce_item(self, token: Any) -> Any:
        """Item constructor: turn a decoded JSON token into a live item."""
        if isinstance(token, self.ITEM_TYPE) and not (
                isinstance(token, bool) and self.ITEM_TYPE in (int, float)):
            return token
        return self._coerce(token)

    def _coerce(self, token: Any) -> Any:
        raise MalformedPayloadError(
            f"{self.NAME} cannot hold a {type(token).__name__} item: {token!r}")


class PersistentParam(Param):
    """A param that can carry internalised (persistent) data."""

    PROPERTIES = {"PersistentData": FieldDescriptor("persistent_data", DataTree)}

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.persistent_data = DataTree()

    def set_persistent_data(self, tree: DataTree) -> None:
        self.persistent_data = tree

    def _coerce_with(self, token: Any, convert) -> Any:
        try:
            return convert(token)
        except (TypeError, ValueError) as exc:
            raise MalformedPayloadError(
                f"{self.NAME} cannot hold {token!r}: {exc}") from exc


# ==============================================================================
# COMPONENTS
# ==============================================================================

class Component(ActiveObject):
    """A node with input and output params."""

    PROPERTIES = {
        "Hidden": FieldDescriptor("hidden", bool),
        "DisplayName": FieldDescriptor("display_name", str),
    }

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.hidden: bool = False
        self.display_name: str = self.NAME
        self.inputs: List[Param] = []
        self.outputs: List[Param] = []
        self.build_params()

    def build_params(self) -> None:
        """Create the default inputs and outputs of this kind."""

    def add_input(self, param: Param) -> Param:
        param.owner = self
        self.inputs.append(param)
        return param

    def add_output(self, param: Param) -> Param:
        param.owner = self
        self.outputs.append(param)
        return param

    def find_input(self, name: str) -> Optional[Param]:
        return next((p for p in self.inputs if p.param_name == name), None)

    def find_output(self, name: str) -> Optional[Param]:
        return next((p for p in self.outputs if p.param_name == name), None)
