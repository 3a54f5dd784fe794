# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

objecthandler.py
----------------
Base class for whole-node handlers and the contexts they run in.

An object handler contributes a *partial* :class:`NodeRecord` on
serialize and restores its share of a record on deserialize.  Record
fields are identified by plain strings so ownership can be claimed
across handlers::

    "pivot", "nickName", "inputSettings", "selected", ...
    "extensions.gh.panel"       -> one extension namespace
    "properties.CurrentValue"   -> one property-bag entry
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Set

from ghjson.datatypes.valuecodec import DataTypeRegistry
from ghjson.host.hostobjects import DocumentObject
from ghjson.models import NodeRecord
from ghjson.options import DeserializationOptions, SerializationOptions
from ghjson.properties.propertyfilter import PropertyFilter
from ghjson.properties.propertyhandlers import PropertyHandlerRegistry
from ghjson.report import ConversionReport

PRIORITY_DEFAULT = 0
PRIORITY_CORE = 10
PRIORITY_FAMILY = 100


def extension_field(key: str) -> str:
    return f"extensions.{key}"


def property_field(name: str) -> str:
    return f"properties.{name}"


# ==============================================================================
# CONTEXTS
# ==============================================================================

@dataclass
class SerializeContext:
    """Collaborators available to every handler during one serialize call."""
    property_filter: PropertyFilter
    properties: PropertyHandlerRegistry
    datatypes: DataTypeRegistry
    options: SerializationOptions = field(default_factory=SerializationOptions)
    report: ConversionReport = field(default_factory=ConversionReport)
    known_extensions: FrozenSet[str] = frozenset()
    # Bag names already written into an extension namespace for this node
    covered_properties: Set[str] = field(default_factory=set)


@dataclass
class ApplyContext:
    """
    Collaborators for one deserialize call, plus field ownership.

    Ownership is resolved before any handler runs; a handler may only
    write a field nobody claimed or that it claimed itself.
    """
    properties: PropertyHandlerRegistry
    datatypes: DataTypeRegistry
    options: DeserializationOptions = field(default_factory=DeserializationOptions)
    report: ConversionReport = field(default_factory=ConversionReport)
    known_extensions: FrozenSet[str] = frozenset()
    owners: Dict[str, "ObjectHandler"] = field(default_factory=dict)

    def claim(self, handler: "ObjectHandler", fields: Iterable[str]) -> None:
        for name in fields:
            self.owners.setdefault(name, handler)

    def owner_of(self, field_name: str) -> Optional["ObjectHandler"]:
        return self.owners.get(field_name)

    def may_apply(self, handler: "ObjectHandler", field_name: str) -> bool:
        owner = self.owners.get(field_name)
        return owner is None or owner is handler


# ==============================================================================
# BASE HANDLER
# ==============================================================================

class ObjectHandler:
    """
    Contributes to, and restores from, one slice of a node record.

    Attributes:
        priority:      Higher wins field conflicts on serialize and owns
                       claimed fields on deserialize.
        extension_key: Namespace under ``componentState.extensions``
                       this handler owns, if any.
        cacheable:     ``can_handle`` depends only on the node's kind, so
                       the registry may cache the decision per kind.
    """

    priority: int = PRIORITY_DEFAULT
    extension_key: Optional[str] = None
    cacheable: bool = True

    @property
    def name(self) -> str:
        return type(self).__name__

    def can_handle(self, node: DocumentObject) -> bool:
        return False

    def can_handle_record(self, record: NodeRecord) -> bool:
        """Whether ``record`` carries data for this handler."""
        return self.extension_key is not None and record.extension(self.extension_key) is not None

    def serialize(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        return NodeRecord()

    def claimed_fields(self, record: NodeRecord) -> Iterable[str]:
        """Record fields this handler owns when applying ``record``."""
        return ()

    def deserialize(self, record: NodeRecord, node: DocumentObject, ctx: ApplyContext) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{self.name} priority={self.priority}>"
