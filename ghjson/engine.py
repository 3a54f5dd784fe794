# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

engine.py
---------
The public conversion façade.

Wires the value codec registry, the property handler registry, the
object handler registry and the host kind registry together::

    engine = Engine()
    result = engine.serialize_node(slider)          # SerializationResult
    record = result.record.to_dict()

    restored = engine.deserialize_node(record).node

Every registry is owned by the engine instance; two engines never share
handlers or codecs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, Union

from ghjson.datatypes.datatree import DataTree, flatten, unflatten
from ghjson.datatypes.valuecodec import DataTypeRegistry, ValueCodec
from ghjson.handlers.core import (
    DefaultObjectHandler, IdentificationHandler, InternalizedDataHandler,
    ParameterSettingsHandler, PivotHandler, RuntimeMessagesHandler,
)
from ghjson.handlers.family import FAMILY_HANDLERS
from ghjson.handlers.objecthandler import ApplyContext, ObjectHandler, SerializeContext
from ghjson.handlers.registry import ObjectHandlerOrchestrator, ObjectHandlerRegistry
from ghjson.host.hostobjects import DocumentObject
from ghjson.host.kindregistry import KindRegistry, default_kinds
from ghjson.logger import get_logger
from ghjson.models import NodeRecord
from ghjson.options import DeserializationOptions, SerializationOptions
from ghjson.properties.propertyfilter import (
    PropertyFilter, PropertyFilterRule, SerializationContext,
)
from ghjson.properties.propertyhandlers import PropertyHandler
from ghjson.properties.specialized import default_property_handlers
from ghjson.report import ConversionReport, ConversionWarning
from ghjson.serializer import DocumentResult, DocumentSerializer

log = get_logger("Engine")

ContextLike = Union[SerializationContext, str, PropertyFilterRule, PropertyFilter]


@dataclass
class SerializationResult:
    record: NodeRecord
    warnings: List[ConversionWarning] = field(default_factory=list)


@dataclass
class DeserializationResult:
    node: DocumentObject
    warnings: List[ConversionWarning] = field(default_factory=list)


def default_object_handlers() -> ObjectHandlerRegistry:
    """A registry holding the core handlers and every family handler."""
    registry = ObjectHandlerRegistry([
        DefaultObjectHandler(),
        IdentificationHandler(),
        PivotHandler(),
        ParameterSettingsHandler(),
        InternalizedDataHandler(),
        RuntimeMessagesHandler(),
    ])
    for handler_cls in FAMILY_HANDLERS:
        registry.register(handler_cls())
    return registry


class Engine:
    """
    Args:
        context:                 Default serialization context (or custom rule).
        serialization_options:   Default options for serialize calls.
        deserialization_options: Default options for deserialize calls.
        datatypes:               Codec registry; a default one is built if omitted.
        kinds:                   Host kind registry; every built-in kind if omitted.
    """

    def __init__(
        self,
        context: ContextLike = SerializationContext.STANDARD,
        serialization_options: Optional[SerializationOptions] = None,
        deserialization_options: Optional[DeserializationOptions] = None,
        datatypes: Optional[DataTypeRegistry] = None,
        kinds: Optional[KindRegistry] = None,
    ) -> None:
        self.context = context
        self.serialization_options = serialization_options or SerializationOptions.standard()
        self.deserialization_options = deserialization_options or DeserializationOptions.standard()
        self.datatypes = datatypes if datatypes is not None else DataTypeRegistry()
        self.kinds = kinds if kinds is not None else default_kinds()
        self.properties = default_property_handlers(self.datatypes)
        self.object_handlers = default_object_handlers()
        self.orchestrator = ObjectHandlerOrchestrator(self.object_handlers)

    # ══════════════════════════════════════════════════════════════════════
    # Nodes
    # ══════════════════════════════════════════════════════════════════════

    def serialize_node(
        self,
        node: DocumentObject,
        context: Optional[ContextLike] = None,
        options: Optional[SerializationOptions] = None,
    ) -> SerializationResult:
        report = ConversionReport()
        ctx = SerializeContext(
            property_filter=self.property_filter(context if context is not None else self.context),
            properties=self.properties,
            datatypes=self.datatypes,
            options=options or self.serialization_options,
            report=report,
        )
        record = self.orchestrator.serialize_state(node, ctx)
        if report.has_warnings():
            log.info(f"Serialized {node} with {len(report)} warning(s)")
        return SerializationResult(record, report.warnings)

    def deserialize_node(
        self,
        record: Union[NodeRecord, Dict[str, Any]],
        options: Optional[DeserializationOptions] = None,
    ) -> DeserializationResult:
        """
        Build a fresh host node from ``record``.

        Raises:
            StructuralError:  The record names no kind.
            UnknownKindError: No registered kind matches the record.
        """
        if not isinstance(record, NodeRecord):
            record = NodeRecord.from_dict(record)
        node = self.kinds.create(record)
        warnings = self.apply_record(node, record, options)
        return DeserializationResult(node, warnings)

    def apply_record(
        self,
        node: DocumentObject,
        record: Union[NodeRecord, Dict[str, Any]],
        options: Optional[DeserializationOptions] = None,
    ) -> List[ConversionWarning]:
        """Apply ``record`` onto an existing ``node``; returns the warnings."""
        if not isinstance(record, NodeRecord):
            record = NodeRecord.from_dict(record)
        report = ConversionReport()
        ctx = ApplyContext(
            properties=self.properties,
            datatypes=self.datatypes,
            options=options or self.deserialization_options,
            report=report,
        )
        self.orchestrator.apply_state(node, record, ctx)
        if report.has_warnings():
            log.info(f"Restored {node} with {len(report)} warning(s)")
        return report.warnings

    # ══════════════════════════════════════════════════════════════════════
    # Documents
    # ══════════════════════════════════════════════════════════════════════

    def serialize_nodes(
        self,
        nodes: Iterable[DocumentObject],
        context: Optional[ContextLike] = None,
        options: Optional[SerializationOptions] = None,
    ) -> Dict[str, Any]:
        return DocumentSerializer(self, context, options).serialize(nodes)

    def deserialize_document(
        self,
        document: Union[str, Dict[str, Any]],
        options: Optional[DeserializationOptions] = None,
    ) -> DocumentResult:
        serializer = DocumentSerializer(self, deserialization_options=options)
        if isinstance(document, str):
            return serializer.from_json(document)
        return serializer.deserialize(document)

    # ══════════════════════════════════════════════════════════════════════
    # Registration
    # ══════════════════════════════════════════════════════════════════════

    def register_value_codec(
        self,
        kind: str,
        prefix: str,
        python_type: type,
        encode: Callable[[Any], str],
        decode: Callable[[str], Any],
        replace: bool = False,
    ) -> ValueCodec:
        return self.datatypes.register_codec(kind, prefix, python_type, encode, decode,
                                             replace=replace)

    def register_object_handler(self, handler: ObjectHandler) -> ObjectHandler:
        return self.object_handlers.register(handler)

    def unregister_object_handler(self, handler: ObjectHandler) -> bool:
        return self.object_handlers.unregister(handler)

    def register_property_handler(self, handler: PropertyHandler) -> PropertyHandler:
        return self.properties.register(handler)

    def unregister_property_handler(self, handler: PropertyHandler) -> bool:
        return self.properties.unregister(handler)

    def register_kind(self, cls: Type[DocumentObject]) -> Type[DocumentObject]:
        return self.kinds.register(cls)

    # ══════════════════════════════════════════════════════════════════════
    # Values & trees
    # ══════════════════════════════════════════════════════════════════════

    def encode_value(self, value: Any) -> str:
        return self.datatypes.encode(value)

    def decode_value(self, text: str) -> Any:
        return self.datatypes.decode(text)

    def flatten_tree(self, tree: Any) -> Dict[str, Dict[str, Any]]:
        return flatten(tree, self.datatypes)

    def unflatten_tree(self, data: Any,
                       item_ctor: Optional[Callable[[Any], Any]] = None) -> DataTree:
        return unflatten(data, item_ctor, self.datatypes)

    def property_filter(self, context: Optional[ContextLike] = None) -> PropertyFilter:
        context = self.context if context is None else context
        if isinstance(context, PropertyFilter):
            return context
        return PropertyFilter(context)
