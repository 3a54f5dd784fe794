# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

serializer.py
-------------
Whole-document serialization: node records plus the wires between them.

State ownership:
    DocumentSerializer → document metadata, integer ids, connections
    Engine             → everything inside a single node record

Format::

    {
        "schemaVersion": "1.0",
        "metadata": {"generator": "GhJSON 0.1.0", "created": "...", "componentCount": 3},
        "components": [ {"id": 1, "name": "Number Slider", ...}, ... ],
        "connections": [
            {"from": {"id": 1, "paramName": "Number Slider", "paramIndex": 0},
             "to":   {"id": 3, "paramName": "A", "paramIndex": 0}},
            ...
        ]
    }

Ids are assigned from 1 in list order.  On load, records without an id
take ids above the largest explicit one, and a connection resolves
its parameter by name first and falls back to the index.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from ghjson.__about__ import __schema_version__, metadata_summary
from ghjson.errors import StructuralError
from ghjson.host.hostobjects import Component, DocumentObject, Param
from ghjson.logger import get_logger
from ghjson.models import Connection, ConnectionEndpoint, Document, NodeRecord
from ghjson.options import DeserializationOptions, SerializationOptions
from ghjson.report import ConversionReport, ConversionWarning

if TYPE_CHECKING:
    from ghjson.engine import Engine

log = get_logger("Serializer")


def _input_params(node: DocumentObject) -> List[Param]:
    if isinstance(node, Component):
        return list(node.inputs)
    if isinstance(node, Param):
        return [node]
    return []


def _output_params(node: DocumentObject) -> List[Param]:
    if isinstance(node, Component):
        return list(node.outputs)
    if isinstance(node, Param):
        return [node]
    return []


@dataclass
class DocumentResult:
    nodes: List[DocumentObject] = field(default_factory=list)
    by_id: Dict[int, DocumentObject] = field(default_factory=dict)
    warnings: List[ConversionWarning] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


# ===========================================================================
# DOCUMENT SERIALIZER
# ===========================================================================

class DocumentSerializer:
    """
    Usage:
        serializer = DocumentSerializer(engine)

        # Save
        text = serializer.to_json([slider, panel, addition])

        # Load
        result = serializer.from_json(text)
        result.nodes
    """

    def __init__(
        self,
        engine: "Engine",
        context: Any = None,
        serialization_options: Optional[SerializationOptions] = None,
        deserialization_options: Optional[DeserializationOptions] = None,
    ) -> None:
        self.engine = engine
        self.context = context
        self.serialization_options = serialization_options or engine.serialization_options
        self.deserialization_options = deserialization_options or engine.deserialization_options

    # =======================================================================
    # SERIALIZE (Save)
    # =======================================================================

    def serialize(self, nodes: Iterable[DocumentObject]) -> Dict[str, Any]:
        nodes = list(nodes)
        options = self.serialization_options
        node_ids: Dict[int, int] = {id(node): index for index, node in enumerate(nodes, start=1)}

        document = Document(schema_version=__schema_version__)
        warnings = 0
        for node in nodes:
            result = self.engine.serialize_node(node, self.context, options)
            result.record.id = node_ids[id(node)]
            document.components.append(result.record)
            warnings += len(result.warnings)

        if options.include_connections:
            document.connections = self._serialize_connections(nodes, node_ids)
        if options.include_metadata:
            document.metadata = self._serialize_meta(len(nodes))

        log.info(f"Serialized {len(nodes)} node(s), {len(document.connections)} connection(s)"
                 + (f", {warnings} warning(s)" if warnings else ""))
        return document.to_dict()

    def to_json(self, nodes: Iterable[DocumentObject], indent: Optional[int] = 2) -> str:
        return json.dumps(self.serialize(nodes), indent=indent, ensure_ascii=False)

    # -- Meta ---------------------------------------------------------------

    @staticmethod
    def _serialize_meta(count: int) -> Dict[str, Any]:
        return {
            "generator": "{title} {version}".format(**metadata_summary()),
            "created": time.strftime("%Y-%m-%dT%H:%M:%S"),
            "componentCount": count,
        }

    # -- Connections --------------------------------------------------------

    @staticmethod
    def _serialize_connections(nodes: List[DocumentObject],
                               node_ids: Dict[int, int]) -> List[Connection]:
        connections: List[Connection] = []
        for node in nodes:
            for target_index, target in enumerate(_input_params(node)):
                for source in target.sources:
                    source_node = source.node
                    source_id = node_ids.get(id(source_node))
                    if source_id is None:
                        log.debug(f"Skipping wire from {source_node}: not part of the document")
                        continue
                    source_index = _output_params(source_node).index(source)
                    connections.append(Connection(
                        ConnectionEndpoint(source_id, source.param_name, source_index),
                        ConnectionEndpoint(node_ids[id(node)], target.param_name, target_index),
                    ))
        return connections

    # =======================================================================
    # DESERIALIZE (Load)
    # =======================================================================

    def deserialize(self, data: Dict[str, Any]) -> DocumentResult:
        """
        Restore every node of ``data`` and rewire their parameters.

        Raises:
            StructuralError: ``components`` is not a list, ids collide, or a
                             connection references an id that does not exist.
            UnknownKindError: A component kind is not registered.
        """
        document = Document.from_dict(data)
        options = self.deserialization_options
        result = DocumentResult(metadata=dict(document.metadata))

        # Records without an id take fresh ids above every explicit one
        next_id = max((r.id for r in document.components if r.id is not None), default=0)
        for record in document.components:
            restored = self.engine.deserialize_node(record, options)
            if record.id is not None:
                node_id = record.id
            else:
                next_id += 1
                node_id = next_id
            if node_id in result.by_id:
                raise StructuralError(f"Duplicate component id {node_id}")
            result.by_id[node_id] = restored.node
            result.nodes.append(restored.node)
            result.warnings.extend(restored.warnings)

        if options.create_connections:
            report = ConversionReport()
            for connection in document.connections:
                self._restore_connection(connection, result.by_id, report)
            result.warnings.extend(report.warnings)

        log.info(f"Restored {len(result.nodes)} node(s)"
                 + (f" with {len(result.warnings)} warning(s)" if result.warnings else ""))
        return result

    def from_json(self, text: str) -> DocumentResult:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StructuralError(f"Document is not valid JSON: {exc}") from exc
        return self.deserialize(data)

    def _restore_connection(self, connection: Connection,
                            by_id: Dict[int, DocumentObject],
                            report: ConversionReport) -> None:
        for endpoint in (connection.source, connection.target):
            if endpoint.id not in by_id:
                raise StructuralError(f"Connection references unknown component id {endpoint.id}")

        source = self._resolve(_output_params(by_id[connection.source.id]), connection.source)
        target = self._resolve(_input_params(by_id[connection.target.id]), connection.target)
        if source is None or target is None:
            missing = connection.source if source is None else connection.target
            message = (f"Cannot resolve parameter '{missing.param_name}' "
                       f"(index {missing.param_index}) on component {missing.id}")
            log.warning(message)
            report.add(type(self).__name__, by_id[missing.id], message, field=missing.param_name)
            return
        target.add_source(source)

    @staticmethod
    def _resolve(params: List[Param], endpoint: ConnectionEndpoint) -> Optional[Param]:
        if endpoint.param_name:
            for param in params:
                if endpoint.param_name in (param.param_name, param.nick_name):
                    return param
        index = endpoint.param_index
        if index is not None and 0 <= index < len(params):
            return params[index]
        if endpoint.param_name is None and index is None and len(params) == 1:
            return params[0]
        return None
