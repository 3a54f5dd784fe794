# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

options.py
----------
Per-call switches for serialization and deserialization.

Which *properties* participate is decided by the property filter
context; these options decide which *sections* of a record are
produced or applied at all.
"""

from dataclasses import dataclass


@dataclass
class SerializationOptions:
    include_connections: bool = True
    include_metadata: bool = True
    include_component_state: bool = True
    include_parameter_settings: bool = True
    include_runtime_messages: bool = True
    prune_defaults: bool = True

    @classmethod
    def standard(cls) -> "SerializationOptions":
        return cls()

    @classmethod
    def lite(cls) -> "SerializationOptions":
        """Structure only: node identity, layout and connections."""
        return cls(include_metadata=False,
                   include_component_state=False,
                   include_parameter_settings=False,
                   include_runtime_messages=False)


@dataclass
class DeserializationOptions:
    apply_properties: bool = True
    apply_parameter_settings: bool = True
    apply_component_state: bool = True
    create_connections: bool = True
    preserve_instance_guids: bool = True

    @classmethod
    def standard(cls) -> "DeserializationOptions":
        return cls()

    @classmethod
    def components_only(cls) -> "DeserializationOptions":
        return cls(create_connections=False)

    @classmethod
    def minimal(cls) -> "DeserializationOptions":
        """Recreate nodes and wires, nothing else."""
        return cls(apply_properties=False,
                   apply_parameter_settings=False,
                   apply_component_state=False)
