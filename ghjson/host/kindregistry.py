# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

kindregistry.py
------------------
Registry of host node kinds, keyed by component GUID and by name.
Uses the decorator pattern for registration and acts as the node
constructor during deserialization.
"""

import threading
from typing import Dict, List, Optional, Type

from ghjson.errors import UnknownKindError
from ghjson.host.hostobjects import DocumentObject
from ghjson.logger import get_logger
from ghjson.models import NodeRecord

log = get_logger("KindRegistry")

KindCls = Type[DocumentObject]


class KindRegistry:
    """
    Central repository of constructible node kinds.

    Structure:
        GUID (lower-case) -> KindClass
        Name (lower-case) -> KindClass
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_guid: Dict[str, KindCls] = {}
        self._by_name: Dict[str, KindCls] = {}

    def register(self, cls: KindCls) -> KindCls:
        """
        Registers a kind class.  Intended to be used as a decorator.
        Reads ``COMPONENT_GUID`` and ``NAME`` from the class attributes.
        """
        guid = (cls.COMPONENT_GUID or "").lower()
        name = (cls.NAME or cls.__name__).lower()
        with self._lock:
            if guid and guid in self._by_guid and self._by_guid[guid] is not cls:
                log.warning(f"Overwriting node kind for GUID '{guid}'")
            if guid:
                self._by_guid[guid] = cls
            self._by_name[name] = cls
        return cls

    def get_kind(self, guid: Optional[str] = None, name: Optional[str] = None) -> Optional[KindCls]:
        """Lookup by GUID first, then by name."""
        if guid:
            cls = self._by_guid.get(str(guid).lower())
            if cls is not None:
                return cls
        if name:
            return self._by_name.get(name.lower())
        return None

    def create(self, record: NodeRecord) -> DocumentObject:
        """
        Instantiate a fresh host object for ``record``.

        Raises:
            StructuralError: The record names no kind.
            UnknownKindError: No registered kind matches.
        """
        record.validate_identity()
        cls = self.get_kind(record.component_guid, record.name)
        if cls is None:
            raise UnknownKindError(record.name, record.component_guid)
        return cls()

    def kinds(self) -> List[KindCls]:
        return list(dict.fromkeys(self._by_name.values()))


def default_kinds() -> KindRegistry:
    """A registry populated with every built-in kind."""
    from ghjson.host.paramkinds import PARAM_KINDS
    from ghjson.host.specialobjects import (
        Addition, BooleanToggle, Button, ColourSwatch, ConstructPoint,
        NumberSlider, Panel, Scribble, ScriptComponent, ValueList,
    )

    registry = KindRegistry()
    for cls in PARAM_KINDS + (NumberSlider, Panel, ValueList, BooleanToggle,
                              ColourSwatch, Button, Scribble, ScriptComponent,
                              Addition, ConstructPoint):
        registry.register(cls)
    return registry
