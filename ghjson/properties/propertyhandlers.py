# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

propertyhandlers.py
-------------------
Per-property conversion between host values and wire values.

Each named property is routed to the highest-priority
:class:`PropertyHandler` that claims it; the :class:`DefaultPropertyHandler`
at priority 0 claims everything the node declares, so a property is
never left without a handler.

A handler failure never aborts the node: the registry logs it with the
handler and property identity, records it on the conversion report and
treats the property as not set.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ghjson.datatypes.valuecodec import DataTypeRegistry
from ghjson.host.hostobjects import DocumentObject
from ghjson.logger import get_logger, log_handler_failure
from ghjson.report import ConversionReport

log = get_logger("PropertyHandlers")


class _Absent:
    """Marker for "no value to write"; distinct from a real ``None``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


# ==============================================================================
# WIRE HELPERS
# ==============================================================================

def enum_to_wire(member: Enum) -> str:
    """String-valued enums use their value, others their title-cased name."""
    if isinstance(member.value, str):
        return member.value
    return member.name.title()


def enum_from_wire(enum_cls: type, value: Any) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        for member in enum_cls:
            if text in (member.name.lower(), str(member.value).lower()):
                return member
    elif isinstance(value, int) and not isinstance(value, bool):
        for member in enum_cls:
            if member.value == value:
                return member
        members = list(enum_cls)
        if 0 <= value < len(members):
            return members[value]
    raise ValueError(f"{value!r} is not a valid {enum_cls.__name__}")


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
    elif isinstance(value, (int, float)):
        return bool(value)
    raise ValueError(f"{value!r} is not a boolean")


# ==============================================================================
# BASE HANDLER
# ==============================================================================

class PropertyHandler:
    """
    Converts one or more named properties of a node.

    Subclasses override :meth:`can_handle` and usually both
    :meth:`extract` and :meth:`apply`.
    """

    priority: int = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return False

    def extract(self, node: DocumentObject, name: str) -> Any:
        """Return the wire value, or :data:`ABSENT` when nothing should be written."""
        return ABSENT

    def apply(self, node: DocumentObject, name: str, value: Any) -> bool:
        return False

    def related_properties(self, node: DocumentObject, name: str) -> Sequence[str]:
        """Properties that must travel together with ``name``."""
        return ()

    def __repr__(self) -> str:
        return f"<{self.name} priority={self.priority}>"


# ==============================================================================
# DEFAULT HANDLER
# ==============================================================================

_SCALARS = (bool, int, float, str)


class DefaultPropertyHandler(PropertyHandler):
    """
    Field-descriptor get/set with light coercion.

    Enums travel by name, scalars as themselves, and any other value
    through the value codec when a codec exists for its type.
    """

    priority = 0

    def __init__(self, datatypes: Optional[DataTypeRegistry] = None) -> None:
        self.datatypes = datatypes

    def can_handle(self, node: DocumentObject, name: str) -> bool:
        return node.has_property(name)

    def extract(self, node: DocumentObject, name: str) -> Any:
        value = node.get_property(name)
        if value is None or isinstance(value, _SCALARS):
            return value
        if isinstance(value, Enum):
            return enum_to_wire(value)
        if isinstance(value, (list, tuple)):
            return [list(v) if isinstance(v, tuple) else v for v in value]
        if self.datatypes is not None:
            encoded = self.datatypes.try_encode(value)
            if encoded is not None:
                return encoded
        log.debug(f"No wire form for {name} ({type(value).__name__}) on {node}")
        return ABSENT

    def apply(self, node: DocumentObject, name: str, value: Any) -> bool:
        descriptor = node.property_table().get(name)
        if descriptor is None:
            return False
        if descriptor.readonly:
            log.debug(f"Skipping read-only property {name} on {node}")
            return False
        node.set_property(name, self.coerce(descriptor.kind, value))
        return True

    def coerce(self, kind: Optional[type], value: Any) -> Any:
        if kind is not str and self.datatypes is not None and self.datatypes.has_prefix(value):
            value = self.datatypes.decode(value)
        if kind is None or value is None:
            return value
        if isinstance(kind, type) and issubclass(kind, Enum):
            return enum_from_wire(kind, value)
        if kind is bool:
            return to_bool(value)
        if kind is int:
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"{value!r} is not an integer")
            return int(value)
        if kind is float:
            if isinstance(value, bool):
                raise ValueError(f"{value!r} is not a number")
            return float(value)
        if kind is str:
            return value if isinstance(value, str) else str(value)
        if isinstance(value, kind):
            return value
        raise TypeError(f"Expected {kind.__name__}, got {type(value).__name__}")


# ==============================================================================
# REGISTRY
# ==============================================================================

class PropertyHandlerRegistry:
    """
    Priority-ordered property handlers.

    The ordering is a descending tuple snapshot rebuilt under a lock on
    every mutation; lookups read the snapshot without locking.
    """

    def __init__(self, handlers: Optional[Iterable[PropertyHandler]] = None) -> None:
        self._lock = threading.RLock()
        self._entries: List[Tuple[int, int, PropertyHandler]] = []
        self._seq = 0
        self._ordered: Tuple[PropertyHandler, ...] = ()
        for handler in handlers or ():
            self.register(handler)

    # ── Mutation ─────────────────────────────────────────────────────────

    def register(self, handler: PropertyHandler) -> PropertyHandler:
        with self._lock:
            self._entries.append((handler.priority, self._seq, handler))
            self._seq += 1
            self._rebuild()
        log.debug(f"Registered property handler {handler.name} (priority {handler.priority})")
        return handler

    def unregister(self, handler: PropertyHandler) -> bool:
        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e[2] is not handler]
            removed = len(self._entries) != before
            if removed:
                self._rebuild()
        return removed

    def _rebuild(self) -> None:
        ordered = sorted(self._entries, key=lambda e: (-e[0], e[1]))
        self._ordered = tuple(e[2] for e in ordered)

    # ── Lookup ───────────────────────────────────────────────────────────

    def handlers(self) -> Tuple[PropertyHandler, ...]:
        return self._ordered

    def handler_for(self, node: DocumentObject, name: str) -> Optional[PropertyHandler]:
        for handler in self._ordered:
            if handler.can_handle(node, name):
                return handler
        return None

    def related_properties(self, node: DocumentObject, name: str) -> Sequence[str]:
        handler = self.handler_for(node, name)
        return handler.related_properties(node, name) if handler else ()

    # ── Single property ──────────────────────────────────────────────────

    def extract(self, node: DocumentObject, name: str,
                report: Optional[ConversionReport] = None) -> Any:
        handler = self.handler_for(node, name)
        if handler is None:
            return ABSENT
        try:
            return handler.extract(node, name)
        except Exception as exc:
            self._record_failure(handler, node, name, exc, report)
            return ABSENT

    def apply(self, node: DocumentObject, name: str, value: Any,
              report: Optional[ConversionReport] = None) -> bool:
        handler = self.handler_for(node, name)
        if handler is None:
            log.debug(f"No handler for property {name} on {node}")
            return False
        try:
            return bool(handler.apply(node, name, value))
        except Exception as exc:
            self._record_failure(handler, node, name, exc, report)
            return False

    @staticmethod
    def _record_failure(handler: PropertyHandler, node: DocumentObject, name: str,
                        exc: Exception, report: Optional[ConversionReport]) -> None:
        message = log_handler_failure(log, handler.name, node, exc, field=name)
        if report is not None:
            report.add_failure(handler.name, node, exc, message, field=name)

    # ── Batches ──────────────────────────────────────────────────────────

    def extract_properties(self, node: DocumentObject, names: Iterable[str],
                           report: Optional[ConversionReport] = None) -> Dict[str, Any]:
        """
        Extract ``names`` in order.  Related properties are pulled in
        right after the property that names them; absent values are skipped.
        """
        result: Dict[str, Any] = {}
        seen = set()
        queue = list(names)
        while queue:
            name = queue.pop(0)
            if name in seen:
                continue
            seen.add(name)
            value = self.extract(node, name, report)
            if value is not ABSENT:
                result[name] = value
            related = [r for r in self.related_properties(node, name)
                       if r not in seen and node.has_property(r)]
            queue[0:0] = related
        return result

    def apply_properties(self, node: DocumentObject, values: Dict[str, Any],
                         report: Optional[ConversionReport] = None) -> List[str]:
        """Apply every entry of ``values``; returns the names actually written."""
        return [name for name, value in values.items()
                if self.apply(node, name, value, report)]
