# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

registry.py
-----------
Object handler registry and the orchestrator that runs it.

Registry:
    One stored ordering, descending by ``(priority, registration order)``.
    Per-kind handler lists are cached and the caches dropped on every
    mutation.

Orchestrator:
    serialize_state  Every matching handler, descending, each returning a
                     partial record merged first-writer-wins.
    apply_state      Ownership resolved descending (first claim wins),
                     handlers then run ascending and only write fields
                     they own or nobody claimed.
"""

from __future__ import annotations

import threading
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from ghjson.handlers.merge import merge_records
from ghjson.handlers.objecthandler import ApplyContext, ObjectHandler, SerializeContext
from ghjson.host.hostobjects import DocumentObject
from ghjson.logger import get_logger, log_handler_failure
from ghjson.models import ComponentState, NodeRecord

log = get_logger("ObjectHandlers")


# ==============================================================================
# REGISTRY
# ==============================================================================

class ObjectHandlerRegistry:

    def __init__(self, handlers: Optional[Iterable[ObjectHandler]] = None) -> None:
        self._lock = threading.RLock()
        self._entries: List[Tuple[int, int, ObjectHandler]] = []
        self._seq = 0
        self._ordered: Tuple[ObjectHandler, ...] = ()
        self._node_cache: Dict[str, Tuple[ObjectHandler, ...]] = {}
        self._record_cache: Dict[str, Tuple[ObjectHandler, ...]] = {}
        for handler in handlers or ():
            self.register(handler)

    # ── Mutation ─────────────────────────────────────────────────────────

    def register(self, handler: ObjectHandler) -> ObjectHandler:
        with self._lock:
            self._entries.append((handler.priority, self._seq, handler))
            self._seq += 1
            self._rebuild()
        log.debug(f"Registered object handler {handler.name} (priority {handler.priority})")
        return handler

    def unregister(self, handler: ObjectHandler) -> bool:
        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e[2] is not handler]
            removed = len(self._entries) != before
            if removed:
                self._rebuild()
        if removed:
            log.debug(f"Unregistered object handler {handler.name}")
        return removed

    def _rebuild(self) -> None:
        ordered = sorted(self._entries, key=lambda e: (-e[0], e[1]))
        self._ordered = tuple(e[2] for e in ordered)
        self._node_cache = {}
        self._record_cache = {}

    # ── Lookup ───────────────────────────────────────────────────────────

    def handlers(self) -> Tuple[ObjectHandler, ...]:
        """All handlers, descending priority."""
        return self._ordered

    def handlers_for(self, node: DocumentObject) -> Tuple[ObjectHandler, ...]:
        """Matching handlers for ``node``, descending priority."""
        ordered = self._ordered
        key = node.kind_key or type(node).__name__
        cached = self._node_cache.get(key)
        if cached is None:
            cached = tuple(h for h in ordered if h.cacheable and h.can_handle(node))
            with self._lock:
                if ordered is self._ordered:
                    self._node_cache[key] = cached
        if all(h.cacheable for h in ordered):
            return cached
        return tuple(h for h in ordered
                     if (h in cached if h.cacheable else h.can_handle(node)))

    def handlers_for_record(self, record: NodeRecord) -> Tuple[ObjectHandler, ...]:
        """Handlers for which ``record`` carries data, descending priority."""
        ordered = self._ordered
        if not record.kind_key:
            return tuple(h for h in ordered if h.can_handle_record(record))
        # Extension presence varies per record, so the key includes it
        key = record.kind_key + "|" + ",".join(sorted(record.component_state.extensions))
        cached = self._record_cache.get(key)
        if cached is None:
            cached = tuple(h for h in ordered if h.can_handle_record(record))
            with self._lock:
                if ordered is self._ordered:
                    self._record_cache[key] = cached
        return cached

    def known_extension_keys(self) -> FrozenSet[str]:
        return frozenset(h.extension_key for h in self._ordered if h.extension_key)

    def __len__(self) -> int:
        return len(self._ordered)


# ==============================================================================
# ORCHESTRATOR
# ==============================================================================

class ObjectHandlerOrchestrator:
    """Runs registered handlers over a node with per-handler isolation."""

    def __init__(self, registry: ObjectHandlerRegistry) -> None:
        self.registry = registry

    def serialize_state(self, node: DocumentObject, ctx: SerializeContext) -> NodeRecord:
        ctx.known_extensions = self.registry.known_extension_keys()
        ctx.covered_properties = set()
        record = NodeRecord()
        for handler in self.registry.handlers_for(node):
            try:
                patch = handler.serialize(node, ctx)
            except Exception as exc:
                message = log_handler_failure(log, handler.name, node, exc)
                ctx.report.add_failure(handler.name, node, exc, message)
                continue
            if patch is not None:
                merge_records(record, patch, handler.name)

        options = ctx.options
        if not options.include_component_state:
            record.component_state = ComponentState()
        if not options.include_parameter_settings:
            record.input_settings, record.output_settings = [], []
        if not options.include_runtime_messages:
            record.errors, record.warnings, record.remarks = [], [], []
        return record

    def apply_state(self, node: DocumentObject, record: NodeRecord, ctx: ApplyContext) -> None:
        ctx.known_extensions = self.registry.known_extension_keys()
        handlers = self.registry.handlers_for(node)

        for handler in self.registry.handlers_for_record(record):
            if handler not in handlers:
                log.debug(f"{handler.name} has data in the record but does not apply to {node}")

        # Ownership: descending, first claim wins
        for handler in handlers:
            try:
                ctx.claim(handler, handler.claimed_fields(record))
            except Exception as exc:
                message = log_handler_failure(log, handler.name, node, exc)
                ctx.report.add_failure(handler.name, node, exc, message)

        # Application: ascending priority, registration order within a tie
        for handler in sorted(handlers, key=lambda h: h.priority):
            try:
                handler.deserialize(record, node, ctx)
            except Exception as exc:
                message = log_handler_failure(log, handler.name, node, exc)
                ctx.report.add_failure(handler.name, node, exc, message)
