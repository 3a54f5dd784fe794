# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0
"""

import importlib
from threading import Lock
from typing import Any, Dict, List

from ghjson.__about__ import __schema_version__, __title__, __version__

# ---------------------------------------------------------------------------
# Public names and the modules that define them
# ---------------------------------------------------------------------------

_EXPORTS: Dict[str, str] = {
    # Engine & documents
    "Engine": "ghjson.engine",
    "SerializationResult": "ghjson.engine",
    "DeserializationResult": "ghjson.engine",
    "default_object_handlers": "ghjson.engine",
    "DocumentSerializer": "ghjson.serializer",
    "DocumentResult": "ghjson.serializer",
    "ConversionReport": "ghjson.report",
    "ConversionWarning": "ghjson.report",
    # Options
    "SerializationOptions": "ghjson.options",
    "DeserializationOptions": "ghjson.options",
    # Records
    "NodeRecord": "ghjson.models",
    "ComponentState": "ghjson.models",
    "ParameterSettings": "ghjson.models",
    "Connection": "ghjson.models",
    "ConnectionEndpoint": "ghjson.models",
    "Document": "ghjson.models",
    # Values & trees
    "DataTypeRegistry": "ghjson.datatypes.valuecodec",
    "ValueCodec": "ghjson.datatypes.valuecodec",
    "DataTree": "ghjson.datatypes.datatree",
    "GhPath": "ghjson.datatypes.datatree",
    "flatten": "ghjson.datatypes.datatree",
    "unflatten": "ghjson.datatypes.datatree",
    # Properties
    "SerializationContext": "ghjson.properties.propertyfilter",
    "ComponentCategory": "ghjson.properties.propertyfilter",
    "PropertyFilter": "ghjson.properties.propertyfilter",
    "PropertyFilterRule": "ghjson.properties.propertyfilter",
    "PropertyFilterBuilder": "ghjson.properties.propertyfilter",
    "PropertyHandler": "ghjson.properties.propertyhandlers",
    "PropertyHandlerRegistry": "ghjson.properties.propertyhandlers",
    "ABSENT": "ghjson.properties.propertyhandlers",
    # Object handlers
    "ObjectHandler": "ghjson.handlers.objecthandler",
    "ApplyContext": "ghjson.handlers.objecthandler",
    "SerializeContext": "ghjson.handlers.objecthandler",
    "PRIORITY_DEFAULT": "ghjson.handlers.objecthandler",
    "PRIORITY_CORE": "ghjson.handlers.objecthandler",
    "PRIORITY_FAMILY": "ghjson.handlers.objecthandler",
    "ObjectHandlerRegistry": "ghjson.handlers.registry",
    # Host
    "KindRegistry": "ghjson.host.kindregistry",
    # Errors
    "GhJsonError": "ghjson.errors",
    "DecodeError": "ghjson.errors",
    "UnsupportedTypeError": "ghjson.errors",
    "UnknownPrefixError": "ghjson.errors",
    "MalformedPayloadError": "ghjson.errors",
    "PrefixCollisionError": "ghjson.errors",
    "HandlerError": "ghjson.errors",
    "StructuralError": "ghjson.errors",
    "UnknownKindError": "ghjson.errors",
    # Logging
    "get_logger": "ghjson.logger",
    "setup_logging": "ghjson.logger",
    "set_log_level": "ghjson.logger",
}

_CACHE: Dict[str, Any] = {}
_LOCK = Lock()


# ---------------------------------------------------------------------------
# Lazy Loading (PEP 562)
# ---------------------------------------------------------------------------

def __getattr__(name: str) -> Any:
    """Import the defining module on first access so ``import ghjson`` stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    with _LOCK:
        if name not in _CACHE:
            _CACHE[name] = getattr(importlib.import_module(module_name), name)
    return _CACHE[name]


def __dir__() -> List[str]:
    return sorted(set(globals()) | set(_EXPORTS))


__all__ = ["__title__", "__version__", "__schema_version__", *_EXPORTS]
