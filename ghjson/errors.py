# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

errors.py
---------
Exception taxonomy for the conversion engine.

    GhJsonError
    ├── UnsupportedTypeError     encode has no codec for a runtime type
    ├── DecodeError              a prefixed string cannot be decoded
    │   ├── UnknownPrefixError
    │   ├── MalformedPayloadError
    │   └── PathParseError
    ├── PrefixCollisionError     codec registration clash
    ├── HandlerError             a handler raised during extract/apply
    └── StructuralError          required record identity is missing
        └── UnknownKindError
"""

from typing import Any, Optional


class GhJsonError(Exception):
    """Base class for every error raised by the engine."""


class UnsupportedTypeError(GhJsonError, TypeError):
    """No value codec is registered for the runtime type of a value."""

    def __init__(self, value_type: type) -> None:
        self.value_type = value_type
        super().__init__(f"No value codec registered for type '{value_type.__name__}'")


class DecodeError(GhJsonError, ValueError):
    """A wire string could not be turned back into a value."""

    def __init__(self, message: str, text: Optional[str] = None) -> None:
        self.text = text
        super().__init__(message)


class UnknownPrefixError(DecodeError):
    def __init__(self, prefix: str, text: Optional[str] = None) -> None:
        self.prefix = prefix
        super().__init__(f"Unknown value prefix '{prefix}'", text)


class MalformedPayloadError(DecodeError):
    """Payload does not match the grammar or arity of its kind."""


class PathParseError(DecodeError):
    """A data tree path string is not of the form ``{i;j;k}``."""


class PrefixCollisionError(GhJsonError, ValueError):
    """A codec was registered over an existing prefix or type."""


class HandlerError(GhJsonError):
    """
    Wraps an exception raised inside a property or object handler.

    Attributes:
        source: Name of the failing handler.
        target: Node (or node description) being converted.
        field:  Property or record field, when known.
    """

    def __init__(self, source: str, target: Any, cause: BaseException,
                 field: Optional[str] = None) -> None:
        self.source = source
        self.target = target
        self.field = field
        self.cause = cause
        where = f"{target}" if field is None else f"{target}.{field}"
        super().__init__(f"{source} failed on {where}: {cause}")


class StructuralError(GhJsonError, ValueError):
    """The top-level record or document contract is violated."""


class UnknownKindError(StructuralError):
    def __init__(self, name: Optional[str], guid: Optional[str]) -> None:
        self.name = name
        self.guid = guid
        super().__init__(f"No host kind registered for name={name!r} guid={guid!r}")
