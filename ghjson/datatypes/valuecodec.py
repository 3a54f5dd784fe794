# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

valuecodec.py
-------------
Prefix-tagged value codecs and the registry that resolves them.

A value travels on the wire as ``"<prefix>:<payload>"``.  Encoding looks
the codec up by the value's runtime type (walking the MRO, so numpy
scalars and subclasses resolve naturally); decoding looks it up by the
token before the first colon, case-insensitively.

The registry is an instance, owned by an :class:`~ghjson.engine.Engine`.
Writes happen under a lock and publish a fresh snapshot, so lookups
from other threads never observe a half-registered codec.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from ghjson.errors import (
    MalformedPayloadError,
    PrefixCollisionError,
    UnknownPrefixError,
    UnsupportedTypeError,
)
from ghjson.logger import get_logger

log = get_logger("ValueCodec")

# --- Type Definitions ---
PayloadEncoder = Callable[[Any], str]
PayloadDecoder = Callable[[str], Any]


@dataclass(frozen=True)
class ValueCodec:
    """
    One value kind: its canonical prefix, runtime type and payload grammar.

    ``encode_payload`` returns only the payload; ``decode_payload``
    receives only the payload.  The prefix is added and stripped here.
    """
    kind: str
    prefix: str
    python_type: Type
    encode_payload: PayloadEncoder = field(compare=False, hash=False, repr=False)
    decode_payload: PayloadDecoder = field(compare=False, hash=False, repr=False)

    def encode(self, value: Any) -> str:
        return f"{self.prefix}:{self.encode_payload(value)}"

    def decode(self, text: str) -> Any:
        _, _, payload = text.partition(":")
        try:
            return self.decode_payload(payload)
        except MalformedPayloadError:
            raise
        except (ValueError, IndexError, TypeError) as exc:
            raise MalformedPayloadError(
                f"Invalid {self.kind} payload '{payload}': {exc}", text) from exc


@dataclass(frozen=True)
class _Snapshot:
    by_prefix: Dict[str, ValueCodec]
    by_type: Dict[type, ValueCodec]


class DataTypeRegistry:
    """
    Thread-safe prefix ↔ codec table.

    Example::

        registry = DataTypeRegistry()
        registry.encode(QColor(128, 64, 255))     # 'argb:255,128,64,255'
        registry.decode("pointXYZ:1,2,3")         # Point3d(1.0, 2.0, 3.0)
    """

    def __init__(self, with_defaults: bool = True) -> None:
        self._lock = threading.RLock()
        self._snapshot = _Snapshot({}, {})
        if with_defaults:
            # Imported here: the built-in table imports this module.
            from ghjson.datatypes.codecs import register_builtin_codecs
            register_builtin_codecs(self)

    # ══════════════════════════════════════════════════════════════════════
    # Registration
    # ══════════════════════════════════════════════════════════════════════

    def register(self, codec: ValueCodec, replace: bool = False) -> ValueCodec:
        """
        Register a codec.

        Raises:
            PrefixCollisionError: The prefix (case-insensitive) or the
                runtime type already belongs to another codec and
                ``replace`` is False.
        """
        key = codec.prefix.lower()
        if not key or ":" in key:
            raise ValueError(f"Invalid codec prefix '{codec.prefix}'")

        with self._lock:
            snap = self._snapshot
            by_prefix = dict(snap.by_prefix)
            by_type = dict(snap.by_type)

            existing = by_prefix.get(key)
            if existing is codec:
                return existing
            if existing is not None and not replace:
                raise PrefixCollisionError(
                    f"Prefix '{codec.prefix}' is already registered for kind '{existing.kind}'")

            type_owner = by_type.get(codec.python_type)
            if type_owner is not None and type_owner.prefix.lower() != key and not replace:
                raise PrefixCollisionError(
                    f"Type '{codec.python_type.__name__}' is already encoded by "
                    f"'{type_owner.prefix}'")

            if existing is not None:
                by_type = {t: c for t, c in by_type.items() if c is not existing}

            by_prefix[key] = codec
            by_type[codec.python_type] = codec
            self._snapshot = _Snapshot(by_prefix, by_type)

        log.info(f"Registered codec '{codec.prefix}' for kind '{codec.kind}'")
        return codec

    def register_codec(
        self,
        kind: str,
        prefix: str,
        python_type: Type,
        encode: PayloadEncoder,
        decode: PayloadDecoder,
        replace: bool = False,
    ) -> ValueCodec:
        """Convenience form of :meth:`register` for externally defined kinds."""
        return self.register(ValueCodec(kind, prefix, python_type, encode, decode), replace)

    def alias_type(self, python_type: Type, prefix: str) -> None:
        """Encode an additional runtime type with an already registered codec."""
        with self._lock:
            snap = self._snapshot
            codec = snap.by_prefix.get(prefix.lower())
            if codec is None:
                raise UnknownPrefixError(prefix)
            by_type = dict(snap.by_type)
            by_type[python_type] = codec
            self._snapshot = _Snapshot(snap.by_prefix, by_type)

    def unregister(self, prefix: str) -> Optional[ValueCodec]:
        with self._lock:
            snap = self._snapshot
            codec = snap.by_prefix.get(prefix.lower())
            if codec is None:
                return None
            by_prefix = {p: c for p, c in snap.by_prefix.items() if c is not codec}
            by_type = {t: c for t, c in snap.by_type.items() if c is not codec}
            self._snapshot = _Snapshot(by_prefix, by_type)
        log.info(f"Unregistered codec '{codec.prefix}'")
        return codec

    # ══════════════════════════════════════════════════════════════════════
    # Lookup
    # ══════════════════════════════════════════════════════════════════════

    def codec_for_type(self, value_type: type) -> Optional[ValueCodec]:
        by_type = self._snapshot.by_type
        for klass in value_type.__mro__:
            codec = by_type.get(klass)
            if codec is not None:
                return codec
        return None

    def codec_for_prefix(self, prefix: str) -> Optional[ValueCodec]:
        return self._snapshot.by_prefix.get(prefix.lower())

    def is_supported(self, value: Any) -> bool:
        return self.codec_for_type(type(value)) is not None

    def has_prefix(self, text: Any) -> bool:
        """True if ``text`` is a string starting with a registered prefix."""
        if not isinstance(text, str):
            return False
        prefix, sep, _ = text.partition(":")
        return bool(sep) and prefix.lower() in self._snapshot.by_prefix

    def prefixes(self) -> List[str]:
        return sorted(c.prefix for c in self._snapshot.by_prefix.values())

    def codecs(self) -> List[ValueCodec]:
        return list(self._snapshot.by_prefix.values())

    # ══════════════════════════════════════════════════════════════════════
    # Encode / decode
    # ══════════════════════════════════════════════════════════════════════

    def try_encode(self, value: Any) -> Optional[str]:
        """Encode ``value``, or return None when its type is not supported."""
        codec = self.codec_for_type(type(value))
        if codec is None:
            return None
        return codec.encode(value)

    def encode(self, value: Any) -> str:
        codec = self.codec_for_type(type(value))
        if codec is None:
            raise UnsupportedTypeError(type(value))
        return codec.encode(value)

    def decode(self, text: str) -> Any:
        """
        Decode a prefixed string.

        Raises:
            UnknownPrefixError:    The prefix is not registered.
            MalformedPayloadError: The string has no prefix, or the payload
                                   does not match the kind's grammar.
        """
        if not isinstance(text, str):
            raise MalformedPayloadError(f"Expected a prefixed string, got {type(text).__name__}")
        prefix, sep, _ = text.partition(":")
        if not sep or not prefix:
            raise MalformedPayloadError(f"Missing type prefix in '{text}'", text)
        codec = self._snapshot.by_prefix.get(prefix.lower())
        if codec is None:
            raise UnknownPrefixError(prefix, text)
        return codec.decode(text)
