# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

datatree.py
-----------
Path-addressed data trees and their JSON form.

Wire shape::

    {
        "{0}":   {"{0}(0)": 1.0, "{0}(1)": 2.0},
        "{0;1}": {"{0;1}(0)": null, "{0;1}(1)": "pointXYZ:1,2,3"}
    }

Branch order and item order are positional data and survive a
flatten / unflatten round trip unchanged, including null placeholders.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from ghjson.datatypes.valuecodec import DataTypeRegistry
from ghjson.errors import DecodeError, MalformedPayloadError, PathParseError
from ghjson.logger import get_logger

log = get_logger("DataTree")

ItemConstructor = Callable[[Any], Any]

_INDEX_SUFFIX_RE = re.compile(r"\(\d+\)")
_JSON_NATIVE = (bool, int, float, str)


# ==============================================================================
# PATHS
# ==============================================================================

@dataclass(frozen=True, order=True)
class GhPath:
    """An ordered tuple of non-negative branch indices, rendered ``{i;j;k}``."""
    indices: Tuple[int, ...] = ()

    def __str__(self) -> str:
        return "{" + ";".join(str(i) for i in self.indices) + "}"

    def __len__(self) -> int:
        return len(self.indices)

    def append(self, index: int) -> "GhPath":
        return GhPath(self.indices + (int(index),))

    @classmethod
    def of(cls, *indices: int) -> "GhPath":
        return cls(tuple(int(i) for i in indices))

    @classmethod
    def parse(cls, text: str, strict: bool = False) -> "GhPath":
        """
        Parse ``{0;1}`` (``(n)`` item suffixes are ignored).

        A malformed path degrades to the empty path ``{}`` and is logged;
        with ``strict=True`` a :class:`PathParseError` is raised instead.
        """
        try:
            return cls(cls._parse_indices(text))
        except PathParseError as exc:
            if strict:
                raise
            log.warning(f"{exc}; using {{}}")
            return cls()

    @staticmethod
    def _parse_indices(text: str) -> Tuple[int, ...]:
        if not isinstance(text, str):
            raise PathParseError(f"Tree path must be a string, got {type(text).__name__}")
        cleaned = _INDEX_SUFFIX_RE.sub("", text).strip()
        if not (cleaned.startswith("{") and cleaned.endswith("}")):
            raise PathParseError(f"Malformed tree path '{text}'", text)
        body = cleaned[1:-1].strip()
        if not body:
            return ()
        indices = []
        for part in body.split(";"):
            part = part.strip()
            if not part.isdigit():
                raise PathParseError(f"Malformed tree path '{text}'", text)
            indices.append(int(part))
        return tuple(indices)


PathLike = Union[GhPath, str, Tuple[int, ...], List[int]]


def _to_path(path: PathLike) -> GhPath:
    if isinstance(path, GhPath):
        return path
    if isinstance(path, str):
        return GhPath.parse(path, strict=True)
    return GhPath(tuple(int(i) for i in path))


# ==============================================================================
# DATA TREE
# ==============================================================================

class DataTree:
    """
    Ordered mapping from :class:`GhPath` to a branch (a list of optional items).

    Example::

        tree = DataTree()
        tree.extend([1.0, 2.0], (0,))
        tree.extend([None, 3.0], (0, 1))
    """

    def __init__(self, branches: Optional[Mapping[PathLike, Iterable[Any]]] = None) -> None:
        self._branches: Dict[GhPath, List[Any]] = {}
        if branches:
            for path, items in branches.items():
                self.extend(items, path)

    # ── Construction ─────────────────────────────────────────────────────

    def add_branch(self, path: PathLike) -> List[Any]:
        """Return the branch at ``path``, creating an empty one if needed."""
        key = _to_path(path)
        return self._branches.setdefault(key, [])

    def append(self, item: Any, path: PathLike = (0,)) -> None:
        self.add_branch(path).append(item)

    def extend(self, items: Iterable[Any], path: PathLike = (0,)) -> None:
        self.add_branch(path).extend(items)

    @classmethod
    def from_array(cls, array) -> "DataTree":
        """
        Build a tree from an array-like.

        A 1-D array becomes branch ``{0}``; for N-D arrays every leading
        index tuple becomes one branch holding the last axis.
        """
        arr = np.asarray(array)
        tree = cls()
        if arr.ndim == 0:
            tree.append(arr.item())
        elif arr.ndim == 1:
            tree.extend((v.item() if isinstance(v, np.generic) else v for v in arr), (0,))
        else:
            for index in np.ndindex(*arr.shape[:-1]):
                row = arr[index]
                tree.extend((v.item() if isinstance(v, np.generic) else v for v in row), index)
        return tree

    # ── Access ───────────────────────────────────────────────────────────

    @property
    def paths(self) -> List[GhPath]:
        return list(self._branches)

    def branch(self, path: PathLike) -> List[Any]:
        return self._branches[_to_path(path)]

    def items(self) -> Iterator[Tuple[GhPath, List[Any]]]:
        return iter(self._branches.items())

    def all_data(self) -> List[Any]:
        return [item for branch in self._branches.values() for item in branch]

    @property
    def data_count(self) -> int:
        return sum(len(b) for b in self._branches.values())

    def is_empty(self) -> bool:
        return self.data_count == 0

    def to_array(self, path: PathLike = (0,), dtype=None) -> np.ndarray:
        return np.asarray(self.branch(path), dtype=dtype)

    def __len__(self) -> int:
        return len(self._branches)

    def __contains__(self, path: object) -> bool:
        try:
            return _to_path(path) in self._branches
        except (DecodeError, TypeError, ValueError):
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataTree):
            return NotImplemented
        return list(self._branches.items()) == list(other._branches.items())

    def __repr__(self) -> str:
        body = ", ".join(f"{p}: {items!r}" for p, items in self._branches.items())
        return f"DataTree({body})"


# ==============================================================================
# CONVERTER
# ==============================================================================

def _encode_leaf(item: Any, registry: DataTypeRegistry) -> Any:
    if item is None:
        return None
    if isinstance(item, str):
        # A plain string that looks prefixed must not decode as something else.
        if registry.has_prefix(item):
            return registry.encode(item)
        return item
    if type(item) in _JSON_NATIVE:
        return item
    encoded = registry.try_encode(item)
    if encoded is not None:
        return encoded
    log.debug(f"No codec for {type(item).__name__}, passing leaf through unchanged")
    return item


def flatten(tree: Union[DataTree, Mapping[PathLike, Iterable[Any]]],
            registry: DataTypeRegistry) -> Dict[str, Dict[str, Any]]:
    """Convert a tree to ``{"{p}": {"{p}(i)": leaf}}``."""
    if not isinstance(tree, DataTree):
        tree = DataTree(tree)

    result: Dict[str, Dict[str, Any]] = {}
    for path, branch in tree.items():
        key = str(path)
        result[key] = {f"{key}({i})": _encode_leaf(item, registry)
                       for i, item in enumerate(branch)}
    return result


def flatten_to_single_level(nested: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Collapse ``{path: {indexedKey: value}}`` into ``{path: value}``.

    A one-item branch maps to its item and any other branch to the
    ordered list of its items.  A derived view for quick lookups; the
    nested form stays the source of truth.
    """
    flat: Dict[str, Any] = {}
    for path, branch in (nested or {}).items():
        if isinstance(branch, Mapping):
            items = list(branch.values())
        elif isinstance(branch, list):
            items = list(branch)
        else:
            items = [branch]
        flat[path] = items[0] if len(items) == 1 else items
    return flat


def _decode_leaf(token: Any, item_ctor: Optional[ItemConstructor],
                 registry: Optional[DataTypeRegistry]) -> Any:
    if token is None:
        return None

    if isinstance(token, Mapping) and "value" in token:
        token = token["value"]
        if token is None:
            return None

    if registry is not None and registry.has_prefix(token):
        token = registry.decode(token)

    if item_ctor is None:
        return token
    try:
        return item_ctor(token)
    except DecodeError:
        raise
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError(f"Cannot construct item from {token!r}: {exc}") from exc


def unflatten(data: Any,
              item_ctor: Optional[ItemConstructor] = None,
              registry: Optional[DataTypeRegistry] = None) -> DataTree:
    """
    Rebuild a tree from its JSON form.

    Accepts the nested path/index form, a bare list (branch ``{0}``) or
    a bare scalar.  Leaves are unwrapped from ``{"value": ...}``, decoded
    through the value codec when prefixed, then passed to ``item_ctor``.

    Raises:
        DecodeError: A leaf is corrupt.  Malformed paths do not raise.
    """
    tree = DataTree()
    if data is None:
        return tree

    if isinstance(data, list):
        tree.extend((_decode_leaf(t, item_ctor, registry) for t in data), (0,))
        return tree

    if not isinstance(data, Mapping):
        tree.append(_decode_leaf(data, item_ctor, registry))
        return tree

    for key, branch in data.items():
        path = GhPath.parse(key)
        items = tree.add_branch(path)
        if isinstance(branch, Mapping):
            tokens = branch.values()
        elif isinstance(branch, list):
            tokens = branch
        else:
            tokens = [branch]
        items.extend(_decode_leaf(t, item_ctor, registry) for t in tokens)
    return tree
