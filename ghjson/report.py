# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

report.py
---------
Collects non-fatal conversion problems so callers see what was skipped
without a single bad property aborting the whole node.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional

from ghjson.errors import HandlerError


@dataclass(frozen=True)
class ConversionWarning:
    source: str
    target: str
    field: Optional[str]
    message: str
    # The wrapped handler exception, when a handler raised
    error: Optional[HandlerError] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class ConversionReport:
    warnings: List[ConversionWarning] = field(default_factory=list)

    def add(self, source: str, target: Any, message: str,
            field: Optional[str] = None) -> ConversionWarning:
        warning = ConversionWarning(source, str(target), field, message)
        self.warnings.append(warning)
        return warning

    def add_failure(self, source: str, target: Any, exc: BaseException, message: str,
                    field: Optional[str] = None) -> ConversionWarning:
        """Record a handler that raised; the cause stays reachable via ``error``."""
        warning = ConversionWarning(source, str(target), field, message,
                                    HandlerError(source, target, exc, field))
        self.warnings.append(warning)
        return warning

    def extend(self, other: "ConversionReport") -> None:
        self.warnings.extend(other.warnings)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def __iter__(self) -> Iterator[ConversionWarning]:
        return iter(self.warnings)

    def __len__(self) -> int:
        return len(self.warnings)
