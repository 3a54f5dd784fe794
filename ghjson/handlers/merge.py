# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

merge.py
--------
First-writer-wins merging of partial node records.

Handlers are visited in descending priority, so the first non-absent
value for a field is the highest-priority one.  Later values for the
same field are discarded and logged at debug level.
"""

from typing import Any, List

from ghjson.logger import get_logger
from ghjson.models import NodeRecord, ParameterSettings

log = get_logger("Merge")

_SCALAR_FIELDS = ("name", "library", "nick_name", "component_guid",
                  "instance_guid", "id", "pivot")


def merge_field(current: Any, incoming: Any) -> Any:
    return current if current is not None else incoming


def _report_conflict(field: str, kept: Any, dropped: Any, source: str) -> None:
    if kept is not None and dropped is not None and kept != dropped:
        log.debug(f"Discarded {field}={dropped!r} from {source or 'handler'}; kept {kept!r}")


def _merge_settings(acc: List[ParameterSettings], patch: List[ParameterSettings],
                    source: str) -> None:
    by_name = {s.parameter_name: s for s in acc if s.parameter_name is not None}
    for incoming in patch:
        target = by_name.get(incoming.parameter_name) if incoming.parameter_name else None
        if target is None:
            acc.append(incoming)
            if incoming.parameter_name is not None:
                by_name[incoming.parameter_name] = incoming
            continue
        for attr in vars(incoming):
            kept, dropped = getattr(target, attr), getattr(incoming, attr)
            _report_conflict(f"{incoming.parameter_name}.{attr}", kept, dropped, source)
            setattr(target, attr, merge_field(kept, dropped))


def merge_records(acc: NodeRecord, patch: NodeRecord, source: str = "") -> NodeRecord:
    """Merge ``patch`` into ``acc`` in place and return ``acc``."""
    for attr in _SCALAR_FIELDS:
        kept, dropped = getattr(acc, attr), getattr(patch, attr)
        _report_conflict(attr, kept, dropped, source)
        setattr(acc, attr, merge_field(kept, dropped))

    _merge_settings(acc.input_settings, patch.input_settings, source)
    _merge_settings(acc.output_settings, patch.output_settings, source)

    state, incoming = acc.component_state, patch.component_state
    for attr in state.CORE_KEYS:
        kept, dropped = getattr(state, attr), getattr(incoming, attr)
        _report_conflict(attr, kept, dropped, source)
        setattr(state, attr, merge_field(kept, dropped))
    for bucket in ("extensions", "properties"):
        target = getattr(state, bucket)
        for key, value in getattr(incoming, bucket).items():
            if key in target:
                _report_conflict(f"{bucket}.{key}", target[key], value, source)
                continue
            target[key] = value

    acc.errors.extend(patch.errors)
    acc.warnings.extend(patch.warnings)
    acc.remarks.extend(patch.remarks)
    return acc
