# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

stringconverter.py
------------------
Lenient text ↔ Qt conversions for human-edited property values.

Unlike the value codec, these accept several spellings (``"R,G,B"``,
``"A,R,G,B"``, ``"#RRGGBB"``, colour names, ``argb:``) because property
bags are frequently written by hand.  Input that matches none of them
raises ``ValueError``; nothing is silently replaced by a default.
"""

from typing import Any

from PySide6.QtGui import QColor, QFont

from ghjson.datatypes.codecs import format_number
from ghjson.host.hostobjects import DataMapping


# ============================================================================
# COLOURS
# ============================================================================

def _channel(value: Any) -> int:
    number = int(str(value).strip())
    if not 0 <= number <= 255:
        raise ValueError(f"Color channel {number} outside 0..255")
    return number


def parse_color(value: Any) -> QColor:
    """Convert ``R,G,B`` / ``A,R,G,B`` / ``argb:...`` / ``#hex`` / name / list to QColor."""
    if isinstance(value, QColor):
        return value
    if isinstance(value, (list, tuple)) and len(value) in (3, 4):
        r, g, b = (_channel(c) for c in value[:3])
        a = _channel(value[3]) if len(value) > 3 else 255
        return QColor(r, g, b, a)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Cannot convert {value!r} to a color")

    text = value.strip()
    if text.lower().startswith("argb:"):
        text = text[5:]
        if text.count(",") != 3:
            raise ValueError(f"'{value}' is not an argb color")

    if "," not in text:
        color = QColor(text)
        if not color.isValid():
            raise ValueError(f"Unknown color '{value}'")
        return QColor(color.red(), color.green(), color.blue(), 255)

    parts = text.split(",")
    if len(parts) == 3:
        r, g, b = (_channel(p) for p in parts)
        return QColor(r, g, b, 255)
    if len(parts) == 4:
        a, r, g, b = (_channel(p) for p in parts)
        return QColor(r, g, b, a)
    raise ValueError(f"Invalid color '{value}'. Use 'R,G,B' or 'A,R,G,B'")


# ============================================================================
# FONTS
# ============================================================================

def parse_font(value: Any) -> QFont:
    """Convert ``"Family, 12pt"`` to QFont."""
    if isinstance(value, QFont):
        return value
    parts = str(value).split(",")
    if len(parts) != 2:
        raise ValueError("Invalid font string format. Use 'FontFamilyName, FontSize'")
    family = parts[0].strip()
    size_text = parts[1].strip()
    if size_text.lower().endswith("pt"):
        size_text = size_text[:-2].strip()
    size = float(size_text)
    if size <= 0:
        raise ValueError(f"Invalid font size '{parts[1].strip()}'")
    font = QFont(family)
    font.setPointSizeF(size)
    return font


def font_to_string(font: QFont) -> str:
    return f"{font.family()}, {format_number(font.pointSizeF())}pt"


def font_style(font: QFont) -> str:
    """``Regular`` / ``Bold`` / ``Italic`` / ``Bold, Italic``."""
    styles = []
    if font.bold():
        styles.append("Bold")
    if font.italic():
        styles.append("Italic")
    return ", ".join(styles) if styles else "Regular"


def apply_font_style(font: QFont, style: str) -> None:
    tokens = {s.strip().lower() for s in str(style).split(",")}
    font.setBold("bold" in tokens)
    font.setItalic("italic" in tokens)


# ============================================================================
# DATA MAPPING
# ============================================================================

_MAPPING_BY_INDEX = (DataMapping.NONE, DataMapping.FLATTEN, DataMapping.GRAFT)


def parse_data_mapping(value: Any) -> DataMapping:
    """Accept ``None`` / ``Flatten`` / ``Graft`` (any case) or 0 / 1 / 2."""
    if isinstance(value, DataMapping):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid data mapping {value!r}")
    if isinstance(value, str):
        text = value.strip()
        for mapping in DataMapping:
            if mapping.value.lower() == text.lower():
                return mapping
        if text.isdigit():
            value = int(text)
        else:
            raise ValueError(f"Invalid data mapping '{value}'")
    if isinstance(value, int) and 0 <= value < len(_MAPPING_BY_INDEX):
        return _MAPPING_BY_INDEX[value]
    raise ValueError(f"Invalid data mapping {value!r}")
