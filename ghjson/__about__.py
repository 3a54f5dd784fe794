# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

Project metadata for GhJSON.
"""

from typing import Final

# Metadata Definitions
__title__: Final[str] = "GhJSON"
__description__: Final[str] = (
    "A portable JSON representation for visual-programming node graphs, "
    "built around an extensible handler-based conversion engine."
)
__version__: Final[str] = "0.1.0"
__schema_version__: Final[str] = "1.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "Apache-2.0"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"

def metadata_summary() -> dict[str, str]:
    """Returns a dictionary of project metadata for introspection."""
    return {
        "title": __title__,
        "version": __version__,
        "schema_version": __schema_version__,
        "license": __license__,
        "description": __description__,
    }
