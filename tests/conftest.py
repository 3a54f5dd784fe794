# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

conftest.py
-----------
Shared fixtures: a headless Qt application, a fresh engine and a fresh
codec registry per test.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtGui import QGuiApplication

from ghjson.datatypes.valuecodec import DataTypeRegistry
from ghjson.engine import Engine


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """QFont needs a GUI application for font resolution."""
    app = QGuiApplication.instance() or QGuiApplication([])
    yield app


@pytest.fixture
def registry() -> DataTypeRegistry:
    return DataTypeRegistry()


@pytest.fixture
def engine() -> Engine:
    return Engine()
