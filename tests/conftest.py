"""pytest configuration for sysgraph tests.

Qt-based tests run against the offscreen platform so no display server is
needed; they skip themselves when PySide6 cannot be imported.
"""

#      Copyright (c) 2025 predator. All rights reserved.

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture
def qapp():
    """Provide the shared QApplication for widget tests."""
    pytest.importorskip("PySide6")
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])
