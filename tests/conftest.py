"""Shared test setup: isolated HOME for log files and headless Qt."""

import os
import sys
import tempfile
from pathlib import Path

# Redirect HOME so loggers and configs write inside a throwaway location before imports
TEST_HOME = tempfile.mkdtemp(prefix='quick_logcat_test_home_')
os.environ['HOME'] = TEST_HOME
os.environ.pop('XDG_DATA_HOME', None)
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest  # noqa: E402
from PyQt6.QtWidgets import QApplication  # noqa: E402

# One widget-capable application for the whole session; core-only tests reuse it
_APP = QApplication.instance() or QApplication([])


@pytest.fixture(scope='session')
def qt_app():
    return _APP
