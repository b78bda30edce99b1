"""Shared test fixtures for Claude Usage Tracker."""

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest

from claude_usage_tracker.utils.clock import FixedClock

PROJECT_DIR_NAME = "-home-wiz-projects-myapp"


@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication for tests that need Qt."""
    os.environ["QT_QPA_PLATFORM"] = "offscreen"
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv or ["test"])
    yield app


@pytest.fixture
def isolated_settings(qapp, tmp_path):
    """Point the default QSettings at a throwaway directory."""
    from PySide6.QtCore import QSettings
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path / "config"))
    return tmp_path / "config"


@pytest.fixture
def now() -> datetime:
    """Local noon, so an hour either side stays on the same calendar day."""
    return datetime(2026, 2, 13, 12, 0, 0).astimezone()


@pytest.fixture
def clock(now) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def data_root(tmp_path) -> Path:
    """Create a temporary Claude data directory with one project."""
    root = tmp_path / ".claude"
    (root / "projects" / PROJECT_DIR_NAME).mkdir(parents=True)
    return root


@pytest.fixture
def project_dir(data_root) -> Path:
    return data_root / "projects" / PROJECT_DIR_NAME
