import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the global JSON config at a throwaway file."""
    from mdbrowse.app import config

    path = tmp_path / "mdbrowse_config.json"
    monkeypatch.setattr(config, "GLOBAL_CONFIG", path)
    return path
