"""Pytest configuration for dockomatic tests."""

import logging

import pytest
import structlog

from dockomatic.config import HelperSettings


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path, monkeypatch):
    """Keep JSON logs and settings lookups inside the test's temp folder."""
    monkeypatch.setenv("DOCKOMATIC_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("DOCKOMATIC_CONFIG", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def settings(tmp_path) -> HelperSettings:
    """Settings allocating every directory below ``tmp_path/tmp``."""
    return HelperSettings(temp_root=tmp_path / "tmp", auto_remove_container=False)
