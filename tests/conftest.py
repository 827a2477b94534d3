"""Shared fixtures for buildmail tests."""

import pytest

from buildmail.logging.context import clear_log_context
from tests.helpers import InMemoryWorkspace, MemoryBuildLog, RecordingDiagnostics


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def diagnostics():
    """Diagnostics sink that records messages."""
    return RecordingDiagnostics()


@pytest.fixture
def workspace():
    """Empty in-memory workspace."""
    return InMemoryWorkspace()


@pytest.fixture
def build_log():
    """Small in-memory build log."""
    return MemoryBuildLog(b"Started by timer\nBUILD SUCCESS\n")


@pytest.fixture(autouse=True)
def clean_buildmail_env(monkeypatch):
    """Keep developer environment variables out of configuration tests."""
    for name in (
        "BUILDMAIL_MAX_ATTACHMENT_SIZE",
        "BUILDMAIL_WORKSPACE_URL",
        "BUILDMAIL_WORKSPACE_TOKEN",
        "LOG_LEVEL",
        "ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)
