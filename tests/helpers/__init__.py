"""Test helper utilities for buildmail tests."""

from .doubles import (
    FailingFile,
    InMemoryFile,
    InMemoryWorkspace,
    MemoryBuildLog,
    RecordingDiagnostics,
    names,
)

__all__ = [
    "FailingFile",
    "InMemoryFile",
    "InMemoryWorkspace",
    "MemoryBuildLog",
    "RecordingDiagnostics",
    "names",
]
