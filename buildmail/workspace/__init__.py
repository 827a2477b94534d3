"""Workspace providers for resolving attachment patterns.

- LocalWorkspace: a directory on this machine
- RemoteWorkspace: a directory on a remote node, reached over HTTP

Both return ResolvedFile handles exposing ``name``, ``length()`` and
``open_read()``; the attachment collector depends on nothing else.
"""

from .base import ResolvedFile, Workspace
from .exceptions import (
    WorkspaceError,
    WorkspaceHTTPError,
    WorkspacePatternError,
    WorkspaceResponseError,
    WorkspaceTimeoutError,
)
from .local import LocalFile, LocalWorkspace, normalize_pattern
from .remote import RemoteFile, RemoteWorkspace

__all__ = [
    # Interfaces
    "Workspace",
    "ResolvedFile",
    # Providers
    "LocalWorkspace",
    "LocalFile",
    "RemoteWorkspace",
    "RemoteFile",
    "normalize_pattern",
    # Exceptions
    "WorkspaceError",
    "WorkspacePatternError",
    "WorkspaceHTTPError",
    "WorkspaceTimeoutError",
    "WorkspaceResponseError",
]
