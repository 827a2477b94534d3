"""Abstract workspace interfaces.

A workspace is the build's working directory, which may live on the machine
running buildmail or on a remote execution node. The attachment collector
only sees these two interfaces, so local and remote providers are
interchangeable.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, List


class ResolvedFile(ABC):
    """Handle to one file matched in a workspace.

    Provided by a Workspace; the attachment code never creates these itself.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Base name of the file (no directory components)."""

    @abstractmethod
    def length(self) -> int:
        """Size of the file in bytes.

        Raises:
            OSError: If the size cannot be determined
        """

    @abstractmethod
    def open_read(self) -> BinaryIO:
        """Open a binary read stream over the file content.

        The caller owns the returned stream and must close it.

        Raises:
            OSError: If the file cannot be opened
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Workspace(ABC):
    """A build workspace that can be searched with glob patterns."""

    @abstractmethod
    def list(self, pattern: str) -> List[ResolvedFile]:
        """Return every file matching the glob pattern.

        Patterns are relative to the workspace root and use ``*``, ``?`` and
        ``**`` (any number of directories). An empty list means no match and
        is not an error.

        Args:
            pattern: Glob pattern, already trimmed

        Returns:
            Matching files in provider order

        Raises:
            OSError: If the workspace cannot be listed
        """

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable location used in log messages."""
