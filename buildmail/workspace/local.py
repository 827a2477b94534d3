"""Workspace provider backed by the local filesystem."""

import re
from pathlib import Path, PurePosixPath
from typing import BinaryIO, List, Union

from buildmail.logging import get_logger

from .base import ResolvedFile, Workspace
from .exceptions import WorkspaceError, WorkspacePatternError

logger = get_logger(__name__, component="workspace")

_REPEATED_STARS = re.compile(r"\*{2,}")


class LocalFile(ResolvedFile):
    """A regular file inside a local workspace."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def name(self) -> str:
        return self.path.name

    def length(self) -> int:
        return self.path.stat().st_size

    def open_read(self) -> BinaryIO:
        return self.path.open("rb")

    def __str__(self) -> str:
        return str(self.path)


def normalize_pattern(pattern: str) -> str:
    """Normalize a workspace glob pattern to a relative POSIX pattern.

    Backslashes become forward slashes, and a trailing slash selects the whole
    directory tree (``reports/`` is treated as ``reports/**/*``). ``**`` only
    spans directories as a whole segment; inside a segment (``**.log``,
    ``foo**.txt``) it matches like ``*``.

    Raises:
        WorkspacePatternError: If the pattern is absolute or contains ``..``
    """
    normalized = pattern.strip().replace("\\", "/")
    if not normalized:
        raise WorkspacePatternError("Pattern cannot be empty", pattern)

    if normalized.startswith("/") or PurePosixPath(normalized).is_absolute() or (
        len(normalized) > 1 and normalized[1] == ":"
    ):
        raise WorkspacePatternError(
            f"Pattern must be relative to the workspace: '{pattern}'", pattern
        )

    if ".." in PurePosixPath(normalized).parts:
        raise WorkspacePatternError(
            f"Pattern must not leave the workspace: '{pattern}'", pattern
        )

    normalized = "/".join(
        segment if segment == "**" else _REPEATED_STARS.sub("*", segment)
        for segment in normalized.split("/")
    )

    if normalized.endswith("/"):
        normalized += "**/*"

    return normalized


class LocalWorkspace(Workspace):
    """Workspace rooted at a local directory.

    Attributes:
        root: Workspace root directory
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def list(self, pattern: str) -> List[ResolvedFile]:
        """Glob the workspace and return matching regular files.

        Results are sorted by their path relative to the root so that the
        order does not depend on directory iteration order.

        Raises:
            WorkspacePatternError: If the pattern is not workspace-relative
            WorkspaceError: If the workspace root is missing or unreadable
        """
        normalized = normalize_pattern(pattern)

        if not self.root.is_dir():
            raise WorkspaceError(f"Workspace directory does not exist: {self.root}")

        try:
            matches = sorted(
                (path for path in self.root.glob(normalized) if path.is_file()),
                key=lambda path: path.relative_to(self.root).as_posix(),
            )
        except ValueError as e:
            raise WorkspacePatternError(
                f"Invalid pattern '{pattern}': {e}", pattern
            ) from e

        logger.debug(
            f"Pattern {normalized} matched {len(matches)} file(s) in {self.root}",
            extra={
                "event": "workspace.list.completed",
                "pattern": normalized,
                "match_count": len(matches),
            },
        )

        return [LocalFile(path) for path in matches]

    def describe(self) -> str:
        return str(self.root)
