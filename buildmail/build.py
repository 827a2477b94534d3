"""Build-side collaborators: the build log source and the notification context."""

import shutil
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Union

from buildmail.diagnostics import DiagnosticsSink, LoggerDiagnostics
from buildmail.workspace import Workspace


class BuildLog(ABC):
    """Source of a build's textual console log."""

    @abstractmethod
    def raw_length(self) -> int:
        """Size of the raw log file in bytes.

        Raises:
            OSError: If the log cannot be inspected
        """

    @abstractmethod
    def write_log_to(self, offset: int, sink: BinaryIO) -> int:
        """Write the log text starting at ``offset`` into ``sink``.

        Returns:
            Number of bytes written

        Raises:
            OSError: If the log cannot be read
        """


class FileBuildLog(BuildLog):
    """Build log stored in a local file.

    Attributes:
        path: Path to the log file
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def raw_length(self) -> int:
        return self.path.stat().st_size

    def write_log_to(self, offset: int, sink: BinaryIO) -> int:
        if offset < 0:
            raise ValueError(f"Log offset cannot be negative: {offset}")

        with self.path.open("rb") as log_file:
            log_file.seek(offset)
            start = sink.tell() if sink.seekable() else None
            shutil.copyfileobj(log_file, sink)
            if start is not None:
                return sink.tell() - start
            return max(self.raw_length() - offset, 0)

    def __repr__(self) -> str:
        return f"FileBuildLog({str(self.path)!r})"


@dataclass
class BuildContext:
    """Everything the attachment code needs to know about one notification.

    Attributes:
        build_id: Identifier used in log context (e.g. "nightly#42")
        workspace: Build workspace, or None when none was resolved
        build_log: Source of the build's console log, if any
        variables: Values available to pattern placeholders
        max_attachment_size: Cumulative attachment ceiling in bytes (<= 0 unlimited)
        diagnostics: Sink for progress and error messages
        cancel_event: Set by the caller to abort attachment collection
    """

    build_id: str = "build"
    workspace: Optional[Workspace] = None
    build_log: Optional[BuildLog] = None
    variables: Dict[str, Any] = field(default_factory=dict)
    max_attachment_size: int = 0
    diagnostics: DiagnosticsSink = field(default_factory=LoggerDiagnostics)
    cancel_event: Optional[threading.Event] = None

    def template_context(self) -> Dict[str, Any]:
        """Variables for placeholder expansion, including ``build_id``."""
        return {"build_id": self.build_id, **self.variables}
