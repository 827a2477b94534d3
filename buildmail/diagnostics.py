"""Diagnostics sinks for human-readable progress and error messages.

A diagnostics sink plays the role of a build listener: it receives lines
like "File report.xml was attached" that end up in the build console. Sinks
are fire-and-forget and never raise into the caller.
"""

from abc import ABC, abstractmethod
from typing import Optional, TextIO

from buildmail.logging import get_logger

logger = get_logger(__name__, component="diagnostics")


class DiagnosticsSink(ABC):
    """Destination for attachment progress and error messages."""

    @abstractmethod
    def info(self, message: str) -> None:
        """Report a progress message."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Report an error message."""


class LoggerDiagnostics(DiagnosticsSink):
    """Routes diagnostics to the structured logger."""

    def __init__(self, logger_instance=None) -> None:
        self.logger = logger_instance or logger

    def info(self, message: str) -> None:
        self.logger.info(message, extra={"event": "diagnostics.info"})

    def error(self, message: str) -> None:
        self.logger.error(message, extra={"event": "diagnostics.error"})


class StreamDiagnostics(DiagnosticsSink):
    """Writes diagnostics as lines to a text stream, like a build console.

    Error lines are prefixed with ``ERROR: ``. Write failures are logged and
    swallowed so a broken console never affects the notification.

    Attributes:
        stream: Text stream receiving the lines
        mirror_to_log: Whether messages are also sent to the structured logger
    """

    ERROR_PREFIX = "ERROR: "

    def __init__(self, stream: TextIO, mirror_to_log: bool = True) -> None:
        self.stream = stream
        self.mirror_to_log = mirror_to_log
        self._log: Optional[LoggerDiagnostics] = LoggerDiagnostics() if mirror_to_log else None

    def info(self, message: str) -> None:
        self._write(message)
        if self._log:
            self._log.info(message)

    def error(self, message: str) -> None:
        self._write(f"{self.ERROR_PREFIX}{message}")
        if self._log:
            self._log.error(message)

    def _write(self, line: str) -> None:
        try:
            self.stream.write(line + "\n")
            self.stream.flush()
        except (OSError, ValueError) as e:
            logger.warning(
                f"Failed to write diagnostic line: {e}",
                extra={"event": "diagnostics.write_failed"},
            )
