"""Attachment entry for the build's console log, optionally zipped."""

import io
from typing import BinaryIO, Optional

from buildmail.build import BuildLog
from buildmail.diagnostics import DiagnosticsSink, LoggerDiagnostics
from buildmail.logging import get_logger

from .archive import ZipArchiver
from .exceptions import AttachmentError
from .models import AttachmentEntry, SizeBudget

logger = get_logger(__name__, component="build_log")

LOG_ENTRY_NAME = "build.log"
ARCHIVE_NAME = "build.zip"
LOG_CONTENT_TYPE = "text/plain"
ARCHIVE_CONTENT_TYPE = "application/zip"


class LogAttachmentBuilder:
    """Builds the ``build.log`` / ``build.zip`` attachment.

    The size check compares the raw, uncompressed log length against the
    ceiling even when compression is requested, because the archive size is
    unknown until the log is fully rendered. This can skip a log that would
    have fit once compressed.
    """

    def __init__(self, archiver: Optional[ZipArchiver] = None):
        self.archiver = archiver or ZipArchiver()

    def build(
        self,
        build_log: BuildLog,
        budget: SizeBudget,
        compress: bool = False,
        diagnostics: Optional[DiagnosticsSink] = None,
    ) -> Optional[AttachmentEntry]:
        """Build the log attachment entry.

        Args:
            build_log: Source of the console log
            budget: Size budget; only its ceiling is consulted
            compress: Whether to attach the log as a single-entry zip
            diagnostics: Progress/error sink

        Returns:
            The entry, or None when the log was skipped or could not be
            attached. Never raises.
        """
        diagnostics = diagnostics or LoggerDiagnostics()

        try:
            raw_length = build_log.raw_length()

            if not budget.unlimited and raw_length >= budget.ceiling:
                diagnostics.info(
                    "Skipping build log attachment - too large for maximum attachments size"
                )
                logger.info(
                    "Build log over attachment ceiling",
                    extra={
                        "event": "attachments.build_log.skipped",
                        "size": raw_length,
                        "budget_ceiling": budget.ceiling,
                    },
                )
                return None

            if compress:
                diagnostics.info("Request made to compress build log")

            entry = AttachmentEntry(
                name=ARCHIVE_NAME if compress else LOG_ENTRY_NAME,
                content_type=ARCHIVE_CONTENT_TYPE if compress else LOG_CONTENT_TYPE,
                open_stream=lambda: self._open_log(build_log, compress),
                size=None if compress else raw_length,
            )

        except (AttachmentError, OSError) as e:
            diagnostics.error(f"Error attaching build log to message: {e}")
            logger.error(
                f"Failed to build log attachment: {e}",
                extra={"event": "attachments.build_log.failed"},
            )
            return None

        logger.debug(
            f"Prepared {entry.name} attachment",
            extra={
                "event": "attachments.build_log.prepared",
                "attachment": entry.name,
                "size": raw_length,
                "compressed": compress,
            },
        )
        return entry

    def _open_log(self, build_log: BuildLog, compress: bool) -> BinaryIO:
        """Render the full log into memory, zipping it when requested."""
        buffer = io.BytesIO()
        build_log.write_log_to(0, buffer)
        buffer.seek(0)

        if compress:
            return self.archiver.wrap(LOG_ENTRY_NAME, buffer)
        return buffer
