"""Appending attachment entries to an outbound e-mail message."""

from email.message import EmailMessage
from typing import Iterable, Optional

from buildmail.diagnostics import DiagnosticsSink, LoggerDiagnostics
from buildmail.logging import get_logger

from .models import AttachmentEntry

logger = get_logger(__name__, component="compose")


def add_attachments(
    message: EmailMessage,
    entries: Iterable[AttachmentEntry],
    diagnostics: Optional[DiagnosticsSink] = None,
) -> int:
    """Append entries to the message in order.

    Each entry's stream is opened, read once and closed. A stream that
    cannot be read stops the loop; entries already appended stay on the
    message.

    Args:
        message: Message to extend (converted to multipart/mixed as needed)
        entries: Attachment entries in the order they should appear
        diagnostics: Progress/error sink

    Returns:
        Number of entries appended
    """
    diagnostics = diagnostics or LoggerDiagnostics()
    added = 0

    for entry in entries:
        try:
            data = entry.read_bytes()
        except OSError as e:
            diagnostics.error(f"Error accessing files to attach: {e}")
            logger.error(
                f"Failed to read attachment {entry.name}: {e}",
                extra={"event": "compose.attachment.read_failed", "attachment": entry.name},
            )
            break

        message.add_attachment(
            data,
            maintype=entry.maintype,
            subtype=entry.subtype,
            filename=entry.name,
            cid=entry.content_id,
        )
        added += 1

        logger.debug(
            f"Added {entry.name} to message",
            extra={
                "event": "compose.attachment.added",
                "attachment": entry.name,
                "size": len(data),
            },
        )

    return added


def build_message(
    subject: str,
    body: str,
    sender: Optional[str] = None,
    recipients: Optional[Iterable[str]] = None,
) -> EmailMessage:
    """Create a plain-text message ready to receive attachments."""
    message = EmailMessage()
    message["Subject"] = subject
    if sender:
        message["From"] = sender
    recipient_list = [r.strip() for r in (recipients or []) if r and r.strip()]
    if recipient_list:
        message["To"] = ", ".join(recipient_list)
    message.set_content(body)
    return message
