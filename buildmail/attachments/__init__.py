"""Attachment collection and size budgeting for build notifications.

This package provides:
- AttachmentCollector: resolves glob patterns into size-bounded entries
- LogAttachmentBuilder: the build log as ``build.log`` or ``build.zip``
- SizeBudget: the cumulative ceiling shared by one notification
- AttachmentService: top-level attach operations on an EmailMessage
- content_type_for: static extension to MIME type lookup
"""

from .archive import ZipArchiver
from .build_log import LogAttachmentBuilder
from .collector import AttachmentCollector
from .compose import add_attachments, build_message
from .content_types import DEFAULT_CONTENT_TYPE, content_type_for
from .exceptions import AttachmentEntryError, AttachmentError, TemplateExpansionError
from .models import (
    AttachmentEntry,
    AttachmentOutcome,
    AttachmentSpec,
    CollectionResult,
    OutcomeStatus,
    SizeBudget,
    content_id_for,
)
from .service import AttachmentReport, AttachmentService
from .templating import JinjaTemplateExpander, TemplateExpander

__all__ = [
    # Main service
    "AttachmentService",
    "AttachmentReport",
    # Components
    "AttachmentCollector",
    "LogAttachmentBuilder",
    "ZipArchiver",
    "TemplateExpander",
    "JinjaTemplateExpander",
    # Models
    "AttachmentSpec",
    "AttachmentEntry",
    "AttachmentOutcome",
    "CollectionResult",
    "OutcomeStatus",
    "SizeBudget",
    # Exceptions
    "AttachmentError",
    "AttachmentEntryError",
    "TemplateExpansionError",
    # Utilities
    "add_attachments",
    "build_message",
    "content_id_for",
    "content_type_for",
    "DEFAULT_CONTENT_TYPE",
]
