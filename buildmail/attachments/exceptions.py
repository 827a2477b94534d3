"""Custom exceptions for attachment collection."""


class AttachmentError(Exception):
    """Base exception for attachment-related errors.

    None of these escape the top-level collector, log builder or service
    calls; they are converted to diagnostics there.
    """

    pass


class AttachmentEntryError(AttachmentError, ValueError):
    """An attachment entry could not be constructed.

    Raised for an empty name, a malformed content type or a missing stream
    factory. The collector skips the offending file and keeps going.
    """

    pass


class TemplateExpansionError(AttachmentError):
    """Placeholder expansion of an attachment pattern failed."""

    pass
