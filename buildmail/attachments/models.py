"""Data models for attachment collection.

This module defines the values that flow between the collector, the build
log builder and the message composer, plus the running size budget shared
by all of them within one notification.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, List, Optional

from .exceptions import AttachmentEntryError

StreamFactory = Callable[[], BinaryIO]


@dataclass(frozen=True)
class AttachmentSpec:
    """Raw attachment pattern as configured for a notification.

    The pattern may contain template placeholders and several glob patterns
    separated by commas. Placeholders are expanded over the whole string
    before it is split, so a placeholder may itself expand to a list.

    Attributes:
        pattern: Raw pattern string, e.g. "reports/*.xml, {{ job }}-*.log"
    """

    pattern: str = ""

    def is_blank(self) -> bool:
        """Check whether no attachments were requested."""
        return not self.pattern or not self.pattern.strip()

    @staticmethod
    def split_patterns(expanded: str) -> List[str]:
        """Split an expanded pattern string into individual glob patterns.

        Segments are trimmed and blank segments are dropped, so
        ``"a*.log, , b*.txt"`` yields ``["a*.log", "b*.txt"]``.
        """
        return [segment.strip() for segment in expanded.split(",") if segment.strip()]


def content_id_for(name: str) -> str:
    """Content-ID used to reference an attachment from an HTML body."""
    return f"<{name}>"


@dataclass(frozen=True)
class AttachmentEntry:
    """A named, typed, lazily-read unit handed to the message composer.

    The stream is not opened until the composer reads the entry, so
    collecting many large files costs nothing until the message is built.

    Attributes:
        name: File name shown to the recipient
        content_type: MIME type in 'type/subtype' form
        open_stream: Zero-argument callable returning a fresh binary stream
        content_id: Optional Content-ID (including angle brackets)
        size: Size in bytes when known up front

    Raises:
        AttachmentEntryError: If the name, content type or stream factory is invalid
    """

    name: str
    content_type: str
    open_stream: StreamFactory = field(repr=False)
    content_id: Optional[str] = None
    size: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise AttachmentEntryError("Attachment name cannot be empty")
        if "/" in self.name or "\\" in self.name:
            raise AttachmentEntryError(
                f"Attachment name must not contain path separators: '{self.name}'"
            )

        maintype, _, subtype = (self.content_type or "").partition("/")
        if not maintype or not subtype:
            raise AttachmentEntryError(
                f"Invalid content type '{self.content_type}' for attachment '{self.name}'. "
                f"Expected 'type/subtype' format."
            )

        if not callable(self.open_stream):
            raise AttachmentEntryError(
                f"Attachment '{self.name}' has no stream factory"
            )

    @property
    def maintype(self) -> str:
        return self.content_type.split("/", 1)[0]

    @property
    def subtype(self) -> str:
        return self.content_type.split("/", 1)[1]

    def read_bytes(self) -> bytes:
        """Open the stream, read it fully and close it on every exit path.

        Raises:
            OSError: If the stream cannot be opened or read
        """
        with self.open_stream() as stream:
            return stream.read()


class SizeBudget:
    """Cumulative byte ceiling shared by every attachment of one notification.

    A candidate is admitted only if ``ceiling <= 0`` (unlimited) or
    ``total + size < ceiling``. Rejecting one candidate does not seal the
    budget: a later, smaller candidate may still fit.

    Check and commit are separate calls so that the size is only committed
    once the entry has actually been built. This is not atomic; a budget
    must not be shared between threads.

    Attributes:
        ceiling: Maximum cumulative size in bytes (<= 0 means unlimited)
        total: Bytes committed so far
    """

    def __init__(self, ceiling: int = 0, total: int = 0) -> None:
        self.ceiling = ceiling
        self.total = total

    @property
    def unlimited(self) -> bool:
        return self.ceiling <= 0

    @property
    def remaining(self) -> Optional[int]:
        """Bytes left before the ceiling, or None when unlimited."""
        if self.unlimited:
            return None
        return max(self.ceiling - self.total, 0)

    def admits(self, size: int) -> bool:
        """Check whether a candidate of the given size fits in the budget."""
        return self.unlimited or self.total + size < self.ceiling

    def commit(self, size: int) -> None:
        """Record an accepted candidate's size."""
        self.total += size

    def release(self, size: int) -> None:
        """Give back bytes committed for entries that were later discarded."""
        self.total = max(self.total - size, 0)

    def __repr__(self) -> str:
        return f"SizeBudget(ceiling={self.ceiling}, total={self.total})"


class OutcomeStatus(str, Enum):
    """What happened to one candidate file."""

    ACCEPTED = "accepted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class AttachmentOutcome:
    """Result of considering one candidate file for attachment.

    Attributes:
        name: Candidate file name
        size: Candidate size in bytes
        status: accepted, skipped (over budget) or failed (entry rejected)
        reason: Human-readable reason for skipped/failed outcomes
        entry: The built entry when accepted
    """

    name: str
    size: int
    status: OutcomeStatus
    reason: Optional[str] = None
    entry: Optional[AttachmentEntry] = None

    @classmethod
    def accepted(cls, entry: AttachmentEntry, size: int) -> "AttachmentOutcome":
        return cls(name=entry.name, size=size, status=OutcomeStatus.ACCEPTED, entry=entry)

    @classmethod
    def skipped(cls, name: str, size: int, reason: str) -> "AttachmentOutcome":
        return cls(name=name, size=size, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, name: str, size: int, reason: str) -> "AttachmentOutcome":
        return cls(name=name, size=size, status=OutcomeStatus.FAILED, reason=reason)


@dataclass
class CollectionResult:
    """Aggregate result of one collection pass.

    Attributes:
        outcomes: One outcome per candidate file, in processing order
        aborted: Whether the pass ended early
        abort_reason: Message describing why the pass ended early
        interrupted: Whether the pass was cancelled (entries are discarded)
    """

    outcomes: List[AttachmentOutcome] = field(default_factory=list)
    aborted: bool = False
    abort_reason: Optional[str] = None
    interrupted: bool = False

    @property
    def entries(self) -> List[AttachmentEntry]:
        """Accepted entries in order; always empty for an interrupted pass."""
        if self.interrupted:
            return []
        return [o.entry for o in self.outcomes if o.status == OutcomeStatus.ACCEPTED and o.entry]

    @property
    def accepted_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.ACCEPTED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.SKIPPED)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == OutcomeStatus.FAILED)

    @property
    def accepted_bytes(self) -> int:
        return sum(o.size for o in self.outcomes if o.status == OutcomeStatus.ACCEPTED)
