"""Custom exceptions for workspace providers."""


class WorkspaceError(OSError):
    """Base exception for all workspace access errors.

    Subclasses OSError so callers that handle file access failures generically
    also handle remote workspace failures. The attachment collector treats any
    of these as an I/O failure that ends the collection pass early.
    """

    pass


class WorkspacePatternError(WorkspaceError):
    """A glob pattern cannot be evaluated against the workspace.

    Raised for absolute patterns or patterns that escape the workspace root
    with ``..`` segments.
    """

    def __init__(self, message: str, pattern: str) -> None:
        super().__init__(message)
        self.pattern = pattern


class WorkspaceHTTPError(WorkspaceError):
    """A request to a remote workspace agent failed with an HTTP error status."""

    def __init__(self, message: str, status_code: int, url: str) -> None:
        """Initialize HTTP error with status code and URL.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (0 when no response was received)
            url: URL that failed
        """
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class WorkspaceTimeoutError(WorkspaceError):
    """A request to a remote workspace agent did not complete in time."""

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class WorkspaceResponseError(WorkspaceError):
    """A remote workspace agent returned a body that could not be parsed.

    Covers invalid JSON as well as listings with missing or malformed fields.
    """

    pass
