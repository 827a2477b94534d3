"""Scoped metadata for structured logging.

Fields pushed here (build id, current pattern, attachment name) are merged
into every log record emitted inside the scope by ``ContextualFilter``.
Backed by contextvars so nested scopes restore cleanly.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional


LogContextVar: ContextVar[Dict[str, Any]] = ContextVar("buildmail_log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return LogContextVar.get().copy()


def push_log_context(**kwargs) -> Token:
    """Merge fields into the active logging context.

    Args:
        **kwargs: Fields to add; existing keys are overwritten

    Returns:
        Token for pop_log_context()

    Example:
        >>> token = push_log_context(build_id="nightly#42")
        >>> pop_log_context(token)
    """
    current = LogContextVar.get()
    return LogContextVar.set({**current, **kwargs})


def pop_log_context(token: Token) -> None:
    """Restore the context captured by push_log_context()."""
    LogContextVar.reset(token)


def clear_log_context() -> None:
    """Drop every context field. Mostly useful in tests."""
    LogContextVar.set({})


class log_context:
    """Context manager adding fields for the duration of a block.

    Example:
        >>> with log_context(build_id="nightly#42", pattern="*.log"):
        ...     logger.info("Listing workspace")
    """

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.token: Optional[Token] = None

    def __enter__(self):
        self.token = push_log_context(**self.kwargs)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.token is not None:
            pop_log_context(self.token)
        return False
