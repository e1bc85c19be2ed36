"""
Errors raised by the session scoring core.

Model invariant violations surface as ``pydantic.ValidationError``, which is
re-exported here so callers can catch both from one place.
"""

from pydantic import ValidationError


class InputTooLarge(ValueError):
    """Raised when session content exceeds the parsing size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File content exceeds maximum allowed size for parsing "
            f"({size} bytes > {limit} bytes)"
        )


__all__ = ['InputTooLarge', 'ValidationError']
