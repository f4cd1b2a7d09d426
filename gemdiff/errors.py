"""
Exception types shared across gemdiff.
"""


class GemdiffError(Exception):
    """Base class for all gemdiff errors."""


class NoHunksFound(GemdiffError):
    """Raised when diff text contains no ``@@`` hunk header at all."""

    def __init__(self, message: str = "Diff contains no valid hunks."):
        super().__init__(message)


class ReviewError(GemdiffError):
    """Raised when a review session is used in an invalid state."""


class LLMError(GemdiffError):
    """Raised when all LLM retries are exhausted."""
