"""
Engine exceptions.

The engine only fails on caller data-shape violations. A missing profile
is a supported fallback path, not an error, and an empty candidate pool
simply yields an empty selection.
"""


class DecodeQuestError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidInputError(DecodeQuestError, ValueError):
    """Raised when a caller passes data that violates an engine contract."""
    pass


class ProfileValidationError(InvalidInputError):
    """Raised when a supplied learner profile is structurally malformed."""
    pass


class ContentBankError(InvalidInputError):
    """Raised when a content bank record cannot be turned into an item."""
    pass
