"""
Exception types raised by the engine and a helper for
consistent error message extraction.
"""

from __future__ import annotations


class PrivacyGuardError(Exception):
    """Base class for engine errors."""


class InvalidDomainError(PrivacyGuardError, ValueError):
    """Raised when user-supplied list entries are not valid hostnames."""

    def __init__(self, entries: list[str]) -> None:
        self.entries = entries
        super().__init__(f"Invalid domain entries: {', '.join(entries)}")


class CatalogLoadError(PrivacyGuardError):
    """Raised when the tracker catalog source cannot be read."""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Exceptions with an empty message fall back to their class name.
    """
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return "Unknown error"
