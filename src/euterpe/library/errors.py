"""Error classes for the library engine."""

import sqlite3

from euterpe.common import EuterpeError


class LibraryError(EuterpeError):
    """Base error for library operations."""
    pass


class TransientIOError(LibraryError):
    """Stat, permission or read failure on a single filesystem entry."""
    pass


class MetadataExtractionError(LibraryError):
    """Tags or stream info of a media file could not be read."""
    pass


class PersistenceError(LibraryError):
    """A catalog write failed (constraint violation, storage failure)."""
    pass


class WatchRegistrationError(LibraryError):
    """A directory could not be registered for change notifications."""
    pass


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'io', 'metadata', 'persistence', 'watch',
        or 'unknown'
    """
    if isinstance(exception, TransientIOError):
        return 'io'
    elif isinstance(exception, MetadataExtractionError):
        return 'metadata'
    elif isinstance(exception, PersistenceError):
        return 'persistence'
    elif isinstance(exception, WatchRegistrationError):
        return 'watch'
    elif isinstance(exception, sqlite3.Error):
        return 'persistence'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'
