"""Tests for library error classification."""

import sqlite3

import pytest

from euterpe.common import EuterpeError
from euterpe.library.errors import (
    LibraryError,
    MetadataExtractionError,
    PersistenceError,
    TransientIOError,
    WatchRegistrationError,
    classify_error,
)


class TestClassifyError:

    @pytest.mark.parametrize("error,category", [
        (TransientIOError("x"), 'io'),
        (MetadataExtractionError("x"), 'metadata'),
        (PersistenceError("x"), 'persistence'),
        (WatchRegistrationError("x"), 'watch'),
        (sqlite3.IntegrityError("UNIQUE constraint failed"), 'persistence'),
        (PermissionError(13, "Permission denied"), 'io'),
        (FileNotFoundError(2, "No such file"), 'io'),
        (ValueError("bad"), 'unknown'),
    ])
    def test_categories(self, error, category):
        assert classify_error(error) == category

    def test_hierarchy(self):
        for cls in (TransientIOError, MetadataExtractionError, PersistenceError, WatchRegistrationError):
            assert issubclass(cls, LibraryError)
        assert issubclass(LibraryError, EuterpeError)
