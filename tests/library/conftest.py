"""Shared fixtures for library engine tests."""

import threading
from pathlib import Path
from typing import List, Optional

import pytest

from euterpe.library.catalog import Catalog
from euterpe.library.config import ScanConfig
from euterpe.library.database import DatabaseConnection
from euterpe.library.errors import MetadataExtractionError
from euterpe.library.metadata import TrackMetadata


class TextTagExtractor:
    """
    Reads tags from plain text files: ``artist|album|title|number|duration``.

    Empty fields fall back like the mutagen extractor does. A file containing
    ``broken`` raises MetadataExtractionError. Every extracted path is
    appended to ``calls`` when a list is given.
    """

    def __init__(self, calls: Optional[List] = None):
        self.calls = calls
        self._lock = threading.Lock()

    def extract(self, path):
        path = Path(path)
        if self.calls is not None:
            with self._lock:
                self.calls.append(('extract', str(path)))

        try:
            content = path.read_text(encoding='utf-8').strip()
        except OSError as e:
            raise MetadataExtractionError(f"Failed to read tags: {e}", path=str(path)) from e

        if content == 'broken':
            raise MetadataExtractionError("Unrecognized audio format", path=str(path))

        fields = (content.split('|') + [''] * 5)[:5]
        artist, album, title, number, duration = (field.strip() for field in fields)
        return TrackMetadata(
            title=title or path.stem,
            artist=artist or "Unknown",
            album=album or path.parent.name,
            track_number=int(number) if number else 0,
            duration=int(duration) if duration else 0,
        )


@pytest.fixture
def extractor():
    return TextTagExtractor()


@pytest.fixture
def db(tmp_path):
    """Database connection on a temporary file."""
    db = DatabaseConnection(tmp_path / "library.db")
    yield db
    db.close()


@pytest.fixture
def catalog(db, extractor):
    """Migrated catalog using the text tag extractor."""
    catalog = Catalog(db, extractor=extractor)
    catalog.initialize()
    yield catalog
    catalog.close()


@pytest.fixture
def music_root(tmp_path):
    root = tmp_path / "music"
    root.mkdir()
    return root


@pytest.fixture
def make_track():
    """Create a media file whose content encodes its tags."""

    def _make_track(path: Path, artist="", album="", title="", number=0, duration=0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"{artist}|{album}|{title}|{number or ''}|{duration or ''}", encoding='utf-8')
        return path

    return _make_track


@pytest.fixture
def fast_scan_config():
    return ScanConfig(initial_wait=0, files_per_operation=0, sleep_per_operation=0)


@pytest.fixture
def extractor_factory():
    return TextTagExtractor
