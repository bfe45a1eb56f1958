"""Audio metadata extraction using mutagen."""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

import mutagen
from mutagen import MutagenError
from mutagen.asf import ASFTags
from mutagen.id3 import ID3

from .errors import MetadataExtractionError

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "Unknown"


@dataclass(frozen=True)
class TrackMetadata:
    """Tags of one media file as needed by the catalog."""

    title: str
    artist: str
    album: str
    track_number: int = 0
    duration: int = 0


class Extractor(Protocol):
    """Anything that turns a media file path into TrackMetadata."""

    def extract(self, path: Path | str) -> TrackMetadata:
        ...


def parse_track_number(value: Optional[str]) -> int:
    """
    Parse a track number tag.

    Args:
        value: Raw tag value, e.g. ``"3"``, ``"03/12"`` or ``None``

    Returns:
        The track number, or 0 when missing or unparseable
    """
    if not value:
        return 0
    head = str(value).split('/', 1)[0].strip()
    try:
        return max(int(head), 0)
    except ValueError:
        return 0


# Formats without an easy tag view: WAVE and AIFF carry raw ID3, WMA carries ASF
ID3_FRAMES = {
    'title': 'TIT2',
    'artist': 'TPE1',
    'albumartist': 'TPE2',
    'album': 'TALB',
    'tracknumber': 'TRCK',
}

ASF_KEYS = {
    'title': 'Title',
    'artist': 'Author',
    'albumartist': 'WM/AlbumArtist',
    'album': 'WM/AlbumTitle',
    'tracknumber': 'WM/TrackNumber',
}


def _first_value(values) -> Optional[str]:
    if not values:
        return None
    value = str(values[0]).strip()
    return value or None


def read_tag(tags, key: str) -> Optional[str]:
    """
    First value of an easy-style tag (``title``, ``artist``, ...).

    Works on easy tag views as well as on raw ID3 and ASF tags.
    """
    if not tags:
        return None

    if isinstance(tags, ID3):
        frame = tags.get(ID3_FRAMES[key])
        return _first_value(frame.text if frame is not None else None)

    if isinstance(tags, ASFTags):
        asf_key = ASF_KEYS[key]
        return _first_value(tags[asf_key] if asf_key in tags else None)

    return _first_value(tags.get(key))


class MetadataExtractor:
    """
    Extracts title, artist, album, track number and duration with mutagen.

    Missing tags fall back to the file stem (title), ``"Unknown"`` (artist)
    and the parent directory name (album). Files mutagen cannot identify or
    read raise MetadataExtractionError.
    """

    def extract(self, path: Path | str) -> TrackMetadata:
        file_path = Path(path)

        try:
            audio = mutagen.File(file_path, easy=True)
        except (MutagenError, OSError) as e:
            raise MetadataExtractionError(
                f"Failed to read tags: {e}", path=str(file_path)
            ) from e

        if audio is None:
            raise MetadataExtractionError("Unrecognized audio format", path=str(file_path))

        tags = audio.tags
        duration = 0
        info = getattr(audio, 'info', None)
        length = getattr(info, 'length', None)
        if length and math.isfinite(length):
            duration = int(length)

        metadata = TrackMetadata(
            title=read_tag(tags, 'title') or file_path.stem,
            artist=read_tag(tags, 'artist') or read_tag(tags, 'albumartist') or UNKNOWN_ARTIST,
            album=read_tag(tags, 'album') or file_path.parent.name,
            track_number=parse_track_number(read_tag(tags, 'tracknumber')),
            duration=duration,
        )
        logger.debug(f"Extracted metadata: {{'path': {str(file_path)!r}, 'title': {metadata.title!r}}}")
        return metadata
