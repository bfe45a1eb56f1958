"""Read-only search over the catalog."""

import logging
import os
from dataclasses import asdict, dataclass
from typing import List

from .catalog import Catalog
from .models import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """One matching track, as returned to the HTTP layer."""

    id: int
    title: str
    album: str
    album_id: int
    artist: str
    artist_id: int
    track_number: int
    duration: int
    format: str

    @classmethod
    def from_track(cls, track: Track) -> 'SearchResult':
        return cls(
            id=track.id,
            title=track.title,
            album=track.album,
            album_id=track.album_id,
            artist=track.artist,
            artist_id=track.artist_id,
            track_number=track.track_number,
            duration=track.duration,
            format=os.path.splitext(track.fs_path)[1].lstrip('.').lower(),
        )

    def to_dict(self) -> dict:
        return asdict(self)


class SearchIndex:
    """
    Case-insensitive substring search on track title, album and artist.

    Results are ordered by artist, album, track number and id.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def search(self, query: str) -> List[SearchResult]:
        needle = query.strip().casefold()
        if not needle:
            return []

        results = [SearchResult.from_track(track) for track in self.catalog.tracks.search(needle)]
        logger.debug(f"Search: {{'query': {query!r}, 'results': {len(results)}}}")
        return results
