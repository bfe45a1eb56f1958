"""Relational catalog of tracks, albums and artists."""

import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

from euterpe.common import album_path_for, normalize_path
from .dal import AlbumDAL, ArtistDAL, TrackDAL, TrackRecord
from .database import DatabaseConnection
from .errors import PersistenceError
from .metadata import Extractor, MetadataExtractor
from .migrations import MigrationRunner
from .models import Album, Artist, BrowseArgs, BrowsePage, Track

logger = logging.getLogger(__name__)

CATALOG_TABLES = ('tracks', 'albums', 'artists')


class Catalog:
    """
    The library's relational store.

    Writers (parallel walkers, watcher events, ``add_media`` callers) all go
    through ``upsert``/``remove``; each call is one transaction on the shared
    connection, so no reader ever sees a track whose album or artist is
    missing and no natural key is ever inserted twice.
    """

    def __init__(self, db: DatabaseConnection, extractor: Optional[Extractor] = None):
        """
        Args:
            db: Database connection (schema is migrated on ``initialize``)
            extractor: Metadata collaborator, defaults to the mutagen one
        """
        self.db = db
        self.extractor = extractor or MetadataExtractor()
        self.artists = ArtistDAL(db)
        self.albums = AlbumDAL(db)
        self.tracks = TrackDAL(db)

    def initialize(self) -> None:
        """Connect and bring the schema up to date."""
        self.db.connect()
        MigrationRunner(self.db).apply_migrations()

    def upsert(self, path: Path | str) -> int:
        """
        Catalog the media file at ``path`` (already known to be supported).

        Returns:
            Id of the inserted or updated track

        Raises:
            MetadataExtractionError: Tags could not be read; nothing was written
            PersistenceError: The write failed; the transaction was rolled back
        """
        fs_path = normalize_path(path)
        metadata = self.extractor.extract(fs_path)

        try:
            with self.db.transaction() as cursor:
                artist_id = self.artists.ensure_artist(cursor, metadata.artist)
                track_id = self.tracks.find_id_by_path(cursor, fs_path)

                if track_id is not None:
                    self.tracks.update_track(
                        cursor,
                        track_id,
                        title=metadata.title,
                        artist_id=artist_id,
                        number=metadata.track_number,
                        duration=metadata.duration,
                    )
                    logger.debug(f"Updated track: {{'id': {track_id}, 'path': {fs_path!r}}}")
                else:
                    album_id = self.albums.ensure_album(
                        cursor, metadata.album, album_path_for(fs_path)
                    )
                    track_id = self.tracks.insert_track(cursor, TrackRecord(
                        fs_path=fs_path,
                        title=metadata.title,
                        album_id=album_id,
                        artist_id=artist_id,
                        number=metadata.track_number,
                        duration=metadata.duration,
                    ))
                    logger.debug(f"Inserted track: {{'id': {track_id}, 'path': {fs_path!r}}}")
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to store track: {e}", path=fs_path) from e

        return track_id

    def remove(self, path: Path | str) -> bool:
        """
        Delete the track stored for ``path``.

        Albums and artists left without tracks are kept until the next
        cleanup pass.

        Returns:
            True if a track was deleted

        Raises:
            PersistenceError: The delete failed
        """
        fs_path = normalize_path(path)
        try:
            with self.db.transaction() as cursor:
                removed = self.tracks.delete_by_path(cursor, fs_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to remove track: {e}", path=fs_path) from e

        if removed:
            logger.debug(f"Removed track: {{'path': {fs_path!r}}}")
        return removed

    def remove_under(self, directory: Path | str) -> int:
        """Delete every track below ``directory``. Returns the number removed."""
        fs_path = normalize_path(directory)
        try:
            with self.db.transaction() as cursor:
                removed = self.tracks.delete_under(cursor, fs_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to remove tracks: {e}", path=fs_path) from e

        if removed:
            logger.info(f"Removed tracks under directory: {{'path': {fs_path!r}, 'count': {removed}}}")
        return removed

    # Queries

    def get_track(self, track_id: int) -> Optional[Track]:
        return self.tracks.get_track(track_id)

    def get_track_by_path(self, path: Path | str) -> Optional[Track]:
        return self.tracks.get_by_path(normalize_path(path))

    def get_track_path(self, track_id: int) -> Optional[str]:
        """Filesystem path of a track, as needed for streaming it."""
        track = self.tracks.get_track(track_id)
        return track.fs_path if track else None

    def get_album(self, album_id: int) -> Optional[Album]:
        return self.albums.get_album(album_id)

    def get_artist(self, artist_id: int) -> Optional[Artist]:
        return self.artists.get_artist(artist_id)

    def get_album_tracks(self, album_id: int) -> List[Track]:
        return self.tracks.get_album_tracks(album_id)

    def browse_albums(self, args: BrowseArgs = BrowseArgs()) -> BrowsePage[Album]:
        items, total = self.albums.browse(args)
        return BrowsePage(items=items, total=total, page=args.page, per_page=args.per_page)

    def browse_artists(self, args: BrowseArgs = BrowseArgs()) -> BrowsePage[Artist]:
        items, total = self.artists.browse(args)
        return BrowsePage(items=items, total=total, page=args.page, per_page=args.per_page)

    def counts(self) -> Dict[str, int]:
        """Row count of every catalog table."""
        return {
            table: self.db.query_one(f"SELECT COUNT(*) FROM {table}")[0]
            for table in CATALOG_TABLES
        }

    def truncate(self) -> None:
        """
        Delete every catalog row.

        Raises:
            PersistenceError: The reset failed
        """
        try:
            with self.db.transaction() as cursor:
                # Children first so foreign keys hold throughout
                for table in CATALOG_TABLES:
                    cursor.execute(f"DELETE FROM {table}")
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to truncate catalog: {e}") from e
        logger.info("Catalog truncated")

    def close(self) -> None:
        self.db.close()
