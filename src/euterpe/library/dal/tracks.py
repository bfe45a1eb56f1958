"""Data Access Layer for tracks table."""

import logging
import os
import sqlite3
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..database import DatabaseConnection
from ..models import Track

logger = logging.getLogger(__name__)

# Track columns with album and artist names resolved
TRACK_SELECT = """
    SELECT
        t.id, t.name, t.number, t.duration, t.fs_path,
        t.album_id, al.name AS album_name,
        t.artist_id, ar.name AS artist_name
    FROM tracks AS t
    JOIN albums AS al ON al.id = t.album_id
    JOIN artists AS ar ON ar.id = t.artist_id
"""


@dataclass(frozen=True)
class TrackRecord:
    """Values written for one track row."""

    fs_path: str
    title: str
    album_id: int
    artist_id: int
    number: int = 0
    duration: int = 0


class TrackDAL:
    """
    Data access layer for tracks table.

    ``fs_path`` is the idempotency key: writing a path that already exists
    updates the row in place.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def find_id_by_path(self, cursor: sqlite3.Cursor, fs_path: str) -> Optional[int]:
        cursor.execute("SELECT id FROM tracks WHERE fs_path = ?", (fs_path,))
        row = cursor.fetchone()
        return row[0] if row else None

    def insert_track(self, cursor: sqlite3.Cursor, record: TrackRecord) -> int:
        """Insert a new track row and return its id."""
        cursor.execute(
            """
            INSERT INTO tracks (name, album_id, artist_id, number, fs_path, duration)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.title,
                record.album_id,
                record.artist_id,
                record.number,
                record.fs_path,
                record.duration,
            )
        )
        return cursor.lastrowid

    def update_track(
        self,
        cursor: sqlite3.Cursor,
        track_id: int,
        title: str,
        artist_id: int,
        number: int,
        duration: int,
    ) -> None:
        """
        Update the metadata of an existing track.

        The album reference is left alone: it is derived from the path, and
        the path of an existing row never changes.
        """
        cursor.execute(
            """
            UPDATE tracks
            SET name = ?, artist_id = ?, number = ?, duration = ?
            WHERE id = ?
            """,
            (title, artist_id, number, duration, track_id)
        )

    def delete_by_path(self, cursor: sqlite3.Cursor, fs_path: str) -> bool:
        cursor.execute("DELETE FROM tracks WHERE fs_path = ?", (fs_path,))
        return cursor.rowcount > 0

    def delete_under(self, cursor: sqlite3.Cursor, directory: str) -> int:
        """Delete every track stored below ``directory``."""
        prefix = directory.rstrip(os.sep) + os.sep
        cursor.execute(
            "DELETE FROM tracks WHERE substr(fs_path, 1, ?) = ?",
            (len(prefix), prefix)
        )
        return cursor.rowcount

    def delete_missing(self, cursor: sqlite3.Cursor, tracks: Iterable[tuple[int, str]]) -> int:
        """Delete tracks by (id, fs_path); rows whose path changed are kept."""
        cursor.executemany(
            "DELETE FROM tracks WHERE id = ? AND fs_path = ?",
            list(tracks)
        )
        return cursor.rowcount

    def iter_paths(self) -> List[tuple[int, str]]:
        """Return (id, fs_path) of every track."""
        rows = self.db.query("SELECT id, fs_path FROM tracks ORDER BY id")
        return [(row['id'], row['fs_path']) for row in rows]

    def get_track(self, track_id: int) -> Optional[Track]:
        row = self.db.query_one(f"{TRACK_SELECT} WHERE t.id = ?", (track_id,))
        return Track.from_row(row) if row else None

    def get_by_path(self, fs_path: str) -> Optional[Track]:
        row = self.db.query_one(f"{TRACK_SELECT} WHERE t.fs_path = ?", (fs_path,))
        return Track.from_row(row) if row else None

    def get_album_tracks(self, album_id: int) -> List[Track]:
        rows = self.db.query(
            f"{TRACK_SELECT} WHERE t.album_id = ? ORDER BY t.number, casefold(t.name), t.id",
            (album_id,)
        )
        return [Track.from_row(row) for row in rows]

    def search(self, needle: str) -> List[Track]:
        """
        Tracks whose title, album or artist contains ``needle``.

        ``needle`` must already be casefolded; stored names are casefolded in
        SQL so the comparison is Unicode case-insensitive.
        """
        rows = self.db.query(
            f"""
            {TRACK_SELECT}
            WHERE instr(casefold(t.name), ?) > 0
               OR instr(casefold(al.name), ?) > 0
               OR instr(casefold(ar.name), ?) > 0
            ORDER BY casefold(ar.name), casefold(al.name), t.number, t.id
            """,
            (needle, needle, needle)
        )
        return [Track.from_row(row) for row in rows]

    def count(self) -> int:
        return self.db.query_one("SELECT COUNT(*) FROM tracks")[0]
