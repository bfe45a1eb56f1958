"""Data Access Layer for artists table."""

import logging
import sqlite3
from typing import List, Optional

from ..database import DatabaseConnection
from ..models import Artist, BrowseArgs

logger = logging.getLogger(__name__)


class ArtistDAL:
    """
    Data access layer for artists table.

    Artists are identified by name. Rows are created implicitly by the first
    track naming them and removed only when no track references them.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def ensure_artist(self, cursor: sqlite3.Cursor, name: str) -> int:
        """
        Return the id of the artist ``name``, creating the row if unseen.

        Must run inside a transaction; the conflict-aware insert keeps a
        single row per name even when several writers race on it.
        """
        cursor.execute(
            "INSERT INTO artists (name) VALUES (?) ON CONFLICT(name) DO NOTHING",
            (name,)
        )
        if cursor.rowcount:
            logger.debug(f"Inserted artist: {{'name': {name!r}, 'id': {cursor.lastrowid}}}")
            return cursor.lastrowid

        cursor.execute("SELECT id FROM artists WHERE name = ?", (name,))
        return cursor.fetchone()[0]

    def get_artist(self, artist_id: int) -> Optional[Artist]:
        row = self.db.query_one("SELECT id, name FROM artists WHERE id = ?", (artist_id,))
        return Artist.from_row(row) if row else None

    def browse(self, args: BrowseArgs) -> tuple[List[Artist], int]:
        """Return one page of artists and the total artist count."""
        sort_key = "casefold(name)" if args.order_by == 'name' else "id"
        rows = self.db.query(
            f"""
            SELECT id, name FROM artists
            ORDER BY {sort_key} {args.order.upper()}, id {args.order.upper()}
            LIMIT ? OFFSET ?
            """,
            (args.per_page, args.offset)
        )
        total = self.db.query_one("SELECT COUNT(*) FROM artists")[0]
        return [Artist.from_row(row) for row in rows], total

    def delete_dangling(self, cursor: sqlite3.Cursor) -> int:
        """
        Delete artists no track references directly.

        Albums are not consulted: an artist can be dangling while an album it
        once appeared on still holds tracks of other artists.
        """
        cursor.execute(
            """
            DELETE FROM artists
            WHERE NOT EXISTS (
                SELECT 1 FROM tracks WHERE tracks.artist_id = artists.id
            )
            """
        )
        return cursor.rowcount
