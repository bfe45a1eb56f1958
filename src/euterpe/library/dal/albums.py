"""Data Access Layer for albums table."""

import logging
import sqlite3
from typing import List, Optional

from ..database import DatabaseConnection
from ..models import Album, BrowseArgs

logger = logging.getLogger(__name__)


class AlbumDAL:
    """
    Data access layer for albums table.

    Every directory holding tracks is an album, keyed by its path. The name
    comes from the first track catalogued under it and is never updated.
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def ensure_album(self, cursor: sqlite3.Cursor, name: str, fs_path: str) -> int:
        """
        Return the id of the album at ``fs_path``, creating it if unseen.

        Must run inside a transaction.

        Args:
            cursor: Transaction cursor
            name: Album name used when the row is created
            fs_path: Normalized directory path (album identity)
        """
        cursor.execute(
            "INSERT INTO albums (name, fs_path) VALUES (?, ?) ON CONFLICT(fs_path) DO NOTHING",
            (name, fs_path)
        )
        if cursor.rowcount:
            logger.debug(f"Inserted album: {{'name': {name!r}, 'fs_path': {fs_path!r}}}")
            return cursor.lastrowid

        cursor.execute("SELECT id FROM albums WHERE fs_path = ?", (fs_path,))
        return cursor.fetchone()[0]

    def get_album(self, album_id: int) -> Optional[Album]:
        row = self.db.query_one(
            "SELECT id, name, fs_path FROM albums WHERE id = ?",
            (album_id,)
        )
        return Album.from_row(row) if row else None

    def browse(self, args: BrowseArgs) -> tuple[List[Album], int]:
        """Return one page of albums and the total album count."""
        sort_key = "casefold(name)" if args.order_by == 'name' else "id"
        rows = self.db.query(
            f"""
            SELECT id, name, fs_path FROM albums
            ORDER BY {sort_key} {args.order.upper()}, id {args.order.upper()}
            LIMIT ? OFFSET ?
            """,
            (args.per_page, args.offset)
        )
        total = self.db.query_one("SELECT COUNT(*) FROM albums")[0]
        return [Album.from_row(row) for row in rows], total

    def delete_dangling(self, cursor: sqlite3.Cursor) -> int:
        """Delete albums without any track. Returns the number deleted."""
        cursor.execute(
            """
            DELETE FROM albums
            WHERE NOT EXISTS (
                SELECT 1 FROM tracks WHERE tracks.album_id = albums.id
            )
            """
        )
        return cursor.rowcount
