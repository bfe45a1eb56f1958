"""Post-scan reconciliation of the catalog."""

import logging
import os
import sqlite3
import time
from typing import Callable, Dict

from .catalog import Catalog

logger = logging.getLogger(__name__)


def _is_missing(fs_path: str, exists: Callable[[str], bool]) -> bool:
    try:
        return not exists(fs_path)
    except OSError as e:
        # An unreadable path is not proof the file is gone
        logger.warning(f"Cannot check track file: {{'path': {fs_path!r}, 'error': {str(e)!r}}}")
        return False


def clean_up_database(
    catalog: Catalog,
    exists: Callable[[str], bool] = os.path.exists,
) -> Dict[str, int]:
    """
    Remove catalog rows that no longer correspond to anything on disk.

    This function:
    1. Deletes tracks whose file no longer exists
    2. Deletes albums no track references
    3. Deletes artists no track references directly

    Running it twice without intervening changes deletes nothing the second
    time. Storage failures are logged, never raised: whatever is left over is
    picked up by the next pass.

    Args:
        catalog: Catalog to reconcile
        exists: Predicate telling whether a stored track path still exists

    Returns:
        Dictionary with cleanup statistics
    """
    start = time.monotonic()
    stats = {
        'tracks_deleted': 0,
        'albums_deleted': 0,
        'artists_deleted': 0,
    }

    try:
        missing = [
            (track_id, fs_path)
            for track_id, fs_path in catalog.tracks.iter_paths()
            if _is_missing(fs_path, exists)
        ]

        with catalog.db.transaction() as cursor:
            # A file may have come back since the first check; writers are
            # locked out from here on
            confirmed = [
                (track_id, fs_path) for track_id, fs_path in missing
                if _is_missing(fs_path, exists)
            ]
            if confirmed:
                stats['tracks_deleted'] = catalog.tracks.delete_missing(cursor, confirmed)
            stats['albums_deleted'] = catalog.albums.delete_dangling(cursor)
            stats['artists_deleted'] = catalog.artists.delete_dangling(cursor)

    except sqlite3.Error as e:
        logger.error(f"Catalog cleanup failed: {e}")
        return stats

    if any(stats.values()):
        logger.info(f"Catalog cleanup removed rows: {stats}")
    logger.info(f"Cleaning up took {time.monotonic() - start:.3f}s")

    return stats
