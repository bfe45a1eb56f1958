"""Path utilities for consistent path handling across packages."""

import os
from pathlib import Path


def normalize_path(path: Path | str) -> str:
    """
    Normalize a filesystem path into the form stored in the catalog.

    Applies:
    - Conversion to an absolute path (relative paths resolve against cwd)
    - Collapsing of redundant separators and ``.``/``..`` segments

    Symlinks are not resolved and the Unicode form is left untouched, so the
    returned string still names the same file on disk.

    Args:
        path: Path object or string to normalize

    Returns:
        Normalized absolute path string

    Examples:
        >>> normalize_path("/music/./rock//song.mp3")
        '/music/rock/song.mp3'
    """
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def album_path_for(track_path: Path | str) -> str:
    """Return the album identity (containing directory) of a track path."""
    return os.path.dirname(normalize_path(track_path))
