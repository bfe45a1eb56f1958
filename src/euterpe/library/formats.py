"""Recognition of supported audio files."""

from pathlib import Path

# Extensions of files the library catalogs (compared lower-case)
SUPPORTED_FORMATS = frozenset({
    '.mp3', '.ogg', '.oga', '.opus', '.flac', '.wav', '.m4a', '.mp4',
    '.aac', '.aiff', '.aif', '.wma', '.ape', '.wv',
})


def is_supported_format(path: Path | str) -> bool:
    """Return True if ``path`` has a supported audio extension."""
    return Path(path).suffix.lower() in SUPPORTED_FORMATS
