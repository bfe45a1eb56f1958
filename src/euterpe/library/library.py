"""The local library: entry point used by the server, the CLI and tests."""

import logging
import threading
from pathlib import Path
from typing import List, Optional, Sequence

import platformdirs

from euterpe.common import normalize_path
from .catalog import Catalog
from .config import LibraryConfig, ScanConfig
from .database import DatabaseConnection
from .errors import LibraryError
from .formats import is_supported_format
from .metadata import Extractor
from .models import Album, Artist, BrowseArgs, BrowsePage, Track
from .report import ScanReport
from .scanner import ScanOrchestrator
from .search import SearchIndex, SearchResult

logger = logging.getLogger(__name__)

APP_NAME = "euterpe-library"


def default_database_path() -> Path:
    return Path(platformdirs.user_data_dir(appname=APP_NAME, appauthor=False)) / "library.db"


class LocalLibrary:
    """
    A catalog of the audio files under a set of root directories.

    Usage:
        library = LocalLibrary(db_path, ["/music"], scan_config=ScanConfig())
        library.initialize()
        library.scan()
        library.search("beatles")
    """

    def __init__(
        self,
        db_path: Path | str,
        paths: Sequence[Path | str] = (),
        scan_config: Optional[ScanConfig] = None,
        fast_scan: bool = False,
        watch: bool = True,
        extractor: Optional[Extractor] = None,
    ):
        """
        Args:
            db_path: SQLite catalog file, or ``":memory:"``
            paths: Library roots
            scan_config: Throttling settings
            fast_scan: Disable throttling sleeps
            watch: Follow filesystem changes after the first scan
            extractor: Metadata collaborator (default: mutagen based)
        """
        self.catalog = Catalog(DatabaseConnection(db_path), extractor=extractor)
        self.search_index = SearchIndex(self.catalog)
        self.scanner = ScanOrchestrator(
            self.catalog,
            paths,
            scan_config=scan_config,
            fast_scan=fast_scan,
            watch=watch,
        )

    @classmethod
    def from_config(cls, config: LibraryConfig, extractor: Optional[Extractor] = None) -> 'LocalLibrary':
        db_path = config.database_path or default_database_path()
        return cls(
            db_path,
            config.paths,
            scan_config=config.scan,
            fast_scan=config.fast_scan,
            watch=config.watch,
            extractor=extractor,
        )

    @property
    def paths(self) -> List[str]:
        return list(self.scanner.paths)

    def initialize(self) -> None:
        """Open the catalog and apply pending schema migrations."""
        self.catalog.initialize()

    def scan(self) -> ScanReport:
        return self.scanner.scan()

    def wait_scan(self, timeout: Optional[float] = None) -> bool:
        return self.scanner.wait_scan(timeout)

    def scan_in_background(self) -> threading.Thread:
        return self.scanner.scan_in_background()

    def add_media(self, path: Path | str) -> int:
        """
        Catalog a single media file.

        Returns:
            Track id

        Raises:
            LibraryError: The file is unsupported, unreadable or could not
                be stored
        """
        fs_path = normalize_path(path)
        if not is_supported_format(fs_path):
            raise LibraryError("Unsupported media format", path=fs_path)
        return self.catalog.upsert(fs_path)

    def search(self, query: str) -> List[SearchResult]:
        return self.search_index.search(query)

    def get_track(self, track_id: int) -> Optional[Track]:
        return self.catalog.get_track(track_id)

    def get_file_path(self, track_id: int) -> Optional[str]:
        return self.catalog.get_track_path(track_id)

    def get_album(self, album_id: int) -> Optional[Album]:
        return self.catalog.get_album(album_id)

    def get_artist(self, artist_id: int) -> Optional[Artist]:
        return self.catalog.get_artist(artist_id)

    def get_album_files(self, album_id: int) -> List[Track]:
        return self.catalog.get_album_tracks(album_id)

    def browse_albums(self, args: BrowseArgs = BrowseArgs()) -> BrowsePage[Album]:
        return self.catalog.browse_albums(args)

    def browse_artists(self, args: BrowseArgs = BrowseArgs()) -> BrowsePage[Artist]:
        return self.catalog.browse_artists(args)

    def truncate(self) -> None:
        self.catalog.truncate()

    def close(self) -> None:
        """Stop watching and close the catalog."""
        self.scanner.close()
        self.catalog.close()

    def __enter__(self) -> 'LocalLibrary':
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
