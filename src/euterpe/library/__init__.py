"""Local media library: discovery, cataloging, live sync and search."""

from .catalog import Catalog
from .cleanup import clean_up_database
from .config import EuterpeLibraryConfig, LibraryConfig, ScanConfig
from .errors import (
    LibraryError, MetadataExtractionError, PersistenceError,
    TransientIOError, WatchRegistrationError,
)
from .formats import SUPPORTED_FORMATS, is_supported_format
from .library import LocalLibrary
from .metadata import MetadataExtractor, TrackMetadata
from .models import Album, Artist, BrowseArgs, BrowsePage, Track
from .report import FileOutcome, ScanReport, WalkReport
from .scanner import ScanOrchestrator
from .search import SearchIndex, SearchResult
from .walker import PathWalker, discover_entries
from .watcher import LibraryWatcher

__all__ = [
    'Catalog',
    'clean_up_database',
    'EuterpeLibraryConfig',
    'LibraryConfig',
    'ScanConfig',
    'LibraryError',
    'MetadataExtractionError',
    'PersistenceError',
    'TransientIOError',
    'WatchRegistrationError',
    'SUPPORTED_FORMATS',
    'is_supported_format',
    'LocalLibrary',
    'MetadataExtractor',
    'TrackMetadata',
    'Album',
    'Artist',
    'BrowseArgs',
    'BrowsePage',
    'Track',
    'FileOutcome',
    'ScanReport',
    'WalkReport',
    'ScanOrchestrator',
    'SearchIndex',
    'SearchResult',
    'PathWalker',
    'discover_entries',
    'LibraryWatcher',
]
