"""CLI commands for the local library."""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import toml
from pydantic import ValidationError

from euterpe.common import ConfigLoader, setup_logging
from .config import EuterpeLibraryConfig
from .library import APP_NAME, LocalLibrary

logger = logging.getLogger(__package__ or __name__)


def scan_command(
    config: EuterpeLibraryConfig,
    paths_override: Optional[List[Path]] = None,
    database_path_override: Optional[Path] = None,
    fast_override: Optional[bool] = None,
    watch_override: Optional[bool] = None,
) -> int:
    """Scan the library roots and, unless disabled, keep watching them.

    Args:
        config: Configuration object
        paths_override: Library roots replacing the configured ones
        database_path_override: Optional override for the catalog path
        fast_override: Optional override for fast scanning
        watch_override: Optional override for live updates

    Returns:
        Exit code (0 for success)
    """
    library_config = config.library.model_copy(deep=True)
    if paths_override:
        library_config.paths = [str(path) for path in paths_override]
    if database_path_override is not None:
        library_config.database_path = str(database_path_override)
    if fast_override is not None:
        library_config.fast_scan = fast_override
    if watch_override is not None:
        library_config.watch = watch_override

    if not library_config.paths:
        logger.error("No library paths configured")
        return 1

    logger.info(
        f"Configuration: {{'paths': {library_config.paths!r}, "
        f"'database_path': {library_config.database_path!r}, "
        f"'fast_scan': {library_config.fast_scan}, 'watch': {library_config.watch}}}"
    )

    with LocalLibrary.from_config(library_config) as library:
        report = library.scan()
        print(json.dumps(report.summary(), indent=2))

        if library_config.watch:
            logger.info("Watching for changes, press Ctrl+C to stop")
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                logger.info("Stopping")

    return 0


def search_command(
    config: EuterpeLibraryConfig,
    query: str,
    database_path_override: Optional[Path] = None,
) -> int:
    """Print the tracks matching ``query`` as JSON lines.

    Returns:
        Exit code (0 for success)
    """
    library_config = config.library.model_copy(deep=True)
    if database_path_override is not None:
        library_config.database_path = str(database_path_override)
    library_config.watch = False

    with LocalLibrary.from_config(library_config) as library:
        results = library.search(query)
        for result in results:
            print(json.dumps(result.to_dict()))

    logger.info(f"Search complete: {{'query': {query!r}, 'results': {len(results)}}}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Catalog, watch and search a local music library"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--database-path",
        type=Path,
        required=False,
        help="Path to SQLite catalog (overrides config)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan library roots into the catalog")
    scan.add_argument(
        "paths",
        type=Path,
        nargs="*",
        help="Library root directories (overrides config)"
    )
    scan.add_argument(
        "--fast",
        action="store_true",
        help="Disable the initial wait and all throttling sleeps"
    )
    scan.add_argument(
        "--no-watch",
        action="store_true",
        help="Exit after the scan instead of following filesystem changes"
    )

    search = subparsers.add_parser("search", help="Search the catalog")
    search.add_argument("query", help="Case-insensitive text matched against title, album and artist")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the library CLI."""
    args = build_parser().parse_args(argv)

    loader = ConfigLoader(
        app_name=APP_NAME,
        config_class=EuterpeLibraryConfig
    )

    try:
        config = loader.load(defaults_path=args.config)
    except (ValidationError, FileNotFoundError, toml.TomlDecodeError) as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=Path(config.logging.file) if config.logging.file else None,
    )

    if args.command == "scan":
        return scan_command(
            config=config,
            paths_override=args.paths,
            database_path_override=args.database_path,
            fast_override=True if args.fast else None,
            watch_override=False if args.no_watch else None,
        )
    return search_command(
        config=config,
        query=args.query,
        database_path_override=args.database_path,
    )


if __name__ == "__main__":
    sys.exit(main())
