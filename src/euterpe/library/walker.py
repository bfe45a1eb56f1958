"""Recursive discovery of one library root and feeding it into the catalog.

Traversal and side effects are split: ``discover_entries`` lazily yields the
entries under a root, ``PathWalker`` consumes them (catalog upserts, watch
registrations, throttling).
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from euterpe.common import LogContext, normalize_path
from .catalog import Catalog
from .config import ScanConfig
from .errors import LibraryError, TransientIOError, classify_error
from .formats import is_supported_format
from .report import FileOutcome, WalkReport

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[LibraryError], None]


@dataclass(frozen=True)
class DiscoveredEntry:
    path: str
    is_dir: bool


def _report(on_error: Optional[ErrorCallback], error: LibraryError) -> None:
    if on_error is not None:
        on_error(error)
    else:
        logger.warning(str(error))


def _list_directory(directory: str, on_error: Optional[ErrorCallback]) -> Optional[List[os.DirEntry]]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        _report(on_error, TransientIOError(f"Cannot read directory: {e.strerror or e}", path=directory))
        return None


def discover_entries(
    root: Path | str,
    on_error: Optional[ErrorCallback] = None,
) -> Iterator[DiscoveredEntry]:
    """
    Yield every directory and regular file under ``root``, depth first.

    The root itself comes first, then each directory's entries in name
    order, a directory's contents right after the directory. Symlinked
    directories are not followed. Entries that cannot be read are reported
    to ``on_error`` (or logged) and skipped; the rest of the tree is still
    traversed.

    Each call starts a fresh traversal.

    Args:
        root: Directory to traverse
        on_error: Receives a TransientIOError for every skipped entry
    """
    root = normalize_path(root)

    if not os.path.isdir(root):
        reason = "Root is not a directory" if os.path.exists(root) else "Root does not exist"
        _report(on_error, TransientIOError(reason, path=root))
        return

    yield DiscoveredEntry(root, True)

    children = _list_directory(root, on_error)
    if children is None:
        return

    stack = [iter(children)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = not is_dir and entry.is_file()
        except OSError as e:
            _report(on_error, TransientIOError(f"Cannot stat entry: {e.strerror or e}", path=entry.path))
            continue

        if is_dir:
            yield DiscoveredEntry(entry.path, True)
            grandchildren = _list_directory(entry.path, on_error)
            if grandchildren:
                stack.append(iter(grandchildren))
        elif is_file:
            yield DiscoveredEntry(entry.path, False)
        elif entry.is_symlink() and not os.path.exists(entry.path):
            _report(on_error, TransientIOError("Broken symbolic link", path=entry.path))


class PathWalker:
    """
    Walks one library root and keeps the catalog in step with it.

    Every supported file is upserted, every directory is registered with the
    watcher (when there is one), and the walker pauses after each batch of
    ``files_per_operation`` files. Failures are logged and collected in the
    returned WalkReport; none of them stops the walk.
    """

    def __init__(
        self,
        root: Path | str,
        catalog: Catalog,
        scan_config: ScanConfig,
        fast_scan: bool = False,
        watcher=None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            root: Library root directory
            catalog: Catalog receiving upserts
            scan_config: Throttling settings
            fast_scan: Disable throttling pauses
            watcher: Optional LibraryWatcher to register directories with
            sleep: Sleep function used for pauses
        """
        self.root = normalize_path(root)
        self.catalog = catalog
        self.scan_config = scan_config
        self.fast_scan = fast_scan
        self.watcher = watcher
        self._sleep = sleep
        self._since_pause = 0
        self._report = WalkReport(root=self.root)

    def run(self) -> WalkReport:
        start = time.monotonic()

        with LogContext(logger, root=self.root):
            for entry in discover_entries(self.root, on_error=self._record_failure):
                if entry.is_dir:
                    self._watch(entry.path)
                    continue

                self._report.files_seen += 1
                if is_supported_format(entry.path):
                    self._add(entry.path)
                self._throttle()

        self._report.duration_seconds = time.monotonic() - start
        logger.info(f"Walking {self.root} took {self._report.duration_seconds:.3f}s: {self._report.to_dict()}")
        return self._report

    def _add(self, path: str) -> None:
        try:
            self.catalog.upsert(path)
        except Exception as e:
            self._record_failure(e, path)
            return
        self._report.files_cataloged += 1

    def _watch(self, directory: str) -> None:
        if self.watcher is None:
            return
        try:
            if self.watcher.watch(directory):
                self._report.directories_watched += 1
        except LibraryError as e:
            self._record_failure(e, directory)

    def _throttle(self) -> None:
        self._since_pause += 1

        files_per_operation = self.scan_config.files_per_operation
        sleep_per_operation = self.scan_config.sleep_per_operation
        if (
            self.fast_scan
            or files_per_operation <= 0
            or sleep_per_operation <= 0
            or self._since_pause < files_per_operation
        ):
            return

        logger.debug(
            f"Scan limit of {files_per_operation} files reached for {self.root}, "
            f"sleeping for {sleep_per_operation}s"
        )
        self._sleep(sleep_per_operation)
        self._report.pauses += 1
        self._since_pause = 0

    def _record_failure(self, error: Exception, path: Optional[str] = None) -> None:
        if path is None:
            path = getattr(error, 'context', {}).get('path', self.root)
        category = classify_error(error)
        message = getattr(error, 'message', None) or str(error)

        if category == 'unknown':
            logger.exception(f"Unexpected error processing {path}")
        else:
            logger.warning(f"Skipping {path}: {{'category': {category!r}, 'error': {message!r}}}")
        self._report.failures.append(FileOutcome(path=path, category=category, message=message))
