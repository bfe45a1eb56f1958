"""Live catalog updates from filesystem change notifications (watchdog)."""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, List, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from euterpe.common import normalize_path
from .catalog import Catalog
from .errors import WatchRegistrationError
from .formats import is_supported_format
from .walker import discover_entries

logger = logging.getLogger(__name__)


def _event_path(path) -> str:
    return normalize_path(os.fsdecode(path))


class LibraryEventHandler(FileSystemEventHandler):
    """
    Routes watchdog events into the catalog.

    - created/modified supported file: upsert
    - deleted file: remove
    - moved file: remove the old path, upsert the new one if supported
    - created directory: watch it and upsert the supported files in it
    - deleted or moved-away directory: remove every track below it

    Runs on the observer thread; failures are logged and never propagate.
    """

    def __init__(self, catalog: Catalog, watch: Optional[Callable[[str], bool]] = None):
        super().__init__()
        self.catalog = catalog
        self._watch = watch

    def on_created(self, event: FileSystemEvent) -> None:
        path = _event_path(event.src_path)
        if event.is_directory:
            self._add_directory(path)
        else:
            self._upsert(path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._upsert(_event_path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._remove(_event_path(event.src_path), event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        src_path = _event_path(event.src_path)
        dest_path = _event_path(event.dest_path)
        logger.debug(f"Moved: {src_path} -> {dest_path}")

        self._remove(src_path, event.is_directory)
        if event.is_directory:
            self._add_directory(dest_path)
        else:
            self._upsert(dest_path)

    def _upsert(self, path: str) -> None:
        if not is_supported_format(path):
            return
        try:
            self.catalog.upsert(path)
        except Exception as e:
            logger.warning(f"Failed to update catalog for {path}: {e}")

    def _remove(self, path: str, is_directory: bool) -> None:
        try:
            if is_directory:
                self.catalog.remove_under(path)
            elif is_supported_format(path):
                self.catalog.remove(path)
        except Exception as e:
            logger.warning(f"Failed to remove {path} from catalog: {e}")

    def _add_directory(self, directory: str) -> None:
        for entry in discover_entries(directory):
            if entry.is_dir:
                if self._watch is not None:
                    try:
                        self._watch(entry.path)
                    except WatchRegistrationError as e:
                        logger.warning(str(e))
            else:
                self._upsert(entry.path)


class LibraryWatcher:
    """
    Watches library directories for changes.

    Walkers register every directory they visit. A directory not already
    below a scheduled one gets a recursive watchdog schedule, so a library
    root costs one observer watch and its subdirectories are covered by it.
    The registration sets are shared between walker threads and guarded by
    a lock.
    """

    def __init__(self, catalog: Catalog, observer_factory: Callable[[], Observer] = Observer):
        self.catalog = catalog
        self.handler = LibraryEventHandler(catalog, watch=self.watch)
        self._observer_factory = observer_factory
        self._observer: Optional[Observer] = None
        self._watched: Set[str] = set()
        self._scheduled: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Start the observer thread. Idempotent."""
        with self._lock:
            if self._observer is not None:
                return
            observer = self._observer_factory()
            observer.daemon = True
            observer.start()
            self._observer = observer
        logger.info("File system watcher started")

    def watch(self, directory: Path | str) -> bool:
        """
        Register ``directory`` for change notifications.

        Returns:
            True if newly registered, False if it already was

        Raises:
            WatchRegistrationError: The watcher is not running or the OS
                refused the watch (missing directory, watch limit reached)
        """
        path = normalize_path(directory)

        # The observer holds its own lock while dispatching events, and event
        # handlers call back into watch(): schedule() must run outside _lock.
        with self._lock:
            if path in self._watched:
                return False
            observer = self._observer
            if observer is None:
                raise WatchRegistrationError("Watcher is not running", path=path)
            needs_schedule = not self._covered(path)
            self._watched.add(path)
            if needs_schedule:
                self._scheduled.add(path)

        if needs_schedule:
            try:
                observer.schedule(self.handler, path, recursive=True)
            except OSError as e:
                with self._lock:
                    self._watched.discard(path)
                    self._scheduled.discard(path)
                raise WatchRegistrationError(
                    f"Starting a file system watch failed: {e}", path=path
                ) from e
            logger.debug(f"Scheduled watch: {path}")

        return True

    def _covered(self, path: str) -> bool:
        """True if a scheduled watch already reports events for ``path``."""
        current = path
        while True:
            if current in self._scheduled:
                return True
            parent = os.path.dirname(current)
            if parent == current:
                return False
            current = parent

    def get_watched_paths(self) -> List[str]:
        with self._lock:
            return sorted(self._watched)

    def stop(self) -> None:
        """Stop the observer and forget all registrations."""
        with self._lock:
            observer, self._observer = self._observer, None
            self._watched.clear()
            self._scheduled.clear()

        if observer is not None:
            observer.stop()
            observer.join(timeout=5)
            logger.info("File system watcher stopped")
