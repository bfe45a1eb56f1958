"""Scan orchestration: one walker thread per library root.

Coordinates:
- The generation barrier (one set of walkers at a time)
- Lazy start of the filesystem watcher
- Joining the walkers and the post-scan cleanup
"""

import logging
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from euterpe.common import LogContext, normalize_path
from .catalog import Catalog
from .cleanup import clean_up_database
from .config import ScanConfig
from .report import FileOutcome, ScanReport, WalkReport
from .walker import PathWalker
from .watcher import LibraryWatcher

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """Runs full library scans.

    ``scan()`` blocks until every root has been walked and the catalog has
    been cleaned up. Calls never overlap: a call made while a generation is
    running waits for it to finish (cleanup included) and then runs a fresh
    generation of its own.

    All mutable scan and watch state lives on the instance, so several
    engines can coexist in one process.
    """

    def __init__(
        self,
        catalog: Catalog,
        paths: Sequence[Path | str],
        scan_config: Optional[ScanConfig] = None,
        fast_scan: bool = False,
        watch: bool = True,
        watcher_factory: Callable[[Catalog], LibraryWatcher] = LibraryWatcher,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            catalog: Catalog to refresh
            paths: Library roots, walked in parallel
            scan_config: Throttling settings
            fast_scan: Skip the initial wait and all walker pauses
            watch: Keep the catalog in sync with filesystem events after scans
            watcher_factory: Creates the watcher on the first scan
            sleep: Sleep function for the initial wait and walker pauses
        """
        self.catalog = catalog
        self.paths: List[str] = [normalize_path(path) for path in paths]
        self.scan_config = scan_config or ScanConfig()
        self.fast_scan = fast_scan
        self.watch_enabled = watch
        self._watcher_factory = watcher_factory
        self._sleep = sleep

        self._watcher: Optional[LibraryWatcher] = None
        self._watcher_lock = threading.Lock()

        self._generation = 0
        self._running = False
        self._condition = threading.Condition()

    @property
    def generation(self) -> int:
        """Number of scan generations started so far."""
        with self._condition:
            return self._generation

    @property
    def is_scanning(self) -> bool:
        with self._condition:
            return self._running

    @property
    def watcher(self) -> Optional[LibraryWatcher]:
        return self._watcher

    def scan(self) -> ScanReport:
        """
        Refresh the catalog from every configured root.

        Never raises for file, root or storage failures; those are logged
        and listed in the returned report.
        """
        generation = self._begin_generation()
        report = ScanReport(
            generation=generation,
            started_at=datetime.now(timezone.utc).isoformat(),
        )
        start = time.monotonic()

        try:
            with LogContext(logger, generation=generation):
                watcher = self._ensure_watcher()

                initial_wait = self.scan_config.initial_wait
                if not self.fast_scan and initial_wait > 0:
                    logger.info(f"Pausing library scan for {initial_wait}s as configured")
                    self._sleep(initial_wait)

                report.walks = self._run_walkers(watcher, generation)
                logger.info(f"Scanning took {time.monotonic() - start:.3f}s")

                try:
                    report.cleanup = clean_up_database(self.catalog)
                except Exception:
                    logger.exception("Catalog cleanup failed")
        finally:
            report.duration_seconds = time.monotonic() - start
            self._end_generation()

        logger.info(f"Scan complete: {report.summary()}")
        return report

    def wait_scan(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no scan generation is running.

        Returns:
            False if ``timeout`` expired first
        """
        with self._condition:
            return self._condition.wait_for(lambda: not self._running, timeout=timeout)

    def scan_in_background(self) -> threading.Thread:
        """Run ``scan()`` in a daemon thread and return the thread."""
        thread = threading.Thread(target=self.scan, name="library-scan", daemon=True)
        thread.start()
        return thread

    def close(self) -> None:
        """Stop the watcher. Running scans are not interrupted."""
        with self._watcher_lock:
            watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    def _begin_generation(self) -> int:
        with self._condition:
            if self._running:
                logger.info("Another scan is running, waiting for it to finish")
            self._condition.wait_for(lambda: not self._running)
            self._running = True
            self._generation += 1
            return self._generation

    def _end_generation(self) -> None:
        with self._condition:
            self._running = False
            self._condition.notify_all()

    def _ensure_watcher(self) -> Optional[LibraryWatcher]:
        if not self.watch_enabled:
            return None

        with self._watcher_lock:
            if self._watcher is None:
                watcher = self._watcher_factory(self.catalog)
                try:
                    watcher.start()
                except Exception:
                    logger.exception("Starting the file system watcher failed, live updates disabled")
                    return None
                self._watcher = watcher
            return self._watcher

    def _run_walkers(self, watcher: Optional[LibraryWatcher], generation: int) -> List[WalkReport]:
        reports: List[Optional[WalkReport]] = [None] * len(self.paths)
        threads = []

        for index, root in enumerate(self.paths):
            thread = threading.Thread(
                target=self._walk_root,
                args=(index, root, watcher, generation, reports),
                name=f"library-walker-{generation}-{index}",
                daemon=True,
            )
            threads.append(thread)
            thread.start()

        for thread in threads:
            thread.join()

        return [report for report in reports if report is not None]

    def _walk_root(
        self,
        index: int,
        root: str,
        watcher: Optional[LibraryWatcher],
        generation: int,
        reports: List[Optional[WalkReport]],
    ) -> None:
        with LogContext(logger, generation=generation):
            walker = PathWalker(
                root,
                self.catalog,
                self.scan_config,
                fast_scan=self.fast_scan,
                watcher=watcher,
                sleep=self._sleep,
            )
            try:
                reports[index] = walker.run()
            except Exception as e:
                logger.exception(f"Walking {root} failed")
                failed = WalkReport(root=root)
                failed.failures.append(FileOutcome(path=root, category='unknown', message=str(e)))
                reports[index] = failed
