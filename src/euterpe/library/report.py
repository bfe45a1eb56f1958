"""Per-file outcomes of a scan, aggregated per root and per generation."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class FileOutcome:
    """A filesystem entry that could not be fully processed."""

    path: str
    category: str  # see errors.classify_error
    message: str


@dataclass
class WalkReport:
    """What one walker did with one root."""

    root: str
    files_seen: int = 0
    files_cataloged: int = 0
    directories_watched: int = 0
    pauses: int = 0
    failures: List[FileOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict:
        return {
            'root': self.root,
            'files_seen': self.files_seen,
            'files_cataloged': self.files_cataloged,
            'directories_watched': self.directories_watched,
            'pauses': self.pauses,
            'failed': self.failed,
            'duration_seconds': round(self.duration_seconds, 3),
        }


@dataclass
class ScanReport:
    """Result of one scan generation."""

    generation: int
    walks: List[WalkReport] = field(default_factory=list)
    cleanup: Dict[str, int] = field(default_factory=dict)
    duration_seconds: float = 0.0
    started_at: Optional[str] = None

    @property
    def files_cataloged(self) -> int:
        return sum(walk.files_cataloged for walk in self.walks)

    @property
    def failures(self) -> List[FileOutcome]:
        return [failure for walk in self.walks for failure in walk.failures]

    def summary(self) -> dict:
        return {
            'generation': self.generation,
            'started_at': self.started_at,
            'roots': len(self.walks),
            'files_seen': sum(walk.files_seen for walk in self.walks),
            'files_cataloged': self.files_cataloged,
            'failed': len(self.failures),
            'cleanup': dict(self.cleanup),
            'duration_seconds': round(self.duration_seconds, 3),
        }
