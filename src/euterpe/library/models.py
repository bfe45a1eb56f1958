"""Catalog record types returned to collaborators."""

import sqlite3
from dataclasses import dataclass, field
from typing import Generic, List, Literal, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class Artist:
    id: int
    name: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> 'Artist':
        return cls(id=row['id'], name=row['name'])


@dataclass(frozen=True)
class Album:
    id: int
    name: str
    fs_path: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> 'Album':
        return cls(id=row['id'], name=row['name'], fs_path=row['fs_path'])


@dataclass(frozen=True)
class Track:
    """A catalogued media file with its album and artist names resolved."""

    id: int
    title: str
    album_id: int
    album: str
    artist_id: int
    artist: str
    track_number: int
    duration: int
    fs_path: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> 'Track':
        return cls(
            id=row['id'],
            title=row['name'],
            album_id=row['album_id'],
            album=row['album_name'],
            artist_id=row['artist_id'],
            artist=row['artist_name'],
            track_number=row['number'],
            duration=row['duration'],
            fs_path=row['fs_path'],
        )


@dataclass(frozen=True)
class BrowseArgs:
    """Pagination and ordering of a browse request (pages start at 1)."""

    page: int = 1
    per_page: int = 10
    order_by: Literal['id', 'name'] = 'name'
    order: Literal['asc', 'desc'] = 'asc'

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {self.per_page}")
        if self.order_by not in ('id', 'name'):
            raise ValueError(f"cannot order by {self.order_by!r}")
        if self.order not in ('asc', 'desc'):
            raise ValueError(f"order must be 'asc' or 'desc', got {self.order!r}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


@dataclass
class BrowsePage(Generic[T]):
    items: List[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 10

    @property
    def pages(self) -> int:
        return (self.total + self.per_page - 1) // self.per_page
