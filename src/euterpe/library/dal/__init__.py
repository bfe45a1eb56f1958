"""Data Access Layer (DAL) for catalog tables."""

from .artists import ArtistDAL
from .albums import AlbumDAL
from .tracks import TrackDAL, TrackRecord

__all__ = [
    'ArtistDAL',
    'AlbumDAL',
    'TrackDAL',
    'TrackRecord',
]
