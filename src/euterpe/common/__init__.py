"""Shared utilities for the euterpe packages."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import EuterpeError
from .path_utils import normalize_path, album_path_for

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'EuterpeError',
    'normalize_path',
    'album_path_for',
]
