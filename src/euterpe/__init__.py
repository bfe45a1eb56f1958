"""Euterpe local media library engine."""

__version__ = "0.1.0"
