"""Metadata and validation engines."""
from .metadata import ExifToolVideoProbe, read_image_bounds
from .validator import MediaValidator

__all__ = [
    "ExifToolVideoProbe",
    "read_image_bounds",
    "MediaValidator",
]
