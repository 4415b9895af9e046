"""Admission checks applied to candidate media before it is trusted."""
from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional

from PIL import Image

from ..core.config import MAX_DIMENSION, MAX_FILE_SIZE, MIN_DIMENSION, ControlConfig
from ..core.models import MediaKind, ValidationResult
from ..core.protocols import MediaProbe, MediaSource
from .metadata import ExifToolVideoProbe, read_image_bounds


logger = logging.getLogger(__name__)


class MediaValidator:
    """Validates declared type, byte size and pixel dimensions.

    Checks run in a fixed order (mime, size, dimensions) and stop at the
    first rejection. Nothing is written to disk.

    Video metadata that cannot be read degrades to acceptance with unknown
    (0, 0) dimensions; an image whose bounds cannot be decoded is rejected.
    """

    def __init__(
        self,
        probe: Optional[MediaProbe] = None,
        max_file_size: int = MAX_FILE_SIZE,
        min_dimension: int = MIN_DIMENSION,
        max_dimension: int = MAX_DIMENSION,
    ):
        """Initialize the validator.

        Args:
            probe: Video metadata reader (default: exiftool).
            max_file_size: Largest accepted size in bytes.
            min_dimension: Smallest accepted width/height.
            max_dimension: Largest accepted width/height.
        """
        self._probe = probe or ExifToolVideoProbe()
        self._max_file_size = max_file_size
        self._min_dimension = min_dimension
        self._max_dimension = max_dimension

    @classmethod
    def from_config(cls, config: ControlConfig) -> "MediaValidator":
        return cls(
            probe=ExifToolVideoProbe(config.exiftool_path, config.probe_timeout),
            max_file_size=config.max_file_size,
            min_dimension=config.min_dimension,
            max_dimension=config.max_dimension,
        )

    def validate(
        self,
        kind: MediaKind,
        mime_type: Optional[str],
        source: MediaSource,
    ) -> ValidationResult:
        """Validate a candidate file for the given media slot.

        Args:
            kind: Slot the file is meant for.
            mime_type: Declared mime type, or None if unknown.
            source: Path or seekable binary stream.

        Returns:
            ValidationResult with measured dimensions when accepted.
        """
        if mime_type is not None and not mime_type.lower().startswith(kind.mime_major):
            return ValidationResult.rejected(f"Invalid file type. Expected {kind.value} file.")

        size = self.source_size(source)
        if size > self._max_file_size:
            limit_mb = self._max_file_size // (1024 * 1024)
            return ValidationResult.rejected(f"File too large. Maximum size is {limit_mb} MB.")

        if kind is MediaKind.VIDEO:
            return self._check_video(source)
        return self._check_image(source)

    def validate_video(self, source: MediaSource, mime_type: Optional[str] = None) -> ValidationResult:
        return self.validate(MediaKind.VIDEO, mime_type, source)

    def validate_image(self, source: MediaSource, mime_type: Optional[str] = None) -> ValidationResult:
        return self.validate(MediaKind.IMAGE, mime_type, source)

    def _check_video(self, source: MediaSource) -> ValidationResult:
        dimensions = self._probe.probe_dimensions(source)
        if dimensions is None:
            logger.info("Video metadata unavailable, accepting with unknown dimensions")
            return ValidationResult.accepted(0, 0)

        width, height = dimensions
        return self._check_range("Video", width, height)

    def _check_image(self, source: MediaSource) -> ValidationResult:
        try:
            width, height = read_image_bounds(source)
        except Image.DecompressionBombError:
            return ValidationResult.rejected(self._too_large("Image"))
        except (OSError, ValueError) as e:
            logger.debug("Image bounds unreadable: %s", e)
            return ValidationResult.rejected("Could not read image dimensions.")

        if width <= 0 or height <= 0:
            return ValidationResult.rejected("Could not read image dimensions.")
        return self._check_range("Image", width, height)

    def _check_range(self, label: str, width: int, height: int) -> ValidationResult:
        if width < self._min_dimension or height < self._min_dimension:
            return ValidationResult.rejected(
                f"{label} resolution too small. "
                f"Minimum is {self._min_dimension}x{self._min_dimension}."
            )
        if width > self._max_dimension or height > self._max_dimension:
            return ValidationResult.rejected(self._too_large(label))
        return ValidationResult.accepted(width, height)

    def _too_large(self, label: str) -> str:
        return (
            f"{label} resolution too large. "
            f"Maximum is {self._max_dimension}x{self._max_dimension}."
        )

    @staticmethod
    def source_size(source: MediaSource) -> int:
        """Byte length of a source without reading it. 0 if unknown."""
        if isinstance(source, Path):
            try:
                return source.stat().st_size
            except OSError:
                return 0
        return _stream_size(source)


def _stream_size(stream: BinaryIO) -> int:
    try:
        return os.fstat(stream.fileno()).st_size
    except (AttributeError, OSError, io.UnsupportedOperation):
        pass

    try:
        position = stream.tell()
        size = stream.seek(0, io.SEEK_END)
        stream.seek(position)
        return size
    except (AttributeError, OSError, ValueError):
        return 0
