"""Media metadata readers.

Video dimensions come from container metadata via exiftool, image bounds
from Pillow's lazy header parsing. Neither decodes frames or pixel data.
"""
from __future__ import annotations

import json
import logging
import subprocess
import warnings
from pathlib import Path
from typing import BinaryIO, Optional

from PIL import Image

from ..core.pipes import StdinFeeder
from ..core.protocols import MediaSource


logger = logging.getLogger(__name__)

EXIFTOOL_DIMENSION_ARGS = ["-json", "-n", "-ImageWidth", "-ImageHeight"]

# Seconds to wait for the stdin copy once exiftool has exited or been killed.
FEEDER_GRACE = 1.0


class ExifToolVideoProbe:
    """Reads video width/height from container metadata with exiftool.

    Paths are handed to exiftool directly; streams are piped to its stdin.
    Any failure (tool missing, timeout, unparseable output, missing tags)
    yields None so callers can decide how to degrade.
    """

    def __init__(self, exiftool_path: str = "exiftool", timeout: float = 10.0):
        """Initialize the probe.

        Args:
            exiftool_path: exiftool binary to run.
            timeout: Seconds to wait for exiftool.
        """
        self._exiftool = exiftool_path
        self._timeout = timeout

    def probe_dimensions(self, source: MediaSource) -> Optional[tuple[int, int]]:
        """Return (width, height) from container metadata, or None."""
        try:
            if isinstance(source, Path):
                output = self._run_on_path(source)
            else:
                output = self._run_on_stream(source)
        except FileNotFoundError:
            logger.debug("exiftool not found at %s", self._exiftool)
            return None
        except subprocess.TimeoutExpired:
            logger.warning("exiftool timed out after %.1fs", self._timeout)
            return None
        except OSError as e:
            logger.debug("exiftool failed: %s", e)
            return None

        if output is None:
            return None
        return self._parse_dimensions(output)

    def _run_on_path(self, path: Path) -> Optional[str]:
        result = subprocess.run(
            [self._exiftool, *EXIFTOOL_DIMENSION_ARGS, str(path)],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=self._timeout,
        )
        if result.returncode != 0:
            return None
        return result.stdout

    def _run_on_stream(self, stream: BinaryIO) -> Optional[str]:
        start = _tell(stream)
        process = subprocess.Popen(
            [self._exiftool, *EXIFTOOL_DIMENSION_ARGS, "-"],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
        # exiftool may stop reading once it has the header it needs
        feeder = StdinFeeder(process, stream).start()
        try:
            stdout, _ = process.communicate(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
            raise
        finally:
            feeder.join(FEEDER_GRACE)
            _restore(stream, start)

        if process.returncode != 0:
            return None
        return stdout.decode("utf-8", errors="replace")

    @staticmethod
    def _parse_dimensions(output: str) -> Optional[tuple[int, int]]:
        """Parse exiftool JSON output into (width, height)."""
        try:
            records = json.loads(output)
            record = records[0]
            width = int(record["ImageWidth"])
            height = int(record["ImageHeight"])
        except (ValueError, KeyError, IndexError, TypeError):
            return None
        return width, height


def read_image_bounds(source: MediaSource) -> tuple[int, int]:
    """Read image (width, height) from its header only.

    Raises:
        OSError: The bounds cannot be decoded.
        Image.DecompressionBombError: The header declares a huge image.
    """
    start = None if isinstance(source, Path) else _tell(source)
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", Image.DecompressionBombWarning)
            with Image.open(source) as img:
                return img.size
    finally:
        if start is not None:
            _restore(source, start)


def _tell(stream: BinaryIO) -> Optional[int]:
    try:
        return stream.tell()
    except (OSError, ValueError):
        return None


def _restore(stream: BinaryIO, position: Optional[int]) -> None:
    if position is None:
        return
    try:
        stream.seek(position)
    except (OSError, ValueError):
        pass
