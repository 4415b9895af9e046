"""Test fixtures shared across the suite.

Helpers that create real media files on disk, a scripted video probe, a
stand-in exiftool, and a recording storage backend that can be told to
fail specific operations.
"""
from __future__ import annotations

import stat
from pathlib import Path
from typing import BinaryIO, Optional

from PIL import Image

from camswap.backends.direct import DirectBackend
from camswap.core.models import CommandResult, ErrorKind


def make_bmp(path: Path, size: tuple[int, int] = (64, 48), color: str = "red") -> Path:
    """Write a real BMP image and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color=color).save(path, "BMP")
    return path


def make_video(path: Path, payload: bytes = b"\x00\x00\x00\x18ftypmp42fake-video") -> Path:
    """Write a file with an .mp4 name; its content is not a real container."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


DRAIN_STDIN = (
    'for last in "$@"; do :; done\n'
    'if [ "$last" = "-" ]; then cat > /dev/null; fi\n'
)


def make_fake_exiftool(
    directory: Path,
    width: int = 1920,
    height: int = 1080,
    body: Optional[str] = None,
    drain: bool = True,
) -> Path:
    """Write an executable that answers like exiftool's JSON mode.

    When the last argument is "-" it drains stdin first, as exiftool does,
    unless drain is False.
    """
    if body is None:
        body = f"echo '[{{\"SourceFile\": \"x\", \"ImageWidth\": {width}, \"ImageHeight\": {height}}}]'"
    script = directory / "fake-exiftool"
    script.write_text(
        "#!/bin/sh\n"
        + (DRAIN_STDIN if drain else "")
        + f"{body}\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


class FakeProbe:
    """Video probe returning a scripted answer and recording calls."""

    def __init__(self, dimensions: Optional[tuple[int, int]] = (1280, 720)):
        self.dimensions = dimensions
        self.calls: list = []

    def probe_dimensions(self, source) -> Optional[tuple[int, int]]:
        self.calls.append(source)
        return self.dimensions


class RecordingBackend(DirectBackend):
    """DirectBackend that records operations and can inject failures."""

    def __init__(self):
        self.calls: list[tuple[str, Path]] = []
        self.failures: dict[str, CommandResult] = {}

    @property
    def name(self) -> str:
        return "recording"

    def fail(self, operation: str, output: str = "injected failure",
             error: ErrorKind = ErrorKind.IO_FAILURE) -> None:
        self.failures[operation] = CommandResult.failed(output, error)

    def ops(self, operation: str) -> list[Path]:
        return [path for op, path in self.calls if op == operation]

    def _record(self, operation: str, path: Path) -> Optional[CommandResult]:
        self.calls.append((operation, path))
        return self.failures.get(operation)

    def make_directory(self, path: Path) -> CommandResult:
        return self._record("make_directory", path) or super().make_directory(path)

    def copy_file(self, source: Path, target: Path) -> CommandResult:
        return self._record("copy_file", target) or super().copy_file(source, target)

    def write_stream(self, source: BinaryIO, target: Path) -> CommandResult:
        return self._record("write_stream", target) or super().write_stream(source, target)

    def write_text(self, path: Path, text: str) -> CommandResult:
        return self._record("write_text", path) or super().write_text(path, text)

    def touch(self, path: Path) -> CommandResult:
        return self._record("touch", path) or super().touch(path)

    def remove(self, path: Path) -> CommandResult:
        return self._record("remove", path) or super().remove(path)

    def move(self, source: Path, target: Path) -> CommandResult:
        return self._record("move", target) or super().move(source, target)
