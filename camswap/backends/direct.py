"""Storage backend using ordinary file-system calls."""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Optional

from ..core.models import CommandResult, ErrorKind


logger = logging.getLogger(__name__)


class DirectBackend:
    """File operations for a process with direct storage access."""

    @property
    def name(self) -> str:
        return "direct"

    def make_directory(self, path: Path) -> CommandResult:
        try:
            path.mkdir(parents=True, exist_ok=True)
            return CommandResult.ok()
        except OSError as e:
            return _failure("mkdir", e)

    def copy_file(self, source: Path, target: Path) -> CommandResult:
        """Copy source to target, reporting unreadable sources separately.

        Args:
            source: File to read.
            target: File to create or overwrite.

        Returns:
            CommandResult; output carries the diagnostic on failure.
        """
        try:
            handle = source.open("rb")
        except PermissionError as e:
            return CommandResult.failed(f"Permission denied: {e}", ErrorKind.ACCESS_DENIED)
        except OSError as e:
            return CommandResult.failed(f"Could not open source file: {e}")

        with handle:
            return self.write_stream(handle, target)

    def write_stream(self, source: BinaryIO, target: Path) -> CommandResult:
        try:
            with target.open("wb") as out:
                shutil.copyfileobj(source, out)
            return CommandResult.ok()
        except PermissionError as e:
            return CommandResult.failed(f"Permission denied: {e}", ErrorKind.ACCESS_DENIED)
        except OSError as e:
            return CommandResult.failed(f"Copy failed: {e}")

    def write_text(self, path: Path, text: str) -> CommandResult:
        try:
            path.write_text(text, encoding="utf-8")
            return CommandResult.ok()
        except OSError as e:
            return _failure("write", e)

    def read_text(self, path: Path) -> Optional[str]:
        # Undecodable bytes are replaced, matching the shell backend.
        try:
            return path.read_bytes().decode("utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def touch(self, path: Path) -> CommandResult:
        try:
            path.touch(exist_ok=True)
            return CommandResult.ok()
        except OSError as e:
            return _failure("touch", e)

    def remove(self, path: Path) -> CommandResult:
        try:
            path.unlink(missing_ok=True)
            return CommandResult.ok()
        except OSError as e:
            return _failure("remove", e)

    def move(self, source: Path, target: Path) -> CommandResult:
        try:
            os.replace(source, target)
            return CommandResult.ok()
        except OSError as e:
            return _failure("move", e)

    def exists(self, path: Path) -> bool:
        return path.exists()

    def list_directory(self, path: Path) -> list[str]:
        try:
            return sorted(entry.name for entry in path.iterdir())
        except OSError:
            return []


def _failure(operation: str, error: OSError) -> CommandResult:
    kind = ErrorKind.ACCESS_DENIED if isinstance(error, PermissionError) else ErrorKind.IO_FAILURE
    return CommandResult.failed(f"{operation} failed: {error}", kind)
