"""Protocol definitions (interfaces) for dependency injection."""
from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Union

from .models import CommandResult


MediaSource = Union[Path, BinaryIO]


class StorageBackend(Protocol):
    """Interface for the file operations the shared directory needs.

    Implementations:
    - DirectBackend: ordinary file-system calls
    - PrivilegedShellBackend: one elevated shell command per operation

    Mutating operations report expected failures through CommandResult
    and never raise for them.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for logging."""
        ...

    @abstractmethod
    def make_directory(self, path: Path) -> CommandResult:
        """Create a directory and its parents if missing."""
        ...

    @abstractmethod
    def copy_file(self, source: Path, target: Path) -> CommandResult:
        """Copy a file, overwriting the target."""
        ...

    @abstractmethod
    def write_stream(self, source: BinaryIO, target: Path) -> CommandResult:
        """Stream binary data into target, overwriting it."""
        ...

    @abstractmethod
    def write_text(self, path: Path, text: str) -> CommandResult:
        """Replace a file's content with text."""
        ...

    @abstractmethod
    def read_text(self, path: Path) -> Optional[str]:
        """Read a UTF-8 text file, replacing undecodable bytes. None if missing or unreadable."""
        ...

    @abstractmethod
    def touch(self, path: Path) -> CommandResult:
        """Create an empty file if it does not exist."""
        ...

    @abstractmethod
    def remove(self, path: Path) -> CommandResult:
        """Delete a file. Missing files are not an error."""
        ...

    @abstractmethod
    def move(self, source: Path, target: Path) -> CommandResult:
        """Rename source over target."""
        ...

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Pure existence check."""
        ...

    @abstractmethod
    def list_directory(self, path: Path) -> list[str]:
        """Names of the entries in a directory, empty if missing."""
        ...


class MediaProbe(Protocol):
    """Interface for reading video dimensions from container metadata."""

    @abstractmethod
    def probe_dimensions(self, source: MediaSource) -> Optional[tuple[int, int]]:
        """Return (width, height), or None if metadata is unavailable."""
        ...
