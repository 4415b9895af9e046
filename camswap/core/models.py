"""Domain models - immutable data classes."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class MediaKind(Enum):
    """Which media slot a file belongs to."""
    VIDEO = "video"
    IMAGE = "image"

    @property
    def slot_name(self) -> str:
        """Fixed file name the hook module reads for this kind."""
        return "virtual.mp4" if self is MediaKind.VIDEO else "virtual.bmp"

    @property
    def mime_major(self) -> str:
        return f"{self.value}/"


# Video slot first: current-media lookup prefers it.
MEDIA_SLOT_ORDER = (MediaKind.VIDEO, MediaKind.IMAGE)


class ControlFlag(Enum):
    """Boolean protocol values encoded as sentinel file presence."""
    DISABLED = "disable"              # present = feature off
    NO_TOAST = "no_toast"
    PRIVATE_DIRECTORIES = "private_dir"
    FORCE_SHOW = "force_show"
    PLAY_SOUND = "no-silent"          # present = sound not silenced

    def file_name(self, extension: str) -> str:
        return f"{self.value}.{extension.lstrip('.')}"


class ErrorKind(Enum):
    """Failure taxonomy reported alongside diagnostics."""
    VALIDATION_REJECTED = "validation-rejected"
    ACCESS_DENIED = "access-denied"
    IO_FAILURE = "io-failure"
    MALFORMED_STATE = "malformed-state"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of admitting a candidate media file."""
    is_valid: bool
    error_message: Optional[str] = None
    width: int = 0
    height: int = 0

    @classmethod
    def accepted(cls, width: int = 0, height: int = 0) -> "ValidationResult":
        return cls(True, None, width, height)

    @classmethod
    def rejected(cls, message: str) -> "ValidationResult":
        return cls(False, message)

    @property
    def error(self) -> Optional[ErrorKind]:
        return None if self.is_valid else ErrorKind.VALIDATION_REJECTED

    @property
    def has_dimensions(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a single storage backend operation."""
    success: bool
    output: str = ""
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, output: str = "") -> "CommandResult":
        return cls(True, output)

    @classmethod
    def failed(cls, output: str, error: ErrorKind = ErrorKind.IO_FAILURE) -> "CommandResult":
        return cls(False, output, error)


@dataclass(frozen=True, slots=True)
class StoreResult:
    """Result of placing media into the shared directory."""
    success: bool
    message: str = ""
    error: Optional[ErrorKind] = None
    path: Optional[Path] = None
