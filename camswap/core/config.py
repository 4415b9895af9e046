"""Configuration models with validation."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


DEFAULT_SHARED_DIR = Path("/sdcard/DCIM/Camera1")

MAX_FILE_SIZE = 500 * 1024 * 1024  # 500 MiB
MIN_DIMENSION = 16
MAX_DIMENSION = 4096
MIN_RESOLUTION = 1


class BackendKind(str, Enum):
    """Which storage backend reaches the shared directory."""
    direct = "direct"
    privileged_shell = "privileged-shell"


class ControlConfig(BaseModel):
    """Configuration for the control protocol.

    Chosen once at startup. CLI flags override config file values.
    """
    shared_dir: Path = Field(
        default=DEFAULT_SHARED_DIR,
        description="Directory polled by the hook module"
    )
    backend: BackendKind = Field(
        default=BackendKind.direct,
        description="Storage backend: direct or privileged-shell"
    )
    flag_extension: str = Field(
        default="jpg",
        description="Extension of the flag sentinel files"
    )
    shell_command: List[str] = Field(
        default_factory=lambda: ["su", "-c"],
        description="Elevated runner prefix; the shell command is appended"
    )
    shell_timeout: Optional[float] = Field(
        default=None,
        description="Seconds before a privileged command is killed (None=wait forever)"
    )
    atomic_replace: bool = Field(
        default=False,
        description="Stage new media and rename it over the slot"
    )
    max_file_size: int = Field(default=MAX_FILE_SIZE, gt=0)
    min_dimension: int = Field(default=MIN_DIMENSION, ge=1)
    max_dimension: int = Field(default=MAX_DIMENSION, ge=1)
    exiftool_path: str = Field(
        default="exiftool",
        description="exiftool binary used to read video metadata"
    )
    probe_timeout: float = Field(default=10.0, gt=0)

    @field_validator("shared_dir")
    @classmethod
    def expand_shared_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("flag_extension")
    @classmethod
    def strip_extension(cls, value: str) -> str:
        value = value.strip().lstrip(".")
        if not value or "/" in value:
            raise ValueError(f"Invalid flag extension: {value!r}")
        return value

    @field_validator("shell_command")
    @classmethod
    def check_shell_command(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("shell_command must name at least the runner binary")
        return value

    @classmethod
    def load(cls, path: Path) -> "ControlConfig":
        """Load configuration from a JSON file."""
        return cls.model_validate_json(path.read_text(encoding="utf-8"))

    def with_overrides(self, **kwargs) -> "ControlConfig":
        """Create a new config with some values overridden.

        None values are ignored so unset CLI flags keep file values.
        """
        current = self.model_dump()
        current.update({k: v for k, v in kwargs.items() if v is not None})
        return ControlConfig(**current)
