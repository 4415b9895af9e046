"""Core domain models, configuration and protocols."""
from .config import ControlConfig, BackendKind
from .models import (
    MediaKind,
    ControlFlag,
    ErrorKind,
    ValidationResult,
    CommandResult,
    StoreResult,
)
from .protocols import StorageBackend, MediaProbe, MediaSource

__all__ = [
    # Config
    "ControlConfig",
    "BackendKind",
    # Models
    "MediaKind",
    "ControlFlag",
    "ErrorKind",
    "ValidationResult",
    "CommandResult",
    "StoreResult",
    # Protocols
    "StorageBackend",
    "MediaProbe",
    "MediaSource",
]
