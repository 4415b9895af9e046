"""Replacement camera feed controller.

Drives an out-of-process hook module through a shared directory of
media, flag and settings files.
"""

__version__ = "1.0.0"

# Core exports
from .core.config import ControlConfig, BackendKind
from .core.models import (
    MediaKind,
    ControlFlag,
    ErrorKind,
    ValidationResult,
    CommandResult,
    StoreResult,
)
from .core.protocols import StorageBackend, MediaProbe

# Engine exports
from .engines.metadata import ExifToolVideoProbe
from .engines.validator import MediaValidator

# Backend exports
from .backends import DirectBackend, PrivilegedShellBackend, create_backend

# Service exports
from .services.settings_codec import SettingsCodec, SettingsFormatError
from .services.store import SharedDirectoryStore
from .services.facade import ControlFacade

# Logging exports
from .logging.rich_logger import RichReporter

__all__ = [
    # Core
    "ControlConfig",
    "BackendKind",
    "MediaKind",
    "ControlFlag",
    "ErrorKind",
    "ValidationResult",
    "CommandResult",
    "StoreResult",
    "StorageBackend",
    "MediaProbe",
    # Engines
    "ExifToolVideoProbe",
    "MediaValidator",
    # Backends
    "DirectBackend",
    "PrivilegedShellBackend",
    "create_backend",
    # Services
    "SettingsCodec",
    "SettingsFormatError",
    "SharedDirectoryStore",
    "ControlFacade",
    # Logging
    "RichReporter",
]
