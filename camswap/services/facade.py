"""Control facade - the accessor surface for callers and peer processes.

Every operation is synchronous and maps failures to plain sentinels
(False or an empty string) so callers can render or retry them.
"""
from __future__ import annotations

import logging
import mimetypes
import time
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..backends import create_backend
from ..core.config import MAX_DIMENSION, MIN_RESOLUTION, ControlConfig
from ..core.models import ControlFlag, ErrorKind, MediaKind, StoreResult
from ..core.protocols import MediaSource, StorageBackend
from ..engines.validator import MediaValidator
from .store import SharedDirectoryStore


logger = logging.getLogger(__name__)

MEDIA_EXTENSIONS = {
    ".mp4": MediaKind.VIDEO,
    ".bmp": MediaKind.IMAGE,
}


def media_kind_for(path: Union[str, Path]) -> Optional[MediaKind]:
    """Infer the media slot from a file extension (case-insensitive)."""
    return MEDIA_EXTENSIONS.get(Path(path).suffix.lower())


class ControlFacade:
    """Composes validation and the shared directory store.

    Usage:
        facade = ControlFacade.from_config(ControlConfig(shared_dir=path))
        facade.set_media_path("/sdcard/Movies/clip.mp4")
        facade.set_enabled(True)
        facade.set_resolution(1280, 720)
    """

    def __init__(
        self,
        store: SharedDirectoryStore,
        validator: Optional[MediaValidator] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the facade.

        Args:
            store: Shared directory store.
            validator: Media admission checks (default: MediaValidator()).
            clock: Seconds since the epoch, used to stamp refreshes.
        """
        self._store = store
        self._validator = validator or MediaValidator()
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: ControlConfig,
        backend: Optional[StorageBackend] = None,
    ) -> "ControlFacade":
        """Build a facade with the backend chosen by the configuration."""
        store = SharedDirectoryStore.from_config(config, backend or create_backend(config))
        return cls(store, MediaValidator.from_config(config))

    @property
    def store(self) -> SharedDirectoryStore:
        return self._store

    # --- Module state ---

    def is_module_active(self) -> bool:
        """Heuristic liveness: the shared directory exists and is non-empty."""
        return self._store.is_populated()

    # --- Media ---

    def set_media_path(self, path: Union[str, Path, None]) -> bool:
        """Validate a file on disk and place it in the slot its extension names."""
        if not path:
            return False

        source = Path(path)
        kind = media_kind_for(source)
        if kind is None:
            logger.info("Unsupported media extension: %s", source.suffix or source.name)
            return False
        if not source.is_file():
            logger.info("Media source not found: %s", source)
            return False

        mime_type, _ = mimetypes.guess_type(source.name)
        return self.import_media(kind, source, mime_type).success

    def import_media(
        self,
        kind: MediaKind,
        source: MediaSource,
        mime_type: Optional[str] = None,
    ) -> StoreResult:
        """Validate a candidate and, if admitted, place it in its slot.

        Args:
            kind: Target slot.
            source: Path or seekable binary stream.
            mime_type: Declared mime type, if the caller knows it.

        Returns:
            StoreResult; rejected candidates never touch the directory.
        """
        validation = self._validator.validate(kind, mime_type, source)
        if not validation.is_valid:
            logger.info("Rejected %s: %s", kind.value, validation.error_message)
            return StoreResult(
                success=False,
                message=validation.error_message or "Validation failed",
                error=ErrorKind.VALIDATION_REJECTED,
            )

        if validation.has_dimensions:
            logger.debug("Admitted %s %dx%d", kind.value, validation.width, validation.height)
        return self._store.put_media(kind, source)

    def get_current_media_path(self) -> str:
        media = self._store.current_media()
        return str(media.absolute()) if media else ""

    def clear_media(self) -> bool:
        return self._store.clear_media()

    # --- Flags ---

    def set_enabled(self, enabled: bool) -> bool:
        # The disable flag has inverted polarity: no file means enabled.
        return self._store.set_flag(ControlFlag.DISABLED, not enabled)

    def is_enabled(self) -> bool:
        return not self._store.has_flag(ControlFlag.DISABLED)

    def set_no_toast(self, no_toast: bool) -> bool:
        return self._store.set_flag(ControlFlag.NO_TOAST, no_toast)

    def is_no_toast(self) -> bool:
        return self._store.has_flag(ControlFlag.NO_TOAST)

    def set_private_directories(self, private: bool) -> bool:
        return self._store.set_flag(ControlFlag.PRIVATE_DIRECTORIES, private)

    def is_private_directories(self) -> bool:
        return self._store.has_flag(ControlFlag.PRIVATE_DIRECTORIES)

    def set_force_show(self, force_show: bool) -> bool:
        return self._store.set_flag(ControlFlag.FORCE_SHOW, force_show)

    def is_force_show(self) -> bool:
        return self._store.has_flag(ControlFlag.FORCE_SHOW)

    def set_play_sound(self, play_sound: bool) -> bool:
        return self._store.set_flag(ControlFlag.PLAY_SOUND, play_sound)

    def is_play_sound(self) -> bool:
        return self._store.has_flag(ControlFlag.PLAY_SOUND)

    def toggle_flag(self, flag: ControlFlag) -> bool:
        return self._store.toggle_flag(flag)

    # --- Settings ---

    def get_settings(self) -> dict[str, str]:
        return self._store.load_settings()

    def set_resolution(self, width: int, height: int) -> bool:
        """Merge width/height into the settings file."""
        if not _resolution_in_range(width, height):
            logger.info("Resolution out of range: %sx%s", width, height)
            return False
        return self._store.update_settings({"width": str(width), "height": str(height)})

    def save_preferences(
        self,
        width: int,
        height: int,
        flip: bool = False,
        audio_sync: bool = False,
        private_dirs: bool = False,
        enabled: bool = True,
        no_toast: bool = False,
    ) -> bool:
        """Apply the settings screen in one pass.

        The enable state and no-toast preference go to their flag files,
        then the remaining preferences are merged into the settings file.
        private_dirs is only recorded there; its flag is managed separately
        with set_private_directories.

        Returns:
            True only if every write succeeded.
        """
        if not _resolution_in_range(width, height):
            return False

        flags_ok = self.set_enabled(enabled)
        flags_ok = self.set_no_toast(no_toast) and flags_ok
        saved = self._store.update_settings({
            "width": str(width),
            "height": str(height),
            "flip": _bool_text(flip),
            "audio_sync": _bool_text(audio_sync),
            "private_dirs": _bool_text(private_dirs),
        })
        return flags_ok and saved

    def refresh(self) -> bool:
        """Stamp last_refresh so the polling hook module sees a change."""
        settings = self._store.load_settings()
        settings["last_refresh"] = str(int(self._clock() * 1000))
        return self._store.save_settings(settings)

    # --- Snapshot ---

    def status(self) -> dict[str, Any]:
        """Snapshot of the protocol state for display."""
        return {
            "directory": str(self._store.directory),
            "backend": self._store.backend.name,
            "module_active": self.is_module_active(),
            "enabled": self.is_enabled(),
            "no_toast": self.is_no_toast(),
            "private_directories": self.is_private_directories(),
            "force_show": self.is_force_show(),
            "play_sound": self.is_play_sound(),
            "current_media": self.get_current_media_path(),
            "settings": self.get_settings(),
        }


def _resolution_in_range(width: int, height: int) -> bool:
    return MIN_RESOLUTION <= width <= MAX_DIMENSION and MIN_RESOLUTION <= height <= MAX_DIMENSION


def _bool_text(value: bool) -> str:
    return "true" if value else "false"
