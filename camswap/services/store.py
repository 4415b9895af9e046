"""Shared directory store - the protocol's single source of truth.

The controller and the hook module coordinate only through files in one
flat directory:

    virtual.mp4         active substituted video
    virtual.bmp         active substituted image
    disable.<ext>       present = feature disabled
    no_toast.<ext>      present = suppress notification feedback
    private_dir.<ext>   present = per-app private directory mode
    force_show.<ext>    present = force-show mode
    no-silent.<ext>     present = play sound (not silenced)
    settings.conf       key=value lines, rewritten whole on every save

There is no locking. Every write is eventually observed by the poller,
never acknowledged. Read-then-write sequences (toggle_flag, media
replacement) can interleave with other writers.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from ..core.config import ControlConfig
from ..core.models import (
    MEDIA_SLOT_ORDER,
    CommandResult,
    ControlFlag,
    ErrorKind,
    MediaKind,
    StoreResult,
)
from ..core.protocols import MediaSource, StorageBackend
from .settings_codec import SettingsCodec, SettingsFormatError


logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.conf"
STAGING_SUFFIX = ".staging"


class SharedDirectoryStore:
    """Owns the shared directory layout.

    All file effects go through the injected StorageBackend, so the same
    logic runs over direct file access or a privileged shell.
    """

    def __init__(
        self,
        directory: Path,
        backend: StorageBackend,
        flag_extension: str = "jpg",
        atomic_replace: bool = False,
        codec: Optional[SettingsCodec] = None,
    ):
        """Initialize the store.

        Args:
            directory: Shared directory path.
            backend: Storage backend performing the file operations.
            flag_extension: Extension of the flag sentinel files.
            atomic_replace: Stage new media and rename it into the slot
                instead of deleting first. The default leaves a window in
                which no media file exists.
            codec: Settings codec (default: SettingsCodec).
        """
        self._directory = directory
        self._backend = backend
        self._flag_extension = flag_extension.lstrip(".")
        self._atomic_replace = atomic_replace
        self._codec = codec or SettingsCodec()

    @classmethod
    def from_config(cls, config: ControlConfig, backend: StorageBackend) -> "SharedDirectoryStore":
        return cls(
            directory=config.shared_dir,
            backend=backend,
            flag_extension=config.flag_extension,
            atomic_replace=config.atomic_replace,
        )

    # --- Layout ---

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def settings_path(self) -> Path:
        return self._directory / SETTINGS_FILE

    def media_path(self, kind: MediaKind) -> Path:
        return self._directory / kind.slot_name

    def flag_path(self, flag: ControlFlag) -> Path:
        return self._directory / flag.file_name(self._flag_extension)

    # --- Directory ---

    def ensure_directory(self) -> bool:
        """Create the directory if missing. Returns whether it exists."""
        result = self._backend.make_directory(self._directory)
        if not result.success:
            logger.warning("Could not create %s: %s", self._directory, result.output)
        return result.success

    def is_populated(self) -> bool:
        """Whether the directory exists and has at least one entry."""
        if not self._backend.exists(self._directory):
            return False
        return bool(self._backend.list_directory(self._directory))

    # --- Media slots ---

    def put_media(self, kind: MediaKind, source: MediaSource) -> StoreResult:
        """Place a new media file into the slot for its kind.

        Both fixed media names are removed first (best effort). A Path
        source is copied by the backend; a stream is piped into it.

        Args:
            kind: Target slot.
            source: Path or readable binary stream.

        Returns:
            StoreResult with the destination path on success.
        """
        if not self.ensure_directory():
            return StoreResult(
                success=False,
                message="Could not create output directory",
                error=ErrorKind.IO_FAILURE,
            )

        target = self.media_path(kind)
        if isinstance(source, Path) and _same_path(source, target) and self._backend.exists(target):
            # Clearing the slots first would delete the source itself.
            self._clear_other_slots(kind)
            logger.info("%s media already in place at %s", kind.value, target)
            return StoreResult(True, f"{kind.value} already at {target}", path=target)

        if self._atomic_replace:
            return self._put_staged(kind, source, target)

        self._clear_slots()
        result = self._write(source, target)
        if not result.success:
            self._backend.remove(target)
            logger.warning("Placing %s failed: %s", kind.value, result.output)
            return StoreResult(False, result.output, result.error)

        logger.info("Placed %s media at %s", kind.value, target)
        return StoreResult(True, f"Placed {kind.value} at {target}", path=target)

    def _put_staged(self, kind: MediaKind, source: MediaSource, target: Path) -> StoreResult:
        staging = self._directory / f".{kind.slot_name}{STAGING_SUFFIX}"
        result = self._write(source, staging)
        if not result.success:
            self._backend.remove(staging)
            logger.warning("Staging %s failed: %s", kind.value, result.output)
            return StoreResult(False, result.output, result.error)

        self._clear_other_slots(kind)

        moved = self._backend.move(staging, target)
        if not moved.success:
            self._backend.remove(staging)
            logger.warning("Replacing %s failed: %s", target, moved.output)
            return StoreResult(False, moved.output, moved.error)

        logger.info("Placed %s media at %s (staged)", kind.value, target)
        return StoreResult(True, f"Placed {kind.value} at {target}", path=target)

    def _write(self, source: MediaSource, target: Path) -> CommandResult:
        if isinstance(source, Path):
            return self._backend.copy_file(source, target)
        return self._backend.write_stream(source, target)

    def _clear_slots(self) -> bool:
        cleared = True
        for kind in MEDIA_SLOT_ORDER:
            cleared = self._remove_quietly(self.media_path(kind)) and cleared
        return cleared

    def _clear_other_slots(self, kind: MediaKind) -> None:
        for other in MEDIA_SLOT_ORDER:
            if other is not kind:
                self._remove_quietly(self.media_path(other))

    def _remove_quietly(self, path: Path) -> bool:
        result = self._backend.remove(path)
        if not result.success:
            logger.warning("Could not remove %s: %s", path, result.output)
        return result.success

    def clear_media(self) -> bool:
        """Remove both media files. Missing files are not an error."""
        return self._clear_slots()

    def current_media(self) -> Optional[Path]:
        """The active media file: video first, then image."""
        for kind in MEDIA_SLOT_ORDER:
            path = self.media_path(kind)
            if self._backend.exists(path):
                return path
        return None

    # --- Control flags ---

    def has_flag(self, flag: ControlFlag) -> bool:
        return self._backend.exists(self.flag_path(flag))

    def set_flag(self, flag: ControlFlag, present: bool) -> bool:
        """Create or delete a flag file. No-op when already in that state."""
        path = self.flag_path(flag)
        if present:
            if not self.ensure_directory():
                return False
            if self._backend.exists(path):
                return True
            result = self._backend.touch(path)
        else:
            if not self._backend.exists(path):
                return True
            result = self._backend.remove(path)

        if not result.success:
            logger.warning("Could not set %s=%s: %s", flag.value, present, result.output)
            return False
        logger.debug("Flag %s %s", flag.value, "set" if present else "cleared")
        return True

    def toggle_flag(self, flag: ControlFlag) -> bool:
        """Flip a flag. Read-then-write: concurrent togglers can race."""
        return self.set_flag(flag, not self.has_flag(flag))

    # --- Settings ---

    def save_settings(self, settings: Mapping[str, str]) -> bool:
        """Overwrite the settings file with exactly these entries."""
        try:
            text = self._codec.encode(settings)
        except SettingsFormatError as e:
            logger.warning("Refusing to save settings: %s", e)
            return False

        if not self.ensure_directory():
            return False

        result = self._backend.write_text(self.settings_path, text)
        if not result.success:
            logger.warning("Could not save settings: %s", result.output)
        return result.success

    def load_settings(self) -> dict[str, str]:
        """Parse the settings file. Missing file yields an empty dict."""
        text = self._backend.read_text(self.settings_path)
        if text is None:
            return {}
        return self._codec.decode(text)

    def update_settings(self, values: Mapping[str, str]) -> bool:
        """Merge values into the stored settings and save."""
        settings = self.load_settings()
        settings.update({key: str(value) for key, value in values.items()})
        return self.save_settings(settings)


def _same_path(a: Path, b: Path) -> bool:
    return a.resolve() == b.resolve()
