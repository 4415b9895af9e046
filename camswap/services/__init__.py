"""Service layer - settings codec, shared directory store, control facade."""
from .settings_codec import SettingsCodec, SettingsFormatError
from .store import SharedDirectoryStore
from .facade import ControlFacade, media_kind_for

__all__ = [
    "SettingsCodec",
    "SettingsFormatError",
    "SharedDirectoryStore",
    "ControlFacade",
    "media_kind_for",
]
