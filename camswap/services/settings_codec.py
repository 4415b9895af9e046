"""Line-oriented key=value codec for the settings file."""
from __future__ import annotations

import logging
from typing import Mapping


logger = logging.getLogger(__name__)

SEPARATOR = "="


class SettingsFormatError(ValueError):
    """A key or value cannot be represented in the settings format."""


class SettingsCodec:
    """Encodes a flat str -> str mapping as one ``key=value`` line per entry.

    Decoding splits on the first ``=``, strips surrounding whitespace and
    silently skips lines without a separator.
    """

    @staticmethod
    def encode(settings: Mapping[str, str]) -> str:
        lines = []
        for key, value in settings.items():
            key, value = str(key), str(value)
            if SEPARATOR in key or _has_line_break(key):
                raise SettingsFormatError(f"Invalid settings key: {key!r}")
            if _has_line_break(value):
                raise SettingsFormatError(f"Settings value for {key!r} spans lines")
            lines.append(f"{key}{SEPARATOR}{value}")
        return "\n".join(lines)

    @staticmethod
    def decode(text: str) -> dict[str, str]:
        settings: dict[str, str] = {}
        for line in text.splitlines():
            if SEPARATOR not in line:
                if line.strip():
                    logger.debug("Skipping malformed settings line: %r", line)
                continue
            key, value = line.split(SEPARATOR, 1)
            settings[key.strip()] = value.strip()
        return settings


def _has_line_break(text: str) -> bool:
    return len(text.splitlines()) > 1 or text.endswith(("\n", "\r"))
