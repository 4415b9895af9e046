"""Tests for the settings file codec."""
import pytest

from camswap.services.settings_codec import SettingsCodec, SettingsFormatError


class TestEncode:
    """Tests for SettingsCodec.encode."""

    def test_one_line_per_entry(self):
        text = SettingsCodec.encode({"width": "1920", "height": "1080"})

        assert text.splitlines() == ["width=1920", "height=1080"]

    def test_empty(self):
        assert SettingsCodec.encode({}) == ""

    def test_value_may_contain_separator(self):
        assert SettingsCodec.encode({"note": "a=b"}) == "note=a=b"

    @pytest.mark.parametrize("key", ["a=b", "two\nlines", "trailing\n"])
    def test_bad_key(self, key):
        with pytest.raises(SettingsFormatError):
            SettingsCodec.encode({key: "x"})

    def test_multiline_value(self):
        with pytest.raises(SettingsFormatError):
            SettingsCodec.encode({"k": "line1\nline2"})

    def test_error_is_value_error(self):
        assert issubclass(SettingsFormatError, ValueError)


class TestDecode:
    """Tests for SettingsCodec.decode."""

    def test_basic(self):
        assert SettingsCodec.decode("width=1920\nheight=1080") == {
            "width": "1920",
            "height": "1080",
        }

    def test_skips_lines_without_separator(self):
        text = "width=640\ngarbage line\n\nheight=480\n"

        assert SettingsCodec.decode(text) == {"width": "640", "height": "480"}

    def test_splits_on_first_separator(self):
        assert SettingsCodec.decode("url=http://x/?a=b") == {"url": "http://x/?a=b"}

    def test_strips_whitespace(self):
        assert SettingsCodec.decode("  flip = true  \r\n") == {"flip": "true"}

    def test_empty_value(self):
        assert SettingsCodec.decode("audio_sync=") == {"audio_sync": ""}

    def test_round_trip(self):
        settings = {"width": "1920", "height": "1080"}

        assert SettingsCodec.decode(SettingsCodec.encode(settings)) == settings
