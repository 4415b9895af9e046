"""Tests for the control facade."""
import io
from pathlib import Path

import pytest

from camswap.backends import DirectBackend, PrivilegedShellBackend
from camswap.core.config import ControlConfig
from camswap.core.models import ControlFlag, ErrorKind, MediaKind
from camswap.engines.validator import MediaValidator
from camswap.services.facade import ControlFacade, media_kind_for
from camswap.services.store import SharedDirectoryStore

from .fixtures import FakeProbe, RecordingBackend, make_bmp, make_video


@pytest.fixture
def shared_dir(tmp_path: Path) -> Path:
    return tmp_path / "Camera1"


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe((1280, 720))


@pytest.fixture
def facade(shared_dir: Path, probe: FakeProbe) -> ControlFacade:
    store = SharedDirectoryStore(shared_dir, DirectBackend())
    return ControlFacade(store, MediaValidator(probe=probe), clock=lambda: 1700000000.123)


class TestMediaKindFor:
    """Extension to slot mapping."""

    @pytest.mark.parametrize("name,expected", [
        ("clip.mp4", MediaKind.VIDEO),
        ("CLIP.MP4", MediaKind.VIDEO),
        ("still.bmp", MediaKind.IMAGE),
        ("still.Bmp", MediaKind.IMAGE),
        ("still.png", None),
        ("clip.mov", None),
        ("noext", None),
    ])
    def test_mapping(self, name, expected):
        assert media_kind_for(name) is expected


class TestSetMediaPath:
    """set_media_path accepts only existing .mp4/.bmp files that validate."""

    def test_video(self, facade, shared_dir: Path, tmp_path: Path):
        source = make_video(tmp_path / "in" / "clip.mp4", b"frames")

        assert facade.set_media_path(str(source))

        assert (shared_dir / "virtual.mp4").read_bytes() == b"frames"
        assert facade.get_current_media_path() == str((shared_dir / "virtual.mp4").absolute())

    def test_image_replaces_video(self, facade, shared_dir: Path, tmp_path: Path):
        facade.set_media_path(make_video(tmp_path / "clip.mp4"))

        assert facade.set_media_path(make_bmp(tmp_path / "still.bmp"))

        assert not (shared_dir / "virtual.mp4").exists()
        assert facade.get_current_media_path().endswith("virtual.bmp")

    def test_uppercase_extension(self, facade, tmp_path: Path):
        assert facade.set_media_path(make_bmp(tmp_path / "STILL.BMP"))

    @pytest.mark.parametrize("path", ["", None])
    def test_empty_path(self, facade, path, shared_dir: Path):
        assert not facade.set_media_path(path)
        assert not shared_dir.exists()

    def test_unsupported_extension(self, facade, shared_dir: Path, tmp_path: Path):
        source = tmp_path / "still.png"
        source.write_bytes(b"png")

        assert not facade.set_media_path(source)
        assert not shared_dir.exists()

    def test_missing_file(self, facade, shared_dir: Path, tmp_path: Path):
        assert not facade.set_media_path(tmp_path / "missing.mp4")
        assert not shared_dir.exists()

    def test_rejected_image_leaves_directory_untouched(self, facade, shared_dir: Path, tmp_path: Path):
        facade.set_media_path(make_video(tmp_path / "clip.mp4", b"keep"))

        assert not facade.set_media_path(make_bmp(tmp_path / "tiny.bmp", (8, 8)))

        assert (shared_dir / "virtual.mp4").read_bytes() == b"keep"
        assert not (shared_dir / "virtual.bmp").exists()


class TestImportMedia:
    """import_media reports why a candidate was refused."""

    def test_stream_import(self, facade, shared_dir: Path, tmp_path: Path):
        data = make_bmp(tmp_path / "still.bmp", (32, 32)).read_bytes()

        result = facade.import_media(MediaKind.IMAGE, io.BytesIO(data), "image/bmp")

        assert result.success
        assert result.path == shared_dir / "virtual.bmp"
        assert (shared_dir / "virtual.bmp").read_bytes() == data

    def test_rejection(self, facade, shared_dir: Path, tmp_path: Path):
        source = make_video(tmp_path / "clip.mp4")

        result = facade.import_media(MediaKind.VIDEO, source, "image/jpeg")

        assert not result.success
        assert result.error is ErrorKind.VALIDATION_REJECTED
        assert result.message == "Invalid file type. Expected video file."
        assert not shared_dir.exists()

    def test_video_too_small(self, shared_dir: Path, tmp_path: Path):
        store = SharedDirectoryStore(shared_dir, DirectBackend())
        facade = ControlFacade(store, MediaValidator(probe=FakeProbe((8, 8))))

        result = facade.import_media(MediaKind.VIDEO, make_video(tmp_path / "clip.mp4"))

        assert result.message == "Video resolution too small. Minimum is 16x16."
        assert facade.get_current_media_path() == ""

    def test_store_failure_surfaces(self, shared_dir: Path, probe, tmp_path: Path):
        backend = RecordingBackend()
        backend.fail("copy_file", "Permission denied: clip.mp4", ErrorKind.ACCESS_DENIED)
        facade = ControlFacade(SharedDirectoryStore(shared_dir, backend), MediaValidator(probe=probe))

        result = facade.import_media(MediaKind.VIDEO, make_video(tmp_path / "clip.mp4"))

        assert not result.success
        assert result.error is ErrorKind.ACCESS_DENIED


class TestCurrentMedia:
    """get_current_media_path and clear_media."""

    def test_empty(self, facade):
        assert facade.get_current_media_path() == ""

    def test_clear(self, facade, tmp_path: Path):
        facade.set_media_path(make_bmp(tmp_path / "still.bmp"))

        assert facade.clear_media()
        assert facade.get_current_media_path() == ""


class TestFlags:
    """Boolean accessors over the flag files."""

    def test_enabled_by_default(self, facade):
        assert facade.is_enabled()

    def test_disable_creates_flag(self, facade, shared_dir: Path):
        assert facade.set_enabled(False)

        assert (shared_dir / "disable.jpg").exists()
        assert not facade.is_enabled()

    def test_enable_idempotent(self, facade, shared_dir: Path):
        facade.set_enabled(False)

        assert facade.set_enabled(True)
        assert facade.set_enabled(True)
        assert facade.is_enabled()
        assert not (shared_dir / "disable.jpg").exists()

    def test_disable_idempotent(self, facade):
        assert facade.set_enabled(False)
        assert facade.set_enabled(False)
        assert not facade.is_enabled()

    def test_no_toast(self, facade, shared_dir: Path):
        assert facade.set_no_toast(True)
        assert facade.is_no_toast()
        assert (shared_dir / "no_toast.jpg").exists()
        assert facade.set_no_toast(False)
        assert not facade.is_no_toast()

    def test_private_directories(self, facade, shared_dir: Path):
        assert facade.set_private_directories(True)
        assert facade.is_private_directories()
        assert (shared_dir / "private_dir.jpg").exists()

    def test_force_show(self, facade, shared_dir: Path):
        assert facade.set_force_show(True)
        assert facade.is_force_show()
        assert (shared_dir / "force_show.jpg").exists()
        assert facade.set_force_show(False)
        assert not facade.is_force_show()

    def test_play_sound(self, facade, shared_dir: Path):
        assert facade.set_play_sound(True)
        assert facade.is_play_sound()
        assert (shared_dir / "no-silent.jpg").exists()
        assert facade.set_play_sound(False)
        assert not (shared_dir / "no-silent.jpg").exists()

    def test_toggle(self, facade):
        assert facade.toggle_flag(ControlFlag.DISABLED)
        assert not facade.is_enabled()
        assert facade.toggle_flag(ControlFlag.DISABLED)
        assert facade.is_enabled()

    def test_flag_write_failure(self, shared_dir: Path):
        backend = RecordingBackend()
        backend.fail("touch", "Permission denied", ErrorKind.ACCESS_DENIED)
        facade = ControlFacade(SharedDirectoryStore(shared_dir, backend), MediaValidator(probe=FakeProbe()))

        assert not facade.set_enabled(False)
        assert facade.is_enabled()


class TestModuleActive:
    """Liveness heuristic."""

    def test_missing_directory(self, facade):
        assert not facade.is_module_active()

    def test_empty_directory(self, facade, shared_dir: Path):
        shared_dir.mkdir()

        assert not facade.is_module_active()

    def test_any_entry(self, facade, shared_dir: Path):
        shared_dir.mkdir()
        (shared_dir / "unrelated.txt").write_text("x")

        assert facade.is_module_active()


class TestSettings:
    """Resolution, preferences and refresh."""

    def test_set_resolution(self, facade, shared_dir: Path):
        assert facade.set_resolution(1920, 1080)

        assert facade.get_settings() == {"width": "1920", "height": "1080"}
        assert (shared_dir / "settings.conf").read_text() == "width=1920\nheight=1080"

    def test_set_resolution_merges(self, facade):
        facade.save_preferences(640, 480, flip=True)

        facade.set_resolution(1280, 720)

        settings = facade.get_settings()
        assert settings["width"] == "1280"
        assert settings["height"] == "720"
        assert settings["flip"] == "true"

    @pytest.mark.parametrize("width,height", [(0, 1080), (5000, 1080), (1920, 0), (1920, 4097), (-1, -1)])
    def test_set_resolution_out_of_range(self, facade, width, height):
        facade.set_resolution(1280, 720)

        assert not facade.set_resolution(width, height)

        assert facade.get_settings() == {"width": "1280", "height": "720"}

    def test_set_resolution_bounds(self, facade):
        assert facade.set_resolution(1, 1)
        assert facade.set_resolution(4096, 4096)

    def test_save_preferences(self, facade, shared_dir: Path):
        assert facade.save_preferences(1280, 720, flip=True, audio_sync=False, private_dirs=True)

        assert facade.get_settings() == {
            "width": "1280",
            "height": "720",
            "flip": "true",
            "audio_sync": "false",
            "private_dirs": "true",
        }
        assert facade.is_enabled()
        assert not facade.is_no_toast()

    def test_save_preferences_applies_enable_and_no_toast(self, facade, shared_dir: Path):
        assert facade.save_preferences(1280, 720, enabled=False, no_toast=True)

        assert (shared_dir / "disable.jpg").exists()
        assert (shared_dir / "no_toast.jpg").exists()

        assert facade.save_preferences(1280, 720, enabled=True, no_toast=False)

        assert facade.is_enabled()
        assert not facade.is_no_toast()

    def test_save_preferences_leaves_private_flag_alone(self, facade):
        facade.set_private_directories(True)

        assert facade.save_preferences(1280, 720, private_dirs=False)

        assert facade.is_private_directories()
        assert facade.get_settings()["private_dirs"] == "false"

    def test_save_preferences_reports_flag_failure(self, shared_dir: Path):
        backend = RecordingBackend()
        backend.fail("touch", "Permission denied", ErrorKind.ACCESS_DENIED)
        facade = ControlFacade(SharedDirectoryStore(shared_dir, backend), MediaValidator(probe=FakeProbe()))

        assert not facade.save_preferences(1280, 720, enabled=False)

        assert facade.get_settings()["width"] == "1280"

    def test_save_preferences_rejects_bad_resolution(self, facade, shared_dir: Path):
        assert not facade.save_preferences(0, 720, enabled=False, no_toast=True)

        assert not shared_dir.exists()

    def test_refresh_stamps_milliseconds(self, facade):
        facade.set_resolution(800, 600)

        assert facade.refresh()

        assert facade.get_settings() == {
            "width": "800",
            "height": "600",
            "last_refresh": "1700000000123",
        }

    def test_refresh_changes_file(self, shared_dir: Path):
        ticks = iter([1.0, 2.0])
        store = SharedDirectoryStore(shared_dir, DirectBackend())
        facade = ControlFacade(store, MediaValidator(probe=FakeProbe()), clock=lambda: next(ticks))

        facade.refresh()
        first = (shared_dir / "settings.conf").read_text()
        facade.refresh()

        assert (shared_dir / "settings.conf").read_text() != first

    def test_settings_missing(self, facade):
        assert facade.get_settings() == {}


class TestStatus:
    """Snapshot for display."""

    def test_snapshot(self, facade, shared_dir: Path, tmp_path: Path):
        facade.set_media_path(make_bmp(tmp_path / "still.bmp"))
        facade.set_no_toast(True)
        facade.set_resolution(640, 480)

        status = facade.status()

        assert status["directory"] == str(shared_dir)
        assert status["backend"] == "direct"
        assert status["module_active"] is True
        assert status["enabled"] is True
        assert status["no_toast"] is True
        assert status["private_directories"] is False
        assert status["force_show"] is False
        assert status["play_sound"] is False
        assert status["current_media"].endswith("virtual.bmp")
        assert status["settings"] == {"width": "640", "height": "480"}


class TestFromConfig:
    """Facade construction from configuration."""

    def test_default_backend(self, shared_dir: Path):
        facade = ControlFacade.from_config(ControlConfig(shared_dir=shared_dir, flag_extension="png"))

        facade.set_no_toast(True)

        assert facade.store.backend.name == "direct"
        assert (shared_dir / "no_toast.png").exists()

    def test_privileged_shell_backend(self, shared_dir: Path):
        config = ControlConfig(
            shared_dir=shared_dir,
            backend="privileged-shell",
            shell_command=["sh", "-c"],
        )
        facade = ControlFacade.from_config(config)

        assert isinstance(facade.store.backend, PrivilegedShellBackend)
        assert facade.set_enabled(False)
        assert (shared_dir / "disable.jpg").exists()

    def test_explicit_backend(self, shared_dir: Path):
        backend = RecordingBackend()

        facade = ControlFacade.from_config(ControlConfig(shared_dir=shared_dir), backend)

        assert facade.store.backend is backend
