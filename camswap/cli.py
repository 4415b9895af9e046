"""CLI with subcommands: status, set-media, import, flag, resolution, etc."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from .core.config import BackendKind, ControlConfig
from .core.models import ControlFlag, MediaKind
from .logging.rich_logger import QuietReporter, RichReporter, configure_logging
from .services.facade import ControlFacade


FLAG_CHOICES = {
    "disabled": ControlFlag.DISABLED,
    "no-toast": ControlFlag.NO_TOAST,
    "private-dir": ControlFlag.PRIVATE_DIRECTORIES,
    "force-show": ControlFlag.FORCE_SHOW,
    "play-sound": ControlFlag.PLAY_SOUND,
}


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="camswap",
        description="Control the replacement camera feed through the shared directory.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON configuration file",
    )
    parser.add_argument(
        "--dir",
        dest="shared_dir",
        type=Path,
        default=None,
        help="Shared directory (default: /sdcard/DCIM/Camera1)",
    )
    parser.add_argument(
        "--backend",
        choices=[kind.value for kind in BackendKind],
        default=None,
        help="Storage backend (default: direct)",
    )
    parser.add_argument(
        "--flag-ext",
        dest="flag_extension",
        default=None,
        help="Extension of flag files (default: jpg)",
    )
    parser.add_argument(
        "--timeout",
        dest="shell_timeout",
        type=float,
        default=None,
        help="Seconds before a privileged command is abandoned",
    )
    parser.add_argument(
        "--atomic",
        dest="atomic_replace",
        action="store_true",
        default=None,
        help="Stage new media and rename it into place",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("status", help="Show the shared directory state")

    set_media_parser = subparsers.add_parser(
        "set-media",
        help="Validate a .mp4 or .bmp file and make it the active media",
    )
    set_media_parser.add_argument("path", type=Path, help="Media file")

    import_parser = subparsers.add_parser(
        "import",
        help="Validate and import a file into an explicit media slot",
    )
    import_parser.add_argument(
        "kind",
        choices=[kind.value for kind in MediaKind],
        help="Media slot",
    )
    import_parser.add_argument("path", type=Path, help="Media file")
    import_parser.add_argument(
        "--mime",
        default=None,
        help="Declared mime type (checked against the slot)",
    )

    subparsers.add_parser("clear", help="Remove the active media files")
    subparsers.add_parser("enable", help="Enable the replacement feed")
    subparsers.add_parser("disable", help="Disable the replacement feed")

    flag_parser = subparsers.add_parser("flag", help="Set, clear or toggle a control flag")
    flag_parser.add_argument("name", choices=sorted(FLAG_CHOICES), help="Flag name")
    flag_parser.add_argument("state", choices=["on", "off", "toggle"], help="New state")

    resolution_parser = subparsers.add_parser("resolution", help="Save the output resolution")
    resolution_parser.add_argument("width", type=int)
    resolution_parser.add_argument("height", type=int)

    subparsers.add_parser("refresh", help="Stamp the settings so the hook module reloads")
    subparsers.add_parser("settings", help="Show saved settings")

    return parser


def build_config(args: argparse.Namespace) -> ControlConfig:
    """Load the config file (if any) and apply CLI overrides."""
    config = ControlConfig.load(args.config) if args.config else ControlConfig()
    return config.with_overrides(
        shared_dir=args.shared_dir,
        backend=args.backend,
        flag_extension=args.flag_extension,
        shell_timeout=args.shell_timeout,
        atomic_replace=args.atomic_replace,
    )


# ============ Command Handlers ============

def cmd_status(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    reporter.print_header("camswap status")
    reporter.print_status(facade.status())
    return 0


def cmd_set_media(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    if facade.set_media_path(args.path):
        reporter.success(f"Active media: {facade.get_current_media_path()}")
        return 0
    reporter.error(f"Could not use {args.path} (unsupported, missing or rejected)")
    return 1


def cmd_import(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    if not args.path.is_file():
        reporter.error(f"File not found: {args.path}")
        return 1

    result = facade.import_media(MediaKind(args.kind), args.path, args.mime)
    if result.success:
        reporter.success(result.message)
        return 0
    reporter.error(f"{result.error.value if result.error else 'error'}: {result.message}")
    return 1


def cmd_clear(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    if facade.clear_media():
        reporter.success("Media cleared, real camera restored")
        return 0
    reporter.error("Could not clear media")
    return 1


def cmd_enable(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    enabled = args.command == "enable"
    if facade.set_enabled(enabled):
        reporter.success("Replacement feed " + ("enabled" if enabled else "disabled"))
        return 0
    reporter.error("Could not update the disable flag")
    return 1


def cmd_flag(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    flag = FLAG_CHOICES[args.name]
    store = facade.store

    if args.state == "toggle":
        ok = store.toggle_flag(flag)
    else:
        ok = store.set_flag(flag, args.state == "on")

    if not ok:
        reporter.error(f"Could not update {store.flag_path(flag).name}")
        return 1

    state = "present" if store.has_flag(flag) else "absent"
    reporter.success(f"{store.flag_path(flag).name} {state}")
    return 0


def cmd_resolution(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    if facade.set_resolution(args.width, args.height):
        reporter.success(f"Resolution set to {args.width}x{args.height}")
        return 0
    reporter.error(f"Invalid or unsaved resolution: {args.width}x{args.height}")
    return 1


def cmd_refresh(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    if facade.refresh():
        reporter.success("Refresh requested")
        return 0
    reporter.error("Could not write settings")
    return 1


def cmd_settings(args: argparse.Namespace, facade: ControlFacade, reporter) -> int:
    reporter.print_settings(facade.get_settings())
    return 0


COMMANDS = {
    "status": cmd_status,
    "set-media": cmd_set_media,
    "import": cmd_import,
    "clear": cmd_clear,
    "enable": cmd_enable,
    "disable": cmd_enable,
    "flag": cmd_flag,
    "resolution": cmd_resolution,
    "refresh": cmd_refresh,
    "settings": cmd_settings,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        reporter = QuietReporter()
    else:
        reporter = RichReporter(verbose=args.verbose)

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return 0

    configure_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        config = build_config(args)
        facade = ControlFacade.from_config(config)
        return COMMANDS[args.command](args, facade, reporter)
    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return 130
    except Exception as e:
        reporter.error(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
