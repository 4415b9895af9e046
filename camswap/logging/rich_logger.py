"""Rich-based terminal reporting and logging setup."""
from __future__ import annotations

import logging
import sys
from typing import Any, Mapping

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route library logging through Rich on stderr.

    Args:
        verbose: Show debug records.
        quiet: Only show errors.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


class RichReporter:
    """Reporter using Rich for terminal output."""

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        console: Console | None = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Enable debug output.
            quiet: Suppress all non-essential output.
            console: Console to print to (default: stderr).
        """
        self._console = console or Console(stderr=True)
        self._verbose = verbose
        self._quiet = quiet

    @property
    def console(self) -> Console:
        return self._console

    # --- Logging Methods ---

    def info(self, message: str) -> None:
        """Log an info message."""
        if not self._quiet:
            self._console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        """Log a success message."""
        if not self._quiet:
            self._console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str) -> None:
        """Log an error message."""
        self._console.print(f"[red]✗[/red] {message}", style="red")

    def debug(self, message: str) -> None:
        """Log a debug message (only in verbose mode)."""
        if self._verbose:
            self._console.print(f"[dim]  {message}[/dim]")

    # --- Specialized Output ---

    def print_header(self, title: str) -> None:
        if self._quiet:
            return
        self._console.print(Panel(Text(title, style="bold cyan"), border_style="cyan"))

    def print_status(self, status: Mapping[str, Any]) -> None:
        """Print a facade status snapshot as a table."""
        if self._quiet:
            return

        table = Table(title="Shared Directory", show_header=False)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")

        for key, value in status.items():
            if key == "settings":
                continue
            table.add_row(key.replace("_", " ").title(), _format_value(value))

        self._console.print(table)
        self.print_settings(status.get("settings", {}))

    def print_settings(self, settings: Mapping[str, str]) -> None:
        if self._quiet:
            return
        if not settings:
            self.info("No settings saved")
            return

        table = Table(title="settings.conf", show_header=True, header_style="bold")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in settings.items():
            table.add_row(key, value)
        self._console.print(table)


class QuietReporter:
    """Minimal reporter that only shows warnings and errors."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"ERROR: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        pass

    def print_header(self, title: str) -> None:
        pass

    def print_status(self, status: Mapping[str, Any]) -> None:
        pass

    def print_settings(self, settings: Mapping[str, str]) -> None:
        pass


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "[green]yes[/green]" if value else "[dim]no[/dim]"
    return str(value) if value != "" else "[dim]none[/dim]"
