"""Logging package with Rich-based terminal reporting."""

from .rich_logger import RichReporter, QuietReporter, configure_logging

__all__ = ["RichReporter", "QuietReporter", "configure_logging"]
