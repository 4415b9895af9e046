"""Storage backends for the shared directory."""
from __future__ import annotations

from ..core.config import BackendKind, ControlConfig
from ..core.protocols import StorageBackend
from .direct import DirectBackend
from .shell import PrivilegedShellBackend, quote_path


def create_backend(config: ControlConfig) -> StorageBackend:
    """Create the storage backend named by the configuration.

    The choice itself belongs to whoever probes permissions at startup;
    this only maps the chosen kind to an instance.
    """
    kind = BackendKind(config.backend)
    if kind is BackendKind.direct:
        return DirectBackend()
    if kind is BackendKind.privileged_shell:
        return PrivilegedShellBackend(
            runner=config.shell_command,
            timeout=config.shell_timeout,
        )
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    "create_backend",
    "DirectBackend",
    "PrivilegedShellBackend",
    "quote_path",
]
