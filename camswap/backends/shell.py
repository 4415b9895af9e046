"""Storage backend that runs each operation through an elevated shell.

Used when the controller cannot write the shared directory itself. Every
logical operation becomes exactly one invocation of the runner, e.g.::

    su -c "cp '/sdcard/Movies/clip.mp4' '/sdcard/DCIM/Camera1/virtual.mp4'"

Output is captured with stderr folded into stdout. Exit status 0 means
success; any other status, or failing to launch the runner at all, is a
failure whose diagnostic is the captured output.
"""
from __future__ import annotations

import io
import logging
import shlex
import subprocess
from pathlib import Path
from typing import BinaryIO, Optional, Sequence

from ..core.models import CommandResult, ErrorKind
from ..core.pipes import StdinFeeder


logger = logging.getLogger(__name__)

DEFAULT_RUNNER = ("su", "-c")

_DENIAL_MARKERS = ("permission denied", "not allowed", "operation not permitted")

# Seconds to wait for the stdin copy once the helper has exited or been killed.
FEEDER_GRACE = 1.0


def quote_path(path: Path) -> str:
    """Single-quote a path for sh, escaping embedded single quotes."""
    return shlex.quote(str(path))


class PrivilegedShellBackend:
    """File operations issued as elevated shell commands.

    There is no cancellation once a command is launched. Without a timeout
    a hung runner blocks the caller indefinitely.
    """

    def __init__(
        self,
        runner: Sequence[str] = DEFAULT_RUNNER,
        timeout: Optional[float] = None,
    ):
        """Initialize the backend.

        Args:
            runner: Command prefix; the shell command is appended as one argument.
            timeout: Seconds before a command is killed and reported failed.
        """
        if not runner:
            raise ValueError("runner must name at least one executable")
        self._runner = tuple(runner)
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "privileged-shell"

    @property
    def runner(self) -> tuple[str, ...]:
        return self._runner

    def run(self, command: str, stdin: Optional[BinaryIO] = None) -> CommandResult:
        """Run one shell command through the elevated runner.

        Args:
            command: Shell command line; paths must already be quoted.
            stdin: Optional binary stream piped to the command.

        Returns:
            CommandResult with the combined output.
        """
        logger.debug("%s: %s", self.name, command)
        try:
            process = subprocess.Popen(
                [*self._runner, command],
                stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            return CommandResult.failed(str(e) or "Unknown error", ErrorKind.ACCESS_DENIED)

        feeder = StdinFeeder(process, stdin).start() if stdin is not None else None
        try:
            raw, _ = process.communicate(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
            if feeder is not None:
                feeder.join(FEEDER_GRACE)
            return CommandResult.failed(
                f"Timed out after {self._timeout}s: {command}",
                ErrorKind.ACCESS_DENIED,
            )

        if feeder is not None:
            feeder.join(FEEDER_GRACE)
            if feeder.error is not None:
                return CommandResult.failed(f"Could not read input: {feeder.error}")

        output = raw.decode("utf-8", errors="replace") if raw else ""
        if process.returncode == 0:
            return CommandResult.ok(output)

        message = output.strip() or f"exit code {process.returncode}: {command}"
        lowered = message.lower()
        kind = (
            ErrorKind.ACCESS_DENIED
            if any(marker in lowered for marker in _DENIAL_MARKERS)
            else ErrorKind.IO_FAILURE
        )
        return CommandResult.failed(message, kind)

    def make_directory(self, path: Path) -> CommandResult:
        return self.run(f"mkdir -p {quote_path(path)}")

    def copy_file(self, source: Path, target: Path) -> CommandResult:
        return self.run(f"cp {quote_path(source)} {quote_path(target)}")

    def write_stream(self, source: BinaryIO, target: Path) -> CommandResult:
        return self.run(f"cat > {quote_path(target)}", stdin=source)

    def write_text(self, path: Path, text: str) -> CommandResult:
        return self.write_stream(io.BytesIO(text.encode("utf-8")), path)

    def read_text(self, path: Path) -> Optional[str]:
        result = self.run(f"cat {quote_path(path)}")
        return result.output if result.success else None

    def touch(self, path: Path) -> CommandResult:
        return self.run(f"touch {quote_path(path)}")

    def remove(self, path: Path) -> CommandResult:
        return self.run(f"rm -f {quote_path(path)}")

    def move(self, source: Path, target: Path) -> CommandResult:
        return self.run(f"mv -f {quote_path(source)} {quote_path(target)}")

    def exists(self, path: Path) -> bool:
        return self.run(f"[ -e {quote_path(path)} ]").success

    def list_directory(self, path: Path) -> list[str]:
        result = self.run(f"ls -A {quote_path(path)}")
        if not result.success:
            return []
        return [line for line in result.output.splitlines() if line]
