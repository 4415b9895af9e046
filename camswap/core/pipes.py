"""Feeding child process stdin without blocking the caller."""
from __future__ import annotations

import shutil
import subprocess
import threading
from typing import BinaryIO, Optional


class StdinFeeder:
    """Copies a binary stream into a child's stdin on a background thread.

    The pipe is detached from the Popen object, so ``communicate()`` only
    drains output and its timeout bounds the whole exchange even when the
    child never reads its input.

    Usage:
        process = subprocess.Popen(cmd, stdin=subprocess.PIPE, stdout=subprocess.PIPE)
        feeder = StdinFeeder(process, stream).start()
        out, _ = process.communicate(timeout=5)
        feeder.join()
    """

    def __init__(self, process: subprocess.Popen, source: BinaryIO):
        self._pipe = process.stdin
        process.stdin = None
        self._source = source
        self.error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name="stdin-feeder", daemon=True)

    def start(self) -> "StdinFeeder":
        self._thread.start()
        return self

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the copy to finish. Returns False if it is still running."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            shutil.copyfileobj(self._source, self._pipe)
        except BrokenPipeError:
            pass  # child stopped reading; its exit status tells the story
        except (OSError, ValueError) as e:
            self.error = e
        finally:
            try:
                self._pipe.close()
            except OSError:
                pass  # unflushed bytes to a closed reader
