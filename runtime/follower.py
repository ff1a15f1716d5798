"""
Polling follower behind ``tail -f``.

On attach the last ``replay_bytes`` of the file are replayed (catch-up),
then the file is polled every ``poll_interval`` seconds for appended data
(follow). Only whole lines are emitted; a trailing fragment without a
newline is held until the rest of the line arrives. Truncating or
rewriting the file while it is followed is not handled.
"""
from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Optional

logger = logging.getLogger("mintterm.follower")

CATCH_UP = "catch-up"
FOLLOW = "follow"
STOPPED = "stopped"


class FileFollower:
    def __init__(
        self,
        path: str,
        emit: Callable[[str], None],
        *,
        replay_bytes: int = 4096,
        poll_interval: float = 0.2,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        self.path = path
        self.emit = emit
        self.replay_bytes = replay_bytes
        self.poll_interval = poll_interval
        self.cancel = cancel or threading.Event()
        self.state = STOPPED
        self.offset = 0
        self._pending = b""

    def stop(self) -> None:
        self.cancel.set()

    def run(self) -> None:
        """Follow until cancelled. Raises OSError if the file cannot be opened."""
        with open(self.path, "rb") as fh:
            end = fh.seek(0, os.SEEK_END)
            self.offset = fh.seek(max(0, end - self.replay_bytes))
            logger.debug("attached to %s at offset %d (size %d)", self.path, self.offset, end)

            try:
                self.state = CATCH_UP
                self._drain(fh)

                self.state = FOLLOW
                while not self.cancel.is_set():
                    if not self._drain(fh):
                        self.cancel.wait(self.poll_interval)
            finally:
                self.state = STOPPED
                logger.debug("stopped following %s at offset %d", self.path, self.offset)

    def _drain(self, fh) -> int:
        """Emit every complete line available now; return how many were emitted."""
        emitted = 0
        while not self.cancel.is_set():
            chunk = fh.readline()
            if not chunk:
                break
            self.offset += len(chunk)
            self._pending += chunk
            if not self._pending.endswith(b"\n"):
                continue
            line = self._pending.rstrip(b"\n").rstrip(b"\r")
            self._pending = b""
            self.emit(line.decode("utf-8", errors="replace"))
            emitted += 1
        return emitted
