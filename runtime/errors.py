from __future__ import annotations

from typing import Optional


class ShellError(Exception):
    """Base class for diagnostics a built-in reports instead of output."""


class UsageError(ShellError):
    """Missing or malformed arguments.

    With no message the dispatcher prints the command's registered usage.
    """

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "")
        self.message = message


class NotFoundError(ShellError):
    """A named alias, bookmark or path does not exist."""


class ShellExit(Exception):
    """Raised by exit/quit to leave the read-eval-print loop."""


def describe_os_error(exc: OSError) -> str:
    text = exc.strerror or str(exc)
    if exc.filename is not None:
        text = f"{text}: {exc.filename}"
    return text
