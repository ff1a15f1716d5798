from __future__ import annotations

import os
from typing import TextIO

# Mint-inspired palette
CODES = {
    "reset": "\x1b[0m",
    "bold": "\x1b[1m",
    "dim": "\x1b[2m",
    "mint": "\x1b[38;5;121m",
    "green": "\x1b[92m",
    "cyan": "\x1b[36m",
    "blue": "\x1b[34m",
    "magenta": "\x1b[35m",
    "orange": "\x1b[38;5;214m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "gray": "\x1b[90m",
}


def colorize(color: str | None, text: str, enabled: bool = True) -> str:
    if not enabled or not color:
        return text
    return CODES[color] + text + CODES["reset"]


def supports_color(stream: TextIO) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def enable_ansi_on_windows() -> None:
    if os.name != "nt":
        return
    # an empty command makes cmd.exe switch the console into VT mode
    os.system("")
