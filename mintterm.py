#!/usr/bin/env python3
"""
mintterm: a tiny Mint-flavoured interactive shell.

Reads one line at a time, expands aliases, runs the matching built-in and
hands anything else to the host shell. Aliases, bookmarks and history last
for the session only.

Type ``help`` at the prompt for the list of built-ins.
"""
from __future__ import annotations

import argparse
import logging
import os
import platform
import socket
import sys
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from commands import build_registry
from config import Config, get_config_manager
from runtime.dispatch import Dispatcher
from runtime.session import SessionState
from utils import runner
from utils.colors import CODES, colorize, enable_ansi_on_windows, supports_color

logger = logging.getLogger("mintterm")

BANNER = "Tiny Minty Terminal"


def current_user(default: str = "user") -> str:
    return os.environ.get("USER") or os.environ.get("USERNAME") or default


def render_prompt(config: Config, color: bool) -> str:
    try:
        cwd = os.getcwd()
    except OSError:
        # cwd was removed underneath us
        return colorize("green", "> ", color)
    user = current_user(config.prompt.default_user)
    host = socket.gethostname()
    prompt = (
        colorize("mint", f"{user}@{host}", color)
        + ":"
        + colorize("cyan", cwd, color)
        + " "
    )
    if color:
        prompt += CODES["bold"] + colorize("green", "> ") + CODES["reset"]
    else:
        prompt += "> "
    return prompt


def _line_reader(stdin: Optional[TextIO], out: TextIO) -> Callable[[str], str]:
    """Return a reader that raises EOFError at end of input, like input()."""
    if stdin is None:
        return input

    def read(prompt: str) -> str:
        out.write(prompt)
        out.flush()
        line = stdin.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")

    return read


def repl(
    dispatcher: Dispatcher,
    config: Config,
    *,
    stdin: Optional[TextIO] = None,
    out: Optional[TextIO] = None,
    color: bool = False,
) -> int:
    out = out or sys.stdout
    read = _line_reader(stdin, out)
    if config.prompt.banner:
        out.write(f"{colorize('mint', BANNER, color)} ({platform.system() or os.name}) - type 'help'\n")

    while True:
        try:
            line = read(render_prompt(config, color))
        except EOFError:
            out.write("\n")
            break
        except KeyboardInterrupt:
            # discard the partial line
            out.write("\n")
            continue
        if not line:
            continue
        try:
            keep_running = dispatcher.execute(line)
        except KeyboardInterrupt:
            # landed outside a handler (alias pass, history record)
            out.write("\n")
            continue
        if not keep_running:
            break

    out.write(colorize("gray", "Bye", color) + "\n")
    out.flush()
    return 0


def build_dispatcher(
    config: Config,
    *,
    session: Optional[SessionState] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
    color: bool = False,
) -> Dispatcher:
    return Dispatcher(
        session or SessionState(),
        build_registry(),
        config,
        out=out,
        err=err,
        color=color,
    )


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog="mintterm", description="Tiny Mint-inspired interactive shell")
    ap.add_argument("--config", type=Path, default=None, help="path to a JSON config file")
    ap.add_argument("--no-color", action="store_true", help="disable ANSI colors")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    config = get_config_manager(args.config).config

    level = logging.DEBUG if args.verbose else getattr(logging, config.log.level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=config.log.format)
    runner.configure(config.runner.command_log, config.runner.shell)

    enable_ansi_on_windows()
    color = config.prompt.color and not args.no_color and supports_color(sys.stdout)
    dispatcher = build_dispatcher(config, color=color)
    logger.debug("registered %d built-ins", len(dispatcher.registry))
    return repl(dispatcher, config, color=color)


if __name__ == "__main__":
    sys.exit(main())
