"""
Dispatch engine: one line in, exactly one action out.

``Dispatcher.execute`` performs the whole per-line pipeline: alias
substitution, tokenization, handler lookup, the uniform error contract
and the history record. Lines whose first word is not a built-in are
handed to the host shell verbatim.
"""
from __future__ import annotations

import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO

from config import Config
from runtime.errors import NotFoundError, ShellError, ShellExit, UsageError, describe_os_error
from runtime.session import SessionState
from utils import runner
from utils.colors import colorize
from utils.tokenizer import split_args

logger = logging.getLogger("mintterm.dispatch")

Fallback = Callable[[str, "CommandContext"], int]


@dataclass
class CommandContext:
    """Everything a handler may touch while it runs."""

    session: SessionState
    config: Config
    line: str
    registry: object
    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)
    color: bool = False
    cancel: threading.Event = field(default_factory=threading.Event)

    def paint(self, color: Optional[str], text: str) -> str:
        return colorize(color, text, self.color)

    def write(self, text: str = "", color: Optional[str] = None, end: str = "\n") -> None:
        self.out.write(self.paint(color, text) + end)
        self.out.flush()

    def error(self, text: str, color: Optional[str] = "red") -> None:
        self.err.write(self.paint(color, text) + "\n")
        self.err.flush()


def run_external(line: str, ctx: CommandContext) -> int:
    """Run ``line`` through the host shell, streaming its stdout."""

    def write(chunk: str) -> None:
        ctx.out.write(chunk)
        ctx.out.flush()

    return runner.stream_cmd(line, write, cancel=ctx.cancel)


class Dispatcher:
    def __init__(
        self,
        session: SessionState,
        registry,
        config: Config,
        *,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
        color: bool = False,
        fallback: Fallback = run_external,
    ) -> None:
        self.session = session
        self.registry = registry
        self.config = config
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.color = color
        self.fallback = fallback
        self.cancel_event = threading.Event()

    def cancel(self) -> None:
        """Ask the running command (follower, streamed process) to stop."""
        self.cancel_event.set()

    def context(self, line: str) -> CommandContext:
        return CommandContext(
            session=self.session,
            config=self.config,
            line=line,
            registry=self.registry,
            out=self.out,
            err=self.err,
            color=self.color,
            cancel=self.cancel_event,
        )

    def execute(self, raw_line: str) -> bool:
        """Run one input line. Returns False when the shell should exit."""
        line = self.session.aliases.substitute(raw_line)
        args = split_args(line)
        if not args:
            return True

        self.cancel_event.clear()
        generation = self.session.history.generation
        keep_running = True
        try:
            self._dispatch(line, args)
        except ShellExit:
            keep_running = False
        finally:
            # a handler that cleared the log takes its own line with it
            if self.session.history.generation == generation:
                self.session.history.append(line)
        return keep_running

    def _dispatch(self, line: str, args: List[str]) -> None:
        ctx = self.context(line)
        name = args[0]
        command = self.registry.get(name)
        if command is None:
            self._run_fallback(line, ctx)
            return

        handler = command.handler
        if len(args) > 1 and args[1] in command.variants:
            handler = command.variants[args[1]]
        logger.debug("dispatch %s -> %s", name, getattr(handler, "__name__", handler))

        try:
            handler(ctx, args)
        except ShellExit:
            raise
        except UsageError as e:
            ctx.error(f"{name}: {e.message or 'usage ' + command.usage}", "yellow")
        except NotFoundError as e:
            ctx.error(f"{name}: {str(e) or 'not found'}", "yellow")
        except ShellError as e:
            ctx.error(f"{name}: {e}")
        except OSError as e:
            ctx.error(f"{name}: {describe_os_error(e)}")
        except KeyboardInterrupt:
            ctx.write()
            logger.info("%s interrupted", name)
        except Exception as e:
            logger.exception("Built-in %s raised an unexpected error", name)
            ctx.error(f"{name}: {e}")

    def _run_fallback(self, line: str, ctx: CommandContext) -> None:
        logger.info("forwarding to host shell: %s", line)
        try:
            rc = self.fallback(line, ctx)
        except OSError as e:
            logger.warning("could not start %r: %s", line, e)
            ctx.error(f"failed to run: {line}")
            return
        except KeyboardInterrupt:
            ctx.write()
            return
        except Exception:
            logger.exception("External command %r failed", line)
            ctx.error(f"failed to run: {line}")
            return
        logger.debug("external command exited with %s", rc)
