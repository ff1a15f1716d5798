"""
mintterm: built-in command registry.

Each module in this package exposes a ``register(registry)`` function that
adds its handlers. A handler is a plain function ``handler(ctx, args)``
where ``args[0]`` is the command name; it writes through ``ctx`` and
reports problems by raising from :mod:`runtime.errors` (or letting an
``OSError`` escape).

A command may declare flag *variants*: when the second word of a line
matches a variant key, the variant handler runs instead of the main one
(``tail -f`` is dispatched this way).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("mintterm.commands")

Handler = Callable[..., None]

# Every name the dispatcher treats as a built-in, in help order
BUILTIN_COMMANDS: Tuple[str, ...] = (
    "help", "exit", "quit", "ls", "pwd", "cd", "cat", "edit", "mkdir", "rm",
    "rmdir", "touch", "cp", "mv", "find", "tree", "ps", "df", "whoami", "date",
    "clear", "echo", "grep", "wc", "head", "tail", "chmod", "ln", "du", "sort",
    "uniq", "history", "which", "open", "env", "setenv", "stat", "count",
    "alias", "unalias", "aliases", "uptime", "ping", "hash", "compress",
    "extract", "calc", "random", "bookmark", "bookmarks", "unbookmark", "goto",
    "replace", "top", "net", "notify",
)


@dataclass
class Command:
    name: str
    handler: Handler
    usage: str = ""
    summary: str = ""
    variants: Dict[str, Handler] = field(default_factory=dict)
    variant_help: List[Tuple[str, str]] = field(default_factory=list)


class CommandRegistry:
    """Name -> Command lookup table, built once at startup."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}

    def register(
        self,
        name: str,
        handler: Handler,
        usage: str = "",
        summary: str = "",
    ) -> Command:
        if name in self._commands:
            logger.debug("Command %s already registered, replacing", name)
        command = Command(name=name, handler=handler, usage=usage or name, summary=summary)
        self._commands[name] = command
        return command

    def add_variant(
        self, name: str, flag: str, handler: Handler, usage: str = "", summary: str = ""
    ) -> None:
        command = self._commands[name]
        command.variants[flag] = handler
        if usage:
            command.variant_help.append((usage, summary))

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def names(self) -> List[str]:
        return list(self._commands.keys())

    def commands(self) -> List[Command]:
        order = {n: i for i, n in enumerate(BUILTIN_COMMANDS)}
        return sorted(self._commands.values(), key=lambda c: order.get(c.name, len(order)))

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)


def build_registry() -> CommandRegistry:
    from commands import files, session, system, text

    registry = CommandRegistry()
    for module in (session, files, text, system):
        module.register(registry)
    missing = [n for n in BUILTIN_COMMANDS if n not in registry]
    if missing:
        logger.warning("Built-in commands without a handler: %s", ", ".join(missing))
    return registry
