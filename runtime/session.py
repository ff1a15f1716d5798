"""
Session-local state for the interpreter: history, aliases and bookmarks.

All three tables live in memory for the lifetime of one shell process and
are owned by the interpreter thread; nothing here is persisted.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from utils.tokenizer import rest_of_line, split_args


class HistoryLog:
    """Append-only list of dispatched lines (post alias substitution)."""

    def __init__(self) -> None:
        self._entries: List[str] = []
        # bumped on every clear so callers can tell a clear happened
        self.generation = 0

    def append(self, line: str) -> None:
        self._entries.append(line)

    def clear(self) -> None:
        self._entries.clear()
        self.generation += 1

    def numbered(self) -> List[Tuple[int, str]]:
        return list(enumerate(self._entries, 1))

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


class AliasTable:
    def __init__(self) -> None:
        self._aliases: Dict[str, str] = {}

    def define(self, name: str, replacement: str) -> None:
        self._aliases[name] = replacement

    def remove(self, name: str) -> bool:
        return self._aliases.pop(name, None) is not None

    def get(self, name: str) -> Optional[str]:
        return self._aliases.get(name)

    def items(self) -> List[Tuple[str, str]]:
        return sorted(self._aliases.items())

    def __contains__(self, name: object) -> bool:
        return name in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    def substitute(self, line: str) -> str:
        """Expand an alias in the command position, once.

        The replacement is not itself looked up again, so an alias naming
        another alias is dispatched literally.
        """
        args = split_args(line)
        if not args:
            return line
        replacement = self._aliases.get(args[0])
        if replacement is None:
            return line
        rest = rest_of_line(line) if len(args) > 1 else ""
        return replacement + (" " + rest if rest else "")


class BookmarkTable:
    def __init__(self) -> None:
        self._marks: Dict[str, str] = {}

    def add(self, name: str, path: str) -> str:
        # resolved now, validated only when used
        target = os.path.abspath(path)
        self._marks[name] = target
        return target

    def remove(self, name: str) -> bool:
        return self._marks.pop(name, None) is not None

    def resolve(self, name: str) -> Optional[str]:
        return self._marks.get(name)

    def items(self) -> List[Tuple[str, str]]:
        return sorted(self._marks.items())

    def __len__(self) -> int:
        return len(self._marks)


@dataclass
class SessionState:
    history: HistoryLog = field(default_factory=HistoryLog)
    aliases: AliasTable = field(default_factory=AliasTable)
    bookmarks: BookmarkTable = field(default_factory=BookmarkTable)
