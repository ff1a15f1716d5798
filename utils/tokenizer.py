from __future__ import annotations

import re
from typing import List

QUOTES = ("\"", "'")

_REST_RE = re.compile(r"^\s*\S+\s+(.*)$", re.DOTALL)


def split_args(line: str) -> List[str]:
    """Split a command line into arguments.

    Words are separated by runs of whitespace. A word opening with a quote
    that it does not also close keeps absorbing the following words (joined
    by single spaces) until one ends with the same quote character. A word
    bounded by matching quotes loses exactly one quote on each side.
    An unterminated quote simply runs to the end of the line.
    """
    words = line.split()
    out: List[str] = []
    i = 0
    while i < len(words):
        token = words[i]
        i += 1
        quote = token[0]
        if quote in QUOTES and token[-1] != quote:
            while i < len(words):
                nxt = words[i]
                i += 1
                token += " " + nxt
                if nxt[-1] == quote:
                    break
        if len(token) >= 2 and token[0] in QUOTES and token[-1] == token[0]:
            token = token[1:-1]
        out.append(token)
    return out


def rest_of_line(line: str) -> str:
    """Return the raw text after the first word and the whitespace following it."""
    m = _REST_RE.match(line)
    return m.group(1) if m else ""


def strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] in QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text
