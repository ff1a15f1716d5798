"""
Recursive-descent evaluator for the ``calc`` command.

Grammar::

    expression := term (('+' | '-') term)*
    term       := number (('*' | '/') number)*
    number     := ['+' | '-'] ( '(' expression ')' | float-literal )

A float-literal is read the way C ``strtod`` reads one: decimal with an
optional exponent (``2.5e3``), hexadecimal with an optional binary exponent
(``0x10``, ``0x1.8p1``), or ``inf``/``infinity``/``nan``, case-insensitively.

Degenerate input never raises:

- division by zero yields ``inf``, ``-inf`` or ``nan`` as IEEE arithmetic would;
- where a literal was expected but none is found the value is ``0`` and the
  cursor stays put. The surrounding loops only continue after consuming an
  operator, so evaluation stops at the first unparsable character and the
  remainder of the text is ignored.
"""
from __future__ import annotations

import math
import re

_HEX_RE = re.compile(r"[+-]?0x(?:[0-9a-f]+\.?[0-9a-f]*|\.[0-9a-f]+)(?:p[+-]?\d+)?", re.IGNORECASE)
_FLOAT_RE = re.compile(
    r"[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)", re.IGNORECASE
)


def _divide(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


class ExpressionEvaluator:
    """Evaluates one expression; the cursor is private to the instance."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def evaluate(self) -> float:
        self.pos = 0
        return self._expression()

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _expression(self) -> float:
        value = self._term()
        while True:
            self._skip_ws()
            op = self._peek()
            if op == "+":
                self.pos += 1
                value += self._term()
            elif op == "-":
                self.pos += 1
                value -= self._term()
            else:
                return value

    def _term(self) -> float:
        value = self._number()
        while True:
            self._skip_ws()
            op = self._peek()
            if op == "*":
                self.pos += 1
                value *= self._number()
            elif op == "/":
                self.pos += 1
                value = _divide(value, self._number())
            else:
                return value

    def _number(self) -> float:
        self._skip_ws()
        sign = 1.0
        if self._peek() == "+":
            self.pos += 1
        elif self._peek() == "-":
            sign = -1.0
            self.pos += 1
        self._skip_ws()
        if self._peek() == "(":
            self.pos += 1
            value = self._expression()
            if self._peek() == ")":
                self.pos += 1
            return sign * value
        m = _HEX_RE.match(self.text, self.pos)
        if m:
            self.pos = m.end()
            return sign * float.fromhex(m.group(0))
        m = _FLOAT_RE.match(self.text, self.pos)
        if not m:
            return 0.0
        self.pos = m.end()
        return sign * float(m.group(0))


def evaluate(text: str) -> float:
    return ExpressionEvaluator(text).evaluate()


def format_number(value: float) -> str:
    """Integral results print without a fractional part."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)
