"""Recursive-descent parser for dice notation.

Grammar::

    expression := term (('+' | '-') term)*
    term       := factor (('*' | '/') factor)*
    factor     := integer | dice | '(' expression ')'
    dice       := [count] ('d' | 'D') sides
    integer    := ['+' | '-'] digits

Whitespace between tokens is ignored. ``parse`` stops at the first input it
cannot use and reports how far it got, because dice expressions may sit
inside larger free text; ``parse_complete`` treats leftover input as an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dicework.config import settings
from dicework.expressions import (
    BinaryOperation,
    DiceRoll,
    Expression,
    IntegerLiteral,
    Parenthesised,
)

logger = logging.getLogger(__name__)

_DICE_CHARS = ("d", "D")

# Literals must fit a signed 32-bit integer.
MAX_INTEGER = 2**31 - 1
_MAX_INTEGER_DIGITS = len(str(MAX_INTEGER))


@dataclass(frozen=True)
class ParseResult:
    """The outcome of parsing.

    ``offset`` is where parsing stopped on success, or the position of the
    problem on failure. A non-empty ``error`` means ``expression`` is None
    and must not be evaluated.
    """

    expression: Expression | None
    error: str = ""
    offset: int = 0

    @property
    def ok(self) -> bool:
        return not self.error


class _ParseFailure(Exception):
    def __init__(self, offset: int, message: str) -> None:
        super().__init__(message)
        self.offset = offset
        self.message = message


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.depth = 0

    # -- helpers ------------------------------------------------------------

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _peek(self) -> str:
        self._skip_whitespace()
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _describe_next(self) -> str:
        ch = self._peek()
        return f"'{ch}'" if ch else "end of input"

    def _enter(self) -> None:
        self.depth += 1
        if self.depth > settings.max_parse_depth:
            raise _ParseFailure(self.pos, "Input is too large.")

    def _digits(self) -> tuple[int, int] | None:
        """Consume a run of ASCII digits; return (value, start offset)."""
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in "0123456789":
            self.pos += 1
        if self.pos == start:
            return None
        raw = self.text[start : self.pos]
        # int() only ever sees runs of at most ten digits.
        if len(raw) > _MAX_INTEGER_DIGITS or int(raw) > MAX_INTEGER:
            shown = raw if len(raw) <= 20 else raw[:20] + "..."
            raise _ParseFailure(start, f"Expected an integer, got '{shown}'")
        return int(raw), start

    # -- grammar ------------------------------------------------------------

    # Every nested group and every operator counts towards the depth limit,
    # since each one adds a level to the tree the evaluator recurses through.

    def expression(self) -> Expression:
        entry_depth = self.depth
        self._enter()
        node = self.term()
        while self._peek() in ("+", "-"):
            self._enter()
            op = self.text[self.pos]
            self.pos += 1
            node = BinaryOperation(node, op, self.term())
        self.depth = entry_depth
        return node

    def term(self) -> Expression:
        entry_depth = self.depth
        node = self.factor()
        while self._peek() in ("*", "/"):
            self._enter()
            op = self.text[self.pos]
            self.pos += 1
            node = BinaryOperation(node, op, self.factor())
        self.depth = entry_depth
        return node

    def factor(self) -> Expression:
        ch = self._peek()
        if not ch:
            raise _ParseFailure(self.pos, "Expected a number, dice roll or '(', got end of input")

        if ch == "(":
            self.pos += 1
            inner = self.expression()
            if self._peek() != ")":
                raise _ParseFailure(self.pos, f"Expected ')', got {self._describe_next()}")
            self.pos += 1
            return Parenthesised(inner)

        if ch in _DICE_CHARS:
            return self._dice(count=1, count_offset=self.pos)

        if ch in ("+", "-"):
            return self._signed_integer()

        digits = self._digits()
        if digits is None:
            raise _ParseFailure(
                self.pos, f"Expected a number, dice roll or '(', got {self._describe_next()}"
            )
        value, start = digits
        if self.pos < len(self.text) and self.text[self.pos] in _DICE_CHARS:
            return self._dice(count=value, count_offset=start)
        return IntegerLiteral(value)

    def _signed_integer(self) -> IntegerLiteral:
        sign_offset = self.pos
        sign = -1 if self.text[self.pos] == "-" else 1
        self.pos += 1
        digits = self._digits()
        if digits is None:
            raise _ParseFailure(sign_offset, f"Expected a digit after '{self.text[sign_offset]}'")
        return IntegerLiteral(sign * digits[0])

    def _dice(self, count: int, count_offset: int) -> DiceRoll:
        if not 1 <= count <= settings.max_dice_count:
            raise _ParseFailure(
                count_offset,
                f"Invalid dice count: {count} (must be 1 to {settings.max_dice_count})",
            )

        self.pos += 1  # the 'd'
        sides_offset = self.pos
        digits = self._digits()
        if digits is None:
            found = f"'{self.text[self.pos]}'" if self.pos < len(self.text) else "end of input"
            raise _ParseFailure(sides_offset, f"Expected dice size after 'd', got {found}")

        sides = digits[0]
        if not 1 <= sides <= settings.max_dice_sides:
            raise _ParseFailure(
                sides_offset,
                f"Invalid dice size: {sides} (must be 1 to {settings.max_dice_sides})",
            )
        return DiceRoll(sides=sides, count=count)


def parse(text: str) -> ParseResult:
    """Parse as much of ``text`` as forms an expression.

    Never raises for malformed input. Check ``result.offset < len(text)`` to
    detect trailing text the parser did not consume.
    """
    parser = _Parser(text)
    try:
        expression = parser.expression()
    except _ParseFailure as exc:
        logger.debug("Rejected %r at offset %d: %s", text, exc.offset, exc.message)
        return ParseResult(expression=None, error=exc.message, offset=exc.offset)

    parser._skip_whitespace()
    return ParseResult(expression=expression, offset=parser.pos)


def parse_complete(text: str) -> ParseResult:
    """Parse ``text`` and fail unless all of it was consumed."""
    result = parse(text)
    if result.ok and result.offset < len(text):
        return ParseResult(
            expression=None,
            error="Unrecognised input at end of string",
            offset=result.offset,
        )
    return result
