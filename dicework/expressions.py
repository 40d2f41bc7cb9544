"""Immutable expression trees for dice notation.

Trees are built by the parser or assembled directly by counters, then handed
to ``dicework.evaluator.evaluate``. Nodes hold no random state, so one tree
can be evaluated any number of times.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from dicework.config import settings

OPERATORS: tuple[str, ...] = ("+", "-", "*", "/")


@dataclass(frozen=True)
class IntegerLiteral:
    """A constant term. ``label`` names where the value came from, e.g. "Shoot"."""

    value: int
    label: str | None = None

    def __str__(self) -> str:
        return f"{self.value}"


@dataclass(frozen=True)
class BinaryOperation:
    left: Expression
    op: str
    right: Expression

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unrecognised binary operator: {self.op!r}")

    def __str__(self) -> str:
        return f"{self.left} {self.op} {self.right}"


@dataclass(frozen=True)
class DiceRoll:
    """``count`` dice of ``sides`` faces, summed.

    ``reroll_attempts`` > 0 rolls the whole group that many extra times and
    keeps the last attempt. A negative value rolls ``abs(reroll_attempts)``
    extra times and keeps the lowest attempt.
    """

    sides: int
    count: int = 1
    reroll_attempts: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.count <= settings.max_dice_count:
            raise ValueError(f"Invalid dice count: {self.count}")
        if not 1 <= self.sides <= settings.max_dice_sides:
            raise ValueError(f"Invalid dice size: {self.sides}")
        if abs(self.reroll_attempts) > settings.max_rerolls:
            raise ValueError(
                f"Invalid reroll count: {self.reroll_attempts} (max {settings.max_rerolls})"
            )

    def __str__(self) -> str:
        return f"{self.count}d{self.sides}"


@dataclass(frozen=True)
class Parenthesised:
    """Explicit grouping from the source text, kept so the trace shows it."""

    inner: Expression

    def __str__(self) -> str:
        return f"({self.inner})"


Expression = Union[IntegerLiteral, BinaryOperation, DiceRoll, Parenthesised]


def add_terms(first: Expression, *rest: Expression | None) -> Expression:
    """Fold terms into a left-leaning chain of additions, skipping ``None``."""
    expression = first
    for term in rest:
        if term is not None:
            expression = BinaryOperation(expression, "+", term)
    return expression


def with_rerolls(expression: Expression, rerolls: int) -> Expression:
    """Return ``expression`` with ``rerolls`` set on its first dice term.

    "First" is in evaluation order, so in ``1d8 + 1d6`` the d8 is rerolled.
    Expressions without dice come back unchanged.
    """
    return _with_rerolls(expression, rerolls)[0]


def _with_rerolls(expression: Expression, rerolls: int) -> tuple[Expression, bool]:
    if isinstance(expression, DiceRoll):
        return replace(expression, reroll_attempts=rerolls), True
    if isinstance(expression, Parenthesised):
        inner, found = _with_rerolls(expression.inner, rerolls)
        return Parenthesised(inner), found
    if isinstance(expression, BinaryOperation):
        left, found = _with_rerolls(expression.left, rerolls)
        if found:
            return replace(expression, left=left), True
        right, found = _with_rerolls(expression.right, rerolls)
        return replace(expression, right=right), found
    return expression, False
