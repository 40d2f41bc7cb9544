"""Evaluate expression trees against an injected random source.

Evaluation is synchronous and side-effect free apart from the draws it takes
from ``random``. Binary operations always evaluate their left operand before
their right one, so for a fixed draw sequence the value and the trace are
identical on every run.
"""

from __future__ import annotations

import logging
import random as _random
from dataclasses import dataclass
from typing import Protocol

from dicework import trace
from dicework.errors import EvaluationError
from dicework.expressions import (
    BinaryOperation,
    DiceRoll,
    Expression,
    IntegerLiteral,
    Parenthesised,
)

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with ``random.Random.randint`` semantics (inclusive bounds)."""

    def randint(self, a: int, b: int) -> int: ...


def default_random() -> RandomSource:
    """Return a fresh OS-seeded random source for production rolls."""
    return _random.SystemRandom()


@dataclass(frozen=True)
class RollResult:
    value: int
    trace: str


def evaluate(expression: Expression, random: RandomSource) -> RollResult:
    """Evaluate ``expression``, drawing dice from ``random``.

    Raises:
        EvaluationError: If the expression divides by zero.
    """
    value, working = _evaluate(expression, random)
    logger.debug("Evaluated %s = %d (%s)", expression, value, working)
    return RollResult(value=value, trace=working)


def _evaluate(expression: Expression, random: RandomSource) -> tuple[int, str]:
    if isinstance(expression, IntegerLiteral):
        return expression.value, trace.format_literal(expression.value, expression.label)

    if isinstance(expression, DiceRoll):
        attempts, kept_index = resolve_rerolls(expression, random)
        working = trace.format_roll(expression.count, expression.sides, attempts, kept_index)
        return attempts[kept_index], working

    if isinstance(expression, Parenthesised):
        value, inner = _evaluate(expression.inner, random)
        return value, trace.format_group(inner)

    if isinstance(expression, BinaryOperation):
        left, left_working = _evaluate(expression.left, random)
        right, right_working = _evaluate(expression.right, random)
        value = _apply(expression.op, left, right)
        return value, trace.format_binary(left_working, expression.op, right_working)

    raise TypeError(f"Cannot evaluate {type(expression).__name__}")


def resolve_rerolls(roll: DiceRoll, random: RandomSource) -> tuple[list[int], int]:
    """Roll the whole dice group once per attempt and choose the one to keep.

    Returns the attempt sums in roll order and the index of the kept attempt.
    With a non-negative reroll count the last attempt is kept whatever its
    value; with a negative count the lowest is kept, earliest first on ties.
    """
    attempt_count = abs(roll.reroll_attempts) + 1
    attempts = [
        sum(random.randint(1, roll.sides) for _ in range(roll.count))
        for _ in range(attempt_count)
    ]

    if roll.reroll_attempts >= 0:
        return attempts, len(attempts) - 1
    return attempts, min(range(len(attempts)), key=attempts.__getitem__)


def _apply(op: str, left: int, right: int) -> int:
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            raise EvaluationError("Division by zero")
        # Truncate toward zero, not toward negative infinity.
        quotient = abs(left) // abs(right)
        return quotient if (left < 0) == (right < 0) else -quotient
    raise EvaluationError(f"Unrecognised binary operator: {op!r}")
