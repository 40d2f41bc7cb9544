"""Exceptions raised by the dice engine.

Malformed user input is reported through ``ParseResult`` and
``CounterRollResult`` values rather than exceptions; these are for the
cases that indicate a bug or an impossible evaluation.
"""

from __future__ import annotations


class DiceError(ValueError):
    """Base class for dice engine errors."""


class EvaluationError(DiceError):
    """Raised when a well-formed expression cannot be evaluated (division by zero)."""


class TraceFormatError(DiceError):
    """Raised when a trace string does not contain a decodable 1d20 roll."""
