"""Plain-text replies shown to the person who asked for a roll."""

from __future__ import annotations

from dicework.counters import CounterRollResult, RollError
from dicework.evaluator import RollResult
from dicework.parser import ParseResult

_CONTEXT_CHARS = 12


def syntax_error_reply(text: str, result: ParseResult) -> str:
    """Explain a parse failure, quoting the input from where it went wrong."""
    if result.offset >= len(text):
        where = "at the end of the input"
    else:
        snippet = text[result.offset : result.offset + _CONTEXT_CHARS]
        where = f"at position {result.offset} ('{snippet}')"
    return f"Could not read '{text}' {where}: {result.error}"


def roll_reply(result: RollResult) -> str:
    return f"{result.trace} = {result.value}"


def counter_roll_reply(result: CounterRollResult) -> str:
    if result.error is not RollError.success:
        reply = f"Cannot roll {result.counter_name}: {result.error_message}"
        if result.trace:
            reply += f" ({result.trace})"
        return reply

    reply = f"{result.display_name}: {result.trace} = {result.roll}"
    if result.success is None:
        return reply
    verdict = "Success" if result.success else "Failure"
    return f"{reply} vs {result.target}: {verdict}!"
