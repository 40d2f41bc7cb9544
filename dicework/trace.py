"""Trace ("working") text: the encoder used by the evaluator and its decoder.

A trace is shown to users and later re-read to find the natural d20 face
for critical hit rules, so both directions are built from the tokens below.

Formats
-------
  plain roll       "{count}d{sides} 🎲 {value}"
  rerolled roll    "{count}d{sides} 🎲 {kept} [~~{discarded}~~ + ... + {kept}]"
  binary operation "{left} {op} {right}"
  group            "({inner})"
  labelled literal "{value} ({label})"
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from dicework.errors import TraceFormatError

# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

DICE_EMOJI = "🎲"
STRIKE = "~~"
ATTEMPT_SEPARATOR = " + "
ATTEMPTS_OPEN = "["
ATTEMPTS_CLOSE = "]"

_NUMBER = r"-?\d+"

# The d20 segment: "1d20 🎲 N", optionally followed by " [~~a~~ + ... + N]".
# The lookbehind stops "11d20" from matching as "1d20".
_D20_ANCHOR_RE = re.compile(rf"(?<!\d)1d20 {DICE_EMOJI} ")
_D20_SEGMENT_RE = re.compile(
    rf"(?P<value>{_NUMBER})"
    rf"(?P<attempts> {re.escape(ATTEMPTS_OPEN)}"
    rf"(?:{STRIKE}{_NUMBER}{STRIKE}{re.escape(ATTEMPT_SEPARATOR)})*"
    rf"(?P<kept>{_NUMBER}){re.escape(ATTEMPTS_CLOSE)})?"
)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def strike(value: int) -> str:
    return f"{STRIKE}{value}{STRIKE}"


def format_literal(value: int, label: str | None = None) -> str:
    if label:
        return f"{value} ({label})"
    return f"{value}"


def format_binary(left: str, op: str, right: str) -> str:
    return f"{left} {op} {right}"


def format_group(inner: str) -> str:
    return f"({inner})"


def format_roll(count: int, sides: int, attempts: Sequence[int], kept_index: int) -> str:
    """Render one dice term.

    ``attempts`` holds the sum of every attempt in roll order. The kept
    attempt is written after the emoji and again last in the bracket, with
    the discarded attempts struck through ahead of it in roll order.
    """
    kept = attempts[kept_index]
    head = f"{count}d{sides} {DICE_EMOJI} {kept}"
    if len(attempts) == 1:
        return head

    parts = [strike(a) for i, a in enumerate(attempts) if i != kept_index]
    parts.append(f"{kept}")
    return f"{head} {ATTEMPTS_OPEN}{ATTEMPT_SEPARATOR.join(parts)}{ATTEMPTS_CLOSE}"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def extract_natural_d20_roll(trace: str | None) -> int:
    """Return the kept face of the first 1d20 term in ``trace``.

    Any arithmetic after the term is ignored, as are later d20 terms.

    Raises:
        TraceFormatError: If the trace is empty, has no 1d20 term, or the
            term after the emoji cannot be read.
    """
    if not trace:
        raise TraceFormatError("Cannot read a natural d20 roll from an empty trace")

    anchor = _D20_ANCHOR_RE.search(trace)
    if anchor is None:
        raise TraceFormatError(f"Trace {trace!r} does not contain a roll of 1d20")

    segment = _D20_SEGMENT_RE.match(trace, anchor.end())
    if segment is None:
        raise TraceFormatError(f"Trace {trace!r} has a malformed 1d20 roll")

    value = int(segment.group("value"))
    if segment.group("attempts") is None:
        if trace.startswith(f" {ATTEMPTS_OPEN}", segment.end()):
            raise TraceFormatError(f"Trace {trace!r} has a malformed reroll list")
        return value

    kept = int(segment.group("kept"))
    if kept != value:
        raise TraceFormatError(
            f"Trace {trace!r} keeps {kept} in its reroll list but reports {value}"
        )
    return kept
