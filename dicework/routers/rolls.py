"""Roll routes: free dice expressions and counter rolls for a supplied sheet."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from dicework import replies
from dicework.counters import CharacterSheet, RollError, RollFlags
from dicework.errors import DiceError, EvaluationError, TraceFormatError
from dicework.evaluator import RandomSource, default_random, evaluate
from dicework.expressions import Expression
from dicework.parser import parse_complete
from dicework.schemas import (
    CounterRollRequest,
    CounterRollResponse,
    RollRequest,
    RollResponse,
    SheetModel,
    SummaryRequest,
    SummaryResponse,
)
from dicework.systems.base import CharacterSystem
from dicework.systems.registry import get_system

logger = logging.getLogger(__name__)

router = APIRouter()


def get_random() -> RandomSource:
    """Random source dependency; tests override it with scripted draws."""
    return default_random()


def _parse_or_422(text: str) -> Expression:
    result = parse_complete(text)
    if not result.ok:
        logger.info("Rejected expression %r: %s", text, result.error)
        raise HTTPException(status_code=422, detail=replies.syntax_error_reply(text, result))
    return result.expression


def _system_or_404(name: str) -> CharacterSystem:
    system = get_system(name)
    if system is None:
        raise HTTPException(status_code=404, detail=f"Unknown character system: {name!r}")
    return system


def _sheet(model: SheetModel) -> CharacterSheet:
    return CharacterSheet(
        counters=dict(model.counters),
        properties=dict(model.properties),
        fixes=dict(model.fixes),
    )


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/roll", response_model=RollResponse)
async def roll_expression(
    body: RollRequest, random: RandomSource = Depends(get_random)
) -> RollResponse:
    """Evaluate a free dice expression such as ``2d6+3``."""
    expression = _parse_or_422(body.expression)
    try:
        result = evaluate(expression, random)
    except DiceError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return RollResponse(value=result.value, trace=result.trace, reply=replies.roll_reply(result))


@router.post("/characters/roll", response_model=CounterRollResponse)
async def roll_counter(
    body: CounterRollRequest, random: RandomSource = Depends(get_random)
) -> CounterRollResponse:
    """Roll one of a character's counters against an optional target."""
    system = _system_or_404(body.system)
    counter = system.find_counter(body.counter)
    if counter is None:
        raise HTTPException(
            status_code=404, detail=f"{system.name} has no counter named {body.counter!r}"
        )

    second_counter = None
    if body.second_counter:
        second_counter = system.find_counter(body.second_counter)
        if second_counter is None:
            raise HTTPException(
                status_code=404,
                detail=f"{system.name} has no counter named {body.second_counter!r}",
            )

    bonus = _parse_or_422(body.bonus) if body.bonus else None
    flags = RollFlags.attack if body.attack else RollFlags.none

    try:
        result = counter.roll(
            _sheet(body.sheet),
            bonus,
            random,
            rerolls=body.rerolls,
            target=body.target,
            second_counter=second_counter,
            flags=flags,
        )
    except EvaluationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except TraceFormatError as exc:
        # The natural-roll decoder only reads traces the engine wrote itself.
        logger.exception("Could not read the natural roll for %s", counter.name)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if result.error is not RollError.success:
        raise HTTPException(status_code=422, detail=replies.counter_roll_reply(result))

    return CounterRollResponse(
        counter=result.counter_name,
        display_name=result.display_name,
        roll=result.roll,
        trace=result.trace,
        success=result.success,
        target=result.target,
        reply=replies.counter_roll_reply(result),
    )


@router.post("/characters/summary", response_model=SummaryResponse)
async def character_summary(body: SummaryRequest) -> SummaryResponse:
    """Every visible counter's value for the sheet, fixes included."""
    system = _system_or_404(body.system)
    return SummaryResponse(system=system.name, values=system.summary(_sheet(body.sheet)))
