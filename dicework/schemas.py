"""Pydantic request and response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dicework.config import settings


class RollRequest(BaseModel):
    expression: str = Field(min_length=1, max_length=1000, description="Dice notation, e.g. 2d6+3.")


class RollResponse(BaseModel):
    value: int
    trace: str
    reply: str


class SheetModel(BaseModel):
    counters: dict[str, int] = Field(default_factory=dict)
    properties: dict[str, str] = Field(default_factory=dict)
    fixes: dict[str, int] = Field(default_factory=dict)


class CounterRollRequest(BaseModel):
    system: str = Field(description="Character system name, e.g. 'swn' or 'swn-monster'.")
    counter: str = Field(description="Counter name or alias to roll.")
    sheet: SheetModel = Field(default_factory=SheetModel)
    bonus: str | None = Field(
        default=None, max_length=1000, description="Extra dice expression to add."
    )
    rerolls: int = Field(default=0, ge=-settings.max_rerolls, le=settings.max_rerolls)
    target: int | None = None
    second_counter: str | None = None
    attack: bool = False


class CounterRollResponse(BaseModel):
    counter: str
    display_name: str
    roll: int
    trace: str
    success: bool | None
    target: int | None
    reply: str


class SummaryRequest(BaseModel):
    system: str
    sheet: SheetModel = Field(default_factory=SheetModel)


class SummaryResponse(BaseModel):
    system: str
    values: dict[str, int | None]
