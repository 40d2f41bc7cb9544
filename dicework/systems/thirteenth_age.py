"""13th Age counters. Ability checks add the character's level to every roll."""

from __future__ import annotations

from dicework.counters import CharacterSheet, CounterKind, GameCounter
from dicework.systems.base import CharacterSystem

SYSTEM_NAME = "13th-age"

LEVEL = "Level"
ABILITIES = ("Strength", "Dexterity", "Constitution", "Intelligence", "Wisdom", "Charisma")


class AbilityBonusCounter(GameCounter):
    """(score - 10) / 2, rounded down rather than towards zero."""

    def __init__(self, score: GameCounter, level: GameCounter) -> None:
        super().__init__(f"{score.name} Bonus", kind=CounterKind.ability_check, level=level)
        self.score = score

    def compute_value(self, character: CharacterSheet) -> int | None:
        score = self.score.get_value(character)
        if score is None:
            return None
        return (score - 10) // 2


def build_system() -> CharacterSystem:
    level = GameCounter(LEVEL, "Lvl")
    scores = [GameCounter(name, name[:3].upper()) for name in ABILITIES]
    return CharacterSystem(
        SYSTEM_NAME,
        [level, *scores, *(AbilityBonusCounter(score, level) for score in scores)],
    )
