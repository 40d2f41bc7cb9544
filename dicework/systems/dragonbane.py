"""Dragonbane counters. Skill checks are rolled under the skill level on a d20."""

from __future__ import annotations

from dicework.counters import CharacterSheet, CounterKind, GameCounter
from dicework.systems.base import CharacterSystem

SYSTEM_NAME = "dragonbane"

STRENGTH = "Strength"
CONSTITUTION = "Constitution"
AGILITY = "Agility"
INTELLIGENCE = "Intelligence"
WILLPOWER = "Willpower"
CHARISMA = "Charisma"

_ALIASES = {
    STRENGTH: "STR",
    CONSTITUTION: "CON",
    AGILITY: "AGL",
    INTELLIGENCE: "INT",
    WILLPOWER: "WIL",
    CHARISMA: "CHA",
}

# Skill name -> governing attribute.
SKILLS = {
    "Acrobatics": AGILITY,
    "Awareness": INTELLIGENCE,
    "Bartering": CHARISMA,
    "Evade": AGILITY,
    "Healing": INTELLIGENCE,
    "Persuasion": CHARISMA,
    "Sneaking": AGILITY,
    "Swords": STRENGTH,
}


def _base_chance(attribute: int) -> int | None:
    if 1 <= attribute <= 5:
        return 3
    if 6 <= attribute <= 8:
        return 4
    if 9 <= attribute <= 12:
        return 5
    if 13 <= attribute <= 15:
        return 6
    if 16 <= attribute <= 18:
        return 7
    return None


class SkillLevelCounter(GameCounter):
    """The number a skill check must roll equal to or under.

    Trained skills (one or more points) get twice the base chance plus
    points beyond the first, capped at 18. Untrained skills use the base
    chance from the governing attribute.
    """

    def __init__(self, attribute: GameCounter, skill: GameCounter) -> None:
        super().__init__(f"{skill.name} Level", kind=CounterKind.roll_under, hidden=True)
        self.attribute = attribute
        self.skill = skill

    def compute_value(self, character: CharacterSheet) -> int | None:
        attribute = self.attribute.get_value(character)
        points = self.skill.get_value(character)
        base = _base_chance(attribute) if attribute is not None else None
        if base is None or points is None:
            return None
        if points >= 1:
            return min(18, base * 2 + points - 1)
        return base


def build_system() -> CharacterSystem:
    attributes = {name: GameCounter(name, alias) for name, alias in _ALIASES.items()}
    counters: list[GameCounter] = list(attributes.values())
    for skill_name, attribute_name in SKILLS.items():
        skill = GameCounter(skill_name)
        counters.append(skill)
        counters.append(SkillLevelCounter(attributes[attribute_name], skill))
    return CharacterSystem(SYSTEM_NAME, counters)
