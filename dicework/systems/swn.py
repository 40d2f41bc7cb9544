"""Stars Without Number counters for player characters and monsters."""

from __future__ import annotations

from collections.abc import Sequence

from dicework.counters import CharacterSheet, CounterKind, GameCounter
from dicework.systems.base import CharacterSystem

PLAYER_SYSTEM_NAME = "swn"
MONSTER_SYSTEM_NAME = "swn-monster"

WARRIOR = "Warrior"
CLASS_1 = "Class 1"
CLASS_2 = "Class 2"

LEVEL = "Level"
STRENGTH = "Strength"
DEXTERITY = "Dexterity"
CONSTITUTION = "Constitution"
INTELLIGENCE = "Intelligence"
WISDOM = "Wisdom"
CHARISMA = "Charisma"
ATTRIBUTES = (STRENGTH, DEXTERITY, CONSTITUTION, INTELLIGENCE, WISDOM, CHARISMA)

SKILLS = (
    "Administer",
    "Connect",
    "Exert",
    "Fix",
    "Heal",
    "Know",
    "Lead",
    "Notice",
    "Perform",
    "Pilot",
    "Program",
    "Punch",
    "Shoot",
    "Sneak",
    "Stab",
    "Survive",
    "Talk",
    "Trade",
    "Work",
)

ARMOR_VALUE = "Armor Value"
ARMOR_CLASS = "Armor Class"
ATTACK_BONUS = "Attack Bonus"
HIT_POINTS = "Hit Points"
PHYSICAL = "Physical"
EVASION = "Evasion"
MENTAL = "Mental"

HIT_DICE = "Hit Dice"
ATTACK = "Attack"
DAMAGE = "Damage"
DAMAGE_DICE = "Damage Dice"
MORALE = "Morale"
SKILL = "Skill"
SAVE = "Save"


def bonus_counter_name(attribute: str) -> str:
    return f"{attribute} Bonus"


class AttributeBonusCounter(GameCounter):
    """-2 for a score of 3 or less, up to +2 for 18 or more."""

    def __init__(self, attribute: GameCounter) -> None:
        super().__init__(bonus_counter_name(attribute.name), attribute.abbreviation + "B")
        self.attribute = attribute

    def compute_value(self, character: CharacterSheet) -> int | None:
        score = self.attribute.get_value(character)
        if score is None:
            return None
        if score <= 3:
            return -2
        if score <= 7:
            return -1
        if score <= 13:
            return 0
        if score <= 17:
            return 1
        return 2


class AttackBonusCounter(GameCounter):
    """Half level, rounded down; full level for a pure Warrior.

    A partial Warrior gets +1, rising to +2 at fifth level.
    """

    def __init__(self, level: GameCounter) -> None:
        super().__init__(ATTACK_BONUS, "AB")
        self.level_counter = level

    def compute_value(self, character: CharacterSheet) -> int | None:
        level = self.level_counter.get_value(character)
        if level is None:
            return None
        classes = (character.properties.get(CLASS_1), character.properties.get(CLASS_2))
        warriors = classes.count(WARRIOR)
        if warriors == 2:
            return level
        if warriors == 1:
            return level // 2 + (2 if level >= 5 else 1)
        return level // 2


class SavingThrowCounter(GameCounter):
    """15, minus the better of two attribute bonuses, minus one per level above first."""

    def __init__(
        self, name: str, level: GameCounter, attribute_bonuses: Sequence[GameCounter]
    ) -> None:
        super().__init__(name, kind=CounterKind.saving_throw)
        self.level_counter = level
        self.attribute_bonuses = tuple(attribute_bonuses)

    def compute_value(self, character: CharacterSheet) -> int | None:
        bonuses = [b.get_value(character) for b in self.attribute_bonuses]
        known = [b for b in bonuses if b is not None]
        if not known:
            return None
        level = self.level_counter.get_value(character)
        level_reduction = max(0, level - 1) if level is not None else 0
        return 15 - max(known) - level_reduction


class ArmorClassCounter(GameCounter):
    def __init__(self, armor_value: GameCounter, dexterity_bonus: GameCounter) -> None:
        super().__init__(ARMOR_CLASS, "AC")
        self.armor_value = armor_value
        self.dexterity_bonus = dexterity_bonus

    def compute_value(self, character: CharacterSheet) -> int | None:
        armor = self.armor_value.get_value(character)
        dexterity = self.dexterity_bonus.get_value(character)
        if armor is None or dexterity is None:
            return None
        return armor + dexterity


class HitPointsCounter(GameCounter):
    # House rule: 6 at first level and 3.5 per level after, rounded down,
    # instead of rolling.
    def __init__(self, level: GameCounter, constitution_bonus: GameCounter) -> None:
        super().__init__(HIT_POINTS, "HP")
        self.level_counter = level
        self.constitution_bonus = constitution_bonus

    def compute_value(self, character: CharacterSheet) -> int | None:
        level = self.level_counter.get_value(character)
        con_bonus = self.constitution_bonus.get_value(character)
        class_1 = character.properties.get(CLASS_1)
        class_2 = character.properties.get(CLASS_2)
        if level is None or con_bonus is None or not class_1 or not class_2:
            return None

        class_bonus = 2 if WARRIOR in (class_1, class_2) else 0
        base = 6 + max(0, level - 1) * 35 // 10
        return max(1, base + (class_bonus + con_bonus) * level)


def build_player_system() -> CharacterSystem:
    level = GameCounter(LEVEL, "Lvl")
    attributes = {name: GameCounter(name, name[:3].upper()) for name in ATTRIBUTES}
    bonuses = {name: AttributeBonusCounter(counter) for name, counter in attributes.items()}
    attack_bonus = AttackBonusCounter(level)
    armor_value = GameCounter(ARMOR_VALUE, "AV")

    skills = [
        GameCounter(name, kind=CounterKind.skill, default_value=-1, attack_bonus=attack_bonus)
        for name in SKILLS
    ]
    saves = [
        SavingThrowCounter(PHYSICAL, level, (bonuses[STRENGTH], bonuses[CONSTITUTION])),
        SavingThrowCounter(EVASION, level, (bonuses[DEXTERITY], bonuses[INTELLIGENCE])),
        SavingThrowCounter(MENTAL, level, (bonuses[WISDOM], bonuses[CHARISMA])),
    ]

    return CharacterSystem(
        PLAYER_SYSTEM_NAME,
        [
            level,
            *attributes.values(),
            *bonuses.values(),
            attack_bonus,
            armor_value,
            ArmorClassCounter(armor_value, bonuses[DEXTERITY]),
            HitPointsCounter(level, bonuses[CONSTITUTION]),
            *saves,
            *skills,
        ],
    )


def build_monster_system() -> CharacterSystem:
    return CharacterSystem(
        MONSTER_SYSTEM_NAME,
        [
            GameCounter(HIT_DICE, "HD"),
            GameCounter(ARMOR_CLASS, "AC"),
            GameCounter(ATTACK, "Atk", kind=CounterKind.attack),
            GameCounter(DAMAGE, "Dmg", kind=CounterKind.damage, dice_property=DAMAGE_DICE),
            GameCounter(MORALE, "ML", kind=CounterKind.morale),
            GameCounter(SKILL, kind=CounterKind.monster_skill, default_value=-1),
            GameCounter(SAVE, kind=CounterKind.saving_throw),
        ],
    )
