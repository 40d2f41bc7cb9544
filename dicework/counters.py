"""Counters and the roll contract.

A counter is a named numeric value on a character sheet (an attribute, a
skill, hit points...). Some counters can be rolled. How a roll is built is
decided by the counter's ``CounterKind``, which selects an entry from
``ROLL_STRATEGIES``:

  kind           dice   counter value      implicit target   success
  attack         1d20   added (required)   -                 roll >= target
  skill          2d6    added (default)    -                 roll >= target
  monster_skill  2d6    added (default)    -                 roll >= target
  ability_check  1d20   added, plus level  -                 roll >= target
  saving_throw   1d20   target             own value **      roll >= target *
  morale         2d6    target             own value         roll <= target
  roll_under     1d20   target             own value         roll <= target
  damage         sheet  not used           -                 always None

  * a natural 20 always succeeds and a natural 1 always fails.
  ** a save with no target at all still rolls, with no verdict. Morale and
     roll-under checks need one.

Terms are assembled in a fixed order: dice, counter value, linked counters
(level, attack bonus), second counter, then the caller's free-text bonus.
Failures come back as ``CounterRollResult`` values, never exceptions.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from dicework import trace
from dicework.config import settings
from dicework.evaluator import RandomSource, evaluate
from dicework.expressions import DiceRoll, Expression, IntegerLiteral, add_terms, with_rerolls
from dicework.parser import parse_complete

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class RollError(str, enum.Enum):
    """Outcome of a counter roll."""

    success = "success"
    not_rollable = "not_rollable"
    no_value = "no_value"


class RollFlags(enum.Flag):
    none = 0
    attack = enum.auto()


class CounterKind(str, enum.Enum):
    """Selects the roll strategy for a counter."""

    plain = "plain"
    attack = "attack"
    skill = "skill"
    monster_skill = "monster_skill"
    ability_check = "ability_check"
    saving_throw = "saving_throw"
    morale = "morale"
    roll_under = "roll_under"
    damage = "damage"


class ValueUse(str, enum.Enum):
    """What the counter's own value contributes to a roll."""

    added = "added"  # added to the roll; missing value is NoValue
    added_or_default = "added_or_default"  # added; missing value falls back to the default
    target = "target"  # not added; becomes the target when the caller gives none
    ignored = "ignored"  # neither added nor used as a target


class Comparison(str, enum.Enum):
    at_least = "at_least"
    at_most = "at_most"

    def succeeds(self, roll: int, target: int) -> bool:
        if self is Comparison.at_least:
            return roll >= target
        return roll <= target


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CharacterSheet:
    """Read-only snapshot of one character's stored values.

    ``fixes`` holds persisted deltas keyed by counter name.
    """

    counters: Mapping[str, int] = field(default_factory=dict)
    properties: Mapping[str, str] = field(default_factory=dict)
    fixes: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CounterRollResult:
    counter_name: str
    error: RollError
    roll: int = 0
    trace: str = ""
    success: bool | None = None
    display_name: str = ""
    target: int | None = None

    @property
    def error_message(self) -> str:
        if self.error is RollError.not_rollable:
            return f"{self.counter_name} is not rollable"
        if self.error is RollError.no_value:
            return f"No value defined for {self.counter_name}"
        return ""

    @classmethod
    def failure(cls, counter_name: str, error: RollError, reason: str = "") -> CounterRollResult:
        return cls(counter_name=counter_name, error=error, trace=reason, display_name=counter_name)


@dataclass(frozen=True)
class RollStrategy:
    dice_count: int
    dice_sides: int
    value_use: ValueUse
    comparison: Comparison = Comparison.at_least
    adds_level: bool = False
    natural_d20_decides: bool = False
    # Without a target from the caller or the counter the roll is NoValue;
    # otherwise it still rolls and reports no verdict.
    target_required: bool = False
    takes_second_counter: bool = False
    marks_unskilled: bool = False
    # Attack rolls swap the dice for 1d20 and add the linked attack bonus.
    supports_attack: bool = False


ROLL_STRATEGIES: dict[CounterKind, RollStrategy] = {
    CounterKind.attack: RollStrategy(1, 20, ValueUse.added),
    CounterKind.skill: RollStrategy(
        2,
        6,
        ValueUse.added_or_default,
        takes_second_counter=True,
        marks_unskilled=True,
        supports_attack=True,
    ),
    CounterKind.monster_skill: RollStrategy(
        2, 6, ValueUse.added_or_default, takes_second_counter=True, marks_unskilled=True
    ),
    CounterKind.ability_check: RollStrategy(1, 20, ValueUse.added, adds_level=True),
    CounterKind.saving_throw: RollStrategy(1, 20, ValueUse.target, natural_d20_decides=True),
    CounterKind.morale: RollStrategy(
        2,
        6,
        ValueUse.target,
        Comparison.at_most,
        target_required=True,
        takes_second_counter=True,
    ),
    CounterKind.roll_under: RollStrategy(
        1, 20, ValueUse.target, Comparison.at_most, target_required=True
    ),
    # Damage dice come from the sheet; see GameCounter._damage_dice.
    CounterKind.damage: RollStrategy(1, 1, ValueUse.ignored),
}


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------


class GameCounter:
    """A numeric value on a character sheet, optionally rollable.

    Subclasses override ``compute_value`` for values derived from other
    counters. ``get_value`` adds any fix on top of the computed value.
    """

    def __init__(
        self,
        name: str,
        alias: str | None = None,
        *,
        kind: CounterKind = CounterKind.plain,
        default_value: int = 0,
        hidden: bool = False,
        level: GameCounter | None = None,
        attack_bonus: GameCounter | None = None,
        dice_property: str | None = None,
    ) -> None:
        self.name = name
        self.alias = alias
        self.kind = kind
        self.default_value = default_value
        self.hidden = hidden
        self.level = level
        self.attack_bonus = attack_bonus
        self.dice_property = dice_property

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, kind={self.kind.value})"

    @property
    def abbreviation(self) -> str:
        return self.name[:3].upper()

    def compute_value(self, character: CharacterSheet) -> int | None:
        """The value before fixes. Stored counters read the sheet."""
        return character.counters.get(self.name)

    def get_value(self, character: CharacterSheet) -> int | None:
        value = self.compute_value(character)
        fix = character.fixes.get(self.name, 0)
        # Fixes never apply to hidden counters.
        if value is None or fix == 0 or self.hidden:
            return value
        return value + fix

    def roll(
        self,
        character: CharacterSheet,
        bonus: Expression | None,
        random: RandomSource,
        rerolls: int = 0,
        target: int | None = None,
        second_counter: GameCounter | None = None,
        flags: RollFlags = RollFlags.none,
    ) -> CounterRollResult:
        """Roll this counter for ``character``.

        Args:
            character: The sheet to read values and fixes from.
            bonus: An already-parsed free-text bonus to add, if any.
            random: The random source to draw dice from.
            rerolls: Extra attempts; positive keeps the last, negative the lowest.
                Counts beyond ``settings.max_rerolls`` either way are NotRollable.
            target: The value to beat. Some kinds fill in their own.
            second_counter: A second counter whose value is added (skills, morale).
            flags: ``RollFlags.attack`` requests an attack roll.

        Returns:
            A CounterRollResult. ``success`` is None when no target applies.
        """
        strategy = ROLL_STRATEGIES.get(self.kind)
        if strategy is None:
            return CounterRollResult.failure(self.name, RollError.not_rollable)

        attacking = RollFlags.attack in flags
        if attacking and not strategy.supports_attack:
            return CounterRollResult.failure(
                self.name,
                RollError.not_rollable,
                f"Cannot make attack rolls with {self.name}",
            )
        if attacking and self.attack_bonus is None:
            return CounterRollResult.failure(
                self.name,
                RollError.not_rollable,
                "Cannot make attack rolls without an attack bonus",
            )
        if abs(rerolls) > settings.max_rerolls:
            return CounterRollResult.failure(
                self.name,
                RollError.not_rollable,
                f"Rerolls must be between -{settings.max_rerolls} and {settings.max_rerolls}",
            )

        dice = self._build_dice(strategy, character, rerolls, attacking)
        if dice is None:
            return CounterRollResult.failure(self.name, RollError.no_value)

        own_value = self.get_value(character)
        own_term: IntegerLiteral | None = None
        if strategy.value_use is ValueUse.target:
            if target is None:
                target = own_value
            if target is None and strategy.target_required:
                return CounterRollResult.failure(self.name, RollError.no_value)
        elif strategy.value_use is not ValueUse.ignored:
            if own_value is None:
                if strategy.value_use is ValueUse.added:
                    return CounterRollResult.failure(self.name, RollError.no_value)
                own_value = self.default_value
            own_term = IntegerLiteral(own_value, self.name)

        linked_terms: list[IntegerLiteral] = []
        if strategy.adds_level and self.level is not None:
            linked_terms.append(IntegerLiteral(self.level.get_value(character) or 0, "level"))
        if attacking and self.attack_bonus is not None:
            attack_value = self.attack_bonus.get_value(character)
            if attack_value is None:
                return CounterRollResult.failure(self.name, RollError.no_value)
            linked_terms.append(IntegerLiteral(attack_value, self.attack_bonus.name))

        second_term: IntegerLiteral | None = None
        if second_counter is not None and strategy.takes_second_counter:
            second_value = second_counter.get_value(character)
            if second_value is None:
                return CounterRollResult.failure(self.name, RollError.no_value)
            second_term = IntegerLiteral(second_value, second_counter.name)

        expression = add_terms(dice, own_term, *linked_terms, second_term, bonus)
        result = evaluate(expression, random)

        success: bool | None = None
        if self.kind is CounterKind.damage:
            target = None
        elif target is not None:
            success = strategy.comparison.succeeds(result.value, target)
            if strategy.natural_d20_decides:
                natural = trace.extract_natural_d20_roll(result.trace)
                if natural == 20:
                    success = True
                elif natural == 1:
                    success = False

        display_name = self._display_name(
            strategy, own_value, second_counter if second_term else None, attacking
        )
        logger.debug(
            "Rolled %s: %d vs %s (%s)", display_name, result.value, target, result.trace
        )
        return CounterRollResult(
            counter_name=self.name,
            error=RollError.success,
            roll=result.value,
            trace=result.trace,
            success=success,
            display_name=display_name,
            target=target,
        )

    def _build_dice(
        self,
        strategy: RollStrategy,
        character: CharacterSheet,
        rerolls: int,
        attacking: bool,
    ) -> Expression | None:
        if attacking:
            return DiceRoll(sides=20, count=1, reroll_attempts=rerolls)
        if self.kind is CounterKind.damage:
            return self._damage_dice(character, rerolls)
        return DiceRoll(
            sides=strategy.dice_sides, count=strategy.dice_count, reroll_attempts=rerolls
        )

    def _damage_dice(self, character: CharacterSheet, rerolls: int) -> Expression | None:
        """Parse the damage formula stored on the sheet, e.g. "1d8" or "2d6+1".

        Rerolls apply to the first dice term of the formula.
        """
        notation = character.properties.get(self.dice_property or "", "").strip()
        if not notation:
            return None
        parsed = parse_complete(notation)
        if not parsed.ok:
            logger.warning(
                "Stored damage dice %r for %s do not parse: %s", notation, self.name, parsed.error
            )
            return None
        expression = parsed.expression
        if rerolls:
            expression = with_rerolls(expression, rerolls)
        return expression

    def _display_name(
        self,
        strategy: RollStrategy,
        own_value: int | None,
        second_counter: GameCounter | None,
        attacking: bool,
    ) -> str:
        name = f"{self.name} attack" if attacking else self.name
        if second_counter is not None:
            name += f" ({second_counter.abbreviation})"
        if strategy.marks_unskilled and own_value is not None and own_value < 0:
            name += " unskilled"
        return name
