"""Tests for the counter roll contract across the roll strategies."""

import logging

import pytest

from dicework.counters import (
    ROLL_STRATEGIES,
    CharacterSheet,
    Comparison,
    CounterKind,
    CounterRollResult,
    GameCounter,
    RollError,
    RollFlags,
)
from dicework.expressions import IntegerLiteral
from dicework.systems import dragonbane, swn, thirteenth_age

PLAYERS = swn.build_player_system()
MONSTERS = swn.build_monster_system()


def _player(**counters: int) -> CharacterSheet:
    return CharacterSheet(counters={k.replace("_", " "): v for k, v in counters.items()})


class TestComparison:
    def test_at_least(self) -> None:
        assert Comparison.at_least.succeeds(8, 8)
        assert not Comparison.at_least.succeeds(7, 8)

    def test_at_most(self) -> None:
        assert Comparison.at_most.succeeds(8, 8)
        assert not Comparison.at_most.succeeds(9, 8)

    def test_every_rollable_kind_has_a_strategy(self) -> None:
        assert set(ROLL_STRATEGIES) == set(CounterKind) - {CounterKind.plain}


class TestNotRollable:
    def test_plain_counter(self, dice) -> None:
        result = PLAYERS.find_counter("STR").roll(_player(Strength=12), None, dice())
        assert result.error is RollError.not_rollable
        assert result.error_message == "Strength is not rollable"
        assert result.roll == 0

    def test_attack_with_kind_that_cannot_attack(self, dice) -> None:
        sheet = CharacterSheet(counters={"Skill": 1})
        result = MONSTERS.find_counter("Skill").roll(sheet, None, dice(), flags=RollFlags.attack)
        assert result.error is RollError.not_rollable
        assert result.trace == "Cannot make attack rolls with Skill"

    def test_attack_without_attack_bonus(self, dice) -> None:
        counter = GameCounter("Sneak", kind=CounterKind.skill)
        result = counter.roll(CharacterSheet(), None, dice(), flags=RollFlags.attack)
        assert result.error is RollError.not_rollable
        assert result.trace == "Cannot make attack rolls without an attack bonus"

    def test_failure_helper(self) -> None:
        result = CounterRollResult.failure("Morale", RollError.no_value)
        assert result.error_message == "No value defined for Morale"
        assert result.success is None


class TestSkill:
    def test_unskilled_roll_against_target(self, dice) -> None:
        shoot = PLAYERS.find_counter("Shoot")
        result = shoot.roll(CharacterSheet(), None, dice((6, 3), (6, 4)), target=8)
        assert result.error is RollError.success
        assert result.roll == 6
        assert result.success is False
        assert result.trace == "2d6 🎲 7 + -1 (Shoot)"
        assert result.display_name == "Shoot unskilled"

    def test_no_target_no_verdict(self, dice) -> None:
        result = PLAYERS.find_counter("Shoot").roll(_player(Shoot=1), None, dice(6, 6))
        assert result.roll == 13
        assert result.success is None
        assert result.target is None

    def test_second_counter_and_bonus(self, dice) -> None:
        sheet = _player(Dexterity=14, Shoot=2)
        result = PLAYERS.find_counter("shoot").roll(
            sheet,
            IntegerLiteral(1),
            dice(3, 4),
            target=10,
            second_counter=PLAYERS.find_counter("DEXB"),
        )
        assert result.trace == "2d6 🎲 7 + 2 (Shoot) + 1 (Dexterity Bonus) + 1"
        assert result.roll == 11
        assert result.success is True
        assert result.display_name == "Shoot (DEX)"

    def test_second_counter_without_value(self, dice) -> None:
        result = PLAYERS.find_counter("Shoot").roll(
            _player(Shoot=1), None, dice(), second_counter=PLAYERS.find_counter("DEXB")
        )
        assert result.error is RollError.no_value

    def test_attack_roll(self, dice) -> None:
        sheet = _player(Level=3, Dexterity=14, Shoot=1)
        result = PLAYERS.find_counter("Shoot").roll(
            sheet,
            None,
            dice((20, 14)),
            target=15,
            second_counter=PLAYERS.find_counter("DEXB"),
            flags=RollFlags.attack,
        )
        assert result.trace == "1d20 🎲 14 + 1 (Shoot) + 1 (Attack Bonus) + 1 (Dexterity Bonus)"
        assert result.roll == 17
        assert result.success is True
        assert result.display_name == "Shoot attack (DEX)"

    def test_attack_roll_without_level(self, dice) -> None:
        result = PLAYERS.find_counter("Shoot").roll(
            _player(Shoot=1), None, dice(), flags=RollFlags.attack
        )
        assert result.error is RollError.no_value

    def test_rerolls_roll_whole_group(self, dice) -> None:
        result = PLAYERS.find_counter("Fix").roll(_player(Fix=0), None, dice(1, 1, 6, 5), rerolls=1)
        assert result.roll == 11
        assert result.trace == "2d6 🎲 11 [~~2~~ + 11] + 0 (Fix)"

    def test_fix_is_added(self, dice) -> None:
        sheet = CharacterSheet(counters={"Shoot": 1}, fixes={"Shoot": 2})
        result = PLAYERS.find_counter("Shoot").roll(sheet, None, dice(1, 1))
        assert result.trace == "2d6 🎲 2 + 3 (Shoot)"

    def test_monster_skill_defaults_to_unskilled(self, dice) -> None:
        result = MONSTERS.find_counter("Skill").roll(CharacterSheet(), None, dice(2, 2))
        assert result.roll == 3
        assert result.trace == "2d6 🎲 4 + -1 (Skill)"
        assert result.display_name == "Skill unskilled"

    def test_monster_skill_trained(self, dice) -> None:
        sheet = CharacterSheet(counters={"Skill": 1})
        result = MONSTERS.find_counter("Skill").roll(sheet, None, dice(2, 2))
        assert result.roll == 5
        assert result.display_name == "Skill"

    @pytest.mark.parametrize("rerolls", [4, -5])
    def test_too_many_rerolls(self, dice, rerolls: int) -> None:
        shoot = PLAYERS.find_counter("Shoot")
        result = shoot.roll(_player(Shoot=1), None, dice(), rerolls=rerolls)
        assert result.error is RollError.not_rollable
        assert result.trace == "Rerolls must be between -3 and 3"


class TestAttack:
    def test_monster_attack(self, dice) -> None:
        sheet = CharacterSheet(counters={"Attack": 5})
        result = MONSTERS.find_counter("Atk").roll(sheet, None, dice((20, 12)), target=15)
        assert result.roll == 17
        assert result.trace == "1d20 🎲 12 + 5 (Attack)"
        assert result.success is True

    def test_missing_value(self, dice) -> None:
        result = MONSTERS.find_counter("Attack").roll(CharacterSheet(), None, dice(), target=15)
        assert result.error is RollError.no_value
        assert result.error_message == "No value defined for Attack"


class TestSavingThrow:
    # Strength 14 and Constitution 13 at first level make a Physical save of 14.
    SHEET = _player(Level=1, Strength=14, Constitution=13)

    def test_own_value_is_target(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(self.SHEET, None, dice((20, 14)))
        assert result.target == 14
        assert result.trace == "1d20 🎲 14"
        assert result.success is True

    def test_below_target_fails(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(self.SHEET, None, dice(13))
        assert result.success is False

    def test_explicit_target_overrides(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(self.SHEET, None, dice(13), target=12)
        assert result.target == 12
        assert result.success is True

    def test_natural_twenty_always_succeeds(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(self.SHEET, None, dice(20), target=30)
        assert result.success is True

    def test_natural_one_always_fails(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(
            self.SHEET, IntegerLiteral(10), dice(1), target=5
        )
        assert result.roll == 11
        assert result.success is False

    def test_natural_roll_is_the_kept_attempt(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(
            self.SHEET, None, dice(1, 20), rerolls=1, target=30
        )
        assert result.trace == "1d20 🎲 20 [~~1~~ + 20]"
        assert result.success is True

    def test_second_counter_ignored(self, dice) -> None:
        result = PLAYERS.find_counter("Physical").roll(
            self.SHEET, None, dice(15), second_counter=PLAYERS.find_counter("STRB")
        )
        assert result.trace == "1d20 🎲 15"
        assert result.display_name == "Physical"

    def test_rolls_without_any_target(self, dice) -> None:
        result = PLAYERS.find_counter("Mental").roll(CharacterSheet(), None, dice((20, 10)))
        assert result.error is RollError.success
        assert result.roll == 10
        assert result.target is None
        assert result.success is None

    def test_monster_save_without_value(self, dice) -> None:
        result = MONSTERS.find_counter("Save").roll(CharacterSheet(), None, dice(20))
        assert result.error is RollError.success
        assert result.trace == "1d20 🎲 20"
        assert result.success is None

    def test_monster_save(self, dice) -> None:
        sheet = CharacterSheet(counters={"Save": 12})
        result = MONSTERS.find_counter("Save").roll(sheet, None, dice(11))
        assert result.target == 12
        assert result.success is False


class TestRollUnder:
    def test_morale_at_most(self, dice) -> None:
        sheet = CharacterSheet(counters={"Morale": 8})
        result = MONSTERS.find_counter("ML").roll(sheet, None, dice(4, 4))
        assert result.trace == "2d6 🎲 8"
        assert result.target == 8
        assert result.success is True

    def test_morale_above_target_fails(self, dice) -> None:
        sheet = CharacterSheet(counters={"Morale": 8})
        result = MONSTERS.find_counter("Morale").roll(sheet, None, dice(5, 4))
        assert result.success is False

    def test_morale_without_value(self, dice) -> None:
        result = MONSTERS.find_counter("Morale").roll(CharacterSheet(), None, dice())
        assert result.error is RollError.no_value

    def test_dragonbane_skill_level(self, dice) -> None:
        system = dragonbane.build_system()
        sheet = CharacterSheet(counters={"Agility": 14, "Sneaking": 3})
        counter = system.find_counter("Sneaking Level")
        assert counter.roll(sheet, None, dice((20, 14))).success is True
        assert counter.roll(sheet, None, dice((20, 15))).success is False

    def test_hidden_counter_ignores_fix(self, dice) -> None:
        system = dragonbane.build_system()
        sheet = CharacterSheet(
            counters={"Agility": 14, "Sneaking": 3}, fixes={"Sneaking Level": 5}
        )
        result = system.find_counter("Sneaking Level").roll(sheet, None, dice(16))
        assert result.target == 14


class TestAbilityCheck:
    def test_adds_level(self, dice) -> None:
        system = thirteenth_age.build_system()
        sheet = CharacterSheet(counters={"Strength": 16, "Level": 2})
        result = system.find_counter("Strength Bonus").roll(sheet, None, dice((20, 10)), target=15)
        assert result.trace == "1d20 🎲 10 + 3 (Strength Bonus) + 2 (level)"
        assert result.roll == 15
        assert result.success is True

    def test_missing_score(self, dice) -> None:
        system = thirteenth_age.build_system()
        result = system.find_counter("Wisdom Bonus").roll(CharacterSheet(), None, dice())
        assert result.error is RollError.no_value


class TestDamage:
    def test_dice_from_sheet(self, dice) -> None:
        sheet = CharacterSheet(properties={"Damage Dice": "1d8+2"})
        result = MONSTERS.find_counter("Dmg").roll(sheet, None, dice((8, 5)), target=10)
        assert result.roll == 7
        assert result.trace == "1d8 🎲 5 + 2"
        assert result.success is None
        assert result.target is None

    def test_rerolls_apply_to_plain_dice(self, dice) -> None:
        sheet = CharacterSheet(properties={"Damage Dice": "2d6"})
        result = MONSTERS.find_counter("Damage").roll(sheet, None, dice(1, 1, 4, 4), rerolls=1)
        assert result.roll == 8
        assert result.trace == "2d6 🎲 8 [~~2~~ + 8]"

    def test_rerolls_apply_to_formula_dice(self, dice) -> None:
        sheet = CharacterSheet(properties={"Damage Dice": "1d8+2"})
        result = MONSTERS.find_counter("Damage").roll(sheet, None, dice(3, 6), rerolls=1)
        assert result.roll == 8
        assert result.trace == "1d8 🎲 6 [~~3~~ + 6] + 2"

    def test_rerolls_apply_to_first_dice_term_only(self, dice) -> None:
        sheet = CharacterSheet(properties={"Damage Dice": "3 + 1d6 + 1d4"})
        result = MONSTERS.find_counter("Damage").roll(
            sheet, None, dice((6, 5), (6, 2), (4, 1)), rerolls=-1
        )
        assert result.roll == 6
        assert result.trace == "3 + 1d6 🎲 2 [~~5~~ + 2] + 1d4 🎲 1"

    def test_oversized_number_in_stored_dice(self, dice) -> None:
        sheet = CharacterSheet(properties={"Damage Dice": "1d6+" + "9" * 5000})
        result = MONSTERS.find_counter("Damage").roll(sheet, None, dice())
        assert result.error is RollError.no_value

    def test_missing_dice(self, dice) -> None:
        result = MONSTERS.find_counter("Damage").roll(CharacterSheet(), None, dice())
        assert result.error is RollError.no_value

    def test_unreadable_dice(self, dice, caplog) -> None:
        sheet = CharacterSheet(properties={"Damage Dice": "a lot"})
        with caplog.at_level(logging.WARNING, logger="dicework.counters"):
            result = MONSTERS.find_counter("Damage").roll(sheet, None, dice())
        assert result.error is RollError.no_value
        assert "do not parse" in caplog.text


class TestFixes:
    def test_fix_flows_into_derived_counters(self) -> None:
        sheet = CharacterSheet(counters={"Strength": 13}, fixes={"Strength": 1})
        assert PLAYERS.find_counter("Strength").get_value(sheet) == 14
        assert PLAYERS.find_counter("STRB").get_value(sheet) == 1

    def test_fix_without_value(self) -> None:
        sheet = CharacterSheet(fixes={"Strength": 1})
        assert PLAYERS.find_counter("Strength").get_value(sheet) is None

    @pytest.mark.parametrize("fix", [3, -3])
    def test_hidden_counter_ignores_fix(self, fix: int) -> None:
        counter = GameCounter("Secret", hidden=True)
        sheet = CharacterSheet(counters={"Secret": 10}, fixes={"Secret": fix})
        assert counter.get_value(sheet) == 10
