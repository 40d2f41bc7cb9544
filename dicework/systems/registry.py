"""Lookup of the built-in character systems by name."""

from __future__ import annotations

from dicework.systems import dragonbane, swn, thirteenth_age
from dicework.systems.base import CharacterSystem

SYSTEMS: dict[str, CharacterSystem] = {
    system.name: system
    for system in (
        swn.build_player_system(),
        swn.build_monster_system(),
        thirteenth_age.build_system(),
        dragonbane.build_system(),
    )
}


def get_system(name: str) -> CharacterSystem | None:
    return SYSTEMS.get(name.strip().lower())
