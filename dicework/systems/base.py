"""Character systems: the set of counters one kind of character sheet has."""

from __future__ import annotations

from collections.abc import Iterable

from dicework.counters import CharacterSheet, GameCounter


class CharacterSystem:
    """A named collection of counters, looked up by name or alias.

    Lookups ignore case. Names and aliases must be unique within a system.
    """

    def __init__(self, name: str, counters: Iterable[GameCounter]) -> None:
        self.name = name
        self.counters: list[GameCounter] = list(counters)
        self._by_key: dict[str, GameCounter] = {}
        for counter in self.counters:
            for key in (counter.name, counter.alias):
                if not key:
                    continue
                folded = key.casefold()
                if folded in self._by_key:
                    raise ValueError(f"Duplicate counter name or alias in {name}: {key!r}")
                self._by_key[folded] = counter

    def __repr__(self) -> str:
        return f"CharacterSystem({self.name!r}, {len(self.counters)} counters)"

    def find_counter(self, name_or_alias: str) -> GameCounter | None:
        return self._by_key.get(name_or_alias.strip().casefold())

    def summary(self, character: CharacterSheet) -> dict[str, int | None]:
        """Every visible counter's value, fixes applied."""
        return {c.name: c.get_value(character) for c in self.counters if not c.hidden}
