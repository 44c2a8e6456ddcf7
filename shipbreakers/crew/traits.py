"""Aggregate a crew member's traits into numeric modifiers and behaviour flags."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..data.effects import TraitDefinition
from ..data.traits import TRAITS

_MODIFIER_FIELDS = {
    "skill_mod": "skill_mod",
    "stamina_mod": "stamina_mod",
    "sanity_mod": "sanity_mod",
    "event_chance": "event_mod",
    "loot_bonus": "loot_mod",
    "work_speed": "work_speed_mod",
}


@dataclass(frozen=True, slots=True)
class TraitModifiers:
    """Additive percentage modifiers contributed by traits."""

    skill_mod: int = 0
    stamina_mod: int = 0
    sanity_mod: int = 0
    event_mod: int = 0
    loot_mod: int = 0
    work_speed_mod: int = 0


@dataclass(frozen=True, slots=True)
class SpecialTraits:
    """Traits whose behaviour is not a plain number."""

    has_greedy: bool = False
    has_coward: bool = False
    has_pragmatic: bool = False
    has_brave: bool = False


def calculate_trait_effects(
    traits: Iterable[str],
    table: Mapping[str, TraitDefinition] = TRAITS,
) -> TraitModifiers:
    """Sum every typed effect of ``traits`` into a :class:`TraitModifiers`.

    Unknown trait ids contribute nothing. ``special`` effects are ignored here
    and surfaced through :func:`get_special_traits` instead.
    """

    totals = dict.fromkeys(_MODIFIER_FIELDS.values(), 0)
    for trait_id in traits:
        definition = table.get(trait_id)
        if definition is None:
            continue
        for effect in definition.effects:
            field_name = _MODIFIER_FIELDS.get(effect.type)
            if field_name is not None:
                totals[field_name] += effect.value
    return TraitModifiers(**totals)


def get_special_traits(traits: Iterable[str]) -> SpecialTraits:
    owned = set(traits)
    return SpecialTraits(
        has_greedy="greedy" in owned,
        has_coward="coward" in owned,
        has_pragmatic="pragmatic" in owned,
        has_brave="brave" in owned,
    )


__all__ = [
    "SpecialTraits",
    "TraitModifiers",
    "calculate_trait_effects",
    "get_special_traits",
]
