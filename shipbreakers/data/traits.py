"""Static crew trait table."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..rng import RandomSource
from .effects import TraitCategory, TraitDefinition, load_trait_table

_RAW_TRAITS: dict[str, dict[str, Any]] = {
    # positive
    "brave": {
        "name": "Brave",
        "description": "Faces danger head-on. Won't flee.",
        "category": "positive",
        "effects": [{"type": "event_chance", "target": "horror", "value": -20}],
    },
    "lucky": {
        "name": "Lucky",
        "description": "Fortune favors them.",
        "category": "positive",
        "effects": [{"type": "event_chance", "target": "all", "value": 5}],
    },
    "efficient": {
        "name": "Efficient",
        "description": "Gets work done faster.",
        "category": "positive",
        "effects": [{"type": "work_speed", "value": -15}],
    },
    "eagle_eye": {
        "name": "Eagle Eye",
        "description": "Spots hidden loot.",
        "category": "positive",
        "effects": [{"type": "loot_bonus", "value": 10}],
    },
    "loyal": {
        "name": "Loyal",
        "description": "Bonds deeply with crewmates.",
        "category": "positive",
        "effects": [{"type": "sanity_mod", "target": "crew_bond", "value": 10}],
    },
    "steady": {
        "name": "Steady",
        "description": "Unflappable under pressure.",
        "category": "positive",
        "effects": [{"type": "sanity_mod", "target": "loss_rate", "value": -30}],
    },
    "tireless": {
        "name": "Tireless",
        "description": "Keeps going when others rest.",
        "category": "positive",
        "effects": [{"type": "stamina_mod", "target": "consumption", "value": -20}],
    },
    # negative
    "greedy": {
        "name": "Greedy",
        "description": "May pocket small items.",
        "category": "negative",
        "effects": [{"type": "special", "value": 1, "description": "5% steal chance"}],
    },
    "coward": {
        "name": "Coward",
        "description": "May flee from danger.",
        "category": "negative",
        "effects": [{"type": "special", "value": 1, "description": "20% flee chance"}],
    },
    "reckless": {
        "name": "Reckless",
        "description": "Higher chance of injury.",
        "category": "negative",
        "effects": [{"type": "event_chance", "target": "injury", "value": 15}],
    },
    "lazy": {
        "name": "Lazy",
        "description": "Work takes longer.",
        "category": "negative",
        "effects": [{"type": "work_speed", "value": 25}],
    },
    "paranoid": {
        "name": "Paranoid",
        "description": "Worse social outcomes.",
        "category": "negative",
        "effects": [{"type": "event_chance", "target": "social", "value": -20}],
    },
    "addicted": {
        "name": "Addicted",
        "description": "Needs luxury drinks.",
        "category": "negative",
        "effects": [{"type": "sanity_mod", "target": "no_luxury", "value": -10}],
    },
    "clumsy": {
        "name": "Clumsy",
        "description": "More equipment damage.",
        "category": "negative",
        "effects": [{"type": "event_chance", "target": "equipment_damage", "value": 10}],
    },
    # neutral
    "quiet": {
        "name": "Quiet",
        "description": "Fewer social events.",
        "category": "neutral",
        "effects": [{"type": "event_chance", "target": "social", "value": -50}],
    },
    "veteran": {
        "name": "Veteran",
        "description": "Better combat, worse horror resist.",
        "category": "neutral",
        "effects": [
            {"type": "skill_mod", "target": "combat", "value": 10},
            {"type": "event_chance", "target": "horror", "value": 10},
        ],
    },
    "idealist": {
        "name": "Idealist",
        "description": "Strong reactions to moral choices.",
        "category": "neutral",
        "effects": [
            {"type": "sanity_mod", "target": "good_event", "value": 15},
            {"type": "sanity_mod", "target": "bad_event", "value": -15},
        ],
    },
    "pragmatic": {
        "name": "Pragmatic",
        "description": "Unaffected by moral choices.",
        "category": "neutral",
        "effects": [{"type": "special", "value": 1, "description": "No moral sanity change"}],
    },
}

TRAITS: Mapping[str, TraitDefinition] = load_trait_table(_RAW_TRAITS)


def traits_in_category(
    category: TraitCategory | str,
    table: Mapping[str, TraitDefinition] = TRAITS,
) -> list[str]:
    """Return trait ids of ``category`` in table order."""

    wanted = TraitCategory(category)
    return [trait_id for trait_id, trait in table.items() if trait.category is wanted]


def random_traits(pool: Sequence[str], count: int, rng: RandomSource) -> list[str]:
    """Draw up to ``count`` distinct traits from ``pool`` without replacement."""

    remaining = list(pool)
    chosen: list[str] = []
    while remaining and len(chosen) < count:
        index = min(int(float(rng.random()) * len(remaining)), len(remaining) - 1)
        chosen.append(remaining.pop(index))
    return chosen


__all__ = ["TRAITS", "random_traits", "traits_in_category"]
