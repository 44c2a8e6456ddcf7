"""Tagged effect records for ship equipment and crew traits.

Effects arrive as loosely-typed mappings (``{"type": "loot_bonus", "value": 10}``)
from static data tables. They are validated into discriminated unions when the
table is loaded so that resolution code only ever sees well-formed records.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class _Effect(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    description: str = ""


# ------------------------------------------------------------------
# Equipment effects
# ------------------------------------------------------------------
class SkillBonusEffect(_Effect):
    """Adds ``value`` to the named skill when it is the one a hazard calls for."""

    type: Literal["skill_bonus"] = "skill_bonus"
    target: str
    value: float


class HazardResistEffect(_Effect):
    """Adds ``value`` percentage points against one hazard type."""

    type: Literal["hazard_resist"] = "hazard_resist"
    target: str
    value: float


class LootBonusEffect(_Effect):
    """Raises salvaged item value by ``value`` percent."""

    type: Literal["loot_bonus"] = "loot_bonus"
    target: str | None = None
    value: float


class FuelEfficiencyEffect(_Effect):
    """Reduces travel fuel cost by ``value`` percent."""

    type: Literal["fuel_efficiency"] = "fuel_efficiency"
    target: str | None = None
    value: float


EquipmentEffect = Annotated[
    SkillBonusEffect | HazardResistEffect | LootBonusEffect | FuelEfficiencyEffect,
    Field(discriminator="type"),
]

_EQUIPMENT_EFFECTS = TypeAdapter(list[EquipmentEffect])


def load_equipment_effects(payload: Iterable[Mapping[str, Any] | _Effect]) -> list[EquipmentEffect]:
    """Validate ``payload`` into typed equipment effects.

    Raises :class:`pydantic.ValidationError` when an entry carries an unknown
    ``type`` or is missing a required field.
    """

    entries = [
        entry.model_dump() if isinstance(entry, _Effect) else dict(entry)
        for entry in payload
    ]
    return _EQUIPMENT_EFFECTS.validate_python(entries)


def sum_effects(
    effects: Iterable[EquipmentEffect],
    effect_type: str,
    *,
    target: str | None = None,
) -> float:
    """Sum the ``value`` of effects of ``effect_type`` optionally matching ``target``."""

    total = 0.0
    for effect in effects:
        if effect.type != effect_type:
            continue
        if target is not None and effect.target != target:
            continue
        total += effect.value
    return total


# ------------------------------------------------------------------
# Trait effects
# ------------------------------------------------------------------
class TraitCategory(str, Enum):
    """Whether a trait generally helps or hinders its owner."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class _TraitEffect(_Effect):
    target: str | None = None
    value: int = 0


class SkillModEffect(_TraitEffect):
    type: Literal["skill_mod"] = "skill_mod"


class StaminaModEffect(_TraitEffect):
    type: Literal["stamina_mod"] = "stamina_mod"


class SanityModEffect(_TraitEffect):
    type: Literal["sanity_mod"] = "sanity_mod"


class EventChanceEffect(_TraitEffect):
    type: Literal["event_chance"] = "event_chance"


class TraitLootBonusEffect(_TraitEffect):
    type: Literal["loot_bonus"] = "loot_bonus"


class WorkSpeedEffect(_TraitEffect):
    type: Literal["work_speed"] = "work_speed"


class SpecialEffect(_TraitEffect):
    """Marks a behaviour that is resolved by flag rather than by sum."""

    type: Literal["special"] = "special"


TraitEffect = Annotated[
    SkillModEffect
    | StaminaModEffect
    | SanityModEffect
    | EventChanceEffect
    | TraitLootBonusEffect
    | WorkSpeedEffect
    | SpecialEffect,
    Field(discriminator="type"),
]


class TraitDefinition(BaseModel):
    """Static description of one crew trait."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    name: str
    description: str = ""
    category: TraitCategory
    effects: tuple[TraitEffect, ...] = ()

    @field_validator("id")
    @classmethod
    def _normalise_id(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("trait id cannot be empty")
        return value


_TRAIT_TABLE = TypeAdapter(dict[str, TraitDefinition])


def load_trait_table(payload: Mapping[str, Mapping[str, Any]]) -> dict[str, TraitDefinition]:
    """Validate a raw ``{trait_id: definition}`` mapping.

    Each definition's ``id`` defaults to its key and must agree with it.
    """

    prepared: dict[str, dict[str, Any]] = {}
    for key, definition in payload.items():
        entry = dict(definition)
        entry.setdefault("id", key)
        if str(entry["id"]).strip().lower() != str(key).strip().lower():
            raise ValueError(f"trait key {key!r} does not match id {entry['id']!r}")
        prepared[str(key).strip().lower()] = entry
    return _TRAIT_TABLE.validate_python(prepared)


__all__ = [
    "EquipmentEffect",
    "EventChanceEffect",
    "FuelEfficiencyEffect",
    "HazardResistEffect",
    "LootBonusEffect",
    "SanityModEffect",
    "SkillBonusEffect",
    "SkillModEffect",
    "SpecialEffect",
    "StaminaModEffect",
    "TraitCategory",
    "TraitDefinition",
    "TraitEffect",
    "TraitLootBonusEffect",
    "WorkSpeedEffect",
    "load_equipment_effects",
    "load_trait_table",
    "sum_effects",
]
