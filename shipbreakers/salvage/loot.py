"""Scale an item's base value by crew skill and equipment."""

from __future__ import annotations

from collections.abc import Iterable
import math

from ..config import DEFAULT_CONSTANTS, SalvageConstants
from ..data.effects import EquipmentEffect, sum_effects


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def valuate(
    base_value: float,
    salvage_skill: int,
    equipment_effects: Iterable[EquipmentEffect] = (),
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> int:
    """Return the credit value of an item salvaged by someone with ``salvage_skill``.

    Each salvage level above the first adds ten percent; ``loot_bonus``
    equipment adds its value as a percentage on top.
    """

    skill_multiplier = 1 + max(0, salvage_skill - 1) * constants.salvage_value_bonus_per_level
    equipment_multiplier = 1 + sum_effects(equipment_effects, "loot_bonus") / 100
    return round_half_up(base_value * skill_multiplier * equipment_multiplier)


__all__ = ["round_half_up", "valuate"]
