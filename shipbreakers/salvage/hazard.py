"""Success chance and failure damage for a single hazard encounter."""

from __future__ import annotations

from collections.abc import Iterable

from ..config import DEFAULT_CONSTANTS, SalvageConstants
from ..crew.models import SkillType, Skills
from ..data.effects import EquipmentEffect, sum_effects
from ..wreck.models import HazardType

HAZARD_SKILLS: dict[HazardType, SkillType] = {
    HazardType.MECHANICAL: SkillType.TECHNICAL,
    HazardType.COMBAT: SkillType.COMBAT,
    HazardType.ENVIRONMENTAL: SkillType.PILOTING,
    HazardType.SECURITY: SkillType.TECHNICAL,
}


def skill_for_hazard(hazard_type: HazardType | str) -> SkillType:
    """Return the skill a hazard tests, falling back to salvage for unknown kinds."""

    try:
        return HAZARD_SKILLS[HazardType(hazard_type)]
    except ValueError:
        return SkillType.SALVAGE


def resolve_hazard(
    skills: Skills,
    hazard_type: HazardType | str,
    hazard_level: int,
    tier: int,
    equipment_effects: Iterable[EquipmentEffect] = (),
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> float:
    """Return the percentage chance in ``[0, 100]`` of beating a hazard.

    The crew's best skill stands in for the matching one, so generalists are
    never worse than their strongest discipline. Specialists whose best skill
    is the matching one get a bonus; deep wrecks punish a weak matching skill.
    """

    effects = list(equipment_effects)
    skill = skill_for_hazard(hazard_type)
    matching = skills.get(skill)
    best = skills.best
    hazard_key = hazard_type.value if isinstance(hazard_type, HazardType) else str(hazard_type)

    skill_value = max(matching, best) + sum_effects(effects, "skill_bonus", target=skill.value)
    chance = (
        skill_value * constants.skill_success_multiplier
        - hazard_level * constants.hazard_level_penalty
        + sum_effects(effects, "hazard_resist", target=hazard_key)
    )
    if matching == best and matching >= constants.specialization_min_skill:
        chance += constants.specialization_bonus
    if tier >= constants.mismatch_tier_threshold and matching < constants.mismatch_skill_threshold:
        chance -= constants.mismatch_penalty
    return float(max(0.0, min(100.0, chance)))


def damage_on_fail(
    hazard_level: int,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> int:
    return max(0, hazard_level) * constants.damage_per_hazard_level


__all__ = ["HAZARD_SKILLS", "damage_on_fail", "resolve_hazard", "skill_for_hazard"]
