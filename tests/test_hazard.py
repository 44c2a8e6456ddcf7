"""Hazard success chance and failure damage."""

from __future__ import annotations

from itertools import product
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipbreakers.crew.models import SkillType, Skills
from shipbreakers.data.effects import load_equipment_effects
from shipbreakers.salvage.hazard import damage_on_fail, resolve_hazard, skill_for_hazard
from shipbreakers.wreck.models import HazardType


def test_best_skill_substitutes_for_weak_matching_skill() -> None:
    skills = Skills(technical=1, combat=1, salvage=2, piloting=1)
    chance = resolve_hazard(skills, HazardType.MECHANICAL, 0, 1)
    assert chance == pytest.approx(44.0)


def test_specialist_bonus_applies_when_matching_skill_is_best() -> None:
    skills = Skills(technical=3, combat=1, salvage=1, piloting=1)
    assert resolve_hazard(skills, HazardType.MECHANICAL, 1, 1) == pytest.approx(63.0)


def test_specialist_bonus_needs_minimum_skill() -> None:
    skills = Skills(technical=2, combat=1, salvage=1, piloting=1)
    assert resolve_hazard(skills, HazardType.SECURITY, 1, 1) == pytest.approx(36.0)


def test_deep_wrecks_punish_weak_matching_skill() -> None:
    skills = Skills(technical=2, combat=1, salvage=4, piloting=1)
    # 4 * 22 - 2 * 8, then -15 for a matching skill below 3 on tier 3
    assert resolve_hazard(skills, HazardType.MECHANICAL, 2, 3) == pytest.approx(57.0)
    assert resolve_hazard(skills, HazardType.MECHANICAL, 2, 2) == pytest.approx(72.0)


def test_equipment_adds_skill_and_resistance() -> None:
    effects = load_equipment_effects(
        [
            {"type": "skill_bonus", "target": "technical", "value": 1},
            {"type": "hazard_resist", "target": "mechanical", "value": 10},
            {"type": "hazard_resist", "target": "combat", "value": 50},
        ]
    )
    skills = Skills(technical=3, combat=1, salvage=1, piloting=1)
    # (3 + 1) * 22 - 8 + 10 + 5
    assert resolve_hazard(skills, HazardType.MECHANICAL, 1, 1, effects) == pytest.approx(95.0)


def test_chance_is_clamped() -> None:
    expert = Skills(technical=5, combat=5, salvage=5, piloting=5)
    novice = Skills()
    assert resolve_hazard(expert, HazardType.COMBAT, 0, 1) == 100.0
    assert resolve_hazard(novice, HazardType.COMBAT, 5, 5) == 0.0


def test_chance_stays_in_bounds_for_every_combination() -> None:
    hazard_types = [*HazardType, "void"]
    for level, tier, skill_value, hazard in product(range(6), range(1, 6), range(1, 6), hazard_types):
        for skills in (
            Skills(skill_value, skill_value, skill_value, skill_value),
            Skills(technical=skill_value),
            Skills(combat=skill_value, piloting=6 - skill_value),
        ):
            chance = resolve_hazard(skills, hazard, level, tier)
            assert 0.0 <= chance <= 100.0


def test_unknown_hazard_falls_back_to_salvage() -> None:
    assert skill_for_hazard("void") is SkillType.SALVAGE
    skills = Skills(technical=1, combat=1, salvage=3, piloting=1)
    assert resolve_hazard(skills, "void", 0, 1) == pytest.approx(71.0)


@pytest.mark.parametrize(
    ("hazard", "skill"),
    [
        (HazardType.MECHANICAL, SkillType.TECHNICAL),
        (HazardType.COMBAT, SkillType.COMBAT),
        (HazardType.ENVIRONMENTAL, SkillType.PILOTING),
        (HazardType.SECURITY, SkillType.TECHNICAL),
        ("combat", SkillType.COMBAT),
    ],
)
def test_hazard_skill_mapping(hazard: HazardType | str, skill: SkillType) -> None:
    assert skill_for_hazard(hazard) is skill


def test_damage_scales_with_level() -> None:
    damages = [damage_on_fail(level) for level in range(6)]
    assert damages[0] == 0
    assert damages[3] == 30
    assert damages == sorted(damages)
