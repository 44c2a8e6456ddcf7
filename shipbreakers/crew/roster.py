"""Roster-level crew rules: availability, status, morale, and progression."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
import logging

from ..config import DEFAULT_CONSTANTS, DEFAULT_THRESHOLDS, CrewThresholds, SalvageConstants
from .injuries import effective_max_stamina
from .models import CrewMember, CrewStatus, SkillType
from .relationships import RelationshipLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CrewAvailability:
    available: bool
    reason: str | None = None


def check_availability(
    crew: CrewMember,
    thresholds: CrewThresholds = DEFAULT_THRESHOLDS,
) -> CrewAvailability:
    """Return whether ``crew`` may be sent into a room and why not if refused."""

    if crew.status is not CrewStatus.ACTIVE:
        return CrewAvailability(False, f"{crew.name} is {crew.status.value}")
    if crew.work_disabled:
        return CrewAvailability(False, f"{crew.name} is too injured to work")
    if crew.hp_percent < thresholds.min_hp_percent:
        return CrewAvailability(False, f"{crew.name} is below {thresholds.min_hp_percent:g}% health")
    if crew.stamina < thresholds.min_stamina:
        return CrewAvailability(False, f"{crew.name} is exhausted")
    if crew.sanity < thresholds.min_sanity:
        return CrewAvailability(False, f"{crew.name} is too shaken to work")
    return CrewAvailability(True)


def determine_crew_status(
    crew: CrewMember,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> CrewStatus:
    """Derive a member's status from their current condition.

    Resting crew keep resting until every meter reaches its ready level.
    """

    if crew.injury is not None:
        return CrewStatus.INJURED
    if crew.sanity <= 0:
        return CrewStatus.BREAKDOWN
    if crew.status is CrewStatus.RESTING:
        ready = (
            crew.hp >= constants.rest_ready_hp
            and crew.stamina >= constants.rest_ready_stamina
            and crew.sanity >= constants.rest_ready_sanity
        )
        return CrewStatus.ACTIVE if ready else CrewStatus.RESTING
    if crew.hp < constants.injured_hp_threshold:
        return CrewStatus.INJURED
    return CrewStatus.ACTIVE


def start_resting(crew: CrewMember) -> CrewMember:
    """Stand a member down so station recovery can restore them."""

    if crew.injury is not None:
        return crew
    return replace(crew, status=CrewStatus.RESTING)


def update_morale(crew: CrewMember, delta: float) -> CrewMember:
    return replace(crew, morale=max(0.0, min(100.0, crew.morale + delta)))


def apply_morale_impacts(
    roster: Iterable[CrewMember],
    impacts: Mapping[str, float],
) -> list[CrewMember]:
    return [
        update_morale(member, impacts[member.id]) if member.id in impacts else member
        for member in roster
    ]


def daily_morale(
    roster: Sequence[CrewMember],
    relationships: RelationshipLedger,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> list[CrewMember]:
    """Apply one day of morale recovery plus each member's bond bonus."""

    bonuses = {
        row["crew_id"]: row["bonus"]
        for row in relationships.morale_bonus_frame().iter_rows(named=True)
    }
    return [
        update_morale(member, constants.morale_recovery_per_day + bonuses.get(member.id, 0))
        for member in roster
    ]


def gain_skill_xp(
    crew: CrewMember,
    skill: SkillType,
    amount: int,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> tuple[CrewMember, bool]:
    """Add ``amount`` XP to ``skill`` and level it up as thresholds are crossed.

    Level ``n`` to ``n + 1`` needs the cumulative sum of the first ``n``
    thresholds. Returns the updated member and whether a level was gained.
    """

    if amount <= 0:
        return crew, False
    total_xp = crew.skill_xp.get(skill) + amount
    level = crew.skills.get(skill)
    thresholds = constants.skill_xp_thresholds
    start_level = level
    while level < constants.max_skill_level and level - 1 < len(thresholds):
        if total_xp < sum(thresholds[:level]):
            break
        level += 1
    updated = replace(
        crew,
        skill_xp=crew.skill_xp.with_value(skill, total_xp),
        skills=crew.skills.with_value(skill, level),
    )
    if level > start_level:
        logger.info("%s reached %s level %d", crew.name, skill.value, level)
    return updated, level > start_level


def apply_station_recovery(
    crew: CrewMember,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> CrewMember:
    """Restore a member on arrival at the station.

    Resting crew recover faster and may return to active duty. An injury
    lowers the stamina ceiling until it heals.
    """

    stamina_cap = effective_max_stamina(crew)
    if crew.status is CrewStatus.RESTING:
        hp = min(crew.max_hp, crew.hp + constants.rest_hp_recovery)
        stamina = min(stamina_cap, crew.stamina + constants.rest_stamina_recovery)
        sanity = min(crew.max_sanity, crew.sanity + constants.rest_sanity_recovery)
    else:
        hp = crew.hp
        stamina = min(stamina_cap, crew.stamina + constants.station_stamina_recovery)
        sanity = min(crew.max_sanity, crew.sanity + constants.station_sanity_recovery)
    updated = replace(crew, hp=hp, stamina=stamina, sanity=sanity)
    return replace(updated, status=determine_crew_status(updated, constants))


__all__ = [
    "CrewAvailability",
    "apply_morale_impacts",
    "apply_station_recovery",
    "check_availability",
    "daily_morale",
    "determine_crew_status",
    "gain_skill_xp",
    "start_resting",
    "update_morale",
]
