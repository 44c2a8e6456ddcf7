"""Crew-down resolution, injury tables, and daily recovery."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
import math

from ..config import DEFAULT_CONSTANTS, SalvageConstants
from ..rng import RandomSource, choose, roll_chance
from .models import (
    CrewMember,
    CrewStatus,
    DeadCrewMember,
    Injury,
    InjuryEffects,
    InjurySeverity,
    InjuryType,
    SkillType,
    Skills,
)
from .relationships import RelationshipLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InjuryProfile:
    """Recovery time and penalties of one injury type at each severity."""

    name: str
    description: str
    severity_days: Mapping[InjurySeverity, int]
    effects: Mapping[InjurySeverity, InjuryEffects]


def _effects(work_disabled: bool = False, stamina: int = 0, **penalty: int) -> InjuryEffects:
    return InjuryEffects(
        skill_penalty={SkillType(skill): value for skill, value in penalty.items()},
        stamina_modifier=stamina,
        work_disabled=work_disabled,
    )


_MINOR, _MAJOR, _CRITICAL = InjurySeverity.MINOR, InjurySeverity.MAJOR, InjurySeverity.CRITICAL

INJURY_PROFILES: dict[InjuryType, InjuryProfile] = {
    InjuryType.BROKEN_ARM: InjuryProfile(
        name="Broken Arm",
        description="Fractured arm bone limits manual dexterity",
        severity_days={_MINOR: 3, _MAJOR: 7, _CRITICAL: 14},
        effects={
            _MINOR: _effects(technical=-1),
            _MAJOR: _effects(technical=-2, salvage=-1),
            _CRITICAL: _effects(True, technical=-3, salvage=-2),
        },
    ),
    InjuryType.BROKEN_LEG: InjuryProfile(
        name="Broken Leg",
        description="Leg fracture slows movement and piloting",
        severity_days={_MINOR: 4, _MAJOR: 10, _CRITICAL: 18},
        effects={
            _MINOR: _effects(stamina=-20, piloting=-1),
            _MAJOR: _effects(stamina=-40, piloting=-2),
            _CRITICAL: _effects(True, stamina=-60),
        },
    ),
    InjuryType.CONCUSSION: InjuryProfile(
        name="Concussion",
        description="Head trauma clouds reactions and focus",
        severity_days={_MINOR: 2, _MAJOR: 5, _CRITICAL: 10},
        effects={
            _MINOR: _effects(combat=-1),
            _MAJOR: _effects(combat=-2, technical=-1),
            _CRITICAL: _effects(True, combat=-3, technical=-2),
        },
    ),
    InjuryType.RADIATION_SICKNESS: InjuryProfile(
        name="Radiation Sickness",
        description="Exposure saps strength and endurance",
        severity_days={_MINOR: 3, _MAJOR: 8, _CRITICAL: 15},
        effects={
            _MINOR: _effects(stamina=-15),
            _MAJOR: _effects(stamina=-30, salvage=-1),
            _CRITICAL: _effects(True, stamina=-50),
        },
    ),
    InjuryType.BURNS: InjuryProfile(
        name="Burns",
        description="Plasma or fire burns make handling tools painful",
        severity_days={_MINOR: 2, _MAJOR: 6, _CRITICAL: 12},
        effects={
            _MINOR: _effects(technical=-1),
            _MAJOR: _effects(stamina=-20, technical=-1, salvage=-1),
            _CRITICAL: _effects(True, stamina=-40),
        },
    ),
    InjuryType.TRAUMA: InjuryProfile(
        name="Trauma",
        description="Psychological shock from a close call",
        severity_days={_MINOR: 3, _MAJOR: 7, _CRITICAL: 14},
        effects={
            _MINOR: _effects(combat=-1),
            _MAJOR: _effects(combat=-2),
            _CRITICAL: _effects(True),
        },
    ),
    InjuryType.INTERNAL_BLEEDING: InjuryProfile(
        name="Internal Bleeding",
        description="Hidden injury that needs rest to mend",
        severity_days={_MINOR: 4, _MAJOR: 9, _CRITICAL: 16},
        effects={
            _MINOR: _effects(stamina=-25),
            _MAJOR: _effects(True, stamina=-50),
            _CRITICAL: _effects(True, stamina=-70),
        },
    ),
}

# Relative likelihood of each injury type per cause; unlisted types weigh 1.
CAUSE_WEIGHTS: dict[str, dict[InjuryType, float]] = {
    "salvage": {
        InjuryType.BROKEN_ARM: 2.0,
        InjuryType.BURNS: 2.0,
        InjuryType.RADIATION_SICKNESS: 1.5,
        InjuryType.CONCUSSION: 1.0,
    },
    "combat": {
        InjuryType.BROKEN_LEG: 1.5,
        InjuryType.INTERNAL_BLEEDING: 2.0,
        InjuryType.CONCUSSION: 2.0,
        InjuryType.TRAUMA: 1.0,
    },
    "accident": {
        InjuryType.BROKEN_ARM: 2.0,
        InjuryType.BROKEN_LEG: 2.0,
        InjuryType.CONCUSSION: 1.5,
        InjuryType.BURNS: 1.0,
    },
    "event": {
        InjuryType.TRAUMA: 2.0,
        InjuryType.BURNS: 1.0,
        InjuryType.RADIATION_SICKNESS: 1.5,
    },
}


class CrewDownOutcome(str, Enum):
    DEATH = "death"
    CRITICAL_INJURY = "critical_injury"
    INJURY = "injury"


@dataclass(frozen=True)
class MoraleImpact:
    crew_id: str
    amount: int
    reason: str


@dataclass(frozen=True)
class CrewDownResult:
    """What happened to a crew member whose HP reached zero."""

    outcome: CrewDownOutcome
    injury: Injury | None = None
    dead_record: DeadCrewMember | None = None
    morale_impacts: tuple[MoraleImpact, ...] = field(default_factory=tuple)

    @property
    def died(self) -> bool:
        return self.outcome is CrewDownOutcome.DEATH


# ------------------------------------------------------------------
def weighted_injury_pool(cause: str) -> list[InjuryType]:
    """Expand the cause's weight table into a pool sampled uniformly."""

    weights = CAUSE_WEIGHTS.get(cause, {})
    pool: list[InjuryType] = []
    for injury_type in InjuryType:
        weight = weights.get(injury_type, 1.0)
        pool.extend([injury_type] * math.ceil(weight * 10))
    return pool


def roll_injury_type(cause: str, rng: RandomSource) -> InjuryType:
    return choose(rng, weighted_injury_pool(cause))


def roll_injury_severity(
    is_critical: bool,
    rng: RandomSource,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> InjurySeverity:
    if is_critical:
        return InjurySeverity.CRITICAL
    if roll_chance(rng, constants.major_injury_chance):
        return InjurySeverity.MAJOR
    return InjurySeverity.MINOR


def create_injury(injury_type: InjuryType, severity: InjurySeverity) -> Injury:
    profile = INJURY_PROFILES[injury_type]
    return Injury(
        type=injury_type,
        severity=severity,
        days_remaining=profile.severity_days[severity],
        effects=profile.effects[severity],
    )


def handle_crew_down(
    crew: CrewMember,
    cause: str,
    day: int,
    relationships: RelationshipLedger,
    other_crew_ids: Iterable[str],
    *,
    rng: RandomSource,
    constants: SalvageConstants = DEFAULT_CONSTANTS,
    description: str | None = None,
) -> CrewDownResult:
    """Decide whether a downed crew member dies or survives with an injury.

    ``cause`` selects the injury weight table (``salvage``, ``combat``,
    ``accident`` or ``event``); ``description`` is what the memorial records.
    The result is pure data; :func:`apply_crew_down` commits it to a roster.
    Draw order is death roll, then critical roll, then severity (only when
    not critical), then injury type.
    """

    if roll_chance(rng, constants.death_chance_on_zero_hp):
        record = DeadCrewMember(
            id=crew.id,
            name=crew.name,
            background=crew.background,
            traits=tuple(crew.traits),
            died_on_day=day,
            cause=description or cause,
            days_employed=max(0, day - crew.hired_day),
        )
        impacts: list[MoraleImpact] = []
        for other_id in other_crew_ids:
            if other_id == crew.id:
                continue
            loss = constants.morale_loss_on_death
            if relationships.level(crew.id, other_id) >= constants.close_friend_level:
                loss += constants.morale_loss_close_friend
            impacts.append(MoraleImpact(crew_id=other_id, amount=-loss, reason=f"Lost {crew.name}"))
        logger.info("%s died (%s) on day %d", crew.name, cause, day)
        return CrewDownResult(
            outcome=CrewDownOutcome.DEATH,
            dead_record=record,
            morale_impacts=tuple(impacts),
        )

    is_critical = roll_chance(rng, constants.critical_injury_chance)
    severity = roll_injury_severity(is_critical, rng, constants)
    injury = create_injury(roll_injury_type(cause, rng), severity)
    logger.info("%s suffered %s %s", crew.name, severity.value, injury.type.value)
    return CrewDownResult(
        outcome=CrewDownOutcome.CRITICAL_INJURY if is_critical else CrewDownOutcome.INJURY,
        injury=injury,
    )


def apply_crew_down(
    roster: Sequence[CrewMember],
    crew: CrewMember,
    result: CrewDownResult,
    relationships: RelationshipLedger,
) -> list[CrewMember]:
    """Commit a :class:`CrewDownResult` and return the new roster.

    ``crew`` is the downed member's latest record. Death removes them and
    their bonds; survival leaves them injured at 1 HP.
    """

    if result.died:
        relationships.remove_crew(crew.id)
        impacts: dict[str, int] = {}
        for impact in result.morale_impacts:
            impacts[impact.crew_id] = impacts.get(impact.crew_id, 0) + impact.amount
        survivors: list[CrewMember] = []
        for member in roster:
            if member.id == crew.id:
                continue
            if member.id in impacts:
                member = replace(member, morale=member.morale + impacts[member.id])
            survivors.append(member)
        return survivors

    injured = replace(crew, injury=result.injury, status=CrewStatus.INJURED, hp=1)
    return [injured if member.id == crew.id else member for member in roster]


def process_injury_recovery(
    roster: Sequence[CrewMember],
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> tuple[list[CrewMember], list[str]]:
    """Advance every injury by one day.

    Returns the updated roster and the names of crew who healed. Uninjured
    members are returned as the very same objects.
    """

    recovered: list[str] = []
    updated: list[CrewMember] = []
    for member in roster:
        if member.injury is None:
            updated.append(member)
            continue
        injury = member.injury.tick()
        if injury.healed:
            recovered.append(member.name)
            floor_hp = math.floor(member.max_hp * constants.recovery_hp_fraction)
            updated.append(
                replace(
                    member,
                    injury=None,
                    status=CrewStatus.ACTIVE,
                    hp=max(member.hp, floor_hp),
                )
            )
        else:
            updated.append(replace(member, injury=injury))
    return updated, recovered


def effective_skills(crew: CrewMember) -> Skills:
    """Skills after injury penalties, never lower than 1."""

    if crew.injury is None or not crew.injury.effects.skill_penalty:
        return crew.skills
    skills = crew.skills
    for skill, penalty in crew.injury.effects.skill_penalty.items():
        skills = skills.with_value(skill, max(1, skills.get(skill) + penalty))
    return skills


def effective_max_stamina(crew: CrewMember) -> int:
    if crew.injury is None or not crew.injury.effects.stamina_modifier:
        return crew.max_stamina
    return math.floor(crew.max_stamina * (1 + crew.injury.effects.stamina_modifier / 100))


__all__ = [
    "CAUSE_WEIGHTS",
    "CrewDownOutcome",
    "CrewDownResult",
    "INJURY_PROFILES",
    "InjuryProfile",
    "MoraleImpact",
    "apply_crew_down",
    "create_injury",
    "effective_max_stamina",
    "effective_skills",
    "handle_crew_down",
    "process_injury_recovery",
    "roll_injury_severity",
    "roll_injury_type",
    "weighted_injury_pool",
]
