"""Crew member records, skills, and injury state."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum

from ..wreck.models import LootItem


class SkillType(str, Enum):
    """Skills tested by room hazards."""

    TECHNICAL = "technical"
    COMBAT = "combat"
    SALVAGE = "salvage"
    PILOTING = "piloting"


class CrewStatus(str, Enum):
    ACTIVE = "active"
    RESTING = "resting"
    INJURED = "injured"
    BREAKDOWN = "breakdown"


class CrewPosition(str, Enum):
    STATION = "station"
    WRECK = "wreck"


class InjurySeverity(str, Enum):
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


class InjuryType(str, Enum):
    BROKEN_ARM = "broken_arm"
    BROKEN_LEG = "broken_leg"
    CONCUSSION = "concussion"
    RADIATION_SICKNESS = "radiation_sickness"
    BURNS = "burns"
    TRAUMA = "trauma"
    INTERNAL_BLEEDING = "internal_bleeding"


@dataclass(frozen=True, slots=True)
class Skills:
    """Per-skill integer values, used for both levels and accumulated XP."""

    technical: int = 1
    combat: int = 1
    salvage: int = 1
    piloting: int = 1

    def get(self, skill: SkillType | str) -> int:
        return int(getattr(self, SkillType(skill).value))

    def with_value(self, skill: SkillType | str, value: int) -> Skills:
        return replace(self, **{SkillType(skill).value: int(value)})

    def add(self, skill: SkillType | str, amount: int) -> Skills:
        return self.with_value(skill, self.get(skill) + amount)

    @property
    def best(self) -> int:
        return max(self.technical, self.combat, self.salvage, self.piloting)

    def as_dict(self) -> dict[SkillType, int]:
        return {skill: self.get(skill) for skill in SkillType}

    @staticmethod
    def zero() -> Skills:
        return Skills(technical=0, combat=0, salvage=0, piloting=0)

    @staticmethod
    def from_mapping(payload: Mapping[str, int], *, default: int = 1) -> Skills:
        values = {skill.value: int(payload.get(skill.value, default)) for skill in SkillType}
        return Skills(**values)


@dataclass(frozen=True)
class InjuryEffects:
    """Penalties an injury imposes until it heals."""

    skill_penalty: Mapping[SkillType, int] = field(default_factory=dict)
    stamina_modifier: int = 0
    work_disabled: bool = False


@dataclass(frozen=True)
class Injury:
    type: InjuryType
    severity: InjurySeverity
    days_remaining: int
    effects: InjuryEffects = field(default_factory=InjuryEffects)
    days_suffered: int = 0

    def tick(self) -> Injury:
        """Return the injury one day further along its recovery."""

        return replace(
            self,
            days_remaining=self.days_remaining - 1,
            days_suffered=self.days_suffered + 1,
        )

    @property
    def healed(self) -> bool:
        return self.days_remaining <= 0


@dataclass(frozen=True)
class DeadCrewMember:
    """Archival record of a crew member lost on the job."""

    id: str
    name: str
    background: str
    traits: tuple[str, ...]
    died_on_day: int
    cause: str
    days_employed: int


@dataclass
class CrewMember:
    """A hired salvager and their current condition.

    Resolution code never edits a member in place; it builds a new record with
    :func:`dataclasses.replace` and swaps it into the roster.
    """

    id: str
    name: str
    background: str = "drifter"
    skills: Skills = field(default_factory=Skills)
    skill_xp: Skills = field(default_factory=Skills.zero)
    hp: int = 100
    max_hp: int = 100
    stamina: int = 100
    max_stamina: int = 100
    sanity: int = 100
    max_sanity: int = 100
    traits: tuple[str, ...] = ()
    morale: float = 75.0
    status: CrewStatus = CrewStatus.ACTIVE
    injury: Injury | None = None
    inventory: tuple[LootItem, ...] = ()
    position: CrewPosition = CrewPosition.STATION
    hired_day: int = 1

    def __post_init__(self) -> None:
        self.morale = max(0.0, min(100.0, float(self.morale)))
        self.traits = tuple(str(trait) for trait in self.traits)
        self.inventory = tuple(self.inventory)
        self.status = CrewStatus(self.status)
        self.position = CrewPosition(self.position)
        if self.max_hp <= 0:
            raise ValueError("max_hp must be positive")

    @property
    def hp_percent(self) -> float:
        return self.hp / self.max_hp * 100.0

    @property
    def is_carrying(self) -> bool:
        return bool(self.inventory)

    @property
    def work_disabled(self) -> bool:
        return self.injury is not None and self.injury.effects.work_disabled

    def has_trait(self, trait_id: str) -> bool:
        return trait_id in self.traits


def find_member(roster: Iterable[CrewMember], crew_id: str) -> CrewMember | None:
    for member in roster:
        if member.id == crew_id:
            return member
    return None


def replace_member(roster: Iterable[CrewMember], updated: CrewMember) -> list[CrewMember]:
    """Return ``roster`` with the member sharing ``updated.id`` swapped out."""

    return [updated if member.id == updated.id else member for member in roster]


__all__ = [
    "CrewMember",
    "CrewPosition",
    "CrewStatus",
    "DeadCrewMember",
    "Injury",
    "InjuryEffects",
    "InjurySeverity",
    "InjuryType",
    "SkillType",
    "Skills",
    "find_member",
    "replace_member",
]
