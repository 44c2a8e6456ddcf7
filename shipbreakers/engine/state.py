"""The single mutable aggregate every salvage component reads and writes."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..config import CrewThresholds, ExpeditionConfig, SalvageConstants
from ..crew.models import CrewMember, DeadCrewMember, SkillType, find_member, replace_member
from ..crew.relationships import RelationshipLedger
from ..data.effects import EquipmentEffect, load_equipment_effects
from ..events.channels import NotificationChannel, NotificationRecord
from ..rng import RandomSource
from ..wreck.cargo import CargoHold
from ..wreck.models import Wreck

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from ..salvage.scheduler import AutoSalvageTask


class RunStatus(str, Enum):
    TRAVELING = "traveling"
    SALVAGING = "salvaging"
    COMPLETED = "completed"
    RETURNING = "returning"


@dataclass
class RunStats:
    rooms_attempted: int = 0
    rooms_succeeded: int = 0
    rooms_failed: int = 0
    damage_taken: int = 0
    fuel_spent: int = 0
    xp_gained: dict[SkillType, int] = field(default_factory=lambda: dict.fromkeys(SkillType, 0))


@dataclass
class RunState:
    """One trip to one wreck, from departure until the loot is sold."""

    wreck_id: str
    status: RunStatus
    time_remaining: int
    cargo: CargoHold
    stats: RunStats = field(default_factory=RunStats)
    crew_worked: list[str] = field(default_factory=list)

    @property
    def collected_loot(self) -> tuple:
        return tuple(self.cargo)

    def spend_time(self, amount: int) -> int:
        """Deduct ``amount`` from the time budget, never going below zero."""

        self.time_remaining = max(0, self.time_remaining - amount)
        return self.time_remaining

    def mark_worked(self, crew_id: str) -> None:
        if crew_id not in self.crew_worked:
            self.crew_worked.append(crew_id)


@dataclass
class Provisions:
    food: int = 20
    drink: int = 20
    days_without_food: int = 0


@dataclass
class CareerStats:
    total_credits_earned: int = 0
    wrecks_completed: int = 0
    days_played: int = 0
    crew_lost: int = 0
    items_sold: int = 0


@dataclass
class GameState:
    """Crew, ship, wrecks, and the active run.

    Passed explicitly into every engine function; nothing in the package
    keeps module-level game state.
    """

    crew: list[CrewMember]
    wrecks: list[Wreck]
    rng: RandomSource
    constants: SalvageConstants = field(default_factory=SalvageConstants)
    thresholds: CrewThresholds = field(default_factory=CrewThresholds)
    relationships: RelationshipLedger = field(default_factory=RelationshipLedger)
    channel: NotificationChannel = field(default_factory=NotificationChannel)
    equipment_effects: list[EquipmentEffect] = field(default_factory=list)
    cargo_capacity: int = 10
    fuel: int = 100
    credits: int = 0
    day: int = 1
    provisions: Provisions = field(default_factory=Provisions)
    current_run: RunState | None = None
    dead_crew: list[DeadCrewMember] = field(default_factory=list)
    stats: CareerStats = field(default_factory=CareerStats)
    auto_salvage_delay: float = 0.5
    auto_salvage: AutoSalvageTask | None = None

    @classmethod
    def from_config(
        cls,
        config: ExpeditionConfig,
        *,
        crew: Iterable[CrewMember],
        wrecks: Iterable[Wreck],
        equipment_effects: Iterable[Any] = (),
        rng: RandomSource | None = None,
    ) -> GameState:
        """Build a state from validated configuration.

        Without an explicit ``rng`` the ``salvage`` stream of the configured
        seed is used, so two states built from the same config roll alike.
        """

        roster = list(crew)
        relationships = RelationshipLedger(
            starting_level=config.constants.starting_relationship,
            history_limit=config.constants.relationship_history_limit,
        )
        for index, member in enumerate(roster):
            relationships.introduce(member.id, [other.id for other in roster[:index]])
        return cls(
            crew=roster,
            wrecks=list(wrecks),
            rng=rng or config.randomness.factory().generator("salvage"),
            constants=config.constants,
            thresholds=config.thresholds,
            relationships=relationships,
            equipment_effects=load_equipment_effects(equipment_effects),
            cargo_capacity=config.cargo_capacity,
            fuel=config.starting_fuel,
            credits=config.starting_credits,
            auto_salvage_delay=config.auto_salvage_delay,
        )

    # ------------------------------------------------------------------
    def wreck(self, wreck_id: str) -> Wreck | None:
        for wreck in self.wrecks:
            if wreck.id == wreck_id:
                return wreck
        return None

    def run_wreck(self) -> Wreck | None:
        """Return the wreck of the active run, if both exist."""

        if self.current_run is None:
            return None
        return self.wreck(self.current_run.wreck_id)

    def member(self, crew_id: str) -> CrewMember | None:
        return find_member(self.crew, crew_id)

    def replace_member(self, updated: CrewMember) -> None:
        self.crew = replace_member(self.crew, updated)

    def notify(
        self,
        message: str,
        *,
        category: str = "info",
        payload: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        return self.channel.notify(self.day, message, category=category, payload=payload)


__all__ = [
    "CareerStats",
    "GameState",
    "Provisions",
    "RunState",
    "RunStats",
    "RunStatus",
]
