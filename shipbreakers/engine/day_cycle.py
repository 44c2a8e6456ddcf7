"""Daily upkeep: provisions, injury recovery, and morale."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Any, Literal

from ..crew.injuries import process_injury_recovery
from ..crew.roster import daily_morale
from ..events.channels import NotificationChannel, NotificationRecord
from .state import GameState
from .world import GameStateComponent, GameWorld

logger = logging.getLogger(__name__)

PhaseName = Literal["provisions", "recovery", "morale"]


@dataclass
class DayContext:
    """Shared state passed to each phase system for one day."""

    day: int
    channel: NotificationChannel
    summary_lines: list[str] = field(default_factory=list)
    notifications: list[NotificationRecord] = field(default_factory=list)
    recovered: list[str] = field(default_factory=list)

    def log(self, message: str) -> None:
        self.summary_lines.append(str(message))

    def notify(
        self,
        message: str,
        *,
        category: str = "info",
        payload: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        record = self.channel.notify(
            self.day, str(message), category=category, payload=payload
        )
        self.notifications.append(record)
        return record


def _state(world: GameWorld) -> GameState | None:
    component = world.get_singleton(GameStateComponent)
    return None if component is None else component.state


class ProvisionsSystem:
    """Feed and water the crew, applying starvation and thirst penalties."""

    def process(self, world: GameWorld, context: DayContext) -> None:
        state = _state(world)
        if state is None:
            return
        constants = state.constants
        provisions = state.provisions
        headcount = len(state.crew)
        food_needed = constants.daily_food_per_crew * headcount
        drink_needed = constants.daily_drink_per_crew * headcount

        if provisions.food >= food_needed:
            provisions.food -= food_needed
            provisions.days_without_food = 0
        else:
            provisions.food = 0
            provisions.days_without_food += 1
        thirsty = provisions.drink < drink_needed
        provisions.drink = max(0, provisions.drink - drink_needed)

        starving_days = provisions.days_without_food
        hp_loss = 0
        if starving_days >= constants.starvation_days_threshold:
            hp_loss = constants.starvation_hp_loss * (
                starving_days - constants.starvation_days_threshold + 1
            )
        sanity_loss = constants.dehydration_sanity_loss if thirsty else 0
        if not hp_loss and not sanity_loss:
            return
        # Starvation can wound but never kills outright.
        state.crew = [
            replace(
                member,
                hp=max(1, member.hp - hp_loss) if hp_loss else member.hp,
                sanity=max(0, member.sanity - sanity_loss),
            )
            for member in state.crew
        ]
        if hp_loss:
            context.log(f"starvation -{hp_loss} hp")
            context.notify(
                f"Crew starving ({starving_days} days without food)",
                category="provisions",
                payload={"hp_loss": hp_loss},
            )
        if sanity_loss:
            context.notify("Crew out of drink", category="provisions", payload={"sanity_loss": sanity_loss})


class InjuryRecoverySystem:
    def process(self, world: GameWorld, context: DayContext) -> None:
        state = _state(world)
        if state is None:
            return
        state.crew, recovered = process_injury_recovery(state.crew, state.constants)
        context.recovered.extend(recovered)
        for name in recovered:
            context.notify(f"{name} recovered from their injury", category="crew")


class MoraleSystem:
    def process(self, world: GameWorld, context: DayContext) -> None:
        state = _state(world)
        if state is None:
            return
        state.crew = daily_morale(state.crew, state.relationships, state.constants)


class DayCycle:
    """Coordinates the phases of one elapsed day."""

    PHASE_ORDER: list[PhaseName] = ["provisions", "recovery", "morale"]

    def __init__(self, state: GameState, *, world: GameWorld | None = None) -> None:
        self.state = state
        self.world = world or GameWorld()
        self.world.add_singleton(GameStateComponent(state))
        self.world.register_system("provisions", ProvisionsSystem())
        self.world.register_system("recovery", InjuryRecoverySystem())
        self.world.register_system("morale", MoraleSystem())

    def advance_day(self) -> DayContext:
        """Run every phase for the current day and move the calendar on."""

        context = DayContext(day=self.state.day, channel=self.state.channel)
        for phase in self.PHASE_ORDER:
            self.world.process_phase(phase, context)
        self.state.day += 1
        self.state.stats.days_played += 1
        logger.debug("Day %d complete: %s", context.day, "; ".join(context.summary_lines) or "quiet")
        return context

    def advance(self, days: int) -> list[DayContext]:
        if days < 0:
            raise ValueError("days must be non-negative")
        return [self.advance_day() for _ in range(days)]

    def close(self) -> None:
        self.world.close()


__all__ = [
    "DayContext",
    "DayCycle",
    "InjuryRecoverySystem",
    "MoraleSystem",
    "ProvisionsSystem",
]
