"""Run lifecycle: departure, arrival, return, evacuation, and sale."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
import logging
import math

from ..config import DEFAULT_CONSTANTS, SalvageConstants
from ..crew.injuries import effective_skills
from ..crew.models import CrewPosition, CrewStatus
from ..crew.roster import apply_station_recovery
from ..data.effects import EquipmentEffect, sum_effects
from ..events.narrative import trigger_narrative_event
from ..rng import roll_chance
from ..salvage.scheduler import cancel_auto_salvage
from ..salvage.transfer import transfer_all_items_to_ship, transfer_item_to_ship
from ..wreck.cargo import CargoHold
from .day_cycle import DayCycle
from .state import GameState, RunState, RunStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpeditionResult:
    """Outcome of a lifecycle transition; ``reason`` is set when refused."""

    success: bool
    reason: str | None = None
    fuel_spent: int = 0
    days: int = 0
    credits: int = 0
    items: int = 0


def _refuse(reason: str) -> ExpeditionResult:
    logger.debug("Expedition action refused: %s", reason)
    return ExpeditionResult(False, reason=reason)


def calculate_travel_cost(
    distance: float,
    piloting: int,
    equipment_effects: Iterable[EquipmentEffect] = (),
    constants: SalvageConstants = DEFAULT_CONSTANTS,
) -> int:
    """Fuel for one leg of ``distance`` AU."""

    pilot_factor = max(0.0, 1 - piloting * constants.piloting_fuel_reduction_per_level)
    efficiency = sum_effects(equipment_effects, "fuel_efficiency") / 100
    multiplier = max(0.0, pilot_factor * (1 - efficiency))
    return max(1, math.ceil(distance * constants.fuel_cost_per_au * multiplier))


def calculate_days_spent(distance: float, constants: SalvageConstants = DEFAULT_CONSTANTS) -> int:
    return max(1, math.ceil(distance / constants.days_per_10_au))


def pilot_skill(state: GameState) -> int:
    """Best effective piloting among crew fit to fly."""

    pilots = [
        effective_skills(member).piloting
        for member in state.crew
        if member.status is CrewStatus.ACTIVE
    ]
    return max(pilots, default=0)


def _leg_cost(state: GameState, distance: float) -> int:
    return calculate_travel_cost(distance, pilot_skill(state), state.equipment_effects, state.constants)


def _move_crew(state: GameState, position: CrewPosition) -> None:
    state.crew = [replace(member, position=position) for member in state.crew]


# ------------------------------------------------------------------
def start_run(state: GameState, wreck_id: str) -> ExpeditionResult:
    """Open a run to ``wreck_id`` if there is fuel for the round trip."""

    if state.current_run is not None:
        return _refuse("A run is already in progress")
    wreck = state.wreck(wreck_id)
    if wreck is None:
        return _refuse(f"Wreck {wreck_id} not found")
    if wreck.stripped:
        return _refuse(f"{wreck.name} has already been stripped")
    if not state.crew:
        return _refuse("No crew to send")
    cost = _leg_cost(state, wreck.distance)
    if state.fuel < cost * 2:
        return _refuse(f"Need {cost * 2} fuel for the round trip, have {state.fuel}")
    state.current_run = RunState(
        wreck_id=wreck.id,
        status=RunStatus.TRAVELING,
        time_remaining=state.constants.starting_time,
        cargo=CargoHold(capacity=state.cargo_capacity),
    )
    logger.info("Run started to %s (%s AU)", wreck.name, wreck.distance)
    state.notify(f"Departing for {wreck.name}", category="expedition", payload={"wreck": wreck.id})
    return ExpeditionResult(True)


def travel_to_wreck(state: GameState) -> ExpeditionResult:
    run = state.current_run
    if run is None:
        return _refuse("No active run")
    if run.status is not RunStatus.TRAVELING:
        return _refuse(f"Run is {run.status.value}, not traveling")
    wreck = state.wreck(run.wreck_id)
    if wreck is None:
        logger.error("Active run references missing wreck %s", run.wreck_id)
        return _refuse(f"Wreck {run.wreck_id} not found")
    cost = _leg_cost(state, wreck.distance)
    state.fuel = max(0, state.fuel - cost)
    run.stats.fuel_spent += cost
    run.status = RunStatus.SALVAGING
    _move_crew(state, CrewPosition.WRECK)
    if roll_chance(state.rng, state.constants.travel_event_chance):
        trigger_narrative_event(state.channel, "travel", day=state.day, rng=state.rng)
    state.notify(f"Arrived at {wreck.name}", category="expedition", payload={"fuel": cost})
    return ExpeditionResult(True, fuel_spent=cost)


def _fly_home(state: GameState, distance: float) -> tuple[int, int]:
    """Spend return fuel and run the daily cycle for each day in transit."""

    cost = _leg_cost(state, distance)
    state.fuel = max(0, state.fuel - cost)
    days = calculate_days_spent(distance, state.constants)
    cycle = DayCycle(state)
    try:
        cycle.advance(days)
    finally:
        cycle.close()
    _move_crew(state, CrewPosition.STATION)
    state.crew = [apply_station_recovery(member, state.constants) for member in state.crew]
    return cost, days


def return_to_station(state: GameState) -> ExpeditionResult:
    """Bring the crew and their haul home; the run stays open until sold."""

    run = state.current_run
    if run is None:
        return _refuse("No active run")
    if run.status is not RunStatus.SALVAGING:
        return _refuse(f"Run is {run.status.value}, not salvaging")
    if state.auto_salvage is not None and not state.auto_salvage.done:
        return _refuse("Auto-salvage is still running")
    wreck = state.wreck(run.wreck_id)
    if wreck is None:
        logger.error("Active run references missing wreck %s", run.wreck_id)
        return _refuse(f"Wreck {run.wreck_id} not found")

    run.status = RunStatus.RETURNING
    transfer_all_items_to_ship(state)
    cost, days = _fly_home(state, wreck.distance)
    run.stats.fuel_spent += cost

    workers = [
        member.id
        for member in state.crew
        if member.id in run.crew_worked
        and member.status is CrewStatus.ACTIVE
        and member.injury is None
    ]
    if len(workers) >= 2:
        state.relationships.work_together(workers, state.constants.relationship_work_together)

    run.status = RunStatus.COMPLETED
    logger.info("Returned from %s after %d day(s)", wreck.name, days)
    state.notify(
        f"Returned from {wreck.name}",
        category="expedition",
        payload={"days": days, "fuel": cost, "items": len(run.cargo)},
    )
    return ExpeditionResult(True, fuel_spent=cost, days=days, items=len(run.cargo))


def emergency_evacuate(state: GameState) -> ExpeditionResult:
    """Abandon the run at once, leaving every carried and stowed item behind."""

    run = state.current_run
    if run is None:
        return _refuse("No active run")
    cancel_auto_salvage(state)
    state.auto_salvage = None
    wreck = state.wreck(run.wreck_id)

    carried = [item for member in state.crew for item in member.inventory]
    abandoned = run.cargo.clear()
    abandoned.extend(carried)
    state.crew = [replace(member, inventory=()) for member in state.crew]

    cost = days = 0
    if run.status is not RunStatus.TRAVELING:
        if wreck is None:
            logger.error("Evacuating from missing wreck %s", run.wreck_id)
            _move_crew(state, CrewPosition.STATION)
        else:
            cost, days = _fly_home(state, wreck.distance)
    state.current_run = None
    lost_value = sum(item.value for item in abandoned)
    logger.warning("Emergency evacuation: abandoned %d item(s) worth %d", len(abandoned), lost_value)
    state.notify(
        "Emergency evacuation",
        category="expedition",
        payload={"items_lost": len(abandoned), "value_lost": lost_value},
    )
    return ExpeditionResult(True, fuel_spent=cost, days=days, credits=-lost_value, items=len(abandoned))


def sell_all_loot(state: GameState) -> ExpeditionResult:
    """Cash in the completed run's cargo and close the run."""

    run = state.current_run
    if run is None:
        return _refuse("No active run")
    if run.status is not RunStatus.COMPLETED:
        return _refuse("Return to station before selling")
    for member in state.crew:
        if member.inventory:
            transfer_item_to_ship(state, member.id)
    sold = run.cargo.clear()
    total = sum(item.value for item in sold)
    state.credits += total
    state.stats.total_credits_earned += total
    state.stats.items_sold += len(sold)
    state.stats.wrecks_completed += 1
    wreck = state.wreck(run.wreck_id)
    if wreck is not None and not any(room.loot for room in wreck.rooms):
        wreck.stripped = True
    state.current_run = None
    state.notify(f"Sold {len(sold)} item(s)", category="economy", payload={"credits": total})
    return ExpeditionResult(True, credits=total, items=len(sold))


__all__ = [
    "ExpeditionResult",
    "calculate_days_spent",
    "calculate_travel_cost",
    "emergency_evacuate",
    "pilot_skill",
    "return_to_station",
    "sell_all_loot",
    "start_run",
    "transfer_all_items_to_ship",
    "transfer_item_to_ship",
    "travel_to_wreck",
]
