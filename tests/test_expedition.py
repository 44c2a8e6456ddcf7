"""Run lifecycle from departure to sale."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipbreakers.crew.models import CrewPosition, CrewStatus, Skills
from shipbreakers.data.effects import load_equipment_effects
from shipbreakers.engine.expedition import (
    calculate_days_spent,
    calculate_travel_cost,
    emergency_evacuate,
    pilot_skill,
    return_to_station,
    sell_all_loot,
    start_run,
    travel_to_wreck,
)
from shipbreakers.engine.state import RunStatus
from shipbreakers.salvage.attempt import attempt_salvage
from shipbreakers.salvage.scheduler import StopReason, start_auto_salvage


def test_fuel_cost_formula() -> None:
    assert calculate_travel_cost(10, 0) == 20
    assert calculate_travel_cost(10, 2) == 18
    efficient = load_equipment_effects([{"type": "fuel_efficiency", "value": 50}])
    assert calculate_travel_cost(10, 0, efficient) == 10
    assert calculate_travel_cost(10, 25) == 1


@pytest.mark.parametrize(("distance", "days"), [(0, 1), (5, 1), (10, 1), (25, 3)])
def test_days_spent_formula(distance: float, days: int) -> None:
    assert calculate_days_spent(distance) == days


def test_pilot_is_best_active_crew_member(make_state, make_crew) -> None:
    state = make_state(
        crew=[
            make_crew("ava", skills=Skills(piloting=4), status=CrewStatus.INJURED),
            make_crew("ben", skills=Skills(piloting=2)),
        ],
        salvaging=False,
    )
    assert pilot_skill(state) == 2
    assert pilot_skill(make_state(crew=[], salvaging=False)) == 0


def test_full_run_lifecycle(make_state, make_crew, make_room, make_item) -> None:
    state = make_state(
        crew=[make_crew("ava"), make_crew("ben")],
        rooms=[make_room(items=[make_item("a"), make_item("b")])],
        salvaging=False,
    )

    started = start_run(state, "wreck-1")
    assert started.success
    run = state.current_run
    assert run.status is RunStatus.TRAVELING
    assert run.time_remaining == 20
    assert run.cargo.capacity == 10
    assert not start_run(state, "wreck-1").success

    arrived = travel_to_wreck(state)
    assert arrived.fuel_spent == 18
    assert state.fuel == 82
    assert run.status is RunStatus.SALVAGING
    assert all(member.position is CrewPosition.WRECK for member in state.crew)
    assert state.channel.by_category("event")

    assert attempt_salvage(state, "room-1", "a", "ava").success
    assert attempt_salvage(state, "room-1", "b", "ben").success
    assert not sell_all_loot(state).success

    returned = return_to_station(state)
    assert returned.success
    assert (returned.fuel_spent, returned.days, returned.items) == (18, 1, 2)
    assert state.fuel == 64
    assert state.day == 2
    assert state.provisions.food == 18
    assert run.status is RunStatus.COMPLETED
    assert run.stats.fuel_spent == 36
    assert all(member.inventory == () for member in state.crew)
    assert all(member.position is CrewPosition.STATION for member in state.crew)
    assert all(member.stamina == 100 for member in state.crew)
    assert state.relationships.level("ava", "ben") == pytest.approx(5.3)

    sold = sell_all_loot(state)
    assert sold.success
    assert (sold.credits, sold.items) == (2200, 2)
    assert state.credits == 2200
    assert state.stats.items_sold == 2
    assert state.stats.wrecks_completed == 1
    assert state.current_run is None
    assert state.wreck("wreck-1").stripped
    assert not start_run(state, "wreck-1").success


@pytest.mark.parametrize(
    ("overrides", "wreck_id"),
    [
        ({"fuel": 30}, "wreck-1"),
        ({"crew": []}, "wreck-1"),
        ({}, "wreck-404"),
    ],
)
def test_start_run_refusals(make_state, overrides, wreck_id) -> None:
    state = make_state(salvaging=False, **overrides)
    result = start_run(state, wreck_id)
    assert not result.success
    assert result.reason
    assert state.current_run is None


def test_travel_requires_a_departing_run(make_state) -> None:
    assert not travel_to_wreck(make_state(salvaging=False)).success
    assert not travel_to_wreck(make_state()).success


def test_return_waits_for_auto_salvage(make_state) -> None:
    state = make_state()
    start_auto_salvage(state)
    result = return_to_station(state)
    assert not result.success
    assert "Auto-salvage" in (result.reason or "")
    assert state.current_run.status is RunStatus.SALVAGING


def test_evacuation_abandons_everything(make_state, make_item) -> None:
    state = make_state()
    state.current_run.cargo.load(make_item("stowed", value=400))
    state.replace_member(replace(state.member("ava"), inventory=(make_item("carried", value=600),)))
    task = start_auto_salvage(state)

    result = emergency_evacuate(state)

    assert result.success
    assert result.items == 2
    assert result.credits == -1000
    assert (result.fuel_spent, result.days) == (18, 1)
    assert state.auto_salvage is None
    assert task.step() is StopReason.CANCELLED
    assert state.current_run is None
    assert state.member("ava").inventory == ()
    assert state.member("ava").position is CrewPosition.STATION
    assert state.credits == 0


def test_evacuating_before_arrival_costs_no_fuel(make_state) -> None:
    state = make_state(salvaging=False)
    start_run(state, "wreck-1")
    result = emergency_evacuate(state)
    assert result.success
    assert (result.fuel_spent, result.days, result.items) == (0, 0, 0)
    assert state.fuel == 100
    assert state.current_run is None
    assert not emergency_evacuate(state).success
