"""Autonomous salvage scheduling and its stop conditions."""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys

from pydantic import ValidationError
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipbreakers.crew.models import Skills
from shipbreakers.engine.state import RunStatus
from shipbreakers.salvage.scheduler import (
    RULE_PRESETS,
    AutoSalvageBusyError,
    AutoSalvageRules,
    AutoSalvageTask,
    RoomPriority,
    StopReason,
    cancel_auto_salvage,
    run_auto_salvage,
    select_best_crew_for_room,
    select_target_room,
    start_auto_salvage,
)
from shipbreakers.wreck.models import HazardType, LootRarity

OPEN_RULES = AutoSalvageRules(max_hazard_level=5)


def test_clears_a_room_and_stops_complete(make_state, make_room, make_item) -> None:
    state = make_state(rooms=[make_room(items=[make_item("a"), make_item("b")])])

    result = asyncio.run(run_auto_salvage(state, OPEN_RULES))

    assert result.stop_reason is StopReason.COMPLETE
    assert result.rooms_salvaged == 1
    assert result.attempts == 2
    assert [item.id for item in result.loot_collected] == ["a", "b"]
    assert result.credits_earned == 2200
    assert [item.id for item in state.current_run.cargo] == ["a", "b"]
    assert state.member("ava").inventory == ()
    assert state.auto_salvage is None
    assert state.channel.by_category("auto_salvage")


def test_stops_when_cargo_fills(make_state, make_room, make_item) -> None:
    state = make_state(
        rooms=[make_room(items=[make_item("a"), make_item("b"), make_item("c")])],
        cargo_capacity=1,
    )

    result = start_auto_salvage(state, OPEN_RULES).drain()

    assert result.stop_reason is StopReason.CARGO_FULL
    assert len(state.current_run.cargo) == 1
    assert [item.id for item in state.member("ava").inventory] == ["b"]
    assert state.wreck("wreck-1").room("room-1").find_item("c") is not None


def test_stops_when_time_runs_out(make_state, make_room, make_item) -> None:
    state = make_state(
        rooms=[make_room(items=[make_item("idol", rarity=LootRarity.LEGENDARY), make_item("b")])]
    )
    state.current_run.time_remaining = 2

    result = start_auto_salvage(state, OPEN_RULES).drain()

    assert result.stop_reason is StopReason.TIME_OUT
    assert state.current_run.time_remaining == 0
    assert [item.id for item in state.current_run.cargo] == ["idol"]


def test_stops_when_no_crew_is_fit(make_state, make_crew) -> None:
    state = make_state(crew=[make_crew("ava", stamina=25)])
    result = start_auto_salvage(state, AutoSalvageRules.balanced()).drain()
    assert result.stop_reason is StopReason.CREW_EXHAUSTED
    assert result.attempts == 0


def test_stops_after_an_injury(make_state, make_crew, make_room, make_item, scripted) -> None:
    state = make_state(
        crew=[make_crew("ava", hp=60)],
        rooms=[make_room(hazard_level=2, items=[make_item("a"), make_item("b")])],
        rng=scripted(fallback=0.99),
    )

    result = start_auto_salvage(state, AutoSalvageRules.balanced()).drain()

    assert result.stop_reason is StopReason.INJURY
    assert result.attempts == 1
    assert result.injuries == 1
    assert state.member("ava").hp == 40


def test_injuries_are_tolerated_when_rules_allow(make_state, make_crew, make_room, make_item, scripted) -> None:
    state = make_state(
        crew=[make_crew("ava", hp=60)],
        rooms=[make_room(hazard_level=2, items=[make_item("a")])],
        rng=scripted(fallback=0.99),
    )
    rules = AutoSalvageRules(max_hazard_level=5, stop_on_injury=False)

    result = start_auto_salvage(state, rules).drain()

    # One failure drops ava below the 50% health threshold.
    assert result.stop_reason is StopReason.CREW_EXHAUSTED
    assert result.attempts == 1
    assert result.injuries == 1
    assert state.member("ava").hp == 40


@pytest.mark.parametrize("status", [RunStatus.TRAVELING, RunStatus.COMPLETED])
def test_stops_when_run_is_not_salvaging(make_state, make_room, make_item, status) -> None:
    state = make_state(rooms=[make_room(items=[make_item("a")])])
    state.current_run.status = status

    result = start_auto_salvage(state, OPEN_RULES).drain(max_steps=20)

    assert result.stop_reason is StopReason.COMPLETE
    assert result.attempts == 0
    assert state.auto_salvage is None
    assert state.wreck("wreck-1").room("room-1").find_item("a") is not None


def test_cancel_before_start(make_state) -> None:
    state = make_state()
    task = start_auto_salvage(state, OPEN_RULES)
    assert cancel_auto_salvage(state)

    result = asyncio.run(task.run())

    assert result.stop_reason is StopReason.CANCELLED
    assert result.attempts == 0
    assert not cancel_auto_salvage(state)


def test_cancel_between_steps(make_state, make_room, make_item) -> None:
    state = make_state(rooms=[make_room(items=[make_item("a"), make_item("b"), make_item("c")])])

    async def scenario():
        task = start_auto_salvage(state, OPEN_RULES)
        task.base_delay = 0.05
        runner = asyncio.create_task(task.run())
        await asyncio.sleep(0)
        assert cancel_auto_salvage(state)
        return await runner

    result = asyncio.run(scenario())

    assert result.stop_reason is StopReason.CANCELLED
    assert result.attempts == 1
    assert [item.id for item in state.current_run.cargo] == ["a"]
    assert state.member("ava").inventory == ()
    assert state.auto_salvage is None


def test_only_one_task_at_a_time(make_state) -> None:
    state = make_state()
    task = start_auto_salvage(state)
    with pytest.raises(AutoSalvageBusyError):
        start_auto_salvage(state)
    task.drain()
    assert start_auto_salvage(state) is state.auto_salvage


def test_breaches_sealed_rooms_before_salvaging(make_state, make_room) -> None:
    state = make_state(rooms=[make_room(sealed=True)])

    result = start_auto_salvage(state, OPEN_RULES).drain()

    assert result.stop_reason is StopReason.COMPLETE
    assert result.rooms_salvaged == 1
    assert state.current_run.time_remaining == 18
    assert state.channel.notifications[0].message.startswith("Breached")


def test_rooms_above_the_hazard_limit_are_left(make_state, make_room) -> None:
    state = make_state(rooms=[make_room(hazard_level=4), make_room("room-2", hazard_level=4, sealed=True)])

    result = start_auto_salvage(state, AutoSalvageRules(max_hazard_level=3)).drain()

    assert result.stop_reason is StopReason.COMPLETE
    assert result.attempts == 0
    assert state.wreck("wreck-1").room("room-2").sealed


def test_cargo_never_exceeds_capacity(make_state, make_crew, make_room, make_item) -> None:
    rooms = [
        make_room(f"room-{index}", items=[make_item(f"item-{index}-{slot}") for slot in range(3)])
        for index in range(4)
    ]
    state = make_state(crew=[make_crew("ava"), make_crew("ben")], rooms=rooms, cargo_capacity=5)
    task = start_auto_salvage(state, OPEN_RULES)

    while task.step() is None:
        assert len(state.current_run.cargo) <= state.current_run.cargo.capacity

    assert task.result.stop_reason in {StopReason.CARGO_FULL, StopReason.CREW_EXHAUSTED}
    assert len(state.current_run.cargo) == 5


def test_priority_order_picks_rooms(make_room) -> None:
    rooms = [
        make_room("quarters", name="Crew Quarters"),
        make_room("bay", name="Cargo Bay"),
        make_room("lab", name="Science Lab"),
    ]
    labs_first = AutoSalvageRules(priority_rooms=(RoomPriority.LABS, RoomPriority.CARGO))
    assert select_target_room(rooms, labs_first).id == "lab"
    assert select_target_room(rooms, AutoSalvageRules()).id == "quarters"
    armory = AutoSalvageRules(priority_rooms=(RoomPriority.ARMORY, RoomPriority.ANY, RoomPriority.CARGO))
    assert select_target_room(rooms, armory).id == "quarters"

    rooms[2].looted = True
    assert select_target_room(rooms, labs_first).id == "bay"


def test_best_crew_prefers_specialists_then_roster_order(make_state, make_crew, make_room) -> None:
    room = make_room(hazard_type=HazardType.MECHANICAL, hazard_level=2)
    brawler = make_crew("ava", skills=Skills(combat=4))
    engineer = make_crew("ben", skills=Skills(technical=4))
    twin = make_crew("cal", skills=Skills(technical=4))
    state = make_state(crew=[brawler, engineer, twin], rooms=[room])

    chosen = select_best_crew_for_room(state, room, 1, AutoSalvageRules())

    assert chosen is not None and chosen.id == "ben"


def test_rules_validation() -> None:
    with pytest.raises(ValidationError):
        AutoSalvageRules(max_hazard_level=0)
    with pytest.raises(ValidationError):
        AutoSalvageRules(stop_on_low_stamina=101)
    with pytest.raises(ValidationError):
        AutoSalvageRules(priority_rooms=())
    with pytest.raises(ValidationError):
        AutoSalvageRules(panic_button=True)
    assert set(RULE_PRESETS) == {"conservative", "balanced", "aggressive"}
    assert RULE_PRESETS["aggressive"]().max_hazard_level == 5


def test_delay_scales_with_speed(make_state) -> None:
    task = AutoSalvageTask(make_state(), speed=4, base_delay=2.0)
    assert task.delay == pytest.approx(0.5)
    with pytest.raises(ValueError):
        AutoSalvageTask(make_state(), speed=0)
