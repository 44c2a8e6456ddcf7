"""Shared fixtures: scripted random sources and small expedition builders."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
import sys
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipbreakers.config import CrewThresholds
from shipbreakers.crew.models import CrewMember, Skills
from shipbreakers.engine.state import GameState, RunState, RunStatus
from shipbreakers.wreck.cargo import CargoHold
from shipbreakers.wreck.models import HazardType, LootItem, LootRarity, Room, Wreck


class ScriptedRandom:
    """Returns queued values in order, then ``fallback`` forever."""

    def __init__(self, values: Iterable[float] = (), *, fallback: float = 0.5) -> None:
        self._values = list(values)
        self.fallback = fallback
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self._values:
            return self._values.pop(0)
        return self.fallback

    @property
    def remaining(self) -> int:
        return len(self._values)


def build_crew(crew_id: str = "ava", **overrides: Any) -> CrewMember:
    defaults: dict[str, Any] = {
        "name": crew_id.title(),
        "skills": Skills(technical=3, combat=1, salvage=2, piloting=2),
    }
    defaults.update(overrides)
    return CrewMember(id=crew_id, **defaults)


def build_item(item_id: str, value: int = 1000, rarity: LootRarity = LootRarity.COMMON) -> LootItem:
    return LootItem(id=item_id, name=item_id.replace("-", " ").title(), value=value, rarity=rarity)


def build_room(
    room_id: str = "room-1",
    *,
    name: str = "Engine Room",
    hazard_type: HazardType | str = HazardType.MECHANICAL,
    hazard_level: int = 1,
    items: Sequence[LootItem] | None = None,
    sealed: bool = False,
) -> Room:
    loot = list(items) if items is not None else [build_item(f"{room_id}-item")]
    return Room(
        id=room_id,
        name=name,
        hazard_type=hazard_type,
        hazard_level=hazard_level,
        loot=loot,
        sealed=sealed,
    )


def build_state(
    *,
    crew: Sequence[CrewMember] | None = None,
    rooms: Sequence[Room] | None = None,
    tier: int = 1,
    distance: float = 10.0,
    rng: Any = None,
    salvaging: bool = True,
    cargo_capacity: int = 10,
    thresholds: CrewThresholds | None = None,
    **overrides: Any,
) -> GameState:
    """Build a state whose run (when ``salvaging``) is already at the wreck."""

    wreck = Wreck(
        id="wreck-1",
        name="Hulk of the Meridian",
        tier=tier,
        distance=distance,
        rooms=list(rooms) if rooms is not None else [build_room()],
    )
    state = GameState(
        crew=list(crew) if crew is not None else [build_crew()],
        wrecks=[wreck],
        rng=rng if rng is not None else ScriptedRandom(fallback=0.0),
        thresholds=thresholds or CrewThresholds(),
        cargo_capacity=cargo_capacity,
        auto_salvage_delay=0.0,
        **overrides,
    )
    ids = [member.id for member in state.crew]
    for index, crew_id in enumerate(ids):
        state.relationships.introduce(crew_id, ids[:index])
    if salvaging:
        state.current_run = RunState(
            wreck_id=wreck.id,
            status=RunStatus.SALVAGING,
            time_remaining=state.constants.starting_time,
            cargo=CargoHold(capacity=cargo_capacity),
        )
    return state


@pytest.fixture
def scripted() -> Callable[..., ScriptedRandom]:
    return ScriptedRandom


@pytest.fixture
def make_crew() -> Callable[..., CrewMember]:
    return build_crew


@pytest.fixture
def make_item() -> Callable[..., LootItem]:
    return build_item


@pytest.fixture
def make_room() -> Callable[..., Room]:
    return build_room


@pytest.fixture
def make_state() -> Callable[..., GameState]:
    return build_state
