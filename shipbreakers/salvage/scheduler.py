"""Autonomous salvage: pick rooms and crew, run attempts, stop on policy.

An :class:`AutoSalvageTask` advances one atomic action per :meth:`~AutoSalvageTask.step`
(a breach, or one item attempt with its loot transfer). :meth:`~AutoSalvageTask.run`
drives the steps with a pacing sleep between them; cancellation is only observed
between steps, so a running attempt always completes first.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
import logging

from pydantic import BaseModel, ConfigDict, Field

from ..crew.injuries import effective_skills
from ..crew.models import CrewMember
from ..crew.roster import check_availability
from ..engine.state import GameState, RunStatus
from ..wreck.models import LootItem, Room
from .attempt import attempt_salvage, breach_room
from .hazard import resolve_hazard, skill_for_hazard
from .transfer import transfer_item_to_ship

logger = logging.getLogger(__name__)


class RoomPriority(str, Enum):
    """Room categories the scheduler can be told to favour."""

    CARGO = "cargo"
    LABS = "labs"
    ARMORY = "armory"
    ANY = "any"


_ROOM_KEYWORDS: dict[RoomPriority, tuple[str, ...]] = {
    RoomPriority.CARGO: ("cargo",),
    RoomPriority.LABS: ("lab",),
    RoomPriority.ARMORY: ("armory", "armoury"),
}


class StopReason(str, Enum):
    COMPLETE = "complete"
    CARGO_FULL = "cargo_full"
    TIME_OUT = "time_out"
    CREW_EXHAUSTED = "crew_exhausted"
    INJURY = "injury"
    CANCELLED = "cancelled"


class AutoSalvageRules(BaseModel):
    """Limits one auto-salvage invocation works within."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_hazard_level: int = Field(default=3, ge=1, le=5)
    priority_rooms: tuple[RoomPriority, ...] = Field(default=(RoomPriority.ANY,), min_length=1)
    stop_on_injury: bool = True
    stop_on_low_stamina: int = Field(default=30, ge=0, le=100)
    stop_on_low_sanity: int = Field(default=40, ge=0, le=100)

    @classmethod
    def conservative(cls) -> AutoSalvageRules:
        return cls(
            max_hazard_level=2,
            priority_rooms=(RoomPriority.CARGO, RoomPriority.ANY),
            stop_on_injury=True,
            stop_on_low_stamina=40,
            stop_on_low_sanity=50,
        )

    @classmethod
    def balanced(cls) -> AutoSalvageRules:
        return cls(
            max_hazard_level=3,
            priority_rooms=(RoomPriority.ANY,),
            stop_on_injury=True,
            stop_on_low_stamina=30,
            stop_on_low_sanity=40,
        )

    @classmethod
    def aggressive(cls) -> AutoSalvageRules:
        return cls(
            max_hazard_level=5,
            priority_rooms=(RoomPriority.ARMORY, RoomPriority.LABS, RoomPriority.CARGO, RoomPriority.ANY),
            stop_on_injury=False,
            stop_on_low_stamina=10,
            stop_on_low_sanity=20,
        )


RULE_PRESETS = {
    "conservative": AutoSalvageRules.conservative,
    "balanced": AutoSalvageRules.balanced,
    "aggressive": AutoSalvageRules.aggressive,
}


@dataclass
class AutoSalvageResult:
    rooms_salvaged: int = 0
    loot_collected: list[LootItem] = field(default_factory=list)
    credits_earned: int = 0
    injuries: int = 0
    attempts: int = 0
    stop_reason: StopReason | None = None


class AutoSalvageBusyError(RuntimeError):
    """Raised when starting auto-salvage while another task is still running."""


# ------------------------------------------------------------------
def _in_limit(room: Room, rules: AutoSalvageRules) -> bool:
    return room.hazard_level <= rules.max_hazard_level


def select_target_room(rooms: Sequence[Room], rules: AutoSalvageRules) -> Room | None:
    """Pick the next open room, honouring the rule's category order.

    Categories are tried in order and the first with a room whose name
    matches wins. Reaching ``any`` (or running out of categories) falls back
    to the first open room.
    """

    candidates = [room for room in rooms if room.is_open and room.loot and _in_limit(room, rules)]
    if not candidates:
        return None
    for priority in rules.priority_rooms:
        if priority is RoomPriority.ANY:
            break
        keywords = _ROOM_KEYWORDS[priority]
        for room in candidates:
            name = room.name.lower()
            if any(keyword in name for keyword in keywords):
                return room
    return candidates[0]


def select_best_crew_for_room(
    state: GameState,
    room: Room,
    tier: int,
    rules: AutoSalvageRules,
) -> CrewMember | None:
    """Return the eligible member most likely to beat ``room``'s hazard.

    Ties go to the higher matching skill, then to roster order.
    """

    thresholds = state.thresholds.tightened(
        min_stamina=rules.stop_on_low_stamina,
        min_sanity=rules.stop_on_low_sanity,
    )
    skill = skill_for_hazard(room.hazard_type)
    best: tuple[float, int, int] | None = None
    chosen: CrewMember | None = None
    for index, member in enumerate(state.crew):
        if not check_availability(member, thresholds).available:
            continue
        skills = effective_skills(member)
        chance = resolve_hazard(
            skills,
            room.hazard_type,
            room.hazard_level,
            tier,
            state.equipment_effects,
            state.constants,
        )
        key = (chance, skills.get(skill), -index)
        if best is None or key > best:
            best, chosen = key, member
    return chosen


class AutoSalvageTask:
    """One auto-salvage invocation over the active run."""

    def __init__(
        self,
        state: GameState,
        rules: AutoSalvageRules | None = None,
        *,
        speed: float = 1,
        base_delay: float | None = None,
    ) -> None:
        if speed <= 0:
            raise ValueError("speed must be positive")
        self.state = state
        self.rules = rules or AutoSalvageRules.balanced()
        self.speed = speed
        self.base_delay = state.auto_salvage_delay if base_delay is None else base_delay
        self.result = AutoSalvageResult()
        self._cancel_requested = False
        self._room_id: str | None = None
        self._crew_id: str | None = None
        self._pending: list[str] = []
        self._room_success = False

    @property
    def done(self) -> bool:
        return self.result.stop_reason is not None

    @property
    def delay(self) -> float:
        return self.base_delay / self.speed

    def cancel(self) -> None:
        """Ask the task to stop before its next step."""

        self._cancel_requested = True

    # ------------------------------------------------------------------
    def step(self) -> StopReason | None:
        """Perform one atomic action; return the stop reason once finished."""

        if self.done:
            return self.result.stop_reason
        if self._cancel_requested:
            return self._finish(StopReason.CANCELLED)

        state = self.state
        run = state.current_run
        if run is None:
            return self._finish(StopReason.COMPLETE)
        wreck = state.wreck(run.wreck_id)
        if wreck is None:
            logger.error("Auto-salvage halted: run references missing wreck %s", run.wreck_id)
            return self._finish(StopReason.COMPLETE)
        if run.status is not RunStatus.SALVAGING:
            logger.warning("Auto-salvage stopped: run is %s, not salvaging", run.status.value)
            return self._finish(StopReason.COMPLETE)
        if run.time_remaining <= 0:
            return self._finish(StopReason.TIME_OUT)
        if run.cargo.is_full:
            return self._finish(StopReason.CARGO_FULL)

        if self._room_id is not None:
            room = wreck.room(self._room_id)
            if room is None or not self._pending:
                if not self._end_room():
                    return self._finish(StopReason.CARGO_FULL)
                return None
            return self._attempt_next(room)

        sealed = [
            room
            for room in wreck.rooms
            if room.sealed and not room.looted and _in_limit(room, self.rules)
        ]
        if sealed and run.time_remaining >= state.constants.breach_time_cost:
            breach = breach_room(state, sealed[0].id)
            if breach.success:
                return None

        room = select_target_room(wreck.rooms, self.rules)
        if room is None:
            return self._finish(StopReason.COMPLETE)
        crew = select_best_crew_for_room(state, room, wreck.tier, self.rules)
        if crew is None:
            return self._finish(StopReason.CREW_EXHAUSTED)
        logger.debug("Auto-salvage sending %s into %s", crew.name, room.name)
        self._room_id = room.id
        self._crew_id = crew.id
        self._pending = [item.id for item in room.loot]
        self._room_success = False
        return self._attempt_next(room)

    def drain(self, max_steps: int = 10_000) -> AutoSalvageResult:
        """Run steps back to back without pacing until the task stops."""

        for _ in range(max_steps):
            if self.step() is not None:
                return self.result
        raise RuntimeError(f"auto-salvage did not stop within {max_steps} steps")

    async def run(self) -> AutoSalvageResult:
        """Drive the task with a pacing sleep of ``base_delay / speed`` between steps."""

        while self.step() is None:
            await asyncio.sleep(self.delay)
        return self.result

    # ------------------------------------------------------------------
    def _attempt_next(self, room: Room) -> StopReason | None:
        state = self.state
        crew = state.member(self._crew_id) if self._crew_id else None
        thresholds = state.thresholds.tightened(
            min_stamina=self.rules.stop_on_low_stamina,
            min_sanity=self.rules.stop_on_low_sanity,
        )
        if crew is None or not check_availability(crew, thresholds).available:
            if not self._end_room():
                return self._finish(StopReason.CARGO_FULL)
            return None
        if crew.inventory and not transfer_item_to_ship(state, crew.id):
            return self._finish(StopReason.CARGO_FULL)

        item_id = self._pending.pop(0)
        if room.find_item(item_id) is None:
            return None
        outcome = attempt_salvage(state, room.id, item_id, crew.id)
        if not outcome.performed:
            logger.error("Auto-salvage halted: attempt refused after checks passed: %s", outcome.reason)
            return self._finish(StopReason.COMPLETE)

        self.result.attempts += 1
        if outcome.success:
            self._room_success = True
            if outcome.item is not None:
                self.result.loot_collected.append(outcome.item)
                self.result.credits_earned += outcome.item.value
        if outcome.damage > 0:
            self.result.injuries += 1

        if self.rules.stop_on_injury:
            after = state.member(crew.id)
            if after is None or after.hp < after.max_hp * 0.5:
                return self._finish(StopReason.INJURY)
        return None

    def _end_room(self) -> bool:
        """Flush the acting member's load and close out the current room."""

        flushed = True
        if self._crew_id is not None:
            flushed = transfer_item_to_ship(self.state, self._crew_id)
            if not flushed and self.state.member(self._crew_id) is None:
                flushed = True
        if self._room_success:
            self.result.rooms_salvaged += 1
        self._room_id = None
        self._crew_id = None
        self._pending = []
        self._room_success = False
        return flushed

    def _finish(self, reason: StopReason) -> StopReason:
        if self._room_id is not None:
            self._end_room()
        elif self._crew_id is not None:  # pragma: no cover - cursor always paired
            transfer_item_to_ship(self.state, self._crew_id)
        self.result.stop_reason = reason
        if self.state.auto_salvage is self:
            self.state.auto_salvage = None
        logger.info(
            "Auto-salvage stopped (%s): %d room(s), %d item(s), %d credits",
            reason.value,
            self.result.rooms_salvaged,
            len(self.result.loot_collected),
            self.result.credits_earned,
        )
        self.state.notify(
            f"Auto-salvage stopped: {reason.value.replace('_', ' ')}",
            category="auto_salvage",
            payload={
                "rooms": self.result.rooms_salvaged,
                "items": len(self.result.loot_collected),
                "credits": self.result.credits_earned,
            },
        )
        return reason


def start_auto_salvage(
    state: GameState,
    rules: AutoSalvageRules | None = None,
    *,
    speed: float = 1,
) -> AutoSalvageTask:
    """Create and register the state's auto-salvage task."""

    current = state.auto_salvage
    if current is not None and not current.done:
        raise AutoSalvageBusyError("auto-salvage is already running")
    task = AutoSalvageTask(state, rules, speed=speed)
    state.auto_salvage = task
    return task


async def run_auto_salvage(
    state: GameState,
    rules: AutoSalvageRules | None = None,
    speed: float = 1,
) -> AutoSalvageResult:
    return await start_auto_salvage(state, rules, speed=speed).run()


def cancel_auto_salvage(state: GameState) -> bool:
    """Request cancellation of the running task; ``False`` if none is running."""

    task = state.auto_salvage
    if task is None or task.done:
        return False
    task.cancel()
    return True


__all__ = [
    "AutoSalvageBusyError",
    "AutoSalvageResult",
    "AutoSalvageRules",
    "AutoSalvageTask",
    "RULE_PRESETS",
    "RoomPriority",
    "StopReason",
    "cancel_auto_salvage",
    "run_auto_salvage",
    "select_best_crew_for_room",
    "select_target_room",
    "start_auto_salvage",
]
