"""Resolve one attempt to pull one item out of one room."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math

from ..crew.injuries import CrewDownResult, apply_crew_down, effective_skills, handle_crew_down
from ..crew.models import CrewMember, SkillType
from ..crew.roster import check_availability, gain_skill_xp
from ..crew.traits import calculate_trait_effects, get_special_traits
from ..engine.state import GameState, RunStatus
from ..events.narrative import trigger_narrative_event
from ..rng import roll_chance, roll_percent
from ..wreck.models import HazardType, LootItem, Room, Wreck
from .hazard import damage_on_fail, resolve_hazard, skill_for_hazard
from .loot import round_half_up, valuate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalvageOutcome:
    """Result of :func:`attempt_salvage`.

    ``performed`` is ``False`` when a precondition failed; nothing was
    changed in that case and ``reason`` explains why.
    """

    performed: bool
    success: bool = False
    damage: int = 0
    time_cost: int = 0
    xp_gained: int = 0
    skill_used: SkillType | None = None
    fled: bool = False
    stolen: bool = False
    item: LootItem | None = None
    crew_down: CrewDownResult | None = None
    leveled_up: bool = False
    reason: str | None = None

    @property
    def died(self) -> bool:
        return self.crew_down is not None and self.crew_down.died


@dataclass(frozen=True)
class BreachOutcome:
    success: bool
    time_cost: int = 0
    reason: str | None = None


def _refuse(reason: str) -> SalvageOutcome:
    logger.debug("Salvage attempt refused: %s", reason)
    return SalvageOutcome(performed=False, reason=reason)


def _locate_room(state: GameState, room_id: str) -> tuple[Wreck, Room] | str:
    run = state.current_run
    if run is None:
        return "No active run"
    if run.status is not RunStatus.SALVAGING:
        return f"Run is {run.status.value}, not salvaging"
    wreck = state.wreck(run.wreck_id)
    if wreck is None:
        logger.error("Active run references missing wreck %s", run.wreck_id)
        return f"Wreck {run.wreck_id} not found"
    room = wreck.room(room_id)
    if room is None:
        logger.error("Room %s not found on wreck %s", room_id, wreck.id)
        return f"Room {room_id} not found"
    return wreck, room


def crew_down_cause(hazard_type: HazardType | str) -> str:
    """Injury table used when a hazard of ``hazard_type`` drops someone."""

    return "combat" if hazard_type in (HazardType.COMBAT, HazardType.COMBAT.value) else "salvage"


def attempt_salvage(
    state: GameState,
    room_id: str,
    item_id: str,
    crew_id: str,
) -> SalvageOutcome:
    """Send ``crew_id`` to extract ``item_id`` from ``room_id``.

    Every roll and derived value is computed before anything is written, then
    the crew roster, room, run, and stats are updated together.
    """

    located = _locate_room(state, room_id)
    if isinstance(located, str):
        return _refuse(located)
    wreck, room = located
    run = state.current_run
    assert run is not None
    constants = state.constants

    if room.sealed:
        return _refuse(f"{room.name} is sealed")
    if room.looted:
        return _refuse(f"{room.name} is already looted")
    item = room.find_item(item_id)
    if item is None:
        return _refuse(f"Item {item_id} is not in {room.name}")
    crew = state.member(crew_id)
    if crew is None:
        return _refuse(f"Crew member {crew_id} not found")
    availability = check_availability(crew, state.thresholds)
    if not availability.available:
        return _refuse(availability.reason or "Crew unavailable")
    if crew.is_carrying:
        return _refuse(f"{crew.name} must unload before salvaging again")
    if run.time_remaining <= 0:
        return _refuse("No time remaining")

    modifiers = calculate_trait_effects(crew.traits)
    specials = get_special_traits(crew.traits)
    skill = skill_for_hazard(room.hazard_type)
    time_cost = max(
        1, round_half_up(constants.time_cost_for(item.rarity) * (1 + modifiers.work_speed_mod / 100))
    )

    if (
        specials.has_coward
        and not specials.has_brave
        and room.hazard_level >= constants.coward_flee_hazard_threshold
        and roll_chance(state.rng, constants.coward_flee_chance)
    ):
        run.stats.rooms_attempted += 1
        run.spend_time(time_cost)
        state.notify(f"{crew.name} fled from {room.name}", category="crew", payload={"crew": crew.id})
        return SalvageOutcome(performed=True, time_cost=time_cost, fled=True, skill_used=skill)

    skills = effective_skills(crew)
    chance = resolve_hazard(
        skills,
        room.hazard_type,
        room.hazard_level,
        wreck.tier,
        state.equipment_effects,
        constants,
    )
    chance = max(0.0, min(100.0, chance + modifiers.skill_mod))
    success = roll_percent(state.rng) < chance

    stamina_drain = max(
        1, round_half_up(constants.stamina_per_salvage * (1 + modifiers.stamina_mod / 100))
    )
    base_sanity = (
        constants.sanity_loss_base
        if room.hazard_level >= constants.sanity_loss_hazard_threshold
        else 0
    )
    sanity_loss = max(0, round_half_up(base_sanity * (1 + modifiers.sanity_mod / 100)))
    drained = replace(
        crew,
        stamina=max(0, crew.stamina - stamina_drain),
        sanity=max(0, crew.sanity - sanity_loss),
    )

    if success:
        value = round_half_up(
            valuate(item.value, skills.salvage, state.equipment_effects, constants)
            * (1 + modifiers.loot_mod / 100)
        )
        granted = replace(item, value=value)
        stolen = specials.has_greedy and roll_chance(state.rng, constants.greedy_steal_chance)
        event = roll_chance(state.rng, constants.salvage_event_chance)
        xp = (
            constants.xp_base_success
            + room.hazard_level * constants.xp_per_hazard_level
            + wreck.tier * constants.xp_per_tier
        )
        updated = drained if stolen else replace(drained, inventory=(granted,))
        updated, leveled = gain_skill_xp(updated, skill, xp, constants)

        # commit
        room.remove_item(item.id)
        state.replace_member(updated)
        run.spend_time(time_cost)
        run.stats.rooms_attempted += 1
        run.stats.rooms_succeeded += 1
        run.stats.xp_gained[skill] = run.stats.xp_gained.get(skill, 0) + xp
        run.mark_worked(crew.id)
        if stolen:
            state.notify(
                f"{crew.name} pocketed {item.name}",
                category="crew",
                payload={"crew": crew.id, "item": item.id},
            )
        else:
            state.notify(
                f"{crew.name} salvaged {item.name}",
                category="item_salvaged",
                payload={"crew": crew.id, "item": item.id, "value": value},
            )
        if event:
            trigger_narrative_event(
                state.channel, "salvage", day=state.day, rng=state.rng, payload={"room": room.id}
            )
        return SalvageOutcome(
            performed=True,
            success=True,
            time_cost=time_cost,
            xp_gained=xp,
            skill_used=skill,
            stolen=stolen,
            item=None if stolen else granted,
            leveled_up=leveled,
        )

    damage = damage_on_fail(room.hazard_level, constants)
    new_hp = max(0, crew.hp - damage)
    hurt = replace(drained, hp=new_hp)
    xp = constants.xp_base_fail + math.floor(
        (room.hazard_level * constants.xp_per_hazard_level + wreck.tier * constants.xp_per_tier) / 2
    )
    down: CrewDownResult | None = None
    if new_hp == 0 and crew.hp > 0:
        down = handle_crew_down(
            hurt,
            crew_down_cause(room.hazard_type),
            state.day,
            state.relationships,
            [member.id for member in state.crew if member.id != crew.id],
            rng=state.rng,
            constants=constants,
            description=f"Salvage accident in {room.name}",
        )
    leveled = False
    if down is None or not down.died:
        hurt, leveled = gain_skill_xp(hurt, skill, xp, constants)

    # commit
    state.replace_member(hurt)
    if down is not None:
        state.crew = apply_crew_down(state.crew, hurt, down, state.relationships)
        if down.died and down.dead_record is not None:
            state.dead_crew.append(down.dead_record)
            state.stats.crew_lost += 1
            state.notify(f"{crew.name} was killed in {room.name}", category="death", payload={"crew": crew.id})
        elif down.injury is not None:
            state.notify(
                f"{crew.name} suffered a {down.injury.severity.value} {down.injury.type.value.replace('_', ' ')}",
                category="injury",
                payload={"crew": crew.id, "days": down.injury.days_remaining},
            )
    run.spend_time(time_cost)
    run.stats.rooms_attempted += 1
    run.stats.rooms_failed += 1
    run.stats.damage_taken += damage
    if down is None or not down.died:
        run.stats.xp_gained[skill] = run.stats.xp_gained.get(skill, 0) + xp
        run.mark_worked(crew.id)
    return SalvageOutcome(
        performed=True,
        damage=damage,
        time_cost=time_cost,
        xp_gained=0 if down is not None and down.died else xp,
        skill_used=skill,
        crew_down=down,
        leveled_up=leveled,
    )


def breach_room(state: GameState, room_id: str) -> BreachOutcome:
    """Cut open a sealed room so its loot can be reached."""

    located = _locate_room(state, room_id)
    if isinstance(located, str):
        return BreachOutcome(False, reason=located)
    _, room = located
    run = state.current_run
    assert run is not None
    cost = state.constants.breach_time_cost
    if not room.sealed:
        return BreachOutcome(False, reason=f"{room.name} is not sealed")
    if run.time_remaining < cost:
        return BreachOutcome(False, reason="Not enough time to cut through")
    room.sealed = False
    run.spend_time(cost)
    state.notify(f"Breached {room.name}", category="salvage", payload={"room": room.id})
    return BreachOutcome(True, time_cost=cost)


__all__ = [
    "BreachOutcome",
    "SalvageOutcome",
    "attempt_salvage",
    "breach_room",
    "crew_down_cause",
]
