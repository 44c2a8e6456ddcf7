"""Narrative event hooks raised during travel and salvage.

Resolving an event's choices belongs to the front end; the engine only
announces that one was triggered.
"""

from __future__ import annotations

from ..rng import RandomSource, choose
from .channels import NotificationChannel, NotificationRecord

NARRATIVE_EVENTS: dict[str, tuple[str, ...]] = {
    "travel": (
        "Ghost Signal",
        "Micrometeor Swarm",
        "Debris Field",
        "Distress Beacon",
        "Radiation Storm",
        "Derelict Station",
        "Pirate Scout",
    ),
    "salvage": (
        "Hidden Cache",
        "Toxic Fumes",
        "Trapped Survivor",
        "Booby Trap",
        "Data Core",
        "Unstable Reactor",
        "Rival Crew",
    ),
}


def trigger_narrative_event(
    channel: NotificationChannel,
    trigger: str,
    *,
    day: int,
    rng: RandomSource,
    payload: dict[str, object] | None = None,
) -> NotificationRecord | None:
    titles = NARRATIVE_EVENTS.get(trigger)
    if not titles:
        return None
    title = choose(rng, titles)
    details = {"trigger": trigger, "title": title}
    details.update(payload or {})
    return channel.notify(day, f"Event: {title}", category="event", payload=details)


__all__ = ["NARRATIVE_EVENTS", "trigger_narrative_event"]
