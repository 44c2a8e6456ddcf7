"""Move carried loot from crew hands into the ship's cargo hold."""

from __future__ import annotations

from dataclasses import replace
import logging

from ..engine.state import GameState
from ..wreck.cargo import CargoCapacityError

logger = logging.getLogger(__name__)


def transfer_item_to_ship(state: GameState, crew_id: str) -> bool:
    """Load everything ``crew_id`` carries into cargo.

    Returns ``False`` without changing anything when there is no run, the
    member is unknown, or the hold cannot take the whole load.
    """

    run = state.current_run
    crew = state.member(crew_id)
    if run is None or crew is None:
        return False
    if not crew.inventory:
        return True
    if run.cargo.free_slots < len(crew.inventory):
        logger.debug("Cargo full, %s keeps %d item(s)", crew.name, len(crew.inventory))
        return False
    try:
        for item in crew.inventory:
            run.cargo.load(item)
    except CargoCapacityError:  # pragma: no cover - guarded by the free slot check
        return False
    state.replace_member(replace(crew, inventory=()))
    return True


def transfer_all_items_to_ship(state: GameState) -> int:
    """Unload every crew member who can fit; return how many items moved."""

    moved = 0
    for crew in list(state.crew):
        carried = len(crew.inventory)
        if carried and transfer_item_to_ship(state, crew.id):
            moved += carried
    return moved


__all__ = ["transfer_all_items_to_ship", "transfer_item_to_ship"]
