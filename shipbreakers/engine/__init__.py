"""Expedition state, daily upkeep, and run lifecycle."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .day_cycle import DayContext, DayCycle
    from .expedition import (
        ExpeditionResult,
        emergency_evacuate,
        return_to_station,
        sell_all_loot,
        start_run,
        travel_to_wreck,
    )
    from .state import GameState, RunState, RunStatus
    from .world import GameWorld

__all__ = [
    "DayContext",
    "DayCycle",
    "ExpeditionResult",
    "GameState",
    "GameWorld",
    "RunState",
    "RunStatus",
    "emergency_evacuate",
    "return_to_station",
    "sell_all_loot",
    "start_run",
    "travel_to_wreck",
]

_EXPORTS = {
    "DayContext": "shipbreakers.engine.day_cycle",
    "DayCycle": "shipbreakers.engine.day_cycle",
    "ExpeditionResult": "shipbreakers.engine.expedition",
    "emergency_evacuate": "shipbreakers.engine.expedition",
    "return_to_station": "shipbreakers.engine.expedition",
    "sell_all_loot": "shipbreakers.engine.expedition",
    "start_run": "shipbreakers.engine.expedition",
    "travel_to_wreck": "shipbreakers.engine.expedition",
    "GameState": "shipbreakers.engine.state",
    "RunState": "shipbreakers.engine.state",
    "RunStatus": "shipbreakers.engine.state",
    "GameWorld": "shipbreakers.engine.world",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name])
        value = getattr(module, name)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted({*globals(), *__all__})
