"""Hazard resolution, valuation, single attempts, and auto-salvage."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .attempt import SalvageOutcome, attempt_salvage, breach_room
    from .hazard import damage_on_fail, resolve_hazard, skill_for_hazard
    from .loot import valuate
    from .scheduler import (
        AutoSalvageResult,
        AutoSalvageRules,
        AutoSalvageTask,
        StopReason,
        cancel_auto_salvage,
        run_auto_salvage,
    )

__all__ = [
    "AutoSalvageResult",
    "AutoSalvageRules",
    "AutoSalvageTask",
    "SalvageOutcome",
    "StopReason",
    "attempt_salvage",
    "breach_room",
    "cancel_auto_salvage",
    "damage_on_fail",
    "resolve_hazard",
    "run_auto_salvage",
    "skill_for_hazard",
    "valuate",
]

_EXPORTS = {
    "SalvageOutcome": "shipbreakers.salvage.attempt",
    "attempt_salvage": "shipbreakers.salvage.attempt",
    "breach_room": "shipbreakers.salvage.attempt",
    "damage_on_fail": "shipbreakers.salvage.hazard",
    "resolve_hazard": "shipbreakers.salvage.hazard",
    "skill_for_hazard": "shipbreakers.salvage.hazard",
    "valuate": "shipbreakers.salvage.loot",
    "AutoSalvageResult": "shipbreakers.salvage.scheduler",
    "AutoSalvageRules": "shipbreakers.salvage.scheduler",
    "AutoSalvageTask": "shipbreakers.salvage.scheduler",
    "StopReason": "shipbreakers.salvage.scheduler",
    "cancel_auto_salvage": "shipbreakers.salvage.scheduler",
    "run_auto_salvage": "shipbreakers.salvage.scheduler",
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
