"""Crew records and the rules that wear them down and patch them up."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - imported only for type checkers
    from .injuries import CrewDownResult, handle_crew_down, process_injury_recovery
    from .models import CrewMember, CrewStatus, Injury, SkillType, Skills
    from .relationships import RelationshipLedger
    from .roster import check_availability
    from .traits import calculate_trait_effects, get_special_traits

__all__ = [
    "CrewDownResult",
    "CrewMember",
    "CrewStatus",
    "Injury",
    "RelationshipLedger",
    "SkillType",
    "Skills",
    "calculate_trait_effects",
    "check_availability",
    "get_special_traits",
    "handle_crew_down",
    "process_injury_recovery",
]

_EXPORTS = {
    "CrewDownResult": "shipbreakers.crew.injuries",
    "handle_crew_down": "shipbreakers.crew.injuries",
    "process_injury_recovery": "shipbreakers.crew.injuries",
    "CrewMember": "shipbreakers.crew.models",
    "CrewStatus": "shipbreakers.crew.models",
    "Injury": "shipbreakers.crew.models",
    "SkillType": "shipbreakers.crew.models",
    "Skills": "shipbreakers.crew.models",
    "RelationshipLedger": "shipbreakers.crew.relationships",
    "check_availability": "shipbreakers.crew.roster",
    "calculate_trait_effects": "shipbreakers.crew.traits",
    "get_special_traits": "shipbreakers.crew.traits",
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
