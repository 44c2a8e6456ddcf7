"""ECS world abstraction used to order the daily upkeep systems."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from itertools import count
from typing import TYPE_CHECKING, Any, Dict, List, Protocol, Type, TypeVar

import esper

if TYPE_CHECKING:  # pragma: no cover - imported only for typing
    from .day_cycle import DayContext
    from .state import GameState

PhaseName = str

T = TypeVar("T")

_WORLD_IDS = count(1)


@dataclass(slots=True)
class GameStateComponent:
    """Singleton component exposing the expedition state to systems."""

    state: GameState


class SystemCallback(Protocol):
    """Callable protocol describing a world system."""

    def __call__(self, world: "GameWorld", context: "DayContext") -> None:  # noqa: D401
        ...


@dataclass(slots=True)
class _SystemEntry:
    priority: int
    order: int
    callback: SystemCallback


class GameWorld:
    """Private ``esper`` world plus phase-ordered system execution.

    esper keeps its worlds in module state, so every call switches to this
    instance's named world and back again.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = name or f"shipbreakers-{next(_WORLD_IDS)}"
        self._singletons: Dict[Type[Any], int] = {}
        self._systems: Dict[PhaseName, List[_SystemEntry]] = {}
        self._system_counter = 0

    @contextmanager
    def _active(self) -> Iterator[None]:
        previous = esper.current_world
        esper.switch_world(self.name)
        try:
            yield
        finally:
            esper.switch_world(previous)

    # ------------------------------------------------------------------
    def create_entity(self, *components: object) -> int:
        with self._active():
            return esper.create_entity(*components)

    def add_component(self, entity: int, component: object) -> None:
        with self._active():
            esper.add_component(entity, component)

    def add_singleton(self, component: object) -> int:
        """Register ``component`` as the singleton instance for its type."""

        component_type = type(component)
        with self._active():
            entity = self._singletons.get(component_type)
            if entity is None or not esper.entity_exists(entity):
                entity = esper.create_entity(component)
                self._singletons[component_type] = entity
            else:
                esper.add_component(entity, component)
        return entity

    def get_singleton(self, component_type: Type[T]) -> T | None:
        """Retrieve the singleton component for ``component_type`` if registered."""

        entity = self._singletons.get(component_type)
        if entity is None:
            return None
        with self._active():
            try:
                return esper.component_for_entity(entity, component_type)
            except KeyError:
                self._singletons.pop(component_type, None)
                return None

    # ------------------------------------------------------------------
    def register_system(
        self,
        phase: PhaseName,
        system: SystemCallback | object,
        *,
        priority: int = 100,
    ) -> None:
        """Register ``system`` to execute during ``phase`` with ``priority`` ordering."""

        if hasattr(system, "process") and callable(getattr(system, "process")):
            callback = getattr(system, "process")
        elif callable(system):
            callback = system
        else:
            raise TypeError("system must be callable or expose a process() method")

        self._system_counter += 1
        entry = _SystemEntry(priority=priority, order=self._system_counter, callback=callback)
        phase_systems = self._systems.setdefault(phase, [])
        phase_systems.append(entry)
        phase_systems.sort(key=lambda item: (item.priority, item.order))

    def process_phase(self, phase: PhaseName, context: "DayContext") -> None:
        """Execute all systems registered for ``phase`` in priority order."""

        for entry in self._systems.get(phase, []):
            entry.callback(self, context)

    def close(self) -> None:
        """Drop the underlying esper world."""

        if esper.current_world == self.name:
            esper.switch_world("default")
        if self.name in esper.list_worlds():
            esper.delete_world(self.name)
        self._singletons.clear()


__all__ = ["GameStateComponent", "GameWorld", "SystemCallback"]
