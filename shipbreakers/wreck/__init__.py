"""Wreck layout records and the ship cargo hold."""

from __future__ import annotations

from .cargo import CargoCapacityError, CargoHold, CargoItemNotFoundError
from .models import HazardType, LootCategory, LootItem, LootRarity, Room, Wreck

__all__ = [
    "CargoCapacityError",
    "CargoHold",
    "CargoItemNotFoundError",
    "HazardType",
    "LootCategory",
    "LootItem",
    "LootRarity",
    "Room",
    "Wreck",
]
