"""Wreck, room, and loot records traversed during a salvage run."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum


class HazardType(str, Enum):
    """Kinds of danger a room can hold."""

    MECHANICAL = "mechanical"
    COMBAT = "combat"
    ENVIRONMENTAL = "environmental"
    SECURITY = "security"


class LootRarity(str, Enum):
    """Rarity tiers controlling extraction time."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"

    @staticmethod
    def from_value(value: "LootRarity | str") -> "LootRarity":
        """Return the matching rarity, defaulting to :attr:`COMMON`."""

        if isinstance(value, LootRarity):
            return value
        normalized = str(value).strip().lower()
        for rarity in LootRarity:
            if rarity.value == normalized:
                return rarity
        return LootRarity.COMMON


class LootCategory(str, Enum):
    """Broad classification of salvaged goods."""

    UNIVERSAL = "universal"
    MILITARY = "military"
    SCIENCE = "science"
    INDUSTRIAL = "industrial"
    CIVILIAN = "civilian"


@dataclass(frozen=True, slots=True)
class LootItem:
    """A single extractable item and its base market value."""

    id: str
    name: str
    value: int
    rarity: LootRarity = LootRarity.COMMON
    category: LootCategory = LootCategory.UNIVERSAL
    description: str = ""


@dataclass
class Room:
    """A compartment of a wreck holding loot behind a hazard."""

    id: str
    name: str
    hazard_type: HazardType | str
    hazard_level: int
    loot: list[LootItem] = field(default_factory=list)
    looted: bool = False
    sealed: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.hazard_level <= 5:
            raise ValueError("hazard_level must be between 0 and 5")

    def find_item(self, item_id: str) -> LootItem | None:
        for item in self.loot:
            if item.id == item_id:
                return item
        return None

    def remove_item(self, item_id: str) -> LootItem | None:
        """Remove ``item_id`` from the room, marking it looted once empty."""

        item = self.find_item(item_id)
        if item is None:
            return None
        self.loot = [entry for entry in self.loot if entry.id != item_id]
        if not self.loot:
            self.looted = True
        return item

    @property
    def is_open(self) -> bool:
        """``True`` when the room can be entered for salvage."""

        return not self.sealed and not self.looted

    @property
    def loot_value(self) -> int:
        return sum(item.value for item in self.loot)


@dataclass
class Wreck:
    """A derelict structure made of rooms."""

    id: str
    name: str
    tier: int
    distance: float
    rooms: list[Room] = field(default_factory=list)
    stripped: bool = False

    def __iter__(self) -> Iterator[Room]:
        return iter(self.rooms)

    def room(self, room_id: str) -> Room | None:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def unlooted_rooms(self) -> list[Room]:
        return [room for room in self.rooms if not room.looted]

    @property
    def remaining_value(self) -> int:
        """Total base value of loot still aboard."""

        return sum(room.loot_value for room in self.rooms)


__all__ = [
    "HazardType",
    "LootCategory",
    "LootItem",
    "LootRarity",
    "Room",
    "Wreck",
]
