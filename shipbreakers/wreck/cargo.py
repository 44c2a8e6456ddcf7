"""Slot-limited ship cargo hold that receives salvaged loot."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from .models import LootCategory, LootItem


class CargoCapacityError(ValueError):
    """Raised when attempting to load more items than the hold has slots for."""


class CargoItemNotFoundError(LookupError):
    """Raised when attempting to unload an item that is not aboard."""


class CargoHold:
    """Ordered list of loot bounded by a slot capacity.

    Each item occupies one slot. The hold never exceeds ``capacity``:
    loading into a full hold raises :class:`CargoCapacityError` and leaves
    the contents untouched.
    """

    def __init__(self, *, capacity: int, items: Iterable[LootItem] = ()) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        self.capacity = int(capacity)
        self._items: list[LootItem] = []
        for item in items:
            self.load(item)

    # -- Introspection -------------------------------------------------
    def __iter__(self) -> Iterator[LootItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._items)

    @property
    def items(self) -> Sequence[LootItem]:
        return tuple(self._items)

    @property
    def free_slots(self) -> int:
        return max(0, self.capacity - len(self._items))

    @property
    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    @property
    def total_value(self) -> int:
        return sum(item.value for item in self._items)

    def summary_by_category(self) -> dict[str, int]:
        summary: dict[LootCategory, int] = {}
        for item in self._items:
            summary[item.category] = summary.get(item.category, 0) + item.value
        return {category.value: amount for category, amount in summary.items()}

    # -- Mutation helpers ----------------------------------------------
    def load(self, item: LootItem) -> None:
        if self.is_full:
            raise CargoCapacityError(
                f"Cargo hold is full ({len(self._items)}/{self.capacity})"
            )
        self._items.append(item)

    def unload(self, item_id: str) -> LootItem:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return self._items.pop(index)
        raise CargoItemNotFoundError(item_id)

    def set_capacity(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity cannot be negative")
        if len(self._items) > capacity:
            raise CargoCapacityError("Existing cargo exceeds the new capacity")
        self.capacity = int(capacity)

    def clear(self) -> list[LootItem]:
        """Empty the hold and return what was aboard."""

        removed = list(self._items)
        self._items.clear()
        return removed


__all__ = ["CargoCapacityError", "CargoHold", "CargoItemNotFoundError"]
