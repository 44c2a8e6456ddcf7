"""Cargo hold bookkeeping and the notification channel."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest
from rich.panel import Panel

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shipbreakers.events.channels import NotificationChannel
from shipbreakers.events.narrative import NARRATIVE_EVENTS, trigger_narrative_event
from shipbreakers.wreck.cargo import CargoCapacityError, CargoHold, CargoItemNotFoundError
from shipbreakers.wreck.models import LootCategory, LootItem, Room


def _item(item_id: str, value: int = 100, category: LootCategory = LootCategory.UNIVERSAL) -> LootItem:
    return LootItem(id=item_id, name=item_id.title(), value=value, category=category)


def test_cargo_hold_is_bounded() -> None:
    hold = CargoHold(capacity=2, items=[_item("a")])
    hold.load(_item("b", 250, LootCategory.MILITARY))
    assert hold.is_full
    assert hold.free_slots == 0
    with pytest.raises(CargoCapacityError):
        hold.load(_item("c"))
    assert [item.id for item in hold] == ["a", "b"]
    assert "b" in hold
    assert hold.total_value == 350
    assert hold.summary_by_category() == {"universal": 100, "military": 250}


def test_cargo_unload_and_resize() -> None:
    hold = CargoHold(capacity=3, items=[_item("a"), _item("b")])
    assert hold.unload("a").id == "a"
    with pytest.raises(CargoItemNotFoundError):
        hold.unload("a")
    with pytest.raises(CargoCapacityError):
        hold.set_capacity(0)
    hold.set_capacity(1)
    assert hold.is_full
    assert [item.id for item in hold.clear()] == ["b"]
    assert len(hold) == 0
    with pytest.raises(CargoCapacityError):
        CargoHold(capacity=1, items=[_item("x"), _item("y")])


def test_room_marks_itself_looted() -> None:
    room = Room(id="r", name="Galley", hazard_type="environmental", hazard_level=0, loot=[_item("pan")])
    assert room.is_open
    assert room.remove_item("pan").id == "pan"
    assert room.looted and not room.is_open
    assert room.remove_item("pan") is None
    with pytest.raises(ValueError):
        Room(id="bad", name="Bad", hazard_type="combat", hazard_level=6)


def test_channel_keeps_bounded_history() -> None:
    channel = NotificationChannel(max_entries=3)
    for day in range(5):
        channel.notify(day, f"message {day}", category="crew" if day % 2 else "info")
    assert [record.day for record in channel.notifications] == [2, 3, 4]
    assert [record.day for record in channel.by_category("crew")] == [3]
    channel.clear()
    assert channel.notifications == ()


def test_brief_format_includes_payload() -> None:
    record = NotificationChannel().notify(2, "Salvaged relay", category="item_salvaged", payload={"value": 90})
    assert record.format_brief() == "[item_salvaged] Day 2: Salvaged relay (value=90)"


def test_render_panel_builds_rich_renderable() -> None:
    channel = NotificationChannel()
    channel.notify(1, "Arrived", category="expedition")
    assert isinstance(channel.render_panel(title="Log"), Panel)


def test_narrative_events(scripted) -> None:
    channel = NotificationChannel()
    record = trigger_narrative_event(channel, "travel", day=3, rng=scripted([0.99]))
    assert record is not None
    assert record.payload["title"] == NARRATIVE_EVENTS["travel"][-1]
    assert trigger_narrative_event(channel, "unknown", day=3, rng=scripted()) is None
    assert len(channel.notifications) == 1
