"""Notification sink for salvage, crew, and expedition signals."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence


@dataclass
class NotificationRecord:
    """Light-weight notification surfaced to whatever front end is attached."""

    day: int
    message: str
    category: str = "info"
    payload: Dict[str, Any] = field(default_factory=dict)

    def format_brief(self) -> str:
        payload_bits = [f"{key}={value}" for key, value in self.payload.items()]
        payload_text = f" ({', '.join(payload_bits)})" if payload_bits else ""
        return f"[{self.category}] Day {self.day}: {self.message}{payload_text}"


class NotificationChannel:
    """Capture notifications with a bounded history."""

    def __init__(self, *, max_entries: int = 200) -> None:
        self.max_entries = max_entries
        self._notifications: List[NotificationRecord] = []

    @property
    def notifications(self) -> Sequence[NotificationRecord]:
        return tuple(self._notifications)

    def push(self, notification: NotificationRecord) -> None:
        self._notifications.append(notification)
        if len(self._notifications) > self.max_entries:
            self._notifications = self._notifications[-self.max_entries :]

    def notify(
        self,
        day: int,
        message: str,
        *,
        category: str = "info",
        payload: Mapping[str, Any] | None = None,
    ) -> NotificationRecord:
        record = NotificationRecord(
            day=day, message=message, category=category, payload=dict(payload or {})
        )
        self.push(record)
        return record

    def by_category(self, category: str) -> list[NotificationRecord]:
        return [record for record in self._notifications if record.category == category]

    def clear(self) -> None:
        """Remove all stored notifications."""

        self._notifications.clear()

    def render_panel(self, *, title: str = "Salvage Log", limit: int = 10):
        """Return a Rich panel listing the most recent notifications."""

        from rich.panel import Panel
        from rich.table import Table

        table = Table(expand=True)
        table.add_column("Day", justify="right", no_wrap=True)
        table.add_column("Category", no_wrap=True)
        table.add_column("Message", overflow="fold")

        for record in reversed(self._notifications[-limit:]):
            table.add_row(str(record.day), record.category, record.format_brief())

        return Panel(table, title=title, border_style="magenta")


__all__ = ["NotificationChannel", "NotificationRecord"]
