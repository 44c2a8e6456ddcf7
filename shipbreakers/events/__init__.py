"""Notification channels for salvage and expedition signals."""

from __future__ import annotations

from .channels import NotificationChannel, NotificationRecord

__all__ = ["NotificationChannel", "NotificationRecord"]
