"""Notification port — system-level push channel for task reminders.

Reminders always land in the scheduler's in-app inbox; a port is only used
on top of that, when system notifications are granted. Core modules depend
on this protocol, never on a specific messaging provider.
"""

from __future__ import annotations

from typing import Protocol


class NotificationPort(Protocol):
    """Pushes one reminder (title + body) to one recipient."""

    async def push(self, chat_id: int, title: str, body: str) -> None: ...
