"""Telegram reminder adapter — implements NotificationPort.

A reminder arrives as a single chat message: the title line, then the body.
"""

from __future__ import annotations

import logging

from telegram import Bot

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Pushes task reminders into Telegram chats."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def push(self, chat_id: int, title: str, body: str) -> None:
        await self._bot.send_message(chat_id=chat_id, text=f"{title}\n{body}")
        logger.debug("Reminder pushed to chat %d: %s", chat_id, title)
