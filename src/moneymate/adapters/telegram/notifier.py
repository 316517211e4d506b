# src/moneymate/adapters/telegram/notifier.py
"""
Telegram Notifier - Alert Delivery to a Telegram Chat

Sends fired alerts to the configured chat. A 429 (RetryAfter) means the
message was not accepted, so it is retried once after the requested delay.
A timeout leaves delivery unknown and is not retried, keeping delivery
at-most-once.

Files that USE this module:
- moneymate.app (used as the refresh notifier when ALERT_CHAT_ID is set)
- tests.test_telegram (unit tests)

Files that this module USES:
- moneymate.adapters.formatting.formatter (alert_notification text)
"""
from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from telegram import Bot
from telegram.error import RetryAfter, TimedOut

from moneymate.adapters.formatting.formatter import alert_notification
from moneymate.domain.models import AlertDefinition

logger = logging.getLogger(__name__)


def _seconds(value) -> float:
    # RetryAfter.retry_after is an int or a timedelta depending on the library version
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class TelegramNotifier:
    """Notifier that posts alert notifications with a Telegram bot."""

    def __init__(self, bot: Bot, chat_id: str):
        """
        Args:
            bot: Initialized telegram.Bot (e.g. Application.bot)
            chat_id: Target chat or channel id
        """
        self.bot = bot
        self.chat_id = chat_id

    async def notify(self, alert: AlertDefinition) -> None:
        text = alert_notification(alert)
        try:
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except RetryAfter as e:
            logger.warning("Telegram rate limit (429): retry after %s seconds", e.retry_after)
            await asyncio.sleep(_seconds(e.retry_after) + 1)
            await self.bot.send_message(chat_id=self.chat_id, text=text)
        except TimedOut:
            logger.warning("Telegram timed out delivering alert %s; not retrying", alert.id)
            return
        logger.info("Alert %s delivered to %s", alert.id, self.chat_id)
