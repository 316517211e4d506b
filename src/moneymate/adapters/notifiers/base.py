# src/moneymate/adapters/notifiers/base.py
"""
Notifier Interface - Delivery of Fired Alerts

A notifier presents a fired alert to the user. It is called once per firing
reported by AlertEngine and must not retry a delivery whose outcome is
unknown, so users get each alert at most once.

Files that USE this module:
- moneymate.application.refresh_service (notifies fired alerts)
- moneymate.adapters.telegram.notifier (TelegramNotifier implements Notifier)
- moneymate.app (LoggingNotifier when Telegram is not configured)

Files that this module USES:
- moneymate.adapters.formatting.formatter (alert_notification text)
"""
from __future__ import annotations

import logging
from typing import List, Protocol

from moneymate.adapters.formatting.formatter import alert_notification
from moneymate.domain.models import AlertDefinition

log = logging.getLogger(__name__)


class Notifier(Protocol):
    """Protocol for alert notifiers."""

    async def notify(self, alert: AlertDefinition) -> None:
        ...


class LoggingNotifier:
    """Writes fired alerts to the application log."""

    def __init__(self):
        self.delivered: List[str] = []

    async def notify(self, alert: AlertDefinition) -> None:
        log.info("ALERT %s: %s", alert.id, alert_notification(alert).replace("\n", " | "))
        self.delivered.append(alert.id)
