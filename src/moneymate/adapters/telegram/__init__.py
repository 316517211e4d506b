# src/moneymate/adapters/telegram/__init__.py
"""
Telegram Adapters - Bot Interface

This package contains Telegram bot adapters:
- Bot application builder
- Command handlers
- Scheduled refresh job
- Alert notifier
"""

from moneymate.adapters.telegram.bot import BotServices, build_application, get_services
from moneymate.adapters.telegram.handlers import build_handlers
from moneymate.adapters.telegram.jobs import refresh_job
from moneymate.adapters.telegram.notifier import TelegramNotifier

__all__ = [
    "BotServices",
    "build_application",
    "get_services",
    "build_handlers",
    "refresh_job",
    "TelegramNotifier",
]
