# src/moneymate/adapters/telegram/bot.py
"""
Telegram Bot - Application Builder and Shared Services

This module builds the Telegram Application and attaches the engine
services to it, so handlers and jobs reach them through bot_data instead
of module-level singletons.

Files that USE this module:
- moneymate.app (build_application)
- moneymate.adapters.telegram.handlers (get_services)
- moneymate.adapters.telegram.jobs (get_services)

Files that this module USES:
- moneymate.application.* (registry, conversion, alert and refresh services)
"""

from __future__ import annotations

from dataclasses import dataclass

from telegram.ext import Application, ContextTypes

from moneymate.application.alert_service import AlertService
from moneymate.application.conversion import ConversionEngine
from moneymate.application.refresh_service import RefreshService
from moneymate.application.registry import CurrencyRegistry

SERVICES_KEY = "services"


@dataclass
class BotServices:
    """Engine services shared by handlers and jobs."""
    registry: CurrencyRegistry
    converter: ConversionEngine
    alerts: AlertService
    refresher: RefreshService


def build_application(bot_token: str, services: BotServices) -> Application:
    """
    Build Telegram bot application with the engine services attached.

    Args:
        bot_token: Telegram bot token
        services: Services made available to handlers and jobs

    Returns:
        Configured Application instance
    """
    app = Application.builder().token(bot_token).build()
    app.bot_data[SERVICES_KEY] = services
    return app


def get_services(context: ContextTypes.DEFAULT_TYPE) -> BotServices:
    """Return the services attached by build_application."""
    return context.bot_data[SERVICES_KEY]
