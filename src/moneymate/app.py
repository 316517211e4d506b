# src/moneymate/app.py
"""
Application Entry Point - Composition Root

This module wires the rate engine, alert store, providers and notifier
together and runs them.

Two modes:
- With BOT_TOKEN: a Telegram bot that refreshes rates on the job queue,
  answers /rates, /convert and alert commands, and notifies ALERT_CHAT_ID.
- Without BOT_TOKEN: a headless loop that refreshes on an interval and
  logs fired alerts.

Files that USE this module:
- moneymate console script (pyproject entry point)

Files that this module USES:
- moneymate.shared.logging_conf (setup_logging)
- moneymate.config (settings)
- moneymate.application.* (engine and services)
- moneymate.adapters.* (providers, persistence, notifiers, telegram)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from moneymate.adapters.notifiers.base import LoggingNotifier, Notifier
from moneymate.adapters.persistence.alert_store import AlertStore
from moneymate.application.alert_service import AlertService
from moneymate.application.conversion import ConversionEngine
from moneymate.application.rates_service import build_default_chain
from moneymate.application.refresh_service import RefreshService
from moneymate.application.registry import CurrencyRegistry
from moneymate.config import settings
from moneymate.shared.logging_conf import setup_logging

logger = logging.getLogger(__name__)


def build_refresher(notifier: Notifier) -> RefreshService:
    """
    Compose the engine services from settings.

    Args:
        notifier: Receiver of fired alerts

    Returns:
        RefreshService with registry, alert service and provider chain attached
    """
    registry = CurrencyRegistry(base_code=settings.base_currency)
    alert_service = AlertService(AlertStore(settings.alerts_file), base_code=settings.base_currency)
    return RefreshService(
        source=build_default_chain(settings.base_currency),
        registry=registry,
        alert_service=alert_service,
        notifier=notifier,
    )


async def run_headless() -> None:
    """Refresh forever on the configured interval, logging fired alerts."""
    refresher = build_refresher(LoggingNotifier())
    interval = settings.refresh_interval_minutes * 60
    logger.info("Running headless: refresh every %d minutes", settings.refresh_interval_minutes)
    while True:
        await refresher.refresh()
        await asyncio.sleep(interval)


def run_bot() -> None:
    """Run the Telegram bot with a repeating refresh job."""
    # Telegram imports stay here so headless mode does not need the bot stack
    from moneymate.adapters.telegram.bot import BotServices, build_application
    from moneymate.adapters.telegram.handlers import build_handlers
    from moneymate.adapters.telegram.jobs import refresh_job
    from moneymate.adapters.telegram.notifier import TelegramNotifier

    # The notifier needs app.bot, and the app needs the services
    refresher = build_refresher(LoggingNotifier())
    services = BotServices(
        registry=refresher.registry,
        converter=ConversionEngine(refresher.registry),
        alerts=refresher.alert_service,
        refresher=refresher,
    )
    app = build_application(settings.bot_token, services)
    if settings.alert_chat_id:
        refresher.notifier = TelegramNotifier(app.bot, settings.alert_chat_id)
    else:
        logger.warning("ALERT_CHAT_ID not set: fired alerts are only logged")

    for h in build_handlers():
        app.add_handler(h)

    app.job_queue.run_repeating(
        callback=refresh_job,
        interval=timedelta(minutes=settings.refresh_interval_minutes),
        first=0,  # start immediately at boot
        name="rate_refresh",
    )

    logger.info(
        "Starting bot polling… base=%s refresh interval=%d minutes",
        settings.base_currency, settings.refresh_interval_minutes,
    )
    app.run_polling(drop_pending_updates=True)


def main() -> None:
    """Configure logging and start the bot or the headless loop."""
    setup_logging(
        level=logging.INFO,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        to_stdout=settings.log_stdout,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )

    if settings.bot_token:
        run_bot()
    else:
        logger.info("BOT_TOKEN not set, running without Telegram")
        try:
            asyncio.run(run_headless())
        except KeyboardInterrupt:
            logger.info("Stopped")


if __name__ == "__main__":
    main()
