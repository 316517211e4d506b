# src/moneymate/adapters/telegram/jobs.py
"""
Telegram Jobs - Scheduled Rate Refresh

This module holds the job-queue callback that runs one refresh cycle on
every tick. Overlapping ticks are skipped by RefreshService itself.

Files that USE this module:
- moneymate.app (refresh_job is registered as a repeating job)

Files that this module USES:
- moneymate.adapters.telegram.bot (get_services)
"""
from __future__ import annotations

import logging

from telegram.ext import ContextTypes

from moneymate.adapters.telegram.bot import get_services

logger = logging.getLogger(__name__)


async def refresh_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Scheduled job: fetch rates, publish them, evaluate and notify alerts.

    Failures are logged; the next tick simply tries again.
    """
    services = get_services(context)
    outcome = await services.refresher.refresh()
    if outcome.published:
        logger.debug("refresh_job: snapshot v%d, %d alerts fired", outcome.version, len(outcome.fired))
    else:
        logger.warning("refresh_job: no new snapshot (%s)", outcome.error)
