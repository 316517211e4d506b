# src/moneymate/application/refresh_service.py
"""
Refresh Service - One Rate Refresh Cycle

A refresh cycle is:
1. Fetch a complete rate table (blocking HTTP, run off the event loop)
2. Publish it to the CurrencyRegistry (single snapshot swap)
3. Evaluate armed alerts against the new previous/current pair
4. Persist alert state and hand each fired alert to the notifier once

Only one cycle runs at a time. A failed fetch leaves the registry and the
alerts untouched.

Files that USE this module:
- moneymate.adapters.telegram.jobs (refresh_job runs a cycle on the job queue)
- moneymate.app (composition root)
- tests.test_refresh_service (unit tests)

Files that this module USES:
- moneymate.application.registry (CurrencyRegistry)
- moneymate.application.alerts (AlertEngine)
- moneymate.application.alert_service (AlertService)
- moneymate.adapters.notifiers.base (Notifier)
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from moneymate.adapters.notifiers.base import Notifier
from moneymate.application.alert_service import AlertService
from moneymate.application.alerts import AlertEngine
from moneymate.application.registry import CurrencyRegistry
from moneymate.domain.errors import InconsistentRateError
from moneymate.domain.models import AlertDefinition, RateTable

logger = logging.getLogger(__name__)


class RateSource(Protocol):
    """Anything that can produce a complete RateTable (a provider or ProviderChain)."""

    def fetch_rates(self) -> RateTable:
        ...


@dataclass
class RefreshOutcome:
    """
    Result of one refresh cycle.

    Attributes:
        published: True if a new snapshot was published
        version: Registry snapshot version after the cycle
        fired: Alerts that fired in this cycle
        providers: Providers that supplied the table
        error: Error message when the cycle failed or was skipped
    """
    published: bool
    version: int
    fired: List[AlertDefinition] = field(default_factory=list)
    providers: List[str] = field(default_factory=list)
    error: Optional[str] = None


class RefreshService:
    """Runs fetch -> swap -> evaluate -> notify cycles."""

    SAVE_ATTEMPTS = 2

    def __init__(
        self,
        source: RateSource,
        registry: CurrencyRegistry,
        alert_service: AlertService,
        notifier: Notifier,
        engine: Optional[AlertEngine] = None,
    ):
        self.source = source
        self.registry = registry
        self.alert_service = alert_service
        self.notifier = notifier
        self.engine = engine or AlertEngine()
        self._lock = asyncio.Lock()

    def apply(self, table: RateTable) -> List[AlertDefinition]:
        """
        Publish a rate table and evaluate alerts against it (synchronous part of a cycle).

        Args:
            table: Complete rate table

        Returns:
            Alerts that fired

        Raises:
            ValueError: If the table uses a different base currency than the registry
            InconsistentRateError: If the base currency is quoted at a rate other than 1
        """
        if table.base != self.registry.base_code:
            raise ValueError(f"Rate table base {table.base} != registry base {self.registry.base_code}")
        snapshot = self.registry.set_quotes(table.to_quotes())
        fired = self.engine.evaluate(self.alert_service.get_active_alerts(), snapshot)
        if fired:
            self._persist_fired(fired)
        return fired

    def _persist_fired(self, fired: List[AlertDefinition]) -> bool:
        # Fired state must reach disk before delivery, or a restart re-arms the alert
        for attempt in range(1, self.SAVE_ATTEMPTS + 1):
            if self.alert_service.save():
                return True
            logger.warning("Persisting fired alerts failed (attempt %d/%d)", attempt, self.SAVE_ATTEMPTS)
        logger.critical(
            "Fired alerts %s not persisted; they will fire again after a restart",
            ",".join(a.id for a in fired),
        )
        return False

    async def _deliver(self, fired: List[AlertDefinition]) -> None:
        for alert in fired:
            try:
                await self.notifier.notify(alert)
            except Exception as e:
                # Not retried: each firing is delivered at most once
                logger.error("Failed to deliver alert %s: %s", alert.id, e, exc_info=True)

    async def refresh(self) -> RefreshOutcome:
        """
        Run one refresh cycle.

        Returns:
            RefreshOutcome describing what happened
        """
        if self._lock.locked():
            logger.warning("Refresh skipped: previous refresh still running")
            return RefreshOutcome(published=False, version=self.registry.snapshot().version,
                                  error="refresh already running")

        async with self._lock:
            try:
                table = await asyncio.to_thread(self.source.fetch_rates)
            except Exception as e:
                logger.error("Rate refresh failed, keeping previous snapshot: %s", e)
                return RefreshOutcome(published=False, version=self.registry.snapshot().version, error=str(e))

            try:
                fired = self.apply(table)
            except (InconsistentRateError, ValueError) as e:
                logger.error("Rejected rate table: %s", e)
                return RefreshOutcome(published=False, version=self.registry.snapshot().version, error=str(e))

            version = self.registry.snapshot().version
            logger.info(
                "Refresh v%d published %d quotes from %s; %d alerts fired",
                version, len(table.rates), ",".join(table.providers) or "?", len(fired),
            )
            await self._deliver(fired)
            return RefreshOutcome(
                published=True,
                version=version,
                fired=fired,
                providers=list(table.providers),
            )
