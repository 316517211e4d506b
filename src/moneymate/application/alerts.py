# src/moneymate/application/alerts.py
"""
Alert Engine - Price-Alert Evaluation

Evaluates armed alerts against the previous/current quotes published by the
registry and performs the one-shot Armed -> Fired transition. Quotes are
compared by CurrencyQuote.alert_value, so crypto thresholds are coin prices
in the base currency.

Trigger conditions:
- above:          previous < threshold and current >= threshold
- below:          previous > threshold and current <= threshold
- percent_change: |current - previous| / previous * 100 >= threshold
                  (one refresh interval, skipped when previous is 0)

Files that USE this module:
- moneymate.application.refresh_service (evaluates after every swap)
- tests.test_alerts (unit tests)

Files that this module USES:
- moneymate.application.registry (CurrencyRegistry, RegistrySnapshot)
- moneymate.domain.models (AlertDefinition, AlertKind)
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from moneymate.application.registry import CurrencyRegistry, RegistrySnapshot
from moneymate.domain.models import AlertDefinition, AlertKind

logger = logging.getLogger(__name__)


def _usable(rate: float) -> bool:
    return math.isfinite(rate) and rate > 0


def check_trigger(kind: AlertKind, threshold: float, previous_rate: float, current_rate: float) -> bool:
    """
    Check whether a rate move crosses an alert's condition.

    Args:
        kind: Alert kind
        threshold: Absolute rate, or unsigned percentage for percent_change
        previous_rate: Rate from the previous snapshot
        current_rate: Rate from the current snapshot

    Returns:
        True if the alert should fire on this move
    """
    if kind == AlertKind.ABOVE:
        return previous_rate < threshold and current_rate >= threshold
    if kind == AlertKind.BELOW:
        return previous_rate > threshold and current_rate <= threshold
    if kind == AlertKind.PERCENT_CHANGE:
        if previous_rate == 0:
            return False
        change_pct = abs((current_rate - previous_rate) / previous_rate) * 100.0
        return change_pct >= abs(threshold)
    return False


class AlertEngine:
    """Decides which armed alerts fire on a refresh and fires them exactly once."""

    def evaluate(
        self,
        alerts: Iterable[AlertDefinition],
        registry: Union[CurrencyRegistry, RegistrySnapshot],
        now: Optional[datetime] = None,
    ) -> List[AlertDefinition]:
        """
        Evaluate alerts against one published snapshot.

        Inactive alerts are not evaluated. Alerts for codes that are not
        priced (or priced inconsistently) are skipped for this cycle.

        Args:
            alerts: Alert definitions to evaluate
            registry: Registry (its current snapshot is used) or a snapshot
            now: Trigger timestamp for alerts fired in this pass

        Returns:
            Alerts that fired in this pass, already in the Fired state
        """
        snap = registry.snapshot() if isinstance(registry, CurrencyRegistry) else registry
        if snap.version == 0:
            return []
        fired_at = now or datetime.now(timezone.utc)

        fired: List[AlertDefinition] = []
        for alert in alerts:
            if not alert.is_active:
                continue

            curr = snap.get_quote(alert.currency_code)
            prev = snap.get_previous(alert.currency_code)
            if curr is None or prev is None:
                logger.debug("Alert %s skipped: %s not priced", alert.id, alert.currency_code)
                continue
            if not (_usable(curr.rate_in_base) and _usable(prev.rate_in_base)):
                logger.warning("Alert %s skipped: inconsistent rate for %s", alert.id, alert.currency_code)
                continue

            # Thresholds are in the units users see: coin price for crypto, units per base for fiat
            if not check_trigger(alert.kind, alert.threshold, prev.alert_value, curr.alert_value):
                continue

            # fire() is a compare-and-set, so concurrent passes cannot report the same alert twice
            if alert.fire(fired_at):
                logger.info(
                    "Alert fired: id=%s %s %s %s (prev=%s, curr=%s)",
                    alert.id, alert.currency_code, alert.kind.value, alert.threshold,
                    prev.alert_value, curr.alert_value,
                )
                fired.append(alert)
        return fired
