# src/moneymate/application/alert_service.py
"""
Alert Service - Price Alert Management

Creates, lists and deletes price alerts and keeps them persisted. Evaluation
itself lives in AlertEngine; this service only owns the collection.

Files that USE this module:
- moneymate.application.refresh_service (active alerts for evaluation, save after firing)
- moneymate.adapters.telegram.handlers (/alert, /alerts, /delalert)
- moneymate.app (composition root)

Files that this module USES:
- moneymate.adapters.persistence.alert_store (AlertStore for persistence)
- moneymate.adapters.formatting.formatter (default alert title/message)
- moneymate.domain.models (AlertDefinition, AlertKind)
"""
from __future__ import annotations

import logging
import math
import threading
from typing import List, Optional, Union

from moneymate.adapters.formatting.formatter import default_alert_message, default_alert_title
from moneymate.adapters.persistence.alert_store import AlertStore
from moneymate.domain.errors import InvalidAlertError
from moneymate.domain.models import AlertDefinition, AlertKind
from moneymate.shared.validators import validate_currency_code

logger = logging.getLogger(__name__)


class AlertService:
    """Owns the alert collection and its persistence."""

    def __init__(self, store: Optional[AlertStore] = None, base_code: Optional[str] = None):
        """
        Initialize the service and load persisted alerts.

        Args:
            store: AlertStore to persist to; None keeps alerts in memory only
            base_code: Registry base currency; alerts on it are rejected (its rate is always 1)
        """
        self.store = store
        self.base_code = base_code
        self._lock = threading.Lock()
        self._alerts: List[AlertDefinition] = store.load() if store else []

    def save(self) -> bool:
        """
        Persist the current collection. Failures are logged; memory state is kept.

        Returns:
            True if the collection was written (or there is no store), False on failure
        """
        if self.store is None:
            return True
        with self._lock:
            alerts = list(self._alerts)
        try:
            self.store.save(alerts)
        except RuntimeError as e:
            logger.error("Failed to persist alerts: %s", e)
            return False
        return True

    def create_alert(
        self,
        currency_code: str,
        threshold: float,
        kind: Union[AlertKind, str],
        title: Optional[str] = None,
        message: Optional[str] = None,
    ) -> AlertDefinition:
        """
        Create and persist a new armed alert.

        Args:
            currency_code: Currency to watch
            threshold: Absolute rate, or percentage magnitude for percent_change
            kind: AlertKind or its string value
            title: Optional notification title (generated when omitted)
            message: Optional notification body (generated when omitted)

        Returns:
            The new AlertDefinition

        Raises:
            InvalidAlertError: If code, kind or threshold is invalid
        """
        code = (currency_code or "").strip().upper()
        if not validate_currency_code(code):
            raise InvalidAlertError(f"Invalid currency code: {currency_code!r}")
        if self.base_code and code == self.base_code:
            raise InvalidAlertError(f"{code} is the base currency; its rate never changes")
        try:
            kind = AlertKind(kind)
        except ValueError:
            raise InvalidAlertError(f"Unknown alert kind: {kind!r}") from None
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not math.isfinite(threshold):
            raise InvalidAlertError(f"Invalid threshold: {threshold!r}")

        threshold = float(threshold)
        if kind == AlertKind.PERCENT_CHANGE:
            # Direction-agnostic magnitude
            threshold = abs(threshold)
            if threshold == 0:
                raise InvalidAlertError("percent_change threshold must be non-zero")
        elif threshold <= 0:
            raise InvalidAlertError("Rate threshold must be positive")

        alert = AlertDefinition(
            currency_code=code,
            kind=kind,
            threshold=threshold,
            title=title or default_alert_title(code, kind),
            message=message or default_alert_message(code, kind, threshold),
        )
        with self._lock:
            self._alerts.insert(0, alert)
        logger.info("Alert created: id=%s %s %s %s", alert.id, code, kind.value, threshold)
        self.save()
        return alert

    def delete_alert(self, alert_id: str) -> bool:
        """
        Delete an alert regardless of its state.

        Returns:
            True if an alert was deleted, False if the id is unknown
        """
        with self._lock:
            before = len(self._alerts)
            self._alerts = [a for a in self._alerts if a.id != alert_id]
            deleted = len(self._alerts) != before
        if deleted:
            logger.info("Alert deleted: id=%s", alert_id)
            self.save()
        return deleted

    def get_alert(self, alert_id: str) -> Optional[AlertDefinition]:
        with self._lock:
            return next((a for a in self._alerts if a.id == alert_id), None)

    def get_alerts(self) -> List[AlertDefinition]:
        """All alerts, newest first."""
        with self._lock:
            return list(self._alerts)

    def get_alerts_for_currency(self, currency_code: str) -> List[AlertDefinition]:
        return [a for a in self.get_alerts() if a.currency_code == currency_code]

    def get_active_alerts(self) -> List[AlertDefinition]:
        return [a for a in self.get_alerts() if a.is_active]

    def get_triggered_alerts(self) -> List[AlertDefinition]:
        return [a for a in self.get_alerts() if a.triggered_at is not None]

    def active_alerts_count(self) -> int:
        return len(self.get_active_alerts())

    def clear_triggered_alerts(self) -> int:
        """
        Delete every fired alert.

        Returns:
            Number of alerts removed
        """
        with self._lock:
            kept = [a for a in self._alerts if a.triggered_at is None]
            removed = len(self._alerts) - len(kept)
            self._alerts = kept
        if removed:
            logger.info("Cleared %d triggered alerts", removed)
            self.save()
        return removed
