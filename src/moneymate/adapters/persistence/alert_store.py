# src/moneymate/adapters/persistence/alert_store.py
"""
Alert Store - Price Alert Persistence

This module stores price alert definitions in a JSON file. Writes are atomic
(temp file + rename) and a corrupt file is backed up instead of crashing the
service.

Files that USE this module:
- moneymate.application.alert_service (AlertService loads and saves alerts)
- moneymate.app (creates the store from settings)

Files that this module USES:
- moneymate.domain.models (AlertDefinition, AlertKind, AlertStatus)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from moneymate.domain.models import AlertDefinition, AlertKind, AlertStatus

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1


def _parse_ts(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    # Accept both "...Z" and "+00:00"
    return datetime.fromisoformat(raw.replace("Z", "+00:00")).astimezone(timezone.utc)


def alert_to_json(alert: AlertDefinition) -> Dict[str, Any]:
    """
    Convert an AlertDefinition to a JSON-serializable dictionary.

    The status pair is read once so is_active and triggered_at always match.
    """
    status = alert.status
    return {
        "id": alert.id,
        "currency_code": alert.currency_code,
        "kind": alert.kind.value,
        "threshold": alert.threshold,
        "title": alert.title,
        "message": alert.message,
        "created_at": alert.created_at.isoformat(),
        "is_active": status.is_active,
        "triggered_at": status.triggered_at.isoformat() if status.triggered_at else None,
    }


def alert_from_json(data: Dict[str, Any]) -> AlertDefinition:
    """
    Create an AlertDefinition from a JSON dictionary.

    Raises:
        KeyError, ValueError, TypeError: If required fields are missing or malformed
    """
    triggered_at = _parse_ts(data.get("triggered_at"))
    is_active = bool(data.get("is_active", True))
    if not is_active and triggered_at is None:
        # Inactive without a timestamp cannot be represented; keep it fired
        triggered_at = datetime.now(timezone.utc)
    return AlertDefinition(
        id=str(data["id"]),
        currency_code=str(data["currency_code"]),
        kind=AlertKind(data["kind"]),
        threshold=float(data["threshold"]),
        title=str(data.get("title", "")),
        message=str(data.get("message", "")),
        created_at=_parse_ts(data.get("created_at")) or datetime.now(timezone.utc),
        status=AlertStatus(is_active=is_active, triggered_at=None if is_active else triggered_at),
    )


class AlertStore:
    """JSON-file backed storage for alert definitions."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[AlertDefinition]:
        """
        Load all alerts from disk.

        Handles problems gracefully:
        1. Missing file -> empty list
        2. Corrupt JSON -> file backed up to *.corrupt, empty list
        3. Malformed entries -> skipped with a warning

        Returns:
            List of AlertDefinition
        """
        if not self.path.exists():
            return []

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            backup_path = self.path.with_suffix(".json.corrupt")
            try:
                shutil.copy2(self.path, backup_path)
                self.path.unlink()
                log.warning("Alert file corrupted, backed up to %s: %s", backup_path, e)
            except OSError as backup_error:
                log.error("Failed to back up corrupt alert file: %s", backup_error)
            return []

        entries = data.get("alerts", []) if isinstance(data, dict) else []
        alerts: List[AlertDefinition] = []
        for entry in entries:
            try:
                alerts.append(alert_from_json(entry))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                log.warning("Skipping malformed alert entry %r: %s", entry, e)
        log.info("Loaded %d alerts from %s", len(alerts), self.path)
        return alerts

    def save(self, alerts: List[AlertDefinition]) -> None:
        """
        Save all alerts using an atomic write.

        Raises:
            RuntimeError: If the file cannot be written
        """
        payload = {
            "version": SCHEMA_VERSION,
            "alerts": [alert_to_json(a) for a in alerts],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(suffix=".json.tmp", dir=str(self.path.parent), text=True)
        except OSError as e:
            raise RuntimeError(f"Failed to save alert file: {e}") from e
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, str(self.path))
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise RuntimeError(f"Failed to save alert file: {e}") from e
