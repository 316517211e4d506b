# src/moneymate/adapters/persistence/__init__.py
"""
Persistence Adapters - Storage

This package contains the JSON file store for price alerts.
"""

from moneymate.adapters.persistence.alert_store import AlertStore, alert_from_json, alert_to_json

__all__ = ["AlertStore", "alert_from_json", "alert_to_json"]
