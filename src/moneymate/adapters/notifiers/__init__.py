# src/moneymate/adapters/notifiers/__init__.py
"""
Notifier Adapters - Alert Delivery

This package contains the Notifier protocol and the log-based notifier.
The Telegram notifier lives in moneymate.adapters.telegram.
"""

from moneymate.adapters.notifiers.base import LoggingNotifier, Notifier

__all__ = ["LoggingNotifier", "Notifier"]
