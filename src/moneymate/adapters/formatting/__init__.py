# src/moneymate/adapters/formatting/__init__.py
"""
Formatting Adapters - Text Output

This package formats quotes, conversions and alerts as plain text.
"""

from moneymate.adapters.formatting.formatter import (
    alert_notification,
    alerts_list,
    conversion_line,
    default_alert_message,
    default_alert_title,
    quote_line,
)

__all__ = [
    "alert_notification",
    "alerts_list",
    "conversion_line",
    "default_alert_message",
    "default_alert_title",
    "quote_line",
]
