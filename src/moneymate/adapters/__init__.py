# src/moneymate/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Providers (rate APIs)
- Persistence (alert storage)
- Formatting (text output)
- Notifiers (alert delivery)
- Telegram (bot interface)
"""

__all__ = []
