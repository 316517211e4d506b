# src/moneymate/__init__.py
"""
MoneyMate - Currency Rates, Conversion and Price Alerts

Keeps a base-relative table of fiat and crypto rates, converts amounts
between any two priced currencies and fires one-shot price alerts when a
refresh crosses their threshold. Ships with a Telegram bot front end.
"""

__version__ = "1.0.0"
