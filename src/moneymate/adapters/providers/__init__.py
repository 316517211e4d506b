# src/moneymate/adapters/providers/__init__.py
"""
Provider Adapters - External API Clients

This package contains adapters for external exchange rate APIs.
All providers implement the RateProvider interface.
"""

from moneymate.adapters.providers.base import RateProvider
from moneymate.adapters.providers.coingecko import CoinGeckoProvider
from moneymate.adapters.providers.fiat import FiatRatesProvider

__all__ = [
    "RateProvider",
    "CoinGeckoProvider",
    "FiatRatesProvider",
]
