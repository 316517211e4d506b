# src/moneymate/adapters/providers/base.py
"""
Base Provider Interface for Exchange Rate Providers

This module defines the abstract base class for all rate providers.
A provider returns a RateTable: rates expressed as units per 1 base currency.

Files that USE this module:
- moneymate.adapters.providers.fiat (FiatRatesProvider implements RateProvider)
- moneymate.adapters.providers.coingecko (CoinGeckoProvider implements RateProvider)
- moneymate.application.rates_service (ProviderChain composes providers)

Files that this module USES:
- moneymate.domain.models (RateTable)
"""
from abc import ABC, abstractmethod

from moneymate.domain.models import RateTable


class RateProvider(ABC):
    name: str = "provider"

    @abstractmethod
    def fetch_rates(self) -> RateTable:
        """
        Return the latest rate table.

        Raises:
            RuntimeError: If the upstream request fails or returns unusable data
        """
        raise NotImplementedError
