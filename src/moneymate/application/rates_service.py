# src/moneymate/application/rates_service.py
"""
Rates Service - Combining Provider Responses into One Rate Table

This module builds a single base-relative RateTable out of the fiat and
crypto providers. Fiat providers are tried in order (primary, then
fallback); crypto prices are merged in when available, and a crypto outage
never aborts a fiat refresh.

Files that USE this module:
- moneymate.application.refresh_service (RefreshService fetches through ProviderChain)
- moneymate.app (builds the default chain)
- tests.test_rates_service (unit tests)

Files that this module USES:
- moneymate.adapters.providers.* (FiatRatesProvider, CoinGeckoProvider, RateProvider)
- moneymate.config (settings for provider URLs)
- moneymate.domain.models (RateTable)
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from moneymate.adapters.providers.base import RateProvider
from moneymate.adapters.providers.coingecko import CoinGeckoProvider
from moneymate.adapters.providers.fiat import FiatRatesProvider
from moneymate.config import settings
from moneymate.domain.models import RateTable

log = logging.getLogger(__name__)


class ProviderChain:
    """
    Provider chain that tries fiat providers in order and merges crypto prices.
    Tracks which providers were actually used.
    """

    def __init__(self, fiat_providers: Sequence[RateProvider], crypto_provider: Optional[RateProvider] = None):
        """
        Initialize provider chain.

        Args:
            fiat_providers: Fiat providers in priority order (at least one)
            crypto_provider: Optional crypto provider merged into the fiat table
        """
        if not fiat_providers:
            raise ValueError("ProviderChain needs at least one fiat provider")
        self.fiat_providers = list(fiat_providers)
        self.crypto_provider = crypto_provider
        self.last_used_providers: List[str] = []

    def _fetch_fiat(self) -> RateTable:
        errors = []
        for provider in self.fiat_providers:
            try:
                return provider.fetch_rates()
            except Exception as e:
                log.warning("Fiat provider %s failed, trying next: %s", provider.name, e)
                errors.append(f"{provider.name}={e}")
        log.error("All fiat providers failed: %s", "; ".join(errors))
        raise RuntimeError(f"All fiat providers failed: {'; '.join(errors)}")

    def fetch_rates(self) -> RateTable:
        """
        Fetch one complete rate table.

        Returns:
            Fiat table merged with crypto rates (crypto overrides same-code fiat entries)

        Raises:
            RuntimeError: If every fiat provider fails
        """
        fiat = self._fetch_fiat()
        rates = dict(fiat.rates)
        changes = dict(fiat.changes)
        crypto_codes = set(fiat.crypto_codes)
        providers = list(fiat.providers)

        if self.crypto_provider is not None:
            try:
                crypto = self.crypto_provider.fetch_rates()
            except Exception as e:
                log.warning("Crypto provider %s failed, publishing fiat only: %s", self.crypto_provider.name, e)
            else:
                if crypto.base != fiat.base:
                    log.error("Crypto base %s does not match fiat base %s, ignoring crypto", crypto.base, fiat.base)
                else:
                    rates.update(crypto.rates)
                    changes.update(crypto.changes)
                    crypto_codes.update(crypto.crypto_codes)
                    providers.extend(crypto.providers)

        self.last_used_providers = providers
        return RateTable(
            base=fiat.base,
            rates=rates,
            changes=changes,
            crypto_codes=frozenset(crypto_codes),
            providers=tuple(providers),
            fetched_at=datetime.now(timezone.utc),
        )

    def get_last_providers(self) -> List[str]:
        """
        Names of the providers that contributed to the last table.

        Returns:
            Provider names, empty if nothing was fetched yet
        """
        return list(self.last_used_providers)


def build_default_chain(base_code: Optional[str] = None) -> ProviderChain:
    """
    Build the production provider chain from settings.

    fxratesapi.com first, exchangerate-api.com as fallback, CoinGecko for crypto.
    """
    base = base_code or settings.base_currency
    return ProviderChain(
        fiat_providers=[
            FiatRatesProvider(settings.fiat_primary_url, name="fxratesapi", base_code=base),
            FiatRatesProvider(settings.fiat_fallback_url, name="exchangerate-api", base_code=base, base_in_path=True),
        ],
        crypto_provider=CoinGeckoProvider(base_code=base) if settings.crypto_codes else None,
    )
