# src/moneymate/adapters/providers/coingecko.py
"""
CoinGecko Provider - Cryptocurrency Prices

This module fetches crypto prices from CoinGecko's simple/price endpoint:

    GET .../simple/price?ids=bitcoin,ethereum&vs_currencies=usd&include_24hr_change=true
    {"bitcoin": {"usd": 43250.0, "usd_24h_change": 2.3}, ...}

A coin priced at P base units is stored as rate_in_base = 1 / P (coins per
1 base unit), the same representation fiat rates use.

Files that USE this module:
- moneymate.application.rates_service (ProviderChain merges crypto rates)
- tests.test_providers (unit tests)

Files that this module USES:
- moneymate.adapters.providers.base (RateProvider interface)
- moneymate.config (settings for URL, timeout, cache TTL and crypto codes)
"""
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional, Tuple

import requests

from moneymate.adapters.providers.base import RateProvider
from moneymate.config import settings
from moneymate.domain.models import RateTable

log = logging.getLogger(__name__)

# Ticker -> CoinGecko coin id
COIN_IDS: Dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "LTC": "litecoin",
    "XRP": "ripple",
    "ADA": "cardano",
    "SOL": "solana",
    "DOGE": "dogecoin",
    "USDT": "tether",
}


class CoinGeckoProvider(RateProvider):
    name = "coingecko"

    # Class-level cache shared across instances, keyed by (base, codes)
    _cache: Dict[Tuple[str, Tuple[str, ...]], Tuple[RateTable, datetime]] = {}

    def __init__(
        self,
        codes: Optional[Iterable[str]] = None,
        base_code: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize CoinGecko provider.

        Args:
            codes: Crypto tickers to fetch (defaults to settings.crypto_codes)
            base_code: Quote currency (defaults to settings.base_currency)
            base_url: Endpoint (defaults to settings.coingecko_url)
            timeout: HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
        """
        wanted = list(codes) if codes is not None else settings.crypto_codes
        unknown = [c for c in wanted if c not in COIN_IDS]
        if unknown:
            log.warning("CoinGecko: no coin id for %s, ignoring", ", ".join(unknown))
        self.codes = [c for c in wanted if c in COIN_IDS]
        self.base_code = base_code or settings.base_currency
        self.url = base_url or settings.coingecko_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.ttl = timedelta(minutes=settings.crypto_cache_minutes)

    @property
    def _cache_key(self) -> Tuple[str, Tuple[str, ...]]:
        return self.base_code, tuple(self.codes)

    def _cached(self) -> Optional[RateTable]:
        entry = self._cache.get(self._cache_key)
        if entry is None:
            return None
        table, ts = entry
        if datetime.now(timezone.utc) - ts < self.ttl:
            return table
        return None

    def fetch_rates(self) -> RateTable:
        """
        Get crypto rates as coins per 1 base unit (with TTL cache).

        Returns:
            RateTable whose codes are all crypto

        Raises:
            RuntimeError: On transport failure, bad JSON or no usable prices
        """
        cached = self._cached()
        if cached is not None:
            log.debug("Using cached CoinGecko prices")
            return cached

        if not self.codes:
            raise RuntimeError("CoinGecko: no crypto codes configured")

        vs = self.base_code.lower()
        params = {
            "ids": ",".join(COIN_IDS[c] for c in self.codes),
            "vs_currencies": vs,
            "include_24hr_change": "true",
        }
        try:
            log.info("Fetching fresh crypto prices from CoinGecko")
            resp = requests.get(self.url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.Timeout:
            log.warning("CoinGecko timeout after %d seconds", self.timeout)
            raise RuntimeError(f"CoinGecko timeout after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            log.warning("CoinGecko request failed: %s", e)
            raise RuntimeError(f"CoinGecko request failed: {e}") from e
        except ValueError as e:
            log.error("CoinGecko returned invalid JSON: %s", e)
            raise RuntimeError(f"CoinGecko returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise RuntimeError("CoinGecko returned non-dict JSON")

        rates: Dict[str, float] = {}
        changes: Dict[str, float] = {}
        for code in self.codes:
            entry = data.get(COIN_IDS[code])
            if not isinstance(entry, dict):
                log.warning("CoinGecko: %s missing from response", code)
                continue
            try:
                price = float(entry[vs])
            except (KeyError, TypeError, ValueError):
                log.warning("CoinGecko: %s has no %s price", code, vs)
                continue
            if not math.isfinite(price) or price <= 0:
                log.warning("CoinGecko: dropping non-positive price %s=%r", code, price)
                continue
            rates[code] = 1.0 / price
            change = entry.get(f"{vs}_24h_change")
            if isinstance(change, (int, float)):
                changes[code] = float(change)

        if not rates:
            raise RuntimeError("CoinGecko returned no usable prices")

        table = RateTable(
            base=self.base_code,
            rates=rates,
            changes=changes,
            crypto_codes=frozenset(rates),
            providers=(self.name,),
            fetched_at=datetime.now(timezone.utc),
        )
        CoinGeckoProvider._cache[self._cache_key] = (table, table.fetched_at)
        log.info("CoinGecko updated: %d prices (ttl=%s)", len(rates), self.ttl)
        return table
