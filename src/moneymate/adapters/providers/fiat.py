# src/moneymate/adapters/providers/fiat.py
"""
Fiat Rates Provider - latest-rates JSON APIs

This module implements a client for "latest rates" APIs that answer
GET <url>?base=USD (or <url>/USD) with:

    {"base": "USD", "rates": {"EUR": 0.92, "TRY": 32.45, ...}}

Both fxratesapi.com and exchangerate-api.com use this shape, so one class
serves as primary and fallback. Responses are cached per instance URL for a
configurable TTL.

Files that USE this module:
- moneymate.application.rates_service (ProviderChain primary/fallback)
- tests.test_providers (unit tests)

Files that this module USES:
- moneymate.adapters.providers.base (RateProvider interface)
- moneymate.config (settings for timeout and cache TTL)
"""
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import requests

from moneymate.adapters.providers.base import RateProvider
from moneymate.config import settings
from moneymate.domain.models import RateTable

log = logging.getLogger(__name__)


class FiatRatesProvider(RateProvider):
    # Class-level cache shared across instances, keyed by request URL
    _cache: Dict[str, Tuple[RateTable, datetime]] = {}

    def __init__(
        self,
        base_url: str,
        name: str,
        base_code: Optional[str] = None,
        base_in_path: bool = False,
        timeout: Optional[int] = None,
        cache_minutes: Optional[int] = None,
    ):
        """
        Initialize a latest-rates provider.

        Args:
            base_url: API endpoint
            name: Provider name used in logs and attribution
            base_code: Base currency (defaults to settings.base_currency)
            base_in_path: Send the base as a path segment instead of ?base=
            timeout: HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
            cache_minutes: TTL in minutes (defaults to settings.fiat_cache_minutes)
        """
        self.name = name
        self.base_code = base_code or settings.base_currency
        if base_in_path:
            self.url = f"{base_url.rstrip('/')}/{self.base_code}"
            self.params: Dict[str, str] = {}
        else:
            self.url = base_url
            self.params = {"base": self.base_code}
        self.timeout = timeout or settings.http_timeout_seconds
        minutes = settings.fiat_cache_minutes if cache_minutes is None else cache_minutes
        self.ttl = timedelta(minutes=minutes)

    @property
    def _cache_key(self) -> str:
        return f"{self.url}?base={self.params.get('base', '')}"

    def _cached(self) -> Optional[RateTable]:
        entry = self._cache.get(self._cache_key)
        if entry is None:
            return None
        table, ts = entry
        if datetime.now(timezone.utc) - ts < self.ttl:
            return table
        return None

    def _get_json(self) -> Any:
        try:
            log.info("Fetching fresh rates from %s", self.name)
            resp = requests.get(
                self.url,
                params=self.params or None,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.Timeout:
            log.warning("%s timeout after %d seconds", self.name, self.timeout)
            raise RuntimeError(f"{self.name} timeout after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            log.warning("%s request failed: %s", self.name, e)
            raise RuntimeError(f"{self.name} request failed: {e}") from e
        except ValueError as e:
            log.error("%s returned invalid JSON: %s", self.name, e)
            raise RuntimeError(f"{self.name} returned invalid JSON: {e}") from e

    def fetch_rates(self) -> RateTable:
        """
        Get the latest fiat rate table (with TTL cache).

        Entries that are not positive finite numbers are dropped.

        Returns:
            RateTable with base == self.base_code

        Raises:
            RuntimeError: On transport failure, bad JSON, wrong base or empty rates
        """
        cached = self._cached()
        if cached is not None:
            log.debug("Using cached %s rates", self.name)
            return cached

        data = self._get_json()
        if not isinstance(data, dict) or not isinstance(data.get("rates"), dict):
            log.error("%s unexpected response structure: %r", self.name, data)
            raise RuntimeError(f"{self.name} response missing 'rates' field")

        base = str(data.get("base", self.base_code)).upper()
        if base != self.base_code:
            raise RuntimeError(f"{self.name} returned base {base}, expected {self.base_code}")

        rates: Dict[str, float] = {}
        for code, raw in data["rates"].items():
            try:
                value = float(raw)
            except (TypeError, ValueError):
                log.warning("%s: dropping non-numeric rate %s=%r", self.name, code, raw)
                continue
            if not math.isfinite(value) or value <= 0:
                log.warning("%s: dropping non-positive rate %s=%r", self.name, code, raw)
                continue
            rates[str(code).upper()] = value

        if not rates:
            raise RuntimeError(f"{self.name} returned no usable rates")

        table = RateTable(
            base=self.base_code,
            rates=rates,
            providers=(self.name,),
            fetched_at=datetime.now(timezone.utc),
        )
        FiatRatesProvider._cache[self._cache_key] = (table, table.fetched_at)
        log.info("%s updated: %d rates (ttl=%s)", self.name, len(rates), self.ttl)
        return table
