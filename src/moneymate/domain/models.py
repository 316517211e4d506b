# src/moneymate/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Currency quotes and rate tables
- Price alert definitions and their Armed/Fired status
- Conversion requests and results
- Rate changes between two snapshots

Files that USE this module:
- moneymate.application.* (all services use domain models)
- moneymate.adapters.* (adapters create and use domain models)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

import threading  # Per-alert lock for the one-shot transition
import uuid  # Unique alert identifiers
from dataclasses import dataclass, field  # Decorators for creating data classes
from datetime import datetime, timezone  # Date/time utilities for timestamps
from enum import Enum  # Alert kinds
from typing import Dict, FrozenSet, Optional  # Type hints


@dataclass(frozen=True)
class CurrencyQuote:
    """
    One currency's market state.

    Attributes:
        code: Currency code (e.g. "USD", "BTC")
        rate_in_base: Units of this currency per 1 unit of the base currency
        is_crypto: Display hint only, never used by conversion math
        change_24h: Optional 24-hour change percentage reported upstream
    """
    code: str
    rate_in_base: float
    is_crypto: bool = False
    change_24h: Optional[float] = None

    @property
    def alert_value(self) -> float:
        """
        The value users read and set alert thresholds in.

        Crypto: price of one coin in the base currency (1 / rate_in_base).
        Fiat: units per 1 base unit (rate_in_base).
        """
        if self.is_crypto:
            return 1.0 / self.rate_in_base
        return self.rate_in_base


@dataclass(frozen=True)
class RateTable:
    """
    A parsed rate response from one or more providers.

    Attributes:
        base: Base currency code all rates are expressed against
        rates: Code -> units per 1 base
        changes: Code -> 24h change percentage (optional hints)
        crypto_codes: Codes that are cryptocurrencies
        providers: Names of the providers that contributed data
        fetched_at: When the table was fetched
    """
    base: str
    rates: Dict[str, float]
    changes: Dict[str, float] = field(default_factory=dict)
    crypto_codes: FrozenSet[str] = frozenset()
    providers: tuple = ()
    fetched_at: Optional[datetime] = None

    def to_quotes(self) -> Dict[str, CurrencyQuote]:
        """
        Build CurrencyQuote objects for every code in the table.

        The base currency is always present with rate 1.0.

        Returns:
            Mapping of code -> CurrencyQuote
        """
        quotes = {
            code: CurrencyQuote(
                code=code,
                rate_in_base=float(rate),
                is_crypto=code in self.crypto_codes,
                change_24h=self.changes.get(code),
            )
            for code, rate in self.rates.items()
        }
        quotes[self.base] = CurrencyQuote(
            code=self.base,
            rate_in_base=1.0,
            is_crypto=self.base in self.crypto_codes,
            change_24h=self.changes.get(self.base),
        )
        return quotes


@dataclass(frozen=True)
class Change:
    """
    Represents a change from previous value.

    Attributes:
        current: Current value
        previous: Previous value
        percentage: Percentage change
        direction: "up", "down", or "none"
    """
    current: float
    previous: float
    percentage: float
    direction: str  # "up", "down", "none"


class AlertKind(str, Enum):
    """Trigger condition of a price alert."""
    ABOVE = "above"
    BELOW = "below"
    PERCENT_CHANGE = "percent_change"


@dataclass(frozen=True)
class AlertStatus:
    """
    The (is_active, triggered_at) pair of an alert.

    Stored as one immutable value so the pair is always replaced together.
    """
    is_active: bool = True
    triggered_at: Optional[datetime] = None


ARMED = AlertStatus()


@dataclass
class AlertDefinition:
    """
    A user-created watch condition.

    Attributes:
        currency_code: Currency being watched
        kind: above, below or percent_change
        threshold: Absolute rate (above/below) or unsigned percentage (percent_change)
        title: Notification title
        message: Notification body
        id: Unique identifier
        created_at: Creation timestamp (UTC)
        status: Armed or Fired status pair
    """
    currency_code: str
    kind: AlertKind
    threshold: float
    title: str = ""
    message: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: AlertStatus = ARMED
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def triggered_at(self) -> Optional[datetime]:
        return self.status.triggered_at

    def fire(self, at: Optional[datetime] = None) -> bool:
        """
        Move the alert from Armed to Fired.

        Args:
            at: Trigger timestamp (defaults to current UTC time)

        Returns:
            True if this call performed the transition, False if already fired
        """
        with self._lock:
            if not self.status.is_active:
                return False
            self.status = AlertStatus(
                is_active=False,
                triggered_at=at or datetime.now(timezone.utc),
            )
            return True


@dataclass(frozen=True)
class ConversionRequest:
    """An amount to convert from one currency code to another."""
    amount: float
    from_code: str
    to_code: str


@dataclass(frozen=True)
class ConversionResult:
    """
    Result of a currency conversion.

    Attributes:
        amount: Original amount
        from_code: Source currency code
        to_code: Target currency code
        converted: Converted amount
        rate: Effective rate (to units per 1 from unit)
    """
    amount: float
    from_code: str
    to_code: str
    converted: float
    rate: float
