# src/moneymate/application/registry.py
"""
Currency Registry - Current and Previous Rate Snapshots

This module holds the authoritative rate tables. Every refresh publishes a
new immutable RegistrySnapshot (current + previous quotes) by replacing a
single reference, so readers always see either the old pair or the new pair
and never a mix of both.

Files that USE this module:
- moneymate.application.conversion (ConversionEngine reads current quotes)
- moneymate.application.alerts (AlertEngine reads previous/current pairs)
- moneymate.application.refresh_service (publishes new quotes)
- moneymate.adapters.telegram.handlers (rates and trend display)

Files that this module USES:
- moneymate.domain.models (CurrencyQuote, Change)
"""
from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional

from moneymate.domain.errors import InconsistentRateError
from moneymate.domain.models import Change, CurrencyQuote

logger = logging.getLogger(__name__)

_EMPTY: Mapping[str, CurrencyQuote] = MappingProxyType({})


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    Immutable pair of rate tables published by one refresh.

    Attributes:
        current: Quotes from the latest refresh
        previous: Quotes from the refresh before it (equal to current after the first one)
        version: Number of refreshes published so far
        published_at: When this snapshot was published
    """
    current: Mapping[str, CurrencyQuote] = field(default_factory=lambda: _EMPTY)
    previous: Mapping[str, CurrencyQuote] = field(default_factory=lambda: _EMPTY)
    version: int = 0
    published_at: Optional[datetime] = None

    def get_quote(self, code: str) -> Optional[CurrencyQuote]:
        return self.current.get(code)

    def get_previous(self, code: str) -> Optional[CurrencyQuote]:
        # A code with no prior value reports zero change instead of a jump from absence
        prev = self.previous.get(code)
        if prev is None:
            return self.current.get(code)
        return prev

    def get_change(self, code: str) -> Optional[Change]:
        """
        Compute the change of a currency between previous and current tables.

        Returns:
            Change, or None if the code is not priced
        """
        curr = self.get_quote(code)
        prev = self.get_previous(code)
        if curr is None or prev is None:
            return None
        if prev.rate_in_base <= 0:
            return Change(curr.rate_in_base, prev.rate_in_base, 0.0, "none")
        pct = (curr.rate_in_base - prev.rate_in_base) / prev.rate_in_base * 100.0
        direction = "up" if pct > 0 else ("down" if pct < 0 else "none")
        return Change(
            current=curr.rate_in_base,
            previous=prev.rate_in_base,
            percentage=pct,
            direction=direction,
        )


SnapshotListener = Callable[[RegistrySnapshot], None]


class CurrencyRegistry:
    """Single-writer, multi-reader store of the published rate snapshot."""

    def __init__(self, base_code: str = "USD"):
        """
        Initialize an empty registry.

        Args:
            base_code: Code of the base currency (rate_in_base == 1)
        """
        self.base_code = base_code
        self._snapshot = RegistrySnapshot()
        self._write_lock = threading.Lock()
        self._listeners: List[SnapshotListener] = []

    def snapshot(self) -> RegistrySnapshot:
        """Return the currently published snapshot."""
        return self._snapshot

    def has_quotes(self) -> bool:
        return self._snapshot.version > 0

    def get_quote(self, code: str) -> Optional[CurrencyQuote]:
        """
        Get the current quote for a code.

        Returns:
            CurrencyQuote, or None if the code is not priced (NotFound)
        """
        return self._snapshot.get_quote(code)

    def get_previous(self, code: str) -> Optional[CurrencyQuote]:
        """
        Get the quote for a code from the previous snapshot.

        On the first population the previous value equals the current one.

        Returns:
            CurrencyQuote, or None if the code is not priced (NotFound)
        """
        return self._snapshot.get_previous(code)

    def get_change(self, code: str) -> Optional[Change]:
        return self._snapshot.get_change(code)

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a callable invoked with every newly published snapshot."""
        self._listeners.append(listener)

    def _validated(self, new_quotes: Mapping[str, CurrencyQuote]) -> dict:
        accepted = {}
        for code, quote in new_quotes.items():
            rate = quote.rate_in_base
            if not isinstance(rate, (int, float)) or not math.isfinite(rate) or rate <= 0:
                err = InconsistentRateError(code, rate)
                logger.warning("Excluding %s from snapshot: %s", code, err)
                continue
            accepted[code] = quote

        base = accepted.get(self.base_code)
        if base is None:
            accepted[self.base_code] = CurrencyQuote(code=self.base_code, rate_in_base=1.0)
        elif base.rate_in_base != 1.0:
            raise InconsistentRateError(self.base_code, base.rate_in_base)
        return accepted

    def set_quotes(self, new_quotes: Mapping[str, CurrencyQuote]) -> RegistrySnapshot:
        """
        Publish a new rate table.

        The table current before the call becomes the previous table. Quotes
        with a non-positive or non-finite rate are logged and left out until
        the next refresh.

        Args:
            new_quotes: Complete code -> CurrencyQuote mapping

        Returns:
            The newly published snapshot

        Raises:
            InconsistentRateError: If the base currency is quoted with a rate other than 1
        """
        accepted = MappingProxyType(self._validated(new_quotes))
        with self._write_lock:
            old = self._snapshot
            previous = old.current if old.version > 0 else accepted
            new = RegistrySnapshot(
                current=accepted,
                previous=previous,
                version=old.version + 1,
                published_at=datetime.now(timezone.utc),
            )
            self._snapshot = new
        logger.debug("Published snapshot v%d with %d quotes", new.version, len(accepted))

        for listener in list(self._listeners):
            try:
                listener(new)
            except Exception as e:
                logger.error("Snapshot listener %r failed: %s", listener, e, exc_info=True)
        return new
