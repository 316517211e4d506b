# src/moneymate/application/conversion.py
"""
Conversion Engine - Currency Conversion Through the Base Currency

Every quote is expressed as units per 1 base currency, fiat and crypto alike,
so one formula covers every pair:

    converted = amount / rate(from) * rate(to)

Files that USE this module:
- moneymate.adapters.telegram.handlers (/convert command)
- tests.test_conversion (unit tests)

Files that this module USES:
- moneymate.application.registry (CurrencyRegistry for current quotes)
- moneymate.domain.models (ConversionRequest, ConversionResult)
- moneymate.domain.errors (UnknownCurrencyError, InconsistentRateError, InvalidAmountError)
- moneymate.shared.validators (is_valid_amount)
"""
from __future__ import annotations

import logging
import math

from moneymate.application.registry import CurrencyRegistry, RegistrySnapshot
from moneymate.domain.errors import InconsistentRateError, InvalidAmountError, UnknownCurrencyError
from moneymate.domain.models import ConversionRequest, ConversionResult
from moneymate.shared.validators import is_valid_amount

logger = logging.getLogger(__name__)


def _rate_of(snapshot: RegistrySnapshot, code: str) -> float:
    quote = snapshot.get_quote(code)
    if quote is None:
        raise UnknownCurrencyError(code)
    rate = quote.rate_in_base
    if not math.isfinite(rate) or rate <= 0:
        logger.error("Refusing to convert with inconsistent rate for %s: %r", code, rate)
        raise InconsistentRateError(code, rate)
    return rate


class ConversionEngine:
    """Converts amounts using whatever snapshot the registry publishes at call time."""

    def __init__(self, registry: CurrencyRegistry):
        self.registry = registry

    def rate(self, from_code: str, to_code: str) -> float:
        """
        Effective cross rate: units of to_code per 1 unit of from_code.

        Raises:
            UnknownCurrencyError: If either code has no usable quote
        """
        if from_code == to_code:
            return 1.0
        snap = self.registry.snapshot()
        return _rate_of(snap, to_code) / _rate_of(snap, from_code)

    def convert(self, amount: float, from_code: str, to_code: str) -> float:
        """
        Convert an amount from one currency to another.

        Args:
            amount: Finite, non-negative amount in from_code
            from_code: Source currency code
            to_code: Target currency code

        Returns:
            Converted amount in to_code (amount unchanged when codes are equal)

        Raises:
            InvalidAmountError: If amount is negative, non-finite or not a number
            UnknownCurrencyError: If either code has no usable quote
        """
        if not is_valid_amount(amount):
            raise InvalidAmountError(f"Invalid amount: {amount!r}")
        if from_code == to_code:
            return amount

        # Read both rates from one snapshot
        snap = self.registry.snapshot()
        from_rate = _rate_of(snap, from_code)
        to_rate = _rate_of(snap, to_code)
        return amount / from_rate * to_rate

    def convert_request(self, request: ConversionRequest) -> ConversionResult:
        """Convert a ConversionRequest and report the effective rate alongside the result."""
        converted = self.convert(request.amount, request.from_code, request.to_code)
        return ConversionResult(
            amount=request.amount,
            from_code=request.from_code,
            to_code=request.to_code,
            converted=converted,
            rate=self.rate(request.from_code, request.to_code),
        )
