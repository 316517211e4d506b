# tests/test_conversion.py
"""
Conversion Tests - Unit Tests for the Conversion Engine

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- moneymate.application.conversion (ConversionEngine)
- moneymate.application.registry (CurrencyRegistry, RegistrySnapshot)
"""
from types import MappingProxyType
from unittest.mock import Mock

import pytest

from moneymate.application.conversion import ConversionEngine
from moneymate.application.registry import CurrencyRegistry, RegistrySnapshot
from moneymate.domain.errors import InconsistentRateError, InvalidAmountError, UnknownCurrencyError
from moneymate.domain.models import ConversionRequest, CurrencyQuote


@pytest.fixture
def engine():
    registry = CurrencyRegistry(base_code="USD")
    registry.set_quotes({
        "USD": CurrencyQuote("USD", 1.0),
        "EUR": CurrencyQuote("EUR", 0.92),
        "TRY": CurrencyQuote("TRY", 32.45),
        # 1 USD buys 1/65000 BTC
        "BTC": CurrencyQuote("BTC", 1 / 65000, is_crypto=True),
    })
    return ConversionEngine(registry)


class TestConvert:
    def test_from_base(self, engine):
        assert engine.convert(100, "USD", "TRY") == pytest.approx(3245.0)

    def test_cross_rate(self, engine):
        assert engine.convert(100, "EUR", "TRY") == pytest.approx(3527.17, abs=0.01)

    def test_to_base(self, engine):
        assert engine.convert(92, "EUR", "USD") == pytest.approx(100.0)

    def test_identity_returns_amount_unchanged(self, engine):
        assert engine.convert(123.45, "TRY", "TRY") == 123.45

    def test_zero_amount(self, engine):
        assert engine.convert(0, "EUR", "TRY") == 0.0

    def test_crypto_uses_same_formula(self, engine):
        assert engine.convert(1, "BTC", "USD") == pytest.approx(65000.0)
        assert engine.convert(130000, "USD", "BTC") == pytest.approx(2.0)

    def test_path_independence(self, engine):
        direct = engine.convert(50, "EUR", "BTC")
        via_base = engine.convert(engine.convert(50, "EUR", "USD"), "USD", "BTC")
        assert direct == pytest.approx(via_base)

    def test_round_trip(self, engine):
        there = engine.convert(250, "TRY", "EUR")
        assert engine.convert(there, "EUR", "TRY") == pytest.approx(250)


class TestErrors:
    def test_unknown_source(self, engine):
        with pytest.raises(UnknownCurrencyError) as exc:
            engine.convert(10, "XYZ", "USD")
        assert exc.value.code == "XYZ"

    def test_unknown_target(self, engine):
        with pytest.raises(UnknownCurrencyError):
            engine.convert(10, "USD", "XYZ")

    def test_empty_registry(self):
        with pytest.raises(UnknownCurrencyError):
            ConversionEngine(CurrencyRegistry()).convert(10, "USD", "EUR")

    @pytest.mark.parametrize("amount", [-1, float("nan"), float("inf"), "10", None, True])
    def test_invalid_amount(self, engine, amount):
        with pytest.raises(InvalidAmountError):
            engine.convert(amount, "USD", "EUR")

    def test_invalid_amount_checked_before_codes(self, engine):
        with pytest.raises(InvalidAmountError):
            engine.convert(-5, "XYZ", "XYZ")

    def test_inconsistent_rate_is_reported(self):
        # Published snapshots never carry bad rates; build one by hand
        bad = MappingProxyType({
            "USD": CurrencyQuote("USD", 1.0),
            "TRY": CurrencyQuote("TRY", 0.0),
        })
        registry = Mock()
        registry.snapshot.return_value = RegistrySnapshot(current=bad, previous=bad, version=1)
        engine = ConversionEngine(registry)
        with pytest.raises(InconsistentRateError):
            engine.convert(10, "USD", "TRY")


class TestSnapshotConsistency:
    def test_rates_read_from_single_snapshot(self):
        registry = CurrencyRegistry()
        registry.set_quotes({"USD": CurrencyQuote("USD", 1.0), "EUR": CurrencyQuote("EUR", 0.9)})
        engine = ConversionEngine(registry)
        calls = []
        real = registry.snapshot

        def counting():
            calls.append(1)
            return real()

        registry.snapshot = counting
        engine.convert(10, "EUR", "USD")
        assert len(calls) == 1

    def test_uses_latest_published_rates(self):
        registry = CurrencyRegistry()
        engine = ConversionEngine(registry)
        registry.set_quotes({"USD": CurrencyQuote("USD", 1.0), "TRY": CurrencyQuote("TRY", 30.0)})
        assert engine.convert(1, "USD", "TRY") == pytest.approx(30.0)
        registry.set_quotes({"USD": CurrencyQuote("USD", 1.0), "TRY": CurrencyQuote("TRY", 33.0)})
        assert engine.convert(1, "USD", "TRY") == pytest.approx(33.0)


class TestConvertRequest:
    def test_result_carries_effective_rate(self, engine):
        result = engine.convert_request(ConversionRequest(100, "USD", "EUR"))
        assert result.converted == pytest.approx(92.0)
        assert result.rate == pytest.approx(0.92)
        assert result.from_code == "USD"
        assert result.to_code == "EUR"

    def test_identity_rate_is_one(self, engine):
        assert engine.rate("EUR", "EUR") == 1.0
