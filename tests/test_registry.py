# tests/test_registry.py
"""
Registry Tests - Unit Tests for the Currency Registry

Covers snapshot rotation, first-population behaviour, lookup misses,
exclusion of inconsistent rates and change/trend computation.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- moneymate.application.registry (CurrencyRegistry, RegistrySnapshot)
- moneymate.domain.models (CurrencyQuote)
"""
import threading

import pytest

from moneymate.application.registry import CurrencyRegistry
from moneymate.domain.errors import InconsistentRateError
from moneymate.domain.models import CurrencyQuote


def quotes(**rates):
    return {code: CurrencyQuote(code=code, rate_in_base=rate) for code, rate in rates.items()}


class TestLookup:
    def test_empty_registry_returns_none(self):
        registry = CurrencyRegistry()
        assert registry.get_quote("EUR") is None
        assert registry.get_previous("EUR") is None
        assert not registry.has_quotes()

    def test_unknown_code_is_none(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=0.92))
        assert registry.get_quote("XYZ") is None
        assert registry.get_previous("XYZ") is None

    def test_base_added_when_missing(self):
        registry = CurrencyRegistry(base_code="USD")
        registry.set_quotes(quotes(EUR=0.92))
        assert registry.get_quote("USD").rate_in_base == 1.0

    def test_base_with_wrong_rate_rejected(self):
        registry = CurrencyRegistry(base_code="USD")
        with pytest.raises(InconsistentRateError):
            registry.set_quotes(quotes(USD=1.1, EUR=0.92))
        assert not registry.has_quotes()


class TestRotation:
    def test_first_population_previous_equals_current(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=0.92, TRY=32.45))
        for code in ("USD", "EUR", "TRY"):
            assert registry.get_previous(code) == registry.get_quote(code)

    def test_second_refresh_rotates(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, TRY=32.0))
        registry.set_quotes(quotes(USD=1.0, TRY=33.0))
        assert registry.get_quote("TRY").rate_in_base == 33.0
        assert registry.get_previous("TRY").rate_in_base == 32.0

    def test_previous_is_superseded(self):
        registry = CurrencyRegistry()
        for rate in (30.0, 31.0, 32.0):
            registry.set_quotes(quotes(USD=1.0, TRY=rate))
        assert registry.get_previous("TRY").rate_in_base == 31.0
        assert registry.snapshot().version == 3

    def test_new_code_has_zero_change(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=0.92))
        registry.set_quotes(quotes(USD=1.0, EUR=0.93, GBP=0.79))
        assert registry.get_previous("GBP") == registry.get_quote("GBP")

    def test_old_snapshot_is_unchanged_after_swap(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=0.92))
        held = registry.snapshot()
        registry.set_quotes(quotes(USD=1.0, EUR=0.95))
        assert held.get_quote("EUR").rate_in_base == 0.92
        assert registry.snapshot() is not held

    def test_snapshot_tables_are_read_only(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=0.92))
        with pytest.raises(TypeError):
            registry.snapshot().current["EUR"] = CurrencyQuote("EUR", 2.0)


class TestInconsistentRates:
    @pytest.mark.parametrize("bad", [0.0, -1.0, float("inf"), float("nan")])
    def test_bad_rate_excluded(self, bad):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=0.92, TRY=bad))
        assert registry.get_quote("TRY") is None
        assert registry.get_quote("EUR").rate_in_base == 0.92

    def test_excluded_until_next_good_refresh(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, TRY=0.0))
        assert registry.get_quote("TRY") is None
        registry.set_quotes(quotes(USD=1.0, TRY=32.0))
        assert registry.get_quote("TRY").rate_in_base == 32.0


class TestChange:
    def test_change_up(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, TRY=32.0))
        registry.set_quotes(quotes(USD=1.0, TRY=33.6))
        change = registry.get_change("TRY")
        assert change.direction == "up"
        assert change.percentage == pytest.approx(5.0)

    def test_change_none_on_first_refresh(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, TRY=32.0))
        change = registry.get_change("TRY")
        assert change.direction == "none"
        assert change.percentage == 0.0

    def test_change_unknown_code(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0))
        assert registry.get_change("TRY") is None


class TestSubscribers:
    def test_listener_receives_snapshot(self):
        registry = CurrencyRegistry()
        seen = []
        registry.subscribe(seen.append)
        snap = registry.set_quotes(quotes(USD=1.0, EUR=0.92))
        assert seen == [snap]

    def test_failing_listener_does_not_block_publish(self):
        registry = CurrencyRegistry()

        def boom(_):
            raise RuntimeError("listener failure")

        registry.subscribe(boom)
        registry.set_quotes(quotes(USD=1.0, EUR=0.92))
        assert registry.get_quote("EUR") is not None


class TestConcurrentReaders:
    def test_readers_never_see_mixed_tables(self):
        registry = CurrencyRegistry()
        registry.set_quotes(quotes(USD=1.0, EUR=1.0, TRY=30.0))
        stop = threading.Event()
        torn = []

        def reader():
            while not stop.is_set():
                snap = registry.snapshot()
                eur = snap.get_quote("EUR").rate_in_base
                try_ = snap.get_quote("TRY").rate_in_base
                # Every published table has TRY == EUR * 30
                if try_ != pytest.approx(eur * 30):
                    torn.append((eur, try_))

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(1, 500):
            registry.set_quotes(quotes(USD=1.0, EUR=1.0 + i / 1000, TRY=(1.0 + i / 1000) * 30))
        stop.set()
        for t in threads:
            t.join()
        assert torn == []
