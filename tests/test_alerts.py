# tests/test_alerts.py
"""
Alert Engine Tests - Unit Tests for Price-Alert Evaluation

Covers crossing semantics, one-shot firing, the percent_change zero guard,
concurrent evaluation of the same alert and crypto alerts set in price terms.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- moneymate.application.alert_service (AlertService for crypto alerts)
- moneymate.application.alerts (AlertEngine, check_trigger)
- moneymate.application.registry (CurrencyRegistry, RegistrySnapshot)
- moneymate.domain.models (AlertDefinition, AlertKind, CurrencyQuote)
"""
import threading
from datetime import datetime, timezone
from types import MappingProxyType

import pytest

from moneymate.application.alert_service import AlertService
from moneymate.application.alerts import AlertEngine, check_trigger
from moneymate.application.registry import CurrencyRegistry, RegistrySnapshot
from moneymate.domain.models import AlertDefinition, AlertKind, CurrencyQuote


def publish(registry, code, rate):
    registry.set_quotes({"USD": CurrencyQuote("USD", 1.0), code: CurrencyQuote(code, rate)})


def snapshot(code, previous, current, version=2):
    return RegistrySnapshot(
        current=MappingProxyType({code: CurrencyQuote(code, current)}),
        previous=MappingProxyType({code: CurrencyQuote(code, previous)}),
        version=version,
    )


def run_sequence(alert, code, rates):
    """Publish each rate in turn and return the 1-based refresh numbers that fired."""
    registry = CurrencyRegistry()
    engine = AlertEngine()
    fired_on = []
    for i, rate in enumerate(rates, start=1):
        publish(registry, code, rate)
        if engine.evaluate([alert], registry):
            fired_on.append(i)
    return fired_on


class TestCheckTrigger:
    def test_above_crossing(self):
        assert check_trigger(AlertKind.ABOVE, 33.0, 32.8, 33.2)
        assert check_trigger(AlertKind.ABOVE, 33.0, 32.8, 33.0)

    def test_above_requires_crossing(self):
        assert not check_trigger(AlertKind.ABOVE, 33.0, 33.1, 33.5)
        assert not check_trigger(AlertKind.ABOVE, 33.0, 33.0, 33.5)
        assert not check_trigger(AlertKind.ABOVE, 33.0, 32.0, 32.9)

    def test_below_crossing(self):
        assert check_trigger(AlertKind.BELOW, 30.0, 31.0, 29.0)
        assert check_trigger(AlertKind.BELOW, 30.0, 31.0, 30.0)
        assert not check_trigger(AlertKind.BELOW, 30.0, 29.0, 28.0)

    def test_percent_change_either_direction(self):
        assert check_trigger(AlertKind.PERCENT_CHANGE, 5.0, 100.0, 105.0)
        assert check_trigger(AlertKind.PERCENT_CHANGE, 5.0, 100.0, 95.0)
        assert not check_trigger(AlertKind.PERCENT_CHANGE, 5.0, 100.0, 104.9)

    def test_percent_change_previous_zero_does_not_fire(self):
        assert not check_trigger(AlertKind.PERCENT_CHANGE, 1.0, 0.0, 50.0)


class TestOneShot:
    def test_above_fires_once(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        assert run_sequence(alert, "TRY", [32.0, 32.0, 34.0, 34.0]) == [3]
        assert not alert.is_active
        assert alert.triggered_at is not None

    def test_below_fires_once(self):
        alert = AlertDefinition("TRY", AlertKind.BELOW, 30.0)
        assert run_sequence(alert, "TRY", [31.0, 31.0, 29.0]) == [3]

    def test_below_does_not_fire_when_already_below(self):
        alert = AlertDefinition("TRY", AlertKind.BELOW, 30.0)
        assert run_sequence(alert, "TRY", [29.0, 31.0]) == []
        assert alert.is_active

    def test_first_refresh_never_fires_crossing_alerts(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        assert run_sequence(alert, "TRY", [40.0]) == []

    def test_fired_alert_not_reevaluated(self):
        alert = AlertDefinition("USD", AlertKind.ABOVE, 33.0)
        engine = AlertEngine()
        assert engine.evaluate([alert], snapshot("USD", 32.8, 33.2)) == [alert]
        first_trigger = alert.triggered_at
        assert engine.evaluate([alert], snapshot("USD", 33.2, 33.5, version=3)) == []
        assert alert.triggered_at == first_trigger

    def test_trigger_timestamp_uses_now(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        AlertEngine().evaluate([alert], snapshot("TRY", 32.0, 34.0), now=at)
        assert alert.triggered_at == at


class TestSkipping:
    def test_empty_registry(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 1.0)
        assert AlertEngine().evaluate([alert], CurrencyRegistry()) == []

    def test_unpriced_code_is_skipped(self):
        alert = AlertDefinition("GBP", AlertKind.ABOVE, 1.0)
        assert AlertEngine().evaluate([alert], snapshot("TRY", 0.5, 2.0)) == []
        assert alert.is_active

    def test_percent_change_with_zero_previous_in_snapshot(self):
        alert = AlertDefinition("TRY", AlertKind.PERCENT_CHANGE, 1.0)
        assert AlertEngine().evaluate([alert], snapshot("TRY", 0.0, 30.0)) == []
        assert alert.is_active

    def test_inactive_alerts_untouched(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        alert.fire(at)
        assert AlertEngine().evaluate([alert], snapshot("TRY", 32.0, 34.0)) == []
        assert alert.triggered_at == at

    def test_only_matching_alerts_fire(self):
        hit = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        miss = AlertDefinition("TRY", AlertKind.BELOW, 30.0)
        assert AlertEngine().evaluate([hit, miss], snapshot("TRY", 32.0, 34.0)) == [hit]
        assert miss.is_active


class TestFire:
    def test_fire_is_compare_and_set(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        assert alert.fire() is True
        assert alert.fire() is False

    def test_status_pair_is_consistent(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        assert alert.is_active and alert.triggered_at is None
        alert.fire()
        assert not alert.is_active and alert.triggered_at is not None

    def test_concurrent_evaluation_fires_once(self):
        alert = AlertDefinition("TRY", AlertKind.ABOVE, 33.0)
        snap = snapshot("TRY", 32.0, 34.0)
        engine = AlertEngine()
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.extend(engine.evaluate([alert], snap))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results == [alert]


@pytest.mark.parametrize("kind,threshold,rates,expected", [
    (AlertKind.ABOVE, 10.0, [9.0, 11.0, 9.0, 11.0], [2]),
    (AlertKind.BELOW, 10.0, [11.0, 9.0, 11.0, 9.0], [2]),
    (AlertKind.PERCENT_CHANGE, 10.0, [100.0, 105.0, 120.0, 150.0], [3]),
])
def test_sequences_fire_at_most_once(kind, threshold, rates, expected):
    alert = AlertDefinition("TRY", kind, threshold)
    assert run_sequence(alert, "TRY", rates) == expected


def publish_crypto(registry, code, price):
    registry.set_quotes({
        "USD": CurrencyQuote("USD", 1.0),
        code: CurrencyQuote(code, 1.0 / price, is_crypto=True),
    })


def run_price_sequence(alert, code, prices):
    registry = CurrencyRegistry()
    engine = AlertEngine()
    fired_on = []
    for i, price in enumerate(prices, start=1):
        publish_crypto(registry, code, price)
        if engine.evaluate([alert], registry):
            fired_on.append(i)
    return fired_on


class TestCryptoAlerts:
    def test_alert_value_is_coin_price(self):
        assert CurrencyQuote("BTC", 1 / 50000, is_crypto=True).alert_value == pytest.approx(50000)
        assert CurrencyQuote("TRY", 32.45).alert_value == 32.45

    def test_above_in_price_terms(self):
        alert = AlertService().create_alert("BTC", 52000, "above")
        assert run_price_sequence(alert, "BTC", [50000, 53000, 54000]) == [2]

    def test_below_in_price_terms(self):
        alert = AlertService().create_alert("BTC", 48000, "below")
        assert run_price_sequence(alert, "BTC", [50000, 47000]) == [2]

    def test_price_rise_does_not_fire_below(self):
        alert = AlertService().create_alert("BTC", 48000, "below")
        assert run_price_sequence(alert, "BTC", [50000, 53000]) == []

    def test_percent_change_measured_on_price(self):
        # +10% in price is only -9.09% in coins per dollar
        alert = AlertService().create_alert("BTC", 10, "percent_change")
        assert run_price_sequence(alert, "BTC", [50000, 55000]) == [2]

    def test_percent_change_below_threshold(self):
        alert = AlertService().create_alert("ETH", 10, "percent_change")
        assert run_price_sequence(alert, "ETH", [2500, 2700]) == []
