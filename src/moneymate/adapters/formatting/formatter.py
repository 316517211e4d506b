# src/moneymate/adapters/formatting/formatter.py
"""
Message Formatter - Text Formatting and Presentation

This module handles all text formatting for bot replies and alert
notifications: quote lines with trend arrows, conversion results, alert
titles/messages and alert listings.

Files that USE this module:
- moneymate.application.alert_service (default alert title/message)
- moneymate.adapters.notifiers.* (alert notification text)
- moneymate.adapters.telegram.handlers (all reply formatting)
- tests.test_formatter (unit tests)

Files that this module USES:
- moneymate.domain.models (CurrencyQuote, Change, AlertDefinition, AlertKind, ConversionResult)
"""
from __future__ import annotations

from typing import Iterable, Optional

from moneymate.domain.models import (
    AlertDefinition,
    AlertKind,
    Change,
    ConversionResult,
    CurrencyQuote,
)


def _fmt_amount(value: float) -> str:
    """
    Format a number with precision that suits its magnitude.

    Returns:
        '43,250' for >= 1000, '32.45' for >= 1, '0.92' or '0.000023' below 1
    """
    if value >= 1000:
        return f"{value:,.0f}"
    if value >= 1:
        return f"{value:,.2f}"
    return f"{value:.6f}".rstrip("0").rstrip(".") or "0"


def _fmt_pct(curr: float, prev: float) -> str:
    """
    Format percentage change between current and previous values.

    Args:
        curr: Current value
        prev: Previous value

    Returns:
        '2.1% 📈', '3.1% 📉', '0.0% ⏸', or '—' if prev <= 0
    """
    if prev <= 0:
        return "—"
    delta = (curr - prev) / prev * 100.0
    arrow = "📈" if delta > 0 else ("📉" if delta < 0 else "⏸")
    return f"{abs(delta):.1f}% {arrow}"


def quote_line(quote: CurrencyQuote, base_code: str, change: Optional[Change] = None) -> str:
    """
    Format one currency quote for display.

    Crypto quotes are shown as the price of one coin in the base currency,
    fiat quotes as units per one base unit.

    Args:
        quote: Quote to format
        base_code: Base currency code
        change: Optional change since the previous refresh

    Returns:
        e.g. 'TRY: 1 USD = 32.45 TRY (0.3% 📈)' or 'BTC: 1 BTC = 43,250 USD'
    """
    if quote.is_crypto:
        text = f"{quote.code}: 1 {quote.code} = {_fmt_amount(quote.alert_value)} {base_code}"
    else:
        text = f"{quote.code}: 1 {base_code} = {_fmt_amount(quote.alert_value)} {quote.code}"

    if change is not None:
        # A crypto price moves opposite to its units-per-base rate
        if quote.is_crypto:
            text += f" ({_fmt_pct(1.0 / change.current, 1.0 / change.previous)})"
        else:
            text += f" ({_fmt_pct(change.current, change.previous)})"
    elif quote.change_24h is not None:
        text += f" (24h {quote.change_24h:+.2f}%)"
    return text


def conversion_line(result: ConversionResult) -> str:
    """Format a conversion result, e.g. '100 USD = 3,245 TRY'."""
    return (
        f"{_fmt_amount(result.amount)} {result.from_code} = "
        f"{_fmt_amount(result.converted)} {result.to_code}\n"
        f"1 {result.from_code} = {_fmt_amount(result.rate)} {result.to_code}"
    )


def default_alert_title(currency_code: str, kind: AlertKind) -> str:
    """Default notification title for a new alert."""
    if kind == AlertKind.ABOVE:
        return f"{currency_code} price alert"
    if kind == AlertKind.BELOW:
        return f"{currency_code} drop alert"
    return f"{currency_code} change alert"


def default_alert_message(currency_code: str, kind: AlertKind, threshold: float) -> str:
    """Default notification body for a new alert."""
    if kind == AlertKind.ABOVE:
        return f"{currency_code} rose above {threshold:.4f}!"
    if kind == AlertKind.BELOW:
        return f"{currency_code} fell below {threshold:.4f}!"
    return f"{currency_code} moved {threshold:.2f}%!"


def alert_notification(alert: AlertDefinition) -> str:
    """
    Format the notification text for a fired alert.

    Returns:
        Title, message and trigger time in UTC
    """
    lines = [f"🔔 {alert.title}", alert.message]
    if alert.triggered_at is not None:
        lines.append(f"⏱️ {alert.triggered_at.strftime('%Y-%m-%d %H:%M UTC')}")
    return "\n".join(lines)


def _kind_label(alert: AlertDefinition) -> str:
    if alert.kind == AlertKind.ABOVE:
        return f"above {alert.threshold:g}"
    if alert.kind == AlertKind.BELOW:
        return f"below {alert.threshold:g}"
    return f"±{alert.threshold:g}%"


def alerts_list(alerts: Iterable[AlertDefinition]) -> str:
    """
    Format a list of alerts, one per line, with their state.

    Returns:
        Multi-line text, or 'No alerts.' for an empty list
    """
    lines = []
    for alert in alerts:
        state = "armed" if alert.is_active else "fired"
        lines.append(f"{alert.id[:8]} {alert.currency_code} {_kind_label(alert)} [{state}]")
    return "\n".join(lines) if lines else "No alerts."
