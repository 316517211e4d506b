# src/moneymate/adapters/telegram/handlers.py
"""
Telegram Handlers - Command Processing and User Interaction

This module contains the bot commands that expose the rate engine:
/rates, /convert, /alert, /alerts, /delalert, /clearalerts and /start.
Every command is rate-limited per user and validates its arguments before
touching the engine.

Files that USE this module:
- moneymate.app (build_handlers function creates handler instances)

Files that this module USES:
- moneymate.adapters.telegram.bot (get_services)
- moneymate.adapters.formatting.formatter (reply formatting)
- moneymate.shared.rate_limiter (rate limiting)
- moneymate.shared.validators (argument validation)
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from moneymate.adapters.formatting.formatter import alerts_list, conversion_line, quote_line
from moneymate.adapters.telegram.bot import get_services
from moneymate.domain.errors import InvalidAlertError, InvalidAmountError, UnknownCurrencyError
from moneymate.domain.models import AlertKind, ConversionRequest
from moneymate.shared.rate_limiter import RATE_LIMITS, rate_limiter
from moneymate.shared.validators import sanitize_user_input, validate_currency_code, validate_numeric_input

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "MoneyMate commands:\n"
    "/rates [CODE ...] - current rates with trend\n"
    "/convert AMOUNT FROM TO - e.g. /convert 100 USD TRY\n"
    "/alert CODE above|below|change VALUE - e.g. /alert TRY above 33\n"
    "/alerts - list alerts\n"
    "/delalert ID - delete an alert\n"
    "/clearalerts - delete fired alerts"
)

_KIND_ALIASES = {
    "above": AlertKind.ABOVE,
    "below": AlertKind.BELOW,
    "change": AlertKind.PERCENT_CHANGE,
    "percent": AlertKind.PERCENT_CHANGE,
    "percent_change": AlertKind.PERCENT_CHANGE,
}


def _check_rate_limit(update: Update, limit_type: str) -> bool:
    """
    Check if user is within configured rate limits.

    Returns:
        True if the command may run
    """
    user = update.effective_user
    if user is None:
        return False
    allowed = rate_limiter.is_allowed(str(user.id), RATE_LIMITS[limit_type])
    if not allowed:
        logger.warning("Rate limit hit: user=%s type=%s", user.id, limit_type)
    return allowed


def _rate_limited_text(update: Update) -> str:
    """Reply for a rate-limited user, with the time left on the block when known."""
    user = update.effective_user
    remaining = rate_limiter.blocked_for(str(user.id)) if user is not None else None
    if remaining is None:
        return "⏰ Rate limit exceeded. Please try again later."
    return f"⏰ Rate limit exceeded. Please try again in {math.ceil(remaining)} seconds."


def _codes(args: List[str]) -> List[str]:
    return [sanitize_user_input(a, 10).upper() for a in args]


async def start_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start and /help."""
    await update.message.reply_text(HELP_TEXT)


async def rates_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /rates [CODE ...] - current quotes with change since the previous refresh.

    Without arguments every priced currency is listed.
    """
    if not _check_rate_limit(update, "query"):
        await update.message.reply_text(_rate_limited_text(update))
        return

    services = get_services(context)
    snap = services.registry.snapshot()
    if snap.version == 0:
        await update.message.reply_text("⚠️ Rates are not loaded yet. Please try again shortly.")
        return

    base = services.registry.base_code
    wanted = _codes(context.args or []) or sorted(c for c in snap.current if c != base)
    lines = []
    for code in wanted:
        quote = snap.get_quote(code)
        if quote is None:
            lines.append(f"{code}: unavailable")
            continue
        lines.append(quote_line(quote, base, snap.get_change(code)))
    await update.message.reply_text("\n".join(lines))


async def convert_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /convert AMOUNT FROM TO."""
    if not _check_rate_limit(update, "query"):
        await update.message.reply_text(_rate_limited_text(update))
        return

    args = context.args or []
    if len(args) != 3:
        await update.message.reply_text("Usage: /convert AMOUNT FROM TO")
        return

    amount = validate_numeric_input(args[0], min_val=0)
    from_code, to_code = _codes(args[1:])
    if amount is None:
        await update.message.reply_text("⚠️ Amount must be a non-negative number.")
        return

    services = get_services(context)
    try:
        result = services.converter.convert_request(ConversionRequest(amount, from_code, to_code))
    except UnknownCurrencyError as e:
        await update.message.reply_text(f"⚠️ Currency unavailable: {e.code}")
        return
    except InvalidAmountError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    await update.message.reply_text(conversion_line(result))


def _parse_alert_args(args: List[str]) -> Optional[tuple]:
    if len(args) != 3:
        return None
    code = sanitize_user_input(args[0], 10).upper()
    kind = _KIND_ALIASES.get(args[1].lower())
    threshold = validate_numeric_input(args[2].rstrip("%"))
    if not validate_currency_code(code) or kind is None or threshold is None:
        return None
    return code, kind, threshold


async def alert_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /alert CODE above|below|change VALUE."""
    if not _check_rate_limit(update, "alert_edit"):
        await update.message.reply_text(_rate_limited_text(update))
        return

    parsed = _parse_alert_args(context.args or [])
    if parsed is None:
        await update.message.reply_text("Usage: /alert CODE above|below|change VALUE")
        return
    code, kind, threshold = parsed

    services = get_services(context)
    if services.registry.has_quotes() and services.registry.get_quote(code) is None:
        # Allowed: the alert waits until the currency is priced
        logger.info("Alert created for currently unpriced currency %s", code)
    try:
        alert = services.alerts.create_alert(code, threshold, kind)
    except InvalidAlertError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    await update.message.reply_text(f"✅ Alert {alert.id[:8]} created: {alert.message}")


async def alerts_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /alerts - list all alerts with their state."""
    if not _check_rate_limit(update, "query"):
        await update.message.reply_text(_rate_limited_text(update))
        return
    services = get_services(context)
    await update.message.reply_text(alerts_list(services.alerts.get_alerts()))


async def delalert_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delalert ID - ID may be the 8-character prefix shown by /alerts."""
    if not _check_rate_limit(update, "alert_edit"):
        await update.message.reply_text(_rate_limited_text(update))
        return

    args = context.args or []
    if len(args) != 1:
        await update.message.reply_text("Usage: /delalert ID")
        return
    prefix = sanitize_user_input(args[0], 64)

    services = get_services(context)
    matches = [a for a in services.alerts.get_alerts() if a.id.startswith(prefix)]
    if len(matches) != 1:
        await update.message.reply_text("⚠️ No unique alert matches that id.")
        return
    services.alerts.delete_alert(matches[0].id)
    await update.message.reply_text(f"🗑 Alert {matches[0].id[:8]} deleted.")


async def clearalerts_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clearalerts - delete every fired alert."""
    if not _check_rate_limit(update, "alert_edit"):
        await update.message.reply_text(_rate_limited_text(update))
        return
    removed = get_services(context).alerts.clear_triggered_alerts()
    await update.message.reply_text(f"🗑 Removed {removed} fired alerts.")


def build_handlers():
    """
    Build all command handlers for the bot.

    Returns:
        List of CommandHandler instances
    """
    return [
        CommandHandler(["start", "help"], start_cmd),
        CommandHandler("rates", rates_cmd),
        CommandHandler("convert", convert_cmd),
        CommandHandler("alert", alert_cmd),
        CommandHandler("alerts", alerts_cmd),
        CommandHandler("delalert", delalert_cmd),
        CommandHandler("clearalerts", clearalerts_cmd),
    ]
