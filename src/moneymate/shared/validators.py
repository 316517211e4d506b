# src/moneymate/shared/validators.py
"""
Input Validation Utilities - Security and Data Validation

This module provides input validation functions for configuration values
and user input: bot tokens, chat IDs, currency codes and numeric amounts.

Files that USE this module:
- moneymate.config.settings (uses validation functions in Settings field validators)
- moneymate.application.conversion (amount validation)
- moneymate.application.alert_service (currency code and threshold validation)
- moneymate.adapters.telegram.handlers (parses user command arguments)

Files that this module USES:
- None (pure utility functions)
"""
import math
import re
from typing import Optional


def validate_chat_id(chat_id: str) -> bool:
    """
    Validate Telegram channel/chat ID format.

    Args:
        chat_id: Chat ID to validate

    Returns:
        True if valid, False otherwise
    """
    if not chat_id:
        return False

    # Chat IDs can be:
    # - @channelname (public channels)
    # - -1001234567890 (private channels/chats)
    # - 123456789 (user IDs)
    if chat_id.startswith('@'):
        return bool(re.match(r'^@[a-zA-Z0-9_]+$', chat_id))
    elif chat_id.startswith('-100'):
        return bool(re.match(r'^-100\d+$', chat_id))
    else:
        return bool(re.match(r'^\d+$', chat_id))


def validate_bot_token(token: str) -> bool:
    """
    Validate Telegram bot token format.

    Args:
        token: Bot token to validate

    Returns:
        True if valid, False otherwise
    """
    if not token:
        return False

    # Bot tokens should be in format: 123456789:ABCDEFghijklmnopQRSTUVwxyz
    pattern = r'^\d{8,10}:[A-Za-z0-9_-]{35}$'
    return bool(re.match(pattern, token))


def validate_currency_code(code: str) -> bool:
    """
    Validate a currency code (3-5 uppercase letters, e.g. USD, BTC, USDT).

    Args:
        code: Currency code to validate

    Returns:
        True if valid, False otherwise
    """
    if not code:
        return False
    return bool(re.match(r'^[A-Z]{3,5}$', code))


def is_valid_amount(value) -> bool:
    """
    Check that a value is a finite, non-negative real number.

    Booleans are rejected even though they are ints.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


def validate_numeric_input(value: str, min_val: Optional[float] = None,
                           max_val: Optional[float] = None) -> Optional[float]:
    """
    Parse and validate numeric user input.

    Args:
        value: String value to parse (commas are accepted as thousand separators)
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Parsed float if valid, None otherwise
    """
    try:
        num = float(value.replace(",", ""))
    except (ValueError, TypeError, AttributeError):
        return None

    if not math.isfinite(num):
        return None
    if min_val is not None and num < min_val:
        return None
    if max_val is not None and num > max_val:
        return None
    return num


def sanitize_user_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitize user input by stripping control characters and limiting length.

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""
    text = re.sub(r'[\x00-\x1f\x7f]', '', text)
    return text[:max_length].strip()
