# src/moneymate/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Rate limiting
- Logging configuration
"""

from moneymate.shared.validators import (
    is_valid_amount,
    sanitize_user_input,
    validate_bot_token,
    validate_chat_id,
    validate_currency_code,
    validate_numeric_input,
)
from moneymate.shared.rate_limiter import RateLimitConfig, RateLimiter, rate_limiter, RATE_LIMITS

__all__ = [
    "is_valid_amount",
    "sanitize_user_input",
    "validate_bot_token",
    "validate_chat_id",
    "validate_currency_code",
    "validate_numeric_input",
    "RateLimitConfig",
    "RateLimiter",
    "rate_limiter",
    "RATE_LIMITS",
]
