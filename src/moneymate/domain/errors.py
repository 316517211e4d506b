# src/moneymate/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines domain-specific exceptions that represent
business rule violations and domain errors.

Registry lookup misses are not errors: they are returned as None.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class UnknownCurrencyError(DomainError):
    """Raised when a conversion references a currency that has no current quote."""

    def __init__(self, code: str, message: str = ""):
        self.code = code
        super().__init__(message or f"Currency unavailable: {code}")


class InconsistentRateError(UnknownCurrencyError):
    """Raised when a currency's rate is non-positive or non-finite (data corruption)."""

    def __init__(self, code: str, rate: float):
        self.rate = rate
        super().__init__(code, f"Inconsistent rate for {code}: {rate!r}")


class InvalidAmountError(DomainError):
    """Raised when an amount is negative, non-finite or not a number."""
    pass


class InvalidAlertError(DomainError):
    """Raised when an alert definition cannot be created (bad code, kind or threshold)."""
    pass
