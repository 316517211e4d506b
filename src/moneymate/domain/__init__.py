# src/moneymate/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models and business rules.
No dependencies on infrastructure or external systems.
"""

from moneymate.domain.models import (
    ARMED,
    AlertDefinition,
    AlertKind,
    AlertStatus,
    Change,
    ConversionRequest,
    ConversionResult,
    CurrencyQuote,
    RateTable,
)
from moneymate.domain.errors import (
    DomainError,
    InconsistentRateError,
    InvalidAlertError,
    InvalidAmountError,
    UnknownCurrencyError,
)

__all__ = [
    "ARMED",
    "AlertDefinition",
    "AlertKind",
    "AlertStatus",
    "Change",
    "ConversionRequest",
    "ConversionResult",
    "CurrencyQuote",
    "RateTable",
    "DomainError",
    "InconsistentRateError",
    "InvalidAlertError",
    "InvalidAmountError",
    "UnknownCurrencyError",
]
