# src/moneymate/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains the rate engine and the services that orchestrate it:
registry, conversion, alert evaluation, alert management and refresh cycles.
"""

from moneymate.application.registry import CurrencyRegistry, RegistrySnapshot
from moneymate.application.conversion import ConversionEngine
from moneymate.application.alerts import AlertEngine, check_trigger
from moneymate.application.alert_service import AlertService
from moneymate.application.rates_service import ProviderChain, build_default_chain
from moneymate.application.refresh_service import RefreshOutcome, RefreshService

__all__ = [
    "CurrencyRegistry",
    "RegistrySnapshot",
    "ConversionEngine",
    "AlertEngine",
    "check_trigger",
    "AlertService",
    "ProviderChain",
    "build_default_chain",
    "RefreshOutcome",
    "RefreshService",
]
