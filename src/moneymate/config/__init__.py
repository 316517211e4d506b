# src/moneymate/config/__init__.py
"""
Configuration Module

Provides centralized configuration management using Pydantic Settings.
Supports environment variables and an optional .env file.
"""

from moneymate.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
