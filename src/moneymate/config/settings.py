# src/moneymate/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Supports environment variables with validation and an optional .env file.

Files that USE this module:
- moneymate.app (loads settings for bot and refresh configuration)
- moneymate.adapters.providers.* (providers use settings for URLs, timeouts and cache TTLs)
- moneymate.adapters.persistence.alert_store (alerts file path)
- moneymate.adapters.telegram.* (chat id for alert notifications)

Files that this module USES:
- moneymate.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from pathlib import Path  # Object-oriented filesystem paths
from typing import List, Optional  # Type hints

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from moneymate.shared.validators import (
    validate_bot_token,  # Validate Telegram bot token format
    validate_chat_id,  # Validate Telegram chat ID format
    validate_currency_code,  # Validate currency code format
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Currencies ---
    base_currency: str = Field(default="USD", alias="BASE_CURRENCY")
    crypto_codes_raw: str = Field(default="BTC,ETH,LTC,XRP,ADA", alias="CRYPTO_CODES")

    # --- Rate Providers ---
    fiat_primary_url: str = Field(default="https://api.fxratesapi.com/latest", alias="FIAT_PRIMARY_URL")
    fiat_fallback_url: str = Field(
        default="https://api.exchangerate-api.com/v4/latest", alias="FIAT_FALLBACK_URL"
    )
    coingecko_url: str = Field(
        default="https://api.coingecko.com/api/v3/simple/price", alias="COINGECKO_URL"
    )

    # --- HTTP Settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)

    # --- Cache Settings (in minutes) ---
    fiat_cache_minutes: int = Field(default=5, alias="FIAT_CACHE_MINUTES", ge=0, le=1440)
    crypto_cache_minutes: int = Field(default=5, alias="CRYPTO_CACHE_MINUTES", ge=0, le=1440)

    # --- Scheduling ---
    refresh_interval_minutes: int = Field(default=5, alias="REFRESH_INTERVAL_MINUTES", ge=1, le=1440)

    # --- Telegram (optional: bot shell and alert notifications) ---
    bot_token: str = Field(default="", alias="BOT_TOKEN")
    alert_chat_id: str = Field(default="", alias="ALERT_CHAT_ID")

    # --- Persistence ---
    alerts_file: Path = Field(default=Path("./data/alerts.json"), alias="ALERTS_FILE")

    # --- Logging (for server deployment) ---
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="MONEYMATE_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @property
    def crypto_codes(self) -> List[str]:
        """Cryptocurrency codes tracked through CoinGecko."""
        return [c.strip().upper() for c in self.crypto_codes_raw.split(",") if c.strip()]

    @field_validator("base_currency")
    @classmethod
    def validate_base_currency(cls, v: str) -> str:
        """Validate and normalize the base currency code."""
        v = v.strip().upper()
        if not validate_currency_code(v):
            raise ValueError("Invalid BASE_CURRENCY code")
        return v

    @field_validator("crypto_codes_raw")
    @classmethod
    def validate_crypto_codes(cls, v: str) -> str:
        """Validate every code in the comma-separated crypto list."""
        for code in v.split(","):
            code = code.strip().upper()
            if code and not validate_currency_code(code):
                raise ValueError(f"Invalid crypto code in CRYPTO_CODES: {code}")
        return v

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate bot token format (empty disables Telegram)."""
        if v and not validate_bot_token(v):
            raise ValueError("Invalid BOT_TOKEN format")
        return v

    @field_validator("alert_chat_id")
    @classmethod
    def validate_chat_id(cls, v: str) -> str:
        """Validate chat ID format."""
        if v and not validate_chat_id(v):
            raise ValueError("Invalid ALERT_CHAT_ID format")
        return v

    def model_post_init(self, __context) -> None:
        """Post-initialization validation."""
        # Ensure data directory exists
        self.alerts_file.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
