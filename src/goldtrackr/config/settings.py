"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from goldtrackr.config.constants import (
    DEFAULT_REQUEST_TIMEOUT,
    NEWS_REFRESH_INTERVAL,
    PRICE_REFRESH_INTERVAL,
    REPORT_INTERVAL,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Sensitive values use SecretStr for safe handling. Every credential is
    optional: price feeds fall back to keyless or static data and order
    submission reports a failure when the selected exchange has no keys.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Price Feed Credentials
    # =========================================================================

    coingecko_api_key: SecretStr | None = Field(
        default=None,
        description="CoinGecko demo API key (optional)",
    )
    metalprice_api_key: SecretStr | None = Field(
        default=None,
        description="metalpriceapi.com key for spot gold (optional)",
    )

    # =========================================================================
    # Exchange Credentials
    # =========================================================================

    kraken_api_key: SecretStr | None = Field(
        default=None,
        description="Kraken API key",
    )
    kraken_api_secret: SecretStr | None = Field(
        default=None,
        description="Kraken API secret (base64)",
    )
    coinbase_key_name: SecretStr | None = Field(
        default=None,
        description="Coinbase CDP key name (organizations/.../apiKeys/...)",
    )
    coinbase_private_key: SecretStr | None = Field(
        default=None,
        description="Coinbase CDP EC private key in PEM format",
    )

    # =========================================================================
    # Polling
    # =========================================================================

    price_refresh_interval: float = Field(
        default=PRICE_REFRESH_INTERVAL,
        ge=5.0,
        le=3600.0,
        description="Seconds between price refreshes",
    )
    news_refresh_interval: float = Field(
        default=NEWS_REFRESH_INTERVAL,
        ge=30.0,
        le=86400.0,
        description="Seconds between news refreshes",
    )
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0.0,
        le=60.0,
        description="HTTP request timeout in seconds",
    )

    # =========================================================================
    # Storage
    # =========================================================================

    state_dir: Path = Field(
        default=Path(".goldtrackr"),
        description="Directory holding persisted preferences and portfolio",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    report_interval: float = Field(
        default=REPORT_INTERVAL,
        gt=0.0,
        description="Seconds between CLI dashboard redraws",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Use uvloop for the event loop when available",
    )

    # =========================================================================
    # Dashboard API
    # =========================================================================

    dashboard_host: str = Field(default="127.0.0.1")
    dashboard_port: int = Field(default=8000, ge=1, le=65535)

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator(
        "coingecko_api_key",
        "metalprice_api_key",
        "kraken_api_key",
        "kraken_api_secret",
        "coinbase_key_name",
        "coinbase_private_key",
        mode="after",
    )
    @classmethod
    def blank_as_missing(cls, v: SecretStr | None) -> SecretStr | None:
        """Treat empty credentials as unset."""
        if v is not None and not v.get_secret_value().strip():
            return None
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def has_kraken_credentials(self) -> bool:
        """Check whether Kraken keys are configured."""
        return self.kraken_api_key is not None and self.kraken_api_secret is not None

    @property
    def has_coinbase_credentials(self) -> bool:
        """Check whether Coinbase CDP keys are configured."""
        return self.coinbase_key_name is not None and self.coinbase_private_key is not None

    @property
    def preferences_path(self) -> Path:
        """Path of the persisted trading preferences."""
        return self.state_dir / "settings.json"

    @property
    def portfolio_path(self) -> Path:
        """Path of the persisted portfolio."""
        return self.state_dir / "portfolio.json"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
