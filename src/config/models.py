"""
Pydantic models for application configuration.

This module defines the configuration models validated when loading the
YAML configuration file. The models ensure type safety and provide
sensible defaults for optional settings.

Configuration files:
    - config/exchange.yaml: UEX endpoint, connection, options and logging

Credentials are never read from YAML; they come from the environment (see
``src.config.loader``).

Example:
    >>> from src.config.models import AppConfig
    >>> config = AppConfig()
    >>> config.exchange.timeframes["1h"]
    '60'
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class LogFormat(str, Enum):
    """Logging format options."""

    JSON = "json"
    TEXT = "text"


class LogLevel(str, Enum):
    """Logging level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# =============================================================================
# EXCHANGE CONFIGURATION
# =============================================================================

DEFAULT_TIMEFRAMES: Dict[str, str] = {
    "1m": "1",
    "5m": "5",
    "15m": "15",
    "30m": "30",
    "1h": "60",
    "2h": "120",
    "3h": "180",
    "4h": "240",
    "6h": "360",
    "12h": "720",
    "1d": "1440",
}

# Exchange-specific currency aliases mapped to standard ticker symbols.
DEFAULT_CURRENCY_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "XBT": "BTC",
        "BCC": "BCH",
        "BCHABC": "BCH",
        "BCHSV": "BSV",
        "DRK": "DASH",
    }
)


class Credentials(BaseModel):
    """
    UEX account credentials.

    UEX requires all five for every private call.

    Attributes:
        api_key: API key.
        secret: API secret used for signing.
        password: Trading (fund) password.
        country_code: Phone country code of the account.
        phone_number: Phone number of the account.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    api_key: Optional[str] = None
    secret: Optional[str] = Field(default=None, repr=False)
    password: Optional[str] = Field(default=None, repr=False)
    country_code: Optional[str] = None
    phone_number: Optional[str] = None

    def missing(self) -> List[str]:
        """Names of required credentials that are empty."""
        return [
            name
            for name in ("api_key", "secret", "password", "country_code", "phone_number")
            if not getattr(self, name)
        ]


class RestEndpoints(BaseModel):
    """REST API endpoint configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    base_url: str = Field(
        default="https://open-api.uex.com/open/api",
        description="REST API base URL",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Require an http(s) URL."""
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value.rstrip("/")


class ConnectionSettings(BaseModel):
    """Connection settings for the REST transport."""

    model_config = {"frozen": True, "extra": "forbid"}

    rate_limit_ms: int = Field(
        default=1500,
        description="Minimum interval between requests in milliseconds",
        ge=0,
        le=60000,
    )
    timeout_seconds: int = Field(
        default=10,
        description="Request timeout in seconds",
        ge=1,
        le=120,
    )
    user_agent: str = Field(
        default="uex-adapter/1.0",
        description="User-Agent header sent with every request",
    )


class ExchangeOptions(BaseModel):
    """Exchange behaviour switches."""

    model_config = {"frozen": True, "extra": "forbid"}

    create_market_buy_order_requires_price: bool = Field(
        default=True,
        description=(
            "Market buys are sized in quote currency; when enabled a price is "
            "required and volume is sent as amount * price"
        ),
    )
    order_book_type: str = Field(
        default="step0",
        description="Depth aggregation: step0 (finest), step1, step2",
        pattern=r"^step[0-2]$",
    )
    deposit_address_path: str = Field(
        default="deposit_address",
        description="Private GET path returning a deposit address",
    )
    withdraw_path: str = Field(
        default="withdraw",
        description="Private POST path submitting a withdrawal",
    )


class ExchangeConfig(BaseModel):
    """Configuration for the UEX exchange."""

    model_config = {"frozen": True, "extra": "forbid"}

    rest: RestEndpoints = Field(
        default_factory=RestEndpoints,
        description="REST API endpoint configuration",
    )
    connection: ConnectionSettings = Field(
        default_factory=ConnectionSettings,
        description="Connection settings",
    )
    options: ExchangeOptions = Field(
        default_factory=ExchangeOptions,
        description="Exchange behaviour switches",
    )
    currency_aliases: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CURRENCY_ALIASES),
        description="Exchange currency code -> standard code",
    )
    timeframes: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_TIMEFRAMES),
        description="Canonical timeframe -> UEX period (minutes)",
    )

    @field_validator("currency_aliases")
    @classmethod
    def normalize_aliases(cls, value: Dict[str, str]) -> Dict[str, str]:
        """Alias keys and targets are upper-case currency codes."""
        return {k.strip().upper(): v.strip().upper() for k, v in value.items()}

    def get_period(self, timeframe: str) -> Optional[str]:
        """
        Get the UEX period for a canonical timeframe.

        Args:
            timeframe: Canonical timeframe (e.g., "1h").

        Returns:
            Optional[str]: UEX period in minutes, or None if unsupported.
        """
        return self.timeframes.get(timeframe)


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log output format",
    )
    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Default log level",
    )


# =============================================================================
# ROOT CONFIGURATION
# =============================================================================


class AppConfig(BaseModel):
    """
    Root application configuration.

    Aggregates all configuration sections into a single validated object.

    Example:
        >>> config = AppConfig()
        >>> config.exchange.rest.base_url
        'https://open-api.uex.com/open/api'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    exchange: ExchangeConfig = Field(
        default_factory=ExchangeConfig,
        description="UEX exchange configuration",
    )
    credentials: Credentials = Field(
        default_factory=Credentials,
        description="Account credentials (from environment)",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
