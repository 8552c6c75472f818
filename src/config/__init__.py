"""
Configuration management for the UEX adapter.

This module handles loading and validating configuration from YAML.
All configuration values are validated using Pydantic models to ensure
type safety and catch configuration errors early.

Configuration is loaded from config/exchange.yaml:
    - exchange.rest: REST endpoint
    - exchange.connection: request interval, timeout, user agent
    - exchange.options: order and funding behaviour switches
    - exchange.currency_aliases / exchange.timeframes
    - logging: format and level

Environment variables supply credentials and can override settings:
    - UEX_API_KEY, UEX_SECRET, UEX_PASSWORD, UEX_COUNTRY_CODE, UEX_PHONE_NUMBER
    - UEX_BASE_URL: REST base URL
    - LOG_LEVEL / LOG_FORMAT: logging

Example:
    >>> from src.config import load_config
    >>> config = load_config()
    >>> config.exchange.get_period("1h")
    '60'

Modules:
    loader: Configuration file loading utilities
    models: Pydantic models for configuration validation
"""

from src.config.loader import ConfigLoadError, ConfigLoader, load_config
from src.config.models import (
    # Enums
    LogFormat,
    LogLevel,
    # Exchange config
    DEFAULT_CURRENCY_ALIASES,
    DEFAULT_TIMEFRAMES,
    ConnectionSettings,
    Credentials,
    ExchangeConfig,
    ExchangeOptions,
    RestEndpoints,
    # Logging config
    LoggingConfig,
    # Root config
    AppConfig,
)

__all__: list[str] = [
    # Loader
    "load_config",
    "ConfigLoader",
    "ConfigLoadError",
    # Enums
    "LogFormat",
    "LogLevel",
    # Exchange config
    "DEFAULT_CURRENCY_ALIASES",
    "DEFAULT_TIMEFRAMES",
    "RestEndpoints",
    "ConnectionSettings",
    "ExchangeOptions",
    "ExchangeConfig",
    "Credentials",
    # Logging config
    "LoggingConfig",
    # Root config
    "AppConfig",
]
