"""
Configuration loader for YAML-based application configuration.

This module loads and validates configuration from a YAML file. All
configuration is validated using Pydantic models to catch configuration
errors early.

Configuration file expected:
    - config/exchange.yaml: endpoint, connection, options, aliases, logging

Environment variables:
    - UEX_API_KEY, UEX_SECRET, UEX_PASSWORD, UEX_COUNTRY_CODE,
      UEX_PHONE_NUMBER: account credentials
    - UEX_BASE_URL: overrides rest.base_url
    - LOG_LEVEL: overrides logging.level
    - LOG_FORMAT: overrides logging.format

Example:
    >>> from src.config.loader import load_config
    >>> config = load_config("config")
    >>> print(config.exchange.rest.base_url)
    https://open-api.uex.com/open/api
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import ValidationError

from src.config.models import (
    AppConfig,
    ConnectionSettings,
    Credentials,
    ExchangeConfig,
    ExchangeOptions,
    LogFormat,
    LoggingConfig,
    LogLevel,
    RestEndpoints,
)

CONFIG_FILENAME = "exchange.yaml"

CREDENTIAL_ENV_VARS: Dict[str, str] = {
    "api_key": "UEX_API_KEY",
    "secret": "UEX_SECRET",
    "password": "UEX_PASSWORD",
    "country_code": "UEX_COUNTRY_CODE",
    "phone_number": "UEX_PHONE_NUMBER",
}


class ConfigLoadError(Exception):
    """
    Raised when configuration loading fails.

    Attributes:
        message: Error message describing what went wrong.
        file_path: Path to the file that caused the error, if applicable.
        cause: Original exception that caused the error, if any.
    """

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        cause: Optional[Exception] = None,
    ):
        """
        Initialize ConfigLoadError.

        Args:
            message: Error message.
            file_path: Path to the problematic file.
            cause: Original exception.
        """
        self.message = message
        self.file_path = file_path
        self.cause = cause
        super().__init__(message)


class ConfigLoader:
    """
    Loads and validates application configuration.

    Expects the following directory structure:
        config/
        └── exchange.yaml    - UEX connection settings and options

    A missing file is not an error: every setting has a default.

    Example:
        >>> loader = ConfigLoader("config")
        >>> config = loader.load()
        >>> print(config.exchange.connection.rate_limit_ms)
        1500
    """

    def __init__(
        self,
        config_dir: Path | str = "config",
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize config loader.

        Args:
            config_dir: Path to configuration directory (default: 'config').
            environ: Environment mapping (default: os.environ).

        Raises:
            ConfigLoadError: If config path exists but is not a directory.
        """
        self.config_dir = Path(config_dir)
        self.environ: Mapping[str, str] = os.environ if environ is None else environ
        if self.config_dir.exists() and not self.config_dir.is_dir():
            raise ConfigLoadError(
                f"Configuration path is not a directory: {self.config_dir}",
                file_path=self.config_dir,
            )

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        """
        Load a YAML file from the config directory.

        Args:
            filename: Name of YAML file (e.g., 'exchange.yaml').

        Returns:
            Dict containing parsed YAML content; empty if the file is absent.

        Raises:
            ConfigLoadError: If the file is unreadable, not a mapping, or
                has invalid YAML.
        """
        file_path = self.config_dir / filename
        if not file_path.exists():
            return {}

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(
                f"Invalid YAML syntax in {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e
        except OSError as e:
            raise ConfigLoadError(
                f"Error reading {file_path}: {e}",
                file_path=file_path,
                cause=e,
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Configuration file must contain a mapping: {file_path}",
                file_path=file_path,
            )
        return data

    def _load_exchange(self, data: Dict[str, Any]) -> ExchangeConfig:
        """
        Build the exchange configuration.

        Returns:
            ExchangeConfig object.

        Raises:
            ConfigLoadError: If validation fails.
        """
        exchange_data = data.get("exchange", {}) or {}

        try:
            rest_data = dict(exchange_data.get("rest", {}) or {})
            base_url = self.environ.get("UEX_BASE_URL")
            if base_url:
                rest_data["base_url"] = base_url

            kwargs: Dict[str, Any] = {
                "rest": RestEndpoints(**rest_data),
                "connection": ConnectionSettings(**(exchange_data.get("connection", {}) or {})),
                "options": ExchangeOptions(**(exchange_data.get("options", {}) or {})),
            }
            if exchange_data.get("currency_aliases"):
                kwargs["currency_aliases"] = exchange_data["currency_aliases"]
            if exchange_data.get("timeframes"):
                kwargs["timeframes"] = {
                    str(k): str(v) for k, v in exchange_data["timeframes"].items()
                }
            return ExchangeConfig(**kwargs)

        except ValidationError as e:
            raise ConfigLoadError(
                f"Invalid exchange configuration: {e}",
                file_path=self.config_dir / CONFIG_FILENAME,
                cause=e,
            ) from e

    def _load_logging(self, data: Dict[str, Any]) -> LoggingConfig:
        """
        Build the logging configuration; LOG_LEVEL / LOG_FORMAT win over YAML.

        Unknown values from the environment fall back to the YAML value.
        """
        logging_data = data.get("logging", {}) or {}
        level = str(logging_data.get("level", LogLevel.INFO.value)).upper()
        fmt = str(logging_data.get("format", LogFormat.JSON.value)).lower()

        env_level = self.environ.get("LOG_LEVEL", "").upper()
        if env_level in LogLevel.__members__:
            level = env_level
        env_format = self.environ.get("LOG_FORMAT", "").lower()
        if env_format in {f.value for f in LogFormat}:
            fmt = env_format

        try:
            return LoggingConfig(format=fmt, level=level)
        except ValidationError as e:
            raise ConfigLoadError(
                f"Invalid logging configuration: {e}",
                file_path=self.config_dir / CONFIG_FILENAME,
                cause=e,
            ) from e

    def _load_credentials(self) -> Credentials:
        """
        Load credentials from environment.

        Returns:
            Credentials object; missing variables stay None and are
            rejected later, on the first private call.
        """
        values = {
            field: self.environ.get(env_var) or None
            for field, env_var in CREDENTIAL_ENV_VARS.items()
        }
        return Credentials(**values)

    def load(self) -> AppConfig:
        """
        Load and validate configuration.

        Returns:
            AppConfig: Validated application configuration.

        Raises:
            ConfigLoadError: If any configuration is invalid.
        """
        try:
            data = self._load_yaml(CONFIG_FILENAME)
            return AppConfig(
                exchange=self._load_exchange(data),
                credentials=self._load_credentials(),
                logging=self._load_logging(data),
            )

        except ConfigLoadError:
            raise
        except ValidationError as e:
            raise ConfigLoadError(
                f"Configuration validation failed: {e}",
                cause=e,
            ) from e


def load_config(
    config_dir: Path | str = "config",
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Convenience function to load application configuration.

    Args:
        config_dir: Path to configuration directory (default: 'config').
        environ: Environment mapping (default: os.environ).

    Returns:
        AppConfig: Validated application configuration.

    Raises:
        ConfigLoadError: If configuration loading fails.
    """
    loader = ConfigLoader(config_dir, environ)
    return loader.load()
