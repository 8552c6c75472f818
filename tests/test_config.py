"""Tests for configuration loading."""

from pathlib import Path

import pytest

from src.config import (
    DEFAULT_CURRENCY_ALIASES,
    AppConfig,
    ConfigLoadError,
    LogFormat,
    LogLevel,
    load_config,
)

REPO_CONFIG = Path(__file__).resolve().parent.parent / "config"


def write(tmp_path, text):
    (tmp_path / "exchange.yaml").write_text(text, encoding="utf-8")
    return tmp_path


def test_repository_config_loads():
    config = load_config(REPO_CONFIG, environ={})
    assert config.exchange.rest.base_url == "https://open-api.uex.com/open/api"
    assert config.exchange.connection.rate_limit_ms == 1500
    assert config.exchange.get_period("1d") == "1440"
    assert config.exchange.currency_aliases == dict(DEFAULT_CURRENCY_ALIASES)
    assert config.logging.format is LogFormat.JSON


def test_missing_directory_gives_defaults(tmp_path):
    config = load_config(tmp_path / "absent", environ={})
    assert config == AppConfig()
    assert config.exchange.options.order_book_type == "step0"
    assert config.exchange.get_period("4h") == "240"
    assert config.exchange.get_period("1w") is None


def test_credentials_come_from_environment(tmp_path):
    environ = {
        "UEX_API_KEY": "key",
        "UEX_SECRET": "secret",
        "UEX_PASSWORD": "pass",
        "UEX_COUNTRY_CODE": "86",
        "UEX_PHONE_NUMBER": "13800000000",
    }
    config = load_config(tmp_path, environ=environ)
    assert config.credentials.api_key == "key"
    assert config.credentials.missing() == []
    assert "secret" not in repr(config.credentials)


def test_missing_credentials_are_listed(tmp_path):
    config = load_config(tmp_path, environ={"UEX_API_KEY": "key"})
    assert config.credentials.missing() == ["secret", "password", "country_code", "phone_number"]


def test_environment_overrides(tmp_path):
    write(tmp_path, "logging:\n  level: INFO\n  format: json\n")
    config = load_config(
        tmp_path,
        environ={"UEX_BASE_URL": "https://example.test/api/", "LOG_LEVEL": "debug", "LOG_FORMAT": "text"},
    )
    assert config.exchange.rest.base_url == "https://example.test/api"
    assert config.logging.level is LogLevel.DEBUG
    assert config.logging.format is LogFormat.TEXT


def test_unknown_log_level_in_environment_is_ignored(tmp_path):
    write(tmp_path, "logging:\n  level: WARNING\n")
    assert load_config(tmp_path, environ={"LOG_LEVEL": "loud"}).logging.level is LogLevel.WARNING


def test_yaml_values_are_validated(tmp_path):
    write(tmp_path, "exchange:\n  options:\n    order_book_type: step9\n")
    with pytest.raises(ConfigLoadError) as exc_info:
        load_config(tmp_path, environ={})
    assert exc_info.value.file_path == tmp_path / "exchange.yaml"


def test_unknown_keys_are_rejected(tmp_path):
    write(tmp_path, "exchange:\n  connection:\n    retries: 3\n")
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path, environ={})


def test_invalid_yaml(tmp_path):
    write(tmp_path, "exchange: [unclosed\n")
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path, environ={})


def test_non_mapping_document(tmp_path):
    write(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigLoadError):
        load_config(tmp_path, environ={})


def test_aliases_are_upper_cased(tmp_path):
    write(tmp_path, "exchange:\n  currency_aliases:\n    xbt: btc\n")
    assert load_config(tmp_path, environ={}).exchange.currency_aliases == {"XBT": "BTC"}


def test_config_path_must_be_a_directory(tmp_path):
    path = tmp_path / "file.yaml"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(ConfigLoadError):
        load_config(path, environ={})
