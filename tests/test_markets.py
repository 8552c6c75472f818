"""Tests for the market registry."""

import pytest

from conftest import SYMBOLS
from src.adapters.uex.markets import MarketRegistry, canonical_currency_code, parse_market
from src.errors import BadSymbol, ExchangeError


def test_every_market_round_trips_between_id_and_symbol(registry):
    assert len(registry) == len(SYMBOLS)
    for market in registry.markets.values():
        assert market.symbol == f"{market.base}/{market.quote}"
        assert registry.by_symbol(market.symbol) is registry.by_id(market.id)


def test_symbol_is_derived_from_base_and_quote_ids(registry):
    market = registry.by_id("ethbtc")
    assert market.symbol == "ETH/BTC"
    assert market.base_id == "eth"
    assert market.quote_id == "btc"
    assert market.price_precision == 6
    assert market.amount_precision == 3


def test_lookup_by_id_is_case_insensitive(registry):
    assert registry.by_id("ETHBTC").symbol == "ETH/BTC"


def test_market_accepts_symbol_or_id(registry):
    assert registry.market("ETH/BTC").id == "ethbtc"
    assert registry.market("ethbtc").symbol == "ETH/BTC"
    assert registry.market_id("BTC/USDT") == "btcusdt"


def test_unknown_market_raises_bad_symbol(registry):
    with pytest.raises(BadSymbol):
        registry.market("DOGE/USDT")


def test_currency_aliases_apply_to_market_symbols():
    registry = MarketRegistry.from_symbols(
        [{"symbol": "xbtusdt", "base_coin": "xbt", "count_coin": "usdt"}]
    )
    assert registry.symbols == ["BTC/USDT"]
    assert registry.currency_code("xbt") == "BTC"
    assert registry.currency_id("BTC") == "xbt"


def test_currency_code_falls_back_to_upper_case(registry):
    assert registry.currency_code("ylb") == "YLB"
    assert registry.currency_id("YLB") == "ylb"


def test_canonical_currency_code_uses_alias_table():
    assert canonical_currency_code("bcc") == "BCH"
    assert canonical_currency_code("eth") == "ETH"
    assert canonical_currency_code("abc", {"ABC": "XYZ"}) == "XYZ"


def test_missing_precision_defaults_to_eight():
    market = parse_market({"symbol": "ltcbtc", "base_coin": "ltc", "count_coin": "btc"})
    assert market.price_precision == 8
    assert market.amount_precision == 8


def test_missing_required_field_raises_exchange_error():
    with pytest.raises(ExchangeError) as exc_info:
        parse_market({"symbol": "ltcbtc", "base_coin": "ltc"})
    assert exc_info.value.response == {"symbol": "ltcbtc", "base_coin": "ltc"}


def test_non_list_payload_raises_exchange_error():
    with pytest.raises(ExchangeError):
        MarketRegistry.from_symbols({"symbol": "ethbtc"})


def test_duplicate_ids_are_rejected():
    with pytest.raises(ExchangeError):
        MarketRegistry.from_symbols([SYMBOLS[0], SYMBOLS[0]])


def test_indices_are_read_only(registry):
    with pytest.raises(TypeError):
        registry.markets["FOO/BAR"] = registry.market("ETH/BTC")
