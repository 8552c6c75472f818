"""End-to-end adapter flows over a fake transport."""

import asyncio
from decimal import Decimal

import pytest

from conftest import FakeRestClient, ok
from src.adapters.uex.adapter import UexAdapter, check_address, filter_since_limit
from src.config.models import AppConfig, Credentials, ExchangeConfig, ExchangeOptions
from src.errors import (
    AddressPending,
    AuthenticationError,
    BadSymbol,
    DataIntegrityError,
    ExchangeError,
    ExchangeNotAvailable,
    InsufficientFunds,
    InvalidAddress,
    InvalidOrder,
    OrderNotFound,
)
from src.models.order import OrderType
from src.models.ticker import TradeSide

TICKER = {
    "symbol": "ETHBTC",
    "high": 0.058426,
    "low": 0.055802,
    "last": 0.058019,
    "change": 0.03437271,
    "buy": "0.05780000",
    "sell": "0.05824200",
    "time": 1533413083184,
}


def run(coro):
    return asyncio.run(coro)


# ----------------------------------------------------------------------
# Markets
# ----------------------------------------------------------------------


def test_markets_are_loaded_once(make_adapter):
    adapter, transport = make_adapter({})

    markets = run(adapter.load_markets())
    run(adapter.load_markets())

    assert sorted(markets) == ["BTC/USDT", "ETH/BTC", "ETH/USDT"]
    assert len(transport.requests_to("common/symbols")) == 1


def test_reload_swaps_registry(make_adapter):
    adapter, transport = make_adapter({})
    run(adapter.load_markets())
    first = adapter.registry

    transport.routes["common/symbols"] = ok(
        [{"symbol": "ltcbtc", "base_coin": "ltc", "count_coin": "btc"}]
    )
    markets = run(adapter.load_markets(reload=True))

    assert list(markets) == ["LTC/BTC"]
    assert adapter.registry is not first
    assert "ETH/BTC" in first


def test_unrecognized_symbol_payload(make_adapter):
    adapter, _ = make_adapter({"common/symbols": ok({"symbol": "ethbtc"})})
    with pytest.raises(ExchangeError):
        run(adapter.load_markets())


def test_unknown_symbol_raises_bad_symbol(make_adapter):
    adapter, _ = make_adapter({})
    with pytest.raises(BadSymbol):
        run(adapter.fetch_ticker("DOGE/USDT"))


# ----------------------------------------------------------------------
# Public endpoints
# ----------------------------------------------------------------------


def test_fetch_ticker(make_adapter):
    adapter, transport = make_adapter({"get_ticker": ok(TICKER)})

    ticker = run(adapter.fetch_ticker("ETH/BTC"))

    assert ticker.symbol == "ETH/BTC"
    assert ticker.percentage == Decimal("3.437271")
    assert ticker.bid == Decimal("0.0578")
    assert ticker.ask == Decimal("0.058242")
    request = transport.requests_to("get_ticker")[0]
    assert transport.params_of(request) == {"symbol": "ethbtc"}
    assert "sign" not in request.url


def test_fetch_trades_since_and_limit(make_adapter):
    trades = [
        {"amount": 1, "create_time": 3000, "price": 2, "id": 3, "type": "buy"},
        {"amount": 1, "create_time": 1000, "price": 2, "id": 1, "type": "sell"},
        {"amount": 1, "create_time": 2000, "price": 2, "id": 2, "type": "buy"},
    ]
    adapter, _ = make_adapter({"get_trades": ok(trades)})

    result = run(adapter.fetch_trades("ETH/BTC", since=2000))

    assert [t.id for t in result] == ["2", "3"]
    assert all(t.cost == Decimal("2") for t in result)


def test_fetch_trades_since_keeps_earliest_within_limit(make_adapter):
    trades = [
        {"amount": 1, "create_time": ts, "price": 2, "id": ts, "type": "buy"}
        for ts in (4000, 2000, 1000, 3000)
    ]
    adapter, _ = make_adapter({"get_trades": ok(trades)})

    assert [t.id for t in run(adapter.fetch_trades("ETH/BTC", since=2000, limit=2))] == [
        "2000",
        "3000",
    ]
    assert [t.id for t in run(adapter.fetch_trades("ETH/BTC", limit=2))] == ["3000", "4000"]


def test_fetch_order_book_truncates_and_sends_step(make_adapter):
    book = {
        "tick": {
            "asks": [["3", "1"], ["1", "1"], ["2", "1"]],
            "bids": [["0.5", "1"], ["0.9", "1"], ["0.7", "1"]],
            "time": 1533412622463,
        }
    }
    adapter, transport = make_adapter({"market_dept": ok(book)})

    result = run(adapter.fetch_order_book("ETH/BTC", limit=2))

    assert [level.price for level in result.asks] == [Decimal("1"), Decimal("2")]
    assert [level.price for level in result.bids] == [Decimal("0.9"), Decimal("0.7")]
    assert result.timestamp == 1533412622463
    params = transport.params_of(transport.requests_to("market_dept")[0])
    assert params == {"symbol": "ethbtc", "type": "step0"}


def test_malformed_order_book_becomes_exchange_error(make_adapter):
    adapter, _ = make_adapter({"market_dept": ok({"asks": []})})
    with pytest.raises(ExchangeError) as exc_info:
        run(adapter.fetch_order_book("ETH/BTC"))
    assert exc_info.value.response == ok({"asks": []})


def test_fetch_ohlcv_uses_period(make_adapter):
    rows = [
        [1533402420, 1, 2, 0.5, 1.5, 10],
        [1533402480, 1, 2, 0.5, 1.5, 11],
        [1533402540, 1, 2, 0.5, 1.5, 12],
    ]
    adapter, transport = make_adapter({"get_records": ok(rows)})

    candles = run(adapter.fetch_ohlcv("ETH/BTC", "1h", limit=2))

    assert [c.timestamp for c in candles] == [1533402480000, 1533402540000]
    assert transport.params_of(transport.requests_to("get_records")[0])["period"] == "60"


def test_fetch_ohlcv_out_of_order(make_adapter):
    rows = [[1533402480, 1, 1, 1, 1, 1], [1533402420, 1, 1, 1, 1, 1]]
    adapter, _ = make_adapter({"get_records": ok(rows)})
    with pytest.raises(DataIntegrityError):
        run(adapter.fetch_ohlcv("ETH/BTC"))


def test_fetch_ohlcv_rejects_unknown_timeframe(make_adapter):
    adapter, transport = make_adapter({})
    with pytest.raises(ExchangeError):
        run(adapter.fetch_ohlcv("ETH/BTC", "1w"))
    assert transport.requests == []


# ----------------------------------------------------------------------
# Private endpoints
# ----------------------------------------------------------------------


def test_fetch_balance_is_signed(make_adapter):
    account = {
        "total_asset": "432323.23",
        "coin_list": [{"normal": "32323.233", "locked": "32323.233", "btcValuatin": "112.33", "coin": "btc"}],
    }
    adapter, transport = make_adapter({"user/account": ok(account)})

    balance = run(adapter.fetch_balance())

    assert balance.free("BTC") == Decimal("32323.233")
    assert balance.total("BTC") == Decimal("64646.466")
    assert balance.total_asset == Decimal("432323.23")
    params = transport.params_of(transport.requests_to("user/account")[0])
    assert params["api_key"] == "key"
    assert params["time"] == "1533413083"
    assert len(params["sign"]) == 32


def test_private_call_without_credentials(make_adapter):
    adapter, transport = make_adapter({}, creds=Credentials())
    with pytest.raises(AuthenticationError):
        run(adapter.fetch_balance())
    assert transport.requests_to("user/account") == []


def test_create_limit_order(make_adapter):
    adapter, transport = make_adapter({"create_order": ok({"order_id": 34343})})

    order = run(adapter.create_order("ETH/BTC", "limit", "buy", Decimal("1.23456"), Decimal("0.0578125")))

    assert order.id == "34343"
    assert order.status == "open"
    assert order.symbol == "ETH/BTC"
    assert order.side is TradeSide.BUY
    assert order.type is OrderType.LIMIT
    assert order.amount == Decimal("1.23456")
    assert order.timestamp == 1533413083000
    request = transport.requests_to("create_order")[0]
    assert request.method == "POST"
    params = transport.params_of(request)
    assert params["side"] == "BUY"
    assert params["type"] == "1"
    assert params["symbol"] == "ethbtc"
    assert params["volume"] == "1.234"
    assert params["price"] == "0.057813"


def test_market_buy_sends_cost_as_volume(make_adapter):
    adapter, transport = make_adapter({"create_order": ok({"order_id": 1})})

    run(adapter.create_order("BTC/USDT", "market", "buy", Decimal("2"), Decimal("6500.5")))

    params = transport.params_of(transport.requests_to("create_order")[0])
    assert params["type"] == "2"
    assert params["volume"] == "13001.000"
    assert "price" not in params


def test_market_buy_requires_price(make_adapter):
    adapter, transport = make_adapter({"create_order": ok({"order_id": 1})})
    with pytest.raises(InvalidOrder):
        run(adapter.create_order("BTC/USDT", "market", "buy", Decimal("2")))
    assert transport.requests_to("create_order") == []


def test_market_buy_price_requirement_can_be_disabled(make_adapter):
    config = ExchangeConfig(options=ExchangeOptions(create_market_buy_order_requires_price=False))
    adapter, transport = make_adapter({"create_order": ok({"order_id": 1})}, config=config)

    run(adapter.create_order("BTC/USDT", "market", "buy", Decimal("100")))

    assert transport.params_of(transport.requests_to("create_order")[0])["volume"] == "100.000"


def test_market_sell_needs_no_price(make_adapter):
    adapter, transport = make_adapter({"create_order": ok({"order_id": 1})})
    run(adapter.create_order("BTC/USDT", "market", "sell", Decimal("0.5")))
    params = transport.params_of(transport.requests_to("create_order")[0])
    assert params["side"] == "SELL"
    assert params["volume"] == "0.500"


def test_limit_order_requires_price(make_adapter):
    adapter, _ = make_adapter({})
    with pytest.raises(InvalidOrder):
        run(adapter.create_order("ETH/BTC", "limit", "buy", Decimal("1")))


def test_unknown_order_type(make_adapter):
    adapter, _ = make_adapter({})
    with pytest.raises(InvalidOrder):
        run(adapter.create_order("ETH/BTC", "stop", "buy", Decimal("1"), Decimal("1")))


def test_create_order_insufficient_funds(make_adapter):
    adapter, _ = make_adapter(
        {"create_order": {"code": "4", "msg": "insufficient balance", "data": None}}
    )
    with pytest.raises(InsufficientFunds) as exc_info:
        run(adapter.create_order("ETH/BTC", "limit", "buy", Decimal("1"), Decimal("1")))
    assert exc_info.value.response["code"] == "4"


def test_cancel_order(make_adapter):
    adapter, transport = make_adapter({"cancel_order": ok(None)})

    order = run(adapter.cancel_order("34343", "ETH/BTC"))

    assert order.id == "34343"
    assert order.status == "canceled"
    assert order.is_terminal
    params = transport.params_of(transport.requests_to("cancel_order")[0])
    assert params["order_id"] == "34343"
    assert params["symbol"] == "ethbtc"


def test_fetch_order(make_adapter):
    info = {
        "order_info": {
            "id": 34343,
            "side": "SELL",
            "type": 1,
            "price": "0.058",
            "volume": "2",
            "deal_volume": "2",
            "avg_price": "0.058",
            "created_at": 1533413083184,
            "status": 2,
        },
        "trade_list": [],
    }
    adapter, _ = make_adapter({"order_info": ok(info)})

    order = run(adapter.fetch_order("34343", "ETH/BTC"))

    assert order.status == "closed"
    assert order.remaining == Decimal("0")
    assert order.cost == Decimal("0.116")


def test_fetch_order_empty_data_is_order_not_found(make_adapter):
    adapter, _ = make_adapter({"order_info": ok(None)})
    with pytest.raises(OrderNotFound):
        run(adapter.fetch_order("1", "ETH/BTC"))


def test_fetch_order_code_22_is_order_not_found(make_adapter):
    body = {"code": "22", "msg": "not found", "data": None}
    adapter, _ = make_adapter({"order_info": body})
    with pytest.raises(OrderNotFound) as exc_info:
        run(adapter.fetch_order("1", "ETH/BTC"))
    assert exc_info.value.response == body


def test_open_and_closed_orders(make_adapter):
    orders = [
        {"id": 1, "status": 1, "created_at": 1000},
        {"id": 2, "status": 2, "created_at": 2000},
        {"id": 3, "status": 4, "created_at": 3000},
    ]
    adapter, transport = make_adapter(
        {
            "new_order": ok({"count": 1, "resultList": orders[:1]}),
            "all_order": ok({"count": 3, "resultList": orders}),
        }
    )

    open_orders = run(adapter.fetch_open_orders("ETH/BTC", limit=10))
    closed = run(adapter.fetch_closed_orders("ETH/BTC"))

    assert [o.id for o in open_orders] == ["1"]
    assert [o.status for o in closed] == ["closed", "canceled"]
    assert transport.params_of(transport.requests_to("new_order")[0])["pageSize"] == "10"


def test_fetch_my_trades(make_adapter):
    result = {
        "count": 1,
        "resultList": [
            {
                "volume": "1.000",
                "side": "BUY",
                "feeCoin": "YLB",
                "price": "0.10000000",
                "fee": "0.16431104",
                "ctime": 1510996571195,
                "deal_price": "0.10000000",
                "id": 306,
                "type": "Buy-in",
            }
        ],
    }
    adapter, transport = make_adapter({"all_trade": ok(result)})

    trades = run(adapter.fetch_my_trades("ETH/BTC", limit=5))

    assert trades[0].cost == Decimal("0.1")
    assert trades[0].fee.currency == "YLB"
    assert transport.params_of(transport.requests_to("all_trade")[0])["pageSize"] == "5"


def test_fetch_my_trades_since_and_limit(make_adapter):
    rows = [
        {"volume": "1", "price": "1", "ctime": ts, "id": ts, "side": "BUY"}
        for ts in (1000, 2000, 3000, 4000)
    ]
    adapter, _ = make_adapter({"all_trade": ok({"count": 4, "resultList": rows})})

    trades = run(adapter.fetch_my_trades("ETH/BTC", since=2000, limit=2))

    assert [t.id for t in trades] == ["2000", "3000"]


def test_order_lists_since_and_limit(make_adapter):
    orders = [
        {"id": 1, "status": 4, "created_at": 1000},
        {"id": 2, "status": 2, "created_at": 2000},
        {"id": 3, "status": 1, "created_at": 3000},
        {"id": 4, "status": 1, "created_at": 4000},
        {"id": 5, "status": 2, "created_at": 5000},
        {"id": 6, "status": 4, "created_at": 6000},
    ]
    adapter, _ = make_adapter(
        {
            "new_order": ok({"count": 2, "resultList": orders[2:4]}),
            "all_order": ok({"count": 6, "resultList": orders}),
        }
    )

    open_orders = run(adapter.fetch_open_orders("ETH/BTC", since=3000, limit=1))
    closed = run(adapter.fetch_closed_orders("ETH/BTC", since=2000, limit=2))
    latest_closed = run(adapter.fetch_closed_orders("ETH/BTC", limit=3))

    assert [o.id for o in open_orders] == ["3"]
    assert [o.id for o in closed] == ["2", "5"]
    assert [o.id for o in latest_closed] == ["2", "5", "6"]


def test_fetch_my_trades_requires_symbol(make_adapter):
    adapter, _ = make_adapter({})
    with pytest.raises(ExchangeError):
        run(adapter.fetch_my_trades(""))


# ----------------------------------------------------------------------
# Funding
# ----------------------------------------------------------------------


def test_fetch_deposit_address(make_adapter):
    adapter, transport = make_adapter({"deposit_address": ok({"address": "0xabc123", "tag": None})})

    address = run(adapter.fetch_deposit_address("ETH"))

    assert address.currency == "ETH"
    assert address.address == "0xabc123"
    assert address.tag is None
    assert transport.params_of(transport.requests_to("deposit_address")[0])["coin"] == "eth"


@pytest.mark.parametrize(
    "body",
    [
        ok({}),
        ok(None),
        {"code": "0", "msg": "ADDRESS_GENERATING", "data": {"address": "0xabc"}},
    ],
)
def test_deposit_address_pending(make_adapter, body):
    adapter, _ = make_adapter({"deposit_address": body})
    with pytest.raises(AddressPending) as exc_info:
        run(adapter.fetch_deposit_address("ETH"))
    assert exc_info.value.retryable


def test_withdraw(make_adapter):
    adapter, transport = make_adapter({"withdraw": ok({"id": 77})})

    withdrawal = run(adapter.withdraw("BTC", Decimal("0.5"), "1BoatSLRHtKNngkdXEeobR76b53LETtpyT", tag="9"))

    assert withdrawal.id == "77"
    assert withdrawal.amount == Decimal("0.5")
    request = transport.requests_to("withdraw")[0]
    assert request.method == "POST"
    params = transport.params_of(request)
    assert params["coin"] == "btc"
    assert params["amount"] == "0.5"
    assert params["tag"] == "9"


def test_withdraw_validates_address_before_sending(make_adapter):
    adapter, transport = make_adapter({"withdraw": ok({})})
    with pytest.raises(InvalidAddress):
        run(adapter.withdraw("BTC", Decimal("1"), "bad address"))
    assert transport.requests == []


def test_funding_paths_are_configurable(make_adapter):
    config = ExchangeConfig(options=ExchangeOptions(deposit_address_path="user/deposit"))
    adapter, transport = make_adapter({"user/deposit": ok({"address": "0xabc"})}, config=config)
    assert run(adapter.fetch_deposit_address("ETH")).address == "0xabc"


# ----------------------------------------------------------------------
# Transport failures and lifecycle
# ----------------------------------------------------------------------


def test_exchange_maintenance_is_retryable(make_adapter):
    adapter, _ = make_adapter({"get_ticker": (503, "maintenance")})
    with pytest.raises(ExchangeNotAvailable) as exc_info:
        run(adapter.fetch_ticker("ETH/BTC"))
    assert exc_info.value.retryable


def test_context_manager_closes_transport(make_adapter):
    adapter, transport = make_adapter({})

    async def use():
        async with adapter:
            pass

    run(use())
    assert transport.closed


def test_from_config(credentials):
    transport = FakeRestClient({})
    adapter = UexAdapter.from_config(AppConfig(credentials=credentials), rest_client=transport)
    assert adapter.exchange_name == "uex"
    assert repr(adapter) == "UexAdapter(exchange=uex)"


def test_check_address():
    assert check_address("0xabc") == "0xabc"
    for address in (None, "", "a b"):
        with pytest.raises(InvalidAddress):
            check_address(address)


def test_filter_since_limit():
    items = [1, 2, 3, 4]
    assert filter_since_limit(items, None, 2, key=lambda x: x) == [3, 4]
    assert filter_since_limit(items, 2, 2, key=lambda x: x) == [2, 3]
    assert filter_since_limit(items, None, 0, key=lambda x: x) == []
