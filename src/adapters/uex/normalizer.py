"""
UEX data normalizer.

Converts UEX-specific JSON payloads to the canonical Pydantic models. Every
method is a pure function of its inputs and the (immutable) market
registry; nothing here performs I/O.

UEX Ticker Format (GET get_ticker, ``data``):
    {
        "symbol": "ETHBTC",
        "high": 0.058426,
        "vol": 19055.875,
        "last": 0.058019,
        "low": 0.055802,
        "change": 0.03437271,    # fraction, 0.0344 == +3.44%
        "buy": "0.05780000",
        "sell": "0.05824200",
        "time": 1533413083184    # ms
    }

UEX Trade Formats:
    Public (GET get_trades):
        {"amount": 0.88, "create_time": 1533414358000, "price": 0.058019,
         "id": 406531, "type": "sell"}
    Private (GET all_trade, ``data.resultList``):
        {"volume": "1.000", "side": "BUY", "feeCoin": "YLB",
         "price": "0.10000000", "fee": "0.16431104", "ctime": 1510996571195,
         "deal_price": "0.10000000", "id": 306, "type": "Buy-in"}

UEX Order Book Format (GET market_dept, ``data``):
    {
        "tick": {
            "asks": [["0.05824200", 9.77], ...],
            "bids": [["0.05780000", 8.25], ...],
            "time": 1533412622463
        }
    }

UEX Candle Format (GET get_records, ``data``):
    [[1533402420, 0.057833, 0.057833, 0.057833, 0.057833, 18.1], ...]
    Timestamps are in seconds.

UEX Balance Format (GET user/account, ``data``):
    {
        "total_asset": "0.00000000",
        "coin_list": [
            {"normal": "0.00000000", "btcValuatin": "0.00000000",
             "locked": "0.00000000", "coin": "usdt"},
            ...
        ]
    }
"""

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from src.adapters.uex.fields import (
    first_parsed,
    first_present,
    parse_decimal,
    parse_int,
    parse_timestamp_ms,
)
from src.adapters.uex.markets import MarketRegistry
from src.adapters.uex.status import parse_order_status
from src.errors import DataIntegrityError
from src.models.balance import BalanceEntry, BalanceSnapshot
from src.models.funding import DepositAddress, Withdrawal
from src.models.market import Market
from src.models.ohlcv import Candle, is_strictly_ascending
from src.models.order import Order, OrderType
from src.models.orderbook import OrderBook, PriceLevel
from src.models.ticker import Fee, Ticker, Trade, TradeSide

logger = structlog.get_logger(__name__)

# Candidate field names per logical attribute, in precedence order.
TRADE_TIMESTAMP_FIELDS = ("create_time", "ctime")
TRADE_SIDE_FIELDS = ("side", "type")
TRADE_PRICE_FIELDS = ("deal_price", "price")
TRADE_AMOUNT_FIELDS = ("volume", "amount")

ORDER_ID_FIELDS = ("id", "order_id")
ORDER_SIDE_FIELDS = ("OrderType", "Type", "side")
ORDER_OPEN_TIME_FIELDS = ("Opened",)
ORDER_CREATED_TIME_FIELDS = ("Created", "created_at")
ORDER_LAST_TRADE_TIME_FIELDS = ("Closed", "TimeStamp")
ORDER_PRICE_FIELDS = ("Limit", "price")
ORDER_COST_FIELDS = ("Price", "total_price")
ORDER_AMOUNT_FIELDS = ("Quantity", "volume")
ORDER_REMAINING_FIELDS = ("QuantityRemaining", "remain_volume")
ORDER_FILLED_FIELDS = ("deal_volume",)
ORDER_AVERAGE_FIELDS = ("PricePerUnit", "avg_price")

ORDER_BOOK_TIME_FIELDS = ("time",)

BUY_SIDES = frozenset({"LIMIT_BUY", "BUY"})
SELL_SIDES = frozenset({"LIMIT_SELL", "SELL"})


class UexNormalizer:
    """
    Normalizes UEX payloads to canonical models.

    Holds a reference to the immutable MarketRegistry used to resolve
    market ids and currency codes.

    Example:
        >>> normalizer = UexNormalizer(registry)
        >>> ticker = normalizer.normalize_ticker(response["data"])
        >>> print(ticker.percentage)
    """

    def __init__(self, registry: MarketRegistry):
        self.registry = registry

    def _resolve_market(
        self, payload: Dict[str, Any], market: Optional[Market], key: str = "symbol"
    ) -> Optional[Market]:
        if market is not None:
            return market
        market_id = payload.get(key)
        if market_id is None:
            return None
        return self.registry.by_id(str(market_id).lower())

    def _currency_code(self, currency_id: Optional[Any]) -> Optional[str]:
        if currency_id is None:
            return None
        return self.registry.currency_code(str(currency_id))

    # ------------------------------------------------------------------
    # Ticker
    # ------------------------------------------------------------------

    def normalize_ticker(
        self, payload: Dict[str, Any], market: Optional[Market] = None
    ) -> Ticker:
        """
        Normalize a UEX ticker.

        The upstream ``change`` is a fraction and is reported as a percentage
        (×100). A missing ``time`` leaves the timestamp empty.

        Args:
            payload: The ``data`` object of ``get_ticker``.
            market: Market the ticker belongs to, if known.

        Returns:
            Ticker: Normalized ticker.

        Raises:
            ValueError: If the payload is not an object or holds invalid data.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Invalid UEX ticker payload: {payload!r}")

        market = self._resolve_market(payload, market)
        change = parse_decimal(payload.get("change"))
        last = parse_decimal(payload.get("last"))

        try:
            ticker = Ticker(
                symbol=market.symbol if market else None,
                timestamp=parse_timestamp_ms(payload.get("time")),
                high=parse_decimal(payload.get("high")),
                low=parse_decimal(payload.get("low")),
                bid=parse_decimal(payload.get("buy")),
                ask=parse_decimal(payload.get("sell")),
                last=last,
                close=last,
                base_volume=parse_decimal(payload.get("vol")),
                percentage=change * 100 if change is not None else None,
                info=payload,
            )
        except ValueError as e:
            logger.error("ticker_normalization_failed_invalid_data", error=str(e))
            raise ValueError(f"Invalid data in UEX ticker: {e}")

        logger.debug(
            "normalized_ticker",
            symbol=ticker.symbol,
            last=str(ticker.last) if ticker.last is not None else None,
        )
        return ticker

    # ------------------------------------------------------------------
    # Trades
    # ------------------------------------------------------------------

    def normalize_trade(
        self, payload: Dict[str, Any], market: Optional[Market] = None
    ) -> Trade:
        """
        Normalize a public or private UEX trade.

        ``cost`` is computed as price × amount and never read from upstream.

        Raises:
            ValueError: If the trade id is missing or data is invalid.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Invalid UEX trade payload: {payload!r}")

        trade_id = payload.get("id")
        if trade_id is None:
            logger.error("trade_normalization_failed_missing_field", missing_field="id")
            raise ValueError("Missing required field in UEX trade: 'id'")

        price = first_parsed(payload, TRADE_PRICE_FIELDS, parse_decimal)
        amount = first_parsed(payload, TRADE_AMOUNT_FIELDS, parse_decimal)
        cost = price * amount if price is not None and amount is not None else None

        fee: Optional[Fee] = None
        fee_cost = parse_decimal(payload.get("fee"))
        if fee_cost is not None:
            fee = Fee(cost=fee_cost, currency=self._currency_code(payload.get("feeCoin")))

        try:
            trade = Trade(
                id=str(trade_id),
                timestamp=first_parsed(payload, TRADE_TIMESTAMP_FIELDS, parse_timestamp_ms),
                symbol=market.symbol if market else None,
                side=_parse_trade_side(first_present(payload, TRADE_SIDE_FIELDS)),
                price=price,
                amount=amount,
                cost=cost,
                fee=fee,
                info=payload,
            )
        except ValueError as e:
            logger.error("trade_normalization_failed_invalid_data", trade_id=trade_id, error=str(e))
            raise ValueError(f"Invalid data in UEX trade: {e}")

        return trade

    def normalize_trades(
        self,
        payloads: Iterable[Dict[str, Any]],
        market: Optional[Market] = None,
    ) -> List[Trade]:
        """
        Normalize a list of trades, sorted by timestamp.

        Args:
            payloads: Raw trades.
            market: Market the trades belong to.
        """
        trades = [self.normalize_trade(payload, market) for payload in payloads]
        trades.sort(key=lambda t: (t.timestamp is None, t.timestamp or 0))
        return trades

    # ------------------------------------------------------------------
    # Order book
    # ------------------------------------------------------------------

    def normalize_order_book(self, payload: Dict[str, Any], market: Market) -> OrderBook:
        """
        Normalize a UEX depth snapshot.

        Sorting is done here since upstream ordering is not guaranteed: asks
        ascending, bids descending. Levels quoted twice at the same price are
        merged. The timestamp is the book's own server time.

        Args:
            payload: The ``data`` object of ``market_dept``.
            market: Market the book belongs to.

        Returns:
            OrderBook: Normalized order book.

        Raises:
            ValueError: If ``tick`` is missing or levels are invalid.
        """
        try:
            tick = payload["tick"]
            raw_bids = tick.get("bids") or []
            raw_asks = tick.get("asks") or []
            timestamp = first_parsed(payload, ORDER_BOOK_TIME_FIELDS, parse_timestamp_ms)
            if timestamp is None:
                timestamp = first_parsed(tick, ORDER_BOOK_TIME_FIELDS, parse_timestamp_ms)

            bids = _sorted_levels(raw_bids, descending=True)
            asks = _sorted_levels(raw_asks, descending=False)

            book = OrderBook(
                symbol=market.symbol,
                timestamp=timestamp,
                bids=bids,
                asks=asks,
            )
        except (KeyError, TypeError, AttributeError) as e:
            logger.error(
                "orderbook_normalization_failed_missing_field",
                symbol=market.symbol,
                error=str(e),
            )
            raise ValueError(f"Missing required field in UEX order book: {e}")
        except ValueError as e:
            logger.error(
                "orderbook_normalization_failed_invalid_data",
                symbol=market.symbol,
                error=str(e),
            )
            raise ValueError(f"Invalid data in UEX order book: {e}")

        logger.debug(
            "normalized_orderbook",
            symbol=market.symbol,
            bids_count=len(bids),
            asks_count=len(asks),
        )
        return book

    # ------------------------------------------------------------------
    # OHLCV
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_candle(row: Sequence[Any]) -> Candle:
        """
        Normalize one ``[ts_seconds, o, h, l, c, v]`` row.

        Raises:
            ValueError: If the row is too short or has no timestamp.
        """
        if not isinstance(row, (list, tuple)) or len(row) < 6:
            raise ValueError(f"Invalid UEX candle: {row!r}")
        seconds = parse_int(row[0])
        if seconds is None:
            raise ValueError(f"Invalid UEX candle timestamp: {row[0]!r}")
        return Candle(
            timestamp=seconds * 1000,
            open=parse_decimal(row[1]),
            high=parse_decimal(row[2]),
            low=parse_decimal(row[3]),
            close=parse_decimal(row[4]),
            volume=parse_decimal(row[5]),
        )

    def normalize_ohlcv(self, rows: Any) -> List[Candle]:
        """
        Normalize a candle batch.

        Candles are passed through in the order received with timestamps
        rescaled from seconds to milliseconds; no resampling or gap filling.

        Raises:
            ValueError: If the payload is not a list or a row is invalid.
            DataIntegrityError: If timestamps are not strictly ascending.
        """
        if not isinstance(rows, list):
            raise ValueError(f"Invalid UEX candle list: {rows!r}")

        candles = [self.normalize_candle(row) for row in rows]
        if not is_strictly_ascending(candles):
            logger.error("ohlcv_not_ascending", candles=len(candles))
            raise DataIntegrityError(
                "UEX candles are not in strictly ascending timestamp order",
                response=rows,
            )
        return candles

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def normalize_order(
        self, payload: Dict[str, Any], market: Optional[Market] = None
    ) -> Order:
        """
        Normalize a UEX order.

        Timestamp precedence: open time, then creation time, then last trade
        time; the first field that is present and parseable wins.

        Raises:
            ValueError: If the order id is missing or data is invalid.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Invalid UEX order payload: {payload!r}")

        order_id = first_present(payload, ORDER_ID_FIELDS)
        if order_id is None:
            logger.error("order_normalization_failed_missing_field", missing_field="id")
            raise ValueError("Missing required field in UEX order: 'id'")

        market = self._resolve_market(payload, market)

        last_trade_timestamp = first_parsed(
            payload, ORDER_LAST_TRADE_TIME_FIELDS, parse_timestamp_ms
        )
        timestamp = first_parsed(payload, ORDER_OPEN_TIME_FIELDS, parse_timestamp_ms)
        if timestamp is None:
            timestamp = first_parsed(payload, ORDER_CREATED_TIME_FIELDS, parse_timestamp_ms)
        if timestamp is None:
            timestamp = last_trade_timestamp

        amount = first_parsed(payload, ORDER_AMOUNT_FIELDS, parse_decimal)
        filled = first_parsed(payload, ORDER_FILLED_FIELDS, parse_decimal)
        remaining = first_parsed(payload, ORDER_REMAINING_FIELDS, parse_decimal)
        if amount is not None:
            if filled is None and remaining is not None:
                filled = max(amount - remaining, Decimal("0"))
            elif remaining is None and filled is not None:
                remaining = max(amount - filled, Decimal("0"))

        average = first_parsed(payload, ORDER_AVERAGE_FIELDS, parse_decimal)
        cost = first_parsed(payload, ORDER_COST_FIELDS, parse_decimal)
        if cost is None and filled is not None and average is not None:
            cost = filled * average

        fee: Optional[Fee] = None
        fee_cost = parse_decimal(payload.get("fee"))
        if fee_cost is not None:
            fee = Fee(cost=fee_cost, currency=self._currency_code(payload.get("feeCoin")))

        status = parse_order_status(payload.get("status"))

        try:
            order = Order(
                id=str(order_id),
                timestamp=timestamp,
                last_trade_timestamp=last_trade_timestamp,
                symbol=market.symbol if market else None,
                side=_parse_order_side(first_present(payload, ORDER_SIDE_FIELDS)),
                type=_parse_order_type(payload.get("type")),
                price=first_parsed(payload, ORDER_PRICE_FIELDS, parse_decimal),
                cost=cost,
                average=average,
                amount=amount,
                filled=filled,
                remaining=remaining,
                status=status,
                fee=fee,
                info=payload,
            )
        except ValueError as e:
            logger.error("order_normalization_failed_invalid_data", order_id=order_id, error=str(e))
            raise ValueError(f"Invalid data in UEX order: {e}")

        return order

    def normalize_orders(
        self,
        payloads: Iterable[Dict[str, Any]],
        market: Optional[Market] = None,
    ) -> List[Order]:
        """Normalize a list of orders, oldest first."""
        orders = [self.normalize_order(payload, market) for payload in payloads]
        orders.sort(key=lambda o: (o.timestamp is None, o.timestamp or 0))
        return orders

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    def normalize_balance(self, payload: Dict[str, Any]) -> BalanceSnapshot:
        """
        Normalize the ``user/account`` payload.

        Raises:
            ValueError: If ``coin_list`` is missing or an entry is invalid.
        """
        try:
            coins = payload["coin_list"]
            balances: Dict[str, BalanceEntry] = {}
            for coin in coins:
                code = self.registry.currency_code(str(coin["coin"]))
                free = parse_decimal(coin.get("normal"), Decimal("0"))
                used = parse_decimal(coin.get("locked"), Decimal("0"))
                balances[code] = BalanceEntry(
                    currency=code,
                    free=free,
                    used=used,
                    total=free + used,
                )
        except (KeyError, TypeError) as e:
            logger.error("balance_normalization_failed_missing_field", error=str(e))
            raise ValueError(f"Missing required field in UEX balance: {e}")

        return BalanceSnapshot(
            balances=balances,
            total_asset=parse_decimal(payload.get("total_asset")),
            info=payload,
        )

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    @staticmethod
    def deposit_address_fields(payload: Any) -> Tuple[Optional[str], Optional[str]]:
        """Extract (address, tag) from a deposit address payload."""
        if not isinstance(payload, dict):
            return None, None
        address = first_present(payload, ("address", "Address", "addressStr"))
        tag = first_present(payload, ("tag", "memo", "paymentid"))
        return (
            str(address) if address is not None else None,
            str(tag) if tag is not None else None,
        )

    @staticmethod
    def normalize_deposit_address(
        payload: Dict[str, Any], code: str, address: str, tag: Optional[str]
    ) -> DepositAddress:
        return DepositAddress(currency=code, address=address, tag=tag, info=payload)

    @staticmethod
    def normalize_withdrawal(
        payload: Any,
        code: str,
        amount: Decimal,
        address: str,
        tag: Optional[str] = None,
    ) -> Withdrawal:
        """Normalize the withdraw response; the id is optional upstream."""
        data = payload if isinstance(payload, dict) else {}
        withdrawal_id = first_present(data, ("id", "uuid", "withdraw_id"))
        return Withdrawal(
            id=str(withdrawal_id) if withdrawal_id is not None else None,
            currency=code,
            amount=amount,
            address=address,
            tag=tag,
            info=data,
        )


def _parse_trade_side(value: Optional[Any]) -> Optional[TradeSide]:
    if value is None:
        return None
    side = str(value).lower()
    if side == TradeSide.BUY.value:
        return TradeSide.BUY
    if side == TradeSide.SELL.value:
        return TradeSide.SELL
    logger.warning("unknown_trade_side", side=value)
    return None


def _parse_order_side(value: Optional[Any]) -> Optional[TradeSide]:
    if value is None:
        return None
    side = str(value).upper()
    if side in BUY_SIDES:
        return TradeSide.BUY
    if side in SELL_SIDES:
        return TradeSide.SELL
    logger.warning("unknown_order_side", side=value)
    return None


def _parse_order_type(value: Optional[Any]) -> OrderType:
    # UEX: 1 = limit, 2 = market
    if value is not None and str(value).strip() in ("2", "market"):
        return OrderType.MARKET
    return OrderType.LIMIT


def _sorted_levels(raw_levels: Iterable[Sequence[Any]], descending: bool) -> List[PriceLevel]:
    volumes: Dict[Decimal, Decimal] = {}
    for raw in raw_levels:
        price = parse_decimal(raw[0])
        volume = parse_decimal(raw[1])
        if price is None or volume is None:
            raise ValueError(f"Invalid price level: {raw!r}")
        volumes[price] = volumes.get(price, Decimal("0")) + volume
    return [
        PriceLevel(price=price, volume=volume)
        for price, volume in sorted(volumes.items(), reverse=descending)
    ]
