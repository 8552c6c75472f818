"""
UEX exchange adapter.

Main adapter implementation that implements the ExchangeAdapter interface.
Coordinates request signing, the REST transport, response classification
and normalization.

This adapter:
    - Loads the market list once and resolves canonical symbols through it
    - Signs private calls with the five UEX credentials
    - Normalizes UEX payloads to unified models
    - Raises every upstream failure as a member of the shared error taxonomy

Example:
    >>> from src.adapters.uex import UexAdapter
    >>> from src.config.loader import load_config
    >>>
    >>> config = load_config()
    >>> adapter = UexAdapter.from_config(config)
    >>> ticker = await adapter.fetch_ticker("ETH/BTC")
    >>> print(f"{ticker.symbol}: {ticker.last} ({ticker.percentage}%)")
    >>> await adapter.close()
"""

import asyncio
import re
import time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import structlog

from src.adapters.uex.markets import MarketRegistry
from src.adapters.uex.normalizer import UexNormalizer
from src.adapters.uex.rest import UexRestClient
from src.adapters.uex.signer import UexSigner
from src.adapters.uex.status import OrderStatus
from src.config.models import AppConfig, Credentials, ExchangeConfig
from src.errors import (
    AddressPending,
    ExchangeError,
    InvalidAddress,
    InvalidOrder,
    OrderNotFound,
)
from src.interfaces.exchange_adapter import ExchangeAdapter
from src.models.balance import BalanceSnapshot
from src.models.funding import DepositAddress, Withdrawal
from src.models.market import Market
from src.models.ohlcv import Candle
from src.models.order import Order, OrderType
from src.models.orderbook import OrderBook
from src.models.ticker import Ticker, Trade, TradeSide

logger = structlog.get_logger(__name__)

T = TypeVar("T")

ORDER_TYPE_CODES: Mapping[OrderType, str] = {
    OrderType.LIMIT: "1",
    OrderType.MARKET: "2",
}

ADDRESS_GENERATING = "ADDRESS_GENERATING"

_WHITESPACE = re.compile(r"\s")


def check_address(address: Optional[str]) -> str:
    """
    Reject obviously malformed funding addresses.

    Raises:
        InvalidAddress: If the address is empty or contains whitespace.
    """
    if not address or _WHITESPACE.search(address):
        raise InvalidAddress(f"uex address is invalid or has less than 1 characters: {address!r}")
    return address


def filter_since_limit(
    items: List[T],
    since: Optional[int],
    limit: Optional[int],
    key: Callable[[T], Optional[int]],
) -> List[T]:
    """
    Keep items at or after ``since``, then at most ``limit`` of them.

    With ``since`` the earliest ``limit`` items are kept, otherwise the
    latest.
    """
    if since is not None:
        items = [item for item in items if (key(item) or 0) >= since]
    if limit is not None:
        if limit <= 0:
            return []
        items = items[:limit] if since is not None else items[-limit:]
    return items


class UexAdapter(ExchangeAdapter):
    """
    UEX exchange adapter implementing the ExchangeAdapter interface.

    The market registry is held through a single normalizer reference that
    is replaced, never mutated, when markets are reloaded.

    Attributes:
        exchange_name: Always returns "uex".
        config: Exchange configuration.

    Example:
        >>> adapter = UexAdapter(exchange_config, credentials)
        >>> markets = await adapter.load_markets()
        >>> book = await adapter.fetch_order_book("ETH/BTC", limit=10)
        >>> print(f"Best bid: {book.best_bid}")
    """

    def __init__(
        self,
        config: Optional[ExchangeConfig] = None,
        credentials: Optional[Credentials] = None,
        rest_client: Optional[UexRestClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize UEX adapter.

        Args:
            config: Exchange configuration from config/exchange.yaml.
            credentials: Account credentials; only needed for private calls.
            rest_client: Transport (default: a UexRestClient built from the
                connection settings).
            clock: Returns the current unix time in seconds.
        """
        self.config = config or ExchangeConfig()
        self._clock = clock
        self._signer = UexSigner(
            credentials or Credentials(),
            self.config.rest.base_url,
            clock=clock,
        )
        self._rest = rest_client or UexRestClient(self.config.connection)
        self._normalizer = UexNormalizer(MarketRegistry.empty(self.config.currency_aliases))
        self._markets_loaded = False
        self._markets_lock = asyncio.Lock()

        logger.info("uex_adapter_initialized", base_url=self.config.rest.base_url)

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "UexAdapter":
        """Build an adapter from the root application configuration."""
        return cls(config.exchange, config.credentials, **kwargs)

    @property
    def exchange_name(self) -> str:
        """Return exchange identifier."""
        return "uex"

    @property
    def registry(self) -> MarketRegistry:
        return self._normalizer.registry

    async def close(self) -> None:
        await self._rest.close()

    async def __aenter__(self) -> "UexAdapter":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _request(
        self,
        path: str,
        api: str = "public",
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Sign and send a request, returning the classified body."""
        request = self._signer.sign(path, api=api, method=method, params=params)
        logger.debug("uex_request", path=path, api=api, method=method)
        return await self._rest.send(request)

    def _normalize(self, response: Any, normalize: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run a normalizer, reporting malformed payloads as ExchangeError.

        The full upstream body is attached to the raised error.
        """
        try:
            return normalize(*args, **kwargs)
        except ExchangeError:
            raise
        except (ValueError, TypeError, KeyError) as e:
            logger.error("uex_normalization_failed", normalizer=normalize.__name__, error=str(e))
            raise ExchangeError(f"uex returned an unexpected payload: {e}", response=response)

    @staticmethod
    def _data(response: Any) -> Any:
        if isinstance(response, dict):
            return response.get("data")
        return None

    @staticmethod
    def _result_list(response: Any) -> List[Any]:
        data = response.get("data") if isinstance(response, dict) else None
        if isinstance(data, dict):
            result = data.get("resultList")
            if isinstance(result, list):
                return result
        return []

    async def _market(self, symbol: str) -> Market:
        await self.load_markets()
        return self.registry.market(symbol)

    # ------------------------------------------------------------------
    # Public market data
    # ------------------------------------------------------------------

    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """
        Load the market list from ``common/symbols``.

        The first call fetches; later calls return the cached markets
        unless ``reload`` is set.

        Returns:
            Dict[str, Market]: Markets keyed by canonical symbol.
        """
        async with self._markets_lock:
            if self._markets_loaded and not reload:
                return dict(self.registry.markets)

            response = await self._request("common/symbols")
            registry = MarketRegistry.from_symbols(
                self._data(response), self.config.currency_aliases
            )
            self._normalizer = UexNormalizer(registry)
            self._markets_loaded = True

        logger.info("uex_markets_loaded", markets=len(registry), reload=reload)
        return dict(registry.markets)

    async def fetch_ticker(self, symbol: str) -> Ticker:
        market = await self._market(symbol)
        response = await self._request("get_ticker", params={"symbol": market.id})
        return self._normalize(
            response, self._normalizer.normalize_ticker, self._data(response), market
        )

    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        market = await self._market(symbol)
        response = await self._request("get_trades", params={"symbol": market.id})
        data = self._data(response)
        if not isinstance(data, list):
            raise ExchangeError("uex get_trades returned an unexpected payload", response=response)
        trades = self._normalize(response, self._normalizer.normalize_trades, data, market)
        return filter_since_limit(trades, since, limit, key=lambda t: t.timestamp)

    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        """
        Fetch a depth snapshot at the configured aggregation step.

        Levels are truncated to ``limit`` per side after sorting.
        """
        market = await self._market(symbol)
        response = await self._request(
            "market_dept",
            params={"symbol": market.id, "type": self.config.options.order_book_type},
        )
        data = self._data(response)
        if not isinstance(data, dict):
            raise ExchangeError("uex market_dept returned an unexpected payload", response=response)
        book = self._normalize(response, self._normalizer.normalize_order_book, data, market)
        return book.truncated(limit)

    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Candle]:
        period = self.config.get_period(timeframe)
        if period is None:
            raise ExchangeError(
                f"uex does not support timeframe {timeframe!r}; "
                f"supported: {', '.join(self.config.timeframes)}"
            )

        market = await self._market(symbol)
        response = await self._request(
            "get_records", params={"symbol": market.id, "period": period}
        )
        candles = self._normalize(response, self._normalizer.normalize_ohlcv, self._data(response))
        return filter_since_limit(candles, since, limit, key=lambda c: c.timestamp)

    # ------------------------------------------------------------------
    # Private account data
    # ------------------------------------------------------------------

    async def fetch_balance(self) -> BalanceSnapshot:
        await self.load_markets()
        response = await self._request("user/account", api="private")
        data = self._data(response)
        if not isinstance(data, dict):
            raise ExchangeError("uex user/account returned an unexpected payload", response=response)
        return self._normalize(response, self._normalizer.normalize_balance, data)

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Decimal,
        price: Optional[Decimal] = None,
    ) -> Order:
        """
        Place a limit or market order.

        Market buys are sized in quote currency upstream. While
        ``create_market_buy_order_requires_price`` is enabled a price must be
        given and ``amount * price`` is sent as the volume; otherwise
        ``amount`` is sent as the quote amount to spend.

        Returns:
            Order: The submitted order with status "open".

        Raises:
            InvalidOrder: If type or side are unknown, a limit order has no
                price, or a market buy has no price while one is required.
        """
        try:
            order_type = OrderType(type.lower())
        except ValueError:
            raise InvalidOrder(f"uex createOrder() does not support order type {type!r}")
        try:
            order_side = TradeSide(side.lower())
        except ValueError:
            raise InvalidOrder(f"uex createOrder() does not support side {side!r}")

        amount = Decimal(str(amount))
        price = Decimal(str(price)) if price is not None else None

        volume = amount
        if order_type is OrderType.MARKET and order_side is TradeSide.BUY:
            if self.config.options.create_market_buy_order_requires_price:
                if price is None:
                    raise InvalidOrder(
                        "uex createOrder() requires the price argument with market buy "
                        "orders to calculate total order cost (amount to spend), where "
                        "cost = amount * price"
                    )
                volume = amount * price
        if order_type is OrderType.LIMIT and price is None:
            raise InvalidOrder("uex createOrder() requires a price for limit orders")

        market = await self._market(symbol)
        params: Dict[str, Any] = {
            "side": order_side.value.upper(),
            "type": ORDER_TYPE_CODES[order_type],
            "symbol": market.id,
            "volume": market.amount_to_precision(volume),
        }
        if order_type is OrderType.LIMIT:
            params["price"] = market.price_to_precision(price)

        response = await self._request("create_order", api="private", method="POST", params=params)
        data = self._data(response)
        order_id = data.get("order_id") if isinstance(data, dict) else None
        if order_id is None:
            raise ExchangeError("uex create_order returned no order id", response=response)

        logger.info(
            "uex_order_created",
            order_id=str(order_id),
            symbol=market.symbol,
            side=order_side.value,
            type=order_type.value,
        )
        return Order(
            id=str(order_id),
            timestamp=int(self._clock() * 1000),
            symbol=market.symbol,
            side=order_side,
            type=order_type,
            price=price,
            amount=amount,
            status=OrderStatus.OPEN.value,
            info=response,
        )

    async def cancel_order(self, id: str, symbol: str) -> Order:
        market = await self._market(symbol)
        response = await self._request(
            "cancel_order",
            api="private",
            method="POST",
            params={"order_id": id, "symbol": market.id},
        )
        logger.info("uex_order_canceled", order_id=str(id), symbol=market.symbol)
        return Order(
            id=str(id),
            symbol=market.symbol,
            status=OrderStatus.CANCELED.value,
            info=response if isinstance(response, dict) else {},
        )

    async def fetch_order(self, id: str, symbol: str) -> Order:
        """
        Fetch one order from ``order_info``.

        Raises:
            OrderNotFound: If the response carries no order.
        """
        market = await self._market(symbol)
        response = await self._request(
            "order_info", api="private", params={"order_id": id, "symbol": market.id}
        )
        data = self._data(response)
        order = data.get("order_info", data) if isinstance(data, dict) else None
        if not order:
            raise OrderNotFound(f"uex order {id} not found", response=response)
        return self._normalize(response, self._normalizer.normalize_order, order, market)

    async def _fetch_order_list(
        self,
        path: str,
        symbol: str,
        limit: Optional[int],
    ) -> List[Order]:
        market = await self._market(symbol)
        params: Dict[str, Any] = {"symbol": market.id}
        if limit is not None:
            params["pageSize"] = limit
        response = await self._request(path, api="private", params=params)
        return self._normalize(
            response,
            self._normalizer.normalize_orders,
            self._result_list(response),
            market,
        )

    async def fetch_open_orders(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        orders = await self._fetch_order_list("new_order", symbol, limit)
        return filter_since_limit(orders, since, limit, key=lambda o: o.timestamp)

    async def fetch_closed_orders(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        """Fetch order history, keeping closed and canceled orders only."""
        orders = await self._fetch_order_list("all_order", symbol, limit)
        terminal = {OrderStatus.CLOSED.value, OrderStatus.CANCELED.value}
        closed = [order for order in orders if order.status in terminal]
        return filter_since_limit(closed, since, limit, key=lambda o: o.timestamp)

    async def fetch_my_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        """
        Fetch the account's trades for one market.

        Raises:
            ExchangeError: If no symbol is given.
        """
        if not symbol:
            raise ExchangeError("uex fetchMyTrades requires a symbol argument")
        market = await self._market(symbol)
        params: Dict[str, Any] = {"symbol": market.id}
        if limit is not None:
            params["pageSize"] = limit
        response = await self._request("all_trade", api="private", params=params)
        trades = self._normalize(
            response,
            self._normalizer.normalize_trades,
            self._result_list(response),
            market,
        )
        return filter_since_limit(trades, since, limit, key=lambda t: t.timestamp)

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    async def fetch_deposit_address(self, code: str) -> DepositAddress:
        """
        Fetch the deposit address for a currency.

        Raises:
            AddressPending: If no address is returned yet or the exchange
                reports it is still being generated.
            InvalidAddress: If the returned address is malformed.
        """
        await self.load_markets()
        currency_id = self.registry.currency_id(code)
        response = await self._request(
            self.config.options.deposit_address_path,
            api="private",
            params={"coin": currency_id},
        )
        data = self._data(response)
        address, tag = self._normalizer.deposit_address_fields(data)
        message = response.get("msg") if isinstance(response, dict) else None
        if not address or message == ADDRESS_GENERATING:
            raise AddressPending(
                f"uex the address for {code} is being generated "
                "(pending, not ready yet, retry again later)",
                response=response,
            )
        check_address(address)
        return self._normalize(
            response,
            self._normalizer.normalize_deposit_address,
            data,
            code,
            address,
            tag,
        )

    async def withdraw(
        self,
        code: str,
        amount: Decimal,
        address: str,
        tag: Optional[str] = None,
    ) -> Withdrawal:
        """
        Request a withdrawal to an external address.

        The address is checked before anything is sent.
        """
        check_address(address)
        await self.load_markets()
        amount = Decimal(str(amount))
        params: Dict[str, Any] = {
            "coin": self.registry.currency_id(code),
            "amount": amount,
            "address": address,
        }
        if tag:
            params["tag"] = tag

        response = await self._request(
            self.config.options.withdraw_path, api="private", method="POST", params=params
        )
        withdrawal = self._normalize(
            response,
            self._normalizer.normalize_withdrawal,
            self._data(response),
            code,
            amount,
            address,
            tag,
        )
        logger.info("uex_withdrawal_requested", currency=code, withdrawal_id=withdrawal.id)
        return withdrawal
