"""
Abstract base class for exchange adapters.

This module defines the ExchangeAdapter interface that exchange-specific
REST implementations (UEX) must follow, so callers work with canonical
symbols and normalized models regardless of the venue.

The adapter pattern allows the system to:
- Add new exchanges without modifying caller logic
- Normalize data into unified schemas (Ticker, OrderBook, Order)
- Surface every upstream failure through the shared error taxonomy

Example:
    >>> class UexAdapter(ExchangeAdapter):
    ...     @property
    ...     def exchange_name(self) -> str:
    ...         return "uex"
    ...
    ...     async def fetch_ticker(self, symbol: str) -> Ticker:
    ...         data = await self._public("get_ticker", {"symbol": ...})
    ...         return self._normalizer.normalize_ticker(data["data"])
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional

from src.models.balance import BalanceSnapshot
from src.models.funding import DepositAddress, Withdrawal
from src.models.market import Market
from src.models.ohlcv import Candle
from src.models.order import Order
from src.models.orderbook import OrderBook
from src.models.ticker import Ticker, Trade


class ExchangeAdapter(ABC):
    """
    Abstract base class for exchange adapters.

    Defines the contract that all exchange-specific implementations must
    follow. Every operation is a single async request/response; retries are
    left to the caller (see ``BaseError.retryable``).

    Attributes:
        exchange_name: Lowercase exchange identifier (e.g., "uex").

    Note:
        All financial values in returned models use Decimal for precision.
        Never use float for prices, quantities, or notional values.
    """

    @property
    @abstractmethod
    def exchange_name(self) -> str:
        """
        Return the lowercase exchange identifier.

        Used as the prefix of upstream error messages and in logging.

        Returns:
            str: Lowercase exchange name (e.g., "uex").
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """
        Release network resources.

        Must be safe to call multiple times and when no request was ever
        made.
        """
        pass

    # ------------------------------------------------------------------
    # Public market data
    # ------------------------------------------------------------------

    @abstractmethod
    async def load_markets(self, reload: bool = False) -> Dict[str, Market]:
        """
        Load the exchange's market list.

        Args:
            reload: Fetch again even when markets are already loaded.

        Returns:
            Dict[str, Market]: Markets keyed by canonical symbol.

        Raises:
            ExchangeError: If the symbol list cannot be interpreted.
            NetworkError: If the request fails.
        """
        pass

    @abstractmethod
    async def fetch_ticker(self, symbol: str) -> Ticker:
        """
        Fetch the 24h ticker for a market.

        Args:
            symbol: Canonical symbol (e.g., "ETH/BTC").

        Raises:
            BadSymbol: If the symbol is unknown.
        """
        pass

    @abstractmethod
    async def fetch_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        """
        Fetch recent public trades, oldest first.

        Args:
            symbol: Canonical symbol.
            since: Only trades at or after this timestamp (ms).
            limit: Maximum number of trades.
        """
        pass

    @abstractmethod
    async def fetch_order_book(self, symbol: str, limit: Optional[int] = None) -> OrderBook:
        """
        Fetch a depth snapshot.

        Returns:
            OrderBook: Bids descending, asks ascending, at most ``limit``
                levels per side.
        """
        pass

    @abstractmethod
    async def fetch_ohlcv(
        self,
        symbol: str,
        timeframe: str = "1m",
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Candle]:
        """
        Fetch candles.

        Raises:
            ExchangeError: If the timeframe is not supported.
            DataIntegrityError: If candles are not strictly ascending.
        """
        pass

    # ------------------------------------------------------------------
    # Private account data
    # ------------------------------------------------------------------

    @abstractmethod
    async def fetch_balance(self) -> BalanceSnapshot:
        """Fetch per-currency balances."""
        pass

    @abstractmethod
    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: Decimal,
        price: Optional[Decimal] = None,
    ) -> Order:
        """
        Place an order.

        Args:
            symbol: Canonical symbol.
            type: "limit" or "market".
            side: "buy" or "sell".
            amount: Order size in base currency.
            price: Limit price; required for limit orders.

        Raises:
            InvalidOrder: If the request is incomplete.
        """
        pass

    @abstractmethod
    async def cancel_order(self, id: str, symbol: str) -> Order:
        """Cancel an order."""
        pass

    @abstractmethod
    async def fetch_order(self, id: str, symbol: str) -> Order:
        """
        Fetch one order.

        Raises:
            OrderNotFound: If the exchange does not know the order.
        """
        pass

    @abstractmethod
    async def fetch_open_orders(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        """Fetch orders that are still open."""
        pass

    @abstractmethod
    async def fetch_closed_orders(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        """Fetch orders that are closed or canceled."""
        pass

    @abstractmethod
    async def fetch_my_trades(
        self,
        symbol: str,
        since: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Trade]:
        """Fetch the account's own trades."""
        pass

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    @abstractmethod
    async def fetch_deposit_address(self, code: str) -> DepositAddress:
        """
        Fetch the deposit address for a currency.

        Raises:
            AddressPending: If the address is still being generated.
        """
        pass

    @abstractmethod
    async def withdraw(
        self,
        code: str,
        amount: Decimal,
        address: str,
        tag: Optional[str] = None,
    ) -> Withdrawal:
        """
        Request a withdrawal.

        Raises:
            InvalidAddress: If the address is obviously malformed.
        """
        pass

    def __repr__(self) -> str:
        """Return string representation of adapter."""
        return f"{self.__class__.__name__}(exchange={self.exchange_name})"
