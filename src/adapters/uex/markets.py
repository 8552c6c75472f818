"""
UEX market registry.

Builds the immutable lookup tables that map UEX market ids (``ethbtc``) to
canonical markets (``ETH/BTC``) and back.

Symbols Endpoint (GET common/symbols):
    {
        "code": "0",
        "msg": "suc",
        "data": [
            {
                "symbol": "ethbtc",
                "count_coin": "btc",
                "amount_precision": 3,
                "base_coin": "eth",
                "price_precision": 6
            },
            ...
        ]
    }
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

import structlog

from src.adapters.uex.fields import parse_int
from src.config.models import DEFAULT_CURRENCY_ALIASES
from src.errors import BadSymbol, ExchangeError
from src.models.market import Market

logger = structlog.get_logger(__name__)


def canonical_currency_code(
    currency_id: str,
    aliases: Mapping[str, str] = DEFAULT_CURRENCY_ALIASES,
) -> str:
    """
    Upper-case a currency id and apply the alias table.

    Example:
        >>> canonical_currency_code("xbt")
        'BTC'
    """
    code = currency_id.strip().upper()
    return aliases.get(code, code)


class MarketRegistry:
    """
    Immutable index of markets by exchange id and by canonical symbol.

    Both indices are built together in the constructor and exposed as
    read-only mappings. A reload creates a new registry; the owner swaps its
    single reference, so readers never observe one index updated without
    the other.

    Example:
        >>> registry = MarketRegistry.from_symbols(response["data"])
        >>> registry.by_symbol("ETH/BTC").id
        'ethbtc'
        >>> registry.by_id("ETHBTC").symbol
        'ETH/BTC'
    """

    def __init__(
        self,
        markets: Iterable[Market],
        currency_aliases: Mapping[str, str] = DEFAULT_CURRENCY_ALIASES,
    ):
        """
        Build the registry.

        Args:
            markets: Markets to index.
            currency_aliases: Alias table used for currency codes.

        Raises:
            ExchangeError: If two markets share an id or a symbol.
        """
        by_id: Dict[str, Market] = {}
        by_symbol: Dict[str, Market] = {}
        currencies: Dict[str, str] = {}

        for market in markets:
            key = market.id.lower()
            if key in by_id:
                raise ExchangeError(f"Duplicate market id in symbol list: {market.id}")
            if market.symbol in by_symbol:
                raise ExchangeError(f"Duplicate market symbol in symbol list: {market.symbol}")
            by_id[key] = market
            by_symbol[market.symbol] = market
            currencies[market.base_id.lower()] = market.base
            currencies[market.quote_id.lower()] = market.quote

        self._aliases: Mapping[str, str] = MappingProxyType(dict(currency_aliases))
        self._by_id: Mapping[str, Market] = MappingProxyType(by_id)
        self._by_symbol: Mapping[str, Market] = MappingProxyType(by_symbol)
        self._currencies: Mapping[str, str] = MappingProxyType(currencies)

    @classmethod
    def empty(
        cls, currency_aliases: Mapping[str, str] = DEFAULT_CURRENCY_ALIASES
    ) -> "MarketRegistry":
        return cls([], currency_aliases)

    @classmethod
    def from_symbols(
        cls,
        entries: Any,
        currency_aliases: Mapping[str, str] = DEFAULT_CURRENCY_ALIASES,
    ) -> "MarketRegistry":
        """
        Build a registry from the ``data`` list of ``common/symbols``.

        Args:
            entries: The raw ``data`` value.
            currency_aliases: Alias table for currency codes.

        Returns:
            MarketRegistry: Registry with one market per entry.

        Raises:
            ExchangeError: If the payload shape is not recognized.
        """
        if not isinstance(entries, list):
            raise ExchangeError(
                f"Unrecognized symbol list payload: expected a list, got {type(entries).__name__}",
                response=entries,
            )

        markets: List[Market] = []
        for entry in entries:
            markets.append(parse_market(entry, currency_aliases))

        registry = cls(markets, currency_aliases)
        logger.info("market_registry_built", markets=len(registry))
        return registry

    @property
    def markets(self) -> Mapping[str, Market]:
        """Markets keyed by canonical symbol."""
        return self._by_symbol

    @property
    def markets_by_id(self) -> Mapping[str, Market]:
        """Markets keyed by lower-cased exchange id."""
        return self._by_id

    @property
    def symbols(self) -> List[str]:
        return sorted(self._by_symbol)

    def __len__(self) -> int:
        return len(self._by_symbol)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._by_symbol

    def by_id(self, market_id: str) -> Optional[Market]:
        """Look up a market by exchange id (case-insensitive)."""
        return self._by_id.get(market_id.lower())

    def by_symbol(self, symbol: str) -> Optional[Market]:
        """Look up a market by canonical symbol."""
        return self._by_symbol.get(symbol)

    def market(self, symbol_or_id: str) -> Market:
        """
        Resolve a canonical symbol or exchange id to a market.

        Raises:
            BadSymbol: If neither index knows the value.
        """
        market = self.by_symbol(symbol_or_id) or self.by_id(symbol_or_id)
        if market is None:
            raise BadSymbol(f"Unknown market: {symbol_or_id}")
        return market

    def market_id(self, symbol: str) -> str:
        return self.market(symbol).id

    def currency_code(self, currency_id: str) -> str:
        """
        Canonical code for an exchange currency id.

        Known ids resolve through the loaded markets; anything else goes
        through the shared canonicalization rule.
        """
        known = self._currencies.get(currency_id.lower())
        if known is not None:
            return known
        return canonical_currency_code(currency_id, self._aliases)

    def currency_id(self, code: str) -> str:
        """Exchange currency id for a canonical code, defaulting to lower case."""
        for currency_id, known_code in self._currencies.items():
            if known_code == code:
                return currency_id
        return code.lower()

    def __repr__(self) -> str:
        return f"MarketRegistry(markets={len(self)})"


def parse_market(
    entry: Any,
    currency_aliases: Mapping[str, str] = DEFAULT_CURRENCY_ALIASES,
) -> Market:
    """
    Convert one ``common/symbols`` entry into a Market.

    Raises:
        ExchangeError: If required fields are missing or invalid.
    """
    if not isinstance(entry, dict):
        raise ExchangeError("Unrecognized market entry", response=entry)

    try:
        market_id = str(entry["symbol"])
        base_id = str(entry["base_coin"])
        quote_id = str(entry["count_coin"])
    except KeyError as e:
        logger.error("market_parse_failed_missing_field", missing_field=str(e), entry=entry)
        raise ExchangeError(f"Missing required field in market entry: {e}", response=entry)

    base = canonical_currency_code(base_id, currency_aliases)
    quote = canonical_currency_code(quote_id, currency_aliases)

    try:
        return Market(
            id=market_id,
            symbol=f"{base}/{quote}",
            base=base,
            quote=quote,
            base_id=base_id,
            quote_id=quote_id,
            price_precision=parse_int(entry.get("price_precision"), 8),
            amount_precision=parse_int(entry.get("amount_precision"), 8),
            active=True,
            info=entry,
        )
    except ValueError as e:
        logger.error("market_parse_failed_invalid_data", error=str(e), entry=entry)
        raise ExchangeError(f"Invalid market entry {market_id}: {e}", response=entry)
