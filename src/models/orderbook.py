"""
Order book data models.

This module defines the canonical order book structures. All financial
values use Decimal for precision to avoid floating-point errors.

Models:
    PriceLevel: Single price level in an order book (price, volume)
    OrderBook: Complete normalized order book snapshot
"""

from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, model_validator

from src.models.common import iso8601


class PriceLevel(BaseModel):
    """
    Single price level in an order book.

    Attributes:
        price: Price at this level in quote currency.
        volume: Volume available at this level in base currency.

    Example:
        >>> level = PriceLevel(price=Decimal("0.0578"), volume=Decimal("8.25"))
        >>> level.as_tuple()
        (Decimal('0.0578'), Decimal('8.25'))
    """

    model_config = {"frozen": True, "extra": "ignore"}

    price: Decimal = Field(
        ...,
        description="Price at this level in quote currency",
        ge=Decimal("0"),
    )
    volume: Decimal = Field(
        ...,
        description="Volume available at this level in base currency",
        ge=Decimal("0"),
    )

    @computed_field  # type: ignore[misc]
    @property
    def notional(self) -> Decimal:
        """
        Calculate the notional value at this level.

        Returns:
            Decimal: The product of price and volume.
        """
        return self.price * self.volume

    def as_tuple(self) -> Tuple[Decimal, Decimal]:
        """Return the level as a (price, volume) pair."""
        return (self.price, self.volume)


class OrderBook(BaseModel):
    """
    Normalized order book snapshot.

    Attributes:
        symbol: Canonical symbol (e.g., "ETH/BTC").
        timestamp: Server time of the snapshot in ms, None if not reported.
        bids: Bid levels, strictly descending by price (best first).
        asks: Ask levels, strictly ascending by price (best first).

    Example:
        >>> book = OrderBook(
        ...     symbol="ETH/BTC",
        ...     timestamp=1533412622463,
        ...     bids=[PriceLevel(price=Decimal("0.0578"), volume=Decimal("8.25"))],
        ...     asks=[PriceLevel(price=Decimal("0.058242"), volume=Decimal("9.77"))],
        ... )
        >>> book.spread
        Decimal('0.000442')
    """

    model_config = {"frozen": True, "extra": "ignore"}

    symbol: str = Field(
        ...,
        description="Canonical symbol",
        min_length=3,
        max_length=50,
        examples=["ETH/BTC", "BTC/USDT"],
    )
    timestamp: Optional[int] = Field(
        default=None,
        description="Server timestamp of the snapshot (ms)",
        ge=0,
    )
    bids: List[PriceLevel] = Field(
        default_factory=list,
        description="Bid levels, sorted best (highest) to worst",
    )
    asks: List[PriceLevel] = Field(
        default_factory=list,
        description="Ask levels, sorted best (lowest) to worst",
    )

    @model_validator(mode="after")
    def validate_order_book(self) -> "OrderBook":
        """
        Validate order book invariants.

        Ensures:
            - Bids are strictly descending (best first)
            - Asks are strictly ascending (best first)
        """
        for i in range(len(self.bids) - 1):
            if self.bids[i].price <= self.bids[i + 1].price:
                raise ValueError(
                    f"Bids must be strictly descending: {self.bids[i].price} <= {self.bids[i + 1].price}"
                )

        for i in range(len(self.asks) - 1):
            if self.asks[i].price >= self.asks[i + 1].price:
                raise ValueError(
                    f"Asks must be strictly ascending: {self.asks[i].price} >= {self.asks[i + 1].price}"
                )

        return self

    @property
    def iso8601(self) -> Optional[str]:
        return iso8601(self.timestamp)

    @computed_field  # type: ignore[misc]
    @property
    def best_bid(self) -> Optional[Decimal]:
        """
        Get the best (highest) bid price.

        Returns:
            Optional[Decimal]: Best bid price, or None if no bids.
        """
        return self.bids[0].price if self.bids else None

    @computed_field  # type: ignore[misc]
    @property
    def best_ask(self) -> Optional[Decimal]:
        """
        Get the best (lowest) ask price.

        Returns:
            Optional[Decimal]: Best ask price, or None if no asks.
        """
        return self.asks[0].price if self.asks else None

    @computed_field  # type: ignore[misc]
    @property
    def mid_price(self) -> Optional[Decimal]:
        """
        Calculate the mid price.

        Returns:
            Optional[Decimal]: Mid price, or None if either side is empty.
        """
        if self.best_bid is not None and self.best_ask is not None:
            return (self.best_bid + self.best_ask) / Decimal("2")
        return None

    @computed_field  # type: ignore[misc]
    @property
    def spread(self) -> Optional[Decimal]:
        """
        Calculate the absolute spread (best_ask - best_bid).

        Returns:
            Optional[Decimal]: Absolute spread, or None if either side is empty.
        """
        if self.best_bid is not None and self.best_ask is not None:
            return self.best_ask - self.best_bid
        return None

    def truncated(self, limit: Optional[int]) -> "OrderBook":
        """
        Return a copy keeping at most ``limit`` levels per side.

        Args:
            limit: Maximum levels per side; None keeps everything and a
                non-positive limit keeps nothing.
        """
        if limit is None:
            return self
        if limit <= 0:
            return self.model_copy(update={"bids": [], "asks": []})
        return self.model_copy(
            update={"bids": self.bids[:limit], "asks": self.asks[:limit]}
        )
