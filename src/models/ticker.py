"""
Ticker and trade data models.

This module defines ticker snapshots and executed trades in the canonical
schema. All financial values use Decimal for precision; timestamps are epoch
milliseconds.

Models:
    Ticker: 24h market statistics for one symbol
    Trade: One executed trade (public tape or own fills)
    TradeSide: Enum for trade side (buy/sell)
    Fee: Fee charged on a trade or order
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from src.models.common import iso8601


class TradeSide(str, Enum):
    """
    Enumeration for trade and order side.

    Attributes:
        BUY: Buyer side
        SELL: Seller side
    """

    BUY = "buy"
    SELL = "sell"


class Fee(BaseModel):
    """Fee amount and the canonical code of the currency it was paid in."""

    model_config = {"frozen": True, "extra": "forbid"}

    cost: Decimal
    currency: Optional[str] = None


class Ticker(BaseModel):
    """
    Ticker data for a market.

    Attributes:
        symbol: Canonical symbol (e.g., "ETH/BTC"), None if unknown.
        timestamp: Exchange timestamp in ms; None when not reported.
        high: 24-hour high price.
        low: 24-hour low price.
        bid: Best bid price.
        ask: Best ask price.
        last: Last traded price.
        close: Same as last.
        base_volume: 24-hour volume in base currency.
        percentage: 24-hour change in percent (3.44 means +3.44%).
        info: Raw upstream payload.

    Example:
        >>> ticker = Ticker(
        ...     symbol="ETH/BTC",
        ...     timestamp=1533413083184,
        ...     last=Decimal("0.058019"),
        ...     percentage=Decimal("3.437271"),
        ... )
        >>> ticker.iso8601
        '2018-08-04T20:04:43.184Z'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    symbol: Optional[str] = Field(default=None, description="Canonical symbol")
    timestamp: Optional[int] = Field(
        default=None,
        description="Exchange timestamp (ms)",
        ge=0,
    )
    high: Optional[Decimal] = Field(default=None, description="24-hour high price")
    low: Optional[Decimal] = Field(default=None, description="24-hour low price")
    bid: Optional[Decimal] = Field(default=None, description="Best bid price")
    ask: Optional[Decimal] = Field(default=None, description="Best ask price")
    last: Optional[Decimal] = Field(default=None, description="Last traded price")
    close: Optional[Decimal] = Field(default=None, description="Close (= last)")
    base_volume: Optional[Decimal] = Field(
        default=None,
        description="24-hour volume in base currency",
    )
    percentage: Optional[Decimal] = Field(
        default=None,
        description="24-hour change in percent",
    )
    info: Dict[str, Any] = Field(default_factory=dict, description="Raw payload")

    @property
    def iso8601(self) -> Optional[str]:
        """Timestamp rendered as ISO-8601 (UTC), or None."""
        return iso8601(self.timestamp)

    @property
    def spread(self) -> Optional[Decimal]:
        """
        Absolute bid/ask spread.

        Returns:
            Optional[Decimal]: ask - bid, or None if either is missing.
        """
        if self.bid is not None and self.ask is not None:
            return self.ask - self.bid
        return None


class Trade(BaseModel):
    """
    Executed trade.

    ``cost`` is always price * amount when both are known and None
    otherwise; it is never taken from the upstream payload.

    Attributes:
        id: Exchange trade id.
        timestamp: Execution time in ms.
        symbol: Canonical symbol.
        side: Aggressor side for public trades, own side for private fills.
        price: Execution price.
        amount: Executed amount in base currency.
        cost: price * amount.
        fee: Fee paid, for private fills.
        info: Raw upstream payload.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(..., min_length=1, description="Exchange trade id")
    timestamp: Optional[int] = Field(default=None, ge=0, description="Execution time (ms)")
    symbol: Optional[str] = Field(default=None)
    side: Optional[TradeSide] = Field(default=None)
    price: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    amount: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    cost: Optional[Decimal] = Field(default=None, ge=Decimal("0"))
    fee: Optional[Fee] = Field(default=None)
    info: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_cost(self) -> "Trade":
        """Ensure cost is exactly price * amount, or absent."""
        if self.price is not None and self.amount is not None:
            expected: Optional[Decimal] = self.price * self.amount
        else:
            expected = None
        if self.cost != expected:
            raise ValueError(
                f"Trade cost ({self.cost}) must equal price * amount ({expected})"
            )
        return self

    @property
    def iso8601(self) -> Optional[str]:
        return iso8601(self.timestamp)

    @property
    def is_buy(self) -> bool:
        return self.side == TradeSide.BUY

    @property
    def is_sell(self) -> bool:
        return self.side == TradeSide.SELL
