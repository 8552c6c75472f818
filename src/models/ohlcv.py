"""
OHLCV candle model.

A candle is the 6-tuple (timestamp_ms, open, high, low, close, volume).
Batches returned by the adapter are strictly ascending by timestamp.
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from src.models.common import iso8601

CandleTuple = Tuple[int, Optional[Decimal], Optional[Decimal], Optional[Decimal], Optional[Decimal], Optional[Decimal]]


class Candle(BaseModel):
    """
    One OHLCV candle.

    Attributes:
        timestamp: Candle open time in ms.
        open: Open price.
        high: High price.
        low: Low price.
        close: Close price.
        volume: Traded volume in base currency.

    Example:
        >>> candle = Candle(timestamp=1533402420000, open=Decimal("0.057833"))
        >>> candle.as_tuple()[0]
        1533402420000
    """

    model_config = {"frozen": True, "extra": "forbid"}

    timestamp: int = Field(..., ge=0, description="Candle open time (ms)")
    open: Optional[Decimal] = None
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    close: Optional[Decimal] = None
    volume: Optional[Decimal] = None

    @property
    def iso8601(self) -> Optional[str]:
        return iso8601(self.timestamp)

    def as_tuple(self) -> CandleTuple:
        """Return the candle as (timestamp, open, high, low, close, volume)."""
        return (self.timestamp, self.open, self.high, self.low, self.close, self.volume)


def is_strictly_ascending(candles: Sequence[Candle]) -> bool:
    """
    Check that candle timestamps strictly increase.

    Args:
        candles: Candles in the order they were received.

    Returns:
        bool: True if every timestamp is greater than the previous one.
    """
    return all(
        earlier.timestamp < later.timestamp
        for earlier, later in zip(candles, candles[1:])
    )


def to_tuples(candles: Sequence[Candle]) -> List[CandleTuple]:
    return [candle.as_tuple() for candle in candles]
