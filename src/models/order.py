"""
Order model.

Orders are value objects: an Order is created from the submission response
and replaced by re-fetching from upstream, never mutated locally.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from src.models.common import iso8601
from src.models.ticker import Fee, TradeSide


class OrderType(str, Enum):
    """Order execution type."""

    LIMIT = "limit"
    MARKET = "market"


class Order(BaseModel):
    """
    Normalized order.

    Attributes:
        id: Exchange order id.
        timestamp: Open/creation time in ms.
        last_trade_timestamp: Time of the last fill or close in ms.
        symbol: Canonical symbol.
        side: buy or sell.
        type: limit or market.
        price: Limit price.
        cost: Total quote amount filled.
        average: Average fill price.
        amount: Ordered amount in base currency.
        filled: Filled amount.
        remaining: Unfilled amount.
        status: "open", "closed", "canceled", or an unrecognized upstream
            code passed through unchanged.
        fee: Fee charged, if reported.
        info: Raw upstream payload.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(..., min_length=1, description="Exchange order id")
    timestamp: Optional[int] = Field(default=None, ge=0)
    last_trade_timestamp: Optional[int] = Field(default=None, ge=0)
    symbol: Optional[str] = None
    side: Optional[TradeSide] = None
    type: OrderType = OrderType.LIMIT
    price: Optional[Decimal] = None
    cost: Optional[Decimal] = None
    average: Optional[Decimal] = None
    amount: Optional[Decimal] = None
    filled: Optional[Decimal] = None
    remaining: Optional[Decimal] = None
    status: Optional[Union[str, int]] = None
    fee: Optional[Fee] = None
    info: Dict[str, Any] = Field(default_factory=dict)

    @property
    def iso8601(self) -> Optional[str]:
        return iso8601(self.timestamp)

    @property
    def is_open(self) -> bool:
        return self.status == "open"

    @property
    def is_terminal(self) -> bool:
        """True once the order is closed or canceled."""
        return self.status in ("closed", "canceled")
