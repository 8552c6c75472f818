"""
Market (instrument definition) model.

A Market describes one tradable pair on the exchange: its exchange-native
id, the canonical BASE/QUOTE symbol, and the price/amount precision used
when formatting order parameters.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator


class Market(BaseModel):
    """
    One tradable instrument.

    Attributes:
        id: Exchange-native market id (e.g., "ethbtc").
        symbol: Canonical symbol (e.g., "ETH/BTC").
        base: Canonical base currency code.
        quote: Canonical quote currency code.
        base_id: Exchange-native base currency id.
        quote_id: Exchange-native quote currency id.
        price_precision: Decimal places allowed for prices.
        amount_precision: Decimal places allowed for amounts.
        active: Whether the market is tradable.
        info: Raw upstream market entry.

    Example:
        >>> market = Market(
        ...     id="ethbtc", symbol="ETH/BTC", base="ETH", quote="BTC",
        ...     base_id="eth", quote_id="btc",
        ...     price_precision=6, amount_precision=3,
        ... )
        >>> market.amount_to_precision(Decimal("1.23456"))
        '1.234'
    """

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(..., min_length=1, description="Exchange-native market id")
    symbol: str = Field(..., min_length=3, description="Canonical BASE/QUOTE symbol")
    base: str = Field(..., min_length=1)
    quote: str = Field(..., min_length=1)
    base_id: str = Field(..., min_length=1)
    quote_id: str = Field(..., min_length=1)
    price_precision: int = Field(..., ge=0, description="Price decimal places")
    amount_precision: int = Field(..., ge=0, description="Amount decimal places")
    active: bool = Field(default=True)
    info: Dict[str, Any] = Field(default_factory=dict, description="Raw upstream entry")

    @model_validator(mode="after")
    def validate_symbol(self) -> "Market":
        """Ensure the canonical symbol agrees with base and quote."""
        expected = f"{self.base}/{self.quote}"
        if self.symbol != expected:
            raise ValueError(f"Symbol {self.symbol} does not match {expected}")
        return self

    def amount_to_precision(self, amount: Decimal) -> str:
        """
        Format an amount for the exchange, truncating extra decimals.

        Args:
            amount: Order amount.

        Returns:
            str: Amount with at most ``amount_precision`` decimals.
        """
        quantum = Decimal(1).scaleb(-self.amount_precision)
        return format(Decimal(amount).quantize(quantum, rounding=ROUND_DOWN), "f")

    def price_to_precision(self, price: Decimal) -> str:
        """Format a price for the exchange, rounding half-up."""
        quantum = Decimal(1).scaleb(-self.price_precision)
        return format(Decimal(price).quantize(quantum, rounding=ROUND_HALF_UP), "f")
