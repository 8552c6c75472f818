"""
Account balance models.

A BalanceSnapshot is the whole account as returned by one fetch; it is
replaced wholesale on the next fetch, never updated incrementally.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class BalanceEntry(BaseModel):
    """
    Balance of one currency.

    Attributes:
        currency: Canonical currency code.
        free: Amount available for trading.
        used: Amount locked in orders or withdrawals.
        total: free + used.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    currency: str = Field(..., min_length=1)
    free: Decimal = Field(default=Decimal("0"))
    used: Decimal = Field(default=Decimal("0"))
    total: Decimal = Field(default=Decimal("0"))

    @model_validator(mode="after")
    def validate_total(self) -> "BalanceEntry":
        """Ensure total equals free + used."""
        if self.total != self.free + self.used:
            raise ValueError(
                f"{self.currency} total ({self.total}) must equal free + used ({self.free + self.used})"
            )
        return self


class BalanceSnapshot(BaseModel):
    """
    Account balances keyed by canonical currency code.

    Example:
        >>> snapshot.free("BTC")
        Decimal('0.5')
    """

    model_config = {"frozen": True, "extra": "forbid"}

    balances: Dict[str, BalanceEntry] = Field(default_factory=dict)
    total_asset: Optional[Decimal] = Field(
        default=None,
        description="Account valuation reported by the exchange",
    )
    info: Dict[str, Any] = Field(default_factory=dict)

    def get(self, currency: str) -> Optional[BalanceEntry]:
        return self.balances.get(currency)

    def free(self, currency: str) -> Decimal:
        entry = self.balances.get(currency)
        return entry.free if entry else Decimal("0")

    def used(self, currency: str) -> Decimal:
        entry = self.balances.get(currency)
        return entry.used if entry else Decimal("0")

    def total(self, currency: str) -> Decimal:
        entry = self.balances.get(currency)
        return entry.total if entry else Decimal("0")

    @property
    def currencies(self) -> list[str]:
        return sorted(self.balances)
