"""
Deposit and withdrawal models.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class DepositAddress(BaseModel):
    """
    Deposit address for one currency.

    Attributes:
        currency: Canonical currency code.
        address: On-chain address.
        tag: Memo / destination tag for currencies that need one.
        info: Raw upstream payload.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    currency: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    tag: Optional[str] = None
    info: Dict[str, Any] = Field(default_factory=dict)


class Withdrawal(BaseModel):
    """Accepted withdrawal request."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: Optional[str] = None
    currency: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=Decimal("0"))
    address: str = Field(..., min_length=1)
    tag: Optional[str] = None
    info: Dict[str, Any] = Field(default_factory=dict)
