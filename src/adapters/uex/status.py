"""
UEX order status mapping.

UEX reports order state as a numeric code:

    0  INIT          primary order, untraded, not yet in the market
    1  NEW           new order, untraded, in the market
    2  FILLED        completely filled
    3  PART_FILLED   partially filled
    4  CANCELED      withdrawn
    5  PENDING_CANCEL
    6  EXPIRED       abnormal order

The mapping is a fixed lookup. Unknown codes are passed through unchanged so
that new upstream states are visible to callers instead of being dropped.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class OrderStatus(str, Enum):
    """Canonical order states."""

    OPEN = "open"
    CLOSED = "closed"
    CANCELED = "canceled"


ORDER_STATUSES: Mapping[str, OrderStatus] = MappingProxyType(
    {
        "0": OrderStatus.OPEN,
        "1": OrderStatus.OPEN,
        "2": OrderStatus.CLOSED,
        "3": OrderStatus.OPEN,
        "4": OrderStatus.CANCELED,
        "5": OrderStatus.CANCELED,
        "6": OrderStatus.CANCELED,
    }
)


def parse_order_status(code: Any) -> Optional[Any]:
    """
    Map an upstream status code to a canonical status.

    Args:
        code: Status code as int or string.

    Returns:
        "open", "closed" or "canceled"; the code itself, unchanged, when it
        is not in the table; None when absent.

    Example:
        >>> parse_order_status(2)
        'closed'
        >>> parse_order_status(9)
        9
    """
    if code is None:
        return None
    status = ORDER_STATUSES.get(str(code))
    if status is None:
        return code
    return status.value
