"""
Error taxonomy shared by the adapter layers.

Every upstream failure surfaces as one of the classes below. Each class
carries a stable ErrorKind and a retryable flag so callers can branch on
``err.kind`` / ``err.retryable`` instead of walking the class hierarchy.

Hierarchy:
    BaseError
    ├── ExchangeError
    │   ├── AuthenticationError
    │   │   └── PermissionDenied
    │   ├── InsufficientFunds
    │   ├── InvalidOrder
    │   │   └── OrderNotFound
    │   ├── AddressPending
    │   ├── BadSymbol
    │   ├── InvalidAddress
    │   └── DataIntegrityError
    └── NetworkError
        ├── ExchangeNotAvailable
        └── RequestTimeout

Only AddressPending and ExchangeNotAvailable are retryable.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Semantic error kinds surfaced to callers."""

    EXCHANGE_ERROR = "ExchangeError"
    AUTHENTICATION_ERROR = "AuthenticationError"
    PERMISSION_DENIED = "PermissionDenied"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    INVALID_ORDER = "InvalidOrder"
    ORDER_NOT_FOUND = "OrderNotFound"
    ADDRESS_PENDING = "AddressPending"
    EXCHANGE_NOT_AVAILABLE = "ExchangeNotAvailable"
    NETWORK_ERROR = "NetworkError"


class BaseError(Exception):
    """
    Root of the adapter error hierarchy.

    Attributes:
        message: Human-readable description.
        response: Parsed upstream body that triggered the error, if any.
    """

    kind: ErrorKind = ErrorKind.EXCHANGE_ERROR
    retryable: bool = False

    def __init__(self, message: str, response: Optional[Any] = None):
        self.message = message
        self.response = response
        super().__init__(message)


class ExchangeError(BaseError):
    """Generic upstream failure."""

    kind = ErrorKind.EXCHANGE_ERROR


class AuthenticationError(ExchangeError):
    """Missing credentials, bad signature or rejected account credentials."""

    kind = ErrorKind.AUTHENTICATION_ERROR


class PermissionDenied(AuthenticationError):
    """IP or account restriction."""

    kind = ErrorKind.PERMISSION_DENIED


class InsufficientFunds(ExchangeError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class InvalidOrder(ExchangeError):
    """Quantity or price out of bounds, or a required order field is missing."""

    kind = ErrorKind.INVALID_ORDER


class OrderNotFound(InvalidOrder):
    kind = ErrorKind.ORDER_NOT_FOUND


class AddressPending(ExchangeError):
    """Deposit address is still being generated; retry later."""

    kind = ErrorKind.ADDRESS_PENDING
    retryable = True


class BadSymbol(ExchangeError):
    """Symbol or market id is not present in the market registry."""


class InvalidAddress(ExchangeError):
    """Withdrawal or deposit address failed local validation."""


class DataIntegrityError(ExchangeError):
    """Upstream data violates an ordering or consistency guarantee."""


class NetworkError(BaseError):
    """Transport-level failure: unreachable host, broken or malformed reply."""

    kind = ErrorKind.NETWORK_ERROR


class ExchangeNotAvailable(NetworkError):
    """Upstream is under maintenance or refusing service."""

    kind = ErrorKind.EXCHANGE_NOT_AVAILABLE
    retryable = True


class RequestTimeout(NetworkError):
    pass


__all__ = [
    "ErrorKind",
    "BaseError",
    "ExchangeError",
    "AuthenticationError",
    "PermissionDenied",
    "InsufficientFunds",
    "InvalidOrder",
    "OrderNotFound",
    "AddressPending",
    "BadSymbol",
    "InvalidAddress",
    "DataIntegrityError",
    "NetworkError",
    "ExchangeNotAvailable",
    "RequestTimeout",
]
