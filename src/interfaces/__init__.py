"""
Abstract interfaces for exchange integrations.

The key interface is ExchangeAdapter, which defines the contract for
exchange-specific REST implementations (UEX).

Example:
    >>> from src.interfaces import ExchangeAdapter
    >>> class UexAdapter(ExchangeAdapter):
    ...     @property
    ...     def exchange_name(self) -> str:
    ...         return "uex"
    ...     # ... implement other abstract methods

Modules:
    exchange_adapter: ExchangeAdapter ABC for exchange integrations
"""

from src.interfaces.exchange_adapter import ExchangeAdapter

__all__: list[str] = [
    "ExchangeAdapter",
]
