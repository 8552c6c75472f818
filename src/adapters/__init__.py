"""
Exchange adapters.

This module contains the REST client implementations for each supported
exchange. All adapters implement the ExchangeAdapter interface.

Supported Exchanges:
    - UEX (spot)
"""

from src.adapters.uex import UexAdapter

__all__: list[str] = ["UexAdapter"]
