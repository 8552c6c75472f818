"""
UEX Exchange Adapter.

An async REST adapter that exposes the UEX spot exchange through canonical
symbols, normalized Decimal-based models and a shared error taxonomy.

This package provides:
- Data models for markets, tickers, trades, order books, candles, orders,
  balances and funding
- The abstract ExchangeAdapter interface and its UEX implementation
- Configuration management
- Structured logging setup
"""

__version__ = "0.1.0"
