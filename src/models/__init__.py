"""
Canonical Pydantic data models.

This module exports the vendor-neutral records every normalizer produces.
All financial values use Decimal; timestamps are epoch milliseconds.

Modules:
    market: Market (instrument) definitions
    ticker: Ticker, trade, side and fee records
    orderbook: Order book snapshots and price levels
    ohlcv: OHLCV candles
    order: Orders
    balance: Account balances
    funding: Deposit addresses and withdrawals

Example:
    >>> from src.models import OrderBook, PriceLevel, Ticker
"""

# Balance models
from src.models.balance import BalanceEntry, BalanceSnapshot

# Funding models
from src.models.funding import DepositAddress, Withdrawal

# Market models
from src.models.market import Market

# OHLCV models
from src.models.ohlcv import Candle

# Order models
from src.models.order import Order, OrderType

# Order book models
from src.models.orderbook import OrderBook, PriceLevel

# Ticker models
from src.models.ticker import Fee, Ticker, Trade, TradeSide

__all__ = [
    # Market
    "Market",
    # Ticker
    "Ticker",
    "Trade",
    "TradeSide",
    "Fee",
    # Order book
    "PriceLevel",
    "OrderBook",
    # OHLCV
    "Candle",
    # Orders
    "Order",
    "OrderType",
    # Balances
    "BalanceEntry",
    "BalanceSnapshot",
    # Funding
    "DepositAddress",
    "Withdrawal",
]
