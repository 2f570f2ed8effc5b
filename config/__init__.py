"""
====================================================
⚙️ MODULAR CONFIGURATION — DEPTH SELLER
====================================================

Usage:
    from config import system, trading, exchange

    mode = system.MODE
    amount = trading.TRADE_AMOUNT
    symbol = exchange.EXECUTABLE_SYMBOL
"""

from . import exchange, system, trading

__all__ = [
    "system",
    "trading",
    "exchange",
]
