"""
CCXT Pro order book source.

Wraps `watch_order_book` of any ccxt.pro exchange and hands out immutable,
depth-ordered ladders. ccxt keeps its own book in sync with deltas and
mutates it in place, so every snapshot is copied before it leaves here.
"""

import logging
import time
from typing import Any, Dict, Optional

import ccxt.pro as ccxtpro

from core.events import EventType, OrderBookEvent
from core.exceptions import ConfigurationError, FeedError
from core.interfaces import BookSource
from decision.aggregator import to_ladder


def create_exchange(exchange_id: str, config: Optional[Dict[str, Any]] = None):
    """Instantiate a ccxt.pro exchange by id (e.g. 'binance')."""
    exchange_class = getattr(ccxtpro, exchange_id, None)
    if exchange_class is None:
        raise ConfigurationError(f"Unknown ccxt exchange '{exchange_id}'", {"exchange": exchange_id})
    return exchange_class({"enableRateLimit": True, **(config or {})})


class CCXTBookSource(BookSource):
    """
    Usage:
        source = CCXTBookSource("binance", "SOL/USDT")
        await source.connect()
        event = await source.watch_book()
        await source.close()
    """

    def __init__(self, exchange_id: str, symbol: str, limit: int = 100, exchange=None):
        self.exchange_id = exchange_id
        self._symbol = symbol
        self.limit = limit
        self.exchange = exchange
        self.logger = logging.getLogger(f"CCXTBookSource.{exchange_id}")

    @property
    def symbol(self) -> str:
        return self._symbol

    async def connect(self) -> None:
        if self.exchange is None:
            self.exchange = create_exchange(self.exchange_id)
        self.logger.info(f"🔌 Loading {self.exchange_id} markets...")
        markets = await self.exchange.load_markets()
        if self._symbol not in markets:
            raise ConfigurationError(
                f"Symbol {self._symbol} not listed on {self.exchange_id}",
                {"exchange": self.exchange_id, "symbol": self._symbol},
            )

    async def close(self) -> None:
        if self.exchange is not None:
            await self.exchange.close()

    async def watch_book(self) -> OrderBookEvent:
        if self.exchange is None:
            raise FeedError(f"{self.exchange_id} source not connected", {"symbol": self._symbol})

        ob = await self.exchange.watch_order_book(self._symbol, self.limit)
        ts_ms = ob.get("timestamp")
        return OrderBookEvent(
            type=EventType.ORDER_BOOK,
            timestamp=ts_ms / 1000 if ts_ms else time.time(),
            symbol=self._symbol,
            bids=to_ladder(ob.get("bids", [])),
            asks=to_ladder(ob.get("asks", [])),
        )
