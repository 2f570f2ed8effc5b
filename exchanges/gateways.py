"""
Execution gateways.

- CCXTExecutionGateway: limit sell on the executable venue through ccxt
- PaperExecutionGateway: in-memory fills for paper mode and tests

Neither retries. A failure is raised as GatewayError and handled by the
ExecutionDispatcher.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import ccxt

from core.exceptions import GatewayError
from core.interfaces import ExecutionGateway
from core.settings import MarketAccount
from exchanges.ccxt_source import create_exchange


class CCXTExecutionGateway(ExecutionGateway):
    """
    Places one limit sell per submission.

    The MarketAccount is passed alongside the exchange handle; account
    fields are forwarded as order params, never set on the ccxt object.
    """

    def __init__(self, exchange_id: str, symbol: str, account: MarketAccount, exchange=None):
        self.exchange_id = exchange_id
        self.symbol = symbol
        self.account = account
        self.exchange = exchange
        self.logger = logging.getLogger("CCXTExecutionGateway")

    async def connect(self) -> None:
        if self.exchange is None:
            self.exchange = create_exchange(
                self.exchange_id, {"apiKey": self.account.api_key, "secret": self.account.secret}
            )
        await self.exchange.load_markets()
        self.logger.info(f"🏦 Execution gateway ready on {self.exchange_id} {self.symbol}")

    async def close(self) -> None:
        if self.exchange is not None:
            await self.exchange.close()

    async def submit(self, price: float, size: float) -> Dict[str, Any]:
        if self.exchange is None:
            raise GatewayError("Execution gateway not connected", {"exchange": self.exchange_id})

        try:
            amount = float(self.exchange.amount_to_precision(self.symbol, size))
            limit_price = float(self.exchange.price_to_precision(self.symbol, price))
            order = await self.exchange.create_order(
                self.symbol, "limit", "sell", amount, limit_price, self.account.order_params()
            )
        except ccxt.BaseError as e:
            raise GatewayError(
                f"Sell rejected by {self.exchange_id}: {e}",
                {"symbol": self.symbol, "price": price, "size": size, "error": type(e).__name__},
            ) from e

        self.logger.info(f"📤 Order {order.get('id')} placed: sell {amount} {self.symbol} @ {limit_price}")
        return order


class PaperExecutionGateway(ExecutionGateway):
    """
    Simulated venue: every submission fills immediately at the limit price.

    Args:
        symbol: Instrument label used in the fake order
        latency: Seconds to wait before acknowledging (simulates round trip)
    """

    def __init__(self, symbol: str, latency: float = 0.0):
        self.symbol = symbol
        self.latency = latency
        self.fills: List[Dict[str, Any]] = []
        self.fills_limit = 100
        self._order_seq = 0
        self._total_sold = 0.0
        self.logger = logging.getLogger("PaperGateway")

    @property
    def total_sold(self) -> float:
        """Cumulative size filled since start, including fills trimmed from `fills`."""
        return self._total_sold

    async def submit(self, price: float, size: float) -> Dict[str, Any]:
        if price is None or price <= 0:
            raise GatewayError("Invalid sell price", {"price": price})
        if size <= 0:
            raise GatewayError("Invalid sell size", {"size": size})

        if self.latency:
            await asyncio.sleep(self.latency)

        self._order_seq += 1
        order = {
            "id": f"PAPER_{self._order_seq}",
            "symbol": self.symbol,
            "type": "limit",
            "side": "sell",
            "price": price,
            "amount": size,
            "filled": size,
            "status": "closed",
            "timestamp": int(time.time() * 1000),
        }
        self.fills.append(order)
        if len(self.fills) > self.fills_limit:
            del self.fills[0]
        self._total_sold += size
        self.logger.info(f"🧾 Paper fill {order['id']}: sell {size} {self.symbol} @ {price}")
        return order


def build_gateway(mode: str, exchange_id: str, symbol: str, account: Optional[MarketAccount] = None):
    """Gateway for the configured mode ('paper' or 'live')."""
    if mode == "live":
        return CCXTExecutionGateway(exchange_id, symbol, account or MarketAccount())
    return PaperExecutionGateway(symbol)
