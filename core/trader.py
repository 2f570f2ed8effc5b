"""
Periodic seller driven by the Clock.

On every tick: evaluate the gates with the startup policy, then hand any
EXECUTE decision to the dispatcher.
"""

import logging
from typing import Optional

from core.events import ExecutionEvent
from core.execution import ExecutionDispatcher
from core.interfaces import TimeIterator
from core.settings import TradingPolicy
from decision.engine import DecisionEngine, TradeDecision

logger = logging.getLogger(__name__)


class SellTrader(TimeIterator):
    def __init__(self, engine: DecisionEngine, dispatcher: ExecutionDispatcher, policy: TradingPolicy):
        self.engine = engine
        self.dispatcher = dispatcher
        self.policy = policy
        self.last_decision: Optional[TradeDecision] = None
        self.last_execution: Optional[ExecutionEvent] = None

    @property
    def name(self) -> str:
        return "SellTrader"

    async def start(self) -> None:
        logger.info(
            f"🚀 SellTrader armed | size: {self.policy.trade_amount}, "
            f"allowedDivergence: {self.policy.allowed_divergence}, floorThreshold: {self.policy.floor_threshold}, "
            f"strategy: {self.policy.strategy.value}"
        )

    async def stop(self) -> None:
        logger.info(f"🛑 SellTrader stopped after {self.dispatcher.counter.value} executions")

    async def tick(self, timestamp: float) -> None:
        decision = self.engine.evaluate(
            self.policy.trade_amount,
            self.policy.allowed_divergence,
            self.policy.floor_threshold,
            self.policy.strategy,
        )
        self.last_decision = decision
        if decision.should_execute:
            self.last_execution = await self.dispatcher.dispatch(decision)
