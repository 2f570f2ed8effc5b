"""
Execution Layer for the depth seller.
Takes EXECUTE decisions and submits them through an ExecutionGateway.

A failed submission is logged with its elapsed time and counted; it is never
retried here and never propagates, so the next scheduled tick runs as usual.
"""

import asyncio
import logging
import threading
import time
from typing import Callable, List, Optional

import structlog

from core.events import EventType, ExecutionEvent
from core.interfaces import ExecutionGateway
from core.observability.metrics import record_execution
from decision.engine import TradeDecision

logger = logging.getLogger(__name__)
# One structured record per attempt, carries the bound run context (mode, symbols)
audit_log = structlog.get_logger("execution.audit")


def date_str(ts: float) -> str:
    """Local-time ISO timestamp with millisecond precision."""
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime(ts)) + f".{int(ts * 1000) % 1000:03d}"


class SequenceCounter:
    """
    Process-wide execution counter used for log correlation only.
    Starts at 0 on every process start; increments are race-safe.
    """

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def next(self) -> int:
        """Return the current sequence number and advance it."""
        with self._lock:
            current = self._value
            self._value += 1
            return current


class ExecutionDispatcher:
    """
    Thin orchestration over an ExecutionGateway.

    Example:
        dispatcher = ExecutionDispatcher(PaperExecutionGateway("SOL/USDC"))
        outcome = await dispatcher.dispatch(decision)
    """

    def __init__(
        self,
        gateway: ExecutionGateway,
        counter: Optional[SequenceCounter] = None,
        time_fn: Callable[[], float] = time.time,
    ):
        self.gateway = gateway
        self.counter = counter or SequenceCounter()
        self._time = time_fn
        self.history: List[ExecutionEvent] = []
        self.history_limit = 100

    async def dispatch(self, decision: TradeDecision) -> Optional[ExecutionEvent]:
        """
        Submit an EXECUTE decision. SKIP decisions are ignored.

        Returns:
            ExecutionEvent describing the attempt, or None for SKIP.
        """
        if not decision.should_execute:
            return None

        seq = self.counter.next()
        t0 = self._time()
        logger.info(
            f"{date_str(t0)}: {seq}: 🚀 start of sale of {decision.size} @ {decision.price}, favourable conditions: "
            f"referencePrice {decision.reference.value}, executablePrice: {decision.executable.value}"
        )

        try:
            order = await self.gateway.submit(decision.price, decision.size)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            t1 = self._time()
            elapsed_ms = (t1 - t0) * 1000
            logger.error(f"{date_str(t1)}: {seq}: ❌ transaction failed after {elapsed_ms:.0f}ms! {e}", exc_info=True)
            record_execution("failure", t1 - t0, seq)
            return self._remember(
                ExecutionEvent(
                    type=EventType.EXECUTION,
                    timestamp=t1,
                    sequence=seq,
                    price=decision.price,
                    size=decision.size,
                    success=False,
                    elapsed_ms=elapsed_ms,
                    reason=f"{type(e).__name__}: {e}",
                )
            )

        t1 = self._time()
        elapsed_ms = (t1 - t0) * 1000
        logger.info(
            f"{date_str(t1)}: {seq}: ✅ sell of {decision.size} @ {decision.price} performed in {elapsed_ms:.0f}ms"
        )
        record_execution("success", t1 - t0, seq)
        return self._remember(
            ExecutionEvent(
                type=EventType.EXECUTION,
                timestamp=t1,
                sequence=seq,
                price=decision.price,
                size=decision.size,
                success=True,
                elapsed_ms=elapsed_ms,
                order=order or {},
            )
        )

    def _remember(self, event: ExecutionEvent) -> ExecutionEvent:
        audit_log.info(
            "execution_attempt",
            sequence=event.sequence,
            success=event.success,
            price=event.price,
            size=event.size,
            elapsed_ms=round(event.elapsed_ms, 1),
            reason=event.reason,
            order_id=event.order.get("id"),
        )
        self.history.append(event)
        if len(self.history) > self.history_limit:
            del self.history[0]
        return event
