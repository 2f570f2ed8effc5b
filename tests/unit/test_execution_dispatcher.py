"""
Unit tests for ExecutionDispatcher and SequenceCounter.
"""

import asyncio
import threading
from unittest.mock import AsyncMock

import pytest

from core.exceptions import GatewayError
from core.execution import ExecutionDispatcher, SequenceCounter, date_str
from core.feed_state import FeedSnapshot
from decision.engine import Action, TradeDecision
from exchanges.gateways import PaperExecutionGateway


def execute_decision(price=94.8, size=2.0):
    return TradeDecision(
        action=Action.EXECUTE,
        size=size,
        price=price,
        reference=FeedSnapshot(value=100.0),
        executable=FeedSnapshot(value=95.0, aux_value=price),
        divergence=0.95,
    )


@pytest.mark.asyncio
async def test_successful_dispatch():
    gateway = PaperExecutionGateway("SOL/USD")
    dispatcher = ExecutionDispatcher(gateway)

    event = await dispatcher.dispatch(execute_decision())

    assert event.success
    assert event.sequence == 0
    assert event.price == 94.8
    assert event.size == 2.0
    assert event.order["id"] == "PAPER_1"
    assert event.elapsed_ms >= 0
    assert dispatcher.counter.value == 1
    assert gateway.total_sold == 2.0


@pytest.mark.asyncio
async def test_skip_is_ignored():
    gateway = AsyncMock()
    dispatcher = ExecutionDispatcher(gateway)

    event = await dispatcher.dispatch(TradeDecision(action=Action.SKIP, size=2.0, reason_codes=frozenset({"floor"})))

    assert event is None
    gateway.submit.assert_not_called()
    assert dispatcher.counter.value == 0


@pytest.mark.asyncio
async def test_failure_is_contained_and_still_counted():
    gateway = AsyncMock()
    gateway.submit.side_effect = GatewayError("insufficient funds")
    dispatcher = ExecutionDispatcher(gateway)

    failed = await dispatcher.dispatch(execute_decision())

    assert not failed.success
    assert "GatewayError" in failed.reason
    assert "insufficient funds" in failed.reason
    assert failed.sequence == 0

    # Next attempt gets the next sequence number
    gateway.submit.side_effect = None
    gateway.submit.return_value = {"id": "42"}
    ok = await dispatcher.dispatch(execute_decision())

    assert ok.success
    assert ok.sequence == 1
    assert ok.order == {"id": "42"}
    assert dispatcher.counter.value == 2
    assert [e.success for e in dispatcher.history] == [False, True]


@pytest.mark.asyncio
async def test_unexpected_exception_is_contained():
    gateway = AsyncMock()
    gateway.submit.side_effect = RuntimeError("socket closed")
    dispatcher = ExecutionDispatcher(gateway)

    event = await dispatcher.dispatch(execute_decision())

    assert not event.success
    assert event.reason == "RuntimeError: socket closed"


@pytest.mark.asyncio
async def test_cancellation_propagates():
    gateway = AsyncMock()
    gateway.submit.side_effect = asyncio.CancelledError()
    dispatcher = ExecutionDispatcher(gateway)

    with pytest.raises(asyncio.CancelledError):
        await dispatcher.dispatch(execute_decision())


@pytest.mark.asyncio
async def test_elapsed_time_measured(fake_time):
    gateway = AsyncMock()

    async def slow_submit(price, size):
        fake_time.advance(0.25)
        return {}

    gateway.submit.side_effect = slow_submit
    dispatcher = ExecutionDispatcher(gateway, time_fn=fake_time)

    event = await dispatcher.dispatch(execute_decision())

    assert event.elapsed_ms == pytest.approx(250.0)
    assert event.timestamp == fake_time.now


@pytest.mark.asyncio
async def test_history_is_bounded():
    dispatcher = ExecutionDispatcher(PaperExecutionGateway("SOL/USD"))
    dispatcher.history_limit = 3

    for _ in range(5):
        await dispatcher.dispatch(execute_decision())

    assert [e.sequence for e in dispatcher.history] == [2, 3, 4]


class TestSequenceCounter:
    def test_returns_then_increments(self):
        counter = SequenceCounter()

        assert counter.next() == 0
        assert counter.next() == 1
        assert counter.value == 2

    def test_concurrent_increments_are_unique(self):
        counter = SequenceCounter()
        seen = []
        lock = threading.Lock()

        def worker():
            for _ in range(500):
                n = counter.next()
                with lock:
                    seen.append(n)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.value == 4000
        assert sorted(seen) == list(range(4000))


def test_date_str_has_milliseconds():
    assert date_str(1_700_000_000.5).endswith(".500")
