import asyncio

import pytest

from core.clock import Clock
from core.interfaces import TimeIterator


class MockIterator(TimeIterator):
    def __init__(self, name="Mock", delay=0.0):
        self._name = name
        self.delay = delay
        self.tick_count = 0
        self.last_timestamp = 0
        self.started = False
        self.stopped = False
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def name(self) -> str:
        return self._name

    async def tick(self, timestamp: float) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            self.tick_count += 1
            self.last_timestamp = timestamp
        finally:
            self.in_flight -= 1

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True


@pytest.mark.asyncio
async def test_clock_ticking():
    clock = Clock(tick_size_seconds=0.1)  # Fast tick for testing
    iterator = MockIterator()
    clock.add_iterator(iterator)

    await clock.start()

    # Let it run for 0.45s (Should get roughly 4 ticks depending on alignment)
    await asyncio.sleep(0.45)

    await clock.stop()

    assert iterator.tick_count >= 3
    assert iterator.last_timestamp > 0
    assert clock.tick_count == iterator.tick_count


@pytest.mark.asyncio
async def test_clock_error_isolation():
    """Ensure one failing child doesn't stop the clock."""

    class FailingIterator(TimeIterator):
        @property
        def name(self):
            return "Failer"

        async def tick(self, ts):
            raise ValueError("Crash!")

        async def start(self):
            pass

        async def stop(self):
            pass

    clock = Clock(tick_size_seconds=0.1)
    failer = FailingIterator()
    good = MockIterator("Good")

    clock.add_iterator(failer)
    clock.add_iterator(good)

    await clock.start()
    await asyncio.sleep(0.45)
    await clock.stop()

    assert good.tick_count >= 3  # The good one should still receive ticks


@pytest.mark.asyncio
async def test_tick_on_start_fires_immediately():
    clock = Clock(tick_size_seconds=3600.0, tick_on_start=True)
    iterator = MockIterator()
    clock.add_iterator(iterator)

    await clock.start()
    await asyncio.sleep(0.05)
    await clock.stop()

    assert iterator.tick_count == 1


@pytest.mark.asyncio
async def test_slow_ticks_never_overlap():
    clock = Clock(tick_size_seconds=0.05, tick_on_start=True)
    slow = MockIterator("Slow", delay=0.12)
    clock.add_iterator(slow)

    await clock.start()
    await asyncio.sleep(0.5)
    await clock.stop()

    assert slow.tick_count >= 2
    assert slow.max_in_flight == 1


@pytest.mark.asyncio
async def test_lifecycle_starts_and_stops_children():
    clock = Clock(tick_size_seconds=3600.0)
    iterator = MockIterator()
    clock.add_iterator(iterator)
    clock.add_iterator(iterator)  # duplicate is ignored

    await clock.start()
    assert clock.running
    assert iterator.started

    await clock.stop()
    assert not clock.running
    assert iterator.stopped
    assert iterator.tick_count == 0


def test_invalid_tick_size():
    with pytest.raises(ValueError):
        Clock(tick_size_seconds=0)
