import asyncio
import logging
import time
from typing import List, Optional

from core.interfaces import TimeIterator


class Clock:
    """
    Fixed-cadence scheduler for the seller.

    - Ticks once every `tick_size_seconds`, aligned to multiples of the
      interval (a 10s clock fires at :00, :10, :20 ...).
    - Drives registered TimeIterators sequentially, so two evaluations never
      overlap.
    - A failing iterator is logged and never stops the clock.
    """

    def __init__(self, tick_size_seconds: float = 1.0, tick_on_start: bool = False):
        if tick_size_seconds <= 0:
            raise ValueError(f"Invalid tick size: {tick_size_seconds} (must be > 0)")
        self.tick_size = tick_size_seconds
        self.tick_on_start = tick_on_start
        self.logger = logging.getLogger("Clock")
        self.tick_count = 0
        self._children: List[TimeIterator] = []
        self._started = False
        self._main_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._started

    def add_iterator(self, iterator: TimeIterator):
        """Register a component to receive ticks."""
        if iterator not in self._children:
            self._children.append(iterator)
            self.logger.info(f"➕ Registered scheduled component: {iterator.name}")

    def remove_iterator(self, iterator: TimeIterator):
        if iterator in self._children:
            self._children.remove(iterator)

    async def start(self):
        """Start the clock loop."""
        if self._started:
            return

        self._started = True
        self.logger.info(f"🕒 Clock started (Interval: {self.tick_size}s)")

        for child in self._children:
            await child.start()

        self._main_task = asyncio.create_task(self._run())

    async def stop(self):
        """Stop the clock loop. An in-flight tick is cancelled between awaits."""
        if not self._started:
            return

        self._started = False
        if self._main_task:
            self._main_task.cancel()
            try:
                await self._main_task
            except asyncio.CancelledError:
                pass
            self._main_task = None

        for child in self._children:
            await child.stop()

        self.logger.info("🛑 Clock stopped")

    def _sleep_to_boundary(self) -> float:
        now = time.time()
        return max(0.0, self.tick_size - (now % self.tick_size))

    async def _run(self):
        """Main scheduling loop with drift correction."""
        if not self.tick_on_start:
            await asyncio.sleep(self._sleep_to_boundary())

        while self._started:
            try:
                started_at = time.time()
                await self._process_tick(started_at)

                elapsed = time.time() - started_at
                if elapsed > self.tick_size:
                    self.logger.warning(
                        f"⚠️ Tick took {elapsed:.2f}s (> {self.tick_size}s interval), skipping missed ticks"
                    )

                await asyncio.sleep(self._sleep_to_boundary())

            except asyncio.CancelledError:
                break
            except Exception as e:
                self.logger.error(f"💥 Clock Error: {e}", exc_info=True)
                await asyncio.sleep(self.tick_size)

    async def _process_tick(self, timestamp: float):
        """Distribute tick to all children, in registration order."""
        self.tick_count += 1
        for child in self._children:
            try:
                await child.tick(timestamp)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Do NOT let one child crash the clock
                self.logger.error(f"⚠️ Error in {child.name}.tick(): {e}", exc_info=True)
