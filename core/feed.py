"""
Data Feed Layer for the depth seller.
Runs one supervised subscription task per feed and folds every snapshot into
that feed's FeedState.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from core.events import OrderBookEvent
from core.feed_state import FeedState
from core.interfaces import BookSource
from core.observability.metrics import record_feed_error

logger = logging.getLogger(__name__)


class FeedSide(Enum):
    MID = "mid"  # weighted mid of bids and asks (reference feed)
    BIDS = "bids"  # weighted bid only (executable feed, sell signal)


class FeedSubscription:
    """
    Long-lived subscription of one BookSource into one FeedState.

    - Updates of this feed are applied strictly in arrival order.
    - Source errors are logged and retried with capped exponential backoff;
      the loop never dies on a transient failure.
    - stop() sets the stop signal, which is honored between iterations and
      during backoff, then cancels any pending wait.
    """

    def __init__(
        self,
        source: BookSource,
        state: FeedState,
        depth: float,
        side: FeedSide = FeedSide.BIDS,
        backoff_max: float = 60.0,
    ):
        if depth <= 0:
            raise ValueError(f"Invalid depth: {depth} (must be > 0)")
        self.source = source
        self.state = state
        self.depth = depth
        self.side = side
        self.backoff_max = backoff_max
        self.updates = 0
        self.consecutive_failures = 0
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def name(self) -> str:
        return self.state.name

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Connect the source and start the subscription task."""
        if self.running:
            return
        logger.info(f"📡 Subscribing to {self.name} orderbook: {self.source.symbol}")
        await self.source.connect()
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name=f"feed_{self.name}")

    async def stop(self):
        """Signal the loop to stop, wait for it and close the source."""
        self._stop_event.set()
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        await self.source.close()
        logger.info(f"🔌 {self.name} feed stopped after {self.updates} updates")

    def apply(self, event: OrderBookEvent):
        """Fold one snapshot into the FeedState. Synchronous, no await."""
        if self.side is FeedSide.MID:
            self.state.on_book(event.bids, event.asks, self.depth)
        else:
            self.state.on_update(event.bids, self.depth)
        self.updates += 1

    async def _run(self):
        while not self._stop_event.is_set():
            try:
                event = await self.source.watch_book()
                if self._stop_event.is_set():
                    break
                self.apply(event)
                self.consecutive_failures = 0

            except asyncio.CancelledError:
                logger.info(f"📡 {self.name} stream cancelled")
                raise
            except Exception as e:
                self.consecutive_failures += 1
                record_feed_error(self.name)
                backoff = min(2**self.consecutive_failures, self.backoff_max)
                logger.error(
                    f"❌ Error in {self.name} stream for {self.source.symbol} "
                    f"(consecutive failures: {self.consecutive_failures}): {e}"
                )
                logger.info(f"⏳ Backing off for {backoff}s before retry")
                if await self._wait_for_stop(backoff):
                    break

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Sleep up to `timeout`, returning True early if stop was requested."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False
