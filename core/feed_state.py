"""
Per-feed price state.

Each FeedState is written only by its own feed's update path and read by the
decision engine through immutable snapshots. Updates are plain synchronous
methods, so on a single event loop two updates to the same FeedState can never
interleave, while the two feeds stay fully independent (no shared lock).
"""

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional

from core.observability.metrics import record_feed_update
from decision.aggregator import LevelLike, aggregate, mid_price

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedSnapshot:
    value: Optional[float] = None
    aux_value: Optional[float] = None
    last_updated_at: Optional[float] = None  # last time `value` changed
    last_received_at: Optional[float] = None  # last inbound update of any kind

    @property
    def present(self) -> bool:
        return self.value is not None

    def age(self, now: float) -> Optional[float]:
        """Seconds since the last inbound update, None if nothing arrived yet."""
        if self.last_received_at is None:
            return None
        return now - self.last_received_at


class FeedState:
    """
    Latest fused price of one feed with change detection.

    - Insufficient depth resets value (and aux value) to None, never keeps a
      stale price.
    - A sufficient update only commits when the weighted price differs from the
      current value (exact comparison).
    """

    def __init__(self, name: str, symbol: str = "", time_fn: Callable[[], float] = time.time):
        self.name = name
        self.symbol = symbol
        self._time = time_fn
        self._snapshot = FeedSnapshot()

    def snapshot(self) -> FeedSnapshot:
        """Latest committed snapshot. Non-blocking, never mutates state."""
        return self._snapshot

    def on_update(self, ladder: Iterable[LevelLike], depth: float) -> FeedSnapshot:
        """Apply a one-sided ladder (e.g. executable bids)."""
        result = aggregate(ladder, depth)
        if not result.sufficient:
            return self._mark_insufficient(f"totalSize: {result.total_size}")
        return self._commit(result.weighted_price, result.best_price)

    def on_book(self, bids: Iterable[LevelLike], asks: Iterable[LevelLike], depth: float) -> FeedSnapshot:
        """Apply both book sides; value is the weighted mid."""
        mid, bids_weighted, asks_weighted = mid_price(bids, asks, depth)
        if mid is None:
            return self._mark_insufficient(
                f"totalBidSize: {bids_weighted.total_size}, totalAskSize: {asks_weighted.total_size}"
            )
        return self._commit(mid, bids_weighted.best_price)

    def is_stale(self, max_age: Optional[float], now: Optional[float] = None) -> bool:
        """
        True when no update arrived within `max_age` seconds.
        A feed that never received anything is not stale, it is absent.
        """
        if max_age is None:
            return False
        age = self._snapshot.age(self._time() if now is None else now)
        return age is not None and age > max_age

    def _mark_insufficient(self, sizes: str) -> FeedSnapshot:
        now = self._time()
        self._snapshot = FeedSnapshot(
            value=None,
            aux_value=None,
            last_updated_at=self._snapshot.last_updated_at,
            last_received_at=now,
        )
        logger.info(f"📉 {self.name} {self.symbol} orderbook not deep enough, {sizes}")
        record_feed_update(self.name, "insufficient")
        return self._snapshot

    def _commit(self, value: float, aux_value: Optional[float]) -> FeedSnapshot:
        now = self._time()
        current = self._snapshot
        if current.value is not None and value == current.value:
            self._snapshot = replace(current, last_received_at=now)
            record_feed_update(self.name, "unchanged", value)
            return self._snapshot

        self._snapshot = FeedSnapshot(value=value, aux_value=aux_value, last_updated_at=now, last_received_at=now)
        logger.info(f"📈 {self.name} {self.symbol} weighted price: {value} (fill price: {aux_value})")
        record_feed_update(self.name, "changed", value)
        return self._snapshot
