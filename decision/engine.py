"""
Decision Engine for the depth seller.
Reads both feed snapshots and decides SKIP / EXECUTE for one sell.

Gates (every applicable reason is recorded, not only the first):
1. Reference value present
2. Executable value present
3. Executable fill price (aux value) present
4. Executable value >= floor threshold
5. divergence = executable / reference >= allowed divergence
   (only with UTILIZE_DIVERGENCE; the boundary value passes)
6. Optional max staleness per feed (disabled by default)

The engine never submits orders. It returns a decision for the caller.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, FrozenSet, Optional

from core.feed_state import FeedSnapshot, FeedState
from core.observability.metrics import record_decision

logger = logging.getLogger(__name__)

# Reason codes
REFERENCE_ABSENT = "reference-feed-absent"
EXECUTABLE_ABSENT = "executable-feed-absent"
EXECUTION_PRICE_ABSENT = "execution-price-absent"
BELOW_FLOOR = "floor"
DIVERGENCE = "divergence"
REFERENCE_STALE = "reference-feed-stale"
EXECUTABLE_STALE = "executable-feed-stale"


class Strategy(Enum):
    UTILIZE_DIVERGENCE = "utilize-divergence"
    DISREGARD_DIVERGENCE = "disregard-divergence"


class Action(Enum):
    SKIP = "skip"
    EXECUTE = "execute"


@dataclass(frozen=True)
class TradeDecision:
    action: Action
    size: float
    price: Optional[float] = None
    reason_codes: FrozenSet[str] = frozenset()
    # Audit context
    reference: FeedSnapshot = field(default_factory=FeedSnapshot)
    executable: FeedSnapshot = field(default_factory=FeedSnapshot)
    divergence: Optional[float] = None

    @property
    def should_execute(self) -> bool:
        return self.action is Action.EXECUTE


def compute_divergence(reference_value: Optional[float], executable_value: Optional[float]) -> Optional[float]:
    """executable / reference, None when either side is absent."""
    if reference_value is None or executable_value is None:
        return None
    return executable_value / reference_value


class DecisionEngine:
    """
    Stateless gate over two FeedStates. Each evaluate() call is computed fresh.

    Example:
        engine = DecisionEngine(reference_feed, executable_feed)
        decision = engine.evaluate(10.0, 0.9, 50.0, Strategy.UTILIZE_DIVERGENCE)
        if decision.should_execute:
            await dispatcher.dispatch(decision)
    """

    def __init__(
        self,
        reference: FeedState,
        executable: FeedState,
        max_staleness: Optional[float] = None,
        time_fn: Callable[[], float] = time.time,
    ):
        self.reference = reference
        self.executable = executable
        self.max_staleness = max_staleness
        self._time = time_fn

    def evaluate(
        self,
        size: float,
        allowed_divergence: float,
        floor_threshold: float,
        strategy: Strategy = Strategy.UTILIZE_DIVERGENCE,
    ) -> TradeDecision:
        self._validate(size, allowed_divergence, floor_threshold)

        reference = self.reference.snapshot()
        executable = self.executable.snapshot()
        divergence = compute_divergence(reference.value, executable.value)

        reasons = set()
        if reference.value is None:
            reasons.add(REFERENCE_ABSENT)
        if executable.value is None:
            reasons.add(EXECUTABLE_ABSENT)
        if executable.aux_value is None:
            reasons.add(EXECUTION_PRICE_ABSENT)
        if executable.value is not None and executable.value < floor_threshold:
            reasons.add(BELOW_FLOOR)
        if strategy is Strategy.UTILIZE_DIVERGENCE and divergence is not None and divergence < allowed_divergence:
            reasons.add(DIVERGENCE)

        if self.max_staleness is not None:
            now = self._time()
            if self.reference.is_stale(self.max_staleness, now):
                reasons.add(REFERENCE_STALE)
            if self.executable.is_stale(self.max_staleness, now):
                reasons.add(EXECUTABLE_STALE)

        if reasons:
            logger.info(
                f"⏭️ ...skipping trade due to unfavourable market conditions: {sorted(reasons)} | "
                f"referencePrice: {reference.value}, executablePrice: {executable.value}, "
                f"sellPrice: {executable.aux_value}, divergence: {divergence}, "
                f"allowedDivergence: {allowed_divergence}, floorThreshold: {floor_threshold}, "
                f"strategy: {strategy.value}"
            )
            record_decision(Action.SKIP.value, reasons, divergence)
            return TradeDecision(
                action=Action.SKIP,
                size=size,
                price=None,
                reason_codes=frozenset(reasons),
                reference=reference,
                executable=executable,
                divergence=divergence,
            )

        logger.info(
            f"✅ Favourable conditions: sell {size} @ {executable.aux_value} | "
            f"referencePrice: {reference.value}, executablePrice: {executable.value}, divergence: {divergence}"
        )
        record_decision(Action.EXECUTE.value, (), divergence)
        return TradeDecision(
            action=Action.EXECUTE,
            size=size,
            price=executable.aux_value,
            reference=reference,
            executable=executable,
            divergence=divergence,
        )

    @staticmethod
    def _validate(size: float, allowed_divergence: float, floor_threshold: float):
        if size <= 0:
            raise ValueError(f"Invalid size: {size} (must be > 0)")
        if not 0 < allowed_divergence <= 1:
            raise ValueError(f"Invalid allowed divergence: {allowed_divergence} (must be in (0, 1])")
        if floor_threshold <= 0:
            raise ValueError(f"Invalid floor threshold: {floor_threshold} (must be > 0)")
