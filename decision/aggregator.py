"""
Depth-Weighted Aggregator for the seller.
Collapses one side of an order book into a single size-weighted price.

Weighted price over depth D:
- Walk the ladder from the best level
- Take min(level size, remaining D) from each level
- Σ(price × taken) / Σ(taken) once Σ(taken) reaches D (within a relative
  tolerance, so decimal sizes summing to D count as covered)
- best_price is the LAST level touched (worst price needed to fill D)
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

LevelLike = Union["PriceLevel", Sequence[float]]

# Relative slack under which the requested depth counts as covered
COVERAGE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PriceLevel:
    """One rung of an order-book ladder."""

    price: float
    size: float

    @classmethod
    def from_raw(cls, level: LevelLike) -> "PriceLevel":
        """Accept a PriceLevel or a ccxt style [price, size, ...] entry."""
        if isinstance(level, PriceLevel):
            return level
        return cls(price=float(level[0]), size=float(level[1]))


@dataclass(frozen=True)
class WeightedResult:
    weighted_price: Optional[float]
    total_size: float
    best_price: Optional[float]

    @property
    def sufficient(self) -> bool:
        return self.weighted_price is not None


def to_ladder(levels: Iterable[LevelLike]) -> Tuple[PriceLevel, ...]:
    """Freeze raw levels into an immutable ladder (order preserved)."""
    return tuple(PriceLevel.from_raw(level) for level in levels)


def aggregate(ladder: Iterable[LevelLike], depth: float) -> WeightedResult:
    """
    Size-weighted price of the first `depth` units of a depth-ordered ladder.

    Args:
        ladder: Levels ordered best price first (bids descending, asks ascending)
        depth: Cumulative size to quote, must be > 0

    Returns:
        WeightedResult. When covered, total_size is `depth`. weighted_price is
        None when the ladder cannot cover `depth`; the consumed total_size and
        best_price are still reported.

    Raises:
        ValueError: If depth <= 0
    """
    if depth <= 0:
        raise ValueError(f"Invalid depth: {depth} (must be > 0)")

    # Decimal venue sizes do not sum exactly in binary floating point
    tolerance = depth * COVERAGE_TOLERANCE
    remaining = depth
    total_size = 0.0
    total_weighted = 0.0
    best_price: Optional[float] = None

    for raw in ladder:
        level = PriceLevel.from_raw(raw)
        taken = min(level.size, remaining)
        remaining -= taken
        total_size += taken
        total_weighted += level.price * taken
        best_price = level.price
        if remaining <= tolerance:
            break

    if remaining > tolerance:
        return WeightedResult(weighted_price=None, total_size=total_size, best_price=best_price)
    return WeightedResult(weighted_price=total_weighted / total_size, total_size=depth, best_price=best_price)


def mid_price(
    bids: Iterable[LevelLike], asks: Iterable[LevelLike], depth: float
) -> Tuple[Optional[float], WeightedResult, WeightedResult]:
    """
    Weighted mid of both book sides at the same depth.

    Returns:
        (mid or None, bids result, asks result)
    """
    bids_weighted = aggregate(bids, depth)
    asks_weighted = aggregate(asks, depth)
    if not (bids_weighted.sufficient and asks_weighted.sufficient):
        return None, bids_weighted, asks_weighted
    return (bids_weighted.weighted_price + asks_weighted.weighted_price) / 2, bids_weighted, asks_weighted

