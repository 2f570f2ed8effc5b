"""
Event definitions passed between feeds, the decision engine and execution.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple

from decision.aggregator import PriceLevel


class EventType(Enum):
    ORDER_BOOK = auto()
    EXECUTION = auto()


@dataclass
class Event:
    type: EventType
    timestamp: float


@dataclass
class OrderBookEvent(Event):
    """Depth-ordered snapshot of one instrument as delivered by a BookSource."""

    symbol: str
    bids: Tuple[PriceLevel, ...] = ()  # best (highest) first
    asks: Tuple[PriceLevel, ...] = ()  # best (lowest) first

    def __post_init__(self):
        self.type = EventType.ORDER_BOOK


@dataclass
class ExecutionEvent(Event):
    """Outcome of one gateway submission."""

    sequence: int
    price: float
    size: float
    success: bool
    elapsed_ms: float
    reason: Optional[str] = None
    order: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.type = EventType.EXECUTION
