from abc import ABC, abstractmethod
from typing import Any, Dict

from core.events import OrderBookEvent


class TimeIterator(ABC):
    """
    Interface for components that need to respond to time ticks.
    Used by the central Clock to drive execution.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the component for logging/debugging."""
        pass

    @abstractmethod
    async def tick(self, timestamp: float) -> None:
        """
        Called exactly once per clock tick.

        Args:
            timestamp: The standardized timestamp of the current tick.
        """
        pass

    @abstractmethod
    async def start(self) -> None:
        """Start the component (and its own internal tasks if any)."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Stop the component."""
        pass


class BookSource(ABC):
    """
    Push-style order book source for one instrument.

    Implementations must yield depth-ordered ladders; book reconstruction
    from raw deltas happens inside the source.
    """

    @property
    @abstractmethod
    def symbol(self) -> str:
        pass

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def watch_book(self) -> OrderBookEvent:
        """Wait for and return the next order book snapshot."""
        pass


class ExecutionGateway(ABC):
    """
    Submits decided sells downstream. Owns no pricing logic.

    submit() raises GatewayError (or any exception from the venue) on failure.
    """

    @abstractmethod
    async def submit(self, price: float, size: float) -> Dict[str, Any]:
        pass
