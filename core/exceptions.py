"""
Custom exceptions for the depth seller.

Insufficient liquidity and stale/missing feeds are NOT exceptions: they are
absorbed into SKIP decisions as reason codes. Only configuration errors are
fatal.
"""

from typing import Any, Dict, Optional


class SellerError(Exception):
    """Base exception for all seller errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(SellerError):
    """Raised when configuration is invalid or missing. Fatal at startup."""

    pass


class FeedError(SellerError):
    """Raised when a market data source fails."""

    pass


class TradingError(SellerError):
    """Raised when trading operations fail."""

    pass


class GatewayError(TradingError):
    """Raised when an execution gateway rejects or fails a submission."""

    pass


def create_configuration_error(field: str, value: Any, reason: str) -> ConfigurationError:
    """Create a configuration error with standardized format."""
    return ConfigurationError(f"Invalid configuration: {field}", {"field": field, "value": value, "reason": reason})
