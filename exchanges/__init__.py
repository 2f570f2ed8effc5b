"""
Venue integrations: order book sources and execution gateways (ccxt based).
"""

from .ccxt_source import CCXTBookSource, create_exchange
from .gateways import CCXTExecutionGateway, PaperExecutionGateway, build_gateway

__all__ = [
    "CCXTBookSource",
    "create_exchange",
    "CCXTExecutionGateway",
    "PaperExecutionGateway",
    "build_gateway",
]
