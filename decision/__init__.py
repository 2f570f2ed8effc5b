"""
Decision Module

Turns order books into prices (depth-weighted aggregation) and prices into
trading verdicts (EXECUTE/SKIP), see decision.engine.

It acts as the 'brain' of the seller; it never talks to a venue.
"""

from .aggregator import PriceLevel, WeightedResult, aggregate, mid_price

__all__ = ["PriceLevel", "WeightedResult", "aggregate", "mid_price"]
