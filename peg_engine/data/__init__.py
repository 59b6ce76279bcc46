"""Collaborator interfaces."""

from peg_engine.data.interfaces import (
    AdjustmentSink,
    InMemoryAdjustmentSink,
    PriceFeed,
    StaticPriceFeed,
)

__all__ = [
    "AdjustmentSink",
    "InMemoryAdjustmentSink",
    "PriceFeed",
    "StaticPriceFeed",
]
