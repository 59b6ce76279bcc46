"""Stablecoin engine package."""

from peg_engine.stablecoin.engine import StablecoinEngine, SupplyState

__all__ = [
    "StablecoinEngine",
    "SupplyState",
]
