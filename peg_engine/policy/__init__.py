"""Monetary policy: adjustment calculation and rebalance scheduling."""

from peg_engine.policy.adjustment import (
    AdjustmentAction,
    Contract,
    Expand,
    Hold,
    SupplyAdjustment,
    calculate_supply_adjustment,
    min_contraction_units,
)
from peg_engine.policy.rebalance import RebalanceEvent, RebalanceScheduler

__all__ = [
    "AdjustmentAction",
    "Contract",
    "Expand",
    "Hold",
    "SupplyAdjustment",
    "calculate_supply_adjustment",
    "min_contraction_units",
    "RebalanceEvent",
    "RebalanceScheduler",
]
