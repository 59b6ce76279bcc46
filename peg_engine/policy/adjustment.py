"""Deviation / supply-adjustment calculation.

The outcome of a policy evaluation is a tagged variant: :class:`Expand`,
:class:`Contract` or :class:`Hold`. A ``Hold`` never carries an amount, so
"no action with a non-zero amount" cannot be represented.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from fractions import Fraction
from typing import Dict, Union

from peg_engine.config.stablecoin import StablecoinConfig
from peg_engine.utils.math import exact_ratio, from_minor_units


class AdjustmentAction(str, Enum):
    """Direction of a supply adjustment."""

    EXPAND = "expand"
    CONTRACT = "contract"
    NONE = "none"


@dataclass(frozen=True)
class _AdjustmentBase:
    new_supply: float
    reason: str
    target_price: float
    current_price: float  # average price the decision was based on
    deviation: float  # signed (avg - target) / target
    timestamp: datetime

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "action": self.action.value,
            "amount": self.amount,
            "new_supply": self.new_supply,
            "reason": self.reason,
            "target_price": self.target_price,
            "current_price": self.current_price,
            "deviation": self.deviation,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Expand(_AdjustmentBase):
    """Mint ``amount`` new tokens."""

    amount: float
    amount_units: int

    @property
    def action(self) -> AdjustmentAction:
        return AdjustmentAction.EXPAND


@dataclass(frozen=True)
class Contract(_AdjustmentBase):
    """Burn ``amount`` tokens."""

    amount: float
    amount_units: int

    @property
    def action(self) -> AdjustmentAction:
        return AdjustmentAction.CONTRACT


@dataclass(frozen=True)
class Hold(_AdjustmentBase):
    """Leave supply unchanged."""

    @property
    def action(self) -> AdjustmentAction:
        return AdjustmentAction.NONE

    @property
    def amount(self) -> float:
        return 0.0

    @property
    def amount_units(self) -> int:
        return 0


SupplyAdjustment = Union[Expand, Contract, Hold]


def min_contraction_units(supply_units: int, reserve_units: int, min_ratio: float) -> int:
    """
    Smallest burn that leaves ``reserve / (supply - x) >= min_ratio``.

    Rounded up to whole minor units; 0 when the ratio already holds.
    """
    ratio = exact_ratio(min_ratio)
    if ratio == 0 or supply_units == 0:
        return 0
    needed = Fraction(supply_units) - Fraction(reserve_units) / ratio
    return max(0, math.ceil(needed))


def calculate_supply_adjustment(
    average_price: float,
    config: StablecoinConfig,
    supply_units: int,
    reserve_units: int,
    decimals: int,
    timestamp: datetime
) -> SupplyAdjustment:
    """
    Decide whether to expand, contract or hold supply.

    Reads its inputs only; nothing is mutated.

    Args:
        average_price: Average price over the adjustment lookback
        config: Active policy parameters
        supply_units: Current total supply (minor units)
        reserve_units: Current reserve pool (minor units)
        decimals: Ledger decimal places
        timestamp: Evaluation time recorded on the result

    Returns:
        Expand, Contract or Hold
    """
    target = config.target_price
    exact_deviation = (exact_ratio(average_price) - exact_ratio(target)) / exact_ratio(target)
    supply = from_minor_units(supply_units, decimals)

    def hold(reason: str) -> Hold:
        return Hold(
            new_supply=supply,
            reason=reason,
            target_price=target,
            current_price=average_price,
            deviation=float(exact_deviation),
            timestamp=timestamp,
        )

    if abs(exact_deviation) <= exact_ratio(config.tolerance_band):
        return hold("Price within tolerance band")

    expanding = exact_deviation > 0

    # Damped proportional response, capped per adjustment
    raw_units = math.floor(
        supply_units * abs(exact_deviation) * exact_ratio(config.damping_factor)
    )
    cap_units = math.floor(supply_units * exact_ratio(config.max_supply_change))
    amount_units = min(raw_units, cap_units)

    if expanding:
        reason = f"Price {average_price:.4f} above target {target}, expanding supply"
    else:
        reason = f"Price {average_price:.4f} below target {target}, contracting supply"
        floor_units = min_contraction_units(supply_units, reserve_units, config.reserve_ratio)
        if floor_units > cap_units:
            return hold("Reserve ratio unattainable within max supply change")
        if amount_units < floor_units:
            amount_units = floor_units
            reason += " (limited by reserve ratio)"

    if amount_units == 0:
        return hold("Adjustment rounds to zero")

    amount = from_minor_units(amount_units, decimals)
    if expanding:
        return Expand(
            new_supply=from_minor_units(supply_units + amount_units, decimals),
            reason=reason,
            target_price=target,
            current_price=average_price,
            deviation=float(exact_deviation),
            timestamp=timestamp,
            amount=amount,
            amount_units=amount_units,
        )
    return Contract(
        new_supply=from_minor_units(supply_units - amount_units, decimals),
        reason=reason,
        target_price=target,
        current_price=average_price,
        deviation=float(exact_deviation),
        timestamp=timestamp,
        amount=amount,
        amount_units=amount_units,
    )
