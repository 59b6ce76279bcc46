"""Rebalance gating and execution."""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

from peg_engine.config.stablecoin import StablecoinConfig
from peg_engine.errors import LedgerInvariantError
from peg_engine.ledger.reserve import ReserveLedger
from peg_engine.ledger.supply import SupplyLedger
from peg_engine.policy.adjustment import (
    AdjustmentAction,
    Contract,
    Expand,
    SupplyAdjustment,
    calculate_supply_adjustment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RebalanceEvent:
    """Record of one rebalance evaluation."""

    timestamp: datetime
    adjustment: SupplyAdjustment
    supply_before: float
    supply_after: float
    reserve_pool: float
    sequence: Optional[int] = None  # set only when supply actually changed

    @property
    def executed(self) -> bool:
        return self.sequence is not None

    @property
    def action(self) -> AdjustmentAction:
        return self.adjustment.action

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "sequence": self.sequence,
            "timestamp": self.timestamp,
            "supply_before": self.supply_before,
            "supply_after": self.supply_after,
            "reserve_pool": self.reserve_pool,
            **{f"adjustment_{k}": v for k, v in self.adjustment.to_dict().items()},
        }


class RebalanceScheduler:
    """
    Gates how often supply may be adjusted and applies the adjustments.

    The next eligible time is stored explicitly. Only executed (expand or
    contract) adjustments move it forward; a hold leaves the gate open so
    the engine reacts as soon as the price leaves the tolerance band.
    """

    def __init__(
        self,
        supply: SupplyLedger,
        reserve: ReserveLedger,
        history_size: int = 50,
        last_rebalance_at: Optional[datetime] = None,
        next_rebalance_at: Optional[datetime] = None,
        next_sequence: int = 1
    ):
        """
        Initialize rebalance scheduler.

        Args:
            supply: Supply ledger to mint into / burn from
            reserve: Reserve ledger read by the calculator
            history_size: Executed events kept in memory
            last_rebalance_at: Time of the last executed adjustment (resume)
            next_rebalance_at: Earliest time of the next adjustment (resume)
            next_sequence: Sequence number for the next executed adjustment
        """
        self.supply = supply
        self.reserve = reserve
        self.last_rebalance_at = last_rebalance_at
        self.next_rebalance_at = next_rebalance_at
        self.next_sequence = next_sequence
        self.rebalance_history: deque = deque(maxlen=history_size)

    def is_due(self, now: datetime) -> bool:
        """True when the rate limit allows an adjustment at ``now``."""
        return self.next_rebalance_at is None or now >= self.next_rebalance_at

    def propose(
        self,
        average_price: float,
        config: StablecoinConfig,
        now: datetime
    ) -> SupplyAdjustment:
        """Evaluate the policy against the current ledgers without applying it."""
        return calculate_supply_adjustment(
            average_price=average_price,
            config=config,
            supply_units=self.supply.units,
            reserve_units=self.reserve.units,
            decimals=self.supply.decimals,
            timestamp=now,
        )

    def rebalance(
        self,
        average_price: float,
        config: StablecoinConfig,
        now: datetime
    ) -> Optional[RebalanceEvent]:
        """
        Run one control-loop step.

        Args:
            average_price: Average price over the adjustment lookback
            config: Active policy parameters
            now: Current time

        Returns:
            None if called before the next eligible time; otherwise a
            RebalanceEvent (unsequenced for a hold)
        """
        if not self.is_due(now):
            logger.debug("Rebalance skipped: next eligible at %s", self.next_rebalance_at)
            return None

        supply_before = self.supply.total_supply
        adjustment = self.propose(average_price, config, now)

        if isinstance(adjustment, Expand):
            self.supply.mint_units(adjustment.amount_units)
        elif isinstance(adjustment, Contract):
            if not self.supply.burn_units(adjustment.amount_units):
                raise LedgerInvariantError(
                    f"Contraction of {adjustment.amount} exceeds supply {supply_before}"
                )
        else:
            return RebalanceEvent(
                timestamp=now,
                adjustment=adjustment,
                supply_before=supply_before,
                supply_after=supply_before,
                reserve_pool=self.reserve.reserve_pool,
            )

        event = RebalanceEvent(
            timestamp=now,
            adjustment=adjustment,
            supply_before=supply_before,
            supply_after=self.supply.total_supply,
            reserve_pool=self.reserve.reserve_pool,
            sequence=self.next_sequence,
        )
        self.next_sequence += 1
        self.last_rebalance_at = now
        self.next_rebalance_at = now + config.rebalance_interval
        self.rebalance_history.append(event)

        logger.info(
            "Rebalance #%d: %s %.6f (%s); supply %.6f -> %.6f",
            event.sequence,
            adjustment.action.value,
            adjustment.amount,
            adjustment.reason,
            event.supply_before,
            event.supply_after,
        )
        return event

    def get_history(self, limit: int = 10) -> List[RebalanceEvent]:
        """Most recent executed events, oldest first."""
        if limit <= 0:
            return []
        return list(self.rebalance_history)[-limit:]

    def get_rebalance_summary(self) -> Dict:
        """Get summary statistics of executed adjustments still in memory."""
        if not self.rebalance_history:
            return {
                "total_rebalances": 0,
                "total_expanded": 0.0,
                "total_contracted": 0.0,
                "last_sequence": None,
            }

        events = list(self.rebalance_history)
        return {
            "total_rebalances": len(events),
            "total_expanded": sum(e.adjustment.amount for e in events if e.action == AdjustmentAction.EXPAND),
            "total_contracted": sum(e.adjustment.amount for e in events if e.action == AdjustmentAction.CONTRACT),
            "last_sequence": events[-1].sequence,
            "actions": {
                action.value: sum(1 for e in events if e.action == action)
                for action in (AdjustmentAction.EXPAND, AdjustmentAction.CONTRACT)
            },
        }
