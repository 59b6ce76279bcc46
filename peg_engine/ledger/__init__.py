"""Supply and reserve ledgers."""

from peg_engine.ledger.supply import SupplyLedger
from peg_engine.ledger.reserve import ReserveLedger, meets_reserve_ratio, reserve_ratio

__all__ = [
    "SupplyLedger",
    "ReserveLedger",
    "meets_reserve_ratio",
    "reserve_ratio",
]
