"""Algorithmic stablecoin monetary-policy engine."""

from peg_engine.config import DEFAULT_STABLECOIN_CONFIG, ConfigStore, Settings, StablecoinConfig, settings
from peg_engine.data import AdjustmentSink, InMemoryAdjustmentSink, PriceFeed, StaticPriceFeed
from peg_engine.errors import (
    ConfigValidationError,
    InvalidAmountError,
    InvalidInputError,
    InvalidPriceError,
    LedgerInvariantError,
    PegEngineError,
)
from peg_engine.ledger import ReserveLedger, SupplyLedger
from peg_engine.policy import (
    AdjustmentAction,
    Contract,
    Expand,
    Hold,
    RebalanceEvent,
    RebalanceScheduler,
    SupplyAdjustment,
    calculate_supply_adjustment,
)
from peg_engine.prices import PriceHistory, PricePoint, StabilityMetrics
from peg_engine.stablecoin import StablecoinEngine, SupplyState

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_STABLECOIN_CONFIG",
    "ConfigStore",
    "Settings",
    "StablecoinConfig",
    "settings",
    "AdjustmentSink",
    "InMemoryAdjustmentSink",
    "PriceFeed",
    "StaticPriceFeed",
    "ConfigValidationError",
    "InvalidAmountError",
    "InvalidInputError",
    "InvalidPriceError",
    "LedgerInvariantError",
    "PegEngineError",
    "ReserveLedger",
    "SupplyLedger",
    "AdjustmentAction",
    "Contract",
    "Expand",
    "Hold",
    "RebalanceEvent",
    "RebalanceScheduler",
    "SupplyAdjustment",
    "calculate_supply_adjustment",
    "PriceHistory",
    "PricePoint",
    "StabilityMetrics",
    "StablecoinEngine",
    "SupplyState",
]
