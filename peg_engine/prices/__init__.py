"""Price history and statistics."""

from peg_engine.prices.history import PricePoint, PriceHistory
from peg_engine.prices.statistics import (
    StabilityMetrics,
    average_price,
    compute_stability_metrics,
    price_volatility,
    stability_score,
)

__all__ = [
    "PricePoint",
    "PriceHistory",
    "StabilityMetrics",
    "average_price",
    "compute_stability_metrics",
    "price_volatility",
    "stability_score",
]
