"""Price statistics: windowed average, volatility and stability score."""

from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from peg_engine.prices.history import PricePoint
from peg_engine.utils.math import calculate_returns, calculate_volatility


@dataclass(frozen=True)
class StabilityMetrics:
    """Derived, read-only view of how well the peg is holding."""

    target_price: float
    current_price: float
    average_price: float
    deviation: float  # |avg - target| / target
    volatility: float  # std of consecutive simple returns
    stability_score: float  # 0-100, higher is more stable
    sample_count: int

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "target_price": self.target_price,
            "current_price": self.current_price,
            "average_price": self.average_price,
            "deviation": self.deviation,
            "volatility": self.volatility,
            "stability_score": self.stability_score,
            "sample_count": self.sample_count,
        }


def average_price(points: Sequence[PricePoint], default: float) -> float:
    """Arithmetic mean of sample prices, ``default`` when there are none."""
    if not points:
        return default
    return float(np.mean([p.price for p in points]))


def price_volatility(points: Sequence[PricePoint]) -> float:
    """
    Population standard deviation of consecutive simple returns.

    Points are ordered by timestamp first (ties keep arrival order), so
    late-arriving samples do not create spurious returns. Fewer than two
    samples give 0.
    """
    ordered = sorted(points, key=lambda p: p.timestamp)
    returns = calculate_returns([p.price for p in ordered], log_returns=False)
    return calculate_volatility(returns, ddof=0)


def stability_score(
    deviation: float,
    volatility: float,
    deviation_weight: float = 10.0,
    volatility_weight: float = 10.0
) -> float:
    """
    Score the peg on a 0-100 scale.

    score = 100 * exp(-(w_d * deviation + w_v * volatility))

    Strictly decreasing in both inputs; 100 at a perfect, flat peg.
    """
    penalty = deviation_weight * abs(deviation) + volatility_weight * abs(volatility)
    score = 100.0 * float(np.exp(-penalty))
    return float(np.clip(score, 0.0, 100.0))


def compute_stability_metrics(
    points: Sequence[PricePoint],
    target_price: float,
    current_price: float,
    deviation_weight: float = 10.0,
    volatility_weight: float = 10.0
) -> StabilityMetrics:
    """
    Build :class:`StabilityMetrics` from the samples of one window.

    Args:
        points: Samples inside the statistics window
        target_price: Peg price
        current_price: Latest observed price (outside-window samples allowed)
        deviation_weight: Score weight for deviation
        volatility_weight: Score weight for volatility

    Returns:
        StabilityMetrics snapshot
    """
    avg = average_price(points, default=target_price)
    deviation = abs(avg - target_price) / target_price
    volatility = price_volatility(points)

    return StabilityMetrics(
        target_price=target_price,
        current_price=current_price,
        average_price=avg,
        deviation=deviation,
        volatility=volatility,
        stability_score=stability_score(deviation, volatility, deviation_weight, volatility_weight),
        sample_count=len(points),
    )
