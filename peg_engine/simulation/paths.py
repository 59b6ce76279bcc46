"""Synthetic price paths for exercising the peg controller."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from peg_engine.prices.history import PricePoint

MIN_PRICE = 0.01


@dataclass
class PricePath:
    """A simulated market for the pegged token."""

    prices: np.ndarray
    volumes: np.ndarray
    confidences: np.ndarray

    def __len__(self) -> int:
        """Number of time steps."""
        return len(self.prices)

    def to_price_points(self, start: datetime, step: timedelta) -> List[PricePoint]:
        """Stamp each observation ``step`` apart starting at ``start``."""
        return [
            PricePoint(
                price=float(self.prices[i]),
                timestamp=start + step * i,
                volume=float(self.volumes[i]),
                confidence=float(self.confidences[i]),
            )
            for i in range(len(self))
        ]


class PegPathGenerator:
    """
    Mean-reverting price generator around a peg.

    Price follows a discrete Ornstein-Uhlenbeck process in price space:
    dp = kappa * (target - p) + sigma * dW, plus optional Poisson jumps
    that model market shocks. Volumes and confidence scores follow the
    heuristics of a simple oracle: both react to distance from the peg and
    to recent volatility.
    """

    def __init__(self, target_price: float = 1.0, seed: Optional[int] = None):
        """
        Initialize path generator.

        Args:
            target_price: Peg price the process reverts to
            seed: Random seed for reproducibility
        """
        if target_price <= 0:
            raise ValueError("target_price must be positive")
        self.target_price = target_price
        self.rng = np.random.default_rng(seed)

    def generate(
        self,
        n_steps: int,
        initial_price: Optional[float] = None,
        mean_reversion: float = 0.02,
        volatility: float = 0.002,
        jump_intensity: float = 0.0,
        jump_mean: float = -0.05,
        jump_std: float = 0.02,
        base_volume: float = 10_000.0
    ) -> PricePath:
        """
        Generate one path.

        Args:
            n_steps: Number of observations
            initial_price: Starting price (the target by default)
            mean_reversion: Per-step pull towards the target (kappa)
            volatility: Per-step noise as a fraction of the target (sigma)
            jump_intensity: Expected number of shocks per step
            jump_mean: Mean relative jump size
            jump_std: Jump size std dev
            base_volume: Volume at the peg

        Returns:
            PricePath
        """
        if n_steps <= 0:
            raise ValueError("n_steps must be positive")

        target = self.target_price
        prices = np.empty(n_steps)
        prices[0] = target if initial_price is None else initial_price

        shocks = self.rng.standard_normal(n_steps)
        jumps = np.zeros(n_steps)
        if jump_intensity > 0:
            n_jumps = self.rng.poisson(jump_intensity, size=n_steps)
            jumps = np.where(
                n_jumps > 0,
                self.rng.normal(jump_mean, jump_std, size=n_steps) * n_jumps,
                0.0,
            )

        for t in range(1, n_steps):
            drift = mean_reversion * (target - prices[t - 1])
            diffusion = volatility * target * shocks[t]
            jump = jumps[t] * prices[t - 1]
            prices[t] = max(MIN_PRICE, prices[t - 1] + drift + diffusion + jump)

        volumes = self._volumes(prices, base_volume)
        confidences = self._confidences(prices)
        return PricePath(prices=prices, volumes=volumes, confidences=confidences)

    def _volumes(self, prices: np.ndarray, base_volume: float) -> np.ndarray:
        # Trading picks up when the price leaves the peg
        distance = np.abs(prices - self.target_price) / self.target_price
        noise = 0.5 + self.rng.random(len(prices))
        return base_volume * (distance * 5 + 1) * noise

    def _confidences(self, prices: np.ndarray, lookback: int = 10) -> np.ndarray:
        distance = np.abs(prices - self.target_price) / self.target_price
        confidence = np.maximum(0.3, 1 - distance * 2)

        for t in range(lookback, len(prices)):
            recent = prices[t - lookback:t]
            dispersion = np.std(recent) / np.mean(recent)
            confidence[t] *= max(0.5, 1 - dispersion * 10)

        return np.clip(confidence, 0.1, 1.0)
