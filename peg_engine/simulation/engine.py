"""Drive a StablecoinEngine through a simulated price path."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from peg_engine.config.settings import Settings
from peg_engine.config.stablecoin import StablecoinConfig
from peg_engine.data.interfaces import InMemoryAdjustmentSink
from peg_engine.policy.adjustment import AdjustmentAction
from peg_engine.policy.rebalance import RebalanceEvent
from peg_engine.simulation.paths import PricePath
from peg_engine.stablecoin.engine import StablecoinEngine, SupplyState
from peg_engine.utils.math import Number
from peg_engine.utils.time import ManualClock

ACTION_CODES = {
    AdjustmentAction.CONTRACT: -1,
    AdjustmentAction.NONE: 0,
    AdjustmentAction.EXPAND: 1,
}


@dataclass
class SimulationResult:
    """Per-step trace of one simulation run."""

    timestamps: List[datetime]
    prices: np.ndarray
    average_prices: np.ndarray
    supply: np.ndarray
    reserve_ratios: np.ndarray
    stability_scores: np.ndarray
    actions: np.ndarray  # -1 contract, 0 none/skipped, 1 expand
    initial_supply: float
    target_price: float
    events: List[RebalanceEvent] = field(default_factory=list)
    final_state: Optional[SupplyState] = None

    def __len__(self) -> int:
        return len(self.timestamps)

    def summary(self) -> Dict[str, Any]:
        """Aggregate statistics of the run."""
        if len(self) == 0:
            return {"n_steps": 0}

        initial_supply = self.initial_supply
        final_supply = float(self.supply[-1])

        return {
            "n_steps": len(self),
            "n_expansions": int(np.sum(self.actions == 1)),
            "n_contractions": int(np.sum(self.actions == -1)),
            "initial_supply": initial_supply,
            "final_supply": final_supply,
            "supply_change_pct": (final_supply - initial_supply) / initial_supply * 100 if initial_supply > 0 else 0.0,
            "min_reserve_ratio": float(np.min(self.reserve_ratios)),
            "mean_stability_score": float(np.mean(self.stability_scores)),
            "max_price": float(np.max(self.prices)),
            "min_price": float(np.min(self.prices)),
            "target_price": self.target_price,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Trace as a DataFrame indexed by timestamp."""
        return pd.DataFrame(
            {
                "price": self.prices,
                "average_price": self.average_prices,
                "supply": self.supply,
                "reserve_ratio": self.reserve_ratios,
                "stability_score": self.stability_scores,
                "action": self.actions,
            },
            index=pd.DatetimeIndex(self.timestamps, name="timestamp"),
        )


class PegSimulation:
    """
    Replays a price path through a fresh engine.

    Each step records the observation, advances a manual clock to its
    timestamp and calls ``rebalance()``, so the rate limit and the lookback
    windows behave exactly as they would live.
    """

    def __init__(
        self,
        config: Optional[Union[StablecoinConfig, Mapping[str, Any]]] = None,
        initial_supply: Number = 1_000_000,
        initial_reserve: Number = 200_000,
        start: Optional[datetime] = None,
        step: timedelta = timedelta(seconds=30),
        engine_settings: Optional[Settings] = None
    ):
        """
        Initialize simulation.

        Args:
            config: Policy parameters for the engine
            initial_supply: Starting supply
            initial_reserve: Starting reserve pool
            start: Timestamp of the first observation
            step: Time between observations
            engine_settings: Runtime settings passed to the engine
        """
        if step <= timedelta(0):
            raise ValueError("step must be positive")
        self.config = config
        self.initial_supply = initial_supply
        self.initial_reserve = initial_reserve
        self.start = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.step = step
        self.engine_settings = engine_settings

    def run(self, path: PricePath) -> SimulationResult:
        """
        Run the engine over ``path``.

        Args:
            path: Simulated prices, volumes and confidences

        Returns:
            SimulationResult
        """
        clock = ManualClock(self.start)
        sink = InMemoryAdjustmentSink()
        engine = StablecoinEngine(
            self.config,
            self.initial_supply,
            self.initial_reserve,
            clock=clock,
            sinks=[sink],
            engine_settings=self.engine_settings,
        )
        initial_state = engine.get_state()

        n = len(path)
        timestamps: List[datetime] = []
        average_prices = np.empty(n)
        supply = np.empty(n)
        reserve_ratios = np.empty(n)
        stability_scores = np.empty(n)
        actions = np.zeros(n, dtype=int)

        for i, point in enumerate(path.to_price_points(self.start, self.step)):
            clock.set(point.timestamp)
            engine.add_price_data(point)
            event = engine.rebalance()

            if event is not None and event.executed:
                actions[i] = ACTION_CODES[event.action]

            state = engine.get_state()
            timestamps.append(point.timestamp)
            average_prices[i] = engine.get_average_price()
            supply[i] = state.total_supply
            reserve_ratios[i] = state.reserve_ratio
            stability_scores[i] = engine.get_stability_metrics().stability_score

        return SimulationResult(
            timestamps=timestamps,
            prices=np.asarray(path.prices, dtype=float),
            average_prices=average_prices,
            supply=supply,
            reserve_ratios=reserve_ratios,
            stability_scores=stability_scores,
            actions=actions,
            initial_supply=float(initial_state.total_supply),
            target_price=engine.get_config().target_price,
            events=sink.ordered(),
            final_state=engine.get_state(),
        )
