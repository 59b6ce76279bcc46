"""Stablecoin monetary-policy engine.

Owns the supply and reserve ledgers, the price history, the policy
configuration and the rebalance timer of one token. All mutating calls are
serialized by an instance lock; reads of more than one field happen under
the same lock so they never observe a half-applied update.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from peg_engine.config.settings import Settings, settings as default_settings
from peg_engine.config.stablecoin import ConfigStore, StablecoinConfig
from peg_engine.data.interfaces import AdjustmentSink, PriceFeed
from peg_engine.errors import ConfigValidationError
from peg_engine.ledger.reserve import ReserveLedger, reserve_ratio
from peg_engine.ledger.supply import SupplyLedger
from peg_engine.policy.adjustment import SupplyAdjustment
from peg_engine.policy.rebalance import RebalanceEvent, RebalanceScheduler
from peg_engine.prices.history import PriceHistory, PricePoint
from peg_engine.prices.statistics import (
    StabilityMetrics,
    average_price,
    compute_stability_metrics,
)
from peg_engine.utils.math import Number
from peg_engine.utils.time import Clock, as_timedelta, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupplyState:
    """Snapshot of the ledgers and the rebalance timer."""

    total_supply: float
    reserve_pool: float
    reserve_ratio: float  # current reserve / supply (0 when supply is 0)
    min_reserve_ratio: float  # configured minimum
    last_rebalance_at: Optional[datetime]
    next_rebalance_at: Optional[datetime]
    next_sequence: int

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "total_supply": self.total_supply,
            "reserve_pool": self.reserve_pool,
            "reserve_ratio": self.reserve_ratio,
            "min_reserve_ratio": self.min_reserve_ratio,
            "last_rebalance_at": self.last_rebalance_at,
            "next_rebalance_at": self.next_rebalance_at,
            "next_sequence": self.next_sequence,
        }


class StablecoinEngine:
    """
    Algorithmic stablecoin controller.

    Observes prices, decides whether to expand or contract supply, and
    keeps the reserve ratio and rebalance rate limit intact while doing so.
    Everything is synchronous and deterministic given the clock and inputs.
    """

    def __init__(
        self,
        config: Optional[Union[StablecoinConfig, Mapping[str, Any]]] = None,
        initial_supply: Number = 0,
        initial_reserve: Number = 0,
        clock: Optional[Clock] = None,
        sinks: Optional[Iterable[AdjustmentSink]] = None,
        last_rebalance_at: Optional[datetime] = None,
        next_rebalance_at: Optional[datetime] = None,
        next_sequence: int = 1,
        engine_settings: Optional[Settings] = None
    ):
        """
        Initialize engine.

        Args:
            config: Policy parameters (model or mapping); defaults if omitted
            initial_supply: Starting circulating supply (major units)
            initial_reserve: Starting reserve pool (major units)
            clock: Callable returning the current time (UTC now by default)
            sinks: Consumers of executed adjustments
            last_rebalance_at: Restore the last executed adjustment time
            next_rebalance_at: Restore the next eligible time; derived from
                ``last_rebalance_at`` when omitted
            next_sequence: Restore the adjustment sequence counter
            engine_settings: Runtime settings (module settings by default)
        """
        self.settings = engine_settings or default_settings
        self.clock = clock or utc_now
        self.config_store = ConfigStore(self._coerce_config(config))

        decimals = self.settings.ledger_decimals
        self.supply = SupplyLedger(initial_supply, decimals)
        self.reserve = ReserveLedger(initial_reserve, decimals)
        self.prices = PriceHistory(self.settings.max_price_history)

        if next_rebalance_at is None and last_rebalance_at is not None:
            next_rebalance_at = last_rebalance_at + self.config_store.get_config().rebalance_interval
        self.scheduler = RebalanceScheduler(
            self.supply,
            self.reserve,
            history_size=self.settings.max_supply_history,
            last_rebalance_at=last_rebalance_at,
            next_rebalance_at=next_rebalance_at,
            next_sequence=next_sequence,
        )

        self.adjustment_window = timedelta(seconds=self.settings.adjustment_window_seconds)
        self.stats_window = timedelta(hours=self.settings.stats_window_hours)
        self.sinks: List[AdjustmentSink] = list(sinks or [])
        self._lock = threading.RLock()

    @staticmethod
    def _coerce_config(config) -> StablecoinConfig:
        if config is None or isinstance(config, StablecoinConfig):
            return config
        try:
            return StablecoinConfig.model_validate(dict(config))
        except ValidationError as exc:
            raise ConfigValidationError(f"Invalid configuration: {exc}") from exc

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    def add_price_data(self, point: PricePoint) -> None:
        """Append a validated price sample."""
        self.prices.add(point)

    def record_price(
        self,
        price: float,
        volume: float = 0.0,
        confidence: float = 1.0,
        timestamp: Optional[datetime] = None
    ) -> PricePoint:
        """Build a sample stamped with the engine clock and append it."""
        point = PricePoint(
            price=price,
            timestamp=timestamp or self.clock(),
            volume=volume,
            confidence=confidence,
        )
        self.add_price_data(point)
        return point

    def ingest(self, feed: PriceFeed) -> Optional[PricePoint]:
        """Pull the newest sample from a feed, if it has one."""
        point = feed.latest()
        if point is not None:
            self.add_price_data(point)
        return point

    def get_current_price(self) -> float:
        """Latest sample's price, or the target price when there is none."""
        latest = self.prices.latest()
        if latest is None:
            return self.get_config().target_price
        return latest.price

    def get_average_price(self, window: Optional[Union[timedelta, float]] = None) -> float:
        """
        Arithmetic mean price over ``[now - window, now]``.

        Args:
            window: timedelta or seconds; the adjustment lookback by default

        Returns:
            Mean price, or the target price if the window is empty
        """
        span = self.adjustment_window if window is None else as_timedelta(window)
        points = self.prices.window(self.clock(), span)
        return average_price(points, default=self.get_config().target_price)

    def get_price_history(self, limit: int = 100) -> List[PricePoint]:
        """Most recent samples, oldest first."""
        return self.prices.recent(limit)

    def get_stability_metrics(self) -> StabilityMetrics:
        """Deviation, volatility and stability score over the statistics window."""
        config = self.get_config()
        points = self.prices.window(self.clock(), self.stats_window)
        return compute_stability_metrics(
            points,
            target_price=config.target_price,
            current_price=self.get_current_price(),
            deviation_weight=self.settings.deviation_weight,
            volatility_weight=self.settings.volatility_weight,
        )

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    def calculate_supply_adjustment(self) -> SupplyAdjustment:
        """Evaluate the policy now without changing any state."""
        with self._lock:
            now = self.clock()
            return self.scheduler.propose(
                self.get_average_price(),
                self.config_store.get_config(),
                now,
            )

    def rebalance(self) -> Optional[RebalanceEvent]:
        """
        Run one control-loop step.

        Returns:
            None if the rebalance interval has not elapsed (no state change);
            otherwise the RebalanceEvent. Executed events carry a sequence
            number and are forwarded to every sink.
        """
        with self._lock:
            event = self.scheduler.rebalance(
                self.get_average_price(),
                self.config_store.get_config(),
                self.clock(),
            )

        if event is not None and event.executed:
            self._publish(event)
        return event

    def _publish(self, event: RebalanceEvent) -> None:
        for sink in self.sinks:
            try:
                sink.publish(event)
            except Exception:
                # Ledger already updated; the sink can replay from get_supply_history()
                logger.exception(
                    "Sink %s failed to receive adjustment #%d",
                    type(sink).__name__,
                    event.sequence,
                )

    def add_sink(self, sink: AdjustmentSink) -> None:
        """Register a consumer of executed adjustments."""
        with self._lock:
            self.sinks.append(sink)

    def get_supply_history(self, limit: int = 10) -> List[RebalanceEvent]:
        """Most recent executed adjustments, oldest first."""
        with self._lock:
            return self.scheduler.get_history(limit)

    def get_rebalance_summary(self) -> Dict:
        """Counts and totals of executed adjustments in memory."""
        with self._lock:
            return self.scheduler.get_rebalance_summary()

    # ------------------------------------------------------------------
    # Ledgers
    # ------------------------------------------------------------------

    def mint(self, amount: Number) -> None:
        """Increase supply by a non-negative amount."""
        with self._lock:
            self.supply.mint(amount)
            logger.info("Minted %s; supply now %.6f", amount, self.supply.total_supply)

    def burn(self, amount: Number) -> bool:
        """Decrease supply; False and no change if amount exceeds supply."""
        with self._lock:
            burned = self.supply.burn(amount)
            if burned:
                logger.info("Burned %s; supply now %.6f", amount, self.supply.total_supply)
            return burned

    def add_reserves(self, amount: Number) -> None:
        """Add a non-negative amount to the reserve pool."""
        with self._lock:
            self.reserve.add_reserves(amount)
            logger.info("Added %s to reserves; pool now %.6f", amount, self.reserve.reserve_pool)

    def remove_reserves(self, amount: Number) -> bool:
        """Withdraw reserves; False and no change if the ratio would break."""
        with self._lock:
            return self.reserve.remove_reserves(
                amount,
                self.supply.units,
                self.config_store.get_config().reserve_ratio,
            )

    @property
    def total_supply(self) -> float:
        return self.supply.total_supply

    @property
    def reserve_pool(self) -> float:
        return self.reserve.reserve_pool

    @property
    def reserve_ratio(self) -> float:
        """Current reserve / supply."""
        with self._lock:
            return reserve_ratio(self.reserve.units, self.supply.units)

    def get_state(self) -> SupplyState:
        """Consistent snapshot of ledgers and timer."""
        with self._lock:
            return SupplyState(
                total_supply=self.supply.total_supply,
                reserve_pool=self.reserve.reserve_pool,
                reserve_ratio=reserve_ratio(self.reserve.units, self.supply.units),
                min_reserve_ratio=self.config_store.get_config().reserve_ratio,
                last_rebalance_at=self.scheduler.last_rebalance_at,
                next_rebalance_at=self.scheduler.next_rebalance_at,
                next_sequence=self.scheduler.next_sequence,
            )

    def get_supply_info(self) -> Dict[str, float]:
        """Supply, reserve pool and current reserve ratio."""
        state = self.get_state()
        return {
            "total_supply": state.total_supply,
            "reserve_pool": state.reserve_pool,
            "reserve_ratio": state.reserve_ratio,
        }

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def get_config(self) -> StablecoinConfig:
        """Immutable snapshot of the policy parameters."""
        with self._lock:
            return self.config_store.get_config()

    def update_config(
        self,
        changes: Optional[Mapping[str, Any]] = None,
        **fields: Any
    ) -> StablecoinConfig:
        """
        Merge and validate a partial configuration update.

        New values apply to later computations only; the stored next
        eligible rebalance time is not recomputed.

        Raises:
            ConfigValidationError: If any field is invalid (nothing changes)
        """
        with self._lock:
            return self.config_store.update_config(changes, **fields)

    def get_snapshot(self) -> Dict[str, Any]:
        """Full state for debugging or persistence by a collaborator."""
        with self._lock:
            return {
                "config": self.config_store.get_config().to_dict(),
                "state": self.get_state().to_dict(),
                "current_price": self.get_current_price(),
                "stability_metrics": self.get_stability_metrics().to_dict(),
            }
